"""Forwarding of lock-toggle requests to the upstream account server."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from collections.abc import Iterable

DEFAULT_URL = "http://localhost:5012/api/lockup"
DEFAULT_TIMEOUT = 10.0


class PasskeyError(Exception):
    """The first entry of a request did not match this program's passkey."""


class ForwardError(Exception):
    """The upstream account server could not be reached."""


def build_payload(usernames: Iterable[str]) -> str:
    """Return the JSON array sent upstream, e.g. ``["a", "b"]``."""
    return json.dumps(list(usernames))


class LockupForwarder:
    """Checks the passkey and posts the remaining entries to the upstream server."""

    def __init__(
        self,
        passkey: str,
        url: str = DEFAULT_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.passkey = passkey
        self.url = url
        self.timeout = timeout

    def forward(self, usernames: Iterable[str]) -> int:
        """Send the entries after the passkey upstream and return its HTTP status.

        The first entry must equal the passkey, otherwise ``PasskeyError`` is
        raised. ``ForwardError`` is raised when the server cannot be reached.
        """
        names = list(usernames)
        if not names or names[0] != self.passkey:
            raise PasskeyError("passkey for this program was not correct")

        payload = build_payload(names[1:]).encode("utf-8")
        request = urllib.request.Request(
            self.url,
            data=payload,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                response.read()
                return response.status
        except urllib.error.HTTPError as err:
            try:
                err.read()
            finally:
                err.close()
            return err.code
        except urllib.error.URLError as err:
            raise ForwardError(f"failed to connect to server: {err.reason}") from err
        except OSError as err:
            raise ForwardError(f"failed to connect to server: {err}") from err