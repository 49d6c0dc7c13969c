"""Small command-line client that posts a request to the lockup server."""

from __future__ import annotations

import argparse
import json
import sys
import urllib.error
import urllib.request
from collections.abc import Iterable

DEFAULT_URL = "http://localhost:5023/LogProcess"
DEFAULT_ENTRIES = ("secret", "admin", "password", "alice", "bob")
DEFAULT_TIMEOUT = 10.0


def send_request(
    url: str = DEFAULT_URL,
    entries: Iterable[str] = DEFAULT_ENTRIES,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """POST the entries as a JSON array and return the response body.

    Error statuses still return their body; an unreachable server raises
    ``urllib.error.URLError`` (or another ``OSError``).
    """
    payload = json.dumps(list(entries)).encode("utf-8")
    request = urllib.request.Request(
        url,
        data=payload,
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            return response.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as err:
        try:
            return err.read().decode("utf-8", errors="replace")
        finally:
            err.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="lockupmanager-client",
        description="Send a lock-toggle request: passkey, admin user, admin password, accounts...",
    )
    parser.add_argument("--url", default=DEFAULT_URL)
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT)
    parser.add_argument("entries", nargs="*")
    args = parser.parse_args(argv)

    print("Starting test program.")
    print("The first two entries after the passkey must be an admin username and password.")
    entries = args.entries or list(DEFAULT_ENTRIES)
    try:
        response = send_request(args.url, entries, args.timeout)
    except OSError as exc:
        print(f"\nOur request failed: {exc}", file=sys.stderr)
        print("We got no response- ensure the server is set up....")
    else:
        print(f"\n We got: {response}")
    return 0


if __name__ == "__main__":
    sys.exit(main())