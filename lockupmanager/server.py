"""HTTP front end that validates lock-toggle requests and relays them upstream."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import threading
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Protocol
from urllib.parse import urlsplit

from lockupmanager.forwarder import (
    DEFAULT_TIMEOUT,
    DEFAULT_URL,
    ForwardError,
    LockupForwarder,
    PasskeyError,
)

ROUTE = "/LogProcess"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5023
DEFAULT_PASSKEY = "secret"

_CONNECT_FAILURE = 0
_BAD_PASSKEY = 2

_log = logging.getLogger(__name__)


class _Forwarder(Protocol):
    def forward(self, usernames: list[str]) -> int: ...


@dataclass(frozen=True)
class Reply:
    """A JSON reply: HTTP status, status word, message and a console note."""

    http_status: int
    status: str
    message: str
    note: str = field(default="", compare=False)

    @property
    def body(self) -> dict[str, str]:
        return {"status": self.status, "message": self.message}

    def to_json(self) -> bytes:
        return json.dumps(self.body).encode("utf-8")


BAD_JSON = Reply(
    400,
    "error",
    "Your request had data that isn't JSON. Please format it accordingly.",
    "Sent bad JSON! Refer to readme to structure JSON requests accordingly",
)
INTERNAL_ERROR = Reply(
    500,
    "error",
    "Rare Error- something is wrong with the main code",
    "Internal error",
)
_UNKNOWN = Reply(
    500,
    "error",
    "No criteria met, refer to code to structure your errors",
    "No error codes found, please see README to structure your Server accordingly",
)
_REPLIES = {
    _CONNECT_FAILURE: Reply(500, "error", "Failure to connect.", "Failure to connect"),
    _BAD_PASSKEY: Reply(
        401, "error", "User passkey for this progam wasn't correct", "Bad Passkey!"
    ),
    200: Reply(
        200,
        "success",
        "Server says we toggled lock for any accounts that exist under these names",
        "Success",
    ),
    400: Reply(400, "error", "User doesen't exist", "Account Doesen't Exist"),
    401: Reply(401, "error", "User isn't a admin", "Account isn't a admin"),
    403: Reply(401, "error", "Acceptable admin user, but bad password.", "Bad password!"),
    423: Reply(500, "error", "User account is locked", "User account is locked."),
}


def _report(result: str) -> None:
    print(f"\nClient Request Result: {result}")


def reply_for_status(code: int) -> Reply:
    """Map an outcome code (upstream HTTP status, or 0/2 internally) to a reply."""
    return _REPLIES.get(code, _UNKNOWN)


def handle_request(body: bytes | str, forwarder: _Forwarder) -> Reply:
    """Parse a request body, forward it and return the reply to send back."""
    try:
        data: Any = json.loads(body)
    except ValueError:
        _report(BAD_JSON.note)
        return BAD_JSON

    if isinstance(data, dict):
        entries = list(data.values())
    elif isinstance(data, list):
        entries = data
    else:
        _report(BAD_JSON.note)
        return BAD_JSON

    if not all(isinstance(entry, str) for entry in entries):
        _report(INTERNAL_ERROR.note)
        return INTERNAL_ERROR

    try:
        code = forwarder.forward(entries)
    except PasskeyError:
        code = _BAD_PASSKEY
    except ForwardError as exc:
        print(f"Failed to connect to server with error: {exc}", file=sys.stderr)
        code = _CONNECT_FAILURE
    except Exception:
        _report(INTERNAL_ERROR.note)
        return INTERNAL_ERROR

    reply = reply_for_status(code)
    _report(reply.note)
    return reply


class _HTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address, handler, forwarder: _Forwarder) -> None:
        super().__init__(address, handler)
        self.forwarder = forwarder


class _Handler(BaseHTTPRequestHandler):
    server: _HTTPServer

    def _send(self, status: int, payload: bytes) -> None:
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def _route(self) -> str:
        return urlsplit(self.path).path

    def _reject(self) -> None:
        if self._route() == ROUTE:
            self._send(405, b"")
        else:
            self._send(404, b"")

    def do_POST(self) -> None:
        if self._route() != ROUTE:
            self._send(404, b"")
            return
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length)
        reply = handle_request(body, self.server.forwarder)
        self._send(reply.http_status, reply.to_json())

    do_GET = _reject
    do_PUT = _reject
    do_DELETE = _reject
    do_PATCH = _reject

    def log_message(self, format: str, *args: Any) -> None:
        """Send access log lines to the module logger instead of stderr."""
        _log.debug("%s - %s", self.address_string(), format % args)


class LockupServer:
    """Threaded HTTP server answering POST requests on ``/LogProcess``."""

    def __init__(
        self,
        forwarder: _Forwarder,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
    ) -> None:
        self._httpd = _HTTPServer((host, port), _Handler, forwarder)
        self._serving = threading.Event()

    @property
    def address(self) -> tuple[str, int]:
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    def serve_forever(self) -> None:
        """Handle requests until ``shutdown`` is called."""
        self._serving.set()
        try:
            self._httpd.serve_forever()
        finally:
            self._serving.clear()

    def shutdown(self) -> None:
        """Stop serving and release the listening socket."""
        if self._serving.is_set():
            self._httpd.shutdown()
        self._httpd.server_close()

    def __enter__(self) -> LockupServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="lockupmanager",
        description="Relay account lock-toggle requests to an upstream server.",
    )
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument(
        "--passkey", default=os.environ.get("LOCKUP_PASSKEY", DEFAULT_PASSKEY)
    )
    parser.add_argument("--url", default=DEFAULT_URL, help="upstream lockup endpoint")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT)
    args = parser.parse_args(argv)

    print("\n\n ----Starting Program---- \n\n")
    forwarder = LockupForwarder(args.passkey, args.url, args.timeout)
    server = LockupServer(forwarder, args.host, args.port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.shutdown()
    print("\nCtrl-C pressed, ending program.")
    return 0


if __name__ == "__main__":
    sys.exit(main())