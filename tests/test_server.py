import json
import threading
import urllib.error
import urllib.request
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from lockupmanager.forwarder import ForwardError, LockupForwarder, PasskeyError
from lockupmanager.server import (
    LockupServer,
    Reply,
    handle_request,
    main,
    reply_for_status,
)


class _StubForwarder:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    def forward(self, usernames):
        self.calls.append(list(usernames))
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


class _Upstream(BaseHTTPRequestHandler):
    def do_POST(self):
        length = int(self.headers.get("Content-Length") or 0)
        self.server.received.append(json.loads(self.rfile.read(length)))
        self.send_response(self.server.reply_status)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, format, *args):
        pass


@pytest.fixture
def upstream():
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Upstream)
    httpd.received = []
    httpd.reply_status = 200
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield httpd
    httpd.shutdown()
    httpd.server_close()
    thread.join()


@pytest.fixture
def running(upstream):
    url = f"http://127.0.0.1:{upstream.server_address[1]}/api/lockup"
    server = LockupServer(LockupForwarder("secret", url, 5), "127.0.0.1", 0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server, upstream
    server.shutdown()
    thread.join()


def _post(server, path, payload):
    host, port = server.address
    request = urllib.request.Request(
        f"http://{host}:{port}{path}",
        data=payload,
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    try:
        with urllib.request.urlopen(request, timeout=5) as response:
            return response.status, json.loads(response.read())
    except urllib.error.HTTPError as err:
        with err:
            return err.code, json.loads(err.read())


@pytest.mark.parametrize(
    "code, http_status, status, message",
    [
        (0, 500, "error", "Failure to connect."),
        (2, 401, "error", "User passkey for this progam wasn't correct"),
        (200, 200, "success",
         "Server says we toggled lock for any accounts that exist under these names"),
        (400, 400, "error", "User doesen't exist"),
        (401, 401, "error", "User isn't a admin"),
        (403, 401, "error", "Acceptable admin user, but bad password."),
        (423, 500, "error", "User account is locked"),
    ],
)
def test_reply_for_status(code, http_status, status, message):
    reply = reply_for_status(code)
    assert (reply.http_status, reply.status, reply.message) == (http_status, status, message)


def test_unknown_status_gets_default_reply():
    reply = reply_for_status(999)
    assert reply.http_status == 500
    assert reply.message == "No criteria met, refer to code to structure your errors"


def test_reply_json_round_trip():
    reply = Reply(200, "success", "done")
    assert json.loads(reply.to_json()) == {"status": "success", "message": "done"}


def test_bad_json_is_rejected_without_forwarding():
    stub = _StubForwarder(200)
    reply = handle_request(b"not json at all", stub)
    assert reply.http_status == 400
    assert reply.message == "Your request had data that isn't JSON. Please format it accordingly."
    assert stub.calls == []


def test_entries_are_forwarded_in_order():
    stub = _StubForwarder(200)
    reply = handle_request(b'["secret", "alice", "bob"]', stub)
    assert stub.calls == [["secret", "alice", "bob"]]
    assert reply == reply_for_status(200)


def test_object_values_are_forwarded():
    stub = _StubForwarder(200)
    handle_request('{"k": "secret", "u": "alice"}', stub)
    assert stub.calls == [["secret", "alice"]]


def test_passkey_error_maps_to_401():
    reply = handle_request(b'["wrong"]', _StubForwarder(PasskeyError("bad")))
    assert reply == reply_for_status(2)
    assert reply.http_status == 401


def test_forward_error_maps_to_connect_failure():
    reply = handle_request(b'["secret"]', _StubForwarder(ForwardError("down")))
    assert reply == reply_for_status(0)


def test_unexpected_error_gives_internal_error():
    reply = handle_request(b'["secret"]', _StubForwarder(RuntimeError("boom")))
    assert reply.http_status == 500
    assert reply.message == "Rare Error- something is wrong with the main code"


def test_non_string_entry_is_not_forwarded():
    stub = _StubForwarder(200)
    reply = handle_request(b'["secret", 5]', stub)
    assert reply.http_status == 500
    assert stub.calls == []


def test_upstream_status_passes_through_handler():
    reply = handle_request(b'["secret", "alice"]', _StubForwarder(423))
    assert reply.http_status == 500
    assert reply.message == "User account is locked"


def test_server_relays_success(running):
    server, upstream = running
    status, body = _post(server, "/LogProcess", b'["secret", "alice", "bob"]')
    assert status == 200
    assert body["status"] == "success"
    assert upstream.received == [["alice", "bob"]]


def test_server_rejects_bad_passkey(running):
    server, upstream = running
    status, body = _post(server, "/LogProcess", b'["wrong", "alice"]')
    assert status == 401
    assert body["message"] == "User passkey for this progam wasn't correct"
    assert upstream.received == []


def test_server_maps_bad_password_to_401(running):
    server, upstream = running
    upstream.reply_status = 403
    status, body = _post(server, "/LogProcess", b'["secret", "alice"]')
    assert status == 401
    assert body["message"] == "Acceptable admin user, but bad password."


def test_server_unknown_path_is_404(running):
    server, _ = running
    host, port = server.address
    request = urllib.request.Request(f"http://{host}:{port}/other", data=b"[]", method="POST")
    with pytest.raises(urllib.error.HTTPError) as excinfo:
        urllib.request.urlopen(request, timeout=5)
    assert excinfo.value.code == 404
    excinfo.value.close()


def test_server_get_on_route_is_405(running):
    server, _ = running
    host, port = server.address
    with pytest.raises(urllib.error.HTTPError) as excinfo:
        urllib.request.urlopen(f"http://{host}:{port}/LogProcess", timeout=5)
    assert excinfo.value.code == 405
    excinfo.value.close()


def test_main_rejects_non_numeric_port():
    with pytest.raises(SystemExit):
        main(["--port", "notanumber"])