# lockupmanager

`lockupmanager` is a small HTTP gateway that sits in front of an account
lockup service. Clients post a JSON list made up of a passkey, an admin
username and password, and the usernames whose lock state should be
toggled. The gateway checks the passkey, forwards the rest of the list to
the upstream service, and translates the upstream status code into a JSON
reply for the client.

It uses only the Python standard library.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Running the gateway

```
lockupmanager
```

By default the gateway listens on `0.0.0.0`, port 5023, and accepts
`POST /LogProcess`. Other methods on that path get `405`; other paths get
`404`.

Options:

| Option      | Default                              | Meaning                                  |
|-------------|--------------------------------------|------------------------------------------|
| `--host`    | `0.0.0.0`                            | address to listen on                     |
| `--port`    | `5023`                               | port to listen on                        |
| `--passkey` | `$LOCKUP_PASSKEY`, else `secret`     | passkey expected as the first entry      |
| `--url`     | `http://localhost:5012/api/lockup`   | upstream lockup endpoint                 |
| `--timeout` | `10.0`                               | upstream request timeout in seconds      |

Stop the gateway with Ctrl-C. Each handled request prints a line starting
with `Client Request Result:` to standard output.

### Request format

The body is a JSON array of strings:

```json
["secret", "admin", "password", "alice", "bob"]
```

1. the passkey configured for the gateway,
2. an admin username,
3. that admin's password,
4. any number of account usernames to toggle.

A JSON object is also accepted; its values are taken in order as the list.

The passkey is checked locally and never sent upstream. Every element after
it is forwarded to the upstream service as a JSON array with
`Content-Type: application/json`.

### Replies

Every reply is a JSON object with a `status` field (`"success"` or
`"error"`) and a human-readable `message`.

| Situation                                      | HTTP status |
|------------------------------------------------|-------------|
| Body is not valid JSON, or not an array/object | 400         |
| An entry is not a string                       | 500         |
| Passkey is wrong (or the list is empty)        | 401         |
| Upstream could not be reached                  | 500         |
| Upstream `200` – lock toggled                  | 200         |
| Upstream `400` – account not found             | 400         |
| Upstream `401` – user is not an admin          | 401         |
| Upstream `403` – admin password is wrong       | 401         |
| Upstream `423` – admin account is locked       | 500         |
| Any other upstream status                      | 500         |

### Upstream contract

Any upstream service can be used as long as it accepts a JSON array of
usernames (admin username, admin password, then target accounts) and answers
with one of the status codes above.

## Trying it out

With the gateway running, send a request and print the reply:

```
lockupmanager-client
lockupmanager-client --url http://localhost:5023/LogProcess secret admin password alice
```

With no entries given, the client sends
`["secret", "admin", "password", "alice", "bob"]`. It also accepts
`--timeout`.

## Using it from Python

```python
from lockupmanager.client import send_request
from lockupmanager.forwarder import LockupForwarder, build_payload
from lockupmanager.server import LockupServer, handle_request, reply_for_status

# The JSON text that is forwarded upstream (passkey already removed).
payload = build_payload(["admin", "password", "alice"])  # '["admin", "password", "alice"]'

# Map an upstream status code to the gateway's reply.
reply = reply_for_status(423)
reply.http_status  # 500
reply.body         # {"status": "error", "message": "User account is locked"}
```

- `LockupForwarder(passkey, url, timeout)` holds the passkey and the upstream
  address. `forward(usernames)` raises `PasskeyError` when the first entry
  is not the passkey, raises `ForwardError` when the upstream cannot be
  reached, and otherwise returns the upstream HTTP status.
- `handle_request(body, forwarder)` turns a raw request body into a `Reply`
  (`http_status`, `status`, `message`, plus `body` and `to_json()`).
- `LockupServer(forwarder, host, port)` serves it over HTTP with
  `serve_forever()` and `shutdown()`; it is also a context manager and
  exposes the bound `address`.
- `send_request(url, entries, timeout)` posts entries to a gateway and
  returns the response body, including for error statuses.

## What it does not do

The package does not include the upstream lockup service: it keeps no
accounts and checks no admin credentials itself. It only checks its own
passkey and relays the rest. There is no TLS; serve it behind a proxy if it
must be reached over untrusted networks.