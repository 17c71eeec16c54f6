#!/usr/bin/env python3
"""
Smoke check for a freshly built deployment.

- Imports 'item_vault.api.main:app'
- Starts a temporary uvicorn server on 127.0.0.1:<PORT> (default 3000)
- Probes GET /health, which must answer 200 without touching MongoDB
- Probes GET /api/not-a-type, which must answer 404 with the JSON error
  envelope naming the token

Exits 0 on success, non-zero otherwise. Intended for local/CI diagnostics.
"""
import contextlib
import http.client
import json
import os
import socket
import sys
import threading
import time


def _port() -> int:
    with contextlib.suppress(ValueError):
        return int(os.getenv("PORT", "3000"))
    return 3000


def _wait_port(host: str, port: int, timeout: float = 10.0) -> bool:
    deadline = time.time() + timeout
    while time.time() < deadline:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.settimeout(1.0)
            if s.connect_ex((host, port)) == 0:
                return True
        time.sleep(0.25)
    return False


def _get(port: int, path: str):
    conn = http.client.HTTPConnection("127.0.0.1", port, timeout=5)
    try:
        conn.request("GET", path)
        resp = conn.getresponse()
        return resp.status, resp.read().decode("utf-8", errors="ignore")
    finally:
        conn.close()


def main() -> None:
    try:
        import uvicorn
        from item_vault.api.main import app
    except ImportError as exc:
        print(f"[verify] Import failure: {exc}", file=sys.stderr)
        sys.exit(2)

    port = _port()
    server = uvicorn.Server(config=uvicorn.Config(app, host="127.0.0.1", port=port, log_level="warning"))
    threading.Thread(target=server.run, daemon=True).start()

    if not _wait_port("127.0.0.1", port, timeout=15.0):
        print(f"[verify] Server did not open port {port}", file=sys.stderr)
        sys.exit(3)

    status, body = _get(port, "/health")
    if status != 200 or json.loads(body).get("status") != "ok":
        print(f"[verify] /health failed: {status} {body}", file=sys.stderr)
        sys.exit(4)
    print("[verify] /health OK")

    status, body = _get(port, "/api/not-a-type")
    if status != 404 or "not-a-type" not in json.loads(body).get("error", ""):
        print(f"[verify] unknown type check failed: {status} {body}", file=sys.stderr)
        sys.exit(5)
    print("[verify] error envelope OK")

    server.should_exit = True
    sys.exit(0)


if __name__ == "__main__":
    main()
