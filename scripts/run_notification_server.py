#!/usr/bin/env python3
"""Serve the notification functions over HTTP for local testing.

Routes: POST /send-order-to-discord, /send-contact-to-discord and
/send-deletion-to-discord (plus OPTIONS preflight). With `--fake`, Supabase
and Discord are replaced by in-memory fakes and the bearer token
`demo-token` maps to a demo user.
"""

from __future__ import annotations

import argparse
import os
import sys
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from orders.adapters.fake_backends import ConsoleDiscord, InMemoryServiceStore  # noqa: E402
from orders.adapters.http_function import dispatch  # noqa: E402
from orders.adapters.service_context import ServiceContext  # noqa: E402


def main() -> int:
    args = parse_args()
    _load_env_file(REPO_ROOT / ".env")
    context = fake_context() if args.fake else ServiceContext.from_env()
    port = args.port or int(os.getenv("NOTIFICATION_SERVER_PORT", "8787"))

    server = ThreadingHTTPServer(("127.0.0.1", port), build_handler(context))
    print(f"[SERVER START] http://127.0.0.1:{port} fake={args.fake}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("[SERVER STOP] received keyboard interrupt")
    finally:
        server.server_close()
    return 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the Discord notification functions.")
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (defaults to NOTIFICATION_SERVER_PORT or 8787).",
    )
    parser.add_argument(
        "--fake",
        action="store_true",
        help="Use in-memory Supabase/Discord fakes instead of the real services.",
    )
    return parser.parse_args()


def fake_context() -> ServiceContext:
    discord = ConsoleDiscord(members={"100000000000000001"})
    store = InMemoryServiceStore(
        tokens={"demo-token": "user-demo-1"},
        profiles={"user-demo-1": {"username": "demo_user", "discord_id": "100000000000000001"}},
    )
    return ServiceContext(store=store, discord=discord, category_id=discord.category_id)


def build_handler(context: ServiceContext) -> type[BaseHTTPRequestHandler]:
    class FunctionHandler(BaseHTTPRequestHandler):
        def do_OPTIONS(self) -> None:
            self._serve("OPTIONS")

        def do_POST(self) -> None:
            self._serve("POST")

        def do_GET(self) -> None:
            self._serve("GET")

        def _serve(self, method: str) -> None:
            length = int(self.headers.get("Content-Length") or 0)
            body = self.rfile.read(length) if length else b""
            request = {
                "httpMethod": method,
                "headers": dict(self.headers.items()),
                "body": body,
            }
            response = dispatch(self.path.split("?", 1)[0], request, context)

            payload = response["body"].encode("utf-8")
            self.send_response(response["statusCode"])
            for name, value in response["headers"].items():
                self.send_header(name, value)
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

    return FunctionHandler


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        text = line.strip()
        if not text or text.startswith("#") or "=" not in text:
            continue
        key, value = text.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        if value.startswith(("'", '"')) and value.endswith(("'", '"')) and len(value) >= 2:
            value = value[1:-1]
        os.environ.setdefault(key, value)


if __name__ == "__main__":
    sys.exit(main())
