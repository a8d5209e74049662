#!/usr/bin/env python3
"""Walk the order wizard from step 1 to the success screen.

By default everything runs in memory: a fake signed-in user, an in-memory
order table and a console notifier. `--notify http` or `--notify kafka`
sends the notification through the real transports configured in `.env`.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from orders.adapters.fake_backends import (  # noqa: E402
    ConsoleOrderNotifier,
    InMemoryOrderStore,
    StaticIdentityProvider,
)
from orders.adapters.function_client import HttpOrderNotifier  # noqa: E402
from orders.adapters.kafka_runtime import KafkaOrderNotifier  # noqa: E402
from orders.application.wizard import OrderWizard  # noqa: E402
from orders.domain.draft import Identity, OrderType, ProjectType  # noqa: E402
from orders.types import OrderNotifier  # noqa: E402


def main() -> int:
    args = parse_args()
    _load_env_file(REPO_ROOT / ".env")
    return asyncio.run(run(args))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the order wizard end to end.")
    parser.add_argument(
        "--order-id",
        default="12345678",
        help="8-digit order id to submit. Default: 12345678.",
    )
    parser.add_argument(
        "--taken",
        action="append",
        default=[],
        help="Order id that already exists in the store (repeatable).",
    )
    parser.add_argument(
        "--notify",
        choices=("console", "http", "kafka"),
        default="console",
        help="Where the order notification goes. Default: console.",
    )
    parser.add_argument(
        "--access-token",
        default=os.getenv("ORDER_DEMO_ACCESS_TOKEN", "demo-token"),
        help="Bearer token sent with --notify http.",
    )
    return parser.parse_args()


async def run(args: argparse.Namespace) -> int:
    identity = StaticIdentityProvider(
        Identity(
            user_id="user-demo-1",
            username="demo_user",
            discord_id="100000000000000001",
            access_token=args.access_token,
        )
    )
    store = InMemoryOrderStore(existing_order_ids=set(args.taken))
    wizard = OrderWizard(
        identity=identity,
        store=store,
        notifier=build_notifier(args.notify),
        navigate_home=lambda: print("[NAVIGATE] home"),
        navigate_contact=lambda: print("[NAVIGATE] contact"),
    )

    wizard.select_order_type(OrderType.ADVANCED)
    wizard.next()
    wizard.select_project_type(ProjectType.WEBSITE)
    wizard.next()

    wizard.set_site_type("vitrine")
    wizard.set_field("site_name", "Boulangerie Martin")
    wizard.set_field("description", "Un site vitrine pour présenter la boutique et ses horaires.")
    wizard.update_logo_url(0, "https://example.com/logo.png")
    wizard.set_budget(800)
    wizard.next()

    wizard.set_field("full_name", "Jeanne Martin")
    wizard.set_email("jeanne@example.com")
    await wizard.set_order_id(args.order_id)
    print(f"[STEP] view={wizard.view} errors={wizard.visible_errors}")
    if not wizard.next():
        print("[BLOCKED] contact step is incomplete")
        return 1

    submitted = await wizard.submit()
    await wizard.drain_notifications()

    print("")
    print("[SUMMARY]")
    print(f"submitted={submitted}")
    print(f"view={wizard.view}")
    print(f"submission_state={wizard.submission_state.value}")
    print(f"errors={wizard.visible_errors}")
    print(f"notification_errors={[str(exc) for exc in wizard.notification_errors]}")
    return 0 if submitted else 1


def build_notifier(kind: str) -> OrderNotifier:
    if kind == "http":
        return HttpOrderNotifier.from_env()
    if kind == "kafka":
        return KafkaOrderNotifier()
    return ConsoleOrderNotifier()


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
