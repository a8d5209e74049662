#!/usr/bin/env python3
"""Run the Kafka notification worker.

This worker consumes `orders.events` (order.created, contact.created,
item.deleted) and posts the matching Discord notifications. Command-line
options override the corresponding `KAFKA_*` variables from `.env`.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from orders.adapters.fake_backends import ConsoleDiscord, InMemoryServiceStore  # noqa: E402
from orders.adapters.kafka_runtime import run_notification_worker_forever  # noqa: E402
from orders.adapters.service_context import ServiceContext  # noqa: E402


def main() -> int:
    args = parse_args()
    _load_env_file(REPO_ROOT / ".env")
    apply_overrides(args)
    context = console_context() if args.console_discord else None
    return run_notification_worker_forever(context)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run Kafka consumer loop for Discord order notifications."
    )
    parser.add_argument("--topic", default=None, help="Override KAFKA_TOPIC_ORDER_EVENTS.")
    parser.add_argument("--group-id", default=None, help="Override KAFKA_GROUP_ID.")
    parser.add_argument(
        "--no-dlq",
        action="store_true",
        help="Disable the dead-letter topic; failed records stay uncommitted.",
    )
    parser.add_argument(
        "--console-discord",
        action="store_true",
        help="Print notifications instead of calling Supabase and Discord.",
    )
    return parser.parse_args()


def apply_overrides(args: argparse.Namespace) -> None:
    if args.topic:
        os.environ["KAFKA_TOPIC_ORDER_EVENTS"] = args.topic
    if args.group_id:
        os.environ["KAFKA_GROUP_ID"] = args.group_id
    if args.no_dlq:
        os.environ["KAFKA_DLQ_ENABLED"] = "false"


def console_context() -> ServiceContext:
    discord = ConsoleDiscord()
    return ServiceContext(
        store=InMemoryServiceStore(), discord=discord, category_id=discord.category_id
    )


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
