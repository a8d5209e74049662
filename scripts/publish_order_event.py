#!/usr/bin/env python3
"""Publish one `order.created` event to Kafka for local testing."""

from __future__ import annotations

import argparse
import os
import random
import sys
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from orders.adapters.kafka_runtime import build_event, publish_order_event  # noqa: E402
from orders.adapters.payload import ORDER_CREATED  # noqa: E402


def main() -> int:
    _load_env_file(REPO_ROOT / ".env")
    args = parse_args()
    payload = build_payload(args)
    metadata = publish_order_event(payload, topic=args.topic)

    print("[PUBLISHED]")
    print(f"topic={metadata['topic']}")
    print(f"partition={metadata['partition']}")
    print(f"offset={metadata['offset']}")
    print(f"event_id={payload['event_id']}")
    print(f"order_id={payload['data']['order_id']}")
    return 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Publish one order.created event for Kafka testing."
    )
    parser.add_argument(
        "--email",
        required=True,
        help="Customer email for the order.",
    )
    parser.add_argument(
        "--user-id",
        required=True,
        help="Supabase user id of the customer (its profile supplies the Discord id).",
    )
    parser.add_argument(
        "--order-id",
        default=None,
        help="8-digit order id. Default: random.",
    )
    parser.add_argument(
        "--full-name",
        default="Client Démo",
        help="Customer name shown in the embed.",
    )
    parser.add_argument(
        "--site-name",
        default="Site Démo",
        help="Site name shown in the embed.",
    )
    parser.add_argument(
        "--event-id",
        default=None,
        help="Optional event id. Default: generated UUID.",
    )
    parser.add_argument(
        "--topic",
        default=None,
        help="Override Kafka topic (defaults to KAFKA_TOPIC_ORDER_EVENTS).",
    )
    return parser.parse_args()


def build_payload(args: argparse.Namespace) -> dict[str, object]:
    order_id = args.order_id or str(random.randint(10_000_000, 99_999_999))
    return build_event(
        ORDER_CREATED,
        user_id=args.user_id,
        event_id=args.event_id,
        data={
            "order_id": order_id,
            "site_type": "vitrine",
            "site_name": args.site_name,
            "logo_urls": [],
            "primary_color": "#3B82F6",
            "secondary_color": "#9CD4E3",
            "other_colors": [],
            "description": "Commande publiée depuis le script de test Kafka.",
            "budget": None,
            "full_name": args.full_name,
            "email": args.email,
        },
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
