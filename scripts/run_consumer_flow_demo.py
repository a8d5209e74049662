#!/usr/bin/env python3
"""Run a Kafka-like consumer flow without Kafka, Supabase or Discord."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from orders.adapters.consumer_handler import handle_batch  # noqa: E402
from orders.adapters.fake_backends import ConsoleDiscord, InMemoryServiceStore  # noqa: E402
from orders.adapters.service_context import ServiceContext  # noqa: E402


def main() -> int:
    discord = ConsoleDiscord(members={"100000000000000001"})
    store = InMemoryServiceStore(
        profiles={"user-100": {"username": "demo_user", "discord_id": "100000000000000001"}},
        admins={"admin-1"},
    )
    context = ServiceContext(store=store, discord=discord, category_id=discord.category_id)

    committed_offsets: list[tuple[int, int]] = []
    rejected_offsets: list[tuple[int, int, str]] = []

    def commit(record: dict[str, Any]) -> None:
        partition = int(record.get("partition", -1))
        offset = int(record.get("offset", -1))
        committed_offsets.append((partition, offset))
        print(f"[COMMIT] partition={partition} offset={offset}")

    def reject(record: dict[str, Any], reason: str) -> None:
        partition = int(record.get("partition", -1))
        offset = int(record.get("offset", -1))
        rejected_offsets.append((partition, offset, reason))
        print(f"[NO-COMMIT] partition={partition} offset={offset} reason={reason}")

    results = handle_batch(sample_records(), context=context, commit=commit, reject=reject)

    print("")
    print("[BATCH SUMMARY]")
    for result in results:
        meta = result["record_meta"]
        print(
            f"offset={meta['offset']} status={result['status']} "
            f"should_commit={result['should_commit']} error={result['error']}"
        )

    print("")
    print("[OFFSETS]")
    print(f"committed={committed_offsets}")
    print(f"rejected={rejected_offsets}")
    print(f"channel_names={store.order_channel_names}")
    return 0


def sample_records() -> list[dict[str, Any]]:
    return [
        {
            "topic": "orders.events",
            "partition": 0,
            "offset": 100,
            "value": {
                "event_id": "evt-100",
                "event_type": "order.created",
                "user_id": "user-100",
                "data": {
                    "order_id": "12345678",
                    "site_type": "vitrine",
                    "site_name": "Boulangerie Martin",
                    "logo_urls": ["https://example.com/logo.png"],
                    "primary_color": "#3B82F6",
                    "secondary_color": "#9CD4E3",
                    "description": "Un site vitrine pour présenter la boutique.",
                    "budget": 800,
                    "full_name": "Jeanne Martin",
                    "email": "jeanne@example.com",
                },
            },
        },
        {
            "topic": "orders.events",
            "partition": 0,
            "offset": 101,
            "value": {
                "event_id": "evt-101",
                "event_type": "contact.created",
                "user_id": "user-100",
                "data": {
                    "name": "Jeanne Martin",
                    "email": "jeanne@example.com",
                    "subject": "Question sur les délais",
                    "message": "Combien de temps faut-il pour un site vitrine ?",
                    "project_type": "website",
                },
            },
        },
        {
            "topic": "orders.events",
            "partition": 0,
            "offset": 102,
            "value": {
                "event_type": "order.created",
                "user_id": "user-100",
                "data": {"order_id": "87654321"},
            },
        },
        {
            "topic": "orders.events",
            "partition": 0,
            "offset": 103,
            "value": {
                "event_id": "evt-103",
                "event_type": "item.deleted",
                "user_id": "admin-1",
                "data": {
                    "type": "order",
                    "item_id": "12345678",
                    "channel_name": "📦・𝟏𝟐𝟑𝟒𝟓𝟔𝟕𝟖",
                },
            },
        },
    ]


if __name__ == "__main__":
    sys.exit(main())
