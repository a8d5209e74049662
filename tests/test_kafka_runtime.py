from __future__ import annotations

import json
import unittest
from types import SimpleNamespace
from typing import Any
from unittest import mock

from orders.adapters import kafka_runtime
from orders.adapters.fake_backends import ConsoleDiscord, InMemoryServiceStore
from orders.adapters.service_context import ServiceContext
from orders.domain.draft import Identity, NotificationRequest
from orders.errors import AuthenticationError

REQUEST = NotificationRequest(
    order_id="12345678",
    site_type="vitrine",
    site_name="Acme",
    description="A clean and modern business site",
    full_name="Jane Doe",
    email="jane@acme.com",
)


def make_context(**discord_kwargs: Any) -> ServiceContext:
    discord = ConsoleDiscord(echo=False, **discord_kwargs)
    store = InMemoryServiceStore(profiles={"user-1": {"username": "jane", "discord_id": "42"}})
    return ServiceContext(store=store, discord=discord, category_id=discord.category_id)


def make_message(value: Any, *, offset: int = 7) -> SimpleNamespace:
    return SimpleNamespace(topic="orders.events", partition=0, offset=offset, value=value)


def encoded_event() -> bytes:
    event = kafka_runtime.build_event(
        "order.created", user_id="user-1", data=REQUEST.to_payload(), event_id="evt-1"
    )
    return json.dumps(event).encode("utf-8")


class KafkaRuntimeHelperTests(unittest.TestCase):
    def test_deserialize_json_object_accepts_bytes(self) -> None:
        payload = kafka_runtime._deserialize_json_object(
            b'{"event_id":"evt-1","event_type":"order.created"}'
        )
        self.assertEqual(payload["event_id"], "evt-1")

    def test_deserialize_json_object_rejects_non_object_json(self) -> None:
        with self.assertRaises(ValueError):
            kafka_runtime._deserialize_json_object(b'["not","an","object"]')

    def test_serialize_keeps_non_ascii(self) -> None:
        raw = kafka_runtime._serialize_json_object({"name": "📦・𝟏"})
        self.assertEqual(json.loads(raw.decode("utf-8")), {"name": "📦・𝟏"})

    def test_build_event_shape(self) -> None:
        event = kafka_runtime.build_event("contact.created", user_id="user-1", data={"a": 1})
        self.assertTrue(event["event_id"].startswith("evt-"))
        self.assertEqual(event["event_type"], "contact.created")
        self.assertEqual(event["user_id"], "user-1")
        self.assertEqual(event["data"], {"a": 1})
        self.assertIn("occurred_at", event)

    def test_bootstrap_servers_from_env_parses_csv(self) -> None:
        env = {"KAFKA_BOOTSTRAP_SERVERS": "localhost:9092, kafka:29092 "}
        with mock.patch.dict("os.environ", env, clear=True):
            servers = kafka_runtime._bootstrap_servers_from_env()
        self.assertEqual(servers, ["localhost:9092", "kafka:29092"])

    def test_bootstrap_servers_from_env_requires_value(self) -> None:
        with mock.patch.dict("os.environ", {}, clear=True):
            with self.assertRaises(RuntimeError):
                kafka_runtime._bootstrap_servers_from_env()

    def test_env_bool(self) -> None:
        with mock.patch.dict("os.environ", {"KAFKA_DLQ_ENABLED": "off"}, clear=True):
            self.assertFalse(kafka_runtime._env_bool("KAFKA_DLQ_ENABLED", default=True))
        with mock.patch.dict("os.environ", {"KAFKA_DLQ_ENABLED": "maybe"}, clear=True):
            with self.assertRaises(RuntimeError):
                kafka_runtime._env_bool("KAFKA_DLQ_ENABLED", default=True)

    def test_worker_settings_default_dlq_topic(self) -> None:
        with mock.patch.dict("os.environ", {"KAFKA_TOPIC_ORDER_EVENTS": "orders.test"}, clear=True):
            settings = kafka_runtime._WorkerSettings.from_env()
        self.assertEqual(settings.dlq_topic, "orders.test.dlq")
        self.assertEqual(settings.group_id, "orders-discord-worker")
        self.assertEqual(settings.poll_timeout_ms, 1000)

    def test_offset_and_metadata_falls_back_to_two_arg_signature(self) -> None:
        def factory(offset: int, metadata: str) -> tuple[int, str]:
            return (offset, metadata)

        self.assertEqual(kafka_runtime._offset_and_metadata(factory, 42), (42, ""))

    def test_build_dlq_payload_includes_source_metadata_and_event_id(self) -> None:
        dlq_payload = kafka_runtime._build_dlq_payload(
            source_topic="orders.events",
            source_partition=0,
            source_offset=42,
            source_payload={"event_id": "evt-abc", "raw": b"\xff"},
            failure_reason="notification_failed: Discord API failed: 500",
        )

        self.assertEqual(dlq_payload["event_type"], "orders.events.dlq")
        self.assertEqual(dlq_payload["source"]["offset"], 42)
        self.assertEqual(dlq_payload["source_event_id"], "evt-abc")
        self.assertEqual(dlq_payload["payload"]["raw"], "\ufffd")
        self.assertIn("failed_at", dlq_payload)


class ProcessKafkaMessageTests(unittest.TestCase):
    def setUp(self) -> None:
        self.commits: list[tuple[str, int, int]] = []
        self.dead_letters: list[dict[str, Any]] = []
        self.dlq_available = True

    def commit_offset(self, topic: str, partition: int, offset: int) -> None:
        self.commits.append((topic, partition, offset))

    def publish_to_dlq(self, payload: dict[str, Any]) -> bool:
        if not self.dlq_available:
            return False
        self.dead_letters.append(payload)
        return True

    def run_message(self, message: SimpleNamespace, context: ServiceContext) -> Any:
        return kafka_runtime.process_kafka_message(
            message,
            context=context,
            commit_offset=self.commit_offset,
            publish_to_dlq=self.publish_to_dlq,
        )

    def test_success_commits_without_dlq(self) -> None:
        result = self.run_message(make_message(encoded_event()), make_context())

        self.assertEqual(result["status"], "processed_and_committed")
        self.assertEqual(self.commits, [("orders.events", 0, 7)])
        self.assertEqual(self.dead_letters, [])

    def test_failure_goes_to_dlq_then_commits(self) -> None:
        result = self.run_message(
            make_message(encoded_event()), make_context(fail_on={"send_message"})
        )

        self.assertEqual(result["status"], "processed_not_committed")
        self.assertEqual(len(self.dead_letters), 1)
        self.assertEqual(self.dead_letters[0]["source_event_id"], "evt-1")
        self.assertEqual(
            self.dead_letters[0]["failure_reason"], "notification_failed: Discord API failed: 500"
        )
        self.assertEqual(self.commits, [("orders.events", 0, 7)])

    def test_failure_without_dlq_leaves_offset_uncommitted(self) -> None:
        self.dlq_available = False
        self.run_message(make_message(encoded_event()), make_context(fail_on={"send_message"}))
        self.assertEqual(self.commits, [])

    def test_undecodable_value_goes_to_dlq(self) -> None:
        result = self.run_message(make_message(b"not json"), make_context())

        self.assertIsNone(result)
        self.assertTrue(self.dead_letters[0]["failure_reason"].startswith("decode_failed"))
        self.assertEqual(self.dead_letters[0]["payload"], "not json")
        self.assertEqual(self.commits, [("orders.events", 0, 7)])


class KafkaOrderNotifierTests(unittest.IsolatedAsyncioTestCase):
    async def test_publishes_order_created_event(self) -> None:
        published: list[tuple[dict[str, Any], str | None]] = []

        def publish(payload: dict[str, Any], *, topic: str | None = None) -> dict[str, Any]:
            published.append((payload, topic))
            return {"topic": "orders.events", "partition": 0, "offset": 5}

        notifier = kafka_runtime.KafkaOrderNotifier(topic="orders.events", publish=publish)
        result = await notifier.notify_order(REQUEST, identity=Identity(user_id="user-1"))

        [(event, topic)] = published
        self.assertEqual(topic, "orders.events")
        self.assertEqual(event["event_type"], "order.created")
        self.assertEqual(event["user_id"], "user-1")
        self.assertEqual(event["data"], REQUEST.to_payload())
        self.assertEqual(result["success"], True)
        self.assertEqual(result["queued"], True)
        self.assertEqual(result["eventId"], event["event_id"])
        self.assertEqual(result["offset"], 5)

    async def test_requires_identity(self) -> None:
        notifier = kafka_runtime.KafkaOrderNotifier(publish=mock.Mock())
        with self.assertRaises(AuthenticationError):
            await notifier.notify_order(REQUEST, identity=None)


if __name__ == "__main__":
    unittest.main()
