"""Kafka transport adapters for order notification events.

Mental model refresher:
- This module is transport glue to Kafka itself.
- Producers (the wizard's `KafkaOrderNotifier`, scripts) publish events to
  `orders.events`; the worker maps Kafka records into the consumer-handler
  flow and commits offsets per record.
- Records that cannot be processed go to a dead-letter topic, then commit.
- Discord and persistence logic still live in application/domain layers.
"""

from __future__ import annotations

import asyncio
import json
import os
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Callable, Mapping

from ..domain.draft import Identity, NotificationRequest
from ..errors import AuthenticationError
from ..types import NotificationResult
from .consumer_handler import handle_message
from .payload import ORDER_CREATED
from .service_context import ServiceContext

DEFAULT_TOPIC = "orders.events"


def build_event(
    event_type: str,
    *,
    user_id: str,
    data: Mapping[str, Any],
    event_id: str | None = None,
) -> dict[str, Any]:
    return {
        "event_id": event_id or f"evt-{uuid.uuid4()}",
        "event_type": event_type,
        "occurred_at": datetime.now(tz=UTC).isoformat(),
        "user_id": user_id,
        "data": dict(data),
    }


def publish_order_event(
    payload: Mapping[str, Any],
    *,
    topic: str | None = None,
) -> dict[str, Any]:
    """Publish one notification event to Kafka and wait for the broker ack."""
    _KafkaConsumer, KafkaProducer, _TopicPartition, _OffsetAndMetadata = _import_kafka_python()
    bootstrap_servers = _bootstrap_servers_from_env()
    topic_name = topic or os.getenv("KAFKA_TOPIC_ORDER_EVENTS", DEFAULT_TOPIC)
    send_timeout_seconds = float(os.getenv("KAFKA_SEND_TIMEOUT_SECONDS", "10"))

    producer = KafkaProducer(
        bootstrap_servers=bootstrap_servers,
        value_serializer=_serialize_json_object,
        acks=os.getenv("KAFKA_PRODUCER_ACKS", "all"),
    )
    try:
        future = producer.send(topic_name, value=dict(payload))
        metadata = future.get(timeout=send_timeout_seconds)
        producer.flush(timeout=send_timeout_seconds)
    finally:
        producer.close()

    return {
        "topic": metadata.topic,
        "partition": metadata.partition,
        "offset": metadata.offset,
    }


class KafkaOrderNotifier:
    """Order notifier that queues an `order.created` event instead of calling HTTP."""

    def __init__(
        self,
        *,
        topic: str | None = None,
        publish: Callable[..., dict[str, Any]] = publish_order_event,
    ) -> None:
        self.topic = topic
        self._publish = publish

    async def notify_order(
        self, request: NotificationRequest, *, identity: Identity | None
    ) -> NotificationResult:
        if identity is None:
            raise AuthenticationError("No identity for the order notification")
        event = build_event(ORDER_CREATED, user_id=identity.user_id, data=request.to_payload())
        metadata = await asyncio.to_thread(self._publish, event, topic=self.topic)
        return {"success": True, "queued": True, "eventId": event["event_id"], **metadata}


@dataclass
class _WorkerSettings:
    topic: str
    dlq_enabled: bool
    dlq_topic: str
    group_id: str
    auto_offset_reset: str
    poll_timeout_ms: int
    max_records: int
    dlq_send_timeout_seconds: float

    @classmethod
    def from_env(cls) -> _WorkerSettings:
        topic = os.getenv("KAFKA_TOPIC_ORDER_EVENTS", DEFAULT_TOPIC)
        return cls(
            topic=topic,
            dlq_enabled=_env_bool("KAFKA_DLQ_ENABLED", default=True),
            dlq_topic=os.getenv("KAFKA_TOPIC_ORDER_EVENTS_DLQ", f"{topic}.dlq"),
            group_id=os.getenv("KAFKA_GROUP_ID", "orders-discord-worker"),
            auto_offset_reset=os.getenv("KAFKA_AUTO_OFFSET_RESET", "earliest"),
            poll_timeout_ms=_poll_timeout_ms_from_env(),
            max_records=int(os.getenv("KAFKA_MAX_RECORDS_PER_POLL", "50")),
            dlq_send_timeout_seconds=float(
                os.getenv(
                    "KAFKA_DLQ_SEND_TIMEOUT_SECONDS",
                    os.getenv("KAFKA_SEND_TIMEOUT_SECONDS", "10"),
                )
            ),
        )


def run_notification_worker_forever(context: ServiceContext | None = None) -> int:
    """Consume notification events and relay them to Discord until interrupted."""
    KafkaConsumer, KafkaProducer, TopicPartition, OffsetAndMetadata = _import_kafka_python()
    bootstrap_servers = _bootstrap_servers_from_env()
    settings = _WorkerSettings.from_env()
    service_context = context or ServiceContext.from_env()

    consumer = KafkaConsumer(
        settings.topic,
        bootstrap_servers=bootstrap_servers,
        group_id=settings.group_id,
        enable_auto_commit=False,
        auto_offset_reset=settings.auto_offset_reset,
    )
    dlq_producer = (
        KafkaProducer(
            bootstrap_servers=bootstrap_servers,
            value_serializer=_serialize_json_object,
            acks=os.getenv("KAFKA_PRODUCER_ACKS", "all"),
        )
        if settings.dlq_enabled
        else None
    )
    print(
        f"[WORKER START] topic={settings.topic} group_id={settings.group_id} "
        f"dlq_enabled={settings.dlq_enabled} dlq_topic={settings.dlq_topic}"
    )

    def commit_offset(topic: str, partition: int, offset: int) -> None:
        offsets = {
            TopicPartition(topic, partition): _offset_and_metadata(OffsetAndMetadata, offset + 1)
        }
        consumer.commit(offsets=offsets)
        print(f"[COMMIT] topic={topic} partition={partition} offset={offset}")

    def publish_to_dlq(payload: dict[str, Any]) -> bool:
        if dlq_producer is None:
            return False
        try:
            future = dlq_producer.send(settings.dlq_topic, value=payload)
            metadata = future.get(timeout=settings.dlq_send_timeout_seconds)
        except Exception as exc:
            print(f"[DLQ ERROR] dlq_topic={settings.dlq_topic} error={exc}")
            return False
        print(
            f"[DLQ] dlq_topic={metadata.topic} dlq_partition={metadata.partition} "
            f"dlq_offset={metadata.offset} reason={payload['failure_reason']}"
        )
        return True

    try:
        while True:
            batches = consumer.poll(
                timeout_ms=settings.poll_timeout_ms, max_records=settings.max_records
            )
            for _topic_partition, records in (batches or {}).items():
                for message in records:
                    process_kafka_message(
                        message,
                        context=service_context,
                        commit_offset=commit_offset,
                        publish_to_dlq=publish_to_dlq,
                    )
    except KeyboardInterrupt:
        print("[WORKER STOP] received keyboard interrupt")
        return 0
    except Exception as exc:
        print(f"[WORKER ERROR] {exc}")
        return 1
    finally:
        _close_quietly(consumer.close)
        if dlq_producer is not None:
            _close_quietly(lambda: dlq_producer.flush(timeout=settings.dlq_send_timeout_seconds))
            _close_quietly(dlq_producer.close)


def process_kafka_message(
    message: Any,
    *,
    context: ServiceContext,
    commit_offset: Callable[[str, int, int], None],
    publish_to_dlq: Callable[[dict[str, Any]], bool],
) -> dict[str, Any] | None:
    """Run one polled Kafka message through the consumer handler.

    The offset is committed when processing succeeds, or when the failed
    record made it onto the dead-letter topic. Otherwise it stays uncommitted
    and the record is redelivered after a restart.
    """
    topic = message.topic
    partition = int(message.partition)
    offset = int(message.offset)

    def dead_letter(reason: str, source_payload: Any) -> None:
        dlq_payload = _build_dlq_payload(
            source_topic=topic,
            source_partition=partition,
            source_offset=offset,
            source_payload=source_payload,
            failure_reason=reason,
        )
        if publish_to_dlq(dlq_payload):
            commit_offset(topic, partition, offset)
        else:
            print(
                f"[NO-COMMIT] topic={topic} partition={partition} "
                f"offset={offset} reason={reason}"
            )

    try:
        payload = _deserialize_json_object(message.value)
    except ValueError as exc:
        dead_letter(f"decode_failed: {exc}", message.value)
        return None

    internal_record = {"topic": topic, "partition": partition, "offset": offset, "value": payload}
    result = handle_message(
        internal_record,
        context=context,
        commit=lambda _record: commit_offset(topic, partition, offset),
        reject=lambda record, reason: dead_letter(reason, record.get("value")),
    )
    print(
        f"[RESULT] topic={topic} partition={partition} offset={offset} "
        f"status={result['status']} should_commit={result['should_commit']} "
        f"error={result['error']}"
    )
    return result


def _import_kafka_python() -> tuple[Any, Any, Any, Any]:
    try:
        from kafka import KafkaConsumer, KafkaProducer, TopicPartition
        from kafka.structs import OffsetAndMetadata
    except ImportError as exc:
        raise RuntimeError(
            "Kafka support requires `kafka-python`. Install with: pip install kafka-python"
        ) from exc
    return KafkaConsumer, KafkaProducer, TopicPartition, OffsetAndMetadata


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value.strip()


def _bootstrap_servers_from_env() -> list[str]:
    raw = _required_env("KAFKA_BOOTSTRAP_SERVERS")
    servers = [item.strip() for item in raw.split(",") if item.strip()]
    if not servers:
        raise RuntimeError("KAFKA_BOOTSTRAP_SERVERS must include at least one host:port")
    return servers


def _poll_timeout_ms_from_env() -> int:
    timeout_ms = int(float(os.getenv("KAFKA_POLL_TIMEOUT_SECONDS", "1.0")) * 1000)
    if timeout_ms <= 0:
        raise RuntimeError("KAFKA_POLL_TIMEOUT_SECONDS must be > 0")
    return timeout_ms


def _serialize_json_object(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _deserialize_json_object(raw: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, bytes):
        text = raw.decode("utf-8")
    elif isinstance(raw, str):
        text = raw
    else:
        raise ValueError(f"Unsupported Kafka payload type: {type(raw).__name__}")

    parsed = json.loads(text)
    if not isinstance(parsed, dict):
        raise ValueError("Kafka payload must decode to a JSON object")
    return parsed


def _build_dlq_payload(
    *,
    source_topic: str,
    source_partition: int,
    source_offset: int,
    source_payload: Any,
    failure_reason: str,
) -> dict[str, Any]:
    payload = {
        "event_type": f"{source_topic}.dlq",
        "failed_at": datetime.now(tz=UTC).isoformat(),
        "failure_reason": failure_reason,
        "source": {
            "topic": source_topic,
            "partition": source_partition,
            "offset": source_offset,
        },
        "payload": _to_json_compatible(source_payload),
    }
    if isinstance(source_payload, Mapping):
        event_id = source_payload.get("event_id")
        if isinstance(event_id, str) and event_id.strip():
            payload["source_event_id"] = event_id.strip()
    return payload


def _to_json_compatible(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, Mapping):
        return {str(key): _to_json_compatible(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_json_compatible(item) for item in value]
    return repr(value)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise RuntimeError(f"Invalid boolean value for {name}: {raw!r}")


def _offset_and_metadata(offset_and_metadata_type: Any, offset: int) -> Any:
    """Build kafka-python OffsetAndMetadata across version signatures."""
    try:
        return offset_and_metadata_type(offset, "", -1)
    except TypeError:
        try:
            return offset_and_metadata_type(offset, "", None)
        except TypeError:
            return offset_and_metadata_type(offset, "")


def _close_quietly(close: Callable[[], Any]) -> None:
    try:
        close()
    except Exception as exc:
        print(f"[WORKER CLOSE ERROR] {exc}")
