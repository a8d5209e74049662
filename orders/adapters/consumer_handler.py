"""Consumer-handler adapter functions for notification events.

Mental model refresher:
- Real Kafka code calls this after polling a record.
- Flow:
  record -> parse adapter -> application use-case -> commit/no-commit decision
- The event carries the user id of an already authenticated caller (the
  producer is trusted), so there is no bearer check here.
- This module owns transport lifecycle behavior (parse errors, commit
  callbacks), not Discord rules.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

from ..application.process import (
    failure_result,
    process_contact_notification,
    process_deletion_notification,
    process_order_notification,
)
from ..errors import OrderError
from ..types import NotificationResult, PayloadDict
from .payload import (
    CONTACT_CREATED,
    ORDER_CREATED,
    parse_contact_request,
    parse_deletion_request,
    parse_event_payload,
    parse_order_request,
)
from .service_context import ServiceContext

Record = Mapping[str, Any]
CommitFn = Callable[[Record], None]
RejectFn = Callable[[Record, str], None]


def handle_message(
    record: Record,
    *,
    context: ServiceContext,
    commit: CommitFn,
    reject: RejectFn | None = None,
) -> dict[str, Any]:
    """Handle one incoming record and decide commit/no-commit.

    Commit policy:
    - Commit only when the notification use-case reports success.
    - Do not commit on parse failures or Discord/persistence failures.
    """
    try:
        payload = _get_record_payload(record)
        event = parse_event_payload(payload)
        request = _parse_event_data(event)
    except ValueError as exc:
        error = f"parse_failed: {exc}"
        if reject is not None:
            reject(record, error)
        return {
            "status": "parse_failed",
            "record_meta": _record_meta(record),
            "event": None,
            "processing": None,
            "should_commit": False,
            "error": error,
        }

    try:
        processing = _dispatch(event, request, context)
    except OrderError as exc:
        processing = failure_result(exc)
    should_commit = bool(processing.get("success"))

    if should_commit:
        commit(record)
        status = "processed_and_committed"
        error = None
    else:
        status = "processed_not_committed"
        error = f"notification_failed: {processing.get('error')}"
        if reject is not None:
            reject(record, error)

    return {
        "status": status,
        "record_meta": _record_meta(record),
        "event": event,
        "processing": processing,
        "should_commit": should_commit,
        "error": error,
    }


def handle_batch(
    records: Sequence[Record],
    *,
    context: ServiceContext,
    commit: CommitFn,
    reject: RejectFn | None = None,
) -> list[dict[str, Any]]:
    """Handle a batch of records sequentially using `handle_message`."""
    return [
        handle_message(record, context=context, commit=commit, reject=reject)
        for record in records
    ]


def _parse_event_data(event: PayloadDict) -> Any:
    data = event["data"]
    if event["event_type"] == ORDER_CREATED:
        return parse_order_request(data)
    if event["event_type"] == CONTACT_CREATED:
        return parse_contact_request(data)
    return parse_deletion_request(data)


def _dispatch(event: PayloadDict, request: Any, context: ServiceContext) -> NotificationResult:
    common = {
        "user_id": event["user_id"],
        "store": context.store,
        "discord": context.discord,
        "category_id": context.category_id,
    }
    if event["event_type"] == ORDER_CREATED:
        return process_order_notification(request, **common)
    if event["event_type"] == CONTACT_CREATED:
        return process_contact_notification(request, **common)
    return process_deletion_notification(request, **common)


def _get_record_payload(record: Record) -> PayloadDict:
    payload = record.get("value")
    if not isinstance(payload, dict):
        raise ValueError("record.value must be a dict payload")
    return payload


def _record_meta(record: Record) -> dict[str, Any]:
    return {
        "topic": record.get("topic"),
        "partition": record.get("partition"),
        "offset": record.get("offset"),
    }
