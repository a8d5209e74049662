"""Payload adapter functions.

Mental model refresher:
- This is an adapter/edge module.
- It translates transport-shaped data (HTTP JSON bodies, Kafka event values)
  into the typed notification requests used by application code.
- It validates shape and required fields; it does not decide outcomes.
"""

from __future__ import annotations

import math
from typing import Any

from ..domain.draft import ContactNotification, DeletionNotification, NotificationRequest
from ..types import Payload, PayloadDict

ORDER_CREATED = "order.created"
CONTACT_CREATED = "contact.created"
ITEM_DELETED = "item.deleted"
EVENT_TYPES = (ORDER_CREATED, CONTACT_CREATED, ITEM_DELETED)


def parse_order_request(payload: Payload) -> NotificationRequest:
    """Build a validated order notification from the function's JSON body."""
    request = NotificationRequest(
        order_id=_as_required_str(payload.get("order_id"), "order_id"),
        site_type=_as_required_str(payload.get("site_type"), "site_type"),
        site_type_other=_as_optional_str(payload.get("site_type_other")),
        site_name=_as_required_str(payload.get("site_name"), "site_name"),
        logo_urls=_as_str_tuple(payload.get("logo_urls"), "logo_urls"),
        primary_color=_as_optional_str(payload.get("primary_color")),
        secondary_color=_as_optional_str(payload.get("secondary_color")),
        other_colors=_as_str_tuple(payload.get("other_colors"), "other_colors"),
        specific_instructions=_as_optional_str(payload.get("specific_instructions")),
        description=str(payload.get("description") or ""),
        budget=_as_optional_number(payload.get("budget"), "budget"),
        budget_text=_as_optional_str(payload.get("budget_text")),
        full_name=_as_required_str(payload.get("full_name"), "full_name"),
        email=_as_required_str(payload.get("email"), "email"),
    )
    request.validate()
    return request


def parse_contact_request(payload: Payload) -> ContactNotification:
    return ContactNotification(
        name=_as_required_str(payload.get("name"), "name"),
        email=_as_required_str(payload.get("email"), "email"),
        subject=_as_required_str(payload.get("subject"), "subject"),
        message=_as_required_str(payload.get("message"), "message"),
        project_type=_as_optional_str(payload.get("project_type")) or "other",
        contact_message_id=_as_optional_str(payload.get("contact_message_id")),
    )


def parse_deletion_request(payload: Payload) -> DeletionNotification:
    return DeletionNotification(
        item_type=_as_required_str(payload.get("type"), "type"),
        item_id=_as_required_str(payload.get("item_id"), "item_id"),
        channel_name=_as_optional_str(payload.get("channel_name")),
    )


def parse_event_payload(payload: Payload) -> PayloadDict:
    """Normalize a Kafka event value into a plain event dictionary.

    The body is left as a mapping; the consumer handler picks the matching
    request parser for its `event_type`.
    """
    event_type = _as_required_str(payload.get("event_type"), "event_type")
    if event_type not in EVENT_TYPES:
        raise ValueError(f"Unsupported event_type: {event_type}")
    data = payload.get("data")
    if not isinstance(data, dict):
        raise ValueError("Missing required field: data")

    return {
        "event_id": _as_required_str(payload.get("event_id"), "event_id"),
        "event_type": event_type,
        "user_id": _as_required_str(payload.get("user_id"), "user_id"),
        "data": data,
    }


def _as_required_str(value: Any, field_name: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValueError(f"Missing required field: {field_name}")
    return text


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_str_tuple(value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"{field_name} must be a list of strings")
    return tuple(str(item) for item in value if item is not None and str(item).strip())


def _as_optional_number(value: Any, field_name: str) -> float | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be a number") from None
    if not math.isfinite(number):
        raise ValueError(f"{field_name} must be a number")
    return number
