"""Field rules and per-step gates for the order wizard.

These functions hold the validation rules only:
- what a valid email / order id looks like
- which length bounds apply to free-text fields
- which fields each step needs before the wizard may move on
They never call collaborators; the uniqueness of an order id is an input here.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .draft import OrderDraft

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
ORDER_ID_PATTERN = re.compile(r"[0-9]{8}")
ORDER_ID_LENGTH = 8

EMAIL_INVALID = "contact.validation.email_invalid"
ORDER_ID_FORMAT = "order.error_id_format"
ORDER_ID_TAKEN = "order.error_id_taken"

# field -> (message key prefix, min length, max length)
FIELD_RULES: dict[str, tuple[str, int, int]] = {
    "site_name": ("order.validation.site_name", 2, 100),
    "description": ("order.validation.description", 20, 2000),
    "full_name": ("order.validation.name", 2, 100),
}


def is_valid_email(value: str) -> bool:
    if not value.strip():
        return False
    return EMAIL_PATTERN.fullmatch(value) is not None


def is_valid_order_id(value: str) -> bool:
    return ORDER_ID_PATTERN.fullmatch(value) is not None


def validate_field(field: str, value: str) -> str | None:
    """Return the message key for a length violation, or None when the value is fine."""
    try:
        prefix, min_length, max_length = FIELD_RULES[field]
    except KeyError:
        raise ValueError(f"No validation rule for field: {field}") from None

    text = value.strip()
    if not text:
        return f"{prefix}_required"
    if len(text) < min_length:
        return f"{prefix}_min"
    if len(text) > max_length:
        return f"{prefix}_max"
    return None


def email_error(value: str) -> str | None:
    if value and not is_valid_email(value):
        return EMAIL_INVALID
    return None


def site_details_complete(draft: OrderDraft) -> bool:
    # site_type_other is not required when site_type == "other".
    return (
        draft.site_type != ""
        and draft.site_name.strip() != ""
        and draft.description.strip() != ""
    )


def contact_details_complete(draft: OrderDraft, *, order_id_error: str | None) -> bool:
    return (
        draft.full_name.strip() != ""
        and is_valid_email(draft.email)
        and len(draft.order_id) == ORDER_ID_LENGTH
        and is_valid_order_id(draft.order_id)
        and not order_id_error
    )


def step_gate(step: int, draft: OrderDraft, *, order_id_error: str | None = None) -> bool:
    """Whether `step` holds everything needed to move past it."""
    if step == 1:
        return draft.order_type is not None
    if step == 2:
        return draft.project_type is not None
    if step == 3:
        return site_details_complete(draft)
    if step == 4:
        return contact_details_complete(draft, order_id_error=order_id_error)
    return True
