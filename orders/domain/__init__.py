"""Domain layer: order data, validation rules and Discord message content."""

from .discord_format import (
    build_contact_embed,
    build_deletion_embed,
    build_order_embed,
    contact_channel_name,
    order_channel_name,
    to_bold_digits,
)
from .draft import (
    ContactNotification,
    DeletionNotification,
    Identity,
    NotificationRequest,
    OrderDraft,
    OrderStatus,
    OrderType,
    ProjectType,
    build_order_record,
)
from .validation import is_valid_email, is_valid_order_id, step_gate, validate_field

__all__ = [
    "ContactNotification",
    "DeletionNotification",
    "Identity",
    "NotificationRequest",
    "OrderDraft",
    "OrderStatus",
    "OrderType",
    "ProjectType",
    "build_contact_embed",
    "build_deletion_embed",
    "build_order_embed",
    "build_order_record",
    "contact_channel_name",
    "is_valid_email",
    "is_valid_order_id",
    "order_channel_name",
    "step_gate",
    "to_bold_digits",
    "validate_field",
]
