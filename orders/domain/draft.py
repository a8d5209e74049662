"""Order data structures: the client-held draft and the payloads built from it."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from ..types import OrderRecord, PayloadDict
from .validation import is_valid_email, is_valid_order_id

DEFAULT_PRIMARY_COLOR = "#3B82F6"
DEFAULT_SECONDARY_COLOR = "#9CD4E3"
DEFAULT_EXTRA_COLOR = "#6B7280"

SITE_TYPES = (
    "vitrine",
    "ecommerce",
    "dashboard",
    "portfolio",
    "landing",
    "community",
    "webapp",
    "other",
)


class OrderType(str, Enum):
    FREE = "free"
    ADVANCED = "advanced"


class ProjectType(str, Enum):
    BOT = "bot"
    WEBSITE = "website"


class OrderStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DeletedItemType(str, Enum):
    ORDER = "order"
    CONTACT = "contact"


@dataclass(frozen=True)
class Identity:
    """The signed-in user as seen by the wizard."""

    user_id: str
    username: str = ""
    discord_id: str | None = None
    access_token: str = ""


@dataclass
class OrderDraft:
    order_type: OrderType | None = None
    project_type: ProjectType | None = None

    site_type: str = ""
    site_type_other: str = ""
    site_name: str = ""
    logo_urls: list[str] = field(default_factory=lambda: [""])
    primary_color: str = DEFAULT_PRIMARY_COLOR
    secondary_color: str = DEFAULT_SECONDARY_COLOR
    other_colors: list[str] = field(default_factory=list)
    specific_instructions: str = ""
    description: str = ""
    budget: float | None = None
    budget_text: str = ""

    full_name: str = ""
    email: str = ""
    order_id: str = ""

    def filled_logo_urls(self) -> list[str]:
        return [url for url in self.logo_urls if url.strip() != ""]


@dataclass(frozen=True)
class NotificationRequest:
    """Body of one order notification, plus who asked for it."""

    order_id: str
    site_type: str
    site_name: str
    description: str
    full_name: str
    email: str
    site_type_other: str | None = None
    logo_urls: tuple[str, ...] = ()
    primary_color: str | None = None
    secondary_color: str | None = None
    other_colors: tuple[str, ...] = ()
    specific_instructions: str | None = None
    budget: float | None = None
    budget_text: str | None = None
    requester_username: str | None = None
    requester_discord_id: str | None = None

    def validate(self) -> None:
        if not is_valid_order_id(self.order_id):
            raise ValueError(f"order_id must be exactly 8 digits: {self.order_id!r}")
        if not self.site_type.strip():
            raise ValueError("Missing required field: site_type")
        if not self.site_name.strip():
            raise ValueError("Missing required field: site_name")
        if not self.full_name.strip():
            raise ValueError("Missing required field: full_name")
        if not is_valid_email(self.email):
            raise ValueError(f"Invalid email: {self.email!r}")
        if self.budget is not None:
            if not math.isfinite(self.budget):
                raise ValueError("budget must be a number")
            if self.budget < 0:
                raise ValueError("budget must be >= 0")

    def to_payload(self) -> PayloadDict:
        return {
            "order_id": self.order_id,
            "site_type": self.site_type,
            "site_type_other": self.site_type_other,
            "site_name": self.site_name,
            "logo_urls": list(self.logo_urls),
            "primary_color": self.primary_color,
            "secondary_color": self.secondary_color,
            "other_colors": list(self.other_colors),
            "specific_instructions": self.specific_instructions,
            "description": self.description,
            "budget": self.budget,
            "budget_text": self.budget_text,
            "full_name": self.full_name,
            "email": self.email,
        }


@dataclass(frozen=True)
class ContactNotification:
    name: str
    email: str
    subject: str
    message: str
    project_type: str = "other"
    contact_message_id: str | None = None


@dataclass(frozen=True)
class DeletionNotification:
    item_type: str
    item_id: str
    channel_name: str | None = None


def build_order_record(draft: OrderDraft, identity: Identity | None) -> OrderRecord:
    """Flatten a draft into the `orders` row inserted on submit."""
    logo_urls = draft.filled_logo_urls()
    return {
        "user_id": identity.user_id if identity else None,
        "order_id": draft.order_id,
        "order_type": ProjectType.WEBSITE.value,
        "site_type": draft.site_type,
        "site_type_other": draft.site_type_other if draft.site_type == "other" else None,
        "site_name": draft.site_name,
        "logo_urls": logo_urls or None,
        "primary_color": draft.primary_color,
        "secondary_color": draft.secondary_color,
        "other_colors": list(draft.other_colors) or None,
        "specific_instructions": draft.specific_instructions or None,
        "description": draft.description,
        "budget": draft.budget or None,
        "budget_text": draft.budget_text or None,
        "full_name": draft.full_name,
        "email": draft.email,
        "discord_username": identity.username if identity else "",
        "status": OrderStatus.PENDING.value,
    }


def notification_request_from_record(
    record: OrderRecord, identity: Identity | None
) -> NotificationRequest:
    return NotificationRequest(
        order_id=str(record["order_id"]),
        site_type=str(record["site_type"]),
        site_type_other=record.get("site_type_other"),
        site_name=str(record["site_name"]),
        logo_urls=tuple(record.get("logo_urls") or ()),
        primary_color=record.get("primary_color"),
        secondary_color=record.get("secondary_color"),
        other_colors=tuple(record.get("other_colors") or ()),
        specific_instructions=record.get("specific_instructions"),
        description=str(record["description"]),
        budget=record.get("budget"),
        budget_text=record.get("budget_text"),
        full_name=str(record["full_name"]),
        email=str(record["email"]),
        requester_username=identity.username if identity else None,
        requester_discord_id=identity.discord_id if identity else None,
    )

