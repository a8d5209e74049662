"""Shared type aliases and collaborator protocols for the orders package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping, Protocol

if TYPE_CHECKING:
    from .domain.draft import Identity, NotificationRequest

Payload = Mapping[str, Any]
PayloadDict = dict[str, Any]
OrderRecord = dict[str, Any]
NotificationResult = dict[str, Any]
Embed = dict[str, Any]

NavigateFn = Callable[[], None]
ToastFn = Callable[[str, str], None]
ErrorSinkFn = Callable[[BaseException], None]


class IdentityProvider(Protocol):
    def current_identity(self) -> Identity | None: ...


class OrderStore(Protocol):
    async def order_exists(self, order_id: str) -> bool: ...

    async def insert_order(self, record: OrderRecord) -> None: ...


class OrderNotifier(Protocol):
    async def notify_order(
        self, request: NotificationRequest, *, identity: Identity | None
    ) -> NotificationResult: ...


class ServiceStore(Protocol):
    """Persistence calls made by the notification service (service-role access)."""

    def get_user_id(self, access_token: str) -> str | None: ...

    def fetch_profile(self, user_id: str) -> dict[str, Any] | None: ...

    def set_order_channel_name(self, order_id: str, channel_name: str) -> None: ...

    def set_contact_channel_name(self, contact_message_id: str, channel_name: str) -> None: ...

    def is_admin(self, user_id: str) -> bool: ...


class DiscordApi(Protocol):
    def get_channel(self, channel_id: str) -> dict[str, Any]: ...

    def is_guild_member(self, guild_id: str, user_id: str) -> bool: ...

    def create_channel(self, guild_id: str, body: Mapping[str, Any]) -> dict[str, Any]: ...

    def list_guild_channels(self, guild_id: str) -> list[dict[str, Any]]: ...

    def send_message(self, channel_id: str, body: Mapping[str, Any]) -> dict[str, Any]: ...
