"""Fake collaborators for local smoke tests and demos.

Mental model refresher:
- This is outbound adapter code, like `discord_rest` and `supabase_rest`.
- In production those modules talk to Supabase and Discord; here the same
  method surfaces keep state in memory and print what would have been sent.
- Wizard and service code call these through injected objects and do not
  know which implementation is underneath.
"""

from __future__ import annotations

import asyncio
import itertools
from datetime import UTC, datetime
from typing import Any, Mapping

from ..domain.draft import Identity, NotificationRequest
from ..errors import NotificationError, OrderIdConflictError
from ..types import NotificationResult, OrderRecord


class StaticIdentityProvider:
    """Identity provider whose signed-in user is set by hand."""

    def __init__(self, identity: Identity | None = None) -> None:
        self.identity = identity

    def current_identity(self) -> Identity | None:
        return self.identity

    def sign_in(self, identity: Identity) -> None:
        self.identity = identity

    def sign_out(self) -> None:
        self.identity = None


class InMemoryOrderStore:
    def __init__(self, existing_order_ids: set[str] | None = None) -> None:
        self.orders: dict[str, OrderRecord] = {
            order_id: {"order_id": order_id} for order_id in existing_order_ids or ()
        }

    async def order_exists(self, order_id: str) -> bool:
        await asyncio.sleep(0)
        return order_id in self.orders

    async def insert_order(self, record: OrderRecord) -> None:
        await asyncio.sleep(0)
        order_id = str(record["order_id"])
        if order_id in self.orders:
            raise OrderIdConflictError(f"Order id already exists: {order_id}")
        self.orders[order_id] = {**record, "created_at": datetime.now(tz=UTC).isoformat()}


class ConsoleOrderNotifier:
    def __init__(self) -> None:
        self.sent: list[NotificationRequest] = []

    async def notify_order(
        self, request: NotificationRequest, *, identity: Identity | None
    ) -> NotificationResult:
        self.sent.append(request)
        print("[ORDER NOTIFY]")
        print(f"order_id={request.order_id}")
        print(f"site_name={request.site_name}")
        print(f"requester={identity.username if identity else None}")
        return {"success": True}


class InMemoryServiceStore:
    """Service-role persistence surface backed by dictionaries."""

    def __init__(
        self,
        *,
        tokens: Mapping[str, str] | None = None,
        profiles: Mapping[str, dict[str, Any]] | None = None,
        admins: set[str] | None = None,
    ) -> None:
        self.tokens = dict(tokens or {})
        self.profiles = dict(profiles or {})
        self.admins = set(admins or ())
        self.order_channel_names: dict[str, str] = {}
        self.contact_channel_names: dict[str, str] = {}

    def get_user_id(self, access_token: str) -> str | None:
        return self.tokens.get(access_token)

    def fetch_profile(self, user_id: str) -> dict[str, Any] | None:
        return self.profiles.get(user_id)

    def set_order_channel_name(self, order_id: str, channel_name: str) -> None:
        self.order_channel_names[order_id] = channel_name

    def set_contact_channel_name(self, contact_message_id: str, channel_name: str) -> None:
        self.contact_channel_names[contact_message_id] = channel_name

    def is_admin(self, user_id: str) -> bool:
        return user_id in self.admins


class ConsoleDiscord:
    """Discord surface that keeps channels in memory and prints posted embeds.

    `fail_on` names methods that should raise `NotificationError`, to drive
    failure paths in demos and tests.
    """

    def __init__(
        self,
        *,
        guild_id: str = "guild-1",
        category_id: str = "category-1",
        members: set[str] | None = None,
        fail_on: set[str] | None = None,
        echo: bool = True,
    ) -> None:
        self.guild_id = guild_id
        self.category_id = category_id
        self.members = set(members or ())
        self.fail_on = set(fail_on or ())
        self.echo = echo
        self.channels: dict[str, dict[str, Any]] = {}
        self.messages: list[tuple[str, dict[str, Any]]] = []
        self._ids = itertools.count(1000)

    def get_channel(self, channel_id: str) -> dict[str, Any]:
        self._maybe_fail("get_channel")
        if channel_id == self.category_id:
            return {"id": channel_id, "guild_id": self.guild_id, "type": 4}
        if channel_id in self.channels:
            return self.channels[channel_id]
        raise NotificationError(f"Unknown channel {channel_id}", status_code=404)

    def is_guild_member(self, guild_id: str, user_id: str) -> bool:
        self._maybe_fail("is_guild_member")
        return guild_id == self.guild_id and user_id in self.members

    def create_channel(self, guild_id: str, body: Mapping[str, Any]) -> dict[str, Any]:
        self._maybe_fail("create_channel")
        channel_id = str(next(self._ids))
        channel = {**dict(body), "id": channel_id, "guild_id": guild_id}
        self.channels[channel_id] = channel
        if self.echo:
            print(f"[DISCORD CHANNEL] id={channel_id} name={body.get('name')}")
        return channel

    def list_guild_channels(self, guild_id: str) -> list[dict[str, Any]]:
        self._maybe_fail("list_guild_channels")
        return [channel for channel in self.channels.values() if channel["guild_id"] == guild_id]

    def send_message(self, channel_id: str, body: Mapping[str, Any]) -> dict[str, Any]:
        self._maybe_fail("send_message")
        self.messages.append((channel_id, dict(body)))
        if self.echo:
            for embed in body.get("embeds", []):
                print(f"[DISCORD MESSAGE] channel_id={channel_id} title={embed.get('title')}")
        return {"id": str(next(self._ids)), "channel_id": channel_id}

    def _maybe_fail(self, method: str) -> None:
        if method in self.fail_on:
            raise NotificationError(
                f"Discord {method} failed HTTP 500", details="simulated failure", status_code=500
            )
