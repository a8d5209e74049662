"""Application orchestration for Discord notifications.

Mental model refresher:
- The caller is already authenticated; `user_id` is trusted here.
- Each use-case runs one sequential chain of external calls:
  profile lookup -> guild lookup -> channel create/find -> echo -> post.
- Channel naming and embed content come from `domain.discord_format`.
- Failures that must reach the caller raise `OrderError` subclasses;
  `failure_result` turns them into the response body.
"""

from __future__ import annotations

import random
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable

from ..domain.discord_format import (
    UNKNOWN_USER,
    build_contact_embed,
    build_deletion_embed,
    build_order_embed,
    contact_channel_name,
    order_channel_name,
    private_channel_body,
)
from ..domain.draft import ContactNotification, DeletionNotification, NotificationRequest
from ..errors import NotificationError, OrderError, PersistenceError
from ..types import DiscordApi, Embed, NotificationResult, ServiceStore


def process_order_notification(
    request: NotificationRequest,
    *,
    user_id: str,
    store: ServiceStore,
    discord: DiscordApi,
    category_id: str,
    now: datetime | None = None,
) -> NotificationResult:
    """Create the private order channel and post the order summary into it."""
    username, discord_id = resolve_requester(store, user_id)
    guild_id = resolve_guild_id(discord, category_id)

    channel_name = order_channel_name(request.order_id)
    channel_id = create_private_channel(
        discord,
        channel_name,
        category_id=category_id,
        guild_id=guild_id,
        member_id=discord_id,
    )
    _best_effort_echo(
        lambda: store.set_order_channel_name(request.order_id, channel_name),
        what=f"order_id={request.order_id}",
        channel_name=channel_name,
    )

    enriched = replace(request, requester_username=username, requester_discord_id=discord_id)
    post_embed(discord, channel_id, build_order_embed(enriched, now=now))
    return {"success": True, "channelId": channel_id, "channelName": channel_name}


def process_contact_notification(
    contact: ContactNotification,
    *,
    user_id: str,
    store: ServiceStore,
    discord: DiscordApi,
    category_id: str,
    now: datetime | None = None,
    contact_ref: str | None = None,
) -> NotificationResult:
    """Open a private channel for a contact request and post the message into it."""
    username, discord_id = resolve_requester(store, user_id)
    reference = contact_ref or generate_contact_ref()
    guild_id = resolve_guild_id(discord, category_id)

    channel_name = contact_channel_name(reference)
    channel_id = create_private_channel(
        discord,
        channel_name,
        category_id=category_id,
        guild_id=guild_id,
        member_id=discord_id,
    )
    if contact.contact_message_id:
        message_id = contact.contact_message_id
        _best_effort_echo(
            lambda: store.set_contact_channel_name(message_id, channel_name),
            what=f"contact_message_id={message_id}",
            channel_name=channel_name,
        )

    embed = build_contact_embed(
        contact, contact_ref=reference, requester_username=username, now=now
    )
    post_embed(discord, channel_id, embed)
    return {
        "success": True,
        "contactId": reference,
        "channelId": channel_id,
        "channelName": channel_name,
    }


def process_deletion_notification(
    deletion: DeletionNotification,
    *,
    user_id: str,
    store: ServiceStore,
    discord: DiscordApi,
    category_id: str,
    now: datetime | None = None,
) -> NotificationResult:
    """Tell the item's channel that the item was deleted, if that channel still exists."""
    username, _discord_id = resolve_requester(store, user_id)
    is_admin = _is_admin(store, user_id)
    guild_id = resolve_guild_id(discord, category_id)

    channel_id = None
    if deletion.channel_name:
        channel_id = find_channel(
            discord, guild_id=guild_id, category_id=category_id, name=deletion.channel_name
        )
    if channel_id is None:
        print(
            f"[DELETION SKIPPED] item_type={deletion.item_type} item_id={deletion.item_id} "
            f"channel_name={deletion.channel_name}"
        )
        return {"success": True, "message": "Channel not found, skipping Discord notification"}

    embed = build_deletion_embed(deletion, deleted_by=username, is_admin=is_admin, now=now)
    try:
        post_embed(discord, channel_id, embed)
    except NotificationError as exc:
        print(f"[DELETION POST ERROR] channel_id={channel_id} error={exc} details={exc.details}")
        return {"success": True, "channelId": channel_id, "posted": False}
    return {"success": True, "channelId": channel_id, "posted": True}


def resolve_requester(store: ServiceStore, user_id: str) -> tuple[str, str | None]:
    """Return (display name, Discord user id) from the caller's profile."""
    try:
        profile = store.fetch_profile(user_id)
    except PersistenceError as exc:
        raise OrderError(f"Impossible de récupérer le profil: {exc}", status_code=400) from exc
    profile = profile or {}
    username = str(profile.get("username") or UNKNOWN_USER)
    discord_id = profile.get("discord_id") or None
    return username, (str(discord_id) if discord_id else None)


def resolve_guild_id(discord: DiscordApi, category_id: str) -> str:
    try:
        category = discord.get_channel(category_id)
    except NotificationError as exc:
        raise NotificationError(
            "Impossible de récupérer le serveur Discord", details=exc.details or str(exc)
        ) from exc
    guild_id = category.get("guild_id")
    if not guild_id:
        raise NotificationError(
            "Impossible de récupérer le serveur Discord",
            details=f"channel {category_id} has no guild_id",
        )
    return str(guild_id)


def create_private_channel(
    discord: DiscordApi,
    name: str,
    *,
    category_id: str,
    guild_id: str,
    member_id: str | None,
) -> str:
    """Create a text channel under the category, visible only to `member_id` (if in the guild)."""
    visible_to = member_id if member_id and _is_guild_member(discord, guild_id, member_id) else None
    body = private_channel_body(
        name, category_id=category_id, guild_id=guild_id, member_id=visible_to
    )
    try:
        channel = discord.create_channel(guild_id, body)
    except NotificationError as exc:
        raise NotificationError(
            "Impossible de créer le salon Discord", details=exc.details or str(exc)
        ) from exc
    channel_id = channel.get("id")
    if not channel_id:
        raise NotificationError("Impossible de créer le salon Discord", details="missing channel id")
    print(f"[CHANNEL CREATED] channel_id={channel_id} name={name} member_id={visible_to}")
    return str(channel_id)


def find_channel(
    discord: DiscordApi, *, guild_id: str, category_id: str, name: str
) -> str | None:
    try:
        channels = discord.list_guild_channels(guild_id)
    except NotificationError as exc:
        print(f"[CHANNEL LOOKUP ERROR] guild_id={guild_id} error={exc}")
        return None
    for channel in channels:
        if channel.get("name") == name and str(channel.get("parent_id")) == str(category_id):
            return str(channel["id"])
    return None


def post_embed(discord: DiscordApi, channel_id: str, embed: Embed) -> None:
    try:
        discord.send_message(channel_id, {"embeds": [embed]})
    except NotificationError as exc:
        status = exc.status_code
        raise NotificationError(
            f"Discord API failed: {status}", details=exc.details or str(exc)
        ) from exc


def generate_contact_ref() -> str:
    return str(random.randint(10_000_000, 99_999_999))


def failure_result(exc: OrderError) -> dict[str, Any]:
    result: dict[str, Any] = {"success": False, "error": exc.message}
    details = getattr(exc, "details", None)
    if details:
        result["details"] = details
    return result


def _is_guild_member(discord: DiscordApi, guild_id: str, member_id: str) -> bool:
    try:
        return discord.is_guild_member(guild_id, member_id)
    except NotificationError as exc:
        print(f"[MEMBER LOOKUP ERROR] guild_id={guild_id} member_id={member_id} error={exc}")
        return False


def _is_admin(store: ServiceStore, user_id: str) -> bool:
    try:
        return store.is_admin(user_id)
    except PersistenceError as exc:
        print(f"[ROLE LOOKUP ERROR] user_id={user_id} error={exc}")
        return False


def _best_effort_echo(write: Callable[[], None], *, what: str, channel_name: str) -> None:
    try:
        write()
    except PersistenceError as exc:
        print(f"[CHANNEL NAME ECHO ERROR] {what} channel_name={channel_name} error={exc}")
        return
    print(f"[CHANNEL NAME ECHO] {what} channel_name={channel_name}")
