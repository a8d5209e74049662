"""Collaborators shared by every notification entrypoint (HTTP function, Kafka worker)."""

from __future__ import annotations

import os
from dataclasses import dataclass

from ..types import DiscordApi, ServiceStore
from .discord_rest import DiscordClient
from .supabase_rest import SupabaseClient


@dataclass(frozen=True)
class ServiceContext:
    store: ServiceStore
    discord: DiscordApi
    category_id: str

    @classmethod
    def from_env(cls) -> ServiceContext:
        return cls(
            store=SupabaseClient.from_env(),
            discord=DiscordClient.from_env(),
            category_id=_required_env("DISCORD_CATEGORY_ID"),
        )


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value.strip()
