"""Discord REST v10 adapter using a bot token.

Mental model refresher:
- This module is an outbound adapter.
- It integrates with Discord using environment-variable config.
- Application code only sees the small `DiscordApi` method surface.
- Non-2xx answers raise `DiscordApiError` carrying the HTTP status and body.
"""

from __future__ import annotations

import json
import os
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Mapping

from ..errors import NotificationError

DEFAULT_API_BASE_URL = "https://discord.com/api/v10"
USER_AGENT = "DiscordBot (https://wifiric.fr, 1.0)"


class DiscordApiError(NotificationError):
    """Discord answered with a non-2xx status or could not be reached."""


class DiscordClient:
    def __init__(
        self,
        *,
        bot_token: str,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.bot_token = bot_token
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_env(cls) -> DiscordClient:
        return cls(
            bot_token=_required_env("DISCORD_BOT_TOKEN"),
            base_url=os.getenv("DISCORD_API_BASE_URL", DEFAULT_API_BASE_URL),
            timeout_seconds=float(os.getenv("DISCORD_TIMEOUT_SECONDS", "10")),
        )

    def get_channel(self, channel_id: str) -> dict[str, Any]:
        return self._request("GET", f"/channels/{_segment(channel_id)}")

    def is_guild_member(self, guild_id: str, user_id: str) -> bool:
        try:
            self._request("GET", f"/guilds/{_segment(guild_id)}/members/{_segment(user_id)}")
        except DiscordApiError as exc:
            if exc.status_code < 500 and exc.status_code != 429:
                return False
            raise
        return True

    def create_channel(self, guild_id: str, body: Mapping[str, Any]) -> dict[str, Any]:
        return self._request("POST", f"/guilds/{_segment(guild_id)}/channels", body)

    def list_guild_channels(self, guild_id: str) -> list[dict[str, Any]]:
        channels = self._request("GET", f"/guilds/{_segment(guild_id)}/channels")
        if not isinstance(channels, list):
            raise DiscordApiError(
                "Discord channel list was not a JSON array", details=str(channels)[:300]
            )
        return channels

    def send_message(self, channel_id: str, body: Mapping[str, Any]) -> dict[str, Any]:
        return self._request("POST", f"/channels/{_segment(channel_id)}/messages", body)

    def _request(self, method: str, path: str, body: Mapping[str, Any] | None = None) -> Any:
        endpoint = f"{self.base_url}{path}"
        data = json.dumps(body).encode("utf-8") if body is not None else None

        request = urllib.request.Request(endpoint, data=data, method=method)
        request.add_header("Authorization", f"Bot {self.bot_token}")
        request.add_header("User-Agent", USER_AGENT)
        if data is not None:
            request.add_header("Content-Type", "application/json")

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as response:
                status = int(response.getcode())
                raw = response.read()
        except urllib.error.HTTPError as exc:
            details = exc.read().decode("utf-8", errors="replace")
            raise DiscordApiError(
                f"Discord {method} {path} failed HTTP {exc.code}: {details[:300]}",
                details=details[:300],
                status_code=exc.code,
            ) from exc
        except urllib.error.URLError as exc:
            raise DiscordApiError(
                f"Discord {method} {path} failed: {exc.reason}", status_code=502
            ) from exc

        if status < 200 or status >= 300:
            raise DiscordApiError(
                f"Discord {method} {path} failed with status {status}", status_code=status
            )
        if not raw:
            return {}
        try:
            return json.loads(raw.decode("utf-8"))
        except ValueError as exc:
            raise DiscordApiError(
                f"Discord {method} {path} returned invalid JSON", status_code=502
            ) from exc


def _segment(value: str) -> str:
    return urllib.parse.quote(str(value), safe="")


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value.strip()
