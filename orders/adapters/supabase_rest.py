"""Supabase adapter: auth lookup and PostgREST table access over HTTP.

Mental model refresher:
- This module is an outbound adapter, like `discord_rest`.
- `SupabaseClient` is blocking and serves the notification service
  (service-role key) as well as the wizard (anon key + user token).
- `SupabaseOrderStore` is the wizard's async view of the same client.
- HTTP failures raise `PersistenceError`; a duplicate order id raises
  `OrderIdConflictError`.
"""

from __future__ import annotations

import asyncio
import json
import os
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Mapping

from ..errors import OrderIdConflictError, PersistenceError
from ..types import OrderRecord

UNIQUE_VIOLATION = "23505"


class SupabaseClient:
    def __init__(
        self,
        *,
        url: str,
        api_key: str,
        bearer_token: str | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.bearer_token = bearer_token or api_key
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_env(cls) -> SupabaseClient:
        """Service-role client used by the notification service."""
        return cls(
            url=_required_env("SUPABASE_URL"),
            api_key=_required_env("SUPABASE_SERVICE_ROLE_KEY"),
            timeout_seconds=float(os.getenv("SUPABASE_TIMEOUT_SECONDS", "10")),
        )

    @classmethod
    def for_user_from_env(cls, access_token: str) -> SupabaseClient:
        """Anon-key client acting as the signed-in user (row level security applies)."""
        return cls(
            url=_required_env("SUPABASE_URL"),
            api_key=_required_env("SUPABASE_ANON_KEY"),
            bearer_token=access_token,
            timeout_seconds=float(os.getenv("SUPABASE_TIMEOUT_SECONDS", "10")),
        )

    # -- auth --------------------------------------------------------------

    def get_user_id(self, access_token: str) -> str | None:
        """Resolve a user JWT to its user id, or None when the token is rejected."""
        try:
            user = self._request("GET", "/auth/v1/user", bearer_token=access_token)
        except PersistenceError as exc:
            if exc.status_code in (401, 403):
                return None
            raise
        user_id = user.get("id") if isinstance(user, Mapping) else None
        return str(user_id) if user_id else None

    # -- tables ------------------------------------------------------------

    def fetch_profile(self, user_id: str) -> dict[str, Any] | None:
        rows = self._select("profiles", {"select": "username,discord_id", "id": f"eq.{user_id}"})
        return rows[0] if rows else None

    def is_admin(self, user_id: str) -> bool:
        rows = self._select(
            "user_roles",
            {"select": "role", "user_id": f"eq.{user_id}", "role": "eq.admin", "limit": "1"},
        )
        return bool(rows)

    def order_exists(self, order_id: str) -> bool:
        rows = self._select(
            "orders", {"select": "order_id", "order_id": f"eq.{order_id}", "limit": "1"}
        )
        return bool(rows)

    def insert_order(self, record: OrderRecord) -> None:
        try:
            self._request(
                "POST",
                "/rest/v1/orders",
                body=record,
                headers={"Prefer": "return=minimal"},
            )
        except PersistenceError as exc:
            if exc.status_code == 409 or UNIQUE_VIOLATION in str(exc):
                raise OrderIdConflictError(
                    f"Order id already exists: {record.get('order_id')}"
                ) from exc
            raise

    def set_order_channel_name(self, order_id: str, channel_name: str) -> None:
        self._update("orders", {"order_id": f"eq.{order_id}"}, {"discord_channel_name": channel_name})

    def set_contact_channel_name(self, contact_message_id: str, channel_name: str) -> None:
        self._update(
            "contact_messages",
            {"id": f"eq.{contact_message_id}"},
            {"discord_channel_name": channel_name},
        )

    # -- transport ---------------------------------------------------------

    def _select(self, table: str, query: Mapping[str, str]) -> list[dict[str, Any]]:
        rows = self._request("GET", f"/rest/v1/{table}", query=query)
        if not isinstance(rows, list):
            raise PersistenceError(f"Supabase {table} select did not return a list")
        return rows

    def _update(self, table: str, query: Mapping[str, str], values: Mapping[str, Any]) -> None:
        self._request(
            "PATCH",
            f"/rest/v1/{table}",
            query=query,
            body=values,
            headers={"Prefer": "return=minimal"},
        )

    def _request(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
        body: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        bearer_token: str | None = None,
    ) -> Any:
        endpoint = f"{self.url}{path}"
        if query:
            endpoint = f"{endpoint}?{urllib.parse.urlencode(query)}"
        data = json.dumps(body).encode("utf-8") if body is not None else None

        request = urllib.request.Request(endpoint, data=data, method=method)
        request.add_header("apikey", self.api_key)
        request.add_header("Authorization", f"Bearer {bearer_token or self.bearer_token}")
        request.add_header("Accept", "application/json")
        if data is not None:
            request.add_header("Content-Type", "application/json")
        for name, value in (headers or {}).items():
            request.add_header(name, value)

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as response:
                status = int(response.getcode())
                raw = response.read()
        except urllib.error.HTTPError as exc:
            details = exc.read().decode("utf-8", errors="replace")
            raise PersistenceError(
                f"Supabase {method} {path} failed HTTP {exc.code}: {details[:300]}",
                status_code=exc.code,
            ) from exc
        except urllib.error.URLError as exc:
            raise PersistenceError(f"Supabase {method} {path} failed: {exc.reason}") from exc

        if status < 200 or status >= 300:
            raise PersistenceError(
                f"Supabase {method} {path} failed with status {status}", status_code=status
            )
        if not raw:
            return None
        try:
            return json.loads(raw.decode("utf-8"))
        except ValueError as exc:
            raise PersistenceError(
                f"Supabase {method} {path} returned invalid JSON", status_code=502
            ) from exc


class SupabaseOrderStore:
    """Async order store for the wizard; blocking calls run in a worker thread."""

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def order_exists(self, order_id: str) -> bool:
        return await asyncio.to_thread(self._client.order_exists, order_id)

    async def insert_order(self, record: OrderRecord) -> None:
        await asyncio.to_thread(self._client.insert_order, record)


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value.strip()
