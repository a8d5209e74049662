"""Wizard-side client for the order notification HTTP function."""

from __future__ import annotations

import asyncio
import json
import os
import urllib.error
import urllib.request
from typing import Any

from ..domain.draft import Identity, NotificationRequest
from ..errors import AuthenticationError, NotificationError
from ..types import NotificationResult


class HttpOrderNotifier:
    def __init__(self, *, function_url: str, timeout_seconds: float = 10.0) -> None:
        self.function_url = function_url
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_env(cls) -> HttpOrderNotifier:
        return cls(
            function_url=_required_env("ORDER_FUNCTION_URL"),
            timeout_seconds=float(os.getenv("ORDER_FUNCTION_TIMEOUT_SECONDS", "10")),
        )

    async def notify_order(
        self, request: NotificationRequest, *, identity: Identity | None
    ) -> NotificationResult:
        if identity is None or not identity.access_token:
            raise AuthenticationError("No access token for the order notification")
        return await asyncio.to_thread(self._post, request.to_payload(), identity.access_token)

    def _post(self, payload: dict[str, Any], access_token: str) -> NotificationResult:
        data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(self.function_url, data=data, method="POST")
        request.add_header("Authorization", f"Bearer {access_token}")
        request.add_header("Content-Type", "application/json")

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as response:
                raw = response.read()
        except urllib.error.HTTPError as exc:
            details = exc.read().decode("utf-8", errors="replace")
            body = _decode_object(details)
            if body is not None and "success" in body:
                return body
            raise NotificationError(
                f"Order notification failed HTTP {exc.code}",
                details=details[:300],
                status_code=exc.code,
            ) from exc
        except urllib.error.URLError as exc:
            raise NotificationError(f"Order notification failed: {exc.reason}") from exc

        body = _decode_object(raw.decode("utf-8"))
        if body is None:
            raise NotificationError("Order notification returned a non-object body")
        return body


def _decode_object(text: str) -> dict[str, Any] | None:
    try:
        parsed = json.loads(text)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value.strip()
