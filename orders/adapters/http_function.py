"""HTTP function handlers for the notification service.

Mental model refresher:
- This is the controller-like entrypoint for one HTTP invocation.
- Request and response are plain dicts shaped like a serverless gateway event:
  request  {"httpMethod", "headers", "body"}
  response {"statusCode", "headers", "body"} with a JSON body string.
- Flow: CORS preflight -> bearer auth -> body parse -> application use-case.
- Status mapping lives here; channel and embed rules do not.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Mapping

from ..application.process import (
    failure_result,
    process_contact_notification,
    process_deletion_notification,
    process_order_notification,
)
from ..errors import AuthenticationError, OrderError
from ..types import NotificationResult, ServiceStore
from .payload import parse_contact_request, parse_deletion_request, parse_order_request
from .service_context import ServiceContext

Request = Mapping[str, Any]
Response = dict[str, Any]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

ORDER_ROUTE = "send-order-to-discord"
CONTACT_ROUTE = "send-contact-to-discord"
DELETION_ROUTE = "send-deletion-to-discord"


def handle_order_request(request: Request, context: ServiceContext) -> Response:
    def run(user_id: str, body: Mapping[str, Any]) -> NotificationResult:
        order = parse_order_request(body)
        print(f"[ORDER NOTIFICATION] order_id={order.order_id} user_id={user_id}")
        return process_order_notification(
            order,
            user_id=user_id,
            store=context.store,
            discord=context.discord,
            category_id=context.category_id,
        )

    return _handle(request, context, run, route=ORDER_ROUTE)


def handle_contact_request(request: Request, context: ServiceContext) -> Response:
    def run(user_id: str, body: Mapping[str, Any]) -> NotificationResult:
        contact = parse_contact_request(body)
        print(f"[CONTACT NOTIFICATION] subject={contact.subject!r} user_id={user_id}")
        return process_contact_notification(
            contact,
            user_id=user_id,
            store=context.store,
            discord=context.discord,
            category_id=context.category_id,
        )

    return _handle(request, context, run, route=CONTACT_ROUTE)


def handle_deletion_request(request: Request, context: ServiceContext) -> Response:
    def run(user_id: str, body: Mapping[str, Any]) -> NotificationResult:
        deletion = parse_deletion_request(body)
        print(
            f"[DELETION NOTIFICATION] item_type={deletion.item_type} "
            f"item_id={deletion.item_id} user_id={user_id}"
        )
        return process_deletion_notification(
            deletion,
            user_id=user_id,
            store=context.store,
            discord=context.discord,
            category_id=context.category_id,
        )

    return _handle(request, context, run, route=DELETION_ROUTE)


ROUTES: dict[str, Callable[[Request, ServiceContext], Response]] = {
    ORDER_ROUTE: handle_order_request,
    CONTACT_ROUTE: handle_contact_request,
    DELETION_ROUTE: handle_deletion_request,
}


def dispatch(route: str, request: Request, context: ServiceContext) -> Response:
    handler = ROUTES.get(route.strip("/"))
    if handler is None:
        return json_response(404, {"success": False, "error": f"Unknown function: {route}"})
    return handler(request, context)


def authenticate(request: Request, store: ServiceStore) -> str:
    """Resolve the request's bearer token to a user id or raise `AuthenticationError`."""
    header = get_header(request, "Authorization")
    if not header or not header.startswith("Bearer "):
        raise AuthenticationError("Non authentifié")
    token = header[len("Bearer ") :].strip()
    if not token:
        raise AuthenticationError("Non authentifié")
    user_id = store.get_user_id(token)
    if not user_id:
        raise AuthenticationError("Utilisateur non valide")
    return user_id


def get_header(request: Request, name: str) -> str | None:
    lowered = name.lower()
    for key, value in (request.get("headers") or {}).items():
        if str(key).lower() == lowered:
            return str(value)
    return None


def get_json_body(request: Request) -> dict[str, Any]:
    raw = request.get("body")
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if not raw:
        raise ValueError("Request body is empty")
    parsed = json.loads(raw)
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object")
    return parsed


def json_response(status_code: int, body: Mapping[str, Any]) -> Response:
    return {
        "statusCode": status_code,
        "headers": {**CORS_HEADERS, "Content-Type": "application/json"},
        "body": json.dumps(body, ensure_ascii=False),
    }


def _handle(
    request: Request,
    context: ServiceContext,
    run: Callable[[str, Mapping[str, Any]], NotificationResult],
    *,
    route: str,
) -> Response:
    method = str(request.get("httpMethod") or "POST").upper()
    if method == "OPTIONS":
        return {"statusCode": 200, "headers": dict(CORS_HEADERS), "body": ""}
    if method != "POST":
        return json_response(405, {"success": False, "error": f"Method not allowed: {method}"})

    try:
        user_id = authenticate(request, context.store)
        body = get_json_body(request)
        result = run(user_id, body)
    except OrderError as exc:
        print(f"[FUNCTION ERROR] route={route} status={exc.status_code} error={exc}")
        return json_response(exc.status_code, failure_result(exc))
    except ValueError as exc:
        print(f"[FUNCTION BAD REQUEST] route={route} error={exc}")
        return json_response(400, {"success": False, "error": str(exc)})

    return json_response(200, result)

