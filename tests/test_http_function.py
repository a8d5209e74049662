from __future__ import annotations

import json
import unittest
from typing import Any
from unittest import mock

from orders.adapters.fake_backends import ConsoleDiscord, InMemoryServiceStore
from orders.adapters.http_function import (
    CORS_HEADERS,
    dispatch,
    get_header,
    handle_contact_request,
    handle_deletion_request,
    handle_order_request,
)
from orders.adapters.service_context import ServiceContext
from orders.adapters.supabase_rest import SupabaseClient

ORDER_BODY: dict[str, Any] = {
    "order_id": "12345678",
    "site_type": "vitrine",
    "site_type_other": None,
    "site_name": "Acme",
    "logo_urls": ["https://x.test/logo.png"],
    "primary_color": "#3B82F6",
    "secondary_color": "#9CD4E3",
    "other_colors": [],
    "specific_instructions": None,
    "description": "A clean and modern business site for Acme Corp",
    "budget": 800,
    "budget_text": None,
    "full_name": "Jane Doe",
    "email": "jane@acme.com",
}


def make_context(**discord_kwargs: Any) -> ServiceContext:
    discord = ConsoleDiscord(echo=False, **discord_kwargs)
    store = InMemoryServiceStore(
        tokens={"good-token": "user-1"},
        profiles={"user-1": {"username": "jane", "discord_id": "42"}},
    )
    return ServiceContext(store=store, discord=discord, category_id=discord.category_id)


def make_request(
    body: Any = None, *, token: str | None = "good-token", method: str = "POST"
) -> dict[str, Any]:
    headers = {"content-type": "application/json"}
    if token is not None:
        headers["authorization"] = f"Bearer {token}"
    return {
        "httpMethod": method,
        "headers": headers,
        "body": json.dumps(ORDER_BODY if body is None else body),
    }


def response_json(response: dict[str, Any]) -> dict[str, Any]:
    return json.loads(response["body"])


class OrderFunctionTests(unittest.TestCase):
    def test_success_returns_channel(self) -> None:
        context = make_context()
        response = handle_order_request(make_request(), context)

        self.assertEqual(response["statusCode"], 200)
        body = response_json(response)
        self.assertEqual(body["success"], True)
        self.assertEqual(body["channelName"], "📦・𝟏𝟐𝟑𝟒𝟓𝟔𝟕𝟖")
        self.assertEqual(response["headers"]["Access-Control-Allow-Origin"], "*")

    def test_preflight_returns_cors_headers_only(self) -> None:
        response = handle_order_request(make_request(method="OPTIONS", token=None), make_context())
        self.assertEqual(response, {"statusCode": 200, "headers": CORS_HEADERS, "body": ""})

    def test_other_methods_are_rejected(self) -> None:
        response = handle_order_request(make_request(method="GET"), make_context())
        self.assertEqual(response["statusCode"], 405)

    def test_missing_bearer_is_unauthenticated(self) -> None:
        response = handle_order_request(make_request(token=None), make_context())
        self.assertEqual(response["statusCode"], 401)
        self.assertEqual(response_json(response), {"success": False, "error": "Non authentifié"})

    def test_unknown_token_is_an_invalid_user(self) -> None:
        response = handle_order_request(make_request(token="stale"), make_context())
        self.assertEqual(response["statusCode"], 401)
        self.assertEqual(response_json(response)["error"], "Utilisateur non valide")

    def test_invalid_body_is_a_bad_request(self) -> None:
        response = handle_order_request(
            make_request(ORDER_BODY | {"order_id": "123"}), make_context()
        )
        self.assertEqual(response["statusCode"], 400)
        self.assertEqual(response_json(response)["success"], False)

    def test_non_json_body_is_a_bad_request(self) -> None:
        request = make_request()
        request["body"] = "not json"
        response = handle_order_request(request, make_context())
        self.assertEqual(response["statusCode"], 400)

    def test_channel_creation_failure_returns_500_with_details(self) -> None:
        response = handle_order_request(make_request(), make_context(fail_on={"create_channel"}))

        self.assertEqual(response["statusCode"], 500)
        self.assertEqual(
            response_json(response),
            {
                "success": False,
                "error": "Impossible de créer le salon Discord",
                "details": "simulated failure",
            },
        )


    @mock.patch("orders.adapters.supabase_rest.urllib.request.urlopen")
    def test_garbled_upstream_reply_is_not_a_bad_request(self, urlopen_mock: mock.Mock) -> None:
        response_obj = urlopen_mock.return_value.__enter__.return_value
        response_obj.getcode.return_value = 200
        response_obj.read.return_value = b"<html>gateway timeout</html>"
        discord = ConsoleDiscord(echo=False)
        context = ServiceContext(
            store=SupabaseClient(url="https://db.test", api_key="service-key"),
            discord=discord,
            category_id=discord.category_id,
        )

        response = handle_order_request(make_request(), context)

        self.assertEqual(response["statusCode"], 502)
        self.assertEqual(response_json(response)["success"], False)


class OtherFunctionTests(unittest.TestCase):
    def test_contact_function(self) -> None:
        body = {"name": "Jane", "email": "jane@acme.com", "subject": "Hi", "message": "Hello"}
        response = handle_contact_request(make_request(body), make_context())

        self.assertEqual(response["statusCode"], 200)
        self.assertRegex(response_json(response)["contactId"], r"^[0-9]{8}$")

    def test_contact_function_requires_message(self) -> None:
        body = {"name": "Jane", "email": "jane@acme.com", "subject": "Hi"}
        response = handle_contact_request(make_request(body), make_context())
        self.assertEqual(response["statusCode"], 400)

    def test_deletion_function_skips_unknown_channel(self) -> None:
        body = {"type": "order", "item_id": "12345678", "channel_name": "📦・𝟏"}
        response = handle_deletion_request(make_request(body), make_context())

        self.assertEqual(response["statusCode"], 200)
        self.assertIn("skipping", response_json(response)["message"])

    def test_dispatch_routes_by_path(self) -> None:
        response = dispatch("/send-order-to-discord", make_request(), make_context())
        self.assertEqual(response["statusCode"], 200)

        missing = dispatch("/nope", make_request(), make_context())
        self.assertEqual(missing["statusCode"], 404)

    def test_get_header_is_case_insensitive(self) -> None:
        request = {"headers": {"AUTHORIZATION": "Bearer x"}}
        self.assertEqual(get_header(request, "Authorization"), "Bearer x")
        self.assertIsNone(get_header({}, "Authorization"))


if __name__ == "__main__":
    unittest.main()
