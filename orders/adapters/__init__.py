"""Adapter layer: transport mapping and Supabase/Discord/Kafka implementations."""

from .consumer_handler import handle_batch, handle_message
from .discord_rest import DiscordApiError, DiscordClient
from .fake_backends import (
    ConsoleDiscord,
    ConsoleOrderNotifier,
    InMemoryOrderStore,
    InMemoryServiceStore,
    StaticIdentityProvider,
)
from .function_client import HttpOrderNotifier
from .http_function import (
    dispatch,
    handle_contact_request,
    handle_deletion_request,
    handle_order_request,
)
from .kafka_runtime import KafkaOrderNotifier, publish_order_event, run_notification_worker_forever
from .payload import parse_event_payload, parse_order_request
from .service_context import ServiceContext
from .supabase_rest import SupabaseClient, SupabaseOrderStore

__all__ = [
    "ConsoleDiscord",
    "ConsoleOrderNotifier",
    "DiscordApiError",
    "DiscordClient",
    "HttpOrderNotifier",
    "InMemoryOrderStore",
    "InMemoryServiceStore",
    "KafkaOrderNotifier",
    "ServiceContext",
    "StaticIdentityProvider",
    "SupabaseClient",
    "SupabaseOrderStore",
    "dispatch",
    "handle_batch",
    "handle_contact_request",
    "handle_deletion_request",
    "handle_message",
    "handle_order_request",
    "parse_event_payload",
    "parse_order_request",
    "publish_order_event",
    "run_notification_worker_forever",
]
