"""Compatibility facade for order wizard and notification functions.

Module layout by abstraction layer:
- adapters: HTTP/Kafka transport, Supabase and Discord clients, fakes
- domain: draft data, validation rules, Discord message content
- application: the wizard state machine and the notification use-cases
"""

from .adapters.consumer_handler import handle_batch, handle_message
from .adapters.fake_backends import (
    ConsoleDiscord,
    ConsoleOrderNotifier,
    InMemoryOrderStore,
    InMemoryServiceStore,
    StaticIdentityProvider,
)
from .adapters.function_client import HttpOrderNotifier
from .adapters.http_function import dispatch
from .adapters.kafka_runtime import (
    KafkaOrderNotifier,
    publish_order_event,
    run_notification_worker_forever,
)
from .adapters.service_context import ServiceContext
from .adapters.supabase_rest import SupabaseOrderStore
from .application.process import (
    process_contact_notification,
    process_deletion_notification,
    process_order_notification,
)
from .application.wizard import OrderWizard, SubmissionState, WizardStep
from .domain.draft import Identity, OrderDraft, OrderType, ProjectType
from .errors import (
    AuthenticationError,
    NotificationError,
    OrderError,
    OrderIdConflictError,
    PersistenceError,
)

__all__ = [
    "AuthenticationError",
    "ConsoleDiscord",
    "ConsoleOrderNotifier",
    "HttpOrderNotifier",
    "Identity",
    "InMemoryOrderStore",
    "InMemoryServiceStore",
    "KafkaOrderNotifier",
    "NotificationError",
    "OrderDraft",
    "OrderError",
    "OrderIdConflictError",
    "OrderType",
    "OrderWizard",
    "PersistenceError",
    "ProjectType",
    "ServiceContext",
    "StaticIdentityProvider",
    "SubmissionState",
    "SupabaseOrderStore",
    "WizardStep",
    "dispatch",
    "handle_batch",
    "handle_message",
    "process_contact_notification",
    "process_deletion_notification",
    "process_order_notification",
    "publish_order_event",
    "run_notification_worker_forever",
]
