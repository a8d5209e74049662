"""WifiRic order wizard and Discord notification service."""

from .facade import (
    AuthenticationError,
    ConsoleDiscord,
    ConsoleOrderNotifier,
    HttpOrderNotifier,
    Identity,
    InMemoryOrderStore,
    InMemoryServiceStore,
    KafkaOrderNotifier,
    NotificationError,
    OrderDraft,
    OrderError,
    OrderIdConflictError,
    OrderType,
    OrderWizard,
    PersistenceError,
    ProjectType,
    ServiceContext,
    StaticIdentityProvider,
    SubmissionState,
    SupabaseOrderStore,
    WizardStep,
    dispatch,
    handle_batch,
    handle_message,
    process_contact_notification,
    process_deletion_notification,
    process_order_notification,
    publish_order_event,
    run_notification_worker_forever,
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
