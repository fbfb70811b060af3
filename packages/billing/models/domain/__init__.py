"""Domain models for billing."""

from packages.billing.models.domain.enums import (
    SubscriptionStatus,
    SubscriptionType,
    ChangeVerdictType,
    DomainEventType,
)
from packages.billing.models.domain.subscription_change import (
    SubscriptionItem,
    PreviousAttributes,
    SubscriptionSnapshot,
    ChangeVerdict,
)
from packages.billing.models.domain.stripe_webhooks import (
    StripeWebhookType,
    StripeWebhookPayload,
)
from packages.billing.models.domain.usage import (
    UsageRecord,
    MeterEventPayload,
    MeterEvent,
)
from packages.billing.models.domain.triggers import (
    CancellationTriggerPayload,
    ScheduledTrigger,
    cancellation_trigger_name,
)
from packages.billing.models.domain.events import (
    CancelledItemDetail,
    SubscriptionCancelledDetail,
    SubscriptionItemExpiredDetail,
)

__all__ = [
    # Enums
    "SubscriptionStatus",
    "SubscriptionType",
    "ChangeVerdictType",
    "DomainEventType",
    # Subscription changes
    "SubscriptionItem",
    "PreviousAttributes",
    "SubscriptionSnapshot",
    "ChangeVerdict",
    # Webhooks
    "StripeWebhookType",
    "StripeWebhookPayload",
    # Usage
    "UsageRecord",
    "MeterEventPayload",
    "MeterEvent",
    # Triggers
    "CancellationTriggerPayload",
    "ScheduledTrigger",
    "cancellation_trigger_name",
    # Events
    "CancelledItemDetail",
    "SubscriptionCancelledDetail",
    "SubscriptionItemExpiredDetail",
]
