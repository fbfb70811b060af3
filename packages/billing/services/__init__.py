"""Billing services."""

from packages.billing.services.dependencies import BillingConfig, BillingDependencies
from packages.billing.services.idempotency_gate import (
    IdempotencyGate,
    generate_event_id,
)
from packages.billing.services.change_classifier import classify_change
from packages.billing.services.cancellation_scheduler import CancellationScheduler
from packages.billing.services.uncancellation_handler import UncancellationHandler
from packages.billing.services.usage_batch_processor import UsageBatchProcessor
from packages.billing.services.subscription_update_service import (
    SubscriptionUpdateService,
)

__all__ = [
    "BillingConfig",
    "BillingDependencies",
    "IdempotencyGate",
    "generate_event_id",
    "classify_change",
    "CancellationScheduler",
    "UncancellationHandler",
    "UsageBatchProcessor",
    "SubscriptionUpdateService",
]
