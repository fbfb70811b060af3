"""Billing workers."""

from packages.billing.workers.subscription_update_worker import SubscriptionUpdateWorker
from packages.billing.workers.usage_worker import UsageBatchWorker
from packages.billing.workers.temporal_worker import BillingTemporalWorker

__all__ = [
    "SubscriptionUpdateWorker",
    "UsageBatchWorker",
    "BillingTemporalWorker",
]
