"""
Deferred cancellation triggers.
"""

from pydantic import BaseModel

from packages.billing.models.domain.enums import SubscriptionStatus


def cancellation_trigger_name(subscription_id: str, item_id: str) -> str:
    """Deterministic trigger name for one subscription item.

    Scheduling and revert both recompute the name from the same ids, so no
    lookup of previously created triggers is needed.
    """
    return f"subscription-cancel-{subscription_id}-{item_id}"


class CancellationTriggerPayload(BaseModel):
    """Action payload delivered to the expiry workflow when a trigger fires."""

    customer_id: str
    subscription_id: str
    item_id: str
    status: SubscriptionStatus
    cancel_at_period_end: bool


class ScheduledTrigger(BaseModel):
    name: str
    fire_at: int
    payload: CancellationTriggerPayload
