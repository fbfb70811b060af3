"""
Classify subscription change notifications.

Precedence, first match wins:

1. cancellation requested: cancel_at_period_end is set, or the status is canceled
2. cancellation reverted: cancel_at went from a value to null, or
   cancel_at_period_end went from true to false
3. any other change
"""

from packages.billing.models.domain.enums import ChangeVerdictType, SubscriptionStatus
from packages.billing.models.domain.subscription_change import (
    ChangeVerdict,
    SubscriptionSnapshot,
)


def _is_cancellation_requested(subscription: SubscriptionSnapshot) -> bool:
    return (
        subscription.cancel_at_period_end is True
        or subscription.status == SubscriptionStatus.CANCELED
    )


def _is_cancellation_reverted(subscription: SubscriptionSnapshot) -> bool:
    previous = subscription.previous_attributes

    cancel_at_cleared = (
        previous.changed("cancel_at")
        and previous.cancel_at is not None
        and subscription.cancel_at is None
    )
    period_end_flag_cleared = (
        previous.changed("cancel_at_period_end")
        and previous.cancel_at_period_end is True
        and subscription.cancel_at_period_end is False
    )
    return cancel_at_cleared or period_end_flag_cleared


def classify_change(subscription: SubscriptionSnapshot) -> ChangeVerdict:
    """Return the single verdict for a subscription change notification."""
    previous = subscription.previous_attributes
    flags = {
        "cancel_at_period_end_changed": previous.changed("cancel_at_period_end"),
        "current_period_end_changed": previous.changed("current_period_end"),
        "status_changed": previous.changed("status"),
    }

    if _is_cancellation_requested(subscription):
        return ChangeVerdict(verdict=ChangeVerdictType.CANCELLATION_REQUESTED, **flags)
    if _is_cancellation_reverted(subscription):
        return ChangeVerdict(verdict=ChangeVerdictType.CANCELLATION_REVERTED, **flags)
    return ChangeVerdict(verdict=ChangeVerdictType.OTHER_CHANGE, **flags)
