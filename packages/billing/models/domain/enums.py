"""
Billing enums - strongly typed enumerations for subscription and usage states.
"""

from enum import Enum
from typing import Any


class SubscriptionStatus(str, Enum):
    """Stripe subscription status values."""

    INCOMPLETE = "incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired"
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    UNPAID = "unpaid"
    PAUSED = "paused"


class SubscriptionType(str, Enum):
    """
    Product tier reported on usage records.

    TEAM and ENTERPRISE usage is billed against a single enterprise price;
    every other tier is billed against the record's own metered price.
    """

    PRO = "PRO"
    TEAM = "TEAM"
    ENTERPRISE = "ENTERPRISE"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: Any) -> "SubscriptionType":
        """Map a raw tier value to a member; unknown or missing tiers are OTHER."""
        if isinstance(value, str):
            try:
                return cls(value.upper())
            except ValueError:
                pass
        return cls.OTHER

    def uses_enterprise_pricing(self) -> bool:
        return self in (SubscriptionType.TEAM, SubscriptionType.ENTERPRISE)


class ChangeVerdictType(str, Enum):
    """Outcome of classifying a subscription change notification."""

    CANCELLATION_REQUESTED = "cancellation_requested"
    CANCELLATION_REVERTED = "cancellation_reverted"
    OTHER_CHANGE = "other_change"


class DomainEventType(str, Enum):
    """Detail types published on the event bus."""

    SUBSCRIPTION_CANCELLED = "SubscriptionCancelled"
    SUBSCRIPTION_ITEM_EXPIRED = "SubscriptionItemExpired"
