"""
Temporal workflows run by deferred billing triggers.
"""

from .common import (
    SUBSCRIPTION_ITEM_EXPIRY_WORKFLOW,
    PUBLISH_SUBSCRIPTION_ITEM_EXPIRED_ACTIVITY,
)
from .subscription_item_expiry_workflow import SubscriptionItemExpiryWorkflow

__all__ = [
    "SUBSCRIPTION_ITEM_EXPIRY_WORKFLOW",
    "PUBLISH_SUBSCRIPTION_ITEM_EXPIRED_ACTIVITY",
    "SubscriptionItemExpiryWorkflow",
]
