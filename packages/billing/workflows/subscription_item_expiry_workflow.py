"""
Workflow started by a cancellation trigger when an item's billing period ends.
"""

from datetime import timedelta
from typing import Any, Dict

from temporalio import workflow
from temporalio.common import RetryPolicy

from .common import (
    PUBLISH_SUBSCRIPTION_ITEM_EXPIRED_ACTIVITY,
    SUBSCRIPTION_ITEM_EXPIRY_WORKFLOW,
)


@workflow.defn(name=SUBSCRIPTION_ITEM_EXPIRY_WORKFLOW)
class SubscriptionItemExpiryWorkflow:
    @workflow.run
    async def run(self, payload: Dict[str, Any]) -> None:
        """Announce that a cancelled subscription item has expired."""
        workflow.logger.info(
            f"Subscription item {payload.get('item_id')} of "
            f"{payload.get('subscription_id')} expired"
        )

        await workflow.execute_activity(
            PUBLISH_SUBSCRIPTION_ITEM_EXPIRED_ACTIVITY,
            args=[payload],
            start_to_close_timeout=timedelta(minutes=1),
            retry_policy=RetryPolicy(
                initial_interval=timedelta(seconds=5),
                maximum_attempts=10,
            ),
        )
