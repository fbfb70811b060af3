"""
Uncancellation handler - remove the triggers of a reverted cancellation.
"""

from common.core.concurrency import settle_all
from common.core.exceptions import BatchSchedulingError, NotFoundError
from common.core.otel_axiom_exporter import trace_span
from packages.billing.models.domain.subscription_change import SubscriptionSnapshot
from packages.billing.models.domain.triggers import cancellation_trigger_name
from packages.billing.services.dependencies import BillingDependencies


class UncancellationHandler:
    def __init__(self, deps: BillingDependencies):
        self.scheduler = deps.scheduler
        self.logger = deps.logger

    @trace_span
    async def revert(self, subscription: SubscriptionSnapshot) -> None:
        """
        Delete the cancellation trigger of every item.

        Triggers that do not exist are skipped; that happens when the item's
        period had already ended at scheduling time.

        Raises:
            BatchSchedulingError: If any other deletion failed
        """
        names = [
            cancellation_trigger_name(subscription.id, item.id)
            for item in subscription.items
        ]
        outcomes = await settle_all(
            (name, self.scheduler.delete_trigger(name)) for name in names
        )

        failed = []
        for outcome in outcomes:
            if isinstance(outcome.error, NotFoundError):
                self.logger.info(
                    f"Trigger {outcome.key} not found, nothing to remove",
                    extra={"subscription_id": subscription.id, "trigger_name": outcome.key},
                )
            elif outcome.failed:
                self.logger.error(
                    f"Failed to remove trigger {outcome.key}: {outcome.error}",
                    extra={
                        "subscription_id": subscription.id,
                        "trigger_name": outcome.key,
                        "error": str(outcome.error),
                    },
                )
                failed.append(outcome)

        if failed:
            raise BatchSchedulingError(len(failed), len(outcomes))

        self.logger.info(
            f"Removed cancellation triggers for {subscription.id}",
            extra={"subscription_id": subscription.id, "item_count": len(names)},
        )
