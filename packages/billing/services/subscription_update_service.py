"""
Subscription update service - dispatches a classified change to its handler.
"""

from typing import Optional

from common.core.otel_axiom_exporter import trace_span
from packages.billing.models.domain.enums import ChangeVerdictType
from packages.billing.models.domain.subscription_change import (
    ChangeVerdict,
    SubscriptionSnapshot,
)
from packages.billing.services.cancellation_scheduler import CancellationScheduler
from packages.billing.services.change_classifier import classify_change
from packages.billing.services.dependencies import BillingDependencies
from packages.billing.services.idempotency_gate import IdempotencyGate
from packages.billing.services.uncancellation_handler import UncancellationHandler


class SubscriptionUpdateService:
    """Service handling subscription change notifications."""

    def __init__(
        self,
        deps: BillingDependencies,
        cancellation_scheduler: Optional[CancellationScheduler] = None,
        uncancellation_handler: Optional[UncancellationHandler] = None,
    ):
        self.logger = deps.logger
        gate = IdempotencyGate(
            deps.idempotency_store, deps.config.idempotency_ttl_seconds, deps.logger
        )
        self.cancellation_scheduler = cancellation_scheduler or CancellationScheduler(
            deps, gate
        )
        self.uncancellation_handler = uncancellation_handler or UncancellationHandler(deps)

    @trace_span
    async def handle(self, subscription: SubscriptionSnapshot) -> ChangeVerdict:
        """
        Classify a subscription change and run the matching handler.

        Returns:
            The verdict that was acted on

        Raises:
            Any error of the dispatched handler, after logging it
        """
        verdict = classify_change(subscription)
        previous = subscription.previous_attributes

        self.logger.info(
            f"Subscription {subscription.id} change classified as {verdict.verdict.value}",
            extra={
                "subscription_id": subscription.id,
                "verdict": verdict.verdict.value,
                "status": subscription.status.value,
                "cancel_at_period_end": subscription.cancel_at_period_end,
                "cancel_at": subscription.cancel_at,
                "previous_attributes": previous.model_dump_json(exclude_unset=True),
            },
        )

        try:
            if verdict.verdict == ChangeVerdictType.CANCELLATION_REQUESTED:
                await self.cancellation_scheduler.schedule(subscription)
            elif verdict.verdict == ChangeVerdictType.CANCELLATION_REVERTED:
                await self.uncancellation_handler.revert(subscription)
            else:
                self.logger.info(
                    f"Subscription {subscription.id} updated (other change)",
                    extra={
                        "subscription_id": subscription.id,
                        "status_changed": verdict.status_changed,
                        "cancel_at_period_end_changed": verdict.cancel_at_period_end_changed,
                        "current_period_end_changed": verdict.current_period_end_changed,
                    },
                )
        except Exception as e:
            self.logger.error(
                f"Error processing subscription {subscription.id}: {str(e)}",
                extra={
                    "subscription_id": subscription.id,
                    "verdict": verdict.verdict.value,
                    "error": str(e),
                },
            )
            raise

        return verdict
