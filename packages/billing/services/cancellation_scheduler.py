"""
Cancellation scheduler - one deferred trigger per billable item.

Each item of a cancelled subscription gets a trigger that fires at the end
of the item's billing period. Trigger names are derived from the
subscription and item ids, so a redelivered notification lands on the same
trigger and is applied as an update.
"""

import time
from typing import List

from common.core.concurrency import failures, settle_all
from common.core.exceptions import BatchSchedulingError, ConflictError
from common.core.otel_axiom_exporter import trace_span
from packages.billing.models.domain.enums import DomainEventType
from packages.billing.models.domain.events import SubscriptionCancelledDetail
from packages.billing.models.domain.subscription_change import (
    SubscriptionItem,
    SubscriptionSnapshot,
)
from packages.billing.models.domain.triggers import (
    CancellationTriggerPayload,
    ScheduledTrigger,
    cancellation_trigger_name,
)
from packages.billing.services.dependencies import BillingDependencies
from packages.billing.services.idempotency_gate import IdempotencyGate, generate_event_id

CANCELLATION_EVENT_TYPE = "subscription-cancelled"


def build_trigger(
    subscription: SubscriptionSnapshot, item: SubscriptionItem
) -> ScheduledTrigger:
    return ScheduledTrigger(
        name=cancellation_trigger_name(subscription.id, item.id),
        fire_at=item.period_end,
        payload=CancellationTriggerPayload(
            customer_id=subscription.customer_id,
            subscription_id=subscription.id,
            item_id=item.id,
            status=subscription.status,
            cancel_at_period_end=subscription.cancel_at_period_end,
        ),
    )


class CancellationScheduler:
    """Schedules per-item cancellation triggers and announces the cancellation."""

    def __init__(self, deps: BillingDependencies, gate: IdempotencyGate):
        self.scheduler = deps.scheduler
        self.event_bus = deps.event_bus
        self.logger = deps.logger
        self.gate = gate

    async def _upsert(self, trigger: ScheduledTrigger) -> None:
        payload = trigger.payload.model_dump(mode="json")
        try:
            await self.scheduler.create_trigger(trigger.name, trigger.fire_at, payload)
        except ConflictError:
            self.logger.info(
                f"Trigger {trigger.name} already exists, updating it",
                extra={"trigger_name": trigger.name, "fire_at": trigger.fire_at},
            )
            await self.scheduler.update_trigger(trigger.name, trigger.fire_at, payload)

    def _pending_triggers(
        self, subscription: SubscriptionSnapshot, now: int
    ) -> List[ScheduledTrigger]:
        triggers = []
        for item in subscription.items:
            if item.period_end <= now:
                self.logger.warning(
                    f"Period of item {item.id} already ended, not scheduling a trigger",
                    extra={
                        "subscription_id": subscription.id,
                        "item_id": item.id,
                        "period_end": item.period_end,
                        "now": now,
                    },
                )
                continue
            triggers.append(build_trigger(subscription, item))
        return triggers

    @trace_span
    async def schedule(self, subscription: SubscriptionSnapshot) -> None:
        """
        Schedule cancellation triggers for every item of a subscription.

        Raises:
            BatchSchedulingError: If any item could not be scheduled; triggers
                of the other items may already exist.
            DependencyError: If the idempotency store or the event bus fails
        """
        detail = SubscriptionCancelledDetail.from_snapshot(subscription).to_detail()
        event_id = generate_event_id(CANCELLATION_EVENT_TYPE, subscription.id)

        gate_result = await self.gate.ensure(event_id, detail)
        if gate_result.is_duplicate:
            self.logger.info(
                f"Cancellation of {subscription.id} already handled",
                extra={"subscription_id": subscription.id, "event_id": event_id},
            )
            return

        triggers = self._pending_triggers(subscription, int(time.time()))
        outcomes = await settle_all(
            (trigger.name, self._upsert(trigger)) for trigger in triggers
        )

        failed = failures(outcomes)
        if failed:
            for outcome in failed:
                self.logger.error(
                    f"Failed to schedule trigger {outcome.key}: {outcome.error}",
                    extra={
                        "subscription_id": subscription.id,
                        "trigger_name": outcome.key,
                        "error": str(outcome.error),
                    },
                )
            raise BatchSchedulingError(len(failed), len(outcomes))

        self.logger.info(
            f"Scheduled {len(triggers)} cancellation triggers for {subscription.id}",
            extra={
                "subscription_id": subscription.id,
                "trigger_count": len(triggers),
                "item_count": len(subscription.items),
            },
        )

        await self.event_bus.publish(DomainEventType.SUBSCRIPTION_CANCELLED.value, detail)
