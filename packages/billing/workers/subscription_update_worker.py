from typing import Optional

from common.core.config import settings
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.workers.base_worker import BaseWorker
from packages.billing.models.domain.stripe_webhooks import (
    StripeWebhookPayload,
    StripeWebhookType,
)
from packages.billing.services.dependencies import BillingDependencies
from packages.billing.services.subscription_update_service import (
    SubscriptionUpdateService,
)

logger = get_logger(__name__)


class SubscriptionUpdateWorker(BaseWorker[StripeWebhookPayload]):
    """Worker that handles customer.subscription.updated notifications."""

    def __init__(self, deps: Optional[BillingDependencies] = None):
        super().__init__(
            settings.subscription_updated_queue, None, StripeWebhookPayload
        )
        self.deps = deps or BillingDependencies.from_settings()
        self.service = SubscriptionUpdateService(self.deps)

    async def connect_dependencies(self) -> None:
        await self.deps.idempotency_store.connect()
        await self.deps.event_bus.connect()

    async def disconnect_dependencies(self) -> None:
        await self.deps.event_bus.disconnect()
        await self.deps.idempotency_store.disconnect()

    @trace_span
    async def process_message(self, message: StripeWebhookPayload):
        if message.type != StripeWebhookType.SUBSCRIPTION_UPDATED:
            logger.info(
                f"Ignoring {message.type.value} event {message.id}",
                extra={"event_id": message.id, "event_type": message.type.value},
            )
            return

        snapshot = message.to_snapshot()
        logger.info(
            f"Processing subscription update {message.id} for {snapshot.id}",
            extra={
                "event_id": message.id,
                "subscription_id": snapshot.id,
                "customer_id": snapshot.customer_id,
                "event_created": message.created,
            },
        )
        verdict = await self.service.handle(snapshot)

        logger.info(
            f"Processed subscription update {message.id}",
            extra={"event_id": message.id, "verdict": verdict.verdict.value},
        )
