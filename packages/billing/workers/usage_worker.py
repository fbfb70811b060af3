from typing import Optional

from common.core.config import settings
from common.core.exceptions import DependencyError
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.providers.messaging.messages import UsageBatchMessage
from common.workers.base_worker import BaseWorker
from packages.billing.services.dependencies import BillingDependencies
from packages.billing.services.usage_batch_processor import UsageBatchProcessor

logger = get_logger(__name__)


class UsageBatchWorker(BaseWorker[UsageBatchMessage]):
    """Worker that sends usage batches to the metering provider.

    A PartialSendError propagates, so the transport redelivers the whole
    batch; meter event idempotency keys absorb the duplicates.
    """

    def __init__(self, deps: Optional[BillingDependencies] = None):
        super().__init__(
            settings.usage_batch_queue,
            None,
            UsageBatchMessage,
            max_concurrent_messages=settings.usage_worker_prefetch_count,
        )
        self.deps = deps or BillingDependencies.from_settings()
        self.processor = UsageBatchProcessor(self.deps)

    async def connect_dependencies(self) -> None:
        if not await self.deps.metering.health_check():
            raise DependencyError("Metering provider is not configured or unreachable")

    @trace_span
    async def process_message(self, message: UsageBatchMessage):
        logger.info(
            f"Usage worker received batch of {len(message.records)} records",
            extra={"record_count": len(message.records)},
        )
        await self.processor.process(message.records)
