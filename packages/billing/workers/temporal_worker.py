from typing import Optional

from temporalio.client import Client
from temporalio.worker import Worker

from common.core.config import settings
from common.core.otel_axiom_exporter import get_logger
from common.providers.event_bus import get_event_bus
from common.temporal.client import get_temporal_client
from packages.billing.workflows import SubscriptionItemExpiryWorkflow
from packages.billing.workflows.activities import (
    publish_subscription_item_expired_activity,
)

logger = get_logger(__name__)


class BillingTemporalWorker:
    """Temporal worker executing the workflows started by billing triggers."""

    def __init__(self, task_queue: Optional[str] = None):
        self.task_queue = task_queue or settings.temporal_task_queue
        self.client: Optional[Client] = None
        self.worker: Optional[Worker] = None
        self.running = False

    async def connect(self):
        """Connect to Temporal server."""
        self.client = await get_temporal_client()

    async def create_worker(self):
        if not self.client:
            await self.connect()

        logger.info(f"Creating Temporal worker for task queue: {self.task_queue}")
        self.worker = Worker(
            self.client,
            task_queue=self.task_queue,
            workflows=[SubscriptionItemExpiryWorkflow],
            activities=[publish_subscription_item_expired_activity],
        )

    async def start(self):
        """Start the Temporal worker."""
        if not self.worker:
            await self.create_worker()

        logger.info("Starting Temporal worker...")
        self.running = True

        try:
            await self.worker.run()
        except Exception as e:
            logger.error(f"Worker failed with error: {e}", exc_info=True)
            raise
        finally:
            self.running = False

    async def stop(self):
        """Stop the Temporal worker."""
        logger.info("Stopping Temporal worker...")
        self.running = False

        if self.worker and self.worker.is_running:
            await self.worker.shutdown()

        await get_event_bus().disconnect()

        logger.info("Temporal worker stopped")
