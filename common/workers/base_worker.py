from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TypeVar, Generic, Type
from uuid import uuid4

from pydantic import BaseModel, ValidationError as PydanticValidationError

from common.core.exceptions import DependencyError, ParseError
from common.core.otel_axiom_exporter import get_logger
from common.providers.messaging.factory import get_message_queue
from common.providers.messaging.interface import MessageQueueInterface

logger = get_logger(__name__)


T = TypeVar("T", bound=BaseModel)


class BaseWorker(ABC, Generic[T]):
    """Consumes one queue and hands every validated message to process_message.

    Messages are acknowledged only after process_message returns; any error
    propagates to the transport, which requeues the delivery once and then
    dead-letters it.
    """

    def __init__(
        self,
        queue_name: str,
        worker_id: Optional[str] = None,
        message_class: Optional[Type[T]] = None,
        max_concurrent_messages: int = 1,
    ):
        self.queue_name = queue_name
        self.worker_id = worker_id or f"{queue_name}_worker_{uuid4()}"
        self.message_class = message_class
        self.max_concurrent_messages = max_concurrent_messages
        self.message_queue: Optional[MessageQueueInterface] = None
        self.running = False

    @property
    def _log_context(self) -> Dict[str, str]:
        return {"worker_id": self.worker_id, "queue": self.queue_name}

    async def connect_dependencies(self) -> None:
        """Connect the providers a subclass needs before consuming."""
        pass

    async def disconnect_dependencies(self) -> None:
        pass

    async def setup(self):
        self.message_queue = get_message_queue()
        if not await self.message_queue.connect():
            raise DependencyError(f"Transport unavailable for queue {self.queue_name}")

        await self.message_queue.declare_queue(
            self.queue_name, durable=True, dlq_enabled=True
        )
        await self.connect_dependencies()

        logger.info(f"Worker {self.worker_id} ready", extra=self._log_context)

    async def cleanup(self):
        """Release the transport and providers; failures are logged, not raised."""
        try:
            if self.message_queue:
                await self.message_queue.disconnect()
            await self.disconnect_dependencies()
        except Exception as e:
            logger.error(
                f"Error releasing resources of worker {self.worker_id}: {e}",
                extra=self._log_context,
            )
            return

        logger.info(f"Worker {self.worker_id} released its resources", extra=self._log_context)

    async def start(self):
        """Consume until cancelled; resources are released on every exit path."""
        if self.running:
            logger.warning(f"Worker {self.worker_id} is already running")
            return

        self.running = True
        logger.info(
            f"Starting worker {self.worker_id} on queue {self.queue_name}",
            extra={**self._log_context, "prefetch": self.max_concurrent_messages},
        )

        try:
            await self.setup()
            await self.message_queue.consume(
                self.queue_name,
                self._message_handler,
                auto_ack=False,
                prefetch_count=self.max_concurrent_messages,
            )
        except Exception as e:
            logger.error(f"Worker {self.worker_id} stopped on error: {e}", extra=self._log_context)
            raise
        finally:
            self.running = False
            await self.cleanup()

    async def stop(self):
        self.running = False
        logger.info(f"Stopping worker {self.worker_id}", extra=self._log_context)

    def _parse(self, message: Dict[str, Any]) -> Any:
        if self.message_class is None:
            return message
        try:
            return self.message_class.model_validate(message)
        except PydanticValidationError as e:
            logger.error(
                f"Message on {self.queue_name} is not a valid {self.message_class.__name__}",
                extra={**self._log_context, "error": str(e)},
            )
            raise ParseError(
                f"Invalid {self.message_class.__name__} message: {e.error_count()} errors"
            ) from e

    async def _message_handler(self, message: Dict[str, Any]):
        parsed_message = self._parse(message)

        try:
            await self.process_message(parsed_message)
        except Exception as e:
            logger.error(
                f"Error processing message in worker {self.worker_id}: {e}",
                extra=self._log_context,
                exc_info=True,
            )
            raise

        logger.info(f"Worker {self.worker_id} processed message", extra=self._log_context)

    @abstractmethod
    async def process_message(self, message: T):
        """Handle one validated message. Must be implemented by subclasses."""
        pass
