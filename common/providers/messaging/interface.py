from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict

MessageCallback = Callable[[Dict[str, Any]], Awaitable[None]]


class MessageQueueInterface(ABC):
    """Transport delivering notifications and usage batches to workers."""

    @abstractmethod
    async def connect(self) -> bool:
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        pass

    @abstractmethod
    async def consume(
        self,
        queue: str,
        callback: MessageCallback,
        auto_ack: bool = True,
        prefetch_count: int = 1,
    ) -> None:
        """
        Consume messages until cancelled.

        A callback that raises marks the delivery as failed; the message is
        requeued once and then dead-lettered.
        """
        pass

    @abstractmethod
    async def declare_queue(
        self, queue: str, durable: bool = True, dlq_enabled: bool = True
    ) -> bool:
        pass
