from abc import ABC, abstractmethod
from typing import Any, Dict


class EventBusInterface(ABC):
    """Interface for publishing domain events."""

    @abstractmethod
    async def connect(self) -> None:
        """
        Raises:
            DependencyError: If the bus cannot be reached
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        pass

    @abstractmethod
    async def publish(self, topic: str, detail: Dict[str, Any]) -> None:
        """
        Publish a domain event.

        Args:
            topic: Event type, e.g. "SubscriptionCancelled"
            detail: JSON-serialisable event body

        Raises:
            DependencyError: If the event could not be published
        """
        pass
