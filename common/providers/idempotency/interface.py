from abc import ABC, abstractmethod
from typing import Optional

from .models import IdempotencyRecord


class IdempotencyStoreInterface(ABC):
    """Interface for idempotency key-value stores."""

    @abstractmethod
    async def connect(self) -> bool:
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        pass

    @abstractmethod
    async def claim(self, record: IdempotencyRecord, ttl_seconds: int) -> bool:
        """
        Atomically record an event id if it is not already present.

        Args:
            record: The record to store under record.event_id
            ttl_seconds: Expiration time of the record in seconds

        Returns:
            True if this call stored the record, False if the id already existed

        Raises:
            DependencyError: If the store cannot be reached
        """
        pass

    @abstractmethod
    async def get(self, event_id: str) -> Optional[IdempotencyRecord]:
        """
        Read a previously stored record.

        Args:
            event_id: The event id to look up

        Returns:
            The stored record, None if absent or expired

        Raises:
            DependencyError: If the store cannot be reached
        """
        pass
