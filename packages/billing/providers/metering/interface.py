"""
Interface for metering providers.

Abstracts usage metering away from specific billing platforms.
"""

from abc import ABC, abstractmethod
from packages.billing.models.domain.usage import MeterEvent


class MeteringProviderInterface(ABC):
    """Abstract interface for metering providers."""

    @abstractmethod
    async def submit(self, event: MeterEvent, idempotency_key: str) -> dict:
        """
        Submit a single meter event.

        A retried submission with the same idempotency key is treated as a
        duplicate by the platform instead of being counted twice.

        Args:
            event: Meter event to record
            idempotency_key: Deterministic key for this event

        Returns:
            dict with the platform's acknowledgement

        Raises:
            DependencyError: If the platform rejects the event or is unreachable
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the metering backend is available and healthy.

        Returns:
            True if healthy, False otherwise
        """
        pass
