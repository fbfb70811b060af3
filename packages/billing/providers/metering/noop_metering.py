"""
No-op metering provider.

Used for local runs where usage must not reach a billing platform.
"""

from common.core.otel_axiom_exporter import get_logger
from packages.billing.models.domain.usage import MeterEvent
from packages.billing.providers.metering.interface import MeteringProviderInterface

logger = get_logger(__name__)


class NoOpMeteringProvider(MeteringProviderInterface):
    """No-op metering provider that only logs what it would have sent."""

    async def submit(self, event: MeterEvent, idempotency_key: str) -> dict:
        logger.info(
            f"Skipping meter event {event.identifier} (no-op metering)",
            extra={"identifier": event.identifier, "idempotency_key": idempotency_key},
        )
        return {"identifier": event.identifier, "event_name": event.event_name}

    async def health_check(self) -> bool:
        """Always healthy since there's no external dependency."""
        return True
