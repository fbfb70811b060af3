"""
Stripe implementation of metering provider using Billing Meter Events.
"""

import stripe

from common.core.config import settings
from common.core.exceptions import DependencyError
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.models.domain.usage import MeterEvent
from packages.billing.providers.metering.interface import MeteringProviderInterface

logger = get_logger(__name__)


class StripeMeteringProvider(MeteringProviderInterface):
    """Stripe-based metering implementation."""

    def __init__(self):
        """Initialize Stripe with API credentials."""
        self.api_key = settings.stripe_secret_key
        stripe.api_key = self.api_key
        if settings.stripe_api_version:
            stripe.api_version = settings.stripe_api_version

    @trace_span
    async def submit(self, event: MeterEvent, idempotency_key: str) -> dict:
        try:
            meter_event = await stripe.billing.MeterEvent.create_async(
                event_name=event.event_name,
                payload=event.payload.to_stripe(),
                identifier=event.identifier,
                timestamp=event.timestamp,
                idempotency_key=idempotency_key,
            )
        except stripe.StripeError as e:
            logger.error(
                f"Stripe rejected meter event {event.identifier}: {str(e)}",
                extra={
                    "identifier": event.identifier,
                    "event_name": event.event_name,
                    "idempotency_key": idempotency_key,
                    "error": str(e),
                },
            )
            raise DependencyError(
                f"Meter event {event.identifier} was rejected: {e.user_message or str(e)}"
            ) from e

        logger.debug(
            "Recorded Stripe meter event",
            extra={"identifier": event.identifier, "event_name": event.event_name},
        )
        return {
            "identifier": meter_event.identifier,
            "event_name": meter_event.event_name,
        }

    async def health_check(self) -> bool:
        """Usable once a secret key is configured; the key is not verified remotely."""
        return bool(self.api_key)
