"""
Capability set handed to the billing components.

Components receive their collaborators through BillingDependencies instead of
reaching for provider factories themselves; tests build one from mocks.
"""

import logging
from dataclasses import dataclass, field

from common.core.config import settings
from common.core.otel_axiom_exporter import get_logger
from common.providers.event_bus import EventBusInterface, get_event_bus
from common.providers.idempotency import (
    IdempotencyStoreInterface,
    get_idempotency_store,
)
from common.providers.scheduling import (
    SchedulerProviderInterface,
    get_scheduler_provider,
)
from packages.billing.providers.metering import (
    MeteringProviderInterface,
    get_metering_provider,
)


@dataclass(frozen=True)
class BillingConfig:
    """Billing values the components read at call time."""

    standard_event_name: str
    enterprise_event_name: str
    enterprise_price_id: str
    idempotency_ttl_seconds: int

    @classmethod
    def from_settings(cls) -> "BillingConfig":
        return cls(
            standard_event_name=settings.metering_standard_event_name,
            enterprise_event_name=settings.metering_enterprise_event_name,
            enterprise_price_id=settings.stripe_enterprise_usage_price_id,
            idempotency_ttl_seconds=settings.idempotency_ttl_seconds,
        )


@dataclass
class BillingDependencies:
    scheduler: SchedulerProviderInterface
    event_bus: EventBusInterface
    metering: MeteringProviderInterface
    idempotency_store: IdempotencyStoreInterface
    config: BillingConfig = field(default_factory=BillingConfig.from_settings)
    logger: logging.Logger = field(
        default_factory=lambda: get_logger("packages.billing")
    )

    @classmethod
    def from_settings(cls) -> "BillingDependencies":
        """Build the capability set from the configured provider factories."""
        return cls(
            scheduler=get_scheduler_provider(),
            event_bus=get_event_bus(),
            metering=get_metering_provider(),
            idempotency_store=get_idempotency_store(),
        )
