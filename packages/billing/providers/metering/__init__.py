"""Metering providers - usage events sent to the billing platform."""

from packages.billing.providers.metering.interface import MeteringProviderInterface
from packages.billing.providers.metering.stripe_metering import StripeMeteringProvider
from packages.billing.providers.metering.noop_metering import NoOpMeteringProvider
from packages.billing.providers.metering.factory import get_metering_provider

__all__ = [
    "MeteringProviderInterface",
    "StripeMeteringProvider",
    "NoOpMeteringProvider",
    "get_metering_provider",
]
