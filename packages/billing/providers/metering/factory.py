"""
Factory for getting metering provider instance.
"""

from typing import Optional

from common.core.config import settings
from common.core.constants import MeteringProvider
from packages.billing.providers.metering.interface import MeteringProviderInterface
from packages.billing.providers.metering.noop_metering import NoOpMeteringProvider
from packages.billing.providers.metering.stripe_metering import StripeMeteringProvider

# Global instance
_metering_provider: Optional[MeteringProviderInterface] = None


def get_metering_provider() -> MeteringProviderInterface:
    """
    Get metering provider instance based on configuration.

    Returns:
        MeteringProviderInterface: Configured metering provider
    """
    global _metering_provider

    if _metering_provider is None:
        if settings.metering_provider == MeteringProvider.STRIPE:
            _metering_provider = StripeMeteringProvider()
        elif settings.metering_provider == MeteringProvider.NOOP:
            _metering_provider = NoOpMeteringProvider()
        else:
            raise ValueError(f"Unknown metering provider: {settings.metering_provider}")

    return _metering_provider
