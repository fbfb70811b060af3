from typing import Optional

from common.core.otel_axiom_exporter import get_logger

from .interface import SchedulerProviderInterface
from .temporal_scheduler import TemporalScheduler

logger = get_logger(__name__)

# Global instance
_scheduler_provider: Optional[SchedulerProviderInterface] = None


def get_scheduler_provider() -> SchedulerProviderInterface:
    """
    Get the configured scheduler provider.

    Returns:
        SchedulerProviderInterface: The scheduler instance
    """
    global _scheduler_provider

    if _scheduler_provider is None:
        _scheduler_provider = TemporalScheduler()
        logger.info("Initialized Temporal scheduler provider")

    return _scheduler_provider
