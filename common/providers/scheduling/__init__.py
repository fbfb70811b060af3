from .interface import SchedulerProviderInterface
from .factory import get_scheduler_provider
from .temporal_scheduler import TemporalScheduler

__all__ = [
    "SchedulerProviderInterface",
    "get_scheduler_provider",
    "TemporalScheduler",
]
