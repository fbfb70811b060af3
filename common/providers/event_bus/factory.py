from typing import Optional

from common.core.otel_axiom_exporter import get_logger

from .interface import EventBusInterface
from .rabbitmq_event_bus import RabbitMQEventBus

logger = get_logger(__name__)

# Global instance
_event_bus: Optional[EventBusInterface] = None


def get_event_bus() -> EventBusInterface:
    """
    Get the configured event bus.

    Returns:
        EventBusInterface: The event bus instance
    """
    global _event_bus

    if _event_bus is None:
        _event_bus = RabbitMQEventBus()
        logger.info("Initialized RabbitMQ event bus")

    return _event_bus
