from .interface import EventBusInterface
from .factory import get_event_bus
from .rabbitmq_event_bus import RabbitMQEventBus

__all__ = [
    "EventBusInterface",
    "get_event_bus",
    "RabbitMQEventBus",
]
