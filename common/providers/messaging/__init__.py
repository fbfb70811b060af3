from .interface import MessageQueueInterface, MessageCallback
from .rabbitmq_async import RabbitMQClient
from .factory import get_message_queue
from .messages import QueuedRecord, UsageBatchMessage

__all__ = [
    "MessageQueueInterface",
    "MessageCallback",
    "RabbitMQClient",
    "get_message_queue",
    "QueuedRecord",
    "UsageBatchMessage",
]
