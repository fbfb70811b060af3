from typing import Dict, Optional
import json
import asyncio
import aio_pika
from aio_pika import connect_robust
from aio_pika.abc import AbstractChannel, AbstractIncomingMessage, AbstractRobustConnection
from urllib.parse import quote

# OpenTelemetry imports
from opentelemetry import trace
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from common.core.config import settings
from .interface import MessageCallback, MessageQueueInterface
from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)

tracer = trace.get_tracer(__name__)
propagator = TraceContextTextMapPropagator()


# Constants
class QueueConfig:
    DLQ_MESSAGE_TTL_MS = 86400000  # 24 hours
    DLQ_MAX_LENGTH = 10000
    DLX_SUFFIX = ".dlx"
    DLQ_SUFFIX = ".dlq"


class RabbitMQClient(MessageQueueInterface):
    """aio-pika transport with a dead-letter queue per work queue."""

    def __init__(self):
        self.connection: Optional[AbstractRobustConnection] = None
        self.channel: Optional[AbstractChannel] = None
        self.host = settings.rabbitmq_host
        self.port = settings.rabbitmq_port
        self.username = settings.rabbitmq_username
        self.password = settings.rabbitmq_password
        self.vhost = settings.rabbitmq_vhost

    def _url(self) -> str:
        return (
            f"amqp://{quote(self.username)}:{quote(self.password)}"
            f"@{self.host}:{self.port}/{quote(self.vhost, safe='')}"
        )

    async def _ensure_channel(self) -> None:
        if not self.channel or self.channel.is_closed:
            await self.connect()

    async def _dead_letter_arguments(self, queue_name: str) -> Dict[str, str]:
        """Declare the DLX/DLQ pair for a queue and return its queue arguments."""
        dlx_name = f"{queue_name}{QueueConfig.DLX_SUFFIX}"
        dlq_name = f"{queue_name}{QueueConfig.DLQ_SUFFIX}"

        await self.channel.declare_exchange(
            name=dlx_name, type=aio_pika.ExchangeType.DIRECT, durable=True
        )
        dlq = await self.channel.declare_queue(
            dlq_name,
            durable=True,
            arguments={
                "x-message-ttl": QueueConfig.DLQ_MESSAGE_TTL_MS,
                "x-max-length": QueueConfig.DLQ_MAX_LENGTH,
            },
        )
        await dlq.bind(dlx_name, routing_key=queue_name)
        logger.info(f"Declared dead letter queue {dlq_name} via {dlx_name}")

        return {
            "x-dead-letter-exchange": dlx_name,
            "x-dead-letter-routing-key": queue_name,
        }

    async def connect(self) -> bool:
        try:
            # Robust connection re-establishes itself after network failures
            self.connection = await connect_robust(self._url())
            self.channel = await self.connection.channel()
            logger.info("Connected to RabbitMQ")
            return True
        except Exception as e:
            logger.error(f"Failed to connect to RabbitMQ: {e}")
            return False

    async def disconnect(self) -> None:
        try:
            if self.channel and not self.channel.is_closed:
                await self.channel.close()
            if self.connection and not self.connection.is_closed:
                await self.connection.close()
            logger.info("Disconnected from RabbitMQ")
        except Exception as e:
            logger.error(f"Error disconnecting from RabbitMQ: {e}")

    async def consume(
        self,
        queue: str,
        callback: MessageCallback,
        auto_ack: bool = True,
        prefetch_count: int = 1,
    ) -> None:
        await self._ensure_channel()
        await self.channel.set_qos(prefetch_count=prefetch_count)
        await self.declare_queue(queue, durable=True, dlq_enabled=True)
        queue_obj = await self.channel.get_queue(queue)

        active_tasks: set = set()
        semaphore = asyncio.Semaphore(prefetch_count)

        async def _handle(message: AbstractIncomingMessage) -> None:
            async with semaphore:
                ctx = propagator.extract(message.headers or {})
                is_redelivered = bool(message.redelivered)

                with tracer.start_as_current_span("consume_message", context=ctx) as span:
                    span.set_attribute("messaging.system", "rabbitmq")
                    span.set_attribute("messaging.source", queue)
                    span.set_attribute("messaging.redelivered", is_redelivered)

                    try:
                        payload = json.loads(message.body.decode())
                    except (UnicodeDecodeError, json.JSONDecodeError) as e:
                        logger.error(f"Dropping undecodable message from {queue}: {e}")
                        if not auto_ack:
                            await message.reject(requeue=False)
                        return

                    try:
                        await callback(payload)
                    except Exception as e:
                        span.record_exception(e)
                        span.set_status(trace.Status(trace.StatusCode.ERROR))
                        logger.error(
                            f"Error processing message from {queue}: {e}",
                            exc_info=True,
                        )
                        if not auto_ack:
                            # First failure is requeued, a failed redelivery goes to the DLQ
                            await message.reject(requeue=not is_redelivered)
                        return

                    if not auto_ack:
                        await message.ack()

        async def _on_message(message: AbstractIncomingMessage) -> None:
            task = asyncio.create_task(_handle(message))
            active_tasks.add(task)
            task.add_done_callback(active_tasks.discard)

        logger.info(
            f"Consuming from queue {queue} with prefetch={prefetch_count}, auto_ack={auto_ack}"
        )
        await queue_obj.consume(_on_message, no_ack=auto_ack)

        try:
            await asyncio.Future()  # Run until cancelled
        except asyncio.CancelledError:
            logger.info(f"Consumer cancelled for queue {queue}")
            if active_tasks:
                logger.info(f"Waiting for {len(active_tasks)} in-flight messages...")
                await asyncio.gather(*active_tasks, return_exceptions=True)
            raise

    async def declare_queue(
        self, queue: str, durable: bool = True, dlq_enabled: bool = True
    ) -> bool:
        try:
            await self._ensure_channel()
            arguments = await self._dead_letter_arguments(queue) if dlq_enabled else None
            await self.channel.declare_queue(queue, durable=durable, arguments=arguments)
            logger.info(f"Declared queue: {queue} (DLQ enabled: {dlq_enabled})")
            return True
        except Exception as e:
            logger.error(f"Failed to declare queue {queue}: {e}")
            return False
