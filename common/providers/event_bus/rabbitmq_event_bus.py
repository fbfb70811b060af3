from typing import Any, Dict, Optional
import json
import time
from urllib.parse import quote

import aio_pika
from aio_pika import connect_robust, Message
from aio_pika.abc import AbstractExchange, AbstractRobustConnection
from aio_pika.exceptions import AMQPError
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from common.core.config import settings
from common.core.exceptions import DependencyError
from common.core.otel_axiom_exporter import trace_span, get_logger
from .interface import EventBusInterface

logger = get_logger(__name__)

propagator = TraceContextTextMapPropagator()


class RabbitMQEventBus(EventBusInterface):
    """Domain events published to a durable RabbitMQ topic exchange.

    The routing key is the event topic (detail type), so consumers bind
    queues to the topics they care about.
    """

    def __init__(
        self, exchange_name: Optional[str] = None, source: Optional[str] = None
    ):
        self.exchange_name = exchange_name or settings.event_bus_exchange
        self.source = source or settings.event_source
        self.connection: Optional[AbstractRobustConnection] = None
        self.exchange: Optional[AbstractExchange] = None

    async def connect(self) -> None:
        url = (
            f"amqp://{quote(settings.rabbitmq_username)}:{quote(settings.rabbitmq_password)}"
            f"@{settings.rabbitmq_host}:{settings.rabbitmq_port}/{quote(settings.rabbitmq_vhost, safe='')}"
        )
        try:
            self.connection = await connect_robust(url)
            channel = await self.connection.channel(publisher_confirms=True)
            self.exchange = await channel.declare_exchange(
                self.exchange_name, aio_pika.ExchangeType.TOPIC, durable=True
            )
        except (AMQPError, ConnectionError) as e:
            logger.error(f"Failed to connect event bus to RabbitMQ: {e}")
            raise DependencyError("Event bus is unavailable") from e

        logger.info(f"Event bus connected to exchange {self.exchange_name}")

    async def disconnect(self) -> None:
        if self.connection and not self.connection.is_closed:
            await self.connection.close()
            logger.info("Event bus disconnected")
        self.exchange = None

    @trace_span
    async def publish(self, topic: str, detail: Dict[str, Any]) -> None:
        if self.exchange is None:
            await self.connect()

        envelope = {
            "source": self.source,
            "detail-type": topic,
            "time": int(time.time()),
            "detail": detail,
        }

        # Inject trace context into headers
        headers: Dict[str, Any] = {}
        propagator.inject(headers)

        try:
            await self.exchange.publish(
                Message(
                    body=json.dumps(envelope).encode(),
                    delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
                    content_type="application/json",
                    headers=headers,
                    type=topic,
                    app_id=self.source,
                ),
                routing_key=topic,
            )
        except (AMQPError, ConnectionError) as e:
            logger.error(
                f"Failed to publish {topic} event: {e}",
                extra={"topic": topic, "error": str(e)},
            )
            raise DependencyError(f"Failed to publish {topic} event") from e

        logger.info(f"Published {topic} event", extra={"topic": topic})
