from typing import Optional
import redis.asyncio as redis
from redis.exceptions import RedisError

from common.core.config import settings
from common.core.exceptions import DependencyError
from common.core.otel_axiom_exporter import get_logger
from .interface import IdempotencyStoreInterface
from .models import IdempotencyRecord

logger = get_logger(__name__)


class RedisIdempotencyStore(IdempotencyStoreInterface):
    """Redis-backed idempotency store using SET NX EX as the atomic check-and-set."""

    def __init__(self):
        self.host = settings.redis_host
        self.port = settings.redis_port
        self.password = settings.redis_password
        self.db = settings.redis_db
        self._client: Optional[redis.Redis] = None
        self._key_prefix = settings.idempotency_key_prefix
        self._connected = False

    async def connect(self) -> bool:
        """Connect to Redis."""
        try:
            self._client = redis.Redis(
                host=self.host,
                port=self.port,
                password=self.password,
                db=self.db,
                decode_responses=True,
            )
            # Test connection
            await self._client.ping()
            self._connected = True
            logger.info("Redis idempotency store connected")
            return True
        except RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self._connected = False
            return False

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self._client:
            await self._client.aclose()
            self._connected = False
            logger.info("Redis idempotency store disconnected")

    async def _ensure_connected(self) -> None:
        """Ensure Redis connection is active."""
        if not self._connected and not await self.connect():
            raise DependencyError("Idempotency store is unavailable")

    def _key(self, event_id: str) -> str:
        return f"{self._key_prefix}{event_id}"

    async def claim(self, record: IdempotencyRecord, ttl_seconds: int) -> bool:
        await self._ensure_connected()

        try:
            stored = await self._client.set(
                self._key(record.event_id),
                record.model_dump_json(),
                nx=True,  # Only set if not exists
                ex=ttl_seconds,
            )
        except RedisError as e:
            logger.error(
                f"Error claiming idempotency key {record.event_id}: {e}",
                extra={"event_id": record.event_id},
            )
            raise DependencyError(
                f"Idempotency store failed for {record.event_id}"
            ) from e

        return bool(stored)

    async def get(self, event_id: str) -> Optional[IdempotencyRecord]:
        await self._ensure_connected()

        try:
            raw = await self._client.get(self._key(event_id))
        except RedisError as e:
            logger.error(
                f"Error reading idempotency key {event_id}: {e}",
                extra={"event_id": event_id},
            )
            raise DependencyError(f"Idempotency store failed for {event_id}") from e

        if raw is None:
            return None
        return IdempotencyRecord.model_validate_json(raw)
