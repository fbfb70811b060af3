from typing import Optional

from common.core.config import settings
from common.core.constants import IdempotencyProvider
from common.core.otel_axiom_exporter import get_logger

from .interface import IdempotencyStoreInterface
from .memory_idempotency import MemoryIdempotencyStore
from .redis_idempotency import RedisIdempotencyStore

logger = get_logger(__name__)

# Global instance
_idempotency_store: Optional[IdempotencyStoreInterface] = None


def get_idempotency_store() -> IdempotencyStoreInterface:
    """
    Get the configured idempotency store.

    Returns:
        IdempotencyStoreInterface: The store instance
    """
    global _idempotency_store

    if _idempotency_store is None:
        if settings.idempotency_provider == IdempotencyProvider.REDIS:
            _idempotency_store = RedisIdempotencyStore()
        elif settings.idempotency_provider == IdempotencyProvider.MEMORY:
            _idempotency_store = MemoryIdempotencyStore()
        else:
            raise ValueError(
                f"Unknown idempotency provider: {settings.idempotency_provider}"
            )
        logger.info(
            f"Initialized {settings.idempotency_provider.value} idempotency store"
        )

    return _idempotency_store
