from .interface import IdempotencyStoreInterface
from .models import IdempotencyRecord, IdempotencyResult
from .factory import get_idempotency_store
from .redis_idempotency import RedisIdempotencyStore
from .memory_idempotency import MemoryIdempotencyStore

__all__ = [
    "IdempotencyStoreInterface",
    "IdempotencyRecord",
    "IdempotencyResult",
    "get_idempotency_store",
    "RedisIdempotencyStore",
    "MemoryIdempotencyStore",
]
