import asyncio
import time
from dataclasses import dataclass
from typing import Dict, Optional

from .interface import IdempotencyStoreInterface
from .models import IdempotencyRecord
from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)


@dataclass
class _Entry:
    record: IdempotencyRecord
    expires_at: float

    def is_expired(self) -> bool:
        return time.time() > self.expires_at


class MemoryIdempotencyStore(IdempotencyStoreInterface):
    """In-process idempotency store for local runs and tests."""

    def __init__(self):
        self._entries: Dict[str, _Entry] = {}
        self._lock = asyncio.Lock()
        logger.info("Memory idempotency store initialized")

    async def connect(self) -> bool:
        return True

    async def disconnect(self) -> None:
        pass

    async def claim(self, record: IdempotencyRecord, ttl_seconds: int) -> bool:
        async with self._lock:
            entry = self._entries.get(record.event_id)
            if entry is not None and not entry.is_expired():
                return False

            self._entries[record.event_id] = _Entry(
                record=record, expires_at=time.time() + ttl_seconds
            )
            return True

    async def get(self, event_id: str) -> Optional[IdempotencyRecord]:
        async with self._lock:
            entry = self._entries.get(event_id)
            if entry is None:
                return None
            if entry.is_expired():
                del self._entries[event_id]
                return None
            return entry.record
