"""
Idempotency gate - at most one side effect per logical event id.
"""

import hashlib
import json
import logging
import time
from typing import Any, Dict, Optional

from common.core.otel_axiom_exporter import trace_span
from common.providers.idempotency import (
    IdempotencyRecord,
    IdempotencyResult,
    IdempotencyStoreInterface,
)


def generate_event_id(
    event_type: str, resource_id: str, timestamp: Optional[int] = None
) -> str:
    """
    Build the logical event id for a side effect.

    Args:
        event_type: Verb describing the side effect, e.g. "subscription-cancelled"
        resource_id: Id of the resource the side effect applies to
        timestamp: Optional discriminator for effects that may legitimately repeat

    Returns:
        "{event_type}-{resource_id}" or "{event_type}-{resource_id}-{timestamp}"
    """
    if timestamp is not None:
        return f"{event_type}-{resource_id}-{timestamp}"
    return f"{event_type}-{resource_id}"


def fingerprint(payload: Dict[str, Any]) -> str:
    """Stable sha256 of a payload's canonical JSON form."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


class IdempotencyGate:
    """Check-and-record layer over an idempotency store."""

    def __init__(
        self,
        store: IdempotencyStoreInterface,
        ttl_seconds: int,
        logger: logging.Logger,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.logger = logger

    @trace_span
    async def ensure(self, event_id: str, payload: Dict[str, Any]) -> IdempotencyResult:
        """
        Claim an event id.

        The claim is a single atomic put-if-absent, so of several concurrent
        callers for the same id exactly one sees is_duplicate=False.

        Raises:
            DependencyError: If the store fails; the caller must not perform
                the side effect.
        """
        record = IdempotencyRecord(
            event_id=event_id,
            fingerprint=fingerprint(payload),
            processed_at=int(time.time()),
            data=payload,
        )

        if await self.store.claim(record, self.ttl_seconds):
            self.logger.info(
                f"Claimed event {event_id}",
                extra={"event_id": event_id},
            )
            return IdempotencyResult(is_duplicate=False)

        existing = await self.store.get(event_id)
        if existing is not None and existing.fingerprint != record.fingerprint:
            self.logger.warning(
                f"Event {event_id} was already processed with a different payload",
                extra={"event_id": event_id},
            )

        self.logger.info(
            f"Event {event_id} already processed, skipping",
            extra={"event_id": event_id},
        )
        return IdempotencyResult(
            is_duplicate=True,
            existing_data=existing.data if existing is not None else None,
        )
