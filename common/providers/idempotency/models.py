from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class IdempotencyRecord(BaseModel):
    """A processed event id held by the idempotency store."""

    event_id: str
    fingerprint: str
    processed_at: int
    data: Optional[Dict[str, Any]] = None


class IdempotencyResult(BaseModel):
    """Outcome of an idempotency check."""

    is_duplicate: bool
    existing_data: Optional[Dict[str, Any]] = Field(default=None)
