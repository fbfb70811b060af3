from enum import Enum


class IdempotencyProvider(str, Enum):
    """Idempotency store backends."""

    REDIS = "redis"
    MEMORY = "memory"


class MeteringProvider(str, Enum):
    """Metering backends for usage events."""

    STRIPE = "stripe"
    NOOP = "noop"
