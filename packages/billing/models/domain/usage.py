"""
Domain models for usage metering.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat

from packages.billing.models.domain.enums import SubscriptionType


class UsageRecord(BaseModel):
    """
    A single usage report taken from a usage batch.

    Identified by the transport message id, which is unique per delivery
    but repeats when the transport redelivers the batch.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    customer_id: str
    resources_analyzed: NonNegativeFloat
    subscription_type: SubscriptionType = SubscriptionType.OTHER
    metered_price_id: Optional[str] = None
    message_id: str


class MeterEventPayload(BaseModel):
    """Stripe meter event payload; Stripe expects the value as a string."""

    stripe_customer_id: str
    value: str
    price_id: Optional[str] = None

    @classmethod
    def for_usage(
        cls, customer_id: str, value: Union[int, float], price_id: Optional[str]
    ) -> "MeterEventPayload":
        # Whole numbers are sent without a trailing ".0"
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return cls(stripe_customer_id=customer_id, value=str(value), price_id=price_id)

    def to_stripe(self) -> dict:
        return self.model_dump(exclude_none=True)


class MeterEvent(BaseModel):
    """A metering event ready to be submitted to the billing provider."""

    event_name: str
    payload: MeterEventPayload
    identifier: str
    timestamp: int = Field(ge=0)

    @property
    def idempotency_key(self) -> str:
        return f"usage-{self.identifier}-{self.timestamp}"
