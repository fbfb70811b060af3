"""
Domain events published to the event bus.

Event details are serialized in camelCase for downstream consumers; use
`to_detail()` rather than `model_dump()`.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from packages.billing.models.domain.subscription_change import SubscriptionSnapshot


class EventDetail(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_detail(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class CancelledItemDetail(EventDetail):
    item_id: str
    price_id: str
    product_id: str
    quantity: int
    expires_at: int
    metadata: Dict[str, Any] = Field(default_factory=dict)


class SubscriptionCancelledDetail(EventDetail):
    """Summary of a cancelled subscription with its flattened item list."""

    stripe_subscription_id: str
    stripe_customer_id: str
    cancel_at: Optional[int] = None
    cancel_at_period_end: bool
    items: List[CancelledItemDetail] = Field(default_factory=list)

    @classmethod
    def from_snapshot(
        cls, subscription: SubscriptionSnapshot
    ) -> "SubscriptionCancelledDetail":
        return cls(
            stripe_subscription_id=subscription.id,
            stripe_customer_id=subscription.customer_id,
            cancel_at=subscription.cancel_at,
            cancel_at_period_end=subscription.cancel_at_period_end,
            items=[
                CancelledItemDetail(
                    item_id=item.id,
                    price_id=item.price_id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    expires_at=item.period_end,
                    metadata=item.metadata,
                )
                for item in subscription.items
            ],
        )


class SubscriptionItemExpiredDetail(EventDetail):
    """Published when the deferred trigger of a cancelled item fires."""

    stripe_subscription_id: str
    stripe_customer_id: str
    item_id: str
    status: str
    cancel_at_period_end: bool
    expired_at: int
