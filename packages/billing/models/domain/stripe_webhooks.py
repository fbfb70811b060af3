"""
Domain models for Stripe webhook payloads.

Strongly-typed Pydantic models for the subscription events delivered by the
Stripe payment platform.
"""

from typing import Optional, Any, Dict, List, Union
from enum import Enum
from pydantic import BaseModel, Field, field_validator

from packages.billing.models.domain.enums import SubscriptionStatus
from packages.billing.models.domain.subscription_change import (
    PreviousAttributes,
    SubscriptionItem,
    SubscriptionSnapshot,
)


class StripeWebhookType(str, Enum):
    """Stripe webhook event types we care about."""

    SUBSCRIPTION_CREATED = "customer.subscription.created"
    SUBSCRIPTION_UPDATED = "customer.subscription.updated"
    SUBSCRIPTION_DELETED = "customer.subscription.deleted"


class StripePriceData(BaseModel):
    """Price reference on a subscription item."""

    id: str
    product: Union[str, Dict[str, Any]]

    @property
    def product_id(self) -> str:
        # The product is expanded to an object on some API calls
        if isinstance(self.product, dict):
            return self.product["id"]
        return self.product


class StripeSubscriptionItemData(BaseModel):
    """Stripe subscription item object."""

    id: str
    price: StripePriceData
    quantity: Optional[int] = None
    current_period_end: int
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_domain(self) -> SubscriptionItem:
        return SubscriptionItem(
            id=self.id,
            price_id=self.price.id,
            product_id=self.price.product_id,
            quantity=self.quantity or 1,
            period_end=self.current_period_end,
            metadata=self.metadata,
        )


class StripeSubscriptionItemList(BaseModel):
    """Stripe list wrapper for subscription items."""

    data: List[StripeSubscriptionItemData] = Field(default_factory=list)


class StripeSubscriptionData(BaseModel):
    """Stripe subscription object."""

    id: str
    customer: str
    status: SubscriptionStatus
    cancel_at_period_end: bool = False
    cancel_at: Optional[int] = None
    canceled_at: Optional[int] = None
    items: StripeSubscriptionItemList = Field(default_factory=StripeSubscriptionItemList)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("customer", mode="before")
    @classmethod
    def _customer_id(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return value.get("id")
        return value


class StripeEventData(BaseModel):
    """Stripe event data wrapper."""

    object: dict[str, Any]  # The actual object (subscription, invoice, etc.)
    previous_attributes: Optional[dict[str, Any]] = None


class StripeWebhookPayload(BaseModel):
    """Complete Stripe webhook payload."""

    id: str
    type: StripeWebhookType
    data: StripeEventData
    created: int
    livemode: bool = False

    def to_snapshot(self) -> SubscriptionSnapshot:
        """Build the subscription snapshot carried by this event.

        Raises:
            pydantic.ValidationError: If the event object is not a subscription
        """
        subscription = StripeSubscriptionData.model_validate(self.data.object)
        return SubscriptionSnapshot(
            id=subscription.id,
            customer_id=subscription.customer,
            status=subscription.status,
            cancel_at_period_end=subscription.cancel_at_period_end,
            cancel_at=subscription.cancel_at,
            items=[item.to_domain() for item in subscription.items.data],
            previous_attributes=PreviousAttributes.from_diff(
                self.data.previous_attributes
            ),
        )
