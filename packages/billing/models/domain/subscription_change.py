"""
Domain models for subscription change notifications.

A notification carries the current subscription snapshot plus a sparse diff
of the attributes that changed. The diff is held in PreviousAttributes, which
keeps only the fields the classifier compares and records which of them were
present in the notification.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, PositiveInt

from packages.billing.models.domain.enums import ChangeVerdictType, SubscriptionStatus

TRACKED_ATTRIBUTES = ("status", "cancel_at", "cancel_at_period_end", "current_period_end")


class SubscriptionItem(BaseModel):
    """A billable line item of a subscription."""

    id: str
    price_id: str
    product_id: str
    quantity: PositiveInt = 1
    period_end: int
    metadata: Dict[str, Any] = Field(default_factory=dict)


class PreviousAttributes(BaseModel):
    """
    Change set of a notification.

    A field counts as changed only if it was present in the diff, even when its
    previous value was null; use `changed()` rather than comparing to None.
    """

    # Raw value: only used to flag that the status changed
    status: Optional[str] = None
    cancel_at: Optional[int] = None
    cancel_at_period_end: Optional[bool] = None
    current_period_end: Optional[int] = None

    def changed(self, field: str) -> bool:
        return field in self.model_fields_set

    @classmethod
    def from_diff(cls, diff: Optional[Dict[str, Any]]) -> "PreviousAttributes":
        """Build the change set from a raw previous-attributes map.

        current_period_end lives on the first subscription item in recent
        Stripe API versions, so it is read from items.data[0] when the
        top-level key is missing. Keys that are not tracked are ignored.
        """
        diff = diff or {}
        values = {key: diff[key] for key in TRACKED_ATTRIBUTES if key in diff}

        if "current_period_end" not in values:
            items = (diff.get("items") or {}).get("data") or []
            if items and "current_period_end" in items[0]:
                values["current_period_end"] = items[0]["current_period_end"]

        return cls(**values)


class SubscriptionSnapshot(BaseModel):
    """Current state of a subscription as carried by one notification."""

    id: str
    customer_id: str
    status: SubscriptionStatus
    cancel_at_period_end: bool = False
    cancel_at: Optional[int] = None
    items: List[SubscriptionItem] = Field(default_factory=list)
    previous_attributes: PreviousAttributes = Field(default_factory=PreviousAttributes)


class ChangeVerdict(BaseModel):
    """Classifier output; the *_changed flags are for observability only."""

    verdict: ChangeVerdictType
    cancel_at_period_end_changed: bool = False
    current_period_end_changed: bool = False
    status_changed: bool = False
