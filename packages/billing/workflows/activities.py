"""Temporal activities for subscription item expiry."""

from typing import Any, Dict

from temporalio import activity

from common.providers.event_bus import get_event_bus
from packages.billing.models.domain.enums import DomainEventType
from packages.billing.models.domain.events import SubscriptionItemExpiredDetail
from packages.billing.models.domain.triggers import CancellationTriggerPayload

from .common import PUBLISH_SUBSCRIPTION_ITEM_EXPIRED_ACTIVITY


@activity.defn(name=PUBLISH_SUBSCRIPTION_ITEM_EXPIRED_ACTIVITY)
async def publish_subscription_item_expired_activity(payload: Dict[str, Any]) -> None:
    """
    Publish SubscriptionItemExpired for a fired cancellation trigger.

    Args:
        payload: The CancellationTriggerPayload stored on the trigger
    """
    trigger = CancellationTriggerPayload.model_validate(payload)
    info = activity.info()

    detail = SubscriptionItemExpiredDetail(
        stripe_subscription_id=trigger.subscription_id,
        stripe_customer_id=trigger.customer_id,
        item_id=trigger.item_id,
        status=trigger.status.value,
        cancel_at_period_end=trigger.cancel_at_period_end,
        expired_at=int(info.scheduled_time.timestamp()),
    )

    activity.logger.info(
        f"Publishing {DomainEventType.SUBSCRIPTION_ITEM_EXPIRED.value} for item "
        f"{trigger.item_id} (attempt {info.attempt})"
    )
    await get_event_bus().publish(
        DomainEventType.SUBSCRIPTION_ITEM_EXPIRED.value, detail.to_detail()
    )
