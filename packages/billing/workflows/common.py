"""Names shared between the scheduler, the workflows and the Temporal worker."""

SUBSCRIPTION_ITEM_EXPIRY_WORKFLOW = "SubscriptionItemExpiryWorkflow"
PUBLISH_SUBSCRIPTION_ITEM_EXPIRED_ACTIVITY = "publish_subscription_item_expired_activity"
