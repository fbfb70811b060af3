"""
Billing package - reacts to Stripe subscription changes and usage batches.

This package integrates with:
- Stripe: Billing meter events for usage
- Temporal: Deferred cancellation triggers per subscription item
- RabbitMQ: Notification transport and domain event bus
"""
