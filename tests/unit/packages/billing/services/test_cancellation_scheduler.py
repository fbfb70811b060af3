import asyncio
import time

import pytest
from unittest.mock import AsyncMock

from common.core.exceptions import (
    BatchSchedulingError,
    ConflictError,
    DependencyError,
)
from common.providers.idempotency.interface import IdempotencyStoreInterface
from packages.billing.models.domain.enums import DomainEventType
from packages.billing.services.cancellation_scheduler import CancellationScheduler
from packages.billing.services.idempotency_gate import IdempotencyGate


@pytest.fixture
def gate(billing_deps):
    return IdempotencyGate(
        billing_deps.idempotency_store,
        billing_deps.config.idempotency_ttl_seconds,
        billing_deps.logger,
    )


@pytest.fixture
def cancellation_scheduler(billing_deps, gate):
    return CancellationScheduler(billing_deps, gate)


class TestCancellationScheduler:
    """Tests for per-item cancellation trigger scheduling."""

    async def test_schedules_trigger_per_item(
        self, cancellation_scheduler, mock_scheduler, make_subscription
    ):
        """Each future item gets a trigger named after subscription and item."""
        now = int(time.time())
        subscription = make_subscription(
            cancel_at_period_end=True, period_ends=[now + 3600, now + 7200]
        )

        await cancellation_scheduler.schedule(subscription)

        assert mock_scheduler.create_trigger.await_count == 2
        calls = {
            call.args[0]: call.args for call in mock_scheduler.create_trigger.await_args_list
        }
        name, fire_at, payload = calls["subscription-cancel-sub_123-si_0"]
        assert fire_at == now + 3600
        assert payload == {
            "customer_id": "cus_123",
            "subscription_id": "sub_123",
            "item_id": "si_0",
            "status": "active",
            "cancel_at_period_end": True,
        }
        assert calls["subscription-cancel-sub_123-si_1"][1] == now + 7200
        mock_scheduler.update_trigger.assert_not_awaited()

    async def test_publishes_cancellation_event(
        self, cancellation_scheduler, mock_event_bus, make_subscription
    ):
        subscription = make_subscription(cancel_at_period_end=True, cancel_at=None)

        await cancellation_scheduler.schedule(subscription)

        mock_event_bus.publish.assert_awaited_once()
        topic, detail = mock_event_bus.publish.await_args.args
        assert topic == DomainEventType.SUBSCRIPTION_CANCELLED.value
        assert detail["stripeSubscriptionId"] == "sub_123"
        assert detail["stripeCustomerId"] == "cus_123"
        assert detail["cancelAt"] is None
        assert detail["cancelAtPeriodEnd"] is True
        assert detail["items"] == [
            {
                "itemId": "si_0",
                "priceId": "price_0",
                "productId": "prod_0",
                "quantity": 1,
                "expiresAt": subscription.items[0].period_end,
                "metadata": {"seat": "0"},
            }
        ]

    async def test_elapsed_items_are_skipped_with_warning(
        self, cancellation_scheduler, mock_scheduler, mock_logger, make_subscription
    ):
        """Items whose period already ended create no trigger and log one warning each."""
        now = int(time.time())
        subscription = make_subscription(
            cancel_at_period_end=True, period_ends=[now - 60, now - 3600, now]
        )

        await cancellation_scheduler.schedule(subscription)

        mock_scheduler.create_trigger.assert_not_awaited()
        assert mock_logger.warning.call_count == 3

    async def test_existing_trigger_is_updated(
        self, cancellation_scheduler, mock_scheduler, mock_event_bus, make_subscription
    ):
        mock_scheduler.create_trigger.side_effect = ConflictError("exists")
        subscription = make_subscription(cancel_at_period_end=True)

        await cancellation_scheduler.schedule(subscription)

        mock_scheduler.update_trigger.assert_awaited_once()
        name, fire_at, _ = mock_scheduler.update_trigger.await_args.args
        assert name == "subscription-cancel-sub_123-si_0"
        assert fire_at == subscription.items[0].period_end
        mock_event_bus.publish.assert_awaited_once()

    async def test_partial_failure_waits_for_all_items(
        self, cancellation_scheduler, mock_scheduler, mock_event_bus, make_subscription
    ):
        """A failing item does not stop its siblings; the aggregate error names the count."""
        now = int(time.time())
        subscription = make_subscription(
            cancel_at_period_end=True,
            period_ends=[now + 100, now + 200, now + 300],
        )
        attempted = []

        async def create_trigger(name, fire_at, payload):
            await asyncio.sleep(0)
            attempted.append(name)
            if name.endswith("si_1"):
                raise DependencyError("scheduler unavailable")

        mock_scheduler.create_trigger.side_effect = create_trigger

        with pytest.raises(BatchSchedulingError) as exc_info:
            await cancellation_scheduler.schedule(subscription)

        assert len(attempted) == 3
        assert exc_info.value.failed_count == 1
        assert exc_info.value.total_count == 3
        assert exc_info.value.is_total_failure is False
        assert "1 of 3" in str(exc_info.value)
        mock_event_bus.publish.assert_not_awaited()

    async def test_total_failure(
        self, cancellation_scheduler, mock_scheduler, make_subscription
    ):
        mock_scheduler.create_trigger.side_effect = DependencyError("down")
        subscription = make_subscription(cancel_at_period_end=True)

        with pytest.raises(BatchSchedulingError) as exc_info:
            await cancellation_scheduler.schedule(subscription)

        assert exc_info.value.is_total_failure is True
        assert "total failure" in str(exc_info.value)

    async def test_failed_update_after_conflict_is_item_failure(
        self, cancellation_scheduler, mock_scheduler, make_subscription
    ):
        mock_scheduler.create_trigger.side_effect = ConflictError("exists")
        mock_scheduler.update_trigger.side_effect = DependencyError("update failed")
        subscription = make_subscription(cancel_at_period_end=True)

        with pytest.raises(BatchSchedulingError) as exc_info:
            await cancellation_scheduler.schedule(subscription)

        assert exc_info.value.failed_count == 1

    async def test_duplicate_delivery_short_circuits(
        self, cancellation_scheduler, mock_scheduler, mock_event_bus, make_subscription
    ):
        """The second invocation for the same subscription touches neither scheduler nor bus."""
        subscription = make_subscription(cancel_at_period_end=True)

        await cancellation_scheduler.schedule(subscription)
        mock_scheduler.reset_mock()
        mock_event_bus.reset_mock()

        await cancellation_scheduler.schedule(subscription)

        mock_scheduler.create_trigger.assert_not_awaited()
        mock_scheduler.update_trigger.assert_not_awaited()
        mock_event_bus.publish.assert_not_awaited()

    async def test_concurrent_duplicates_publish_once(
        self, cancellation_scheduler, mock_event_bus, make_subscription
    ):
        subscription = make_subscription(cancel_at_period_end=True)

        await asyncio.gather(
            cancellation_scheduler.schedule(subscription),
            cancellation_scheduler.schedule(subscription),
        )

        assert mock_event_bus.publish.await_count == 1

    async def test_store_failure_prevents_side_effects(
        self, billing_deps, mock_scheduler, mock_event_bus, make_subscription
    ):
        store = AsyncMock(spec=IdempotencyStoreInterface)
        store.claim.side_effect = DependencyError("redis down")
        gate = IdempotencyGate(store, 60, billing_deps.logger)
        scheduler = CancellationScheduler(billing_deps, gate)

        with pytest.raises(DependencyError):
            await scheduler.schedule(make_subscription(cancel_at_period_end=True))

        mock_scheduler.create_trigger.assert_not_awaited()
        mock_event_bus.publish.assert_not_awaited()
