import json
import logging

import pytest
from unittest.mock import AsyncMock

from common.core.exceptions import DependencyError, PartialSendError
from common.providers.messaging.messages import UsageBatchMessage
from packages.billing.models.domain.enums import ChangeVerdictType
from packages.billing.models.domain.stripe_webhooks import StripeWebhookPayload
from packages.billing.models.domain.subscription_change import ChangeVerdict
from packages.billing.services.usage_batch_processor import UsageBatchProcessor
from packages.billing.workers.subscription_update_worker import SubscriptionUpdateWorker
from packages.billing.workers.usage_worker import UsageBatchWorker


def stripe_event(event_type: str = "customer.subscription.updated") -> dict:
    return {
        "id": "evt_1",
        "type": event_type,
        "created": 1700000000,
        "data": {
            "object": {
                "id": "sub_123",
                "customer": "cus_123",
                "status": "active",
                "cancel_at_period_end": True,
                "items": {
                    "data": [
                        {
                            "id": "si_1",
                            "price": {"id": "price_1", "product": "prod_1"},
                            "quantity": 1,
                            "current_period_end": 1900000000,
                        }
                    ]
                },
            },
            "previous_attributes": {"cancel_at_period_end": False},
        },
    }


class TestSubscriptionUpdateWorker:
    """Tests for the subscription update queue worker."""

    @pytest.fixture
    def worker(self, billing_deps):
        worker = SubscriptionUpdateWorker(deps=billing_deps)
        worker.service = AsyncMock()
        worker.service.handle.return_value = ChangeVerdict(
            verdict=ChangeVerdictType.CANCELLATION_REQUESTED
        )
        return worker

    async def test_updated_event_is_handled(self, worker):
        await worker._message_handler(stripe_event())

        worker.service.handle.assert_awaited_once()
        snapshot = worker.service.handle.await_args.args[0]
        assert snapshot.id == "sub_123"
        assert snapshot.items[0].period_end == 1900000000
        assert snapshot.previous_attributes.changed("cancel_at_period_end") is True

    async def test_update_is_logged_with_event_timestamp(self, worker, caplog):
        caplog.set_level(
            logging.INFO, logger="packages.billing.workers.subscription_update_worker"
        )

        await worker._message_handler(stripe_event())

        (record,) = [
            r for r in caplog.records if r.getMessage().startswith("Processing subscription update")
        ]
        assert record.event_created == 1700000000
        assert record.subscription_id == "sub_123"
        worker.service.handle.assert_awaited_once()

    async def test_other_event_types_are_ignored(self, worker):
        await worker.process_message(
            StripeWebhookPayload.model_validate(
                stripe_event("customer.subscription.created")
            )
        )

        worker.service.handle.assert_not_awaited()

    async def test_dependencies_are_connected(self, worker, billing_deps):
        billing_deps.idempotency_store = AsyncMock()

        await worker.connect_dependencies()
        await worker.disconnect_dependencies()

        billing_deps.idempotency_store.connect.assert_awaited_once()
        billing_deps.event_bus.connect.assert_awaited_once()
        billing_deps.event_bus.disconnect.assert_awaited_once()


class TestUsageBatchWorker:
    """Tests for the usage batch queue worker."""

    @pytest.fixture
    def worker(self, billing_deps):
        worker = UsageBatchWorker(deps=billing_deps)
        worker.processor = AsyncMock(spec=UsageBatchProcessor)
        return worker

    async def test_batch_records_are_processed(self, worker):
        body = json.dumps({"detail": {"stripeCustomerId": "cus_1", "resourcesAnalyzed": 1}})

        await worker._message_handler(
            {"Records": [{"messageId": "msg-1", "body": body}]}
        )

        (records,) = worker.processor.process.await_args.args
        assert [record.message_id for record in records] == ["msg-1"]

    async def test_partial_send_error_propagates(self, worker):
        """The transport must see the failure to redeliver the batch."""
        worker.processor.process.side_effect = PartialSendError(1, 2)

        with pytest.raises(PartialSendError):
            await worker.process_message(UsageBatchMessage(records=[]))

    async def test_unhealthy_metering_stops_setup(self, worker, mock_metering):
        mock_metering.health_check.return_value = False

        with pytest.raises(DependencyError):
            await worker.connect_dependencies()

    async def test_healthy_metering_connects(self, worker, mock_metering):
        mock_metering.health_check.return_value = True

        await worker.connect_dependencies()

        mock_metering.health_check.assert_awaited_once()
