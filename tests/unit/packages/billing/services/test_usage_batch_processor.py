import asyncio
import json

import pytest

from common.core.exceptions import DependencyError, ParseError, PartialSendError
from common.providers.messaging.messages import QueuedRecord
from packages.billing.services.usage_batch_processor import (
    UsageBatchProcessor,
    parse_usage_record,
)


def usage_record(message_id: str, **detail) -> QueuedRecord:
    return QueuedRecord(message_id=message_id, body=json.dumps({"detail": detail}))


@pytest.fixture
def processor(billing_deps):
    return UsageBatchProcessor(billing_deps)


def submitted_events(mock_metering):
    return [call.args[0] for call in mock_metering.submit.await_args_list]


class TestParseUsageRecord:
    """Tests for usage record parsing."""

    def test_unwraps_typed_customer_id(self):
        record = usage_record(
            "msg-1", stripeCustomerId={"S": "cus_abc"}, resourcesAnalyzed=4
        )

        usage = parse_usage_record(record)

        assert usage.customer_id == "cus_abc"
        assert usage.resources_analyzed == 4

    def test_body_without_envelope(self):
        record = QueuedRecord(
            message_id="msg-1",
            body=json.dumps({"stripeCustomerId": "cus_abc", "resourcesAnalyzed": 2}),
        )

        assert parse_usage_record(record).customer_id == "cus_abc"

    def test_unknown_subscription_type_is_other(self):
        record = usage_record(
            "msg-1",
            stripeCustomerId="cus_abc",
            resourcesAnalyzed=1,
            subscriptionType="FREE",
        )

        assert parse_usage_record(record).subscription_type.value == "OTHER"

    @pytest.mark.parametrize("figure", [float("inf"), float("nan")])
    def test_non_finite_usage_is_a_parse_error(self, figure):
        record = usage_record("msg-1", stripeCustomerId="cus_abc", resourcesAnalyzed=figure)

        with pytest.raises(ParseError):
            parse_usage_record(record)


class TestUsageBatchProcessor:
    """Tests for usage batch processing and metering submission."""

    async def test_pro_and_enterprise_records_are_both_submitted(
        self, processor, mock_metering, billing_config
    ):
        batch = [
            usage_record(
                "msg-pro",
                stripeCustomerId="cus_pro",
                resourcesAnalyzed=3,
                subscriptionType="PRO",
                meteredPriceId="price_pro",
            ),
            usage_record(
                "msg-ent",
                stripeCustomerId="cus_ent",
                resourcesAnalyzed=7,
                subscriptionType="ENTERPRISE",
            ),
        ]

        await processor.process(batch)

        assert mock_metering.submit.await_count == 2
        events = {event.identifier: event for event in submitted_events(mock_metering)}

        pro = events["msg-pro"]
        assert pro.event_name == "cdk_insights_usage"
        assert pro.payload.price_id == "price_pro"
        assert pro.payload.value == "3"
        assert pro.payload.stripe_customer_id == "cus_pro"

        enterprise = events["msg-ent"]
        assert enterprise.event_name == "cdk_insights_enterprise_usage"
        assert enterprise.payload.price_id == billing_config.enterprise_price_id
        assert enterprise.payload.value == "7"

    @pytest.mark.parametrize("subscription_type", ["TEAM", "ENTERPRISE", "team"])
    async def test_enterprise_tiers_ignore_record_price(
        self, processor, mock_metering, billing_config, subscription_type
    ):
        batch = [
            usage_record(
                "msg-1",
                stripeCustomerId="cus_1",
                resourcesAnalyzed=5,
                subscriptionType=subscription_type,
                meteredPriceId="price_from_record",
            )
        ]

        await processor.process(batch)

        (event,) = submitted_events(mock_metering)
        assert event.payload.price_id == billing_config.enterprise_price_id

    async def test_standard_record_without_price_has_no_price_id(
        self, processor, mock_metering
    ):
        batch = [usage_record("msg-1", stripeCustomerId="cus_1", resourcesAnalyzed=5)]

        await processor.process(batch)

        (event,) = submitted_events(mock_metering)
        assert event.payload.price_id is None
        assert "price_id" not in event.payload.to_stripe()

    async def test_idempotency_key_is_derived_from_identifier_and_timestamp(
        self, processor, mock_metering
    ):
        batch = [usage_record("msg-42", stripeCustomerId="cus_1", resourcesAnalyzed=1)]

        await processor.process(batch)

        event, idempotency_key = mock_metering.submit.await_args.args
        assert idempotency_key == f"usage-msg-42-{event.timestamp}"

    @pytest.mark.parametrize(
        "detail",
        [
            {"resourcesAnalyzed": 3},
            {"stripeCustomerId": "cus_1"},
            {"stripeCustomerId": "", "resourcesAnalyzed": 3},
            {"stripeCustomerId": "cus_1", "resourcesAnalyzed": 0},
        ],
    )
    async def test_missing_fields_skip_record_with_one_warning(
        self, processor, mock_metering, mock_logger, detail
    ):
        await processor.process([usage_record("msg-1", **detail)])

        mock_metering.submit.assert_not_awaited()
        assert mock_logger.warning.call_count == 1
        assert mock_logger.warning.call_args.args[0] == (
            "Missing required fields, skipping record"
        )

    async def test_malformed_body_does_not_abort_batch(
        self, processor, mock_metering, mock_logger
    ):
        batch = [
            QueuedRecord(message_id="msg-bad", body="{not json"),
            usage_record("msg-good", stripeCustomerId="cus_1", resourcesAnalyzed=2),
        ]

        await processor.process(batch)

        assert [e.identifier for e in submitted_events(mock_metering)] == ["msg-good"]
        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args.args[0] == "Failed to parse record body"

    async def test_infinite_usage_is_not_sent(self, processor, mock_metering, mock_logger):
        batch = [
            usage_record("msg-inf", stripeCustomerId="cus_1", resourcesAnalyzed=float("inf")),
            usage_record("msg-ok", stripeCustomerId="cus_2", resourcesAnalyzed=2),
        ]

        await processor.process(batch)

        assert [e.identifier for e in submitted_events(mock_metering)] == ["msg-ok"]
        assert mock_logger.error.call_args.args[0] == "Failed to parse record body"

    async def test_empty_result_sends_nothing(self, processor, mock_metering):
        await processor.process([])

        mock_metering.submit.assert_not_awaited()

    async def test_one_rejection_still_awaits_all_submissions(
        self, processor, mock_metering
    ):
        """N-1 submissions complete and the aggregate error reports the exact count."""
        batch = [
            usage_record(f"msg-{i}", stripeCustomerId=f"cus_{i}", resourcesAnalyzed=i + 1)
            for i in range(4)
        ]
        completed = []

        async def submit(event, idempotency_key):
            await asyncio.sleep(0)
            if event.identifier == "msg-2":
                raise DependencyError("rejected")
            completed.append(event.identifier)
            return {}

        mock_metering.submit.side_effect = submit

        with pytest.raises(PartialSendError) as exc_info:
            await processor.process(batch)

        assert sorted(completed) == ["msg-0", "msg-1", "msg-3"]
        assert exc_info.value.failed_count == 1
        assert exc_info.value.total_count == 4
        assert "1 of 4 meter events failed" in str(exc_info.value)
