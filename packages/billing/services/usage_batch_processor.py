"""
Usage batch processor - usage records to Stripe meter events.

Records are handled independently: a malformed or incomplete record is logged
and skipped without affecting its siblings. Meter events are submitted
concurrently, and the batch fails as a whole if any submission is rejected so
that the transport redelivers it; the per-event idempotency key keeps the
already accepted events from being counted twice.
"""

import json
import time
from typing import Any, List, Sequence

from pydantic import ValidationError as PydanticValidationError

from common.core.concurrency import failures, settle_all
from common.core.exceptions import ParseError, PartialSendError, ValidationError
from common.core.otel_axiom_exporter import trace_span
from common.providers.messaging import QueuedRecord
from packages.billing.models.domain.enums import SubscriptionType
from packages.billing.models.domain.usage import MeterEvent, MeterEventPayload, UsageRecord
from packages.billing.services.dependencies import BillingDependencies


def _unwrap_attribute(value: Any) -> Any:
    # Records replicated from DynamoDB streams carry typed values like {"S": "cus_123"}
    if isinstance(value, dict) and "S" in value:
        return value["S"]
    return value


def parse_usage_record(record: QueuedRecord) -> UsageRecord:
    """
    Parse the body of one queued usage record.

    The usage fields are read from the "detail" object of an event envelope,
    or from the body itself when it has no envelope.

    Raises:
        ParseError: If the body is not a JSON object or a field is invalid,
            including a non-finite usage figure
        ValidationError: If the customer id or the usage figure is missing
    """
    try:
        body = json.loads(record.body)
    except (TypeError, json.JSONDecodeError) as e:
        raise ParseError(f"Record {record.message_id} body is not valid JSON: {e}") from e

    if not isinstance(body, dict):
        raise ParseError(f"Record {record.message_id} body is not an object")

    detail = body.get("detail", body)
    if not isinstance(detail, dict):
        raise ParseError(f"Record {record.message_id} detail is not an object")

    customer_id = _unwrap_attribute(detail.get("stripeCustomerId"))
    resources_analyzed = detail.get("resourcesAnalyzed")

    missing = [
        name
        for name, value in (
            ("stripeCustomerId", customer_id),
            ("resourcesAnalyzed", resources_analyzed),
        )
        if not value
    ]
    if missing:
        raise ValidationError(f"Record {record.message_id} is missing {', '.join(missing)}")

    try:
        return UsageRecord(
            customer_id=customer_id,
            resources_analyzed=resources_analyzed,
            subscription_type=SubscriptionType.parse(detail.get("subscriptionType")),
            metered_price_id=detail.get("meteredPriceId") or None,
            message_id=record.message_id,
        )
    except PydanticValidationError as e:
        raise ParseError(f"Record {record.message_id} has invalid fields: {e}") from e


class UsageBatchProcessor:
    """Turns a batch of usage records into submitted meter events."""

    def __init__(self, deps: BillingDependencies):
        self.metering = deps.metering
        self.config = deps.config
        self.logger = deps.logger

    def build_meter_event(self, usage: UsageRecord) -> MeterEvent:
        """
        Select event name and price for a usage record.

        TEAM and ENTERPRISE usage always goes to the enterprise price; every
        other tier keeps the record's own metered price, which may be absent.
        """
        if usage.subscription_type.uses_enterprise_pricing():
            event_name = self.config.enterprise_event_name
            price_id = self.config.enterprise_price_id
        else:
            event_name = self.config.standard_event_name
            price_id = usage.metered_price_id

        return MeterEvent(
            event_name=event_name,
            payload=MeterEventPayload.for_usage(
                usage.customer_id, usage.resources_analyzed, price_id
            ),
            identifier=usage.message_id,
            timestamp=int(time.time()),
        )

    def _collect_events(self, batch: Sequence[QueuedRecord]) -> List[MeterEvent]:
        events: List[MeterEvent] = []
        for record in batch:
            try:
                usage = parse_usage_record(record)
            except ParseError as e:
                self.logger.error(
                    "Failed to parse record body",
                    extra={
                        "message_id": record.message_id,
                        "record_body": record.body,
                        "error": str(e),
                    },
                )
                continue
            except ValidationError as e:
                self.logger.warning(
                    "Missing required fields, skipping record",
                    extra={
                        "message_id": record.message_id,
                        "record_body": record.body,
                        "error": str(e),
                    },
                )
                continue

            events.append(self.build_meter_event(usage))
            self.logger.debug(
                f"Built meter event for {usage.customer_id}",
                extra={
                    "message_id": usage.message_id,
                    "subscription_type": usage.subscription_type.value,
                    "resources_analyzed": usage.resources_analyzed,
                },
            )
        return events

    @trace_span
    async def process(self, batch: Sequence[QueuedRecord]) -> None:
        """
        Submit one meter event per valid usage record.

        Raises:
            PartialSendError: If any submission was rejected, after every
                submission has settled
        """
        self.logger.info(
            f"Processing usage batch of {len(batch)} records",
            extra={"record_count": len(batch)},
        )

        events = self._collect_events(batch)
        if not events:
            self.logger.info("No meter events to send", extra={"record_count": len(batch)})
            return

        outcomes = await settle_all(
            (event.identifier, self.metering.submit(event, event.idempotency_key))
            for event in events
        )

        failed = failures(outcomes)
        if failed:
            failed_results = [f"{outcome.key}: {outcome.error}" for outcome in failed]
            self.logger.error(
                "Some meter events failed to send",
                extra={
                    "failed_count": len(failed),
                    "total_count": len(outcomes),
                    "failed_results": failed_results,
                },
            )
            raise PartialSendError(len(failed), len(outcomes))

        self.logger.info(
            f"Sent {len(events)} meter events",
            extra={"sent_count": len(events)},
        )
