import logging
import time

import pytest
from unittest.mock import AsyncMock, MagicMock

from common.providers.event_bus.interface import EventBusInterface
from common.providers.idempotency.memory_idempotency import MemoryIdempotencyStore
from common.providers.scheduling.interface import SchedulerProviderInterface
from packages.billing.models.domain.enums import SubscriptionStatus
from packages.billing.models.domain.subscription_change import (
    PreviousAttributes,
    SubscriptionItem,
    SubscriptionSnapshot,
)
from packages.billing.providers.metering.interface import MeteringProviderInterface
from packages.billing.services.dependencies import BillingConfig, BillingDependencies

ENTERPRISE_PRICE_ID = "price_enterprise_usage"


@pytest.fixture
def mock_message_queue():
    """Create a mock message queue instance for testing."""
    queue = AsyncMock()
    queue.declare_queue = AsyncMock(return_value=True)
    queue.consume = AsyncMock()
    queue.connect = AsyncMock(return_value=True)
    queue.disconnect = AsyncMock(return_value=None)
    return queue


@pytest.fixture
def mock_logger():
    """Logger double; assertions count calls per level."""
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def mock_scheduler():
    return AsyncMock(spec=SchedulerProviderInterface)


@pytest.fixture
def mock_event_bus():
    return AsyncMock(spec=EventBusInterface)


@pytest.fixture
def mock_metering():
    metering = AsyncMock(spec=MeteringProviderInterface)
    metering.submit = AsyncMock(return_value={})
    return metering


@pytest.fixture
def idempotency_store():
    return MemoryIdempotencyStore()


@pytest.fixture
def billing_config():
    return BillingConfig(
        standard_event_name="cdk_insights_usage",
        enterprise_event_name="cdk_insights_enterprise_usage",
        enterprise_price_id=ENTERPRISE_PRICE_ID,
        idempotency_ttl_seconds=86400,
    )


@pytest.fixture
def billing_deps(
    mock_scheduler,
    mock_event_bus,
    mock_metering,
    idempotency_store,
    billing_config,
    mock_logger,
):
    """Capability set wired entirely with test doubles."""
    return BillingDependencies(
        scheduler=mock_scheduler,
        event_bus=mock_event_bus,
        metering=mock_metering,
        idempotency_store=idempotency_store,
        config=billing_config,
        logger=mock_logger,
    )


@pytest.fixture
def make_subscription():
    """Build a subscription snapshot; items default to one item ending in an hour."""

    def _make(
        subscription_id: str = "sub_123",
        status: SubscriptionStatus = SubscriptionStatus.ACTIVE,
        cancel_at_period_end: bool = False,
        cancel_at=None,
        period_ends=None,
        previous=None,
    ) -> SubscriptionSnapshot:
        if period_ends is None:
            period_ends = [int(time.time()) + 3600]
        return SubscriptionSnapshot(
            id=subscription_id,
            customer_id="cus_123",
            status=status,
            cancel_at_period_end=cancel_at_period_end,
            cancel_at=cancel_at,
            items=[
                SubscriptionItem(
                    id=f"si_{index}",
                    price_id=f"price_{index}",
                    product_id=f"prod_{index}",
                    quantity=1,
                    period_end=period_end,
                    metadata={"seat": str(index)},
                )
                for index, period_end in enumerate(period_ends)
            ],
            previous_attributes=PreviousAttributes.from_diff(previous),
        )

    return _make
