"""
Temporal implementation of the scheduler provider.

Each trigger is a Temporal schedule with a single calendar entry and exactly
one remaining action, so it fires once at `fire_at` and then goes idle.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from temporalio.client import (
    Client,
    Schedule,
    ScheduleActionStartWorkflow,
    ScheduleAlreadyRunningError,
    ScheduleCalendarSpec,
    ScheduleRange,
    ScheduleSpec,
    ScheduleState,
    ScheduleUpdate,
    ScheduleUpdateInput,
)
from temporalio.service import RPCError, RPCStatusCode

from common.core.config import settings
from common.core.exceptions import ConflictError, DependencyError, NotFoundError
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.temporal.client import get_temporal_client
from .interface import SchedulerProviderInterface

logger = get_logger(__name__)

DEFAULT_TRIGGER_WORKFLOW = "SubscriptionItemExpiryWorkflow"


class TemporalScheduler(SchedulerProviderInterface):
    """Deferred triggers backed by Temporal schedules."""

    def __init__(
        self,
        client: Optional[Client] = None,
        workflow_name: str = DEFAULT_TRIGGER_WORKFLOW,
        task_queue: Optional[str] = None,
    ):
        self._client = client
        self.workflow_name = workflow_name
        self.task_queue = task_queue or settings.temporal_task_queue

    async def _get_client(self) -> Client:
        if self._client is None:
            self._client = await get_temporal_client()
        return self._client

    def _build_schedule(
        self, name: str, fire_at: int, payload: Dict[str, Any]
    ) -> Schedule:
        at = datetime.fromtimestamp(fire_at, tz=timezone.utc)
        calendar = ScheduleCalendarSpec(
            second=[ScheduleRange(at.second)],
            minute=[ScheduleRange(at.minute)],
            hour=[ScheduleRange(at.hour)],
            day_of_month=[ScheduleRange(at.day)],
            month=[ScheduleRange(at.month)],
            year=[ScheduleRange(at.year)],
            comment=f"fires at {at.isoformat()}",
        )
        return Schedule(
            action=ScheduleActionStartWorkflow(
                self.workflow_name,
                payload,
                id=f"{name}-run",
                task_queue=self.task_queue,
            ),
            spec=ScheduleSpec(calendars=[calendar]),
            state=ScheduleState(
                note=f"one-shot trigger {name}",
                limited_actions=True,
                remaining_actions=1,
            ),
        )

    @trace_span
    async def create_trigger(
        self, name: str, fire_at: int, payload: Dict[str, Any]
    ) -> None:
        client = await self._get_client()
        try:
            await client.create_schedule(
                name, self._build_schedule(name, fire_at, payload)
            )
        except ScheduleAlreadyRunningError as e:
            raise ConflictError(f"Trigger {name} already exists") from e
        except RPCError as e:
            if e.status == RPCStatusCode.ALREADY_EXISTS:
                raise ConflictError(f"Trigger {name} already exists") from e
            raise DependencyError(f"Failed to create trigger {name}: {e}") from e

        logger.info(
            f"Created trigger {name}",
            extra={"trigger_name": name, "fire_at": fire_at},
        )

    @trace_span
    async def update_trigger(
        self, name: str, fire_at: int, payload: Dict[str, Any]
    ) -> None:
        client = await self._get_client()
        schedule = self._build_schedule(name, fire_at, payload)

        def _replace(_: ScheduleUpdateInput) -> ScheduleUpdate:
            return ScheduleUpdate(schedule=schedule)

        try:
            await client.get_schedule_handle(name).update(_replace)
        except RPCError as e:
            raise DependencyError(f"Failed to update trigger {name}: {e}") from e

        logger.info(
            f"Updated trigger {name}",
            extra={"trigger_name": name, "fire_at": fire_at},
        )

    @trace_span
    async def delete_trigger(self, name: str) -> None:
        client = await self._get_client()
        try:
            await client.get_schedule_handle(name).delete()
        except RPCError as e:
            if e.status == RPCStatusCode.NOT_FOUND:
                raise NotFoundError(f"Trigger {name} not found") from e
            raise DependencyError(f"Failed to delete trigger {name}: {e}") from e

        logger.info(f"Deleted trigger {name}", extra={"trigger_name": name})
