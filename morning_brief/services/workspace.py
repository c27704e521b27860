"""
Workspace service: persisted runtime, triggers and presentation records.
"""
import asyncio
import logging
import weakref
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from morning_brief.errors import NotFoundError
from morning_brief.models.briefing import BriefPresentation
from morning_brief.models.trigger import Trigger
from morning_brief.models.workspace import WorkspaceRuntime
from morning_brief.schemas.brief import ReasonerInput
from morning_brief.schemas.override import OverrideCreate, PresentationRecord
from morning_brief.schemas.scheduling import (
    RuntimeState,
    TriggerRunResult,
    TriggerSignal,
    TriggerState,
    TriggerUpdate,
)
from morning_brief.services.degradation import ConfidenceDegradationTracker
from morning_brief.services.lifecycle import apply_override, deliver
from morning_brief.services.reasoner import reason_morning_brief
from morning_brief.services.scheduler import TriggerScheduler, default_triggers
from morning_brief.services.synthesizer import BaseSynthesizer
from morning_brief.services.telemetry import TelemetrySink
from morning_brief.utils.clock import Clock, ensure_utc, utc_now

logger = logging.getLogger(__name__)


class WorkspaceLocks:
    """One asyncio lock per workspace; serializes every write path.

    Locks are held weakly and disappear once no request references them.
    """

    def __init__(self):
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def __len__(self) -> int:
        return len(self._locks)

    def get(self, workspace_id: str) -> asyncio.Lock:
        lock = self._locks.get(workspace_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[workspace_id] = lock
        return lock


def _trigger_state(row: Trigger) -> TriggerState:
    return TriggerState(
        id=row.trigger_id,
        type=row.type,
        name=row.name or "",
        description=row.description or "",
        enabled=row.enabled,
        min_interval_minutes=row.min_interval_minutes or 0,
        cooldown_minutes=row.cooldown_minutes or 0,
        last_fired_at=ensure_utc(row.last_fired_at) if row.last_fired_at else None,
        criteria=dict(row.criteria or {}),
    )


def _runtime_state(row: WorkspaceRuntime) -> RuntimeState:
    return RuntimeState(
        mode=row.mode,
        low_confidence_streak=row.low_confidence_streak,
        snoozed_until=ensure_utc(row.snoozed_until) if row.snoozed_until else None,
    )


def _store_runtime(row: WorkspaceRuntime, runtime: RuntimeState) -> None:
    row.mode = runtime.mode
    row.low_confidence_streak = runtime.low_confidence_streak
    row.snoozed_until = runtime.snoozed_until


def _store_presentation(row: WorkspaceRuntime, record: PresentationRecord) -> None:
    data = record.model_dump(mode="json")
    if row.presentation is None:
        row.presentation = BriefPresentation(workspace_id=row.workspace_id)
    row.presentation.current = data["current"]
    row.presentation.history = data["history"]
    row.presentation.state = data["state"]
    row.presentation.user_overrides = data["user_overrides"]


class WorkspaceService:
    """Service for scheduling refreshes and recording overrides per workspace."""

    def __init__(
        self,
        db: AsyncSession,
        locks: WorkspaceLocks,
        clock: Clock | None = None,
        tracker: ConfidenceDegradationTracker | None = None,
        telemetry: TelemetrySink | None = None,
    ):
        self.db = db
        self.locks = locks
        self.clock = clock or utc_now
        self.tracker = tracker or ConfidenceDegradationTracker()
        self.telemetry = telemetry or TelemetrySink()

    async def _load(self, workspace_id: str) -> WorkspaceRuntime:
        """Load a workspace, creating it and seeding missing default triggers."""
        result = await self.db.execute(
            select(WorkspaceRuntime).where(WorkspaceRuntime.workspace_id == workspace_id)
        )
        row = result.scalar_one_or_none()

        if row is None:
            row = WorkspaceRuntime(
                workspace_id=workspace_id,
                mode="normal",
                low_confidence_streak=0,
                triggers=[],
                presentation=None,
            )
            self.db.add(row)
            logger.info("Created morning brief runtime for workspace %s", workspace_id)

        existing = {trigger.type for trigger in row.triggers}
        for default in default_triggers():
            if default.type in existing:
                continue
            row.triggers.append(Trigger(
                workspace_id=workspace_id,
                trigger_id=default.id,
                type=default.type,
                name=default.name,
                description=default.description,
                enabled=default.enabled,
                min_interval_minutes=default.min_interval_minutes,
                cooldown_minutes=default.cooldown_minutes,
                criteria=default.criteria,
            ))

        return row

    async def get_runtime(self, workspace_id: str) -> RuntimeState:
        async with self.locks.get(workspace_id):
            row = await self._load(workspace_id)
            await self.db.commit()
            return _runtime_state(row)

    async def reset_runtime(self, workspace_id: str) -> RuntimeState:
        """Return a workspace to normal delivery and clear its streak."""
        async with self.locks.get(workspace_id):
            row = await self._load(workspace_id)
            runtime = _runtime_state(row)
            self.tracker.reset(runtime)
            _store_runtime(row, runtime)
            await self.db.commit()
            logger.info("Reset morning brief runtime for workspace %s", workspace_id)
            return runtime

    async def list_triggers(self, workspace_id: str) -> list[TriggerState]:
        async with self.locks.get(workspace_id):
            row = await self._load(workspace_id)
            await self.db.commit()
            return [_trigger_state(trigger) for trigger in row.triggers]

    async def update_trigger(
        self,
        workspace_id: str,
        trigger_type: str,
        update: TriggerUpdate,
    ) -> TriggerState:
        async with self.locks.get(workspace_id):
            row = await self._load(workspace_id)
            trigger = next((t for t in row.triggers if t.type == trigger_type), None)
            if trigger is None:
                raise NotFoundError(f"Trigger '{trigger_type}' not found")

            for field, value in update.model_dump(exclude_unset=True, exclude_none=True).items():
                setattr(trigger, field, value)

            await self.db.commit()
            return _trigger_state(trigger)

    async def run_trigger(
        self,
        workspace_id: str,
        trigger_type: str,
        input: ReasonerInput,
        synthesizer: BaseSynthesizer | None = None,
        repairer: BaseSynthesizer | None = None,
        now: datetime | None = None,
        signal: TriggerSignal | None = None,
    ) -> TriggerRunResult:
        """
        Evaluate a trigger for a workspace and deliver a fresh brief if it fires.

        The load, decision, pipeline run and write-back happen under the
        workspace lock, so concurrent triggers observe either the state
        before or after a run.
        """
        async with self.locks.get(workspace_id):
            row = await self._load(workspace_id)
            scheduler = TriggerScheduler(
                runtime=_runtime_state(row),
                triggers=[_trigger_state(trigger) for trigger in row.triggers],
                tracker=self.tracker,
                clock=self.clock,
                telemetry=self.telemetry,
            )

            async def pipeline():
                return await reason_morning_brief(
                    input,
                    synthesizer=synthesizer,
                    repairer=repairer,
                    clock=self.clock,
                    telemetry=self.telemetry,
                )

            outcome = await scheduler.run(trigger_type, pipeline, now=now, signal=signal)

            _store_runtime(row, scheduler.runtime)
            for trigger in row.triggers:
                state = scheduler.triggers.get(trigger.type)
                if state is not None:
                    trigger.last_fired_at = state.last_fired_at

            if outcome.fired and outcome.result is not None:
                previous = (
                    PresentationRecord.model_validate(self._presentation_data(row.presentation))
                    if row.presentation is not None
                    else None
                )
                record = deliver(previous, outcome.result, outcome.confidence or "low")
                _store_presentation(row, record)

            await self.db.commit()
            return outcome

    @staticmethod
    def _presentation_data(presentation: BriefPresentation) -> dict:
        return {
            "current": presentation.current,
            "history": presentation.history or [],
            "state": presentation.state,
            "user_overrides": presentation.user_overrides or [],
        }

    async def get_presentation(self, workspace_id: str) -> PresentationRecord:
        result = await self.db.execute(
            select(BriefPresentation).where(BriefPresentation.workspace_id == workspace_id)
        )
        presentation = result.scalar_one_or_none()
        if presentation is None:
            raise NotFoundError("No brief has been delivered to this workspace")
        return PresentationRecord.model_validate(self._presentation_data(presentation))

    async def apply_override(
        self,
        workspace_id: str,
        request: OverrideCreate,
    ) -> PresentationRecord:
        """Record a user reaction against the workspace's delivered brief."""
        async with self.locks.get(workspace_id):
            row = await self._load(workspace_id)
            if row.presentation is None:
                raise NotFoundError("No brief has been delivered to this workspace")

            record = PresentationRecord.model_validate(self._presentation_data(row.presentation))
            runtime = _runtime_state(row)
            override = apply_override(record, runtime, request, now=self.clock())

            _store_presentation(row, record)
            _store_runtime(row, runtime)
            await self.db.commit()

            self.telemetry.emit(
                "lifecycle",
                "override",
                {"workspace_id": workspace_id, "type": override.type, "state": record.state},
            )
            return record
