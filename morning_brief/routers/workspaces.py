"""
Workspaces router: triggers, runtime state and brief overrides.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from morning_brief.dependencies import get_workspace_service
from morning_brief.errors import InvalidOverrideError, LifecycleMisuseError, NotFoundError
from morning_brief.schemas.brief import ReasonerInput
from morning_brief.schemas.override import OverrideCreate, PresentationRecord
from morning_brief.schemas.scheduling import (
    RuntimeState,
    TriggerRunRequest,
    TriggerRunResult,
    TriggerState,
    TriggerUpdate,
)
from morning_brief.services.synthesizer import StaticSynthesizer
from morning_brief.services.workspace import WorkspaceService

router = APIRouter(prefix="/workspaces", tags=["Workspaces"])


def _not_found(error: NotFoundError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error.message,
    )


@router.get("/{workspace_id}/runtime", response_model=RuntimeState)
async def get_runtime(
    workspace_id: str,
    service: WorkspaceService = Depends(get_workspace_service),
) -> RuntimeState:
    """Get the workspace's delivery mode, streak and snooze state."""
    return await service.get_runtime(workspace_id)


@router.post("/{workspace_id}/runtime/reset", response_model=RuntimeState)
async def reset_runtime(
    workspace_id: str,
    service: WorkspaceService = Depends(get_workspace_service),
) -> RuntimeState:
    """Leave suggest-only mode and clear the low-confidence streak."""
    return await service.reset_runtime(workspace_id)


@router.get("/{workspace_id}/triggers", response_model=list[TriggerState])
async def list_triggers(
    workspace_id: str,
    service: WorkspaceService = Depends(get_workspace_service),
) -> list[TriggerState]:
    """List the workspace's refresh triggers."""
    return await service.list_triggers(workspace_id)


@router.patch("/{workspace_id}/triggers/{trigger_type}", response_model=TriggerState)
async def update_trigger(
    workspace_id: str,
    trigger_type: str,
    update: TriggerUpdate,
    service: WorkspaceService = Depends(get_workspace_service),
) -> TriggerState:
    """Update a trigger's configuration."""
    try:
        return await service.update_trigger(workspace_id, trigger_type, update)
    except NotFoundError as e:
        raise _not_found(e)


@router.post("/{workspace_id}/triggers/{trigger_type}/run", response_model=TriggerRunResult)
async def run_trigger(
    workspace_id: str,
    trigger_type: str,
    request: TriggerRunRequest,
    service: WorkspaceService = Depends(get_workspace_service),
) -> TriggerRunResult:
    """Evaluate a trigger; refresh and deliver the brief when it fires."""
    provided = request.model_fields_set
    return await service.run_trigger(
        workspace_id,
        trigger_type,
        ReasonerInput(mission_hint=request.mission_hint, evidence=request.evidence),
        synthesizer=(
            StaticSynthesizer(request.llm_candidate) if "llm_candidate" in provided else None
        ),
        repairer=(
            StaticSynthesizer(request.repair_candidate) if "repair_candidate" in provided else None
        ),
        now=request.now,
        signal=request.signal,
    )


@router.get("/{workspace_id}/brief", response_model=PresentationRecord)
async def get_brief(
    workspace_id: str,
    service: WorkspaceService = Depends(get_workspace_service),
) -> PresentationRecord:
    """Get the delivered brief with its history and overrides."""
    try:
        return await service.get_presentation(workspace_id)
    except NotFoundError as e:
        raise _not_found(e)


@router.post(
    "/{workspace_id}/brief/overrides",
    response_model=PresentationRecord,
    status_code=status.HTTP_201_CREATED,
)
async def record_override(
    workspace_id: str,
    request: OverrideCreate,
    service: WorkspaceService = Depends(get_workspace_service),
) -> PresentationRecord:
    """Record a user reaction to the delivered brief."""
    try:
        return await service.apply_override(workspace_id, request)
    except NotFoundError as e:
        raise _not_found(e)
    except LifecycleMisuseError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": e.code, "message": e.message},
        )
    except InvalidOverrideError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"code": e.code, "message": e.message},
        )
