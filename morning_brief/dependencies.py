"""
FastAPI dependencies.
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from morning_brief.database import get_db
from morning_brief.services.workspace import WorkspaceLocks, WorkspaceService


def get_workspace_locks(request: Request) -> WorkspaceLocks:
    """Lock registry owned by the application."""
    return request.app.state.workspace_locks


def get_workspace_service(
    db: AsyncSession = Depends(get_db),
    locks: WorkspaceLocks = Depends(get_workspace_locks),
) -> WorkspaceService:
    return WorkspaceService(db, locks)
