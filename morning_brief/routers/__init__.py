"""
API routers package.
"""
from morning_brief.routers.briefings import router as briefings_router
from morning_brief.routers.workspaces import router as workspaces_router

__all__ = [
    "briefings_router",
    "workspaces_router",
]
