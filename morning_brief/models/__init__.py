"""
SQLAlchemy models package.
"""
from morning_brief.models.workspace import WorkspaceRuntime
from morning_brief.models.trigger import Trigger
from morning_brief.models.briefing import BriefPresentation

__all__ = ["WorkspaceRuntime", "Trigger", "BriefPresentation"]
