"""
Workspace runtime model for delivery mode and snooze state.
"""
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from morning_brief.database import Base

if TYPE_CHECKING:
    from morning_brief.models.trigger import Trigger
    from morning_brief.models.briefing import BriefPresentation


class WorkspaceRuntime(Base):
    """Per-workspace morning brief runtime state."""

    __tablename__ = "workspace_runtimes"

    workspace_id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )
    mode: Mapped[str] = mapped_column(
        String(20),
        default="normal",
        nullable=False,
    )  # normal, suggest_only
    low_confidence_streak: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    snoozed_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    triggers: Mapped[list["Trigger"]] = relationship(
        "Trigger",
        back_populates="workspace",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    presentation: Mapped[Optional["BriefPresentation"]] = relationship(
        "BriefPresentation",
        back_populates="workspace",
        cascade="all, delete-orphan",
        uselist=False,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<WorkspaceRuntime {self.workspace_id} ({self.mode})>"
