"""
Trigger model for refresh scheduling bookkeeping.
"""
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.sqlite import JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from morning_brief.database import Base

if TYPE_CHECKING:
    from morning_brief.models.workspace import WorkspaceRuntime


class Trigger(Base):
    """Named refresh trigger for a workspace."""

    __tablename__ = "triggers"
    __table_args__ = (
        UniqueConstraint("workspace_id", "type", name="uq_triggers_workspace_type"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    workspace_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("workspace_runtimes.workspace_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    trigger_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )  # e.g. trigger_blocker
    type: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )  # schedule.morning, event.blocker, user.request_refresh, ...
    name: Mapped[str] = mapped_column(
        String(255),
        default="",
    )
    description: Mapped[str] = mapped_column(
        Text,
        default="",
    )
    enabled: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
    )
    min_interval_minutes: Mapped[float] = mapped_column(
        Float,
        default=0,
    )
    cooldown_minutes: Mapped[float] = mapped_column(
        Float,
        default=0,
    )
    last_fired_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    criteria: Mapped[dict] = mapped_column(
        JSON,
        default=dict,
    )  # Trigger-specific thresholds

    # Relationships
    workspace: Mapped["WorkspaceRuntime"] = relationship(
        "WorkspaceRuntime",
        back_populates="triggers",
    )

    def __repr__(self) -> str:
        return f"<Trigger {self.type} for workspace {self.workspace_id}>"
