"""
Presentation record model for delivered morning briefs.
"""
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.dialects.sqlite import JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from morning_brief.database import Base

if TYPE_CHECKING:
    from morning_brief.models.workspace import WorkspaceRuntime


class BriefPresentation(Base):
    """Currently delivered brief, its history and the user's overrides."""

    __tablename__ = "brief_presentations"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    workspace_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("workspace_runtimes.workspace_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    current: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )  # Brief, view, telemetry, issues and confidence
    history: Mapped[list] = mapped_column(
        JSON,
        default=list,
    )  # Prior deliveries
    state: Mapped[str] = mapped_column(
        String(40),
        default="presented",
        nullable=False,
    )
    user_overrides: Mapped[list] = mapped_column(
        JSON,
        default=list,
    )  # Ordered override log
    delivered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    workspace: Mapped["WorkspaceRuntime"] = relationship(
        "WorkspaceRuntime",
        back_populates="presentation",
    )

    def __repr__(self) -> str:
        return f"<BriefPresentation {self.id} for workspace {self.workspace_id}>"
