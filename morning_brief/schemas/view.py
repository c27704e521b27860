"""
Display view schemas.
"""
from typing import Literal

from pydantic import BaseModel

VIEW_SCHEMA_VERSION = "v1"

SectionId = Literal["mission", "priorities", "evidence", "quick_reaction"]

SECTION_ORDER: tuple[SectionId, ...] = ("mission", "priorities", "evidence", "quick_reaction")


class ViewSection(BaseModel):
    """One rendered section of the brief."""
    id: SectionId
    title: str
    body: str


class BriefView(BaseModel):
    """Fixed four-section projection of a brief."""
    schema_version: Literal["v1"] = VIEW_SCHEMA_VERSION
    source_schema_version: Literal["v0.2"] = "v0.2"
    generated_at: str
    sections: list[ViewSection]
