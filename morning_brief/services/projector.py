"""
Projection of a brief into the four-section display view.
"""
from morning_brief.schemas.brief import Brief
from morning_brief.schemas.view import SECTION_ORDER, BriefView, ViewSection

MAX_EVIDENCE_LINES = 5


def _non_empty(value: str | None, fallback: str) -> str:
    normalized = (value or "").strip()
    return normalized or fallback


def _number(value: int | float) -> str:
    # JSON numbers such as 2.0 render as 2
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _mission_section(brief: Brief) -> ViewSection:
    title = _non_empty(brief.mission.title, "Mission pending")
    rationale = _non_empty(brief.mission.rationale, "No rationale available yet. Request a refresh.")
    return ViewSection(id="mission", title="Mission", body=f"{title}\n{rationale}")


def _priorities_section(brief: Brief) -> ViewSection:
    if brief.priorities:
        ordered = sorted(brief.priorities, key=lambda priority: priority.rank)
        body = "\n".join(
            f"P{_number(priority.rank)}: "
            f"{_non_empty(priority.headline, 'Untitled priority')} — "
            f"{_non_empty(priority.summary, 'No summary provided.')}"
            for priority in ordered
        )
    else:
        body = "No priorities available yet. Trigger a precompute run."
    return ViewSection(
        id="priorities",
        title="Top Priorities",
        body=_non_empty(body, "No priorities available yet."),
    )


def _evidence_section(brief: Brief) -> ViewSection:
    if brief.evidence:
        body = "\n".join(
            f"{item.id}: {item.value_text} "
            f"({item.source}/{item.entity}, freshness {_number(item.freshness_minutes)}m)"
            for item in brief.evidence[:MAX_EVIDENCE_LINES]
        )
    else:
        body = "No evidence captured yet. Collect source data before acting."
    return ViewSection(
        id="evidence",
        title="Evidence",
        body=_non_empty(body, "No evidence captured yet."),
    )


def _quick_reaction_section(brief: Brief) -> ViewSection:
    verification = [
        priority.verification_prompt.strip()
        for priority in brief.priorities
        if priority.confidence == "low"
        and priority.verification_prompt
        and priority.verification_prompt.strip()
    ]
    prompt = _non_empty(brief.quick_reaction_prompt, "Quick reaction: accept, reframe, or snooze.")
    suffix = f"\nVerify first: {' | '.join(verification)}" if verification else ""
    return ViewSection(
        id="quick_reaction",
        title="Quick Reaction",
        body=_non_empty(f"{prompt}{suffix}", "Quick reaction unavailable."),
    )


def project_brief(brief: Brief) -> BriefView:
    """Render a brief into mission, priorities, evidence and quick reaction sections."""
    sections = {
        "mission": _mission_section(brief),
        "priorities": _priorities_section(brief),
        "evidence": _evidence_section(brief),
        "quick_reaction": _quick_reaction_section(brief),
    }
    return BriefView(
        generated_at=brief.generated_at,
        sections=[sections[section_id] for section_id in SECTION_ORDER],
    )
