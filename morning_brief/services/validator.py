"""
Brief validation.
"""
from morning_brief.schemas.brief import Brief
from morning_brief.schemas.reasoning import ValidationIssue, ValidationResult

MAX_PRIORITIES = 3


def _is_integral(value: int | float) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def validate_brief(brief: Brief) -> ValidationResult:
    """
    Check a brief against the delivery rules.

    Issues are emitted in a fixed order: the priority count first, then
    per-priority checks in array order, then unresolved evidence references
    in (priority, ref) order.
    """
    issues: list[ValidationIssue] = []
    priorities = brief.priorities

    if len(priorities) > MAX_PRIORITIES:
        issues.append(ValidationIssue(
            code="too_many_priorities",
            path="priorities",
            message=f"At most {MAX_PRIORITIES} priorities are allowed.",
        ))

    seen_ranks: set[int | float] = set()
    for index, priority in enumerate(priorities):
        path = f"priorities[{index}]"
        rank = priority.rank

        if not _is_integral(rank) or rank < 1 or rank > MAX_PRIORITIES:
            issues.append(ValidationIssue(
                code="rank_out_of_bounds",
                path=f"{path}.rank",
                message=f"Rank must be an integer between 1 and {MAX_PRIORITIES}.",
            ))

        if rank in seen_ranks:
            issues.append(ValidationIssue(
                code="duplicate_rank",
                path=f"{path}.rank",
                message=f"Rank {rank} is duplicated.",
            ))
        seen_ranks.add(rank)

        if not priority.evidence_refs:
            issues.append(ValidationIssue(
                code="missing_evidence_ref",
                path=f"{path}.evidence_refs",
                message="Each priority must reference at least one evidence item.",
            ))

        if priority.confidence == "low" and not (priority.verification_prompt or "").strip():
            issues.append(ValidationIssue(
                code="verification_prompt_required",
                path=f"{path}.verification_prompt",
                message="Low-confidence priorities must include a verification prompt.",
            ))

    evidence_ids = {item.id for item in brief.evidence}
    for index, priority in enumerate(priorities):
        for ref_index, ref in enumerate(priority.evidence_refs):
            if ref not in evidence_ids:
                issues.append(ValidationIssue(
                    code="unknown_evidence_ref",
                    path=f"priorities[{index}].evidence_refs[{ref_index}]",
                    message=f'Evidence reference "{ref}" does not exist.',
                ))

    return ValidationResult(ok=not issues, issues=issues)
