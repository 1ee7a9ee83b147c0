"""Blocking conflict consolidation.

Two independent sources report conflicts: the preview's conflict list and the
feasibility/safety summary's blockers. They are merged into one bounded,
deduplicated list of blocking issues. The preview source keeps priority for
ordering and detail (its suggestions survive; feasibility blockers carry none).
"""

from collections.abc import Iterable, Sequence

from plan_creation.creation.constants import DEFAULT_BLOCKING_ISSUE_LIMIT, SUPPRESSED_OBSERVATION_CODES
from plan_creation.creation.types import BlockingIssue, Conflict, FeasibilitySafetySummary


def dedupe_key(conflict: Conflict) -> str:
    return f"{conflict.code}:{conflict.message.strip().lower()}"


def consolidate_blocking_issues(
    conflict_items: Iterable[Conflict],
    feasibility_summary: FeasibilitySafetySummary | None = None,
    limit: int = DEFAULT_BLOCKING_ISSUE_LIMIT,
) -> list[BlockingIssue]:
    """Merge blocking conflicts from both sources.

    Rules:
    - Preview conflicts: blocking severity only
    - Suppressed observation codes are dropped from both sources
    - Dedupe on code + trimmed lowercase message, first occurrence wins
    - Feasibility blockers are appended after every preview conflict
    - Stable truncation to limit (no re-sorting)

    Args:
        conflict_items: Conflicts from the preview response
        feasibility_summary: Feasibility/safety summary with blockers
        limit: Maximum number of issues returned

    Returns:
        At most limit blocking issues, in insertion order
    """
    if limit <= 0:
        return []

    seen: set[str] = set()
    merged: list[BlockingIssue] = []

    for conflict in conflict_items:
        if conflict.severity != "blocking":
            continue
        if conflict.code in SUPPRESSED_OBSERVATION_CODES:
            continue
        key = dedupe_key(conflict)
        if key in seen:
            continue
        seen.add(key)
        merged.append(
            BlockingIssue(
                code=conflict.code,
                message=conflict.message,
                suggestions=conflict.suggestions,
            )
        )

    blockers = feasibility_summary.blockers if feasibility_summary is not None else ()
    for blocker in blockers:
        if blocker.code in SUPPRESSED_OBSERVATION_CODES:
            continue
        key = dedupe_key(blocker)
        if key in seen:
            continue
        seen.add(key)
        merged.append(BlockingIssue(code=blocker.code, message=blocker.message))

    return merged[:limit]


def create_disabled_reason(blocking_issues: Sequence[BlockingIssue]) -> str | None:
    """Explain why plan creation is disabled. Depends only on the issue count."""
    count = len(blocking_issues)
    if count == 0:
        return None
    if count == 1:
        return "Create is disabled until 1 blocking conflict is resolved."
    return f"Create is disabled until {count} blocking conflicts are resolved."
