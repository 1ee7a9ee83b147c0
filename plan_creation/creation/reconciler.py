"""Suggestion merge and dirty-state reconciliation.

The reconciler merges system suggestions into the in-progress configuration
without clobbering user intent. Three field groups are evaluated
independently:

- availability: availability schedule + provenance
- recent: recent-influence score, action + provenance
- constraints: session-count and scheduling constraints + source

Seed mode (first load) applies every group unconditionally. Recompute mode
applies a group only when it is not dirty and not locked; constraints are
applied field by field so individually locked constraint fields survive.

merge_suggestions is pure: the same inputs always produce the same result.
"""

from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from plan_creation.creation.draft import ConfigDraft
from plan_creation.creation.provenance import resolve_provenance
from plan_creation.creation.types import (
    CONSTRAINT_LOCK_FIELDS,
    Constraints,
    DirtyState,
    MergeMode,
    SuggestionResponse,
    TrainingPlanConfig,
    ValueSource,
)

AVAILABILITY_GROUP = "availability"
RECENT_GROUP = "recent"
CONSTRAINTS_GROUP = "constraints"

# Fields whose change schedules a suggestion recompute
HIGH_IMPACT_FIELDS: tuple[str, ...] = (
    "availability_config",
    "constraints",
    "locks",
    "optimization_profile",
    "post_goal_recovery_days",
    "max_weekly_tss_ramp_pct",
    "max_ctl_ramp_per_week",
)


@dataclass(frozen=True)
class MergeResult:
    """Outcome of a suggestion merge.

    Attributes:
        config: Next configuration snapshot
        informational_conflicts: Lock-caused suggestion suppressions, passed through
        context_summary: Suggestion context summary, passed through
        applied_groups: Field groups that took suggested values
    """

    config: TrainingPlanConfig
    informational_conflicts: tuple[str, ...] = ()
    context_summary: dict[str, Any] | None = None
    applied_groups: tuple[str, ...] = field(default_factory=tuple)


def _can_apply_group(
    group: str,
    mode: MergeMode,
    dirty: bool,
    locked: bool,
) -> bool:
    if mode == MergeMode.SEED:
        return True
    if dirty:
        logger.debug(f"[RECONCILER] Skipped {group}: group is dirty")
        return False
    if locked:
        logger.debug(f"[RECONCILER] Skipped {group}: group is locked")
        return False
    return True


def _merge_constraints(
    draft: ConfigDraft,
    current: TrainingPlanConfig,
    suggested: Constraints,
    mode: MergeMode,
    dirty: bool,
) -> bool:
    if mode == MergeMode.SEED:
        draft.set("constraints", suggested)
        draft.set("constraints_source", ValueSource.SUGGESTED)
        return True

    if dirty:
        logger.debug(f"[RECONCILER] Skipped {CONSTRAINTS_GROUP}: group is dirty")
        return False

    unlocked_fields = [
        name
        for name in Constraints.model_fields
        if not (name in CONSTRAINT_LOCK_FIELDS and current.locks.is_locked(name))
    ]
    if not unlocked_fields:
        logger.debug(f"[RECONCILER] Skipped {CONSTRAINTS_GROUP}: every constraint field is locked")
        return False

    for name in unlocked_fields:
        draft.set_constraint(name, getattr(suggested, name))
    draft.set("constraints_source", ValueSource.SUGGESTED)
    return True


def merge_suggestions(
    current: TrainingPlanConfig,
    response: SuggestionResponse,
    mode: MergeMode | str,
    dirty: DirtyState | None = None,
) -> MergeResult:
    """Merge a suggestion response into the current configuration.

    Args:
        current: Current configuration snapshot (left untouched)
        response: Suggestion response from the suggestion source
        mode: "seed" on first load, "recompute" afterwards
        dirty: Per-group dirty flags (all clean when omitted)

    Returns:
        MergeResult with the next snapshot and pass-through metadata
    """
    merge_mode = MergeMode(mode)
    dirty_state = dirty or DirtyState()
    suggestions = response.suggestions
    force = merge_mode == MergeMode.SEED

    draft = ConfigDraft(current)
    applied: list[str] = []

    if _can_apply_group(
        AVAILABILITY_GROUP,
        merge_mode,
        dirty_state.availability,
        current.locks.availability_config.locked,
    ):
        draft.set("availability_config", suggestions.availability_config)
        draft.set(
            "availability_provenance",
            resolve_provenance(current.availability_provenance, suggestions.availability_provenance, force=force),
        )
        applied.append(AVAILABILITY_GROUP)

    if _can_apply_group(
        RECENT_GROUP,
        merge_mode,
        dirty_state.recent,
        current.locks.recent_influence.locked,
    ):
        draft.set("recent_influence_score", suggestions.recent_influence.influence_score)
        draft.set("recent_influence_action", suggestions.recent_influence_action)
        draft.set(
            "recent_influence_provenance",
            resolve_provenance(current.recent_influence_provenance, suggestions.recent_influence_provenance, force=force),
        )
        applied.append(RECENT_GROUP)

    if _merge_constraints(draft, current, suggestions.constraints, merge_mode, dirty_state.constraints):
        applied.append(CONSTRAINTS_GROUP)

    logger.info(
        f"[RECONCILER] Merged suggestions mode={merge_mode.value} "
        f"applied={','.join(applied) or 'none'} "
        f"locked_conflicts={len(suggestions.locked_conflicts)}"
    )

    return MergeResult(
        config=draft.build(),
        informational_conflicts=suggestions.locked_conflicts,
        context_summary=response.context_summary,
        applied_groups=tuple(applied),
    )


def update_dirty_state(previous: DirtyState, next_config: TrainingPlanConfig) -> DirtyState:
    """Fold a new snapshot into the dirty flags.

    Flags only ever turn on. A non-"accepted" recent-influence action counts
    as user-authored even when its provenance is not user.
    """
    return DirtyState(
        availability=previous.availability or next_config.availability_provenance.source == ValueSource.USER,
        recent=(
            previous.recent
            or next_config.recent_influence_action != "accepted"
            or next_config.recent_influence_provenance.source == ValueSource.USER
        ),
        constraints=previous.constraints or next_config.constraints_source == ValueSource.USER,
    )


def has_high_impact_change(previous: TrainingPlanConfig, next_config: TrainingPlanConfig) -> bool:
    """Value-equality comparison across the high-impact fields."""
    include = set(HIGH_IMPACT_FIELDS)
    return previous.model_dump(include=include) != next_config.model_dump(include=include)
