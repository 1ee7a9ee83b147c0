"""Deterministic quick fixes for blocking conflict codes.

Each supported code maps to one narrow numeric adjustment of the
configuration. Fixes on the constraints group mark it user-owned: applying a
fix is an explicit user decision, so later suggestion refreshes must not
undo it.
"""

from collections.abc import Callable, Iterable

from loguru import logger

from plan_creation.config.settings import Settings, get_settings
from plan_creation.creation.draft import ConfigDraft
from plan_creation.creation.goals import minimum_gap_days
from plan_creation.creation.types import Goal, TrainingPlanConfig, ValueSource


def available_training_days(config: TrainingPlanConfig) -> int:
    """Count days with at least one window and session capacity, minus hard rest days."""
    available = {
        day.day
        for day in config.availability_config.days
        if day.windows and (day.max_sessions or 0) > 0
    }
    available.difference_update(config.constraints.hard_rest_days)
    return len(available)


def max_recovery_days_for_prep_window(goals: Iterable[Goal], min_prep_days: int) -> int:
    """Longest post-goal recovery that still leaves a full prep window before the next goal."""
    gap = minimum_gap_days(goals)
    if gap is None:
        return 0
    return max(0, gap - min_prep_days)


def _raise_max_sessions_to_min(draft: ConfigDraft, goals: list[Goal], settings: Settings) -> None:
    constraints = draft.constraints
    draft.set_constraint(
        "max_sessions_per_week",
        max(constraints.max_sessions_per_week or 0, constraints.min_sessions_per_week or 0),
    )
    draft.set("constraints_source", ValueSource.USER)


def _min_sessions_to_available_days(draft: ConfigDraft, goals: list[Goal], settings: Settings) -> None:
    draft.set_constraint("min_sessions_per_week", available_training_days(draft.base))
    draft.set("constraints_source", ValueSource.USER)


def _max_sessions_to_available_days(draft: ConfigDraft, goals: list[Goal], settings: Settings) -> None:
    draft.set_constraint("max_sessions_per_week", available_training_days(draft.base))
    draft.set("constraints_source", ValueSource.USER)


def _tss_ramp_to_safety_ceiling(draft: ConfigDraft, goals: list[Goal], settings: Settings) -> None:
    draft.set("max_weekly_tss_ramp_pct", settings.max_safe_weekly_tss_ramp_pct)


def _ctl_ramp_to_safety_ceiling(draft: ConfigDraft, goals: list[Goal], settings: Settings) -> None:
    draft.set("max_ctl_ramp_per_week", settings.max_safe_ctl_ramp_per_week)


def _clamp_recovery_to_prep_window(draft: ConfigDraft, goals: list[Goal], settings: Settings) -> None:
    ceiling = max_recovery_days_for_prep_window(goals, settings.min_prep_days_between_goals)
    current = draft.get("post_goal_recovery_days")
    draft.set("post_goal_recovery_days", max(0, min(current, ceiling)))


QuickFix = Callable[[ConfigDraft, list[Goal], Settings], None]

QUICK_FIXES: dict[str, QuickFix] = {
    "min_sessions_exceeds_max": _raise_max_sessions_to_min,
    "min_sessions_exceeds_available_days": _min_sessions_to_available_days,
    "max_sessions_exceeds_available_days": _max_sessions_to_available_days,
    "required_tss_ramp_exceeds_cap": _tss_ramp_to_safety_ceiling,
    "required_ctl_ramp_exceeds_cap": _ctl_ramp_to_safety_ceiling,
    "post_goal_recovery_overlaps_next_goal": _clamp_recovery_to_prep_window,
    "post_goal_recovery_compresses_next_goal_prep": _clamp_recovery_to_prep_window,
}


def has_quick_fix(code: str) -> bool:
    return code in QUICK_FIXES


def apply_quick_fix(
    code: str,
    config: TrainingPlanConfig,
    goals: Iterable[Goal],
    settings: Settings | None = None,
) -> TrainingPlanConfig:
    """Apply the quick fix registered for a conflict code.

    Args:
        code: Conflict code to resolve
        config: Current configuration snapshot (left untouched)
        goals: Plan goals, used by the recovery-window fixes
        settings: Safety ceilings and prep window (defaults to process settings)

    Returns:
        New configuration snapshot, or config itself for unknown codes
    """
    fix = QUICK_FIXES.get(code)
    if fix is None:
        logger.warning(f"[QUICK_FIX] No quick fix registered for conflict code: {code}")
        return config

    draft = ConfigDraft(config)
    fix(draft, list(goals), settings or get_settings())
    fixed = draft.build()

    logger.info(f"[QUICK_FIX] Applied quick fix code={code}")
    return fixed
