"""User edit operations on a configuration snapshot.

Each operation returns a new snapshot built through ConfigDraft. Edits to a
provenance-tracked group stamp source = user. Malformed numeric input keeps
the previous snapshot; out-of-range input is clamped to the field bounds.
"""

from datetime import datetime

from loguru import logger

from plan_creation.creation.constants import (
    COMPOSITE_WEIGHT_KEYS,
    CREATION_MAX_CTL_RAMP_PER_WEEK,
    CREATION_MAX_WEEKLY_TSS_RAMP_PCT,
    OPTIMIZATION_PROFILE_PRESETS,
    POST_GOAL_RECOVERY_DAYS_MAX,
    WEEK_DAYS,
)
from plan_creation.creation.defaults import DEFAULT_WINDOW
from plan_creation.creation.draft import ConfigDraft
from plan_creation.creation.errors import UnknownWeightKeyError
from plan_creation.creation.parsers import clamp, coerce_number
from plan_creation.creation.provenance import mark_user
from plan_creation.creation.types import (
    AvailabilityConfig,
    AvailabilityDay,
    OptimizationProfile,
    RecentInfluenceAction,
    TrainingPlanConfig,
    ValueSource,
)

_NUMERIC_CONSTRAINTS = {
    "min_sessions_per_week": (0, 14),
    "max_sessions_per_week": (0, 14),
    "max_single_session_duration_minutes": (0, 600),
}
_DIFFICULTY_PREFERENCES = {"conservative", "balanced", "stretch"}


def _coerce_bounded_int(value: object, lower: int, upper: int) -> int | None:
    number = coerce_number(value)
    if number is None:
        return None
    return int(clamp(round(number), lower, upper))


def set_availability_config(
    config: TrainingPlanConfig,
    availability: AvailabilityConfig,
    *,
    now: datetime | None = None,
) -> TrainingPlanConfig:
    draft = ConfigDraft(config)
    draft.set("availability_config", availability)
    draft.set("availability_provenance", mark_user(config.availability_provenance, updated_at=now))
    return draft.build()


def toggle_availability_day(
    config: TrainingPlanConfig,
    day: str,
    available: bool,
    *,
    now: datetime | None = None,
) -> TrainingPlanConfig:
    """Open or close a week day. Opening adds the default early window."""
    if day not in WEEK_DAYS:
        logger.debug(f"[EDITS] Ignored unknown week day: {day}")
        return config

    existing = {entry.day: entry for entry in config.availability_config.days}
    days = []
    for week_day in WEEK_DAYS:
        if week_day == day:
            days.append(
                AvailabilityDay(
                    day=week_day,
                    windows=(DEFAULT_WINDOW,) if available else (),
                    max_sessions=1 if available else 0,
                )
            )
        elif week_day in existing:
            days.append(existing[week_day])
    availability = AvailabilityConfig(template="custom", days=tuple(days))
    return set_availability_config(config, availability, now=now)


def set_recent_influence(
    config: TrainingPlanConfig,
    score: object,
    *,
    now: datetime | None = None,
) -> TrainingPlanConfig:
    number = coerce_number(score)
    if number is None:
        return config
    draft = ConfigDraft(config)
    draft.set("recent_influence_score", clamp(number, -1.0, 1.0))
    draft.set("recent_influence_action", "edited")
    draft.set("recent_influence_provenance", mark_user(config.recent_influence_provenance, updated_at=now))
    return draft.build()


def set_recent_influence_action(
    config: TrainingPlanConfig,
    action: RecentInfluenceAction,
    *,
    now: datetime | None = None,
) -> TrainingPlanConfig:
    draft = ConfigDraft(config)
    draft.set("recent_influence_action", action)
    draft.set("recent_influence_provenance", mark_user(config.recent_influence_provenance, updated_at=now))
    return draft.build()


def set_constraint(config: TrainingPlanConfig, field: str, value: object) -> TrainingPlanConfig:
    """Edit one constraint value and mark the constraints group user-owned."""
    if field in _NUMERIC_CONSTRAINTS:
        lower, upper = _NUMERIC_CONSTRAINTS[field]
        coerced = _coerce_bounded_int(value, lower, upper)
        if coerced is None:
            logger.debug(f"[EDITS] Rejected non-numeric {field}: {value!r}")
            return config
        value = coerced
    elif field == "goal_difficulty_preference":
        if value not in _DIFFICULTY_PREFERENCES:
            return config
    elif field == "hard_rest_days":
        value = tuple(day for day in WEEK_DAYS if day in set(value))  # type: ignore[arg-type]
    else:
        raise KeyError(f"Unknown constraint field: {field}")

    draft = ConfigDraft(config)
    draft.set_constraint(field, value)
    draft.set("constraints_source", ValueSource.USER)
    return draft.build()


def toggle_hard_rest_day(config: TrainingPlanConfig, day: str) -> TrainingPlanConfig:
    if day not in WEEK_DAYS:
        return config
    current = set(config.constraints.hard_rest_days)
    current.symmetric_difference_update({day})
    return set_constraint(config, "hard_rest_days", current)


def set_field_lock(config: TrainingPlanConfig, field: str, locked: bool) -> TrainingPlanConfig:
    return ConfigDraft(config).set("locks", config.locks.with_lock(field, locked)).build()


def set_optimization_profile(config: TrainingPlanConfig, profile: OptimizationProfile | str) -> TrainingPlanConfig:
    """Switch profile and apply its recovery/ramp presets to the unlocked fields."""
    next_profile = OptimizationProfile(profile)
    preset = OPTIMIZATION_PROFILE_PRESETS[next_profile.value]

    draft = ConfigDraft(config)
    draft.set("optimization_profile", next_profile)
    for field, preset_value in preset.items():
        if not config.locks.is_locked(field):
            draft.set(field, preset_value)
    return draft.build()


def set_post_goal_recovery_days(config: TrainingPlanConfig, value: object) -> TrainingPlanConfig:
    days = _coerce_bounded_int(value, 0, POST_GOAL_RECOVERY_DAYS_MAX)
    if days is None:
        return config
    return ConfigDraft(config).set("post_goal_recovery_days", days).build()


def set_max_weekly_tss_ramp_pct(config: TrainingPlanConfig, value: object) -> TrainingPlanConfig:
    number = coerce_number(value)
    if number is None:
        return config
    return ConfigDraft(config).set("max_weekly_tss_ramp_pct", clamp(number, 0, CREATION_MAX_WEEKLY_TSS_RAMP_PCT)).build()


def set_max_ctl_ramp_per_week(config: TrainingPlanConfig, value: object) -> TrainingPlanConfig:
    number = coerce_number(value)
    if number is None:
        return config
    return ConfigDraft(config).set("max_ctl_ramp_per_week", clamp(number, 0, CREATION_MAX_CTL_RAMP_PER_WEEK)).build()


def set_composite_weight_lock(config: TrainingPlanConfig, key: str, locked: bool) -> TrainingPlanConfig:
    if key not in COMPOSITE_WEIGHT_KEYS:
        raise UnknownWeightKeyError(key, COMPOSITE_WEIGHT_KEYS)
    composite_locks = config.composite_locks.model_copy(update={key: locked})
    return ConfigDraft(config).set("composite_locks", composite_locks).build()
