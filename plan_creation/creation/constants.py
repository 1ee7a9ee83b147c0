"""Plan creation constants.

Safety ceilings, week-day ordering, suppressed conflict codes and
optimization-profile presets shared by the creation engine.
"""

WEEK_DAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

# Goal spacing
MIN_PREP_DAYS_BETWEEN_GOALS = 21

# Quick-fix ceilings (system-wide, never exceeded by a fix)
MAX_SAFE_WEEKLY_TSS_RAMP_PCT = 20
MAX_SAFE_CTL_RAMP_PER_WEEK = 8

# Field bounds for editable limits
POST_GOAL_RECOVERY_DAYS_MAX = 28
CREATION_MAX_WEEKLY_TSS_RAMP_PCT = MAX_SAFE_WEEKLY_TSS_RAMP_PCT
CREATION_MAX_CTL_RAMP_PER_WEEK = MAX_SAFE_CTL_RAMP_PER_WEEK

# Conflict consolidation
DEFAULT_BLOCKING_ISSUE_LIMIT = 3

# Surfaced as review-only observations, never as create blockers
SUPPRESSED_OBSERVATION_CODES: frozenset[str] = frozenset(
    {
        "required_tss_ramp_exceeds_cap",
        "required_ctl_ramp_exceeds_cap",
    }
)

# Composite readiness weights, in residual order (last key absorbs rounding)
COMPOSITE_WEIGHT_KEYS: tuple[str, ...] = (
    "target_attainment_weight",
    "envelope_weight",
    "durability_weight",
    "evidence_weight",
)
WEIGHT_PRECISION = 6
WEIGHT_EPSILON = 1e-9

# Debounce delays (milliseconds)
PREVIEW_REFRESH_DELAY_MS = 350
HIGH_IMPACT_RECOMPUTE_DELAY_MS = 500

# Recovery and ramp presets applied when the optimization profile changes
OPTIMIZATION_PROFILE_PRESETS: dict[str, dict[str, int]] = {
    "outcome_first": {
        "post_goal_recovery_days": 2,
        "max_weekly_tss_ramp_pct": 12,
        "max_ctl_ramp_per_week": 5,
    },
    "balanced": {
        "post_goal_recovery_days": 5,
        "max_weekly_tss_ramp_pct": 7,
        "max_ctl_ramp_per_week": 3,
    },
    "sustainable": {
        "post_goal_recovery_days": 9,
        "max_weekly_tss_ramp_pct": 4,
        "max_ctl_ramp_per_week": 2,
    },
}

PREVIEW_FAILURE_MESSAGE = "Could not compute feasibility and safety preview. Check goal details and try again."
PREVIEW_INCOMPLETE_GOALS_MESSAGE = "Preview unavailable until at least one goal has complete target details."
BLOCKING_CONFLICTS_MESSAGE = "Your current settings have blocking conflicts. Apply a quick fix or adjust the advanced fields."
CREATE_FAILURE_MESSAGE = "Failed to create training plan from config."
