"""Default configuration state used before suggestions arrive."""

from datetime import datetime

from plan_creation.creation.constants import WEEK_DAYS
from plan_creation.creation.provenance import create_provenance
from plan_creation.creation.types import (
    AvailabilityConfig,
    AvailabilityDay,
    AvailabilityWindow,
    CompositeWeightLocks,
    CompositeWeights,
    ConfigLocks,
    Constraints,
    OptimizationProfile,
    TrainingPlanConfig,
    ValueSource,
)

DEFAULT_REST_DAYS = ("wednesday", "friday")
DEFAULT_WINDOW = AvailabilityWindow(start_minute_of_day=360, end_minute_of_day=450)


def create_default_availability() -> AvailabilityConfig:
    """Moderate template: one early session on every day except the rest days."""
    return AvailabilityConfig(
        template="moderate",
        days=tuple(
            AvailabilityDay(
                day=day,
                windows=() if day in DEFAULT_REST_DAYS else (DEFAULT_WINDOW,),
                max_sessions=0 if day in DEFAULT_REST_DAYS else 1,
            )
            for day in WEEK_DAYS
        ),
    )


def create_default_config(now: datetime | None = None) -> TrainingPlanConfig:
    return TrainingPlanConfig(
        availability_config=create_default_availability(),
        availability_provenance=create_provenance(ValueSource.DEFAULT, ("initial_default",), updated_at=now),
        recent_influence_score=0,
        recent_influence_action="disabled",
        recent_influence_provenance=create_provenance(ValueSource.DEFAULT, ("initial_default",), updated_at=now),
        constraints=Constraints(
            hard_rest_days=DEFAULT_REST_DAYS,
            min_sessions_per_week=3,
            max_sessions_per_week=4,
            max_single_session_duration_minutes=90,
            goal_difficulty_preference="balanced",
        ),
        constraints_source=ValueSource.DEFAULT,
        optimization_profile=OptimizationProfile.BALANCED,
        post_goal_recovery_days=5,
        max_weekly_tss_ramp_pct=7,
        max_ctl_ramp_per_week=3,
        composite_weights=CompositeWeights(),
        composite_locks=CompositeWeightLocks(),
        locks=ConfigLocks(),
    )
