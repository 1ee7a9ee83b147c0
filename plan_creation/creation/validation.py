"""Create-time validation of the plan form.

Errors are keyed by field path (e.g. "goals.0.targets.1.distanceKm") so the
UI can attach each message to the offending input. Creation stays blocked
while any error remains.
"""

from datetime import date

from plan_creation.creation.goals import latest_goal_date
from plan_creation.creation.parsers import (
    parse_date_only,
    parse_distance_km_to_meters,
    parse_hms_to_seconds,
    parse_mmss_to_seconds,
)
from plan_creation.creation.types import GoalTarget, PlanForm

MIN_GOAL_PRIORITY = 0
MAX_GOAL_PRIORITY = 10


def _validate_target(target: GoalTarget, prefix: str, errors: dict[str, str]) -> None:
    if target.target_type == "race_performance":
        if not target.activity_category:
            errors[f"{prefix}.activityCategory"] = "Select an activity for race performance"
        if not parse_distance_km_to_meters(target.distance_km):
            errors[f"{prefix}.distanceKm"] = "Distance (km) must be greater than 0"
        if not parse_hms_to_seconds(target.completion_time_hms or ""):
            errors[f"{prefix}.completionTimeHms"] = "Completion time must use h:mm:ss"

    elif target.target_type == "pace_threshold":
        if not parse_mmss_to_seconds(target.pace_mm_ss or ""):
            errors[f"{prefix}.paceMmSs"] = "Pace must use mm:ss"
        if not target.activity_category:
            errors[f"{prefix}.activityCategory"] = "Select an activity for pace threshold"
        if not parse_hms_to_seconds(target.test_duration_hms or ""):
            errors[f"{prefix}.testDurationHms"] = "Test duration must use h:mm:ss"

    elif target.target_type == "power_threshold":
        if not target.target_watts or target.target_watts <= 0:
            errors[f"{prefix}.targetWatts"] = "Target watts must be greater than 0"
        if not target.activity_category:
            errors[f"{prefix}.activityCategory"] = "Select an activity for power threshold"
        if not parse_hms_to_seconds(target.test_duration_hms or ""):
            errors[f"{prefix}.testDurationHms"] = "Test duration must use h:mm:ss"

    elif target.target_type == "hr_threshold":
        if not target.target_lthr_bpm or target.target_lthr_bpm <= 0:
            errors[f"{prefix}.targetLthrBpm"] = "LTHR must be greater than 0"


def validate_training_plan_form(form: PlanForm, today: date | None = None) -> dict[str, str]:
    """Validate the plan form before creation.

    Args:
        form: Plan form with start date and goals
        today: Reference date for "future" checks (defaults to today)

    Returns:
        Field-path keyed error messages; empty when the form is valid
    """
    errors: dict[str, str] = {}
    reference_day = today or date.today()

    if not form.goals:
        errors["goals"] = "At least one goal is required"

    for goal_index, goal in enumerate(form.goals):
        goal_prefix = f"goals.{goal_index}"

        if not goal.name.strip():
            errors[f"{goal_prefix}.name"] = "Goal name is required"

        if not goal.target_date:
            errors[f"{goal_prefix}.targetDate"] = "Target date is required"
        else:
            target_date = parse_date_only(goal.target_date)
            if target_date is None:
                errors[f"{goal_prefix}.targetDate"] = "Target date must use yyyy-mm-dd"
            elif target_date < reference_day:
                errors[f"{goal_prefix}.targetDate"] = "Target date must be in the future"

        if goal.priority < MIN_GOAL_PRIORITY or goal.priority > MAX_GOAL_PRIORITY:
            errors[f"{goal_prefix}.priority"] = "Priority must be between 0 and 10"

        if not goal.targets:
            errors[f"{goal_prefix}.targets"] = "At least one target is required"
            continue

        for target_index, target in enumerate(goal.targets):
            _validate_target(target, f"{goal_prefix}.targets.{target_index}", errors)

    plan_start_date = parse_date_only(form.plan_start_date)
    if form.plan_start_date and plan_start_date is None:
        errors["planStartDate"] = "Plan start date must use yyyy-mm-dd"

    if plan_start_date is not None:
        latest = latest_goal_date(form.goals)
        if latest is not None and plan_start_date > latest:
            errors["planStartDate"] = "Plan start date must be on or before the latest goal target date"

    if any(".targets" in key for key in errors):
        errors.setdefault("goals", "Each goal must include valid target details")

    return errors
