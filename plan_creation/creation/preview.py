"""Preview state and preview request helpers.

The preview itself is computed by an external collaborator. This module
builds the minimal plan it needs from the form and folds preview outcomes
into display state, keeping the last good projection chart across failures.
"""

from typing import Any, Literal

from plan_creation.creation.parsers import (
    parse_date_only,
    parse_distance_km_to_meters,
    parse_hms_to_seconds,
    parse_mmss_to_seconds,
)
from plan_creation.creation.types import FrozenModel, GoalTarget, PlanForm


class PreviewState(FrozenModel):
    projection_chart: dict[str, Any] | None = None
    preview_error: str | None = None


class PreviewEvent(FrozenModel):
    status: Literal["success", "failure"]
    projection_chart: dict[str, Any] | None = None
    error_message: str | None = None


def reduce_preview_state(previous: PreviewState, event: PreviewEvent) -> PreviewState:
    """Fold a preview outcome into display state.

    Success replaces the chart and clears the error. Failure keeps the last
    successful chart and records the error message.
    """
    if event.status == "success":
        return PreviewState(projection_chart=event.projection_chart, preview_error=None)
    return PreviewState(projection_chart=previous.projection_chart, preview_error=event.error_message)


def target_to_payload(target: GoalTarget) -> dict[str, Any] | None:
    """Convert a form target to its wire shape, or None when incomplete."""
    if target.target_type == "race_performance":
        distance_m = parse_distance_km_to_meters(target.distance_km)
        target_time_s = parse_hms_to_seconds(target.completion_time_hms)
        if not target.activity_category or not distance_m or not target_time_s:
            return None
        return {
            "target_type": "race_performance",
            "activity_category": target.activity_category,
            "distance_m": distance_m,
            "target_time_s": target_time_s,
        }

    if target.target_type == "pace_threshold":
        pace_s = parse_mmss_to_seconds(target.pace_mm_ss)
        test_duration_s = parse_hms_to_seconds(target.test_duration_hms)
        if not target.activity_category or not pace_s or not test_duration_s:
            return None
        return {
            "target_type": "pace_threshold",
            "activity_category": target.activity_category,
            "target_speed_mps": round(1000 / pace_s, 4),
            "test_duration_s": test_duration_s,
        }

    if target.target_type == "power_threshold":
        test_duration_s = parse_hms_to_seconds(target.test_duration_hms)
        if not target.activity_category or not target.target_watts or target.target_watts <= 0 or not test_duration_s:
            return None
        return {
            "target_type": "power_threshold",
            "activity_category": target.activity_category,
            "target_watts": target.target_watts,
            "test_duration_s": test_duration_s,
        }

    if not target.target_lthr_bpm or target.target_lthr_bpm <= 0:
        return None
    return {
        "target_type": "hr_threshold",
        "target_lthr_bpm": round(target.target_lthr_bpm),
    }


def build_preview_minimal_plan(form: PlanForm) -> dict[str, Any] | None:
    """Build the minimal plan sent to the preview collaborator.

    Goals without a valid date are skipped. A goal whose targets are all
    incomplete borrows the first valid target found in the form so the
    preview can still run. Blank names become "Goal N".

    Returns:
        Minimal plan dict, or None when no goal has a complete target
    """
    dated_goals = [goal for goal in form.goals if parse_date_only(goal.target_date) is not None]

    converted = [
        [payload for payload in (target_to_payload(target) for target in goal.targets) if payload is not None]
        for goal in dated_goals
    ]
    fallback = next((targets[0] for targets in converted if targets), None)
    if fallback is None:
        return None

    goals = []
    for index, (goal, targets) in enumerate(zip(dated_goals, converted)):
        goals.append(
            {
                "name": goal.name.strip() or f"Goal {index + 1}",
                "target_date": goal.target_date.strip(),
                "priority": goal.priority,
                "targets": targets or [dict(fallback)],
            }
        )

    plan: dict[str, Any] = {"goals": goals}
    start_date = parse_date_only(form.plan_start_date)
    if start_date is not None:
        plan["plan_start_date"] = start_date.isoformat()
    return plan
