"""Outbound payload builders.

Shapes the configuration snapshot into the suggestion request, the creation
normalization input and the create-plan request consumed by collaborators.
"""

from typing import Any

from plan_creation.creation.preview import target_to_payload
from plan_creation.creation.types import PlanForm, TrainingPlanConfig, ValueSource


def build_suggestion_request(config: TrainingPlanConfig) -> dict[str, Any]:
    """Locks and current values sent with a suggestion recompute."""
    return {
        "locks": config.locks.model_dump(mode="json", exclude_none=True),
        "existing_values": {
            "availability_config": config.availability_config.model_dump(mode="json"),
            "recent_influence": {"influence_score": config.recent_influence_score},
            "optimization_profile": config.optimization_profile.value,
            "post_goal_recovery_days": config.post_goal_recovery_days,
            "max_weekly_tss_ramp_pct": config.max_weekly_tss_ramp_pct,
            "max_ctl_ramp_per_week": config.max_ctl_ramp_per_week,
            "constraints": config.constraints.model_dump(mode="json"),
        },
    }


def to_creation_normalization_input(config: TrainingPlanConfig) -> dict[str, Any]:
    """Map the configuration to user values and provenance overrides.

    Constraints are only sent as user values when the user owns them.
    """
    user_values: dict[str, Any] = {
        "availability_config": config.availability_config.model_dump(mode="json"),
        "recent_influence": {"influence_score": config.recent_influence_score},
        "recent_influence_action": config.recent_influence_action,
        "optimization_profile": config.optimization_profile.value,
        "post_goal_recovery_days": config.post_goal_recovery_days,
        "max_weekly_tss_ramp_pct": config.max_weekly_tss_ramp_pct,
        "max_ctl_ramp_per_week": config.max_ctl_ramp_per_week,
        "calibration": {
            "version": 1,
            "readiness_composite": config.composite_weights.as_dict(),
        },
        "locks": config.locks.model_dump(mode="json", exclude_none=True),
    }
    if config.constraints_source == ValueSource.USER:
        user_values["constraints"] = config.constraints.model_dump(mode="json")

    return {
        "user_values": user_values,
        "provenance_overrides": {
            "availability_provenance": config.availability_provenance.model_dump(mode="json"),
            "recent_influence_provenance": config.recent_influence_provenance.model_dump(mode="json"),
        },
    }


def build_minimal_plan_payload(form: PlanForm) -> dict[str, Any]:
    """Minimal plan for the create call. Assumes the form already validated."""
    plan: dict[str, Any] = {
        "goals": [
            {
                "name": goal.name.strip(),
                "target_date": goal.target_date.strip(),
                "priority": goal.priority,
                "targets": [
                    payload for payload in (target_to_payload(target) for target in goal.targets) if payload is not None
                ],
            }
            for goal in form.goals
        ],
    }
    if form.plan_start_date and form.plan_start_date.strip():
        plan["plan_start_date"] = form.plan_start_date.strip()
    return plan


def build_create_plan_payload(
    form: PlanForm,
    config: TrainingPlanConfig,
    preview_snapshot_token: str | None = None,
    *,
    is_active: bool = True,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "minimal_plan": build_minimal_plan_payload(form),
        "creation_input": to_creation_normalization_input(config),
        "post_create_behavior": {"autonomous_mutation_enabled": False},
        "is_active": is_active,
    }
    if preview_snapshot_token:
        payload["preview_snapshot_token"] = preview_snapshot_token
    return payload


def build_preview_request(minimal_plan: dict[str, Any], config: TrainingPlanConfig) -> dict[str, Any]:
    return {
        "minimal_plan": minimal_plan,
        "creation_input": to_creation_normalization_input(config),
        "post_create_behavior": {"autonomous_mutation_enabled": False},
    }
