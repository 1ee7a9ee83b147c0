"""Test data builders and fake async collaborators."""

from datetime import datetime, timezone
from typing import Any

from plan_creation.creation.provenance import create_provenance
from plan_creation.creation.types import (
    AvailabilityConfig,
    AvailabilityDay,
    AvailabilityWindow,
    Conflict,
    ConflictSummary,
    Constraints,
    CreationSuggestions,
    FeasibilitySafetySummary,
    Goal,
    GoalTarget,
    PreviewResponse,
    PreviewSnapshot,
    RecentInfluence,
    SuggestionResponse,
    ValueSource,
)

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_target(**overrides: Any) -> GoalTarget:
    values: dict[str, Any] = {
        "target_type": "race_performance",
        "activity_category": "run",
        "distance_km": "42.2",
        "completion_time_hms": "3:30:00",
    }
    values.update(overrides)
    return GoalTarget(**values)


def make_goal(name: str, target_date: str, priority: int = 1, targets: tuple[GoalTarget, ...] | None = None) -> Goal:
    return Goal(
        id=name.lower().replace(" ", "-") or "goal",
        name=name,
        target_date=target_date,
        priority=priority,
        targets=(make_target(),) if targets is None else targets,
    )


def make_suggestions(
    *,
    score: float = 0.4,
    action: str = "accepted",
    template: str = "high",
    min_sessions: int = 4,
    max_sessions: int = 5,
    locked_conflicts: tuple[str, ...] = (),
    context_summary: dict[str, Any] | None = None,
) -> SuggestionResponse:
    """Suggestion response with distinctive values so merges are observable."""
    window = AvailabilityWindow(start_minute_of_day=1080, end_minute_of_day=1170)
    return SuggestionResponse(
        suggestions=CreationSuggestions(
            availability_config=AvailabilityConfig(
                template=template,
                days=(
                    AvailabilityDay(day="monday", windows=(window,), max_sessions=1),
                    AvailabilityDay(day="tuesday", windows=(window,), max_sessions=1),
                    AvailabilityDay(day="thursday", windows=(window,), max_sessions=1),
                    AvailabilityDay(day="saturday", windows=(window,), max_sessions=2),
                    AvailabilityDay(day="sunday", windows=(window,), max_sessions=1),
                ),
            ),
            availability_provenance=create_provenance(ValueSource.SUGGESTED, ("history",), updated_at=FIXED_NOW),
            recent_influence=RecentInfluence(influence_score=score),
            recent_influence_action=action,
            recent_influence_provenance=create_provenance(ValueSource.SUGGESTED, ("recent_load",), updated_at=FIXED_NOW),
            constraints=Constraints(
                hard_rest_days=("friday",),
                min_sessions_per_week=min_sessions,
                max_sessions_per_week=max_sessions,
                max_single_session_duration_minutes=120,
                goal_difficulty_preference="stretch",
            ),
            locked_conflicts=locked_conflicts,
        ),
        context_summary=context_summary if context_summary is not None else {"history_weeks": 12},
    )


def make_preview(
    *,
    token: str | None = "snap-1",
    conflicts: tuple[Conflict, ...] = (),
    blockers: tuple[Conflict, ...] = (),
    chart: dict[str, Any] | None = None,
) -> PreviewResponse:
    return PreviewResponse(
        creation_context_summary={"source": "preview"},
        feasibility_safety=FeasibilitySafetySummary(blockers=blockers),
        preview_snapshot=PreviewSnapshot(token=token) if token else None,
        conflicts=ConflictSummary(items=conflicts, is_blocking=any(c.severity == "blocking" for c in conflicts)),
        projection_chart=chart if chart is not None else {"points": [1, 2, 3]},
    )


class FakeSuggestionSource:
    """Records calls and replays queued responses (or raises queued errors)."""

    def __init__(self, *responses: SuggestionResponse | Exception):
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    async def get_creation_suggestions(self, locks=None, existing_values=None):
        self.calls.append({"locks": locks, "existing_values": existing_values})
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class FakePreviewSource:
    def __init__(self, *responses: PreviewResponse | Exception):
        self.responses = list(responses)
        self.payloads: list[dict[str, Any]] = []

    async def preview_creation_config(self, payload):
        self.payloads.append(payload)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class FakePlanCreator:
    def __init__(self, result: dict[str, Any] | Exception | None = None):
        self.result = result if result is not None else {"id": "plan-1"}
        self.payloads: list[dict[str, Any]] = []

    async def create_from_creation_config(self, payload):
        self.payloads.append(payload)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result
