"""Tests for preview state, minimal plans and outbound payloads."""

from plan_creation.creation.edits import set_constraint
from plan_creation.creation.payload import (
    build_create_plan_payload,
    build_preview_request,
    build_suggestion_request,
    to_creation_normalization_input,
)
from plan_creation.creation.preview import (
    PreviewEvent,
    PreviewState,
    build_preview_minimal_plan,
    reduce_preview_state,
    target_to_payload,
)
from plan_creation.creation.types import PlanForm
from tests.factories import make_goal, make_target


class TestReducePreviewState:
    """Tests for reduce_preview_state."""

    def test_success_replaces_chart_and_clears_error(self):
        previous = PreviewState(projection_chart={"old": True}, preview_error="boom")
        state = reduce_preview_state(previous, PreviewEvent(status="success", projection_chart={"new": True}))
        assert state == PreviewState(projection_chart={"new": True}, preview_error=None)

    def test_failure_keeps_last_chart(self):
        previous = PreviewState(projection_chart={"old": True})
        state = reduce_preview_state(previous, PreviewEvent(status="failure", error_message="Preview failed"))
        assert state.projection_chart == {"old": True}
        assert state.preview_error == "Preview failed"


class TestTargetToPayload:
    def test_race_performance(self):
        assert target_to_payload(make_target()) == {
            "target_type": "race_performance",
            "activity_category": "run",
            "distance_m": 42200,
            "target_time_s": 12600,
        }

    def test_pace_threshold_converts_to_speed(self):
        target = make_target(target_type="pace_threshold", pace_mm_ss="4:00", test_duration_hms="0:30:00")
        assert target_to_payload(target) == {
            "target_type": "pace_threshold",
            "activity_category": "run",
            "target_speed_mps": 4.1667,
            "test_duration_s": 1800,
        }

    def test_power_threshold(self):
        target = make_target(
            target_type="power_threshold", activity_category="bike", target_watts=250, test_duration_hms="0:20:00"
        )
        assert target_to_payload(target)["target_watts"] == 250

    def test_hr_threshold_rounds(self):
        target = make_target(target_type="hr_threshold", target_lthr_bpm=171.6)
        assert target_to_payload(target) == {"target_type": "hr_threshold", "target_lthr_bpm": 172}

    def test_incomplete_target(self):
        assert target_to_payload(make_target(distance_km="")) is None


class TestBuildPreviewMinimalPlan:
    """Tests for build_preview_minimal_plan."""

    def test_blank_names_and_fallback_target(self):
        form = PlanForm(
            plan_start_date="2026-03-02",
            goals=(
                make_goal("", "2026-05-01", targets=(make_target(completion_time_hms=""),)),
                make_goal("Marathon", "2026-06-01"),
            ),
        )
        plan = build_preview_minimal_plan(form)

        assert plan["plan_start_date"] == "2026-03-02"
        assert plan["goals"][0]["name"] == "Goal 1"
        assert plan["goals"][0]["targets"] == plan["goals"][1]["targets"]
        assert plan["goals"][1]["name"] == "Marathon"

    def test_undated_goals_are_skipped(self):
        form = PlanForm(goals=(make_goal("Someday", "later"), make_goal("Real", "2026-05-01")))
        plan = build_preview_minimal_plan(form)
        assert [goal["name"] for goal in plan["goals"]] == ["Real"]

    def test_invalid_start_date_is_omitted(self, marathon_form):
        plan = build_preview_minimal_plan(marathon_form.model_copy(update={"plan_start_date": "soon"}))
        assert "plan_start_date" not in plan

    def test_no_complete_target(self):
        form = PlanForm(goals=(make_goal("A", "2026-05-01", targets=(make_target(distance_km=None),)),))
        assert build_preview_minimal_plan(form) is None


class TestPayloads:
    """Tests for outbound payload builders."""

    def test_constraints_only_sent_when_user_owned(self, default_config):
        assert "constraints" not in to_creation_normalization_input(default_config)["user_values"]

        config = set_constraint(default_config, "min_sessions_per_week", 2)
        user_values = to_creation_normalization_input(config)["user_values"]
        assert user_values["constraints"]["min_sessions_per_week"] == 2

    def test_normalization_input_shape(self, default_config):
        creation_input = to_creation_normalization_input(default_config)

        assert creation_input["user_values"]["calibration"] == {
            "version": 1,
            "readiness_composite": default_config.composite_weights.as_dict(),
        }
        assert creation_input["user_values"]["optimization_profile"] == "balanced"
        assert creation_input["provenance_overrides"]["availability_provenance"]["source"] == "default"

    def test_suggestion_request(self, default_config):
        request = build_suggestion_request(default_config)
        assert request["locks"]["availability_config"] == {"locked": False}
        assert request["existing_values"]["recent_influence"] == {"influence_score": 0}

    def test_create_plan_payload(self, marathon_form, default_config):
        payload = build_create_plan_payload(marathon_form, default_config, "snap-9")

        assert payload["minimal_plan"]["goals"][0]["name"] == "Spring Marathon"
        assert payload["preview_snapshot_token"] == "snap-9"
        assert payload["post_create_behavior"] == {"autonomous_mutation_enabled": False}
        assert payload["is_active"] is True

    def test_create_plan_payload_without_token(self, marathon_form, default_config):
        assert "preview_snapshot_token" not in build_create_plan_payload(marathon_form, default_config)

    def test_preview_request(self, marathon_form, default_config):
        minimal_plan = build_preview_minimal_plan(marathon_form)
        request = build_preview_request(minimal_plan, default_config)
        assert request["minimal_plan"] is minimal_plan
        assert set(request) == {"minimal_plan", "creation_input", "post_create_behavior"}
