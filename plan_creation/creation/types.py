"""Creation configuration input/output models.

This module defines the data structures for:
- The configuration snapshot edited before plan creation
- Provenance and lock metadata attached to configuration fields
- Conflicts and blocking issues surfaced by preview and feasibility sources
- Goals and targets used for gap calculation and validation
- Suggestion and preview responses from external collaborators

Every model is frozen. Sequences are tuples so a snapshot can be shared
across debounced callbacks without risk of in-place mutation.
"""

from datetime import datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

WeekDay = Literal[
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]
Severity = Literal["blocking", "warning"]
RecentInfluenceAction = Literal["accepted", "edited", "disabled"]
AvailabilityTemplate = Literal["low", "moderate", "high", "custom"]
GoalDifficultyPreference = Literal["conservative", "balanced", "stretch"]
GoalTargetType = Literal[
    "race_performance",
    "pace_threshold",
    "power_threshold",
    "hr_threshold",
]
ActivityCategory = Literal["run", "bike", "swim", "other"]


class ValueSource(StrEnum):
    """Why a field holds its current value."""

    DEFAULT = "default"
    SUGGESTED = "suggested"
    USER = "user"


class OptimizationProfile(StrEnum):
    """Trade-off between progress speed and recovery."""

    OUTCOME_FIRST = "outcome_first"
    BALANCED = "balanced"
    SUSTAINABLE = "sustainable"


class MergeMode(StrEnum):
    """Suggestion merge mode."""

    SEED = "seed"
    RECOMPUTE = "recompute"


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class Provenance(FrozenModel):
    """Provenance metadata for a configuration field group.

    Attributes:
        source: Where the value came from (default, suggested, user)
        confidence: Suggestion confidence (None for user-authored values)
        rationale: Short machine-readable reasons for the value
        references: Identifiers of the evidence behind the value
        updated_at: When the value last changed
    """

    source: ValueSource
    confidence: float | None = None
    rationale: tuple[str, ...] = ()
    references: tuple[str, ...] = ()
    updated_at: datetime


class FieldLock(FrozenModel):
    """Lock flag for one lockable field."""

    locked: bool = False
    locked_by: Literal["user"] | None = None


class ConfigLocks(FrozenModel):
    """Fixed set of lockable configuration attributes.

    A locked field is never overwritten by a suggestion merge.
    """

    availability_config: FieldLock = Field(default_factory=FieldLock)
    recent_influence: FieldLock = Field(default_factory=FieldLock)
    hard_rest_days: FieldLock = Field(default_factory=FieldLock)
    min_sessions_per_week: FieldLock = Field(default_factory=FieldLock)
    max_sessions_per_week: FieldLock = Field(default_factory=FieldLock)
    max_single_session_duration_minutes: FieldLock = Field(default_factory=FieldLock)
    goal_difficulty_preference: FieldLock = Field(default_factory=FieldLock)
    optimization_profile: FieldLock = Field(default_factory=FieldLock)
    post_goal_recovery_days: FieldLock = Field(default_factory=FieldLock)
    max_weekly_tss_ramp_pct: FieldLock = Field(default_factory=FieldLock)
    max_ctl_ramp_per_week: FieldLock = Field(default_factory=FieldLock)

    def is_locked(self, field: str) -> bool:
        if field not in type(self).model_fields:
            raise KeyError(f"Unknown lockable field: {field}")
        return getattr(self, field).locked

    def with_lock(self, field: str, locked: bool) -> "ConfigLocks":
        if field not in type(self).model_fields:
            raise KeyError(f"Unknown lockable field: {field}")
        lock = FieldLock(locked=True, locked_by="user") if locked else FieldLock()
        return self.model_copy(update={field: lock})


# Constraint attributes that carry their own lock
CONSTRAINT_LOCK_FIELDS: tuple[str, ...] = (
    "hard_rest_days",
    "min_sessions_per_week",
    "max_sessions_per_week",
    "max_single_session_duration_minutes",
    "goal_difficulty_preference",
)


class AvailabilityWindow(FrozenModel):
    start_minute_of_day: int = Field(ge=0, le=1439)
    end_minute_of_day: int = Field(ge=0, le=1439)


class AvailabilityDay(FrozenModel):
    day: WeekDay
    windows: tuple[AvailabilityWindow, ...] = ()
    max_sessions: int | None = Field(default=None, ge=0)


class AvailabilityConfig(FrozenModel):
    """Weekly availability schedule."""

    template: AvailabilityTemplate = "moderate"
    days: tuple[AvailabilityDay, ...] = ()


class Constraints(FrozenModel):
    """Session-count and scheduling constraints."""

    hard_rest_days: tuple[WeekDay, ...] = ()
    min_sessions_per_week: int | None = Field(default=None, ge=0)
    max_sessions_per_week: int | None = Field(default=None, ge=0)
    max_single_session_duration_minutes: int | None = Field(default=None, ge=0)
    goal_difficulty_preference: GoalDifficultyPreference | None = None


class CompositeWeights(FrozenModel):
    """Readiness composite weight vector. Always sums to 1."""

    target_attainment_weight: float = Field(default=0.45, ge=0, le=1)
    envelope_weight: float = Field(default=0.3, ge=0, le=1)
    durability_weight: float = Field(default=0.15, ge=0, le=1)
    evidence_weight: float = Field(default=0.1, ge=0, le=1)

    def as_dict(self) -> dict[str, float]:
        return self.model_dump()


class CompositeWeightLocks(FrozenModel):
    target_attainment_weight: bool = False
    envelope_weight: bool = False
    durability_weight: bool = False
    evidence_weight: bool = False

    def as_dict(self) -> dict[str, bool]:
        return self.model_dump()


class TrainingPlanConfig(FrozenModel):
    """Configuration snapshot edited before plan creation.

    Every edit produces a new snapshot; nothing mutates one in place.
    """

    availability_config: AvailabilityConfig
    availability_provenance: Provenance
    recent_influence_score: float = Field(default=0, ge=-1, le=1)
    recent_influence_action: RecentInfluenceAction = "disabled"
    recent_influence_provenance: Provenance
    constraints: Constraints
    constraints_source: ValueSource = ValueSource.DEFAULT
    optimization_profile: OptimizationProfile = OptimizationProfile.BALANCED
    post_goal_recovery_days: int = Field(default=5, ge=0, le=28)
    max_weekly_tss_ramp_pct: float = Field(default=7, ge=0, le=20)
    max_ctl_ramp_per_week: float = Field(default=3, ge=0, le=8)
    composite_weights: CompositeWeights = Field(default_factory=CompositeWeights)
    composite_locks: CompositeWeightLocks = Field(default_factory=CompositeWeightLocks)
    locks: ConfigLocks = Field(default_factory=ConfigLocks)


class DirtyState(FrozenModel):
    """Per-group flags set once a user-authored edit is observed."""

    availability: bool = False
    recent: bool = False
    constraints: bool = False


class Conflict(FrozenModel):
    """Configuration conflict reported by the preview or feasibility source."""

    code: str
    severity: Severity = "blocking"
    message: str = ""
    suggestions: tuple[str, ...] = ()


class BlockingIssue(FrozenModel):
    """Deduplicated, display-ready blocking conflict."""

    code: str
    message: str
    suggestions: tuple[str, ...] = ()


class GoalTarget(FrozenModel):
    id: str | None = None
    target_type: GoalTargetType = "race_performance"
    activity_category: ActivityCategory | None = None
    distance_km: str | None = None
    completion_time_hms: str | None = None
    pace_mm_ss: str | None = None
    test_duration_hms: str | None = None
    target_watts: float | None = None
    target_lthr_bpm: float | None = None


class Goal(FrozenModel):
    """Dated training goal. target_date is a date-only YYYY-MM-DD string."""

    id: str = ""
    name: str = ""
    target_date: str = ""
    priority: int = 1
    targets: tuple[GoalTarget, ...] = ()


class PlanForm(FrozenModel):
    plan_start_date: str | None = None
    goals: tuple[Goal, ...] = ()


class RecentInfluence(FrozenModel):
    influence_score: float = 0


class CreationSuggestions(FrozenModel):
    availability_config: AvailabilityConfig
    availability_provenance: Provenance
    recent_influence: RecentInfluence
    recent_influence_action: RecentInfluenceAction
    recent_influence_provenance: Provenance
    constraints: Constraints
    locked_conflicts: tuple[str, ...] = ()


class SuggestionResponse(FrozenModel):
    suggestions: CreationSuggestions
    context_summary: dict[str, Any] | None = None


class FeasibilitySafetySummary(FrozenModel):
    """Feasibility/safety summary. Only blockers are interpreted here."""

    model_config = ConfigDict(frozen=True, extra="allow")

    blockers: tuple[Conflict, ...] = ()


class PreviewSnapshot(FrozenModel):
    token: str


class ConflictSummary(FrozenModel):
    items: tuple[Conflict, ...] = ()
    is_blocking: bool = False


class PreviewResponse(FrozenModel):
    creation_context_summary: dict[str, Any] | None = None
    feasibility_safety: FeasibilitySafetySummary = Field(default_factory=FeasibilitySafetySummary)
    preview_snapshot: PreviewSnapshot | None = None
    conflicts: ConflictSummary = Field(default_factory=ConflictSummary)
    projection_chart: dict[str, Any] | None = None
