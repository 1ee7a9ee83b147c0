"""Creation session orchestration.

A CreationSession owns one in-progress configuration and wires the pure
pieces (reconciler, quick fixes, conflict consolidation, validation) to the
three external collaborators:

- SuggestionSource: system-suggested values (seed + recompute)
- PreviewSource: feasibility/safety preview with conflicts
- PlanCreator: the final create call

Flow:
1. seed() merges the first suggestion response unconditionally
2. handle_config_change() records each edit; high-impact edits bump the
   recompute nonce and schedule a debounced suggestion refresh
3. Every config or form change schedules a debounced preview refresh
4. create() validates, runs a blocking preview, then calls the creator

All methods that schedule work must be called from a running event loop.
Collaborator failures never escape the background refreshes: they are
logged and the last good state is kept.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Protocol

from loguru import logger

from plan_creation.config.settings import Settings, get_settings
from plan_creation.creation.conflicts import consolidate_blocking_issues, create_disabled_reason
from plan_creation.creation.constants import (
    BLOCKING_CONFLICTS_MESSAGE,
    CREATE_FAILURE_MESSAGE,
    PREVIEW_FAILURE_MESSAGE,
    PREVIEW_INCOMPLETE_GOALS_MESSAGE,
)
from plan_creation.creation.defaults import create_default_config
from plan_creation.creation.payload import build_create_plan_payload, build_preview_request, build_suggestion_request
from plan_creation.creation.preview import PreviewEvent, PreviewState, build_preview_minimal_plan, reduce_preview_state
from plan_creation.creation.quick_fix import apply_quick_fix, has_quick_fix
from plan_creation.creation.reconciler import MergeResult, has_high_impact_change, merge_suggestions, update_dirty_state
from plan_creation.creation.scheduler import DebouncedTask, RecomputeNonce
from plan_creation.creation.types import (
    BlockingIssue,
    Conflict,
    DirtyState,
    FeasibilitySafetySummary,
    MergeMode,
    PlanForm,
    PreviewResponse,
    SuggestionResponse,
    TrainingPlanConfig,
)
from plan_creation.creation.validation import validate_training_plan_form
from plan_creation.creation.weights import set_composite_weight


class SuggestionSource(Protocol):
    async def get_creation_suggestions(
        self,
        locks: dict[str, Any] | None = None,
        existing_values: dict[str, Any] | None = None,
    ) -> SuggestionResponse | dict[str, Any]: ...


class PreviewSource(Protocol):
    async def preview_creation_config(self, payload: dict[str, Any]) -> PreviewResponse | dict[str, Any]: ...


class PlanCreator(Protocol):
    async def create_from_creation_config(self, payload: dict[str, Any]) -> dict[str, Any]: ...


@dataclass(frozen=True)
class PreviewOutcome:
    """Result of one preview refresh.

    Attributes:
        blocked: True when creation must not proceed
        preview_snapshot_token: Token binding a create call to this preview
        message: User-facing message, only set for explicitly requested previews
    """

    blocked: bool
    preview_snapshot_token: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class CreateOutcome:
    created: bool
    plan: dict[str, Any] | None = None
    errors: dict[str, str] = field(default_factory=dict)
    blocking_issues: tuple[BlockingIssue, ...] = ()
    message: str | None = None


class CreationSession:
    """In-progress plan creation state and its background refreshes."""

    def __init__(
        self,
        suggestion_source: SuggestionSource,
        preview_source: PreviewSource,
        plan_creator: PlanCreator,
        form: PlanForm | None = None,
        settings: Settings | None = None,
        now: datetime | None = None,
    ):
        self.suggestion_source = suggestion_source
        self.preview_source = preview_source
        self.plan_creator = plan_creator
        self.settings = settings or get_settings()
        self._now = now

        self.config: TrainingPlanConfig = create_default_config(now)
        self.form: PlanForm = form or PlanForm()
        self.dirty = DirtyState()
        self.seeded = False
        self.errors: dict[str, str] = {}

        self.informational_conflicts: tuple[str, ...] = ()
        self.context_summary: dict[str, Any] | None = None
        self.feasibility_summary: FeasibilitySafetySummary | None = None
        self.conflict_items: tuple[Conflict, ...] = ()
        self.preview_state = PreviewState()
        self.preview_snapshot_token: str | None = None
        self.is_preview_pending = False
        self.is_creating = False

        self._nonce = RecomputeNonce()
        self._suggestion_task = DebouncedTask(
            "suggestions",
            self.settings.high_impact_recompute_delay_ms / 1000,
            self._run_suggestion_refresh,
        )
        self._preview_task = DebouncedTask(
            "preview",
            self.settings.preview_refresh_delay_ms / 1000,
            self._run_preview_refresh,
        )

    @property
    def recompute_nonce(self) -> int:
        return self._nonce.value

    @property
    def blocking_issues(self) -> list[BlockingIssue]:
        return consolidate_blocking_issues(
            self.conflict_items,
            self.feasibility_summary,
            limit=self.settings.blocking_issue_limit,
        )

    @property
    def create_disabled_reason(self) -> str | None:
        return create_disabled_reason(self.blocking_issues)

    async def seed(self) -> None:
        """Load first suggestions. On failure the defaults stay in place."""
        if self.seeded:
            return

        try:
            raw = await self.suggestion_source.get_creation_suggestions()
            response = SuggestionResponse.model_validate(raw)
        except Exception as e:
            logger.warning(f"[SESSION] Suggestion seed failed, keeping defaults: {e}")
        else:
            self._apply_merge(merge_suggestions(self.config, response, MergeMode.SEED, self.dirty))

        self.seeded = True
        logger.info("[SESSION] Creation config seeded")
        self._schedule_suggestions()
        self._schedule_preview()

    def handle_config_change(self, next_config: TrainingPlanConfig) -> None:
        """Record a user edit of the configuration."""
        if has_high_impact_change(self.config, next_config):
            nonce = self._nonce.bump()
            logger.debug(f"[SESSION] High-impact change, recompute nonce={nonce}")
            self._schedule_suggestions()

        self.dirty = update_dirty_state(self.dirty, next_config)
        self.config = next_config
        self._schedule_preview()

    def apply_edit(self, edit: Callable[..., TrainingPlanConfig], *args: Any, **kwargs: Any) -> TrainingPlanConfig:
        """Run an edit function from plan_creation.creation.edits against the current config."""
        self.handle_config_change(edit(self.config, *args, **kwargs))
        return self.config

    def set_composite_weight(self, key: str, value: object) -> TrainingPlanConfig:
        self.handle_config_change(set_composite_weight(self.config, key, value, precision=self.settings.weight_precision))
        return self.config

    def update_form(self, form: PlanForm) -> None:
        self.form = form
        if self.errors:
            self.errors = {}
        self._schedule_preview()

    def resolve_conflict(self, code: str) -> TrainingPlanConfig:
        """Apply the quick fix for a conflict code and schedule a recompute."""
        if not has_quick_fix(code):
            logger.warning(f"[SESSION] Ignoring conflict without quick fix: {code}")
            return self.config

        self.config = apply_quick_fix(code, self.config, self.form.goals, self.settings)
        self.dirty = update_dirty_state(self.dirty, self.config)
        self._nonce.bump()
        self._schedule_suggestions()
        self._schedule_preview()
        return self.config

    async def refresh_suggestions(self) -> bool:
        """Fetch and merge suggestions for the current nonce.

        Returns:
            True when a response was merged
        """
        nonce = self._nonce.value
        if not self._nonce.claim(nonce):
            logger.debug(f"[SESSION] Dropping duplicate recompute for nonce={nonce}")
            return False

        request = build_suggestion_request(self.config)
        try:
            raw = await self.suggestion_source.get_creation_suggestions(
                locks=request["locks"],
                existing_values=request["existing_values"],
            )
            response = SuggestionResponse.model_validate(raw)
        except Exception as e:
            logger.warning(f"[SESSION] Suggestion recompute failed for nonce={nonce}, keeping current values: {e}")
            return False

        self._apply_merge(merge_suggestions(self.config, response, MergeMode.RECOMPUTE, self.dirty))
        self._schedule_preview()
        return True

    async def refresh_preview(self, show_blocking_alert: bool = False) -> PreviewOutcome:
        """Run the feasibility/safety preview for the current form and config.

        Args:
            show_blocking_alert: Explicit request (create time). Adds a
                user-facing message to blocked outcomes.

        Returns:
            PreviewOutcome; failures and incomplete goals are blocked
        """
        minimal_plan = build_preview_minimal_plan(self.form)
        if minimal_plan is None:
            self.preview_state = reduce_preview_state(
                self.preview_state,
                PreviewEvent(status="failure", error_message=PREVIEW_INCOMPLETE_GOALS_MESSAGE),
            )
            return PreviewOutcome(
                blocked=True,
                message=PREVIEW_INCOMPLETE_GOALS_MESSAGE if show_blocking_alert else None,
            )

        self.is_preview_pending = True
        try:
            raw = await self.preview_source.preview_creation_config(build_preview_request(minimal_plan, self.config))
            preview = PreviewResponse.model_validate(raw)
        except Exception as e:
            logger.warning(f"[SESSION] Preview failed, keeping last chart and conflicts: {e}")
            self.preview_snapshot_token = None
            self.preview_state = reduce_preview_state(
                self.preview_state,
                PreviewEvent(status="failure", error_message=PREVIEW_FAILURE_MESSAGE),
            )
            return PreviewOutcome(blocked=True, message=PREVIEW_FAILURE_MESSAGE if show_blocking_alert else None)
        finally:
            self.is_preview_pending = False

        self.context_summary = preview.creation_context_summary
        self.feasibility_summary = preview.feasibility_safety
        self.preview_snapshot_token = preview.preview_snapshot.token if preview.preview_snapshot else None
        self.preview_state = reduce_preview_state(
            self.preview_state,
            PreviewEvent(status="success", projection_chart=preview.projection_chart),
        )
        self.conflict_items = preview.conflicts.items

        issues = self.blocking_issues
        logger.debug(f"[SESSION] Preview refreshed: conflicts={len(self.conflict_items)} blocking={len(issues)}")

        if show_blocking_alert and issues:
            return PreviewOutcome(
                blocked=True,
                preview_snapshot_token=self.preview_snapshot_token,
                message=BLOCKING_CONFLICTS_MESSAGE,
            )
        return PreviewOutcome(blocked=False, preview_snapshot_token=self.preview_snapshot_token)

    async def create(self, today: date | None = None) -> CreateOutcome:
        """Validate, preview and create the plan.

        Creation is refused while any validation error or blocking issue
        remains. A failed create call is reported in the outcome.
        """
        self.errors = validate_training_plan_form(self.form, today)
        if self.errors:
            logger.info(f"[SESSION] Create refused: {len(self.errors)} validation errors")
            return CreateOutcome(created=False, errors=dict(self.errors))

        self.is_creating = True
        try:
            self._preview_task.cancel()
            preview = await self.refresh_preview(show_blocking_alert=True)
            if preview.blocked:
                logger.info("[SESSION] Create refused: preview blocked")
                return CreateOutcome(
                    created=False,
                    blocking_issues=tuple(self.blocking_issues),
                    message=preview.message,
                )

            payload = build_create_plan_payload(
                self.form,
                self.config,
                preview.preview_snapshot_token or self.preview_snapshot_token,
            )
            try:
                plan = await self.plan_creator.create_from_creation_config(payload)
            except Exception as e:
                logger.error(f"[SESSION] Failed to create training plan from creation config: {e}")
                return CreateOutcome(created=False, message=str(e) or CREATE_FAILURE_MESSAGE)

            logger.info(f"[SESSION] Training plan created: id={plan.get('id')}")
            return CreateOutcome(created=True, plan=plan)
        finally:
            self.is_creating = False

    def reset(self) -> None:
        """Discard the in-progress configuration and all derived state."""
        self.close()
        self.config = create_default_config(self._now)
        self.dirty = DirtyState()
        self.seeded = False
        self.errors = {}
        self.informational_conflicts = ()
        self.context_summary = None
        self.feasibility_summary = None
        self.conflict_items = ()
        self.preview_state = PreviewState()
        self.preview_snapshot_token = None
        self._nonce = RecomputeNonce()

    async def wait_idle(self) -> None:
        """Wait until no debounced refresh is pending or running."""
        while self._suggestion_task.pending or self._preview_task.pending:
            await self._suggestion_task.wait()
            await self._preview_task.wait()

    def close(self) -> None:
        self._suggestion_task.cancel()
        self._preview_task.cancel()

    def _apply_merge(self, result: MergeResult) -> None:
        self.config = result.config
        self.informational_conflicts = result.informational_conflicts
        self.context_summary = result.context_summary

    def _schedule_suggestions(self) -> None:
        if self.seeded and self._nonce.value > self._nonce.last_handled:
            self._suggestion_task.schedule()

    def _schedule_preview(self) -> None:
        if self.seeded:
            self._preview_task.schedule()

    async def _run_suggestion_refresh(self) -> None:
        await self.refresh_suggestions()

    async def _run_preview_refresh(self) -> None:
        await self.refresh_preview(show_blocking_alert=False)
