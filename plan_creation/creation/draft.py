"""Explicit builder for configuration edits.

A draft stages changes against an immutable base snapshot and produces a new,
validated snapshot on build(). The base is never touched, so a debounced
callback holding an older snapshot can never observe a later edit.
"""

from typing import Any

from plan_creation.creation.types import Constraints, TrainingPlanConfig


class ConfigDraft:
    """Staging area for one configuration edit."""

    def __init__(self, base: TrainingPlanConfig):
        self.base = base
        self._updates: dict[str, Any] = {}
        self._constraint_updates: dict[str, Any] = {}

    def get(self, field: str) -> Any:
        if field == "constraints":
            return self.constraints
        return self._updates.get(field, getattr(self.base, field))

    @property
    def constraints(self) -> Constraints:
        base_constraints = self._updates.get("constraints", self.base.constraints)
        if not self._constraint_updates:
            return base_constraints
        return base_constraints.model_copy(update=self._constraint_updates)

    def set(self, field: str, value: Any) -> "ConfigDraft":
        if field not in TrainingPlanConfig.model_fields:
            raise KeyError(f"Unknown configuration field: {field}")
        if field == "constraints":
            self._constraint_updates.clear()
        self._updates[field] = value
        return self

    def set_constraint(self, field: str, value: Any) -> "ConfigDraft":
        if field not in Constraints.model_fields:
            raise KeyError(f"Unknown constraint field: {field}")
        if field == "hard_rest_days":
            value = tuple(value)
        self._constraint_updates[field] = value
        return self

    @property
    def has_changes(self) -> bool:
        return bool(self._updates or self._constraint_updates)

    def build(self) -> TrainingPlanConfig:
        """Return the edited snapshot, or the base itself when nothing changed."""
        if not self.has_changes:
            return self.base

        updates = dict(self._updates)
        if self._constraint_updates:
            base_constraints = updates.get("constraints", self.base.constraints)
            updates["constraints"] = Constraints.model_validate(
                {**base_constraints.model_dump(), **self._constraint_updates}
            )
        return TrainingPlanConfig.model_validate({**self.base.model_dump(), **updates})
