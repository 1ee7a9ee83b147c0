"""Root conftest for all tests.

Shared fixtures: fixed timestamps, default configuration, goal forms and
fast debounce settings.
"""

from datetime import datetime

import pytest

from plan_creation.config.settings import Settings
from plan_creation.creation.defaults import create_default_config
from plan_creation.creation.types import PlanForm, TrainingPlanConfig
from tests.factories import FIXED_NOW, make_goal


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def default_config() -> TrainingPlanConfig:
    """Default configuration stamped at a fixed time."""
    return create_default_config(FIXED_NOW)


@pytest.fixture
def fast_settings() -> Settings:
    """Settings with near-zero debounce delays for session tests."""
    return Settings(
        preview_refresh_delay_ms=10,
        high_impact_recompute_delay_ms=20,
    )


@pytest.fixture
def marathon_form() -> PlanForm:
    """Single complete marathon goal well in the future."""
    return PlanForm(goals=(make_goal("Spring Marathon", "2026-05-01"),))


@pytest.fixture
def two_goal_form() -> PlanForm:
    """Two goals 29 days apart."""
    return PlanForm(
        goals=(
            make_goal("Tune-up Half", "2026-05-01"),
            make_goal("Goal Marathon", "2026-05-30"),
        )
    )
