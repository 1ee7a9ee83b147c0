"""Composite weight normalization and lock-aware rebalancing.

The readiness composite is a fixed, ordered vector of named weights that must
sum to exactly 1 at a fixed decimal precision. Normalization rounds every
weight and pushes the rounding residual onto the last key of the fixed order,
so rounding error is concentrated in one designated key instead of spread
across the vector.

Rebalancing edits one weight while leaving locked weights untouched and
preserving the relative ratios among the remaining unlocked weights.
"""

from collections.abc import Mapping, Sequence

from loguru import logger

from plan_creation.creation.constants import COMPOSITE_WEIGHT_KEYS, WEIGHT_EPSILON, WEIGHT_PRECISION
from plan_creation.creation.errors import UnknownWeightKeyError
from plan_creation.creation.parsers import clamp, coerce_number
from plan_creation.creation.types import CompositeWeights, TrainingPlanConfig


def _clamp_weight(value: object) -> float:
    number = coerce_number(value)
    if number is None:
        return 0.0
    return clamp(number, 0.0, 1.0)


def _residual_key(values: Mapping[str, float], candidates: Sequence[str], residual: float) -> str:
    """Pick the key that absorbs the rounding residual.

    The last candidate wins unless the residual would push it outside [0, 1];
    then the residual walks backward to the nearest key that can take it.
    """
    for key in reversed(candidates):
        adjusted = values[key] + residual
        if 0.0 <= adjusted <= 1.0:
            return key
    return candidates[-1]


def normalize_weights(
    weights: Mapping[str, object],
    keys: Sequence[str] = COMPOSITE_WEIGHT_KEYS,
    precision: int = WEIGHT_PRECISION,
    *,
    residual_keys: Sequence[str] | None = None,
) -> dict[str, float]:
    """Normalize a weight vector so it sums to exactly 1.

    Args:
        weights: Weight values by key (missing keys count as 0)
        keys: Fixed, stable key order
        precision: Decimal digits kept per weight
        residual_keys: Keys allowed to absorb the rounding residual, in order.
            Defaults to keys (the last key absorbs it).

    Returns:
        New dict with every weight in [0, 1] and the vector summing to 1
    """
    if not keys:
        raise ValueError("Composite weight vector must have at least one key")

    clamped = {key: _clamp_weight(weights.get(key, 0.0)) for key in keys}
    raw_total = sum(clamped.values())

    if raw_total <= 0:
        uniform = 1.0 / len(keys)
        scaled = dict.fromkeys(keys, uniform)
    else:
        scaled = {key: value / raw_total for key, value in clamped.items()}

    rounded = {key: round(value, precision) for key, value in scaled.items()}
    residual = round(1.0 - sum(rounded.values()), precision)
    if residual != 0:
        target = _residual_key(rounded, list(residual_keys or keys), residual)
        rounded[target] = round(rounded[target] + residual, precision)

    return rounded


def rebalance_weights(
    weights: Mapping[str, object],
    locks: Mapping[str, bool],
    active_key: str,
    next_value: object,
    keys: Sequence[str] = COMPOSITE_WEIGHT_KEYS,
    precision: int = WEIGHT_PRECISION,
) -> dict[str, float]:
    """Set one weight and redistribute the remaining budget.

    Logic:
    1. Clamp next_value to [0, 1] (non-numeric input keeps the current vector)
    2. Fixed keys = active key + locked keys; variable keys = the rest
    3. Cap the active key at what the locked keys leave over
    4. Split the remaining budget across variable keys by their current share
       (evenly when they are all ~0)
    5. Normalize, with the residual landing on an unlocked key

    Args:
        weights: Current weight vector
        locks: Lock flag per key (missing keys are unlocked)
        active_key: Key being edited
        next_value: Requested value for the active key
        keys: Fixed, stable key order
        precision: Decimal digits kept per weight

    Returns:
        New weight vector summing to 1 with locked weights unchanged

    Raises:
        UnknownWeightKeyError: If active_key is not part of the vector
    """
    if active_key not in keys:
        raise UnknownWeightKeyError(active_key, tuple(keys))

    current = {key: _clamp_weight(weights.get(key, 0.0)) for key in keys}

    requested = coerce_number(next_value)
    if requested is None:
        logger.debug(f"[WEIGHTS] Rejected non-numeric value for {active_key}: {next_value!r}")
        return current

    if locks.get(active_key, False):
        logger.debug(f"[WEIGHTS] Ignored edit of locked weight {active_key}")
        return current

    locked_keys = [key for key in keys if key != active_key and locks.get(key, False)]
    variable_keys = [key for key in keys if key != active_key and not locks.get(key, False)]
    locked_total = sum(current[key] for key in locked_keys)
    unlocked_budget = clamp(1.0 - locked_total, 0.0, 1.0)

    next_weights = dict(current)

    if not variable_keys:
        next_weights[active_key] = unlocked_budget
        return normalize_weights(next_weights, keys, precision, residual_keys=[active_key])

    active_value = min(clamp(requested, 0.0, 1.0), unlocked_budget)
    next_weights[active_key] = active_value

    fixed_total = locked_total + active_value
    remaining_budget = clamp(1.0 - fixed_total, 0.0, 1.0)
    variable_total = sum(current[key] for key in variable_keys)

    if variable_total <= WEIGHT_EPSILON:
        even_share = remaining_budget / len(variable_keys)
        for key in variable_keys:
            next_weights[key] = even_share
    else:
        for key in variable_keys:
            next_weights[key] = remaining_budget * (current[key] / variable_total)

    unlocked_keys = [key for key in keys if key not in locked_keys]
    return normalize_weights(next_weights, keys, precision, residual_keys=unlocked_keys)


def set_composite_weight(
    config: TrainingPlanConfig,
    key: str,
    value: object,
    precision: int = WEIGHT_PRECISION,
) -> TrainingPlanConfig:
    """Apply a composite weight edit to a configuration snapshot."""
    rebalanced = rebalance_weights(
        config.composite_weights.as_dict(),
        config.composite_locks.as_dict(),
        key,
        value,
        precision=precision,
    )
    return config.model_copy(update={"composite_weights": CompositeWeights(**rebalanced)})
