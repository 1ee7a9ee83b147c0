"""Tests for composite weight normalization and lock-aware rebalancing.

Tests that:
- The vector always sums to 1 with every value in [0, 1]
- Locked weights never move
- Unlocked weights keep their ratios
- Malformed or forbidden edits leave the vector unchanged
"""

import random

import pytest

from plan_creation.creation.constants import COMPOSITE_WEIGHT_KEYS
from plan_creation.creation.edits import set_composite_weight_lock
from plan_creation.creation.errors import UnknownWeightKeyError
from plan_creation.creation.weights import normalize_weights, rebalance_weights, set_composite_weight

KEYS = ("a", "b", "c", "d")


def assert_valid_vector(weights: dict[str, float]) -> None:
    assert sum(weights.values()) == pytest.approx(1.0, abs=1e-9)
    assert all(0.0 <= value <= 1.0 for value in weights.values())


class TestNormalizeWeights:
    """Tests for normalize_weights."""

    def test_scales_to_unit_sum(self):
        result = normalize_weights({"a": 0.4, "b": 0.2, "c": 0.2, "d": 0}, KEYS)
        assert result == {"a": 0.5, "b": 0.25, "c": 0.25, "d": 0.0}

    def test_values_above_one_are_clamped_before_scaling(self):
        result = normalize_weights({"a": 2, "b": 1, "c": 1, "d": 0}, KEYS)
        assert result == {"a": 0.333333, "b": 0.333333, "c": 0.333333, "d": 0.000001}

    def test_zero_vector_becomes_uniform(self):
        result = normalize_weights({"a": 0, "b": 0, "c": 0, "d": 0}, KEYS)
        assert result == {"a": 0.25, "b": 0.25, "c": 0.25, "d": 0.25}

    def test_non_finite_and_negative_values_count_as_zero(self):
        result = normalize_weights({"a": float("nan"), "b": -3, "c": 1, "d": float("inf")}, KEYS)
        assert result == {"a": 0.0, "b": 0.0, "c": 1.0, "d": 0.0}

    def test_residual_lands_on_last_key(self):
        """Thirds do not round to an exact sum; the last key absorbs the difference."""
        result = normalize_weights({"a": 1, "b": 1, "c": 1}, ("a", "b", "c"))
        assert result["a"] == 0.333333
        assert result["b"] == 0.333333
        assert result["c"] == 0.333334
        assert_valid_vector(result)

    def test_missing_keys_count_as_zero(self):
        result = normalize_weights({"a": 1}, KEYS)
        assert result == {"a": 1.0, "b": 0.0, "c": 0.0, "d": 0.0}

    def test_empty_key_list_is_rejected(self):
        with pytest.raises(ValueError):
            normalize_weights({}, ())


class TestRebalanceWeights:
    """Tests for rebalance_weights."""

    def test_locked_key_survives_and_active_is_capped(self):
        """Lock b, push a to 0.9: a is capped at what b leaves, c:d ratio preserved."""
        weights = {"a": 0.5, "b": 0.3, "c": 0.1, "d": 0.1}
        result = rebalance_weights(weights, {"b": True}, "a", 0.9, KEYS)

        assert result["b"] == 0.3
        assert result["a"] + result["c"] + result["d"] == pytest.approx(0.7)
        assert result["c"] == result["d"]
        assert_valid_vector(result)

    def test_remaining_budget_split_by_current_ratio(self):
        weights = {"a": 0.5, "b": 0.3, "c": 0.1, "d": 0.1}
        result = rebalance_weights(weights, {"b": True}, "a", 0.4, KEYS)

        assert result["a"] == pytest.approx(0.4)
        assert result["b"] == 0.3
        assert result["c"] == pytest.approx(0.15)
        assert result["d"] == pytest.approx(0.15)

    def test_unequal_ratio_is_preserved(self):
        weights = {"a": 0.4, "b": 0.3, "c": 0.2, "d": 0.1}
        result = rebalance_weights(weights, {}, "a", 0.1, KEYS)

        assert result["a"] == pytest.approx(0.1)
        assert result["b"] / result["d"] == pytest.approx(3.0, rel=1e-4)
        assert result["c"] / result["d"] == pytest.approx(2.0, rel=1e-4)
        assert_valid_vector(result)

    def test_zero_variable_weights_split_evenly(self):
        weights = {"a": 1.0, "b": 0.0, "c": 0.0, "d": 0.0}
        result = rebalance_weights(weights, {}, "a", 0.4, KEYS)
        assert result == {"a": 0.4, "b": 0.2, "c": 0.2, "d": 0.2}

    def test_no_variable_keys_active_takes_leftover(self):
        weights = {"a": 0.5, "b": 0.3, "c": 0.1, "d": 0.1}
        result = rebalance_weights(weights, {"b": True, "c": True, "d": True}, "a", 0.1, KEYS)
        assert result == {"a": 0.5, "b": 0.3, "c": 0.1, "d": 0.1}

    def test_out_of_range_value_is_clamped(self):
        weights = {"a": 0.25, "b": 0.25, "c": 0.25, "d": 0.25}
        assert rebalance_weights(weights, {}, "a", 5, KEYS)["a"] == 1.0
        assert rebalance_weights(weights, {}, "a", -2, KEYS)["a"] == 0.0

    @pytest.mark.parametrize("bad_value", [float("nan"), float("inf"), "abc", None, True])
    def test_malformed_value_keeps_vector(self, bad_value):
        weights = {"a": 0.4, "b": 0.3, "c": 0.2, "d": 0.1}
        assert rebalance_weights(weights, {}, "a", bad_value, KEYS) == weights

    def test_editing_locked_key_is_rejected(self):
        weights = {"a": 0.4, "b": 0.3, "c": 0.2, "d": 0.1}
        assert rebalance_weights(weights, {"a": True}, "a", 0.9, KEYS) == weights

    def test_unknown_key_raises(self):
        with pytest.raises(UnknownWeightKeyError) as exc_info:
            rebalance_weights({"a": 1.0}, {}, "z", 0.5, KEYS)
        assert isinstance(exc_info.value, KeyError)
        assert exc_info.value.key == "z"

    def test_random_edit_sequences_hold_invariants(self):
        """Sum, range and lock invariants hold across long random edit sequences."""
        rng = random.Random(20260501)
        weights = normalize_weights({"a": 0.45, "b": 0.3, "c": 0.15, "d": 0.1}, KEYS)
        locks = dict.fromkeys(KEYS, False)

        for _ in range(500):
            if rng.random() < 0.2:
                key = rng.choice(KEYS)
                locks[key] = not locks[key]
                continue

            before = dict(weights)
            active = rng.choice(KEYS)
            weights = rebalance_weights(weights, locks, active, rng.uniform(-0.2, 1.2), KEYS)

            assert_valid_vector(weights)
            for key in KEYS:
                if locks[key]:
                    assert weights[key] == before[key]


class TestSetCompositeWeight:
    """Tests for set_composite_weight on a config snapshot."""

    def test_uses_config_locks(self, default_config):
        config = set_composite_weight_lock(default_config, "envelope_weight", True)
        updated = set_composite_weight(config, "target_attainment_weight", 0.6)

        weights = updated.composite_weights.as_dict()
        assert weights["envelope_weight"] == 0.3
        assert weights["target_attainment_weight"] == pytest.approx(0.6)
        assert weights["durability_weight"] / weights["evidence_weight"] == pytest.approx(1.5, rel=1e-4)
        assert sum(weights[key] for key in COMPOSITE_WEIGHT_KEYS) == pytest.approx(1.0)

    def test_input_snapshot_untouched(self, default_config):
        set_composite_weight(default_config, "evidence_weight", 0.5)
        assert default_config.composite_weights.evidence_weight == 0.1

    def test_precision_is_honored(self, default_config):
        updated = set_composite_weight(default_config, "target_attainment_weight", 1 / 3, precision=2)
        assert updated.composite_weights.target_attainment_weight == 0.33
