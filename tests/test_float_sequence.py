"""
Tests for the deterministic daily FLOAT sequence.
"""

import dataclasses

import numpy as np
import pytest

from neondrop.core.config_loader import load_config
from neondrop.core.errors import ConfigurationError
from neondrop.core.float_sequence import FloatSequence, lcg_step


@pytest.fixture
def config():
    return load_config()


def with_curve(config, early_bonus_percent=None, **curve_changes):
    """Config copy with a modified mercy curve (and optionally early bonus)."""
    fc = config.float
    float_changes = {"mercy_curve": dataclasses.replace(fc.mercy_curve, **curve_changes)}
    if early_bonus_percent is not None:
        float_changes["early_bonus_percent"] = early_bonus_percent
    return dataclasses.replace(config, float=dataclasses.replace(fc, **float_changes))


@pytest.fixture
def never_config(config):
    """Curve that never places a FLOAT on its own."""
    return with_curve(
        config,
        early_bonus_percent=0.0,
        low_percent=0.0,
        ramp_start_percent=0.0,
        ramp_end_percent=0.0
    )


@pytest.fixture
def always_config(config):
    """Curve that places a FLOAT whenever the gap allows."""
    return with_curve(
        config,
        low_percent=100.0,
        ramp_start_percent=100.0,
        ramp_end_percent=100.0
    )


def assert_gap_invariant(sequence, min_gap, window_end):
    """Consecutive FLOATs keep the gap, except forced bootstrap slots."""
    indices = sequence.float_indices()
    for a, b in zip(indices[:-1], indices[1:]):
        if sequence.bootstrap_applied and b <= window_end:
            continue
        assert b - a >= min_gap, f"FLOATs at {a} and {b} closer than {min_gap}"


class TestDeterminism:
    """Same seed, same sequence."""

    def test_same_seed_byte_identical(self, config):
        s1 = FloatSequence(42, config)
        s2 = FloatSequence(42, config)

        assert s1.tobytes() == s2.tobytes()

    def test_different_seeds_differ(self, config):
        s1 = FloatSequence(42, config)
        s2 = FloatSequence(123, config)

        assert s1.tobytes() != s2.tobytes()

    def test_negative_seed_supported(self, config):
        s1 = FloatSequence(-987654321, config)
        s2 = FloatSequence(-987654321, config)

        assert s1.tobytes() == s2.tobytes()
        assert len(s1) == config.float.sequence_length

    def test_lcg_step_stays_in_31_bits(self):
        state = 42
        for _ in range(1000):
            state = lcg_step(state)
            assert 0 <= state < 2 ** 31


class TestSequenceShape:
    """Length, dtype, and immutability."""

    def test_length_and_dtype(self, config):
        sequence = FloatSequence(42, config)

        assert len(sequence) == 1000
        assert sequence.flags.dtype == np.bool_

    def test_flags_are_read_only(self, config):
        sequence = FloatSequence(42, config)

        with pytest.raises(ValueError):
            sequence.flags[0] = not sequence.flags[0]

    def test_lookup_wraps_past_end(self, config):
        sequence = FloatSequence(7, config)

        for i in range(0, 50):
            assert sequence.is_float(i) == sequence.is_float(i + len(sequence))
            assert sequence[i + 2 * len(sequence)] == sequence.is_float(i)


class TestSequenceInvariants:
    """Gap and bootstrap invariants over many seeds."""

    @pytest.mark.parametrize("seed", list(range(0, 60)) + [-1, -42, 2 ** 31 - 1, -(2 ** 31)])
    def test_min_gap_respected(self, config, seed):
        sequence = FloatSequence(seed, config)
        window_end = config.float.bootstrap.window - 1

        assert_gap_invariant(sequence, config.float.min_gap, window_end)

    @pytest.mark.parametrize("seed", list(range(0, 200, 3)) + [-5, -31337])
    def test_early_float_always_present(self, config, seed):
        sequence = FloatSequence(seed, config)

        assert sequence.flags[:15].any()


class TestBootstrap:
    """Forced early FLOATs when the generator gives none."""

    def test_bootstrap_forces_slots_5_10_15(self, never_config):
        sequence = FloatSequence(42, never_config)

        assert sequence.bootstrap_applied
        assert list(sequence.float_indices()) == [4, 9, 14]

    def test_bootstrap_not_applied_when_early_float_exists(self, always_config):
        sequence = FloatSequence(42, always_config)

        assert not sequence.bootstrap_applied
        assert sequence.is_float(0)

    def test_bootstrap_keeps_gap_after_last_forced_slot(self, config):
        # Nothing early, everything late: generator wants a FLOAT at slot 15
        late_config = dataclasses.replace(
            config,
            float=dataclasses.replace(
                config.float,
                early_bonus_percent=0.0,
                early_bonus_slots=0,
                height_slot_span=5,
                mercy_curve=dataclasses.replace(
                    config.float.mercy_curve,
                    low_percent=0.0,
                    ramp_start_percent=100.0,
                    ramp_end_percent=100.0
                )
            )
        )
        sequence = FloatSequence(3, late_config)

        if sequence.bootstrap_applied:
            indices = sequence.float_indices()
            after = indices[indices > 14]
            assert after.size == 0 or after[0] - 14 >= late_config.float.min_gap
        assert_gap_invariant(sequence, late_config.float.min_gap, 14)


class TestDistribution:
    """Density summaries and lookahead."""

    def test_always_config_every_min_gap(self, always_config):
        sequence = FloatSequence(42, always_config)

        assert list(sequence.float_indices()) == list(range(0, 1000, 8))

    def test_distance_to_next_float(self, always_config):
        sequence = FloatSequence(42, always_config)

        assert sequence.distance_to_next_float(0) == 8
        assert sequence.distance_to_next_float(3) == 5
        # Last FLOAT is at 992, the next one is slot 0 of the next loop
        assert sequence.distance_to_next_float(992) == 8
        assert sequence.distance_to_next_float(995) == 5

    def test_distribution_summary(self, always_config):
        dist = FloatSequence(42, always_config).distribution()

        assert dist.total_floats == 125
        assert dist.early_floats == [1, 9, 17, 25, 33]
        assert dist.total_percent == pytest.approx(12.5)
        assert dist.first_100_percent == pytest.approx(13.0)
        assert not dist.bootstrap_applied

    def test_rate_percent_matches_flags(self, config):
        sequence = FloatSequence(99, config)

        assert sequence.rate_percent == pytest.approx(sequence.flags.sum() / 10.0)


class TestSeedValidation:
    """Bad seeds fail construction."""

    @pytest.mark.parametrize("seed", [None, "42", 4.2, True, 2 ** 31, -(2 ** 31) - 1])
    def test_invalid_seed_rejected(self, config, seed):
        with pytest.raises(ConfigurationError):
            FloatSequence(seed, config)
