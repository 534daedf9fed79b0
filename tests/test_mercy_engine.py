"""
Tests for the mercy curve, the adaptive mercy engine, and FloatSession.
"""

import dataclasses

import numpy as np
import pytest

from neondrop.core.config_loader import load_config
from neondrop.core.errors import ConfigurationError
from neondrop.core.float_sequence import FloatSequence
from neondrop.core.float_session import FloatSession
from neondrop.core.mercy_curve import (
    apply_rate_correction,
    height_mercy_percent,
    mixing_random,
    realized_rate,
)
from neondrop.core.mercy_engine import (
    AdaptiveMercyEngine,
    MercyCurveModel,
    MercyState,
)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def session(config):
    return FloatSession({"date": "2026-10-19", "seed": 42}, config)


class FixedModel:
    """Live model returning a constant percentage."""

    def __init__(self, percent):
        self.percent = percent

    def live_percent(self, stack_height, piece_count, total_floats):
        return self.percent


def float_indices_of(decisions):
    return [d.index for d in decisions if d.is_float]


class TestHeightLaw:
    """Piecewise-linear mercy percentage."""

    @pytest.mark.parametrize("height", [0, 1, 2])
    def test_low_stack_is_five_percent(self, config, height):
        assert height_mercy_percent(height, config.float.mercy_curve) == pytest.approx(5.0)

    def test_ramp_start(self, config):
        assert height_mercy_percent(3, config.float.mercy_curve) == pytest.approx(8.0)

    def test_ramp_midpoint(self, config):
        # 8 + (11.5 - 3) / 17 * 17
        assert height_mercy_percent(11.5, config.float.mercy_curve) == pytest.approx(16.5)

    def test_full_board_is_twenty_five_percent(self, config):
        assert height_mercy_percent(20, config.float.mercy_curve) == pytest.approx(25.0)

    def test_saturates_above_ramp_end(self, config):
        assert height_mercy_percent(40, config.float.mercy_curve) == pytest.approx(25.0)

    def test_monotonic(self, config):
        percents = [height_mercy_percent(h, config.float.mercy_curve) for h in range(21)]
        assert all(a <= b for a, b in zip(percents[:-1], percents[1:]))


class TestRateCorrection:
    """Boost when the realized rate lags the target."""

    def test_boost_at_height_ten(self, config):
        rc = config.float.rate_correction
        base = height_mercy_percent(10, config.float.mercy_curve)

        assert base == pytest.approx(15.0)
        assert apply_rate_correction(base, 10, 0.0, rc) == pytest.approx(19.5)

    def test_boost_is_capped(self, config):
        rc = config.float.rate_correction
        base = height_mercy_percent(20, config.float.mercy_curve)

        assert apply_rate_correction(base, 20, 0.0, rc) == pytest.approx(30.0)

    def test_no_boost_below_min_height(self, config):
        rc = config.float.rate_correction

        assert apply_rate_correction(7.0, 4, 0.0, rc) == pytest.approx(7.0)

    def test_no_boost_at_target_rate(self, config):
        rc = config.float.rate_correction

        assert apply_rate_correction(15.0, 10, 0.12, rc) == pytest.approx(15.0)
        assert apply_rate_correction(15.0, 10, 0.2, rc) == pytest.approx(15.0)

    def test_realized_rate_before_first_spawn(self):
        assert realized_rate(0, 0) == 0.0
        assert realized_rate(3, 12) == pytest.approx(0.25)

    def test_curve_model_live_percent(self, config):
        model = MercyCurveModel(config)

        assert model.live_percent(10, 0, 0) == pytest.approx(19.5)
        assert model.live_percent(10, 10, 5) == pytest.approx(15.0)
        assert model.live_percent(0, 0, 0) == pytest.approx(5.0)


class TestMixingRandom:
    """Deterministic [0, 1) values."""

    def test_range(self):
        for value in range(-500, 500):
            r = mixing_random(value * 7.3)
            assert 0.0 <= r < 1.0

    def test_deterministic(self):
        assert mixing_random(12345) == mixing_random(12345)


class TestEngineDecisions:
    """AdaptiveMercyEngine.decide semantics."""

    def test_piece_count_increments_once(self, config):
        engine = AdaptiveMercyEngine(FloatSequence(42, config), config)
        state = MercyState()

        for expected in range(1, 51):
            engine.decide(state, 4)
            assert state.piece_count == expected
        assert 0 <= state.total_floats_given <= state.piece_count

    def test_sequence_floats_never_suppressed(self, config):
        sequence = FloatSequence(42, config)
        engine = AdaptiveMercyEngine(sequence, config)
        state = MercyState()
        heights = np.random.default_rng(1).integers(0, 21, size=1000)

        for height in heights:
            decision = engine.decide(state, int(height))
            if sequence.is_float(decision.index):
                assert decision.is_float
                assert decision.reason == "sequence"

    def test_float_records_last_index(self, config):
        sequence = FloatSequence(42, config)
        engine = AdaptiveMercyEngine(sequence, config)
        state = MercyState()
        first = int(sequence.float_indices()[0])

        for _ in range(first + 1):
            engine.decide(state, 0)

        assert state.last_float_index is not None
        assert state.last_float_index <= first
        assert state.total_floats_given >= 1

    @pytest.mark.parametrize("height", [-1, 21, 2.5, "3", None, True])
    def test_invalid_height_rejected(self, config, height):
        engine = AdaptiveMercyEngine(FloatSequence(42, config), config)
        state = MercyState(piece_count=5, total_floats_given=1, last_float_index=2)

        with pytest.raises(ConfigurationError):
            engine.decide(state, height)

        assert state == MercyState(piece_count=5, total_floats_given=1, last_float_index=2)

    @pytest.mark.parametrize("height", [0, 20])
    def test_boundary_heights_accepted(self, config, height):
        engine = AdaptiveMercyEngine(FloatSequence(42, config), config)

        decision = engine.decide(MercyState(), height)

        assert decision.stack_height == height

    @pytest.mark.parametrize("height", [np.int64(5), np.int32(0), np.uint8(20)])
    def test_numpy_integer_heights_accepted(self, config, height):
        engine = AdaptiveMercyEngine(FloatSequence(42, config), config)

        decision = engine.decide(MercyState(), height)

        assert decision.stack_height == int(height)
        assert type(decision.stack_height) is int

    @pytest.mark.parametrize("height", [np.int64(-1), np.int64(21), np.float64(5.0), np.bool_(True)])
    def test_numpy_invalid_heights_rejected(self, config, height):
        engine = AdaptiveMercyEngine(FloatSequence(42, config), config)
        state = MercyState()

        with pytest.raises(ConfigurationError):
            engine.decide(state, height)
        assert state.piece_count == 0

    def test_mercy_respects_gap_both_ways(self, config):
        # Sequence with only the forced bootstrap FLOATs (slots 5, 10, 15)
        never = dataclasses.replace(
            config,
            float=dataclasses.replace(
                config.float,
                early_bonus_percent=0.0,
                mercy_curve=dataclasses.replace(
                    config.float.mercy_curve,
                    low_percent=0.0,
                    ramp_start_percent=0.0,
                    ramp_end_percent=0.0
                )
            )
        )
        sequence = FloatSequence(42, never)
        engine = AdaptiveMercyEngine(sequence, never, model=FixedModel(100.0))
        state = MercyState()

        decisions = [engine.decide(state, 10) for _ in range(1000)]

        mercy = [d.index for d in decisions if d.reason == "mercy"]
        base = [d.index for d in decisions if d.reason == "sequence"]
        assert base == [4, 9, 14]
        # Gap to slot 15 behind and to slot 5 of the next loop ahead
        assert mercy == list(range(22, 991, 8))

    def test_zero_percent_model_only_sequence(self, config):
        sequence = FloatSequence(7, config)
        engine = AdaptiveMercyEngine(sequence, config, model=FixedModel(0.0))
        state = MercyState()

        decisions = [engine.decide(state, 15) for _ in range(1000)]

        assert float_indices_of(decisions) == list(sequence.float_indices())

    def test_decision_is_truthy_for_float(self, config):
        engine = AdaptiveMercyEngine(FloatSequence(42, config), config, model=FixedModel(0.0))
        state = MercyState()

        for _ in range(100):
            decision = engine.decide(state, 0)
            assert bool(decision) == decision.is_float


class TestSessionInvariants:
    """Whole-session properties."""

    @pytest.mark.parametrize("seed", list(range(20)))
    def test_min_gap_across_session(self, config, seed):
        session = FloatSession({"date": "test", "seed": seed}, config)
        heights = np.random.default_rng(seed).integers(0, 21, size=1000)
        window_end = config.float.bootstrap.window - 1

        indices = [i for i, h in enumerate(heights) if session.should_spawn_float(int(h))]

        for a, b in zip(indices[:-1], indices[1:]):
            if session.sequence.bootstrap_applied and b <= window_end:
                continue
            assert b - a >= config.float.min_gap

    def test_floats_never_exceed_pieces(self, session):
        for height in range(21):
            for _ in range(10):
                session.should_spawn_float(height)

        stats = session.get_stats()
        assert stats.total_pieces == 210
        assert stats.total_floats <= stats.total_pieces

    def test_realized_tracks_intrinsic_at_flat_zero(self, config):
        session = FloatSession({"date": "2026-10-19", "seed": 42}, config)

        for _ in range(1000):
            session.should_spawn_float(0)

        stats = session.get_stats()
        intrinsic = session.sequence.rate_percent
        assert stats.total_floats >= int(session.sequence.flags.sum())
        assert abs(stats.float_percent - intrinsic) <= 5.0

    def test_games_replay_identically(self, session):
        heights = [0, 1, 2, 3, 5, 8, 10, 12, 15, 20] * 30

        first = [session.should_spawn_float(h) for h in heights]
        session.reset_for_new_game()
        second = [session.should_spawn_float(h) for h in heights]

        assert first == second


class TestSessionLifecycle:
    """Construction, stats, and reset."""

    def test_missing_package_rejected(self, config):
        with pytest.raises(ConfigurationError):
            FloatSession(None, config)

    def test_missing_seed_rejected(self, config):
        with pytest.raises(ConfigurationError):
            FloatSession({"date": "2026-10-19"}, config)

    def test_null_seed_rejected(self, config):
        with pytest.raises(ConfigurationError):
            FloatSession({"date": "2026-10-19", "seed": None}, config)

    def test_height_error_propagates(self, session):
        with pytest.raises(ConfigurationError):
            session.should_spawn_float(-1)
        assert session.get_stats().total_pieces == 0

    def test_stats_before_first_spawn(self, session):
        stats = session.get_stats()

        assert stats.date == "2026-10-19"
        assert stats.total_pieces == 0
        assert stats.total_floats == 0
        assert stats.float_percent == 0.0

    def test_stats_as_dict(self, session):
        for _ in range(30):
            session.should_spawn_float(6)

        data = session.get_stats().as_dict()

        assert set(data) == {"date", "totalPieces", "totalFloats", "floatPercent"}
        assert data["totalPieces"] == 30
        assert data["floatPercent"] == round(data["totalFloats"] / 30 * 100, 1)

    def test_reset_keeps_sequence(self, session):
        sequence = session.sequence
        before = sequence.tobytes()
        for _ in range(100):
            session.should_spawn_float(10)

        session.reset_for_new_game()

        assert session.sequence is sequence
        assert session.sequence.tobytes() == before
        stats = session.get_stats()
        assert stats.total_pieces == 0
        assert stats.total_floats == 0
        assert session.state.last_float_index is None

    def test_long_game_wraps_sequence(self, config):
        session = FloatSession({"date": "x", "seed": 3}, config)
        engine_sequence = session.sequence

        decisions = [session.spawn(0) for _ in range(1200)]

        for decision in decisions[1000:]:
            if engine_sequence.is_float(decision.index - 1000):
                assert decision.is_float

    def test_numpy_height_from_board(self, session):
        board = np.zeros((20, 10), dtype=np.int8)
        board[15:, 2] = 1
        height = np.flatnonzero(board.any(axis=1)).size

        decision = session.spawn(np.int64(height))

        assert decision.stack_height == 5
        assert session.get_stats().total_pieces == 1


class TestLoopSeam:
    """Sequence FLOATs are not re-checked where the sequence wraps."""

    def test_sequence_floats_kept_across_seam(self, config):
        # 1001 slots, FLOAT every 8th: last at 1000, first of the next loop at 1001
        seam = dataclasses.replace(
            config,
            float=dataclasses.replace(
                config.float,
                sequence_length=1001,
                mercy_curve=dataclasses.replace(
                    config.float.mercy_curve,
                    low_percent=100.0,
                    ramp_start_percent=100.0,
                    ramp_end_percent=100.0
                )
            )
        )
        session = FloatSession({"date": "seam", "seed": 42}, seam)

        decisions = [session.spawn(0) for _ in range(1010)]

        assert decisions[1000].reason == "sequence"
        assert decisions[1001].reason == "sequence"
        assert decisions[1001].index - decisions[1000].index < seam.float.min_gap
        assert [d.index for d in decisions[1002:] if d.is_float] == [1009]
