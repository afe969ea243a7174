"""
Phase Clock Tests

Covers:
1. Cycle positions and negative-time wrapping
2. Sine/cosine phases
3. Seeded pseudo-random values
4. Fixed-interval animation ticks
"""

import math

import pytest

from src.timing import (
    AnimationTicker,
    PhaseClock,
    cosine_phase,
    cycle_fraction,
    cycle_position,
    seeded_random,
    sine_phase,
    to_seconds,
)


class TestCyclePosition:

    def test_wraps_into_period(self):
        assert cycle_position(7.5, 3.0) == pytest.approx(1.5)

    def test_negative_time_wraps_like_modulo(self):
        assert cycle_position(-1.0, 4.0) == pytest.approx(3.0)

    def test_fraction_is_normalized(self):
        assert cycle_fraction(5.0, 4.0) == pytest.approx(0.25)

    def test_rejects_non_positive_period(self):
        with pytest.raises(ValueError):
            cycle_position(1.0, 0.0)


class TestPhases:

    def test_sine_phase_quarter_cycle(self):
        assert sine_phase(0.25, 1.0) == pytest.approx(1.0)

    def test_cosine_phase_half_cycle(self):
        assert cosine_phase(0.5, 1.0) == pytest.approx(-1.0)

    def test_to_seconds(self):
        assert to_seconds(1500.0) == 1.5

    def test_clock_reads_one_instant(self):
        clock = PhaseClock.from_ms(2000.0)
        assert clock.seconds == 2.0
        assert clock.sin(0.5) == pytest.approx(math.sin(1.0))
        assert 0.0 <= clock.unit_wave(3.0) <= 1.0

    def test_clock_time_scale(self):
        """Aura-style time base divides by 60 instead of 1000."""
        assert PhaseClock.from_ms(600.0, 60.0).seconds == pytest.approx(10.0)

    def test_sweep_stays_in_circle(self):
        assert 0.0 <= PhaseClock(100.0).sweep(45.0) < 360.0


class TestSeededRandom:

    def test_deterministic(self):
        assert seeded_random(42) == seeded_random(42)

    def test_unit_range(self):
        for seed in range(200):
            assert 0.0 <= seeded_random(seed) < 1.0


class TestAnimationTicker:

    def test_ticks_are_evenly_spaced(self):
        ticker = AnimationTicker(interval_ms=100.0, start_ms=50.0)
        assert list(ticker.ticks(350.0)) == [50.0, 150.0, 250.0, 350.0]

    def test_index_lookup_matches_iteration(self):
        ticker = AnimationTicker(interval_ms=16.67)
        ticks = list(ticker.ticks(1000.0))
        assert ticks[10] == ticker.at(10)
        assert all(b > a for a, b in zip(ticks, ticks[1:]))

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            AnimationTicker(interval_ms=0.0)
