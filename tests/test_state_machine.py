"""
Temporal State Machine Tests

Covers:
1. Fatigue cycle resolution (33 s, four states)
2. Transition laws
3. Periodicity and the end-of-cycle fallback
4. Construction errors
"""

import pytest

from src.timing import (
    StateDefinition,
    TemporalStateMachine,
    TransitionLaw,
    fatigue_machine,
    heartbeat_machine,
    ping_machine,
)


class TestFatigueCycle:

    def test_total_duration(self):
        assert fatigue_machine().total_duration == 33.0

    def test_second_state_early_progress(self):
        """8.5 s lands half a second into the 12 s mild-fatigue state."""
        reading = fatigue_machine().state_at(8.5)
        assert reading.name == "MILD_FATIGUE"
        assert reading.index == 1
        assert reading.progress == pytest.approx(0.5 / 12.0, abs=1e-4)
        assert reading.progress == pytest.approx(0.0417, abs=1e-4)

    def test_ramp_law_grows_from_base(self):
        reading = fatigue_machine().state_at(8.5)
        assert reading["ptosis"] == pytest.approx(0.6 * (1 + (0.5 / 12.0) * 0.3))

    def test_state_boundaries(self):
        machine = fatigue_machine()
        assert machine.state_at(0.0).name == "RESTED"
        assert machine.state_at(20.0).name == "HEAVY_FATIGUE"
        assert machine.state_at(30.0).name == "BLINK_REST"

    def test_blink_rest_recovers_with_floor(self):
        reading = fatigue_machine().state_at(32.999)
        assert reading["ptosis"] == pytest.approx(1.2 * 0.2, abs=1e-3)


class TestPeriodicity:

    @pytest.mark.parametrize("t", [0.0, 4.2, 8.5, 19.9, 31.0])
    def test_reading_repeats_each_cycle(self, t):
        machine = fatigue_machine()
        first = machine.reading_at(t)
        later = machine.reading_at(t + machine.total_duration * 3)
        assert first.name == later.name
        assert first.progress == pytest.approx(later.progress, abs=1e-9)

    def test_time_past_end_resolves_to_last_state(self):
        machine = fatigue_machine()
        reading = machine.state_at(machine.total_duration + 0.5)
        assert reading.name == "BLINK_REST"
        assert reading.progress == 1.0


class TestPresets:

    def test_ping_decays_to_zero(self):
        machine = ping_machine(2.0)
        assert machine.state_at(0.0)["opacity"] == pytest.approx(1.0)
        assert machine.state_at(1.0)["opacity"] == pytest.approx(0.5)

    def test_ping_silence_is_dark(self):
        machine = ping_machine(1.0, silence=0.5)
        assert machine.total_duration == 1.5
        assert machine.state_at(1.2)["opacity"] == 0.0

    def test_heartbeat_peaks_mid_beat(self):
        machine = heartbeat_machine(2.0)
        assert machine.state_at(0.25)["pulse"] == pytest.approx(1.0)
        assert machine.state_at(0.0)["pulse"] == pytest.approx(0.0)


class TestConstruction:

    def test_empty_states_rejected(self):
        with pytest.raises(ValueError):
            TemporalStateMachine([])

    def test_non_positive_duration_rejected(self):
        with pytest.raises(ValueError):
            TemporalStateMachine([StateDefinition("BAD", 0.0, {"x": 1.0})])

    def test_heartbeat_rate_must_be_positive(self):
        with pytest.raises(ValueError):
            heartbeat_machine(0.0)

    def test_hold_law_keeps_base(self):
        machine = TemporalStateMachine([
            StateDefinition("A", 1.0, {"x": 0.4}, TransitionLaw.HOLD),
        ])
        assert machine.state_at(0.7)["x"] == 0.4
