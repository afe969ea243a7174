"""
Temporal State Machine.

Ordered cycle of named states, each with a fixed duration and a set of
base multipliers shaped by a per-state transition law. The current state
is derived from `time mod total_duration`; nothing is stored between calls.

Used by:
- Fatigue effects (rest -> escalate -> peak -> brief relief)
- Sonar/seismic ping cycles (single decaying state)
- Heartbeat pulses (single sin^2 state)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Sequence

from src.core.contracts import StateReading


class TransitionLaw(Enum):
    """How a state's base multipliers evolve with intra-state progress."""
    HOLD = "hold"            # base
    RAMP = "ramp"            # base * (1 + progress * gain)
    OSCILLATE = "oscillate"  # base + sin(progress * pi * cycles) * amplitude
    RECOVER = "recover"      # base * max(floor, 1 - progress^0.5 * decay)
    DECAY = "decay"          # base * (1 - progress)
    PULSE = "pulse"          # base * sin(progress * pi)^2


def apply_law(law: TransitionLaw, base: float, progress: float, params: Dict[str, float]) -> float:
    """
    Evaluate a transition law.

    Args:
        law: Law to apply
        base: State's base multiplier
        progress: Intra-state progress in [0, 1]
        params: Law coefficients (gain, cycles, amplitude, floor, decay)

    Returns:
        Adjusted multiplier
    """
    if law is TransitionLaw.HOLD:
        return base
    if law is TransitionLaw.RAMP:
        return base * (1.0 + progress * params.get("gain", 0.3))
    if law is TransitionLaw.OSCILLATE:
        return base + math.sin(progress * math.pi * params.get("cycles", 3.0)) * params.get("amplitude", 0.08)
    if law is TransitionLaw.RECOVER:
        recovery = 1.0 - math.pow(progress, 0.5) * params.get("decay", 0.8)
        return base * max(params.get("floor", 0.2), recovery)
    if law is TransitionLaw.DECAY:
        return base * (1.0 - progress)
    if law is TransitionLaw.PULSE:
        return base * math.sin(progress * math.pi) ** 2
    raise ValueError(f"Unsupported transition law: {law}")


@dataclass(frozen=True)
class StateDefinition:
    """One state of a temporal cycle."""
    name: str
    duration: float
    multipliers: Dict[str, float]
    law: TransitionLaw = TransitionLaw.HOLD
    law_params: Dict[str, float] = field(default_factory=dict)

    def evaluate(self, progress: float) -> Dict[str, float]:
        return {
            key: apply_law(self.law, base, progress, self.law_params)
            for key, base in self.multipliers.items()
        }


class TemporalStateMachine:
    """
    Generic finite-state cycle with per-state multipliers.

    Guarantees:
    - Pure: readings depend only on the time passed in
    - Periodic: reading_at(t) == reading_at(t + total_duration)
    - Total: a time past the last boundary resolves to the last state
    """

    def __init__(self, states: Sequence[StateDefinition]):
        """
        Initialize state machine.

        Args:
            states: Ordered states; cycle length is the sum of durations
        """
        if not states:
            raise ValueError("TemporalStateMachine needs at least one state")
        for state in states:
            if state.duration <= 0:
                raise ValueError(f"State '{state.name}' has non-positive duration {state.duration}")

        self._states: List[StateDefinition] = list(states)
        self._total = float(sum(s.duration for s in self._states))

    @property
    def states(self) -> List[StateDefinition]:
        return list(self._states)

    @property
    def total_duration(self) -> float:
        return self._total

    def state_at(self, time_in_cycle: float) -> StateReading:
        """
        Resolve the state containing `time_in_cycle`.

        Linear scan accumulating durations. If the scan runs off the end
        (floating-point edge at the cycle boundary), the last state is used.

        Args:
            time_in_cycle: Time in [0, total_duration)

        Returns:
            StateReading with the law-adjusted multipliers
        """
        start = 0.0
        for index, state in enumerate(self._states):
            end = start + state.duration
            if time_in_cycle < end:
                progress = (time_in_cycle - start) / state.duration
                return self._reading(index, min(max(progress, 0.0), 1.0))
            start = end

        last = len(self._states) - 1
        progress = (time_in_cycle - (self._total - self._states[last].duration)) / self._states[last].duration
        return self._reading(last, min(max(progress, 0.0), 1.0))

    def reading_at(self, t: float) -> StateReading:
        """Resolve the state for an absolute time (wrapped into the cycle)."""
        return self.state_at(t % self._total)

    def _reading(self, index: int, progress: float) -> StateReading:
        state = self._states[index]
        return StateReading(
            name=state.name,
            index=index,
            progress=progress,
            multipliers=state.evaluate(progress),
        )


# ============================================================
# PRESETS
# ============================================================

FATIGUE_STATES = (
    StateDefinition(
        "RESTED", 8.0, {"ptosis": 0.3, "photophobia": 0.5},
        TransitionLaw.RAMP, {"gain": 0.3},
    ),
    StateDefinition(
        "MILD_FATIGUE", 12.0, {"ptosis": 0.6, "photophobia": 0.75},
        TransitionLaw.RAMP, {"gain": 0.3},
    ),
    StateDefinition(
        "HEAVY_FATIGUE", 10.0, {"ptosis": 1.0, "photophobia": 1.0},
        TransitionLaw.OSCILLATE, {"cycles": 3.0, "amplitude": 0.08},
    ),
    StateDefinition(
        "BLINK_REST", 3.0, {"ptosis": 1.2, "photophobia": 0.6},
        TransitionLaw.RECOVER, {"floor": 0.2, "decay": 0.8},
    ),
)


def fatigue_machine() -> TemporalStateMachine:
    """Four-state myasthenic fatigue cycle (33 s)."""
    return TemporalStateMachine(FATIGUE_STATES)


def ping_machine(period: float, silence: float = 0.0) -> TemporalStateMachine:
    """
    Decaying ping: `opacity` falls 1 -> 0 across `period`.

    Args:
        period: Length of the audible/visible ping in seconds
        silence: Optional dark gap appended after each ping
    """
    states = [StateDefinition("PING", period, {"opacity": 1.0}, TransitionLaw.DECAY)]
    if silence > 0:
        states.append(StateDefinition("SILENT", silence, {"opacity": 0.0}))
    return TemporalStateMachine(states)


def heartbeat_machine(rate_hz: float) -> TemporalStateMachine:
    """Single-state sin^2 pulse repeating `rate_hz` times per second."""
    if rate_hz <= 0:
        raise ValueError(f"rate_hz must be positive, got {rate_hz}")
    return TemporalStateMachine(
        [StateDefinition("BEAT", 1.0 / rate_hz, {"pulse": 1.0}, TransitionLaw.PULSE)]
    )
