"""
Timing Module.

Responsibilities:
- Stateless periodic phases derived from absolute time
- Finite-state temporal cycles (fatigue, ping, heartbeat)
- Fixed-interval animation timestamps for offline rendering
"""

from .phase_clock import (
    PhaseClock,
    AnimationTicker,
    cycle_position,
    cycle_fraction,
    sine_phase,
    cosine_phase,
    oscillate,
    seeded_random,
    to_seconds,
)
from .state_machine import (
    StateDefinition,
    TransitionLaw,
    TemporalStateMachine,
    fatigue_machine,
    ping_machine,
    heartbeat_machine,
)
