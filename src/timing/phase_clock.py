"""
Phase Clock.

Converts an absolute timestamp into reusable periodic phases. Every value
is recomputed from the timestamp on each call; nothing accumulates, so a
restarted or resized host never sees a jump.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator


TWO_PI = 2.0 * math.pi


def to_seconds(time_ms: float) -> float:
    """Host timestamps are milliseconds; generators work in seconds."""
    return time_ms / 1000.0


def cycle_position(t: float, period: float) -> float:
    """
    Position of `t` inside a repeating cycle.

    Args:
        t: Elapsed time (any unit)
        period: Cycle length in the same unit

    Returns:
        Value in [0, period). Negative times wrap like a modulo.
    """
    if period <= 0:
        raise ValueError(f"period must be positive, got {period}")
    return t % period


def cycle_fraction(t: float, period: float) -> float:
    """Normalized cycle position in [0, 1)."""
    return cycle_position(t, period) / period


def sine_phase(t: float, frequency: float, phase: float = 0.0) -> float:
    """sin(2*pi*f*t + phase)."""
    return math.sin(TWO_PI * frequency * t + phase)


def cosine_phase(t: float, frequency: float, phase: float = 0.0) -> float:
    """cos(2*pi*f*t + phase)."""
    return math.cos(TWO_PI * frequency * t + phase)


def oscillate(t: float, rate: float, phase: float = 0.0) -> float:
    """sin(rate*t + phase) with `rate` in radians per unit time."""
    return math.sin(rate * t + phase)


def seeded_random(seed: float) -> float:
    """Deterministic pseudo-random value in [0, 1) for a given seed."""
    x = math.sin(seed * 12.9898 + 78.233) * 43758.5453
    return x - math.floor(x)


@dataclass(frozen=True)
class PhaseClock:
    """
    Phase readings bound to one instant.

    Generators build one clock per call so every layer of a frame reads
    the same instant.
    """
    seconds: float

    @classmethod
    def from_ms(cls, time_ms: float, time_scale: float = 1000.0) -> PhaseClock:
        """
        Args:
            time_ms: Host timestamp in milliseconds
            time_scale: Divisor turning ms into the generator's time base
        """
        return cls(time_ms / time_scale)

    def cycle(self, period: float) -> float:
        return cycle_position(self.seconds, period)

    def fraction(self, period: float) -> float:
        return cycle_fraction(self.seconds, period)

    def sin(self, rate: float, phase: float = 0.0) -> float:
        return oscillate(self.seconds, rate, phase)

    def cos(self, rate: float, phase: float = 0.0) -> float:
        return math.cos(rate * self.seconds + phase)

    def wave(self, frequency: float, phase: float = 0.0) -> float:
        return sine_phase(self.seconds, frequency, phase)

    def unit_wave(self, rate: float, phase: float = 0.0) -> float:
        """Sinusoid remapped to [0, 1]."""
        return (self.sin(rate, phase) + 1.0) / 2.0

    def sweep(self, degrees_per_second: float) -> float:
        """Rotating angle in [0, 360)."""
        return cycle_position(self.seconds * degrees_per_second, 360.0)


@dataclass
class AnimationTicker:
    """
    Fixed-interval timestamp source for offline rendering.

    Timestamps are derived from the tick index, never accumulated.

    Args:
        interval_ms: Spacing between ticks (100 ms preview, ~16.67 ms live)
        start_ms: Timestamp of tick zero
    """
    interval_ms: float = 100.0
    start_ms: float = 0.0

    def __post_init__(self):
        if self.interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {self.interval_ms}")

    def at(self, index: int) -> float:
        return self.start_ms + index * self.interval_ms

    def ticks(self, duration_ms: float) -> Iterator[float]:
        """Timestamps covering [start, start + duration)."""
        count = int(math.ceil(duration_ms / self.interval_ms))
        for i in range(count):
            yield self.at(i)
