"""
Ocular myasthenia: fatigue-driven ptosis and photophobia.

Both eyelids droop asymmetrically and glare blooms grow as the fatigue
cycle escalates, then ease during the brief blink-rest state.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from src.core.contracts import BlendMode, OverlayFrame, OverlayLayer, RGB
from src.timing.phase_clock import PhaseClock
from src.timing.state_machine import fatigue_machine
from src.overlays.layers import WHITE, clear, radial, linear


FATIGUE = fatigue_machine()

LEFT_LID_BOUNDS = (0.0, 0.0, 50.0, 100.0)
RIGHT_LID_BOUNDS = (50.0, 0.0, 50.0, 100.0)

# (color, alpha weight, position as a fraction of coverage)
LEFT_LID_SHADES: Tuple[Tuple[RGB, float, float], ...] = (
    ((45, 38, 35), 0.98, 0.0),
    ((55, 45, 40), 0.92, 0.4),
    ((65, 52, 48), 0.8, 0.7),
    ((80, 65, 60), 0.5, 0.9),
    ((100, 80, 75), 0.2, 1.0),
)
RIGHT_LID_SHADES: Tuple[Tuple[RGB, float, float], ...] = (
    ((50, 42, 38), 0.88, 0.0),
    ((60, 50, 45), 0.78, 0.4),
    ((70, 57, 52), 0.6, 0.7),
    ((85, 70, 65), 0.32, 0.9),
    ((105, 85, 80), 0.12, 1.0),
)


def eyelid_tremor(clock: PhaseClock) -> float:
    return clock.sin(4) * 0.5 + clock.sin(7) * 0.3


def eyelid(name: str, coverage: float, shades, strength: float, bounds) -> OverlayLayer:
    """Lid shadow descending from the top edge to `coverage` percent."""
    entries = [(coverage * pos, color, weight * strength) for color, weight, pos in shades]
    entries.append(clear(coverage + 3))
    entries.append(clear(100))
    return linear(name, 180, entries, bounds=bounds)


def generate_anselmo_myasthenia(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """
    Ptosis plus photophobia modulated by the fatigue state machine.

    Args:
        condition_id: Registry id
        intensity: Severity in [0, 1]
        time_ms: Host timestamp
        params: Unused

    Returns:
        OverlayFrame with both lids at the bottom of the stack
    """
    clock = PhaseClock.from_ms(time_ms)
    level = intensity

    fatigue = FATIGUE.reading_at(clock.seconds)
    ptosis = fatigue["ptosis"]
    photophobia = fatigue["photophobia"]
    strength = level * ptosis
    tremor = eyelid_tremor(clock)

    left_cover = 18 + ptosis * level * 12 + tremor
    right_cover = 10 + ptosis * level * 8 + tremor * 0.7
    avg = (left_cover + right_cover) / 2

    glare = (0.35 + clock.sin(0.8) * 0.15 + clock.sin(1.3) * 0.1) * level * photophobia
    halo = level * photophobia * 0.3

    layers: List[OverlayLayer] = [
        eyelid("left_eyelid", 20 + ptosis * level * 15 + tremor, LEFT_LID_SHADES, strength, LEFT_LID_BOUNDS),
        eyelid("right_eyelid", 12 + ptosis * level * 10 + tremor * 0.7, RIGHT_LID_SHADES, strength, RIGHT_LID_BOUNDS),
        radial("halo_glow", (50, 50), (100, 80), [
            clear(0), clear(40), (60, (255, 255, 230), 0.2 * halo), (80, (255, 255, 220), 0.1 * halo), clear(100),
        ]),
        linear("overall_brightness", 180, [
            (0, WHITE, 0.15 * glare), (50, WHITE, 0.1 * glare), (100, WHITE, 0.15 * glare),
        ]),
        radial("side_bloom", (75 + clock.sin(0.2) * 5, 40), (40, 60), [
            (0, (255, 255, 250), 0.5 * glare), (40, (255, 253, 245), 0.3 * glare), clear(100),
        ]),
        radial("central_bloom", (50, 30), (70, 50), [
            (0, WHITE, 0.6 * glare), (30, (255, 252, 245), 0.4 * glare),
            (60, (255, 250, 240), 0.2 * glare), clear(100),
        ]),
        linear("ptosis", 180, [
            (0, (55, 48, 42), 0.92 * strength),
            (avg * 0.4, (65, 55, 50), 0.85 * strength),
            (avg * 0.7, (75, 60, 55), 0.65 * strength),
            (avg * 0.9, (85, 70, 65), 0.35 * strength),
            clear(avg + 4),
            clear(100),
        ]),
    ]

    return OverlayFrame(
        condition_id=condition_id,
        layers=layers,
        blend_mode=BlendMode.NORMAL,
        z_index=9998,
    )
