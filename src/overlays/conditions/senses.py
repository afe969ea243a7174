"""
Alternate-sense generators.

Each replaces sight with a different perceptual channel rendered over a
darkened field: radar (Daredevil), EM visor (Geordi), sonar (Blindspot),
spirit sense (Kenshi) and seismic sense (Toph).
"""

from __future__ import annotations

import math
from typing import Dict, List, Sequence, Tuple

from src.core.contracts import BlendMode, ColorStop, OverlayFrame, OverlayLayer, RGB
from src.timing.phase_clock import PhaseClock, cycle_fraction
from src.timing.state_machine import heartbeat_machine, ping_machine
from src.overlays.layers import (
    WHITE, BLACK, clear, radial, circle, linear, conic, repeating_linear, repeating_radial, solid,
)


def bands(*lines: Tuple[float, float, RGB, float]) -> List[ColorStop]:
    """Thin lines along a linear field: (position %, half width %, color, alpha)."""
    stops = [clear(0)]
    for pos, half, color, alpha in lines:
        stops.extend([clear(pos - half), ColorStop(pos, color, alpha), clear(pos + half)])
    stops.append(clear(100))
    return stops


def stripe(gap: float, peak: float, end: float, color: RGB, alpha: float) -> List[ColorStop]:
    """One repeating stripe: clear until `gap`, peak at `peak`, clear again at `end` px."""
    return [clear(0), clear(gap), ColorStop(peak, color, alpha), clear(end)]


# ============================================================
# DAREDEVIL: RADAR SENSE
# ============================================================

# (base size, size swing, rate, phase, aspect x, aspect y, center, ring start, ring stops, pulse index)
RADAR_ARCS = (
    (35, 5, 0.8, 0.0, 1.0, 0.6, (20, 25), 60, ((75, (255, 80, 100), 0.35), (85, (255, 60, 80), 0.5), (95, (200, 40, 60), 0.3)), 0),
    (40, 6, 0.9, 1.5, 0.5, 1.0, (85, 50), 55, ((70, (255, 70, 90), 0.3), (82, (255, 55, 75), 0.45), (94, (180, 35, 55), 0.25)), 1),
    (45, 7, 0.7, 2.5, 1.0, 0.5, (50, 85), 50, ((68, (255, 75, 95), 0.32), (80, (255, 60, 80), 0.48), (92, (190, 38, 58), 0.28)), 2),
    (32, 5, 1.0, 3.5, 1.0, 0.7, (75, 20), 58, ((72, (255, 85, 105), 0.28), (84, (255, 65, 85), 0.42), (95, (185, 40, 60), 0.22)), 3),
    (28, 4, 1.1, 4.5, 0.6, 1.0, (12, 55), 52, ((68, (255, 72, 92), 0.26), (82, (255, 58, 78), 0.4), (94, (175, 35, 55), 0.2)), 0),
    (50, 15, 0.6, 0.0, 1.0, 1.0, (50, 50), 70, ((80, (255, 65, 85), 0.18), (88, (255, 50, 70), 0.28), (96, (160, 30, 50), 0.15)), 1),
)


def generate_daredevil_radar(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """Red-washed world traced by pulsing radar arcs, edge lines and a slow sweep."""
    clock = PhaseClock.from_ms(time_ms)
    level = intensity

    pulse = 0.92 + clock.sin(1.5) * 0.08
    pulse_2 = 0.94 + clock.sin(2.0, 0.5) * 0.06
    arc_pulses = (
        0.5 + clock.sin(1.2) * 0.3,
        0.5 + clock.sin(1.4, 1) * 0.3,
        0.5 + clock.sin(1.1, 2) * 0.3,
        0.5 + clock.sin(1.3, 3) * 0.3,
    )
    base = 0.82 * level * pulse

    top_first: List[OverlayLayer] = []
    for i, (size0, amp, rate, phase, ax, ay, center, start, ring, pulse_index) in enumerate(RADAR_ARCS):
        size = size0 + clock.sin(rate, phase) * amp
        p = arc_pulses[pulse_index]
        top_first.append(radial(
            f"arc_{i + 1}", center, (size * ax, size * ay),
            [clear(start)] + [(off, color, w * level * p) for off, color, w in ring] + [clear(100)],
        ))

    d1 = clock.sin(0.4) * 8
    d2 = clock.sin(0.35, 1) * 10
    top_first.append(repeating_linear(
        "diagonal_lines_1", 42 + clock.sin(0.15) * 6, 43 + d1,
        stripe(38 + d1, 40 + d1, 43 + d1, (120, 25, 40), 0.32 * level * pulse_2),
    ))
    top_first.append(repeating_linear(
        "diagonal_lines_2", -48 + clock.sin(0.17, 1) * 5, 58 + d2,
        stripe(52 + d2, 55 + d2, 58 + d2, (110, 22, 35), 0.28 * level * pulse),
    ))

    v = [
        15 + clock.sin(0.3) * 5, 35 + clock.sin(0.25, 1) * 4, 55 + clock.sin(0.35, 2) * 5,
        75 + clock.sin(0.28, 3) * 4, 88 + clock.sin(0.32, 4) * 3,
    ]
    h = [
        20 + clock.sin(0.22) * 4, 45 + clock.sin(0.27, 1.5) * 5,
        70 + clock.sin(0.24, 2.5) * 4, 90 + clock.sin(0.29, 3.5) * 3,
    ]
    top_first.extend([
        linear("vertical_lines_1", 88 + clock.sin(0.2) * 4,
            bands((v[0], 0.6, (120, 20, 35), 0.6 * level), (v[2], 0.5, (110, 18, 30), 0.55 * level))),
        linear("vertical_lines_2", 92 + clock.sin(0.18, 1) * 3,
            bands((v[1], 0.5, (130, 22, 38), 0.55 * level), (v[3], 0.4, (115, 20, 32), 0.5 * level))),
        linear("vertical_lines_3", 85 + clock.sin(0.22, 2) * 5,
            bands((v[4], 0.5, (105, 18, 28), 0.5 * level))),
        linear("horizontal_lines_1", 178 + clock.sin(0.19) * 4,
            bands((h[0], 0.5, (125, 22, 36), 0.55 * level), (h[2], 0.4, (110, 18, 30), 0.5 * level))),
        linear("horizontal_lines_2", 182 + clock.sin(0.21, 1.5) * 3,
            bands((h[1], 0.5, (135, 25, 40), 0.55 * level), (h[3], 0.4, (115, 20, 34), 0.48 * level))),
    ])

    sweep_alpha = 0.22 * level * pulse_2
    top_first.append(conic("radar_sweep", (50, 50), clock.sweep(20), [
        (0, (255, 70, 90), sweep_alpha), clear(60), clear(300), (360, (255, 70, 90), sweep_alpha),
    ]))
    top_first.append(radial("vignette", (50, 50), (80, 80), [
        clear(0), clear(25), (55, (180, 35, 55), 0.4 * level), (100, (130, 25, 40), 0.6 * level),
    ]))
    top_first.append(linear("red_tint", 180, [
        (0, (240, 50, 70), base), (50, (220, 40, 60), base * 0.97), (100, (200, 35, 55), base),
    ]))

    return OverlayFrame(
        condition_id=condition_id,
        layers=top_first[::-1],
        blend_mode=BlendMode.MULTIPLY,
        z_index=9999,
    )


# ============================================================
# GEORDI: VISOR SENSE
# ============================================================

FLICKER_THRESHOLD = 0.85


def visor_flicker(clock: PhaseClock) -> float:
    """Product of three incommensurate sinusoids; overload when above threshold."""
    return clock.sin(8) * clock.sin(13) * clock.sin(5)


def generate_geordi_visor(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """EM-spectrum halos, raster scan lines and occasional sensor overload."""
    clock = PhaseClock.from_ms(time_ms)
    level = intensity

    scan = clock.cycle(100 / 30.0) * 30
    em_1 = 0.6 + clock.sin(2.5) * 0.25
    em_2 = 0.65 + clock.sin(3.0, 1) * 0.2
    em_3 = 0.55 + clock.sin(2.2, 2) * 0.25
    flicker = 0.3 * level if visor_flicker(clock) > FLICKER_THRESHOLD else 0.0
    thermal = clock.sin(0.5) * 5
    e1 = clock.sin(0.3) * 10
    e2 = clock.sin(0.35, 1) * 12

    top_first = [
        radial("overload_flash", (50, 50), (100, 100), [
            (0, WHITE, flicker), (40, (255, 220, 255), flicker * 0.7), (70, (200, 180, 255), flicker * 0.4), clear(100),
        ]),
        linear("scan_bar", 180, [
            clear(0), clear(scan - 2), (scan - 1, (200, 255, 255), 0.12 * level), (scan, WHITE, 0.2 * level),
            (scan + 1, (200, 255, 255), 0.12 * level), clear(scan + 2), clear(100),
        ]),
        repeating_linear("scan_lines", 180, 7, [
            clear(0), clear(3), (3, (150, 200, 255), 0.08 * level), (4, (150, 200, 255), 0.08 * level), clear(4), clear(7),
        ]),
        linear("chromatic_fringe_1", 45 + thermal, [
            (0, (0, 255, 255), 0.06 * level), clear(3), clear(97), (100, (255, 0, 255), 0.06 * level),
        ]),
        linear("chromatic_fringe_2", -45 + thermal, [
            (0, (255, 0, 255), 0.05 * level), clear(4), clear(96), (100, (0, 255, 255), 0.05 * level),
        ]),
        repeating_linear("edge_lines_1", 88 + clock.sin(0.2) * 3, 49 + e1,
                         stripe(45 + e1, 47 + e1, 49 + e1, (180, 220, 255), 0.1 * level * em_2)),
        repeating_linear("edge_lines_2", 178 + clock.sin(0.25) * 4, 59 + e2,
                         stripe(55 + e2, 57 + e2, 59 + e2, (200, 180, 255), 0.08 * level * em_3)),
        radial("em_halo_1", (50, 10), (80, 40), [
            (0, (255, 220, 180), 0.35 * level * em_1), (30, (255, 160, 80), 0.25 * level * em_1),
            (60, (200, 100, 220), 0.15 * level * em_1), clear(100),
        ]),
        radial("em_halo_2", (50, 50), (60, 70), [
            (0, (255, 200, 150), 0.18 * level * em_2), (40, (255, 140, 100), 0.12 * level * em_2),
            (70, (180, 80, 160), 0.08 * level * em_2), clear(100),
        ]),
        radial("em_halo_3", (15 + clock.sin(0.3) * 5, 60), (25, 30), [
            (0, (100, 200, 255), 0.25 * level * em_3), (50, (80, 150, 255), 0.18 * level * em_3),
            (80, (60, 100, 200), 0.1 * level * em_3), clear(100),
        ]),
        radial("em_halo_4", (85 + clock.sin(0.35, 1.5) * 5, 45), (20, 35), [
            (0, (120, 220, 255), 0.22 * level * em_1), (50, (90, 170, 255), 0.15 * level * em_1),
            (80, (70, 120, 220), 0.08 * level * em_1), clear(100),
        ]),
        linear("visor_top_edge", 180, [
            (0, (10, 5, 30), 0.85 * level), (8, (20, 10, 50), 0.6 * level), clear(15), clear(100),
        ]),
        linear("visor_bottom_edge", 0, [
            (0, (10, 5, 30), 0.85 * level), (8, (20, 10, 50), 0.6 * level), clear(15), clear(100),
        ]),
        radial("visor_vignette", (50, 50), (95, 75), [
            clear(0), clear(55), (75, (20, 10, 60), 0.4 * level), (88, (10, 5, 40), 0.7 * level), (100, (5, 2, 20), 0.9 * level),
        ]),
        radial("thermal_gradient", (50, 40), (120, 100), [
            (0, (255, 180, 100), 0.12 * level * em_1), (20, (255, 120, 60), 0.1 * level), (40, (200, 80, 180), 0.08 * level),
            (60, (100, 60, 200), 0.1 * level), (80, (60, 40, 150), 0.15 * level), (100, (40, 20, 100), 0.2 * level),
        ]),
        linear("spectral_floor", 180, [
            (0, (60, 20, 120), 0.25 * level), (50, (40, 30, 100), 0.22 * level), (100, (50, 25, 110), 0.25 * level),
        ]),
    ]

    return OverlayFrame(
        condition_id=condition_id,
        layers=top_first[::-1],
        blend_mode=BlendMode.HARD_LIGHT,
        z_index=9999,
    )


# ============================================================
# BLINDSPOT: SONAR SENSE
# ============================================================

SONAR_PING = ping_machine(1.0 / 3.0)
SONAR_GRID_PX = 8


def ripple_ring(name: str, size: float, inner: float, ring: Sequence[Tuple[float, RGB, float]], outer: float) -> OverlayLayer:
    return radial(name, (50, 50), (size, size), [
        clear(0), clear(max(0.0, size - inner)),
        *[(size + off, color, alpha) for off, color, alpha in ring],
        clear(size + outer), clear(100),
    ])


def generate_blindspot_sonar(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """3 Hz sonar pings, expanding ripples and a rotating sweep over a dark void."""
    clock = PhaseClock.from_ms(time_ms)
    t = clock.seconds
    level = intensity

    ping = SONAR_PING.reading_at(t)
    ping_phase = math.sin(ping.progress * math.pi * 2)
    sweep = clock.sweep(120)
    ripples = [cycle_fraction(t * 2 + offset, 1.0) for offset in (0.0, 0.33, 0.66)]
    pulse = 0.85 + ping_phase * 0.15
    edge_pulse = 0.7 + clock.sin(4) * 0.2

    sizes = [10 + r * 90 for r in ripples]
    fades = [(1 - r) * w * level for r, w in zip(ripples, (0.3, 0.25, 0.2))]

    e = [20 + clock.sin(0.4) * 5, 45 + clock.sin(0.35, 1) * 6, 70 + clock.sin(0.38, 2) * 5]
    he = [25 + clock.sin(0.32) * 4, 55 + clock.sin(0.28, 1.5) * 5, 80 + clock.sin(0.3, 2.5) * 4]
    grid_alpha = 0.08 * level * (0.8 + ping_phase * 0.2)
    grid_stops = [clear(0), clear(SONAR_GRID_PX - 1), (SONAR_GRID_PX - 1, (80, 180, 220), grid_alpha),
                  (SONAR_GRID_PX, (80, 180, 220), grid_alpha)]

    top_first = [
        radial("ping_point", (50, 50), (3, 3), [
            (0, (150, 240, 255), 0.6 * level * pulse), (40, (120, 220, 250), 0.4 * level * pulse),
            (70, (80, 180, 220), 0.2 * level), clear(100),
        ]),
        ripple_ring("ripple_1", sizes[0], 3, (
            (-1, (100, 200, 240), fades[0]), (0, (80, 180, 220), fades[0] * 0.8), (1, (60, 150, 190), fades[0] * 0.5),
        ), 3),
        ripple_ring("ripple_2", sizes[1], 2, (
            (0, (90, 190, 230), fades[1]), (1, (70, 160, 200), fades[1] * 0.6),
        ), 2),
        ripple_ring("ripple_3", sizes[2], 2, ((0, (80, 170, 210), fades[2]),), 2),
        conic("ping_sweep", (50, 50), sweep, [
            (0, (100, 220, 255), 0.4 * level * pulse), (15, (80, 200, 240), 0.25 * level * pulse),
            (30, (60, 160, 200), 0.1 * level), clear(45), clear(360),
        ]),
        conic("sweep_echo", (50, 50), (sweep - 60 + 360) % 360, [
            (0, (60, 150, 180), 0.15 * level), (20, (40, 100, 140), 0.08 * level), clear(40), clear(360),
        ]),
        linear("edge_lines_1", 88 + clock.sin(0.3) * 3, bands(
            (e[0], 0.4, (100, 200, 240), 0.35 * level * edge_pulse),
            (e[1], 0.3, (80, 180, 220), 0.3 * level * edge_pulse),
            (e[2], 0.3, (70, 160, 200), 0.25 * level * edge_pulse),
        )),
        linear("edge_lines_2", 178 + clock.sin(0.25, 1) * 3, bands(
            (he[0], 0.3, (90, 190, 230), 0.3 * level * edge_pulse),
            (he[1], 0.3, (75, 170, 210), 0.25 * level * edge_pulse),
            (he[2], 0.25, (65, 150, 190), 0.2 * level * edge_pulse),
        )),
        repeating_linear("grid_horizontal", 0, SONAR_GRID_PX, grid_stops),
        repeating_linear("grid_vertical", 90, SONAR_GRID_PX, grid_stops),
        linear("sound_shadow_1", 35 + clock.sin(0.15) * 8, [
            clear(0), clear(60), (75, (2, 15, 25), 0.4 * level), (85, (1, 10, 18), 0.5 * level), (100, (0, 5, 12), 0.55 * level),
        ]),
        linear("sound_shadow_2", -50 + clock.sin(0.18, 1) * 6, [
            clear(0), clear(65), (80, (2, 12, 22), 0.35 * level), (90, (1, 8, 15), 0.45 * level), (100, (0, 5, 10), 0.5 * level),
        ]),
        radial("depth_gradient", (50, 50), (70, 70), [
            (0, (120, 220, 255), 0.25 * level * pulse), (25, (80, 180, 220), 0.2 * level * pulse),
            (50, (40, 120, 160), 0.15 * level * pulse), (75, (20, 60, 90), 0.1 * level), clear(100),
        ]),
        radial("range_boundary", (50, 50), (85, 85), [
            clear(0), clear(50), (65, (3, 20, 30), 0.3 * level), (78, (2, 15, 25), 0.5 * level),
            (88, (1, 10, 18), 0.75 * level), (100, (0, 5, 12), 0.95 * level),
        ]),
        radial("sonar_void", (50, 50), (100, 100), [
            (0, (5, 25, 35), 0.7 * level), (50, (3, 18, 28), 0.8 * level), (100, (2, 12, 20), 0.9 * level),
        ]),
    ]

    return OverlayFrame(
        condition_id=condition_id,
        layers=top_first[::-1],
        blend_mode=BlendMode.SCREEN,
        z_index=9999,
    )


# ============================================================
# KENSHI: TELEKINETIC SPIRIT SENSE
# ============================================================

KENSHI_HEARTBEAT = heartbeat_machine(1.2)

# (x base, x amp, x rate, x phase, y base, y amp, y rate, y phase, rx, ry,
#  opacity base, opacity amp, opacity rate, opacity phase, stops)
SPIRIT_WISPS = (
    (20, 25, 0.15, 0.0, 30, 20, 0.12, 0.5, 20, 32, 0.35, 0.15, 0.5, 0.0,
     ((0, (220, 235, 255), 1.0), (30, (180, 205, 250), 0.7), (60, (140, 175, 235), 0.4))),
    (70, 20, 0.18, 2.0, 55, 25, 0.14, 1.2, 18, 28, 0.3, 0.12, 0.4, 1.0,
     ((0, (210, 225, 255), 1.0), (35, (170, 195, 245), 0.65), (65, (130, 165, 225), 0.35))),
    (45, 30, 0.2, 1.0, 70, 15, 0.16, 0.8, 22, 18, 0.32, 0.13, 0.55, 2.0,
     ((0, (215, 230, 255), 1.0), (40, (175, 200, 245), 0.6))),
    (85, 12, 0.13, 0.3, 25, 18, 0.17, 1.8, 15, 22, 0.28, 0.1, 0.45, 0.7,
     ((0, (200, 220, 250), 1.0), (45, (160, 190, 240), 0.55))),
)

# (start offset deg, stops as (deg, color, weight), tail deg)
TK_STREAMS = (
    (0, ((1, (140, 200, 255), 0.45), (3, (100, 170, 250), 0.35), (6, (70, 140, 230), 0.2)), 10),
    (120, ((1.5, (130, 190, 255), 0.4), (4, (90, 160, 245), 0.3), (7, (60, 130, 220), 0.15)), 12),
    (240, ((1, (120, 180, 250), 0.35), (3.5, (80, 150, 235), 0.25), (6, (50, 120, 210), 0.12)), 9),
)


def inert_bands(lines: Sequence[Tuple[float, RGB, RGB, float, float]]) -> List[ColorStop]:
    """Three-stop lines for inert matter: (start %, edge rgb, core rgb, edge alpha, core alpha)."""
    stops = [clear(0)]
    for start, edge, core, edge_a, core_a in lines:
        stops.extend([
            clear(start), ColorStop(start + 1, edge, edge_a), ColorStop(start + 2, core, core_a),
            ColorStop(start + 3, edge, edge_a), clear(start + 4),
        ])
    stops.append(clear(100))
    return stops


def threat_flashes(clock: PhaseClock) -> Tuple[float, float]:
    """Raw products driving the two threat flares."""
    return clock.sin(3.5) * clock.sin(5.2), clock.sin(4.8, 1.5) * clock.sin(2.8)


def generate_kenshi_telekinetic(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """Blue soul glows on a near-black field, with amber threat flares and rotating TK streams."""
    clock = PhaseClock.from_ms(time_ms)
    t = clock.seconds
    level = intensity

    heartbeat = KENSHI_HEARTBEAT.reading_at(t)["pulse"]
    soul = 0.7 + heartbeat * 0.3
    soul_2 = 0.75 + clock.sin(2.5, 0.5) * 0.25
    soul_3 = 0.8 + clock.sin(1.8, 1.2) * 0.2

    threat_1, threat_2 = threat_flashes(clock)
    flare_1 = 0.9 * level if threat_1 > 0.5 else 0.0
    flare_2 = 0.7 * level if threat_2 > 0.6 else 0.0

    sento_resonance = 0.7 + clock.sin(1.5) * 0.3
    sento_glow = 0.6 + clock.sin(2) * 0.25
    tk_pulse = 0.6 + clock.sin(3) * 0.35
    range_pulse = 0.9 + clock.sin(0.8) * 0.08
    s1 = clock.sin(0.2) * 6
    s2 = clock.sin(0.18, 1) * 8

    top_first: List[OverlayLayer] = [
        radial("threat_flare_1", (72, 32), (35, 45), [
            (0, WHITE, flare_1), (20, (255, 220, 150), flare_1 * 0.85), (40, (255, 180, 80), flare_1 * 0.65),
            (60, (255, 140, 40), flare_1 * 0.4), (80, (200, 100, 20), flare_1 * 0.2), clear(100),
        ]),
        radial("threat_flare_2", (28, 58), (30, 35), [
            (0, (255, 250, 220), flare_2), (25, (255, 200, 120), flare_2 * 0.8),
            (50, (255, 160, 60), flare_2 * 0.55), (75, (230, 120, 30), flare_2 * 0.3), clear(100),
        ]),
    ]
    for i, (offset, ring, tail) in enumerate(TK_STREAMS):
        top_first.append(conic(f"tk_stream_{i + 1}", (50, 50), (clock.sweep(20) + offset) % 360, [
            clear(0), *[(deg, color, w * level * tk_pulse) for deg, color, w in ring], clear(tail), clear(360),
        ]))
    for i, (xb, xa, xr, xp, yb, ya, yr, yp, rx, ry, ob, oa, orate, oph, ring) in enumerate(SPIRIT_WISPS):
        a = (ob + clock.sin(orate, oph) * oa) * level
        center = (xb + clock.sin(xr, xp) * xa, yb + clock.sin(yr, yp) * ya)
        top_first.append(radial(f"spirit_wisp_{i + 1}", center, (rx, ry),
                                [(off, color, a * w) for off, color, w in ring] + [clear(100)]))

    top_first.extend([
        repeating_linear("soul_edge_1", 90 + clock.sin(0.15) * 5, 36 + s1, [
            clear(0), clear(30 + s1), (32 + s1, (140, 200, 255), 0.2 * level * soul),
            (33 + s1, (160, 215, 255), 0.25 * level * soul), (34 + s1, (140, 200, 255), 0.2 * level * soul), clear(36 + s1),
        ]),
        repeating_linear("soul_edge_2", 180 + clock.sin(0.12, 0.5) * 4, 46 + s2, [
            clear(0), clear(40 + s2), (42 + s2, (120, 180, 250), 0.18 * level * soul_2),
            (43 + s2, (140, 195, 255), 0.22 * level * soul_2), (44 + s2, (120, 180, 250), 0.18 * level * soul_2), clear(46 + s2),
        ]),
        radial("sento_aura", (50, 82), (45, 55), [
            (0, (255, 200, 100), 0.55 * level * sento_glow), (20, (255, 170, 70), 0.45 * level * sento_glow),
            (40, (255, 140, 50), 0.35 * level * sento_resonance), (60, (230, 110, 30), 0.25 * level * sento_resonance),
            (80, (180, 80, 15), 0.12 * level * sento_resonance), clear(100),
        ]),
        linear("sento_blade_glow", 0, [
            (0, (255, 210, 130), 0.35 * level * sento_glow), (10, (255, 180, 90), 0.28 * level * sento_glow),
            (20, (255, 150, 60), 0.2 * level * sento_glow), (35, (220, 120, 40), 0.1 * level), clear(50), clear(100),
        ]),
        radial("soul_glow_center", (50, 45), (55, 70), [
            (0, (180, 220, 255), 0.65 * level * soul), (15, (140, 210, 255), 0.55 * level * soul),
            (30, (100, 190, 250), 0.45 * level * soul), (50, (60, 160, 230), 0.35 * level * soul),
            (70, (30, 120, 200), 0.2 * level), clear(100),
        ]),
        radial("soul_glow_2", (22, 50), (35, 45), [
            (0, (160, 210, 255), 0.5 * level * soul_2), (30, (120, 190, 250), 0.4 * level * soul_2),
            (60, (80, 160, 230), 0.25 * level * soul_2), clear(100),
        ]),
        radial("soul_glow_3", (78, 38), (30, 40), [
            (0, (150, 200, 250), 0.45 * level * soul_3), (35, (110, 180, 240), 0.35 * level * soul_3),
            (65, (70, 150, 220), 0.2 * level * soul_3), clear(100),
        ]),
        radial("soul_glow_4", (35, 70), (25, 35), [
            (0, (140, 200, 250), 0.4 * level * soul), (45, (100, 170, 235), 0.28 * level * soul), clear(100),
        ]),
        radial("soul_glow_5", (68, 65), (22, 30), [
            (0, (130, 195, 245), 0.38 * level * soul_2), (50, (90, 165, 225), 0.25 * level * soul_2), clear(100),
        ]),
        radial("energy_shimmer", (50, 50), (100, 100), [
            (0, (120, 170, 240), 0.12 * level * soul), (40, (100, 150, 225), 0.08 * level),
            (70, (80, 130, 210), 0.05 * level), clear(100),
        ]),
        linear("inert_matter_1", 85 + clock.sin(0.1) * 2, inert_bands((
            (12, (60, 50, 140), (80, 70, 160), 0.35 * level, 0.4 * level),
            (38, (70, 60, 150), (90, 80, 170), 0.38 * level, 0.42 * level),
            (63, (55, 45, 130), (75, 65, 155), 0.32 * level, 0.36 * level),
        ))),
        linear("inert_matter_2", 175 + clock.sin(0.08, 1) * 3, inert_bands((
            (18, (65, 55, 145), (85, 75, 165), 0.33 * level, 0.38 * level),
            (48, (75, 65, 155), (95, 85, 175), 0.36 * level, 0.4 * level),
            (78, (50, 40, 120), (70, 60, 145), 0.28 * level, 0.32 * level),
        ))),
        radial("range_boundary", (50, 50), (95, 95), [
            clear(0), clear(72 * range_pulse), (76 * range_pulse, (5, 5, 20), 0.3 * level),
            (80 * range_pulse, (3, 3, 15), 0.6 * level), (84 * range_pulse, (2, 2, 10), 0.85 * level),
            (87 * range_pulse, (0, 0, 5), 0.95 * level), (90, BLACK, 1.0 * level),
        ]),
        radial("dark_void", (50, 50), (100, 100), [
            (0, (15, 15, 45), 0.75 * level), (40, (8, 8, 30), 0.8 * level),
            (70, (5, 5, 20), 0.85 * level), (100, (2, 2, 10), 0.9 * level),
        ]),
        linear("dark_filter", 180, [
            (0, (5, 5, 25), 0.92 * level), (50, (3, 3, 18), 0.94 * level), (100, (2, 2, 12), 0.92 * level),
        ]),
        linear("heavy_dark_overlay", 180, [
            (0, (0, 0, 15), 0.88 * level), (50, (0, 0, 10), 0.90 * level), (100, (0, 0, 8), 0.88 * level),
        ]),
    ])

    return OverlayFrame(
        condition_id=condition_id,
        layers=top_first[::-1],
        blend_mode=BlendMode.HARD_LIGHT,
        z_index=9999,
    )


# ============================================================
# TOPH: SEISMIC SENSE
# ============================================================

PHOSPHOR_GREEN: RGB = (120, 255, 180)
PHOSPHOR_DIM: RGB = (60, 180, 100)
PHOSPHOR_BRIGHT: RGB = (150, 255, 200)

SEISMIC_PING = ping_machine(2.0)
SEISMIC_HEARTBEAT_HZ = 1.2
TERRAIN_PERIOD_PX = 90.0


def generate_toph_seismic(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """Phosphor-green seismic pings from the feet, with heartbeat-lit figures."""
    clock = PhaseClock.from_ms(time_ms)
    t = clock.seconds
    level = intensity

    ping_1 = SEISMIC_PING.reading_at(t)
    ping_2 = SEISMIC_PING.reading_at(t + 1.0)
    r1, r2 = ping_1.progress * 150, ping_2.progress * 150
    a1 = ping_1["opacity"] * 0.4 * level
    a2 = ping_2["opacity"] * 0.3 * level

    heartbeat = 0.5 + clock.wave(SEISMIC_HEARTBEAT_HZ) * 0.3
    heartbeat_2 = 0.5 + clock.wave(SEISMIC_HEARTBEAT_HZ, 0.5) * 0.25
    rp1 = cycle_fraction(t * 0.8, 1.0)
    rp2 = cycle_fraction(t * 0.8 + 0.33, 1.0)
    fade = 0.85 + clock.sin(0.5) * 0.1

    top_first = [
        circle("ping_wave", (50, 85), [
            clear(r1 - 5), (r1, PHOSPHOR_GREEN, a1), (r1 + 2, PHOSPHOR_GREEN, a1 * 0.5), clear(r1 + 5),
        ]),
        circle("ping_wave_2", (50, 85), [
            clear(r2 - 5), (r2, PHOSPHOR_DIM, a2), (r2 + 2, PHOSPHOR_DIM, a2 * 0.4), clear(r2 + 4),
        ]),
        circle("motion_ripple_1", (30 + clock.sin(0.3) * 15, 60 + clock.cos(0.25) * 10), [
            clear(rp1 * 15 - 2), (rp1 * 15, PHOSPHOR_GREEN, (1 - rp1) * 0.25 * level), clear(rp1 * 15 + 3),
        ]),
        circle("motion_ripple_2", (70 + clock.sin(0.35, 1) * 12, 40 + clock.cos(0.28, 0.5) * 8), [
            clear(rp2 * 12 - 2), (rp2 * 12, PHOSPHOR_GREEN, (1 - rp2) * 0.2 * level), clear(rp2 * 12 + 2),
        ]),
        radial("figure_1", (25 + clock.sin(0.15) * 8, 45 + clock.cos(0.12) * 6), (8, 12), [
            (0, PHOSPHOR_BRIGHT, heartbeat * 0.5 * level), (40, PHOSPHOR_GREEN, heartbeat * 0.3 * level),
            (70, PHOSPHOR_DIM, heartbeat * 0.15 * level), clear(100),
        ]),
        radial("figure_2", (65 + clock.sin(0.18, 2) * 10, 55 + clock.cos(0.14, 1) * 7), (7, 10), [
            (0, PHOSPHOR_BRIGHT, heartbeat_2 * 0.45 * level), (45, PHOSPHOR_GREEN, heartbeat_2 * 0.25 * level),
            (75, PHOSPHOR_DIM, heartbeat_2 * 0.1 * level), clear(100),
        ]),
        radial("figure_3", (50 + clock.sin(0.1, 4) * 5, 70 + clock.cos(0.13, 3) * 4), (6, 9), [
            (0, PHOSPHOR_BRIGHT, heartbeat * 0.35 * level), (50, PHOSPHOR_GREEN, heartbeat * 0.2 * level), clear(100),
        ]),
        repeating_radial("terrain_lines", (50, 100), TERRAIN_PERIOD_PX, [
            clear(0), clear(80), (85, PHOSPHOR_DIM, 0.15 * level), clear(90),
        ]),
        linear("ground_glow", 0, [
            (0, PHOSPHOR_GREEN, 0.25 * level * fade), (15, PHOSPHOR_DIM, 0.15 * level * fade),
            (30, PHOSPHOR_DIM, 0.08 * level * fade), clear(60),
        ]),
        radial("ambient_field", (50, 100), (200, 100), [
            (0, PHOSPHOR_DIM, 0.12 * level * fade), (40, PHOSPHOR_DIM, 0.06 * level * fade), clear(70),
        ]),
        linear("dark_base", 180, [(0, (5, 15, 10), 0.92 * level), (100, (8, 20, 12), 0.88 * level)]),
    ]

    return OverlayFrame(
        condition_id=condition_id,
        layers=top_first[::-1],
        blend_mode=BlendMode.NORMAL,
        z_index=9999,
    )


# ============================================================
# NEO: CODE VISION BACKDROP
# ============================================================

CODE_BACKDROP: RGB = (0, 5, 0)
CODE_BACKDROP_ALPHA = 0.85


def generate_neo_backdrop(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """Near-black green wash drawn beneath the glyph stream."""
    return OverlayFrame(
        condition_id=condition_id,
        layers=[solid("code_backdrop", CODE_BACKDROP, CODE_BACKDROP_ALPHA * intensity)],
        blend_mode=BlendMode.NORMAL,
        z_index=9998,
    )
