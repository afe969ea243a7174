"""
Retinal and corneal generators: fluctuating fog, light-perception-only
vision with nystagmus, retinal detachment flashes, keratoconus ghosting.
"""

from __future__ import annotations

import math
from typing import Dict, List

from src.core.contracts import BlendMode, OverlayFrame, OverlayLayer
from src.timing.phase_clock import PhaseClock
from src.overlays.layers import WHITE, clear, radial, circle, linear


def generate_christine_fluctuating(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """Drifting white fog whose density breathes, with wandering light blooms."""
    clock = PhaseClock.from_ms(time_ms)
    level = intensity

    density = clock.sin(0.3) * 0.08 + 0.92
    density_2 = clock.sin(0.22, 1.5) * 0.06 + 0.94
    drift_x = clock.sin(0.12) * 2
    drift_y = clock.cos(0.1) * 1.5
    drift_x2 = clock.sin(0.09, 2) * 1.8
    drift_y2 = clock.cos(0.11, 1) * 1.3

    bloom = (0.3 + clock.sin(0.4) * 0.12) * level
    bloom_2 = (0.28 + clock.sin(0.35, 1.2) * 0.10) * level

    fog_1 = radial("fog_1", (50 + drift_x, 50 + drift_y), (200, 200), [
        (0, (248, 248, 252), level * 0.55 * density),
        (20, (246, 246, 250), level * 0.52 * density),
        (40, (244, 244, 248), level * 0.48 * density),
        (60, (242, 242, 246), level * 0.44 * density),
        (80, (240, 240, 244), level * 0.40 * density),
        (100, (238, 238, 242), level * 0.36 * density),
    ])
    fog_3 = radial("fog_3", (50 - drift_x * 0.7, 50 - drift_y * 0.8), (160, 180), [
        (0, (252, 252, 255), level * 0.35 * density),
        (40, (250, 250, 254), level * 0.28 * density),
        (70, (248, 248, 252), level * 0.22 * density),
        clear(100),
    ])
    fog_2 = radial("fog_2", (50 + drift_x2, 50 + drift_y2), (180, 160), [
        (0, (250, 250, 254), level * 0.40 * density_2),
        (35, (248, 248, 252), level * 0.35 * density_2),
        (65, (246, 246, 250), level * 0.30 * density_2),
        clear(100),
    ])
    bloom_3 = circle("bloom_3", (50 + clock.sin(0.13, 2) * 8, 45 + clock.cos(0.16, 2) * 7), [
        (0, (255, 255, 252), bloom * 0.45),
        (20, (255, 255, 248), bloom * 0.30),
        clear(45),
    ])
    bloom_2_layer = circle("bloom_2", (72 + clock.sin(0.18, 1) * 10, 30 + clock.cos(0.14, 1) * 8), [
        (0, (255, 255, 250), bloom_2 * 0.55),
        (18, (255, 255, 248), bloom_2 * 0.38),
        (35, (255, 255, 245), bloom_2 * 0.22),
        clear(55),
    ])
    bloom_1 = circle("bloom_1", (28 + clock.sin(0.15) * 12, 22 + clock.cos(0.12) * 10), [
        (0, (255, 255, 252), bloom * 0.65),
        (15, (255, 255, 250), bloom * 0.45),
        (30, (255, 255, 248), bloom * 0.28),
        clear(50),
    ])

    return OverlayFrame(
        condition_id=condition_id,
        layers=[fog_1, fog_3, fog_2, bloom_3, bloom_2_layer, bloom_1],
        blend_mode=BlendMode.SCREEN,
        z_index=9999,
        opacity=min(0.92, 0.65 + level * 0.27),
    )


NYSTAGMUS_HZ = 3.0


def generate_heather_light_perception(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """Near-total white-out with faint light patches and a 3 Hz horizontal jerk."""
    clock = PhaseClock.from_ms(time_ms)
    level = intensity

    nystagmus = clock.wave(NYSTAGMUS_HZ) * (3 + level * 2)
    fluct_1 = clock.wave(1 / 4.0) * 0.05
    fluct_2 = clock.wave(1 / 3.3, 1.2) * 0.05

    fog = 0.75 + level * 0.08 + fluct_1
    secondary = 0.70 + level * 0.10 + fluct_2
    pulse_1 = 0.92 + clock.sin(0.2) * 0.04 + fluct_1
    pulse_2 = 0.90 + clock.sin(0.25, 0.8) * 0.03 + fluct_2

    fog_secondary = radial("fog_secondary", (50, 50), (140, 120), [
        (0, WHITE, secondary * level * 0.9),
        (40, (248, 248, 248), secondary * level * 0.85),
        (70, (245, 245, 245), secondary * level * 0.8),
        (100, (240, 240, 240), secondary * level * 0.75),
    ])
    fog_primary = linear("fog_primary", 180, [
        (0, WHITE, fog * level),
        (100, (250, 250, 250), fog * level),
    ])
    shadow = radial("shadow_hint", (20, 70), (60, 50), [(0, (220, 220, 220), 0.08 * level), clear(100)])
    patch_2 = radial("light_patch_2", (60 + clock.sin(0.07, 1.8) * 10, 55 + clock.cos(0.08, 0.9) * 8), (35, 30), [
        (0, WHITE, pulse_2 * level * 0.12),
        (50, WHITE, pulse_2 * level * 0.06),
        clear(100),
    ])
    patch_1 = radial("light_patch_1", (40 + clock.sin(0.06) * 12, 35 + clock.cos(0.05) * 10), (45, 40), [
        (0, WHITE, pulse_1 * level * 0.15),
        (50, WHITE, pulse_1 * level * 0.08),
        clear(100),
    ])

    return OverlayFrame(
        condition_id=condition_id,
        layers=[fog_secondary, fog_primary, shadow, patch_2, patch_1],
        blend_mode=BlendMode.NORMAL,
        z_index=9999,
        translate_px=(nystagmus, 0.0),
    )


# (rate, phase, threshold, gain, x base/amp/rate/phase, y base/amp/rate/phase, weight)
DETACHMENT_FLASHES = (
    (2.5, 0.0, 0.88, 8.0, (15, 8, 0.3, 0), (25, 10, 0.25, 0), 0.9),
    (1.8, 1.5, 0.90, 10.0, (85, 6, 0.35, 1), (35, 8, 0.28, 1), 0.8),
    (3.2, 3.0, 0.92, 12.0, (10, 5, 0.4, 2), (60, 7, 0.32, 2), 0.7),
)

DETACHMENT_FLOATERS = ((40, 45, 2.0), (55, 50, 1.5), (48, 55, 1.8), (35, 48, 1.3))


def flash_strength(clock: PhaseClock, rate: float, phase: float, threshold: float, gain: float) -> float:
    """Photopsia flash: the top of a sinusoid above `threshold`, rescaled."""
    wave = (clock.sin(rate, phase) + 1) / 2
    return (wave - threshold) * gain if wave > threshold else 0.0


def generate_sugar_retinal_detachment(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """Peripheral photopsia flashes over a cluster of dark floaters."""
    clock = PhaseClock.from_ms(time_ms)
    t = clock.seconds
    level = intensity
    top_first: List[OverlayLayer] = []

    flashes = [flash_strength(clock, rate, ph, thr, gain) for rate, ph, thr, gain, *_ in DETACHMENT_FLASHES]
    positions = [
        (xb + math.sin(t * xr + xp) * xa, yb + math.cos(t * yr + yp) * ya)
        for _, _, _, _, (xb, xa, xr, xp), (yb, ya, yr, yp), _ in DETACHMENT_FLASHES
    ]

    if flashes[0] > 0:
        a = flashes[0] * level * DETACHMENT_FLASHES[0][6]
        top_first.append(radial("flash_1", positions[0], (15, 4), [
            (0, WHITE, a), (30, (220, 235, 255), a * 0.7), (60, (180, 210, 255), a * 0.4), clear(100),
        ]))
        top_first.append(radial("flash_1_glow", positions[0], (20, 8), [
            (0, (200, 220, 255), a * 0.3), clear(70),
        ]))
    if flashes[1] > 0:
        a = flashes[1] * level * DETACHMENT_FLASHES[1][6]
        top_first.append(radial("flash_2", positions[1], (12, 5), [
            (0, WHITE, a), (40, (230, 240, 255), a * 0.6), clear(100),
        ]))
    if flashes[2] > 0:
        a = flashes[2] * level * DETACHMENT_FLASHES[2][6]
        top_first.append(radial("flash_3", positions[2], (8, 3), [
            (0, WHITE, a), (50, (200, 225, 255), a * 0.5), clear(100),
        ]))

    drift_x = clock.sin(0.15) * 2
    drift_y = clock.cos(0.12) * 1.5
    for i, (bx, by, size) in enumerate(DETACHMENT_FLOATERS):
        x = bx + drift_x + math.sin(t * 0.1 + i * 1.5) * 3
        y = by + drift_y + math.cos(t * 0.08 + i * 1.2) * 2.5
        top_first.append(circle(f"floater_{i}", (x, y), [
            (0, (50, 50, 55), level * 0.4), (size, (60, 60, 65), level * 0.25), clear(size * 2.5),
        ]))

    top_first.append(radial("strand", (45 + clock.sin(0.08) * 4, 48 + clock.cos(0.06) * 3), (10, 2), [
        (0, (55, 55, 60), level * 0.35), (50, (65, 65, 70), level * 0.20), clear(100),
    ]))
    shimmer = 0.95 + clock.sin(0.5) * 0.05
    top_first.append(radial("haze", (50, 50), (100, 100), [(0, (180, 180, 185), level * 0.06 * shimmer), clear(70)]))

    return OverlayFrame(
        condition_id=condition_id,
        layers=top_first[::-1],
        blend_mode=BlendMode.SCREEN,
        z_index=9999,
        opacity=min(0.95, 0.6 + level * 0.35),
    )


# (x, y, opacity weight, size)
KERATOCONUS_GHOSTS = ((48, 52, 0.18, 96), (46, 54, 0.12, 92), (44, 56, 0.07, 88), (52, 48, 0.05, 94))
# (x, y, size, tail length)
KERATOCONUS_LIGHTS = ((50, 25, 12, 18), (25, 20, 10, 14), (75, 22, 10, 14), (35, 35, 8, 12), (65, 38, 8, 12))


def generate_stephen_keratoconus(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """Monocular polyopia: offset ghosts, comet-tailed lights, wavy distortion bands."""
    clock = PhaseClock.from_ms(time_ms)
    t = clock.seconds
    level = intensity
    top_first: List[OverlayLayer] = []

    ghost_dx = clock.sin(0.2) * 1.5
    ghost_dy = clock.cos(0.15) * 1.2
    for i, (bx, by, weight, size) in enumerate(KERATOCONUS_GHOSTS):
        a = level * weight
        top_first.append(radial(
            f"ghost_{i}",
            (bx + ghost_dx * (1 + i * 0.15), by + ghost_dy * (1 + i * 0.12)),
            (size, size),
            [(0, (165, 165, 170), a), (35, (155, 155, 160), a * 0.7), (65, (145, 145, 150), a * 0.4), clear(90)],
        ))

    streak = 0.9 + clock.sin(0.3) * 0.1
    top_first.append(linear("streak", 160, [
        clear(0),
        (35, (150, 150, 155), level * 0.06 * streak),
        (50, (150, 150, 155), level * 0.10 * streak),
        (65, (150, 150, 155), level * 0.06 * streak),
        clear(100),
    ]))

    for i, (bx, by, size, tail) in enumerate(KERATOCONUS_LIGHTS):
        x = bx + math.sin(t * 0.12 + i * 1.2) * 4
        y = by + math.cos(t * 0.10 + i * 0.9) * 3
        a = level * 0.22 * (0.7 + math.sin(t * 0.4 + i * 1.5) * 0.3)
        top_first.append(radial(f"light_{i}", (x, y), (size, size * 0.8), [
            (0, (255, 255, 252), a), (35, (255, 255, 248), a * 0.65), (65, (255, 250, 245), a * 0.35), clear(100),
        ]))
        top_first.append(radial(f"light_{i}_tail", (x - tail * 0.25, y + tail * 0.8), (size * 0.5, tail * 0.9), [
            (0, (255, 255, 250), a * 0.55), (35, (255, 250, 248), a * 0.35), (65, (250, 248, 245), a * 0.18), clear(100),
        ]))

    wave = (0.8 + (clock.sin(0.25) * 0.5 + 0.5) * 0.4) * level * 0.08
    y1 = 25 + clock.sin(0.2) * 5
    y2 = 50 + clock.sin(0.18, 1) * 4
    y3 = 75 + clock.sin(0.22, 2) * 5
    top_first.extend([
        linear("wave_1", 0, [
            clear(y1 - 4), (y1 - 1, (140, 140, 145), wave), (y1, (130, 130, 135), wave * 1.3),
            (y1 + 1, (140, 140, 145), wave), clear(y1 + 4),
        ]),
        linear("wave_2", 0, [clear(y2 - 3), (y2, (135, 135, 140), wave * 0.9), clear(y2 + 3)]),
        linear("wave_3", 0, [clear(y3 - 4), (y3, (140, 140, 145), wave * 0.85), clear(y3 + 4)]),
    ])

    asym = level * (0.85 + clock.sin(0.35) * 0.15)
    top_first.append(linear("asymmetry", 90, [
        (0, (125, 125, 130), asym * 0.12), (18, (135, 135, 140), asym * 0.08),
        (35, (145, 145, 150), asym * 0.04), clear(55),
    ]))
    haze = level * (0.9 + clock.sin(0.4) * 0.1)
    top_first.append(radial("haze", (50, 50), (150, 150), [
        (0, (205, 205, 210), haze * 0.10), (40, (200, 200, 205), haze * 0.08),
        (70, (195, 195, 200), haze * 0.05), clear(100),
    ]))

    return OverlayFrame(
        condition_id=condition_id,
        layers=top_first[::-1],
        blend_mode=BlendMode.SCREEN,
        z_index=9999,
        opacity=min(0.85, 0.55 + level * 0.3),
    )
