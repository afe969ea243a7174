"""
Visual disturbance generators: migraine aura, entoptic sprites,
afterimage persistence, light-source starbursts and floaters.
"""

from __future__ import annotations

import math
from typing import Dict, List

from src.core.contracts import BlendMode, OverlayFrame, OverlayLayer
from src.timing.phase_clock import PhaseClock
from src.overlays.layers import WHITE, BLACK, clear, radial, circle, linear, conic


# ============================================================
# MIGRAINE AURA
# ============================================================

AURA_CENTERS = {
    "visualAura": (55.0, 45.0),
    "visualAuraLeft": (35.0, 45.0),
    "visualAuraRight": (65.0, 45.0),
}

# Aura scintillation runs on a ms/60 time base
AURA_TIME_SCALE = 60.0


def generate_visual_aura(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """Scintillating scotoma with heat-wave edges and prismatic rings."""
    clock = PhaseClock.from_ms(time_ms, AURA_TIME_SCALE)
    level = intensity

    shimmer = clock.sin(0.15) * 0.5 + 0.5
    sc1 = clock.sin(0.5) * 0.5 + 0.5
    sc2 = clock.sin(0.75, 1.2) * 0.5 + 0.5
    sc3 = clock.sin(0.35, 2.1) * 0.5 + 0.5

    hw1 = clock.sin(0.6) * 4
    hw2 = clock.sin(0.45, 1.5) * 3
    hw3 = clock.sin(0.8, 0.8) * 2.5
    hw4 = clock.cos(0.55, 2.2) * 3.5

    base_x, base_y = AURA_CENTERS.get(condition_id, AURA_CENTERS["visualAura"])
    base_w = 55 + level * 25
    base_h = 65 + level * 20
    blob_w = base_w + hw1 + hw3 * 0.5
    blob_h = base_h + hw2 + hw4 * 0.5

    cx = base_x + clock.sin(0.075) * 2 + hw1 * 0.3
    cy = base_y + clock.cos(0.06) * 1.5 + hw2 * 0.25

    a = (0.75 + shimmer * 0.1) * level
    rainbow = (0.4 + sc1 * 0.2 + sc2 * 0.15) * level

    main_scotoma = radial("main_scotoma", (cx, cy), (blob_w, blob_h), [
        (0, (235, 235, 240), a),
        (15, (230, 230, 235), a * 0.95),
        (30, (225, 225, 230), a * 0.9),
        (45, (220, 220, 228), a * 0.8),
        (60, (215, 218, 225), a * 0.6),
        (75, (210, 215, 225), a * 0.35),
        clear(92),
    ])
    tertiary = radial(
        "tertiary_scotoma",
        (cx - 5 + hw4 * 0.35, cy + 15 + hw1 * 0.25),
        (base_w * 0.5 + hw3 * 0.5, base_h * 0.5 + hw2 * 0.35),
        [(0, (235, 235, 242), a * 0.6), (50, (228, 230, 240), a * 0.35), clear(100)],
    )
    secondary = radial(
        "secondary_scotoma",
        (cx + 8 + hw3 * 0.4, cy - 12 + hw4 * 0.3),
        (base_w * 0.7 + hw2 * 0.6, base_h * 0.6 + hw1 * 0.4),
        [(0, (240, 240, 245), a * 0.7), (40, (230, 230, 238), a * 0.5),
         (70, (220, 225, 235), a * 0.25), clear(100)],
    )
    heat_edge_2 = radial(
        "heat_edge_2",
        (cx - hw2 * 0.15, cy + hw3 * 0.2),
        (blob_w - 2 + hw3 * 0.7, blob_h + 4 + hw1 * 0.5),
        [clear(72), (85, (228, 230, 242), a * 0.25), (93, (222, 225, 235), a * 0.1), clear(100)],
    )
    heat_edge_1 = radial(
        "heat_edge_1",
        (cx + hw1 * 0.2, cy + hw4 * 0.15),
        (blob_w + 3 + hw2 * 0.8, blob_h - 2 + hw3 * 0.6),
        [clear(70), (82, (230, 232, 240), a * 0.3), (90, (225, 228, 238), a * 0.15), clear(100)],
    )
    rainbow_outer = radial(
        "rainbow_outer",
        (cx + 5 + hw1 * 0.2, cy + hw3 * 0.15),
        (blob_w + 12 + hw2 * 0.8, blob_h + 10 + hw4 * 0.6),
        [
            clear(60),
            (72, (0, 255, 255), rainbow * (0.3 + sc3 * 0.15)),
            (78, (100, 255, 200), rainbow * (0.35 + sc1 * 0.1)),
            (83, (150, 255, 100), rainbow * (0.3 + sc2 * 0.1)),
            (87, (255, 255, 100), rainbow * 0.25),
            (91, (255, 200, 150), rainbow * 0.2),
            clear(98),
        ],
    )
    rainbow_magenta = radial(
        "rainbow_magenta",
        (cx - 10 + hw4 * 0.3, cy + 20 + hw2 * 0.25),
        (base_w * 0.6 + hw1 * 0.5, base_h * 0.5 + hw3 * 0.4),
        [clear(50), (70, (255, 100, 200), rainbow * (0.25 + sc2 * 0.1)),
         (85, (200, 150, 255), rainbow * 0.2), clear(100)],
    )
    rainbow_inner = radial(
        "rainbow_inner",
        (cx + 15 + hw2 * 0.25, cy - 8 + hw4 * 0.2),
        (base_w * 0.8 + hw3 * 0.7, base_h * 0.7 + hw1 * 0.5),
        [clear(55), (70, (0, 220, 255), rainbow * (0.4 + sc1 * 0.2)),
         (80, (0, 255, 200), rainbow * (0.35 + sc3 * 0.15)),
         (88, (100, 255, 150), rainbow * 0.25), clear(95)],
    )
    glow_2 = circle(
        "glow_spot_2",
        (cx + 10 + clock.sin(0.55, 1) * 2 + hw2 * 0.35, cy - 15 + clock.cos(0.45, 0.5) * 2 + hw4 * 0.25),
        [(0, (255, 255, 240), (0.4 + sc3 * 0.35) * level), (25, (150, 255, 200), (0.25 + sc1 * 0.15) * level), clear(50)],
    )
    glow_1 = circle(
        "glow_spot_1",
        (cx + 18 + clock.sin(0.4) * 3 + hw1 * 0.4, cy - 5 + clock.cos(0.3) * 2 + hw3 * 0.3),
        [(0, WHITE, (0.5 + sc1 * 0.4) * level), (20, (200, 255, 255), (0.3 + sc2 * 0.2) * level), clear(45)],
    )

    return OverlayFrame(
        condition_id=condition_id,
        layers=[
            main_scotoma, tertiary, secondary, heat_edge_2, heat_edge_1,
            rainbow_outer, rainbow_magenta, rainbow_inner, glow_2, glow_1,
        ],
        blend_mode=BlendMode.NORMAL,
        z_index=9999,
        opacity=min(0.95, 0.7 + level * 0.25),
        blur_px=2 + level * 3,
    )


# ============================================================
# BLUE FIELD ENTOPTIC PHENOMENON
# ============================================================

def generate_blue_field(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """Bright leukocyte sprites darting along short curved paths."""
    t = time_ms / 1000.0
    level = intensity
    top_first: List[OverlayLayer] = []

    for i in range(int(10 + level * 10)):
        path_seed = math.sin(i * 7.31) * 10000
        phase = ((t * 1.5 + i * 0.3) % 1.2) / 1.2

        base_x = 50 + math.sin(path_seed * 1.1) * 30
        base_y = 50 + math.cos(path_seed * 1.3) * 30
        path_length = 15 + abs(math.sin(path_seed * 1.7)) * 15
        path_angle = math.radians(math.sin(path_seed * 2.1) * 360)

        wobble = math.sin(phase * math.pi * 4 + path_seed) * 4
        x = base_x + math.cos(path_angle) * path_length * phase + wobble
        y = base_y + math.sin(path_angle) * path_length * phase + math.cos(phase * math.pi * 3) * 3

        fade = min(min(1.0, phase * 8), min(1.0, (1 - phase) * 8))
        alpha = fade * (0.7 + level * 0.3)
        size = 6 + level * 4

        sprite = circle(f"sprite_{i}", (x, y), [
            (0, WHITE, alpha),
            (30, WHITE, alpha * 0.7),
            (60, (220, 240, 255), alpha * 0.4),
            clear(100),
        ], radius_px=size)

        top_first.append(sprite)
        if i % 2 == 0 and phase > 0.15:
            top_first.append(circle(
                f"sprite_{i}_tail",
                (x - math.cos(path_angle) * 4, y - math.sin(path_angle) * 4),
                [(0, (80, 40, 40), alpha * 0.5), clear(100)],
                radius_px=size * 0.5,
            ))

    return OverlayFrame(condition_id=condition_id, layers=top_first[::-1], z_index=9999)


# ============================================================
# PALINOPSIA
# ============================================================

def generate_palinopsia(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """Trailing ghost copies, a motion streak and lingering afterimages."""
    clock = PhaseClock.from_ms(time_ms)
    t = clock.seconds
    level = intensity

    trail_phase = clock.sin(0.4) * 0.1 + 0.9
    drift = clock.sin(0.2) * 2
    trail_angle = (t * 0.1) % (math.pi * 2)
    base_distance = 3 + level * 8

    top_first: List[OverlayLayer] = []
    for i in range(1, int(3 + level * 5) + 1):
        distance = base_distance * i * 0.4
        ox = math.cos(trail_angle) * distance + drift * 0.3
        oy = math.sin(trail_angle) * distance
        a = (0.25 - i * 0.03) * level * trail_phase
        top_first.append(radial(f"trail_{i}", (50 + ox, 50 + oy), (100, 100), [
            (0, (200, 200, 200), a),
            (30, (180, 180, 180), a * 0.7),
            (60, (150, 150, 150), a * 0.4),
            clear(85),
        ]))

    streak = 0.15 * level * trail_phase
    top_first.append(linear("streak", math.degrees(trail_angle), [
        clear(0),
        (20, WHITE, streak),
        (40, WHITE, streak * 1.2),
        (60, WHITE, streak * 0.8),
        (80, WHITE, streak * 0.4),
        clear(100),
    ]))

    for i in range(int(2 + level * 4)):
        seed = i * 5.17
        x = 20 + (math.sin(seed * 1.3) * 0.5 + 0.5) * 60 + math.sin(t * 0.15 + seed) * 3
        y = 20 + (math.cos(seed * 1.1) * 0.5 + 0.5) * 60 + math.cos(t * 0.12 + seed * 0.8) * 3
        size = 10 + (i % 4) * 5
        a = (0.12 + (i % 3) * 0.05) * level * trail_phase
        top_first.append(radial(f"afterimage_{i}", (x, y), (size, size * 0.8), [
            (0, WHITE, a),
            (40, (240, 240, 240), a * 0.6),
            clear(100),
        ]))

    top_first.append(radial("haze", (50, 50), (100, 100), [(0, WHITE, 0.05 * level * trail_phase), clear(70)]))

    return OverlayFrame(
        condition_id=condition_id,
        layers=top_first[::-1],
        blend_mode=BlendMode.SCREEN,
        z_index=9999,
        opacity=min(0.9, 0.5 + level * 0.4),
    )


# ============================================================
# PERSISTENT POSITIVE VISUAL PHENOMENON
# ============================================================

# (rgb, alpha weight) cycled per spot index
PPVP_PALETTE = (
    ((0, 255, 255), 1.0),
    ((255, 0, 255), 0.9),
    ((255, 255, 0), 0.85),
    ((255, 255, 255), 1.0),
    ((150, 200, 255), 0.9),
    ((180, 255, 180), 0.85),
)


def generate_persistent_positive(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """Complementary-colored afterimage spots that outlast their stimulus."""
    clock = PhaseClock.from_ms(time_ms)
    t = clock.seconds
    level = intensity

    pulse = clock.sin(0.3) * 0.15 + 0.85
    slow_pulse = clock.sin(0.15) * 0.1 + 0.9

    top_first: List[OverlayLayer] = []
    for i in range(int(5 + level * 8)):
        seed = i * 3.17
        x = 15 + (math.sin(seed * 1.1) * 0.5 + 0.5) * 70 + math.sin(t * 0.2 + seed) * 2
        y = 15 + (math.cos(seed * 1.3) * 0.5 + 0.5) * 70 + math.cos(t * 0.15 + seed * 1.2) * 2
        size = 8 + (i % 5) * 6
        base = (0.3 + (i % 4) * 0.1) * level * pulse
        color, weight = PPVP_PALETTE[i % 6]
        top_first.append(radial(f"spot_{i}", (x, y), (size, size * 0.8), [
            (0, color, base * weight),
            (40, color, base * 0.5),
            clear(100),
        ]))

    for i in range(int(2 + level * 3)):
        seed = i * 7.23 + 100
        x = 20 + (math.sin(seed * 0.9) * 0.5 + 0.5) * 60 + math.sin(t * 0.1 + seed) * 3
        y = 20 + (math.cos(seed * 1.1) * 0.5 + 0.5) * 60 + math.cos(t * 0.08 + seed) * 3
        a = (0.15 + (i % 3) * 0.08) * level * slow_pulse
        top_first.append(radial(f"ghost_{i}", (x, y), (15 + (i % 3) * 8, 12 + (i % 4) * 6), [
            (0, WHITE, a),
            (30, (240, 245, 255), a * 0.6),
            (60, (220, 235, 255), a * 0.3),
            clear(100),
        ]))

    pattern = 0.12 * level * pulse
    top_first.extend([
        circle("pattern_warm", (30, 40), [(0, (255, 200, 100), pattern), clear(15)]),
        circle("pattern_cool", (70, 35), [(0, (100, 200, 255), pattern * 0.9), clear(12)]),
        circle("pattern_pink", (55, 65), [(0, (255, 150, 200), pattern * 0.85), clear(18)]),
        radial("haze", (50, 50), (100, 100), [(0, WHITE, 0.08 * level * slow_pulse), clear(70)]),
    ])

    return OverlayFrame(
        condition_id=condition_id,
        layers=top_first[::-1],
        blend_mode=BlendMode.SCREEN,
        z_index=9999,
        opacity=min(0.95, 0.6 + level * 0.35),
    )


# ============================================================
# STARBURSTING
# ============================================================

# (x, y, size weight, phase offset)
LIGHT_SOURCES = (
    (15, 8, 0.5, 0.0), (35, 12, 0.7, 1.2), (50, 6, 0.9, 0.5), (65, 10, 0.75, 1.8),
    (85, 8, 0.55, 2.5), (10, 25, 0.5, 0.8), (30, 22, 0.6, 2.1), (50, 28, 0.65, 1.5),
    (70, 24, 0.55, 0.3), (90, 26, 0.5, 2.8), (20, 42, 0.45, 1.0), (40, 38, 0.5, 2.3),
    (60, 45, 0.55, 0.7), (80, 40, 0.5, 1.9), (25, 60, 0.4, 1.6), (50, 58, 0.45, 2.6),
    (75, 62, 0.4, 0.4),
)
STARBURST_RAYS = 8
STARBURST_MIN_OPACITY = 0.1


def generate_starbursting(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """Eight-ray starbursts around drifting point lights."""
    t = time_ms / 1000.0
    level = intensity
    ray_width = 0.8 + level * 0.7
    step = 360.0 / STARBURST_RAYS

    top_first: List[OverlayLayer] = []
    for index, (bx, by, size, phase) in enumerate(LIGHT_SOURCES):
        x = bx + math.sin(t * 0.15 + phase) * 8
        y = by + math.cos(t * 0.12 + phase * 1.3) * 6
        pulse = math.sin(t * 0.4 + phase * 2) * 0.3 + 0.7
        base = (0.35 + level * 0.45) * size * pulse
        if base < STARBURST_MIN_OPACITY:
            continue

        ray_length = (20 + level * 35) * size
        rays = []
        for r in range(STARBURST_RAYS):
            angle = r * step
            rays.extend([
                clear(angle - ray_width),
                (angle - ray_width * 0.5, WHITE, base * 0.4),
                (angle, WHITE, base),
                (angle + ray_width * 0.5, WHITE, base * 0.4),
                clear(angle + ray_width),
            ])
        thin = ray_width * 0.35
        secondary = []
        for r in range(STARBURST_RAYS):
            angle = r * step + step / 2
            secondary.extend([clear(angle - thin), (angle, WHITE, base * 0.25), clear(angle + thin)])

        core = 2 + level * 3
        top_first.extend([
            conic(f"source_{index}_rays", (x, y), 22.5, rays),
            radial(f"source_{index}_falloff", (x, y), (ray_length * 1.2, ray_length), [
                clear(0), clear(3),
                (15, BLACK, 0.3), (40, BLACK, 0.7), (70, BLACK, 0.95), (100, BLACK, 1.0),
            ]),
            circle(f"source_{index}_core", (x, y), [
                (0, WHITE, min(1.0, base * 1.4)),
                (core * 0.4, (255, 255, 240), base * 0.9),
                (core * 0.7, (255, 255, 220), base * 0.5),
                clear(core * 1.5),
            ]),
            conic(f"source_{index}_thin_rays", (x, y), 22.5, secondary),
        ])

    return OverlayFrame(
        condition_id=condition_id,
        layers=top_first[::-1],
        blend_mode=BlendMode.SCREEN,
        z_index=9999,
        opacity=min(0.95, 0.5 + level * 0.45),
    )


# ============================================================
# VITREOUS FLOATERS
# ============================================================

# (x base, x terms, y base, y terms, size px, opacity weight)
# x terms: ((amplitude, rate, phase), ...) summed as sin; y terms as cos
FLOATER_TABLES = {
    "mild": (
        (35, ((15, 0.1, 0), (8, 0.05, 0)), 35, ((12, 0.08, 0),), 20, 0.7),
    ),
    "moderate": (
        (30, ((20, 0.12, 0), (10, 0.06, 0)), 35, ((15, 0.1, 0),), 25, 0.8),
        (60, ((18, 0.15, 1.5),), 50, ((20, 0.12, 2),), 15, 0.9),
        (50, ((12, 0.08, 3),), 25, ((8, 0.1, 1),), 18, 0.6),
    ),
    "severe": (
        (25, ((22, 0.1, 0), (12, 0.05, 0)), 30, ((18, 0.08, 0),), 30, 0.85),
        (70, ((20, 0.12, 2),), 35, ((15, 0.1, 1.5),), 25, 0.8),
        (45, ((25, 0.15, 1),), 50, ((20, 0.12, 2.5),), 20, 0.9),
        (80, ((15, 0.18, 3),), 70, ((12, 0.14, 1.8),), 12, 0.95),
        (50, ((15, 0.08, 4),), 25, ((10, 0.1, 2.2),), 22, 0.7),
        (40, ((18, 0.06, 1.2),), 60, ((12, 0.08, 2.8),), 35, 0.4),
    ),
}


def floater_severity(intensity: float) -> str:
    if intensity < 0.3:
        return "mild"
    if intensity < 0.7:
        return "moderate"
    return "severe"


def generate_floaters(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """Drifting vitreous floaters; count and size step with severity."""
    t = time_ms / 1000.0 * params.get("animation_speed", 1.0)
    layers = []
    for i, (x0, x_terms, y0, y_terms, size, weight) in enumerate(FLOATER_TABLES[floater_severity(intensity)]):
        x = x0 + sum(amp * math.sin(t * rate + ph) for amp, rate, ph in x_terms)
        y = y0 + sum(amp * math.cos(t * rate + ph) for amp, rate, ph in y_terms)
        a = weight * intensity
        layers.append(circle(f"floater_{i}", (x, y), [
            (0, (40, 40, 45), a * 0.6),
            (45, (60, 60, 65), a * 0.35),
            clear(100),
        ], radius_px=size))

    return OverlayFrame(condition_id=condition_id, layers=layers, z_index=9999)
