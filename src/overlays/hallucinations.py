"""
Charles Bonnet Syndrome hallucination episodes.

Episodes last 10-15 s and fade in/out over the first and last fifth of
their span. Each episode seed picks a handful of simple (geometric) and
complex (formed) patterns through a seeded shuffle, so the same timestamp
always shows the same hallucinations.

Pattern builders return their layers top first; the generator reverses
the whole stack once at the end.
"""

from __future__ import annotations

import colorsys
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from src.core.contracts import BlendMode, OverlayFrame, OverlayLayer, RGB
from src.timing.phase_clock import seeded_random
from src.overlays.layers import WHITE, clear, radial, ellipse_px, circle, conic


# ============================================================
# EPISODES
# ============================================================

EPISODE_BASE_MS = 10000.0
EPISODE_VARIATION_MS = 5000.0
EPISODE_FADE_SLOPE = 5.0
EPISODE_START_SKIP = 0.1

SIMPLE_PATTERNS = (
    "honeycomb", "spiral", "tessellation", "concentricCircles",
    "zigzag", "grid", "photopsia", "sparkles",
)
COMPLEX_PATTERNS = (
    "humanSilhouette", "face", "flower", "cat", "building", "bird", "shadowBlob",
)


@dataclass(frozen=True)
class EpisodeTiming:
    seed: int
    opacity: float
    progress: float
    duration_ms: float


@dataclass
class EpisodeConfig:
    """Patterns shown during one episode and whether each is coloured."""
    simple: List[str] = field(default_factory=list)
    complex: List[str] = field(default_factory=list)
    colored: Dict[str, bool] = field(default_factory=dict)


def episode_duration(intensity: float) -> float:
    return EPISODE_BASE_MS + seeded_random(math.floor(intensity * 1000)) * EPISODE_VARIATION_MS


def episode_timing(time_ms: float, intensity: float, start_ms: Optional[float] = None) -> EpisodeTiming:
    """
    Locate `time_ms` inside the episode sequence.

    Args:
        time_ms: Host timestamp
        intensity: Severity in [0, 1]; also seeds the episode length
        start_ms: When the effect was switched on. Timing is then relative
            to it and skips the opening fade so patterns show at once

    Returns:
        EpisodeTiming with the episode seed, fade opacity and progress
    """
    duration = episode_duration(intensity)
    elapsed = time_ms
    if start_ms is not None:
        elapsed = time_ms - start_ms + duration * EPISODE_START_SKIP

    seed = math.floor(elapsed / duration)
    progress = (elapsed % duration) / duration
    fade_in = min(1.0, progress * EPISODE_FADE_SLOPE)
    fade_out = min(1.0, (1.0 - progress) * EPISODE_FADE_SLOPE)
    return EpisodeTiming(seed=seed, opacity=min(fade_in, fade_out), progress=progress, duration_ms=duration)


def select_episode(seed: int, intensity: float) -> EpisodeConfig:
    """1-3 simple and 0-2 complex patterns, more at higher intensity."""
    num_simple = math.floor(1 + intensity * 2.5)
    num_complex = math.floor(intensity * 2)
    config = EpisodeConfig()

    simple = sorted(SIMPLE_PATTERNS, key=lambda p: seeded_random(seed + SIMPLE_PATTERNS.index(p)))
    for i, name in enumerate(simple[:num_simple]):
        config.simple.append(name)
        config.colored[name] = seeded_random(seed * 10 + i) > 0.6

    complex_ = sorted(COMPLEX_PATTERNS, key=lambda p: seeded_random(seed * 2 + COMPLEX_PATTERNS.index(p)))
    for i, name in enumerate(complex_[:num_complex]):
        config.complex.append(name)
        config.colored[name] = seeded_random(seed * 20 + i) > 0.7

    return config


def hsl(hue: float, saturation: float, lightness: float) -> RGB:
    """HSL to RGB with hue in degrees and s/l in percent."""
    r, g, b = colorsys.hls_to_rgb((hue % 360) / 360.0, lightness / 100.0, saturation / 100.0)
    return (int(round(r * 255)), int(round(g * 255)), int(round(b * 255)))


# ============================================================
# SIMPLE PATTERNS
# ============================================================

def honeycomb(opacity: float, colored: bool, offset_x: float = 0.0, offset_y: float = 0.0) -> List[OverlayLayer]:
    color = (180, 150, 80) if colored else (80, 80, 90)
    back = (100, 80, 40) if colored else (60, 60, 70)
    entries = []
    for k in range(3):
        start = k * 120.0
        entries.extend([
            (start, color, opacity), (start + 60, color, opacity),
            (start + 60, back, opacity * 0.3), (start + 120, back, opacity * 0.3),
        ])
    # drift is a few pixels; expressed here as a tenth of a percent per pixel
    return [conic("honeycomb", (50 + offset_x * 0.1, 50 + offset_y * 0.1), 0.0, entries)]


def spiral(opacity: float, colored: bool, rotation: float = 0.0) -> List[OverlayLayer]:
    layers = []
    for i in range(6):
        hue = (i * 60) % 360 if colored else 0
        color = hsl(hue, 50 if colored else 0, 50 if colored else 40 + (i % 3) * 10)
        layers.append(conic(f"spiral_arm_{i}", (50, 50), i * 60.0 + rotation, [
            (0, color, opacity * 0.4), clear(30), clear(60),
        ]))
    return layers


def tessellation(opacity: float, colored: bool, seed: float) -> List[OverlayLayer]:
    layers = []
    for i in range(8):
        x = 10 + seeded_random(seed + i * 17) * 80
        y = 10 + seeded_random(seed + i * 23) * 80
        size = (15 + seeded_random(seed + i * 31) * 25, 10 + seeded_random(seed + i * 37) * 20)
        if colored:
            hue = 260 + seeded_random(seed + i) * 40 if i % 2 == 0 else 180 + seeded_random(seed + i * 2) * 40
            color = hsl(hue, 40, 50)
        else:
            color = hsl(0, 0, 45 + (i % 3) * 8)
        layers.append(radial(f"tessellation_{i}", (x, y), size, [
            (0, color, opacity * 0.35), (50, color, opacity * 0.15), clear(100),
        ]))
    return layers


def concentric_circles(opacity: float, colored: bool, pulse: float = 0.0) -> List[OverlayLayer]:
    layers = []
    for i in range(5):
        r = 8 + i * 12 + pulse * 3
        color = hsl((i * 45 + 200) % 360, 40, 55) if colored else hsl(0, 0, 50)
        layers.append(circle(f"concentric_ring_{i}", (50, 50), [
            clear(r - 2), (r, color, opacity * 0.35), (r + 1.5, color, opacity * 0.35), clear(r + 3),
        ]))
    return layers


def zigzag(opacity: float, colored: bool, seed: float) -> List[OverlayLayer]:
    layers = []
    for i in range(6):
        x = 10 + i * 15 + seeded_random(seed + i * 7) * 8
        y = 20 + seeded_random(seed + i * 11) * 60
        sx = 18 + seeded_random(seed + i * 13) * 15
        sy = 8 + seeded_random(seed + i * 17) * 10
        hue = 40 + seeded_random(seed + i) * 30 if colored else 0
        sat = 60 if colored else 0
        light = 65 if colored else 55
        layers.append(radial(f"zigzag_{i}", (x, y), (sx, sy), [
            (0, hsl(hue, sat, light), opacity * 0.45), (60, hsl(hue, sat, light), opacity * 0.2), clear(100),
        ]))
        ox = x + 5 + seeded_random(seed + i * 19) * 10
        oy = y + 15 + seeded_random(seed + i * 23) * 15
        layers.append(radial(f"zigzag_echo_{i}", (ox, oy), (sx * 0.7, sy * 0.8), [
            (0, hsl(hue, sat, light + 5), opacity * 0.3), (70, hsl(hue, sat, light), opacity * 0.1), clear(100),
        ]))
    return layers


def lattice(opacity: float, colored: bool, seed: float, size: int = 4) -> List[OverlayLayer]:
    layers = []
    for row in range(size):
        for col in range(size):
            idx = row * size + col
            x = 12 + col * 22 + (seeded_random(seed + idx * 7) - 0.5) * 10
            y = 12 + row * 22 + (seeded_random(seed + idx * 11) - 0.5) * 10
            r = 8 + seeded_random(seed + idx * 13) * 8
            color = hsl(30 + seeded_random(seed + idx) * 20, 35, 45) if colored else hsl(0, 0, 50)
            layers.append(radial(f"lattice_node_{idx}", (x, y), (r, r), [
                (0, color, opacity * 0.4), (60, color, opacity * 0.15), clear(100),
            ]))
            if col < size - 1:
                cx = x + 11 + seeded_random(seed + idx * 17) * 4
                cy = y + (seeded_random(seed + idx * 19) - 0.5) * 6
                layers.append(radial(f"lattice_link_h_{idx}", (cx, cy), (12, 4), [
                    (0, color, opacity * 0.25), clear(100),
                ]))
            if row < size - 1:
                cx = x + (seeded_random(seed + idx * 23) - 0.5) * 6
                cy = y + 11 + seeded_random(seed + idx * 29) * 4
                layers.append(radial(f"lattice_link_v_{idx}", (cx, cy), (4, 12), [
                    (0, color, opacity * 0.25), clear(100),
                ]))
    return layers


PHOTOPSIA_HUES = (0, 60, 120, 240)


def photopsia(opacity: float, colored: bool, seed: float, count: int = 5) -> List[OverlayLayer]:
    layers = []
    for i in range(count):
        x = 15 + seeded_random(seed + i * 7) * 70
        y = 15 + seeded_random(seed + i * 11) * 70
        r = 6 + seeded_random(seed + i * 13) * 12
        if colored and i % 2 == 0:
            hue = PHOTOPSIA_HUES[math.floor(seeded_random(seed + i) * 4)]
            entries = [(0, hsl(hue, 70, 70), opacity * 0.6), (50, hsl(hue, 60, 60), opacity * 0.3), clear(100)]
        else:
            entries = [
                (0, WHITE, opacity * 0.7), (40, (255, 255, 220), opacity * 0.4),
                (70, (255, 240, 200), opacity * 0.2), clear(100),
            ]
        layers.append(circle(f"photopsia_{i}", (x, y), entries, radius_px=r))
    return layers


def sparkles(opacity: float, colored: bool, seed: float, phase: float = 0.0) -> List[OverlayLayer]:
    """Brief twinkling points; roughly a third are hidden at any phase."""
    layers = []
    count = 12 + math.floor(seeded_random(seed) * 8)
    for i in range(count):
        visibility = math.sin(phase * 1.8 + seeded_random(seed + i * 31) * 10)
        if visibility <= -0.3:
            continue
        x = seeded_random(seed + i * 17.3 + phase * 0.06) * 100
        y = seeded_random(seed + i * 23.7 + phase * 0.09) * 100
        r = (2 + seeded_random(seed + i * 41) * 6) * (0.8 + abs(visibility) * 0.4)
        a = opacity * (0.4 + abs(visibility) * 0.6)
        if colored and seeded_random(seed + i * 53) > 0.6:
            hue = seeded_random(seed + i * 61) * 360
            entries = [(0, hsl(hue, 80, 90), a), (30, hsl(hue, 70, 80), a * 0.5), clear(100)]
        else:
            entries = [
                (0, WHITE, a), (25, (255, 255, 240), a * 0.6), (50, (255, 250, 220), a * 0.3), clear(100),
            ]
        layers.append(circle(f"sparkle_{i}", (x, y), entries, radius_px=r))
    return layers


# ============================================================
# COMPLEX PATTERNS
# ============================================================

def blob(name: str, center: Tuple[float, float], radii: Tuple[float, float], color: RGB,
         inner: float, outer: float, outer_at: float) -> OverlayLayer:
    return ellipse_px(name, center, radii, [(0, color, inner), (outer_at, color, outer), clear(100)])


def human_silhouette(opacity: float, colored: bool, x: float, y: float, scale: float) -> List[OverlayLayer]:
    c = (80, 60, 50) if colored else (55, 50, 60)
    s = scale
    return [
        blob("figure_head", (x, y - 20 * s), (18 * s, 22 * s), c, opacity, opacity * 0.5, 70),
        blob("figure_neck", (x, y - 8 * s), (6 * s, 8 * s), c, opacity * 0.8, opacity * 0.3, 80),
        blob("figure_shoulders", (x, y), (35 * s, 12 * s), c, opacity * 0.9, opacity * 0.4, 70),
        blob("figure_torso", (x, y + 18 * s), (25 * s, 40 * s), c, opacity * 0.85, opacity * 0.35, 70),
        blob("figure_left_leg", (x - 8 * s, y + 58 * s), (10 * s, 35 * s), c, opacity * 0.7, opacity * 0.25, 80),
        blob("figure_right_leg", (x + 8 * s, y + 58 * s), (10 * s, 35 * s), c, opacity * 0.7, opacity * 0.25, 80),
    ]


def face(opacity: float, colored: bool, x: float, y: float, scale: float) -> List[OverlayLayer]:
    skin = (180, 150, 130) if colored else (70, 65, 75)
    feature = (80, 60, 50) if colored else (40, 35, 45)
    s = scale
    return [
        ellipse_px("face_oval", (x, y), (28 * s, 35 * s), [
            (0, skin, opacity * 0.7), (60, skin, opacity * 0.4), (80, skin, opacity * 0.15), clear(100),
        ]),
        blob("face_left_eye", (x - 7 * s, y - 5 * s), (5 * s, 3 * s), feature, opacity * 0.8, opacity * 0.3, 70),
        blob("face_right_eye", (x + 7 * s, y - 5 * s), (5 * s, 3 * s), feature, opacity * 0.8, opacity * 0.3, 70),
        blob("face_nose", (x, y + 2 * s), (3 * s, 8 * s), feature, opacity * 0.5, opacity * 0.2, 60),
        blob("face_mouth", (x, y + 12 * s), (8 * s, 3 * s), feature, opacity * 0.6, opacity * 0.2, 70),
    ]


def flower(opacity: float, colored: bool, x: float, y: float, scale: float) -> List[OverlayLayer]:
    petal = (220, 150, 180) if colored else (90, 85, 95)
    center = (255, 220, 100) if colored else (70, 70, 80)
    layers = []
    for i in range(6):
        rad = math.radians(i * 60.0)
        pos = (x + math.cos(rad) * 8 * scale, y + math.sin(rad) * 8 * scale)
        layers.append(blob(f"flower_petal_{i}", pos, (12 * scale, 6 * scale), petal, opacity * 0.6, opacity * 0.25, 60))
    layers.append(circle("flower_center", (x, y), [
        (0, center, opacity * 0.8), (60, center, opacity * 0.4), clear(100),
    ], radius_px=5 * scale))
    return layers


def cat(opacity: float, colored: bool, x: float, y: float, scale: float) -> List[OverlayLayer]:
    fur = (120, 80, 50) if colored else (50, 45, 55)
    s = scale
    return [
        blob("cat_body", (x, y), (35 * s, 18 * s), fur, opacity * 0.85, opacity * 0.35, 70),
        blob("cat_head", (x - 18 * s, y - 8 * s), (14 * s, 12 * s), fur, opacity * 0.9, opacity * 0.4, 70),
        blob("cat_left_ear", (x - 22 * s, y - 16 * s), (4 * s, 6 * s), fur, opacity * 0.8, opacity * 0.3, 70),
        blob("cat_right_ear", (x - 14 * s, y - 16 * s), (4 * s, 6 * s), fur, opacity * 0.8, opacity * 0.3, 70),
        blob("cat_tail", (x + 22 * s, y - 5 * s), (20 * s, 5 * s), fur, opacity * 0.7, opacity * 0.25, 70),
        blob("cat_front_legs", (x - 12 * s, y + 12 * s), (5 * s, 12 * s), fur, opacity * 0.65, opacity * 0.2, 80),
        blob("cat_back_legs", (x + 10 * s, y + 12 * s), (5 * s, 12 * s), fur, opacity * 0.65, opacity * 0.2, 80),
    ]


BUILDING_WINDOWS = (
    (-8, -20), (0, -18), (7, -19),
    (-9, -8), (1, -6), (8, -7),
    (-7, 5), (2, 6), (9, 4),
    (-8, 16), (1, 18), (7, 17),
)


def building(opacity: float, colored: bool, x: float, y: float, scale: float) -> List[OverlayLayer]:
    wall = (140, 120, 100) if colored else (65, 60, 70)
    window = (200, 220, 255) if colored else (45, 45, 55)
    s = scale
    layers = [
        radial("building_body", (x, y), (32 * s, 50 * s), [
            (0, wall, opacity * 0.65), (50, wall, opacity * 0.5), (75, wall, opacity * 0.25), clear(100),
        ]),
        radial("building_edge_upper", (x - 8 * s, y - 15 * s), (18 * s, 25 * s), [
            (0, wall, opacity * 0.4), (70, wall, opacity * 0.15), clear(100),
        ]),
        radial("building_edge_lower", (x + 6 * s, y + 18 * s), (20 * s, 20 * s), [
            (0, wall, opacity * 0.35), (70, wall, opacity * 0.1), clear(100),
        ]),
    ]
    for i, (dx, dy) in enumerate(BUILDING_WINDOWS):
        wx = x + (dx + math.sin(i * 2.7) * 1.5) * s
        wy = y + (dy + math.cos(i * 3.1) * 1.5) * s
        size = 0.8 + math.sin(i * 1.9) * 0.3
        layers.append(radial(f"building_window_{i}", (wx, wy), (4 * s * size, 5 * s * size), [
            (0, window, opacity * 0.55), (50, window, opacity * 0.25), clear(100),
        ]))
    return layers


COMPLEX_BUILDERS: Dict[str, Callable[..., List[OverlayLayer]]] = {
    "humanSilhouette": human_silhouette,
    "face": face,
    "flower": flower,
    "cat": cat,
    "building": building,
}


# ============================================================
# EPISODE RENDERING
# ============================================================

def episode_patterns(config: EpisodeConfig, intensity: float, base_opacity: float,
                     phase: float, seed: int) -> List[OverlayLayer]:
    """Layers (top first) for every pattern chosen for the episode."""
    layers: List[OverlayLayer] = []

    simple_opacity = base_opacity * (0.6 + phase * 0.4)
    for name in config.simple:
        colored = config.colored.get(name, False)
        if name == "honeycomb":
            layers.extend(honeycomb(simple_opacity, colored, phase * 5, phase * 3))
        elif name == "spiral":
            layers.extend(spiral(simple_opacity, colored, phase * 30))
        elif name == "tessellation":
            layers.extend(tessellation(simple_opacity, colored, seed + phase * 10))
        elif name == "concentricCircles":
            layers.extend(concentric_circles(simple_opacity, colored, phase * 2))
        elif name == "zigzag":
            layers.extend(zigzag(simple_opacity, colored, seed + phase * 5))
        elif name == "grid":
            layers.extend(lattice(simple_opacity, colored, seed))
        elif name == "photopsia":
            layers.extend(photopsia(simple_opacity, colored, seed, math.floor(3 + intensity * 5)))
        elif name == "sparkles":
            layers.extend(sparkles(simple_opacity, colored, seed, phase))

    complex_opacity = base_opacity * (0.7 + phase * 0.3)
    for i, name in enumerate(config.complex):
        # bird and shadowBlob take a slot but have no shape
        if name not in COMPLEX_BUILDERS:
            continue
        x = 25 + seeded_random(seed + i * 31) * 50
        y = 30 + seeded_random(seed + i * 37) * 40
        scale = 0.6 + seeded_random(seed + i * 41) * 0.6
        layers.extend(COMPLEX_BUILDERS[name](complex_opacity, config.colored.get(name, False), x, y, scale))

    return layers


def vision_loss(intensity: float) -> List[OverlayLayer]:
    """Dim right-side field loss with an irregular edge, top first."""
    base = 0.1 + intensity * 0.15
    edge = 0.15 + intensity * 0.2
    return [
        radial("vision_loss_main", (110, 50), (80, 120), [
            (0, (30, 25, 35), edge), (40, (35, 30, 40), base), clear(70),
        ]),
        radial("vision_loss_upper", (105, 30), (60, 80), [
            (0, (35, 30, 40), edge * 0.7), (50, (40, 35, 45), base * 0.5), clear(80),
        ]),
        radial("vision_loss_lower", (108, 70), (50, 90), [
            (0, (30, 25, 35), edge * 0.8), (45, (40, 35, 45), base * 0.6), clear(75),
        ]),
    ]


def generate_hallucinations(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """
    Episodic CBS hallucinations over a partial field loss.

    Args:
        condition_id: Registry id
        intensity: Severity in [0, 1]
        time_ms: Host timestamp
        params: Optional "start_ms", the time the effect was enabled

    Returns:
        OverlayFrame with patterns on top, persistent flashes, then field loss
    """
    level = intensity
    timing = episode_timing(time_ms, level, params.get("start_ms"))
    config = select_episode(timing.seed, level)

    phase = math.sin(time_ms / 5000.0) * 0.5 + 0.5
    flash_phase = math.sin(time_ms / 2500.0) * 0.5 + 0.5
    base_opacity = (0.25 + level * 0.35) * timing.opacity

    top_first = episode_patterns(config, level, base_opacity, phase, timing.seed)

    flash_base = (0.25 + level * 0.25) * flash_phase
    for i in range(math.floor(2 + level * 3)):
        x = 20 + (i * 25 + time_ms / 5000.0) % 60
        y = 20 + (i * 30) % 60
        a = flash_base * (0.5 + (i % 3) * 0.25)
        top_first.append(circle(f"persistent_flash_{i}", (x, y), [
            (0, WHITE, a), (40, (255, 255, 220), a * 0.5), clear(100),
        ], radius_px=5 + (i % 3) * 4))

    top_first.extend(vision_loss(level))

    return OverlayFrame(
        condition_id=condition_id,
        layers=top_first[::-1],
        blend_mode=BlendMode.NORMAL,
        z_index=9999,
        opacity=min(0.9, 0.6 + level * 0.3),
    )
