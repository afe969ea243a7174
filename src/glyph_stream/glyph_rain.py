"""
Glyph Rain.

Falling columns of glyphs drawn into a private RGBA buffer. Each tick:

1. Fade the buffer with a low-alpha dark fill (phosphor persistence)
2. Advance the glitch timer and displace a few horizontal slices
3. Mutate, draw, advance and recycle every column
4. Darken alternate scan lines and the frame edges

The buffer is premultiplied float32: rgb in [0, 255] scaled by alpha,
alpha in [0, 1].
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

import cv2
import numpy as np
from numpy.typing import NDArray
from loguru import logger

from src.core.contracts import BlendMode, GlyphColumn, GlyphFrame, RGB, clamp_unit


# ============================================================
# CONSTANTS
# ============================================================

KATAKANA = "アイウエオカキクケコサシスセソタチツテトナニヌネノハヒフヘホマミムメモヤユヨラリルレロワヲン"
LATIN = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
DIGITS = "0123456789"
SYMBOLS = "!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~"
ALPHABET: Tuple[str, ...] = tuple(KATAKANA + LATIN + DIGITS + SYMBOLS)

CELL_SIZE = 14
TARGET_FRAME_MS = 16.67
MUTATION_PROBABILITY = 0.3

FADE_COLOR: RGB = (0, 5, 0)
HEAD_COLOR: RGB = (220, 255, 220)
NEAR_HEAD_COLOR: RGB = (0, 255, 50)
GLOW_GREEN: RGB = (0, 255, 0)
GLOW_DIM_GREEN: RGB = (0, 170, 0)

HEAD_GLOW_PX = 20
NEAR_HEAD_GLOW_PX = 12
TRAIL_GLOW_PX = 3
NEAR_HEAD_COUNT = 4

GLITCH_PROBABILITY = 0.001
SCANLINE_SPACING = 3


# ============================================================
# TRAIL SHADING
# ============================================================

@dataclass(frozen=True)
class TrailStyle:
    color: RGB
    alpha: float
    glow_px: int
    glow_color: RGB


def trail_alpha(index: int, trail_length: int, brightness: float, intensity: float) -> float:
    """Base alpha before head/near-head boosts; falls linearly along the trail."""
    fade = 1.0 - index / trail_length
    return fade * brightness * intensity


def trail_style(index: int, trail_length: int, brightness: float, intensity: float) -> TrailStyle:
    """
    Shade for the glyph at `index` (0 is the head).

    Alpha is non-increasing with index for a fixed column.
    """
    fade = 1.0 - index / trail_length
    alpha = trail_alpha(index, trail_length, brightness, intensity)
    if index == 0:
        return TrailStyle(HEAD_COLOR, min(1.0, alpha * 1.8), HEAD_GLOW_PX, GLOW_GREEN)
    if index < NEAR_HEAD_COUNT:
        return TrailStyle(NEAR_HEAD_COLOR, min(1.0, alpha * 1.3), NEAR_HEAD_GLOW_PX, GLOW_GREEN)
    green = int(math.floor(180 + fade * 75))
    return TrailStyle((0, green, 0), clamp_unit(alpha), TRAIL_GLOW_PX, GLOW_DIM_GREEN)


# ============================================================
# COLUMNS
# ============================================================

class ColumnArena:
    """
    Fixed set of column slots, one per cell-wide strip of the surface.

    Reinitialized wholesale on resize; slots are never added or removed
    individually.
    """

    def __init__(self, cell_size: int = CELL_SIZE):
        self.cell_size = cell_size
        self._columns: List[GlyphColumn] = []

    def __len__(self) -> int:
        return len(self._columns)

    def __getitem__(self, index: int) -> GlyphColumn:
        return self._columns[index]

    def __iter__(self) -> Iterator[GlyphColumn]:
        return iter(self._columns)

    def reset(self, width: int, height: int, rng: np.random.Generator):
        """Discard all columns and seed a fresh one per strip."""
        count = width // self.cell_size
        self._columns = [self._spawn(i, height, rng) for i in range(count)]

    def _spawn(self, slot: int, height: int, rng: np.random.Generator) -> GlyphColumn:
        return GlyphColumn(
            x=float(slot * self.cell_size),
            y=float(rng.random() * height - height),
            speed=float(3 + rng.random() * 5),
            glyphs=random_glyphs(rng, 25 + int(rng.random() * 20)),
            trail_length=20 + int(rng.random() * 15),
            brightness=float(0.75 + rng.random() * 0.25),
        )

    def recycle(self, column: GlyphColumn, rng: np.random.Generator):
        """Reset a column above the view with new speed, brightness and glyphs."""
        column.y = float(-column.trail_length * self.cell_size - rng.random() * 100)
        column.speed = float(2 + rng.random() * 4)
        column.brightness = float(0.6 + rng.random() * 0.4)
        column.glyphs = random_glyphs(rng, len(column.glyphs))


def random_glyphs(rng: np.random.Generator, count: int) -> List[str]:
    return [ALPHABET[i] for i in rng.integers(0, len(ALPHABET), size=count)]


def mutate_column(column: GlyphColumn, rng: np.random.Generator) -> bool:
    """Replace at most one glyph. Returns True when a glyph changed."""
    if rng.random() >= MUTATION_PROBABILITY:
        return False
    index = int(rng.integers(0, len(column.glyphs)))
    column.glyphs[index] = ALPHABET[int(rng.integers(0, len(ALPHABET)))]
    return True


# ============================================================
# GLITCH
# ============================================================

class GlitchTimer:
    """
    Short random bursts of slice displacement.

    Owns its own generator so column resets never shift its sequence.
    """

    def __init__(self, rng: np.random.Generator, probability: float = GLITCH_PROBABILITY):
        self._rng = rng
        self.probability = probability
        self.active = False
        self.end_ms = 0.0

    def update(self, now_ms: float) -> bool:
        """Advance the timer; returns whether a burst is active this tick."""
        if not self.active and self._rng.random() < self.probability:
            self.active = True
            self.end_ms = now_ms + 100 + self._rng.random() * 150
        if self.active and now_ms > self.end_ms:
            self.active = False
        return self.active

    def slices(self, height: int) -> List[Tuple[int, int, int]]:
        """(top row, band height, horizontal offset) for each displaced slice."""
        count = 3 + int(self._rng.random() * 5)
        bands = []
        for _ in range(count):
            top = int(self._rng.random() * height)
            band = 5 + int(self._rng.random() * 20)
            offset = int(math.floor((self._rng.random() - 0.5) * 30))
            bands.append((top, band, offset))
        return bands


def displace_slice(buffer: NDArray[np.float32], top: int, band: int, offset: int):
    """Copy rows [top, top+band) and write them back shifted by `offset` px."""
    height, width = buffer.shape[:2]
    if top < 0 or top >= height or band <= 0:
        raise ValueError(f"Slice {top}+{band} outside surface of height {height}")
    rows = buffer[top:min(top + band, height)].copy()
    if abs(offset) >= width:
        return
    if offset >= 0:
        buffer[top:top + rows.shape[0], offset:] = rows[:, :width - offset]
    else:
        buffer[top:top + rows.shape[0], :width + offset] = rows[:, -offset:]


# ============================================================
# GLYPH BITMAPS
# ============================================================

class GlyphAtlas:
    """
    Cached coverage masks for every (glyph, glow) pair.

    Hershey fonts carry no katakana; those glyphs are drawn as stroke
    sketches keyed on the code point so each one is stable.
    """

    def __init__(self, cell_size: int = CELL_SIZE, pad: int = HEAD_GLOW_PX):
        self.cell_size = cell_size
        self.pad = pad
        self._masks: Dict[str, NDArray[np.float32]] = {}
        self._glows: Dict[Tuple[str, int], NDArray[np.float32]] = {}

    @property
    def patch_size(self) -> int:
        return self.cell_size + 2 * self.pad

    def mask(self, glyph: str) -> NDArray[np.float32]:
        if glyph not in self._masks:
            self._masks[glyph] = self._render(glyph)
        return self._masks[glyph]

    def glow(self, glyph: str, glow_px: int) -> NDArray[np.float32]:
        key = (glyph, glow_px)
        if key not in self._glows:
            # glow radius maps to a gaussian sigma of half the radius
            self._glows[key] = cv2.GaussianBlur(self.mask(glyph), (0, 0), sigmaX=max(glow_px / 2.0, 0.5))
        return self._glows[key]

    def _render(self, glyph: str) -> NDArray[np.float32]:
        size = self.patch_size
        canvas = np.zeros((size, size), dtype=np.uint8)
        cell = self.cell_size
        left = top = self.pad

        if glyph.isascii():
            scale = cell / 14.0
            (tw, th), _ = cv2.getTextSize(glyph, cv2.FONT_HERSHEY_PLAIN, scale, 1)
            origin = (left + (cell - tw) // 2, top + (cell + th) // 2)
            cv2.putText(canvas, glyph, origin, cv2.FONT_HERSHEY_PLAIN, scale, 255, 1, cv2.LINE_AA)
        else:
            rng = np.random.default_rng(ord(glyph))
            for _ in range(2 + int(rng.integers(0, 3))):
                x0, y0, x1, y1 = rng.integers(1, cell - 1, size=4)
                cv2.line(canvas, (left + int(x0), top + int(y0)), (left + int(x1), top + int(y1)), 255, 1, cv2.LINE_AA)

        return canvas.astype(np.float32) / 255.0


# ============================================================
# COMPOSITING HELPERS
# ============================================================

def over(region: NDArray[np.float32], coverage: NDArray[np.float32], color: RGB):
    """Source-over a solid color through a coverage mask, in place."""
    a = coverage[..., None]
    region[..., :3] = np.asarray(color, dtype=np.float32) * a + region[..., :3] * (1.0 - a)
    region[..., 3:] = a + region[..., 3:] * (1.0 - a)


def fill(buffer: NDArray[np.float32], color: RGB, alpha: float):
    if alpha <= 0.0:
        return
    buffer[..., :3] = np.asarray(color, dtype=np.float32) * alpha + buffer[..., :3] * (1.0 - alpha)
    buffer[..., 3] = alpha + buffer[..., 3] * (1.0 - alpha)


def unpremultiply(buffer: NDArray[np.float32]) -> NDArray[np.uint8]:
    alpha = buffer[..., 3:]
    rgb = np.where(alpha > 1e-6, buffer[..., :3] / np.maximum(alpha, 1e-6), 0.0)
    out = np.concatenate([rgb, alpha * 255.0], axis=-1)
    return np.clip(np.round(out), 0, 255).astype(np.uint8)


def vignette_ramp(width: int, height: int) -> NDArray[np.float32]:
    """0 at the center rising linearly to 1 at 0.7 x the longer side."""
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
    dist = np.hypot(xs - width / 2.0, ys - height / 2.0)
    return np.clip(dist / (max(width, height) * 0.7), 0.0, 1.0)


# ============================================================
# STREAM
# ============================================================

class GlyphStream:
    """
    Stateful glyph-rain animation for one overlay instance.

    Guarantees:
    - A tick before the first resize is a no-op returning None
    - Resize rebuilds every column and the buffer; the glitch timer survives
    - All randomness comes from the seed passed in
    """

    def __init__(
        self,
        cell_size: int = CELL_SIZE,
        seed: Optional[int] = None,
        glitch_probability: float = GLITCH_PROBABILITY,
    ):
        """
        Initialize glyph stream.

        Args:
            cell_size: Glyph cell width/height in pixels
            seed: Seed for column and glitch randomness (None for entropy)
            glitch_probability: Per-tick chance of starting a glitch burst
        """
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")

        column_seed, glitch_seed = np.random.SeedSequence(seed).spawn(2)
        self._rng = np.random.default_rng(column_seed)
        self._glitch = GlitchTimer(np.random.default_rng(glitch_seed), glitch_probability)

        self.cell_size = cell_size
        self._columns = ColumnArena(cell_size)
        self._atlas = GlyphAtlas(cell_size)

        self._width = 0
        self._height = 0
        self._buffer: Optional[NDArray[np.float32]] = None
        self._vignette: Optional[NDArray[np.float32]] = None
        self._last_ms: Optional[float] = None

        logger.debug(f"Glyph stream created (cell={cell_size}, seed={seed})")

    @property
    def columns(self) -> ColumnArena:
        return self._columns

    @property
    def glitch(self) -> GlitchTimer:
        return self._glitch

    @property
    def size(self) -> Tuple[int, int]:
        return self._width, self._height

    @property
    def is_ready(self) -> bool:
        return self._buffer is not None and len(self._columns) > 0

    def resize(self, width: int, height: int):
        """Reallocate the buffer and reinitialize every column."""
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            logger.debug(f"Ignoring resize to {width}x{height}")
            self._buffer = None
            self._columns = ColumnArena(self.cell_size)
            return

        self._width, self._height = width, height
        self._buffer = np.zeros((height, width, 4), dtype=np.float32)
        self._vignette = vignette_ramp(width, height)
        self._columns.reset(width, height, self._rng)
        self._last_ms = None
        logger.debug(f"Glyph stream resized to {width}x{height} ({len(self._columns)} columns)")

    def tick(self, now_ms: float, intensity: float = 1.0) -> Optional[GlyphFrame]:
        """
        Advance one animation step.

        Args:
            now_ms: Host timestamp in milliseconds
            intensity: Effect strength; clamped into [0, 1]

        Returns:
            GlyphFrame, or None when called before the first resize
        """
        if not self.is_ready:
            return None

        level = clamp_unit(intensity)
        dt = TARGET_FRAME_MS if self._last_ms is None else max(0.0, now_ms - self._last_ms)
        self._last_ms = now_ms
        buffer = self._buffer

        fill(buffer, FADE_COLOR, 0.08 + (1.0 - level) * 0.02)

        slices = self._apply_glitch(now_ms)

        for column in self._columns:
            mutate_column(column, self._rng)
            self._draw_column(column, level)
            column.y += column.speed * (dt / TARGET_FRAME_MS)
            if column.y - column.trail_length * self.cell_size > self._height:
                self._columns.recycle(column, self._rng)

        scan_alpha = 0.03 * level
        if scan_alpha > 0:
            rows = buffer[::SCANLINE_SPACING]
            rows[..., :3] *= 1.0 - scan_alpha
            rows[..., 3] = scan_alpha + rows[..., 3] * (1.0 - scan_alpha)
        over(buffer, self._vignette * (0.3 * level), (0, 0, 0))

        return GlyphFrame(
            pixels=unpremultiply(buffer),
            backdrop_alpha=0.85 * level,
            blend_mode=BlendMode.NORMAL,
            z_index=9999,
            glitched=self._glitch.active,
            slices=slices,
            timestamp_ms=now_ms,
        )

    def _apply_glitch(self, now_ms: float) -> int:
        if not self._glitch.update(now_ms):
            return 0
        applied = 0
        for top, band, offset in self._glitch.slices(self._height):
            try:
                displace_slice(self._buffer, top, band, offset)
            except (ValueError, IndexError) as e:
                logger.debug(f"Skipping glitch step: {e}")
                break
            applied += 1
        return applied

    def _draw_column(self, column: GlyphColumn, level: float):
        cell = self.cell_size
        pad = self._atlas.pad
        count = min(column.trail_length, len(column.glyphs))

        for i in range(count):
            char_y = column.y - i * cell
            if char_y < -cell or char_y > self._height + cell:
                continue

            style = trail_style(i, column.trail_length, column.brightness, level)
            if style.alpha <= 0.0:
                continue

            glyph = column.glyphs[i]
            left = int(round(column.x)) - pad
            top = int(round(char_y)) - cell - pad
            self._blit(self._atlas.glow(glyph, style.glow_px), left, top, style.glow_color, style.alpha)
            self._blit(self._atlas.mask(glyph), left, top, style.color, style.alpha)

    def _blit(self, mask: NDArray[np.float32], left: int, top: int, color: RGB, alpha: float):
        h, w = mask.shape
        x0, y0 = max(left, 0), max(top, 0)
        x1, y1 = min(left + w, self._width), min(top + h, self._height)
        if x0 >= x1 or y0 >= y1:
            return
        coverage = mask[y0 - top:y1 - top, x0 - left:x1 - left] * alpha
        over(self._buffer[y0:y1, x0:x1], coverage, color)
