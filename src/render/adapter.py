"""
Render Target Adapter.

Hands compositor output to the host in the form it needs:
- declarative: the layer stack as plain dicts (describe)
- raster: RGBA pixels for a surface size (rasterize)
- composited: the overlay blended onto a host image (composite)

Fields are evaluated in premultiplied float32 and stacked source-over.
The whole stack then combines with the image through the frame's blend
mode. Host images are 8-bit BGR by default, the OpenCV convention.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, Optional, Tuple, Union

import cv2
import numpy as np
from numpy.typing import NDArray
from loguru import logger

from src.core.contracts import (
    BlendMode,
    GlyphFrame,
    LayerKind,
    OverlayFrame,
    OverlayLayer,
    clamp_unit,
)
from src.color.color_transform import ColorCondition, apply_color_matrix, matrix_for


Premultiplied = Tuple[NDArray[np.float32], NDArray[np.float32]]

GLYPH_BACKDROP = (0, 5, 0)


# ============================================================
# FIELD GEOMETRY
# ============================================================

def _grid(width: int, height: int, scale_x: float, scale_y: float) -> Tuple[NDArray[np.float32], NDArray[np.float32]]:
    """Pixel-center coordinates of the evaluation grid, in surface pixels."""
    xs = (np.arange(width, dtype=np.float32) + 0.5) * scale_x
    ys = (np.arange(height, dtype=np.float32) + 0.5) * scale_y
    return np.meshgrid(xs, ys)


def _linear_position(layer: OverlayLayer, x, y, width: float, height: float) -> Tuple[NDArray[np.float32], float]:
    """Distance along the gradient line from its start, and the line length."""
    rad = math.radians(layer.angle)
    sin_a, cos_a = math.sin(rad), math.cos(rad)
    length = abs(width * sin_a) + abs(height * cos_a)
    along = (x - width / 2.0) * sin_a - (y - height / 2.0) * cos_a + length / 2.0
    return along, max(length, 1e-6)


def _radial_distance(layer: OverlayLayer, x, y, width: float, height: float) -> NDArray[np.float32]:
    """Normalized radius in percent (radial) of each pixel."""
    cx = layer.center[0] * width / 100.0
    cy = layer.center[1] * height / 100.0
    dx, dy = x - cx, y - cy

    if layer.circle:
        radius = layer.radius_px
        if radius is None:
            corners = [(0.0, 0.0), (width, 0.0), (0.0, height), (width, height)]
            radius = max(math.hypot(px - cx, py - cy) for px, py in corners)
        return np.hypot(dx, dy) / max(radius, 1e-6) * 100.0

    if layer.extent_px is not None:
        rx, ry = layer.extent_px
    else:
        rx = layer.extent[0] * width / 100.0
        ry = layer.extent[1] * height / 100.0
    return np.hypot(dx / max(rx, 1e-6), dy / max(ry, 1e-6)) * 100.0


def field_position(layer: OverlayLayer, x, y, width: float, height: float) -> NDArray[np.float32]:
    """
    Position of every pixel in the layer's stop units.

    Args:
        layer: Layer to evaluate
        x, y: Pixel coordinates (surface pixels)
        width, height: Surface size

    Returns:
        Array in percent (radial, linear), degrees (conic) or pixels
        within one period (repeating kinds)
    """
    if layer.kind is LayerKind.RADIAL:
        return _radial_distance(layer, x, y, width, height)

    if layer.kind is LayerKind.LINEAR:
        along, length = _linear_position(layer, x, y, width, height)
        return along / length * 100.0

    if layer.kind is LayerKind.CONIC:
        cx = layer.center[0] * width / 100.0
        cy = layer.center[1] * height / 100.0
        theta = np.degrees(np.arctan2(x - cx, -(y - cy)))
        return np.mod(theta - layer.angle, 360.0)

    if layer.kind is LayerKind.REPEATING_LINEAR:
        along, _ = _linear_position(layer, x, y, width, height)
        return np.mod(along, max(layer.period, 1e-6))

    if layer.kind is LayerKind.REPEATING_RADIAL:
        cx = layer.center[0] * width / 100.0
        cy = layer.center[1] * height / 100.0
        return np.mod(np.hypot(x - cx, y - cy), max(layer.period, 1e-6))

    return np.zeros_like(x)


def _bounds_mask(layer: OverlayLayer, x, y, width: float, height: float) -> Optional[NDArray[np.float32]]:
    if layer.bounds is None:
        return None
    bx, by, bw, bh = layer.bounds
    x0, y0 = bx * width / 100.0, by * height / 100.0
    x1, y1 = x0 + bw * width / 100.0, y0 + bh * height / 100.0
    return ((x >= x0) & (x < x1) & (y >= y0) & (y < y1)).astype(np.float32)


def evaluate_layer(layer: OverlayLayer, x, y, width: float, height: float) -> Premultiplied:
    """
    Premultiplied RGB and alpha for one layer.

    Stops are interpolated in premultiplied space; positions before the
    first stop or after the last take the end colors.
    """
    shape = x.shape
    if not layer.stops:
        return np.zeros(shape + (3,), np.float32), np.zeros(shape, np.float32)

    offsets = np.maximum.accumulate(np.array([s.offset for s in layer.stops], dtype=np.float64))
    alphas = np.array([s.alpha for s in layer.stops], dtype=np.float64) * layer.opacity
    colors = np.array([s.color for s in layer.stops], dtype=np.float64) / 255.0

    if layer.kind is LayerKind.SOLID:
        alpha = np.full(shape, alphas[0], np.float32)
        rgb = np.broadcast_to((colors[0] * alphas[0]).astype(np.float32), shape + (3,)).copy()
    else:
        pos = field_position(layer, x, y, width, height).astype(np.float64)
        alpha = np.interp(pos, offsets, alphas).astype(np.float32)
        rgb = np.stack(
            [np.interp(pos, offsets, colors[:, c] * alphas) for c in range(3)], axis=-1
        ).astype(np.float32)

    clip = _bounds_mask(layer, x, y, width, height)
    if clip is not None:
        alpha *= clip
        rgb *= clip[..., None]
    return rgb, alpha


# ============================================================
# BLEND MODES
# ============================================================

def _screen(b, s):
    return b + s - b * s


def _multiply(b, s):
    return b * s


def _hard_light(b, s):
    return np.where(s <= 0.5, _multiply(b, 2.0 * s), _screen(b, 2.0 * s - 1.0))


def blend(base: NDArray[np.float32], source: NDArray[np.float32], alpha: NDArray[np.float32], mode: BlendMode) -> NDArray[np.float32]:
    """
    Combine an overlay with an opaque backdrop.

    Args:
        base: Backdrop RGB in [0, 1]
        source: Overlay RGB in [0, 1] (not premultiplied)
        alpha: Overlay coverage in [0, 1]
        mode: Separable blend function

    Returns:
        Result RGB in [0, 1]
    """
    if mode is BlendMode.SCREEN:
        mixed = _screen(base, source)
    elif mode is BlendMode.MULTIPLY:
        mixed = _multiply(base, source)
    elif mode is BlendMode.HARD_LIGHT:
        mixed = _hard_light(base, source)
    elif mode is BlendMode.OVERLAY:
        mixed = _hard_light(source, base)
    else:
        mixed = source
    a = alpha[..., None]
    return base * (1.0 - a) + mixed * a


# ============================================================
# ADAPTER
# ============================================================

class RenderTargetAdapter:
    """
    Presents overlay frames to a host surface.

    Guarantees:
    - Never mutates the image passed in
    - Empty frames leave the image unchanged
    - Output is uint8 with the input's channel order
    """

    def __init__(self, field_scale: float = 1.0, bgr: bool = True):
        """
        Initialize render adapter.

        Args:
            field_scale: Resolution factor at which fields are evaluated
                before resizing to the surface (0 < scale <= 1)
            bgr: Host images use BGR channel order
        """
        if not 0.0 < field_scale <= 1.0:
            raise ValueError(f"field_scale must be in (0, 1], got {field_scale}")
        self.field_scale = field_scale
        self.bgr = bgr

    # --------------------------------------------------------
    # Declarative
    # --------------------------------------------------------

    def describe(self, frame: Union[OverlayFrame, GlyphFrame]) -> Dict[str, Any]:
        """Plain-data description of a frame for declarative hosts."""
        if isinstance(frame, GlyphFrame):
            h, w = frame.pixels.shape[:2]
            return {
                "kind": "glyph-stream",
                "size": [w, h],
                "backdrop_alpha": round(frame.backdrop_alpha, 6),
                "blend_mode": frame.blend_mode.value,
                "z_index": frame.z_index,
                "glitched": frame.glitched,
                "slices": frame.slices,
            }
        return frame.to_dict()

    # --------------------------------------------------------
    # Raster
    # --------------------------------------------------------

    def _stack(self, frame: OverlayFrame, width: int, height: int) -> Premultiplied:
        """Source-over the layer stack (bottom first) at surface size."""
        fw = max(1, int(round(width * self.field_scale)))
        fh = max(1, int(round(height * self.field_scale)))
        x, y = _grid(fw, fh, width / fw, height / fh)

        rgb = np.zeros((fh, fw, 3), np.float32)
        alpha = np.zeros((fh, fw), np.float32)
        for layer in frame.layers:
            l_rgb, l_alpha = evaluate_layer(layer, x, y, float(width), float(height))
            rgb = l_rgb + rgb * (1.0 - l_alpha[..., None])
            alpha = l_alpha + alpha * (1.0 - l_alpha)

        if (fw, fh) != (width, height):
            rgb = cv2.resize(rgb, (width, height), interpolation=cv2.INTER_LINEAR)
            alpha = cv2.resize(alpha, (width, height), interpolation=cv2.INTER_LINEAR)

        rgb *= frame.opacity
        alpha *= frame.opacity
        return self._post(rgb, alpha, frame)

    def _post(self, rgb, alpha, frame: OverlayFrame) -> Premultiplied:
        """Frame-level blur and translation on premultiplied data."""
        if frame.blur_px > 0:
            sigma = frame.blur_px
            rgb = cv2.GaussianBlur(rgb, (0, 0), sigmaX=sigma)
            alpha = cv2.GaussianBlur(alpha, (0, 0), sigmaX=sigma)

        tx, ty = frame.translate_px
        if tx or ty:
            h, w = alpha.shape
            shift = np.float32([[1, 0, tx], [0, 1, ty]])
            rgb = cv2.warpAffine(rgb, shift, (w, h), flags=cv2.INTER_LINEAR, borderMode=cv2.BORDER_CONSTANT, borderValue=0)
            alpha = cv2.warpAffine(alpha, shift, (w, h), flags=cv2.INTER_LINEAR, borderMode=cv2.BORDER_CONSTANT, borderValue=0)
        return rgb, np.clip(alpha, 0.0, 1.0)

    def rasterize(self, frame: OverlayFrame, width: int, height: int) -> NDArray[np.uint8]:
        """
        Render a frame's layer stack to RGBA pixels.

        Args:
            frame: Overlay frame
            width, height: Surface size in pixels

        Returns:
            H x W x 4 uint8 RGBA (straight alpha)
        """
        if frame.is_empty or not frame.layers:
            return np.zeros((height, width, 4), np.uint8)

        rgb, alpha = self._stack(frame, width, height)
        straight = np.where(alpha[..., None] > 1e-6, rgb / np.maximum(alpha[..., None], 1e-6), 0.0)
        out = np.concatenate([straight * 255.0, alpha[..., None] * 255.0], axis=-1)
        return np.clip(np.round(out), 0, 255).astype(np.uint8)

    # --------------------------------------------------------
    # Compositing
    # --------------------------------------------------------

    def _to_rgb(self, image: NDArray[np.uint8]) -> NDArray[np.float32]:
        rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB) if self.bgr else image
        return rgb.astype(np.float32) / 255.0

    def _from_rgb(self, rgb: NDArray[np.float32]) -> NDArray[np.uint8]:
        out = np.clip(np.round(rgb * 255.0), 0, 255).astype(np.uint8)
        return cv2.cvtColor(out, cv2.COLOR_RGB2BGR) if self.bgr else out

    def _composite_float(self, base: NDArray[np.float32], frame: OverlayFrame) -> NDArray[np.float32]:
        h, w = base.shape[:2]

        if frame.ghost is not None:
            # the ghost is the backdrop itself, offset and softened
            ghost = OverlayFrame(
                condition_id=frame.condition_id,
                opacity=frame.ghost.opacity,
                blur_px=frame.ghost.blur_px,
                translate_px=(frame.ghost.offset_x, frame.ghost.offset_y),
            )
            rgb, alpha = self._post(base * ghost.opacity, np.full((h, w), ghost.opacity, np.float32), ghost)
            source = rgb / np.maximum(alpha[..., None], 1e-6)
            base = blend(base, np.clip(source, 0.0, 1.0), alpha, frame.ghost.blend_mode)

        if frame.layers:
            rgb, alpha = self._stack(frame, w, h)
            source = rgb / np.maximum(alpha[..., None], 1e-6)
            base = blend(base, np.clip(source, 0.0, 1.0), alpha, frame.blend_mode)
        return base

    def composite(self, image: NDArray[np.uint8], frame: OverlayFrame) -> NDArray[np.uint8]:
        """
        Blend one overlay frame onto an image.

        Args:
            image: H x W x 3 uint8 host image
            frame: Overlay frame

        Returns:
            New composited image
        """
        if frame.is_empty:
            return image.copy()
        return self._from_rgb(self._composite_float(self._to_rgb(image), frame))

    def composite_all(self, image: NDArray[np.uint8], frames: Iterable[OverlayFrame]) -> NDArray[np.uint8]:
        """Blend frames in order (first is bottom)."""
        base = self._to_rgb(image)
        for frame in frames:
            if frame.is_empty:
                continue
            base = self._composite_float(base, frame)
        return self._from_rgb(base)

    def apply_color(
        self,
        image: NDArray[np.uint8],
        condition: Union[str, ColorCondition],
        intensity: float,
    ) -> NDArray[np.uint8]:
        """Color-vision simulation at `intensity` severity."""
        matrix = matrix_for(condition, intensity)
        if not self.bgr:
            return apply_color_matrix(image, matrix)
        rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        return cv2.cvtColor(apply_color_matrix(rgb, matrix), cv2.COLOR_RGB2BGR)

    def composite_glyphs(self, image: NDArray[np.uint8], glyph_frame: Optional[GlyphFrame]) -> NDArray[np.uint8]:
        """
        Dark backdrop then glyph pixels over an image.

        A missing frame (stream not yet sized) leaves the image unchanged.
        """
        if glyph_frame is None:
            return image.copy()

        base = self._to_rgb(image)
        h, w = base.shape[:2]
        pixels = glyph_frame.pixels
        if pixels.shape[:2] != (h, w):
            logger.debug(f"Resizing glyph frame {pixels.shape[1]}x{pixels.shape[0]} to {w}x{h}")
            pixels = cv2.resize(pixels, (w, h), interpolation=cv2.INTER_NEAREST)

        backdrop_alpha = clamp_unit(glyph_frame.backdrop_alpha)
        backdrop = np.asarray(GLYPH_BACKDROP, np.float32) / 255.0
        base = base * (1.0 - backdrop_alpha) + backdrop * backdrop_alpha

        source = pixels[..., :3].astype(np.float32) / 255.0
        alpha = pixels[..., 3].astype(np.float32) / 255.0
        base = blend(base, source, alpha, glyph_frame.blend_mode)
        return self._from_rgb(base)
