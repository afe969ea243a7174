"""
Core data contracts for the Vision Overlay Engine.

All components must adhere to these contracts for:
- Deterministic behavior (frames are pure functions of their inputs)
- Bounded output (every alpha/opacity lies in [0, 1])
- Explicit ordering (layer stacks are listed bottom to top)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple
import numpy as np
from numpy.typing import NDArray


RGB = Tuple[int, int, int]


def clamp_unit(value: float) -> float:
    """Clamp a scalar into [0, 1]. NaN collapses to 0."""
    if value != value:
        return 0.0
    return 0.0 if value < 0.0 else 1.0 if value > 1.0 else float(value)


# ============================================================
# ENUMERATIONS
# ============================================================

class BlendMode(Enum):
    """How a composited overlay combines with the underlying image."""
    NORMAL = "normal"
    SCREEN = "screen"
    MULTIPLY = "multiply"
    HARD_LIGHT = "hard-light"
    OVERLAY = "overlay"


class LayerKind(Enum):
    """Parametric shape used to rasterize a layer."""
    RADIAL = "radial"
    LINEAR = "linear"
    CONIC = "conic"
    REPEATING_LINEAR = "repeating-linear"
    REPEATING_RADIAL = "repeating-radial"
    SOLID = "solid"


class DirectionBucket(Enum):
    """Offset direction for double-vision conditions."""
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    DIAGONAL = "diagonal"


# ============================================================
# LAYER STACK
# ============================================================

@dataclass(frozen=True)
class ColorStop:
    """
    One (offset, color, alpha) stop of a gradient field.

    Offset units depend on the owning layer kind (see OverlayLayer).
    """
    offset: float
    color: RGB
    alpha: float

    def __post_init__(self):
        object.__setattr__(self, "alpha", clamp_unit(self.alpha))


@dataclass
class OverlayLayer:
    """
    A single parametric shape in a composited overlay.

    Attributes:
        kind: Shape of the field
        name: Human-readable label (stable per condition)
        stops: Ordered color stops. Offsets are percent of the radius
            (radial), of the gradient line (linear), degrees (conic), or
            pixels within one repeat (repeating kinds)
        center: Anchor in percent of width/height
        extent: Radii in percent of width/height (radial ellipse)
        extent_px: Radii in pixels; overrides `extent` when set
        circle: Radial field is a circle; radius_px None means farthest corner
        radius_px: Circle radius in pixels of the reference surface
        angle: Direction in degrees (linear) or start angle (conic)
        period: Repeat length in pixels (repeating kinds)
        opacity: Whole-layer opacity
        bounds: Optional clip rectangle (x, y, w, h) in percent
    """
    kind: LayerKind
    name: str
    stops: List[ColorStop] = field(default_factory=list)
    center: Tuple[float, float] = (50.0, 50.0)
    extent: Tuple[float, float] = (100.0, 100.0)
    extent_px: Optional[Tuple[float, float]] = None
    circle: bool = False
    radius_px: Optional[float] = None
    angle: float = 180.0
    period: float = 0.0
    opacity: float = 1.0
    bounds: Optional[Tuple[float, float, float, float]] = None

    def __post_init__(self):
        self.opacity = clamp_unit(self.opacity)

    @property
    def max_alpha(self) -> float:
        if not self.stops:
            return 0.0
        return max(s.alpha for s in self.stops) * self.opacity

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "kind": self.kind.value,
            "name": self.name,
            "center": [round(self.center[0], 4), round(self.center[1], 4)],
            "extent": [round(self.extent[0], 4), round(self.extent[1], 4)],
            "angle": round(self.angle, 4),
            "opacity": round(self.opacity, 6),
            "stops": [
                {"offset": round(s.offset, 4), "color": list(s.color), "alpha": round(s.alpha, 6)}
                for s in self.stops
            ],
        }
        if self.extent_px is not None:
            data["extent_px"] = [round(self.extent_px[0], 4), round(self.extent_px[1], 4)]
        if self.circle:
            data["circle"] = True
            data["radius_px"] = self.radius_px
        if self.period:
            data["period"] = self.period
        if self.bounds is not None:
            data["bounds"] = list(self.bounds)
        return data


@dataclass
class OverlayFrame:
    """
    Composited visual description of one condition at one instant.

    `layers` are ordered bottom to top: later entries are drawn in front.
    """
    condition_id: str
    layers: List[OverlayLayer] = field(default_factory=list)
    blend_mode: BlendMode = BlendMode.NORMAL
    z_index: int = 9998
    opacity: float = 1.0
    blur_px: float = 0.0
    translate_px: Tuple[float, float] = (0.0, 0.0)
    priority: int = 3
    ghost: Optional[DiplopiaTransform] = None
    success: bool = True
    error_message: Optional[str] = None

    def __post_init__(self):
        self.opacity = clamp_unit(self.opacity)

    @classmethod
    def empty(cls, condition_id: str, error_message: Optional[str] = None) -> OverlayFrame:
        """No-op frame returned for unknown or failed conditions."""
        return cls(
            condition_id=condition_id,
            opacity=0.0,
            success=error_message is None,
            error_message=error_message,
        )

    @property
    def is_empty(self) -> bool:
        if self.opacity <= 0.0:
            return True
        return not self.layers and self.ghost is None

    def alphas(self) -> List[float]:
        """Every alpha/opacity value carried by the frame."""
        values = [self.opacity]
        for layer in self.layers:
            values.append(layer.opacity)
            values.extend(s.alpha for s in layer.stops)
        if self.ghost is not None:
            values.append(self.ghost.opacity)
        return values

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "condition_id": self.condition_id,
            "blend_mode": self.blend_mode.value,
            "z_index": self.z_index,
            "opacity": round(self.opacity, 6),
            "blur_px": self.blur_px,
            "translate_px": list(self.translate_px),
            "layers": [layer.to_dict() for layer in self.layers],
        }
        if self.ghost is not None:
            data["ghost"] = self.ghost.to_dict()
        return data


# ============================================================
# HOST-SIDE CONDITION MODEL
# ============================================================

@dataclass
class ConditionState:
    """Toggle/intensity model the host mutates between ticks."""
    condition_id: str
    enabled: bool = True
    intensity: float = 1.0
    params: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        self.intensity = clamp_unit(self.intensity)


# ============================================================
# TEMPORAL STATE
# ============================================================

@dataclass(frozen=True)
class StateReading:
    """Output of a temporal state machine at one instant."""
    name: str
    index: int
    progress: float
    multipliers: Dict[str, float]

    def __getitem__(self, key: str) -> float:
        return self.multipliers[key]


# ============================================================
# DOUBLE VISION
# ============================================================

@dataclass
class DiplopiaParams:
    """
    Host-supplied double-vision controls.

    Attributes:
        separation: Fraction of the maximum offset, in [0, 1]
        direction: Bucketed at 0.33 / 0.66 into horizontal, vertical, diagonal
    """
    separation: float = 1.0
    direction: float = 0.0

    def __post_init__(self):
        self.separation = clamp_unit(self.separation)
        self.direction = clamp_unit(self.direction)

    @classmethod
    def from_params(cls, params: Optional[Dict[str, Any]]) -> DiplopiaParams:
        params = params or {}
        return cls(
            separation=float(params.get("separation", 1.0)),
            direction=float(params.get("direction", 0.0)),
        )


@dataclass
class DiplopiaTransform:
    """Ghost-image placement for double-vision conditions."""
    offset_x: float
    offset_y: float
    opacity: float
    blur_px: float
    blend_mode: BlendMode
    direction: DirectionBucket
    z_index: int = 1001

    def __post_init__(self):
        self.opacity = clamp_unit(self.opacity)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "offset": [round(self.offset_x, 4), round(self.offset_y, 4)],
            "opacity": round(self.opacity, 6),
            "blur_px": self.blur_px,
            "blend_mode": self.blend_mode.value,
            "direction": self.direction.value,
            "z_index": self.z_index,
        }


# ============================================================
# GLYPH STREAM
# ============================================================

@dataclass
class GlyphColumn:
    """One falling column. Owned exclusively by its glyph stream."""
    x: float
    y: float
    speed: float
    glyphs: List[str]
    trail_length: int
    brightness: float


@dataclass
class GlyphFrame:
    """Raster output of one glyph-stream tick."""
    pixels: NDArray[np.uint8]
    backdrop_alpha: float
    blend_mode: BlendMode = BlendMode.NORMAL
    z_index: int = 9999
    glitched: bool = False
    slices: int = 0
    timestamp_ms: float = 0.0
