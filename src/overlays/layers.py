"""
Layer builders shared by condition generators.

Stops are given as (offset, rgb, alpha) tuples; `CLEAR` marks a fully
transparent stop. Alphas are clamped by ColorStop.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple, Union

from src.core.contracts import ColorStop, LayerKind, OverlayLayer, RGB


CLEAR: RGB = (0, 0, 0)
WHITE: RGB = (255, 255, 255)
BLACK: RGB = (0, 0, 0)

StopSpec = Union[ColorStop, Tuple[float, RGB, float]]


def clear(offset: float) -> ColorStop:
    return ColorStop(offset, CLEAR, 0.0)


def to_stops(entries: Iterable[StopSpec]) -> List[ColorStop]:
    stops = []
    for entry in entries:
        if isinstance(entry, ColorStop):
            stops.append(entry)
        else:
            offset, color, alpha = entry
            stops.append(ColorStop(float(offset), color, float(alpha)))
    return stops


def radial(
    name: str,
    center: Tuple[float, float],
    extent: Tuple[float, float],
    entries: Sequence[StopSpec],
    opacity: float = 1.0,
    bounds: Optional[Tuple[float, float, float, float]] = None,
) -> OverlayLayer:
    """Elliptical radial field with radii in percent of width/height."""
    return OverlayLayer(
        kind=LayerKind.RADIAL,
        name=name,
        stops=to_stops(entries),
        center=center,
        extent=extent,
        opacity=opacity,
        bounds=bounds,
    )


def ellipse_px(
    name: str,
    center: Tuple[float, float],
    radii_px: Tuple[float, float],
    entries: Sequence[StopSpec],
    opacity: float = 1.0,
) -> OverlayLayer:
    """Radial ellipse sized in pixels, anchored in percent."""
    return OverlayLayer(
        kind=LayerKind.RADIAL,
        name=name,
        stops=to_stops(entries),
        center=center,
        extent_px=radii_px,
        opacity=opacity,
    )


def circle(
    name: str,
    center: Tuple[float, float],
    entries: Sequence[StopSpec],
    radius_px: Optional[float] = None,
    opacity: float = 1.0,
) -> OverlayLayer:
    """Circular radial field; without a radius it reaches the farthest corner."""
    return OverlayLayer(
        kind=LayerKind.RADIAL,
        name=name,
        stops=to_stops(entries),
        center=center,
        circle=True,
        radius_px=radius_px,
        opacity=opacity,
    )


def linear(
    name: str,
    angle: float,
    entries: Sequence[StopSpec],
    opacity: float = 1.0,
    bounds: Optional[Tuple[float, float, float, float]] = None,
) -> OverlayLayer:
    """Linear field; 180 deg runs top to bottom, 90 deg left to right."""
    return OverlayLayer(
        kind=LayerKind.LINEAR,
        name=name,
        stops=to_stops(entries),
        angle=angle,
        opacity=opacity,
        bounds=bounds,
    )


def conic(
    name: str,
    center: Tuple[float, float],
    start_angle: float,
    entries: Sequence[StopSpec],
    opacity: float = 1.0,
) -> OverlayLayer:
    """Conic sweep; stop offsets in degrees from `start_angle`."""
    return OverlayLayer(
        kind=LayerKind.CONIC,
        name=name,
        stops=to_stops(entries),
        center=center,
        angle=start_angle,
        opacity=opacity,
    )


def repeating_linear(
    name: str,
    angle: float,
    period: float,
    entries: Sequence[StopSpec],
    opacity: float = 1.0,
) -> OverlayLayer:
    """Stripes; stop offsets in pixels within one `period`."""
    return OverlayLayer(
        kind=LayerKind.REPEATING_LINEAR,
        name=name,
        stops=to_stops(entries),
        angle=angle,
        period=period,
        opacity=opacity,
    )


def repeating_radial(
    name: str,
    center: Tuple[float, float],
    period: float,
    entries: Sequence[StopSpec],
    opacity: float = 1.0,
) -> OverlayLayer:
    """Concentric rings; stop offsets in pixels within one `period`."""
    return OverlayLayer(
        kind=LayerKind.REPEATING_RADIAL,
        name=name,
        stops=to_stops(entries),
        center=center,
        period=period,
        opacity=opacity,
    )


def solid(name: str, color: RGB, alpha: float) -> OverlayLayer:
    return OverlayLayer(
        kind=LayerKind.SOLID,
        name=name,
        stops=[ColorStop(0.0, color, alpha)],
    )
