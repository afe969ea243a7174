"""
Color Transform Engine.

Maps (condition, severity) to a 3x3 RGB matrix and applies it to frames
in linear light.

Interpolation rules:
- Discrete deficiencies blend linearly between identity and the target
- Two-tier anomalies blend row-wise using smoothstep(s) as the weight
- Three-tier anomalies pass smoothstep(s) through mild/moderate/severe
  breakpoints at 0.33 and 0.66 with locally renormalized progress
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple, Union
import numpy as np
from numpy.typing import NDArray
from loguru import logger

from src.core.contracts import clamp_unit


Matrix = NDArray[np.float64]


def _frozen(rows) -> Matrix:
    m = np.array(rows, dtype=np.float64)
    m.setflags(write=False)
    return m


class ColorCondition(Enum):
    """Color-vision conditions handled by matrix transforms."""
    PROTANOPIA = "protanopia"
    DEUTERANOPIA = "deuteranopia"
    TRITANOPIA = "tritanopia"
    ACHROMATOPSIA = "achromatopsia"
    PROTANOMALY = "protanomaly"
    DEUTERANOMALY = "deuteranomaly"
    TRITANOMALY = "tritanomaly"


# Aliases used by hosts for the monochromacy condition
_ALIASES = {
    "monochromacy": ColorCondition.ACHROMATOPSIA,
    "monochromatic": ColorCondition.ACHROMATOPSIA,
}


# ============================================================
# MATRIX TABLES (row-major, rows produce R', G', B')
# ============================================================

IDENTITY = _frozen([
    [1.0, 0.0, 0.0],
    [0.0, 1.0, 0.0],
    [0.0, 0.0, 1.0],
])

PROTANOPIA = _frozen([
    [0.567, 0.433, 0.0],
    [0.558, 0.442, 0.0],
    [0.0, 0.242, 0.758],
])

DEUTERANOPIA = _frozen([
    [0.625, 0.375, 0.0],
    [0.7, 0.3, 0.0],
    [0.0, 0.3, 0.7],
])

TRITANOPIA = _frozen([
    [0.95, 0.05, 0.0],
    [0.0, 0.433, 0.567],
    [0.0, 0.475, 0.525],
])

ACHROMATOPSIA = _frozen([
    [0.2126, 0.7152, 0.0722],
    [0.2126, 0.7152, 0.0722],
    [0.2126, 0.7152, 0.0722],
])

TRITANOMALY_MILD = _frozen([
    [0.9, 0.1, 0.0],
    [0.0, 0.8, 0.2],
    [0.0, 0.2, 0.8],
])

TRITANOMALY_MODERATE = _frozen([
    [0.95, 0.05, 0.0],
    [0.0, 0.6, 0.4],
    [0.0, 0.4, 0.6],
])

DISCRETE_TARGETS: Dict[ColorCondition, Matrix] = {
    ColorCondition.PROTANOPIA: PROTANOPIA,
    ColorCondition.DEUTERANOPIA: DEUTERANOPIA,
    ColorCondition.TRITANOPIA: TRITANOPIA,
    ColorCondition.ACHROMATOPSIA: ACHROMATOPSIA,
    ColorCondition.PROTANOMALY: PROTANOPIA,
    ColorCondition.DEUTERANOMALY: DEUTERANOPIA,
    ColorCondition.TRITANOMALY: TRITANOPIA,
}

TWO_TIER = (ColorCondition.PROTANOMALY, ColorCondition.DEUTERANOMALY)

# (breakpoint start, segment width, from-matrix, to-matrix)
TRITANOMALY_SEGMENTS: Tuple[Tuple[float, float, Matrix, Matrix], ...] = (
    (0.0, 0.33, IDENTITY, TRITANOMALY_MILD),
    (0.33, 0.33, TRITANOMALY_MILD, TRITANOMALY_MODERATE),
    (0.66, 0.34, TRITANOMALY_MODERATE, TRITANOPIA),
)


# ============================================================
# INTERPOLATION
# ============================================================

def smoothstep(s: float) -> float:
    """s^2 (3 - 2s) on a clamped input."""
    s = clamp_unit(s)
    return s * s * (3.0 - 2.0 * s)


def lerp_matrix(a: Matrix, b: Matrix, weight: float) -> Matrix:
    """Row-wise linear interpolation a -> b."""
    return a + (b - a) * weight


def _resolve(condition: Union[str, ColorCondition]) -> ColorCondition:
    if isinstance(condition, ColorCondition):
        return condition
    if condition in _ALIASES:
        return _ALIASES[condition]
    try:
        return ColorCondition(condition)
    except ValueError:
        raise ValueError(f"Unknown color condition '{condition}'") from None


def is_color_condition(condition_id: str) -> bool:
    try:
        _resolve(condition_id)
    except ValueError:
        return False
    return True


def discrete_matrix(condition: Union[str, ColorCondition]) -> Matrix:
    """Full-severity target matrix for a condition."""
    return DISCRETE_TARGETS[_resolve(condition)]


def _three_tier(severity: float) -> Matrix:
    eased = smoothstep(severity)
    for start, width, lower, upper in TRITANOMALY_SEGMENTS:
        if eased < start + width:
            return lerp_matrix(lower, upper, (eased - start) / width)
    _, _, lower, upper = TRITANOMALY_SEGMENTS[-1]
    return lerp_matrix(lower, upper, 1.0)


def matrix_for(condition: Union[str, ColorCondition], severity: float) -> Matrix:
    """
    Color matrix for a condition at a given severity.

    Args:
        condition: Condition enum or id
        severity: Strength, clamped to [0, 1]

    Returns:
        New 3x3 float64 matrix; identity at 0, the discrete target at 1

    Raises:
        ValueError: If the condition has no color transform
    """
    cond = _resolve(condition)
    s = clamp_unit(severity)

    if s <= 0.0:
        return IDENTITY.copy()
    if s >= 1.0:
        return DISCRETE_TARGETS[cond].copy()
    if cond is ColorCondition.TRITANOMALY:
        return _three_tier(s)
    if cond in TWO_TIER:
        return lerp_matrix(IDENTITY, DISCRETE_TARGETS[cond], smoothstep(s))
    return lerp_matrix(IDENTITY, DISCRETE_TARGETS[cond], s)


# ============================================================
# FRAME APPLICATION
# ============================================================

def _build_decode_lut() -> NDArray[np.float32]:
    c = np.arange(256, dtype=np.float64) / 255.0
    linear = np.where(c <= 0.04045, c / 12.92, np.power((c + 0.055) / 1.055, 2.4))
    return linear.astype(np.float32)


_SRGB_TO_LINEAR = _build_decode_lut()
_SRGB_TO_LINEAR.setflags(write=False)


def linear_to_srgb(linear: NDArray[np.float32]) -> NDArray[np.float32]:
    """Encode linear light to sRGB in 0-255 (unrounded, unclamped)."""
    linear = np.maximum(linear, 0.0)
    encoded = np.where(
        linear <= 0.0031308,
        linear * 12.92,
        1.055 * np.power(linear, 1.0 / 2.4) - 0.055,
    )
    return encoded * 255.0


def apply_color_matrix(
    frame: NDArray[np.uint8],
    matrix: Matrix,
    intensity: float = 1.0,
) -> NDArray[np.uint8]:
    """
    Apply a color matrix to an RGB frame in linear light.

    Args:
        frame: RGB frame (H x W x 3) uint8
        matrix: 3x3 transform
        intensity: Mix between original (0) and transformed (1)

    Returns:
        New RGB frame
    """
    intensity = clamp_unit(intensity)
    if intensity <= 0.0:
        return frame.copy()
    if frame.ndim != 3 or frame.shape[2] != 3:
        logger.warning(f"apply_color_matrix expects HxWx3, got {frame.shape}")
        return frame.copy()

    linear = _SRGB_TO_LINEAR[frame]
    transformed = linear @ np.asarray(matrix, dtype=np.float32).T
    srgb = np.clip(np.round(linear_to_srgb(transformed)), 0, 255)

    original = frame.astype(np.float32)
    result = original * (1.0 - intensity) + srgb * intensity

    return np.clip(np.round(result), 0, 255).astype(np.uint8)
