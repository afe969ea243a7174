"""
Double vision: a displaced ghost copy of the underlying image.

Monocular diplopia shows a faint blurred ghost multiplied over the
image; binocular diplopia shows a sharper second image at half opacity.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from src.core.contracts import BlendMode, DiplopiaParams, DiplopiaTransform, DirectionBucket, OverlayFrame


MONOCULAR = "diplopiaMonocular"
BINOCULAR = "diplopiaBinocular"

MAX_OFFSET_PX = {MONOCULAR: 15.0, BINOCULAR: 20.0}
GHOST_Z_INDEX = 1001
MONOCULAR_BLUR_PX = 2.0


def direction_bucket(direction: float) -> DirectionBucket:
    if direction < 0.33:
        return DirectionBucket.HORIZONTAL
    if direction < 0.66:
        return DirectionBucket.VERTICAL
    return DirectionBucket.DIAGONAL


def ghost_offset(total: float, bucket: DirectionBucket) -> Tuple[float, float]:
    """Pixel offset for a given displacement and direction bucket."""
    if bucket is DirectionBucket.HORIZONTAL:
        return total, 0.0
    if bucket is DirectionBucket.VERTICAL:
        return 0.0, total * 0.5
    return total * 0.7, total * 0.35


def diplopia_transform(
    condition_id: str,
    intensity: float,
    params: Optional[Dict] = None,
) -> DiplopiaTransform:
    """
    Compute the ghost-image placement.

    Args:
        condition_id: diplopiaMonocular or diplopiaBinocular
        intensity: Severity in [0, 1]
        params: Optional "separation" and "direction", both in [0, 1]

    Returns:
        DiplopiaTransform with pixel offsets and ghost styling
    """
    if condition_id not in MAX_OFFSET_PX:
        raise ValueError(f"Unknown diplopia condition: {condition_id}")

    controls = DiplopiaParams.from_params(params)
    bucket = direction_bucket(controls.direction)
    offset_x, offset_y = ghost_offset(intensity * MAX_OFFSET_PX[condition_id] * controls.separation, bucket)

    if condition_id == MONOCULAR:
        return DiplopiaTransform(
            offset_x=offset_x,
            offset_y=offset_y,
            opacity=0.3 + intensity * 0.2,
            blur_px=MONOCULAR_BLUR_PX,
            blend_mode=BlendMode.MULTIPLY,
            direction=bucket,
            z_index=GHOST_Z_INDEX,
        )
    return DiplopiaTransform(
        offset_x=offset_x,
        offset_y=offset_y,
        opacity=0.5,
        blur_px=0.0,
        blend_mode=BlendMode.NORMAL,
        direction=bucket,
        z_index=GHOST_Z_INDEX,
    )


def generate_diplopia(condition_id: str, intensity: float, time_ms: float, params: Dict) -> OverlayFrame:
    """Frame carrying only the ghost transform; static over time."""
    ghost = diplopia_transform(condition_id, intensity, params)
    return OverlayFrame(
        condition_id=condition_id,
        blend_mode=ghost.blend_mode,
        z_index=ghost.z_index,
        opacity=ghost.opacity,
        blur_px=ghost.blur_px,
        translate_px=(ghost.offset_x, ghost.offset_y),
        ghost=ghost,
    )
