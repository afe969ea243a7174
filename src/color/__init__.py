"""
Color Transform Module.

Responsibilities:
- Fixed 3x3 matrices for dichromacy and monochromacy
- Eased interpolation for anomalous trichromacy (two- and three-tier)
- Linear-light application of a matrix to RGB frames
"""

from .color_transform import (
    ColorCondition,
    IDENTITY,
    matrix_for,
    discrete_matrix,
    smoothstep,
    lerp_matrix,
    apply_color_matrix,
    is_color_condition,
)
