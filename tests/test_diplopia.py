"""
Double Vision Tests

Covers:
1. Direction buckets and thresholds
2. Ghost offsets, opacity and blend per variant
3. Frame shape produced through the compositor
"""

import pytest

from src.core.contracts import BlendMode, DirectionBucket
from src.overlays import compose_frame, diplopia_transform, direction_bucket


class TestDirectionBucket:

    @pytest.mark.parametrize("direction, bucket", [
        (0.0, DirectionBucket.HORIZONTAL),
        (0.329, DirectionBucket.HORIZONTAL),
        (0.33, DirectionBucket.VERTICAL),
        (0.659, DirectionBucket.VERTICAL),
        (0.66, DirectionBucket.DIAGONAL),
        (1.0, DirectionBucket.DIAGONAL),
    ])
    def test_thresholds(self, direction, bucket):
        assert direction_bucket(direction) is bucket


class TestTransform:

    def test_half_separation_diagonal(self):
        """separation 0.5 at direction 0.8 resolves to a diagonal offset."""
        ghost = diplopia_transform("diplopiaBinocular", 1.0, {"separation": 0.5, "direction": 0.8})
        total = 1.0 * 20.0 * 0.5
        assert ghost.direction is DirectionBucket.DIAGONAL
        assert ghost.offset_x == pytest.approx(total * 0.7)
        assert ghost.offset_y == pytest.approx(total * 0.35)

    def test_monocular_is_faint_blurred_multiply(self):
        ghost = diplopia_transform("diplopiaMonocular", 0.5)
        assert ghost.opacity == pytest.approx(0.4)
        assert ghost.blur_px == 2.0
        assert ghost.blend_mode is BlendMode.MULTIPLY
        assert ghost.offset_x == pytest.approx(7.5)
        assert ghost.offset_y == 0.0

    def test_binocular_is_sharp_half_opacity(self):
        ghost = diplopia_transform("diplopiaBinocular", 0.9, {"direction": 0.5})
        assert ghost.opacity == 0.5
        assert ghost.blur_px == 0.0
        assert ghost.blend_mode is BlendMode.NORMAL
        assert ghost.offset_x == 0.0
        assert ghost.offset_y == pytest.approx(0.9 * 20.0 * 0.5)

    def test_params_are_clamped(self):
        ghost = diplopia_transform("diplopiaBinocular", 1.0, {"separation": 4.0, "direction": -1.0})
        assert ghost.offset_x == pytest.approx(20.0)
        assert ghost.direction is DirectionBucket.HORIZONTAL

    def test_unknown_variant_raises(self):
        with pytest.raises(ValueError):
            diplopia_transform("visualAura", 1.0)

    def test_ghost_z_index(self):
        assert diplopia_transform("diplopiaMonocular", 1.0).z_index == 1001


class TestFrame:

    def test_frame_carries_ghost(self):
        frame = compose_frame("diplopiaMonocular", 0.8, 0.0, {"direction": 0.4})
        assert frame.ghost is not None
        assert frame.layers == []
        assert frame.translate_px == (0.0, pytest.approx(0.8 * 15.0 * 0.5))
        assert frame.priority == 6
        assert frame.to_dict()["ghost"]["direction"] == "vertical"

    def test_static_over_time(self):
        a = compose_frame("diplopiaBinocular", 0.6, 0.0)
        b = compose_frame("diplopiaBinocular", 0.6, 99999.0)
        assert a.to_dict() == b.to_dict()
