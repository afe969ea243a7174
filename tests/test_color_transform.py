"""
Color Transform Tests

Covers:
1. Boundary law: identity at 0, discrete target at 1
2. Two- and three-tier eased interpolation
3. Linear-light frame application
"""

import numpy as np
import pytest

from src.color import (
    IDENTITY,
    ColorCondition,
    apply_color_matrix,
    discrete_matrix,
    is_color_condition,
    lerp_matrix,
    matrix_for,
    smoothstep,
)


ALL_CONDITIONS = [c.value for c in ColorCondition]


class TestBoundaryLaw:

    def test_deuteranopia_full_severity_is_exact(self):
        expected = np.array([[0.625, 0.375, 0.0], [0.7, 0.3, 0.0], [0.0, 0.3, 0.7]])
        assert np.array_equal(matrix_for("deuteranopia", 1.0), expected)

    def test_deuteranopia_zero_is_identity(self):
        assert np.array_equal(matrix_for("deuteranopia", 0.0), np.eye(3))

    @pytest.mark.parametrize("condition", ALL_CONDITIONS)
    def test_every_condition_hits_both_ends(self, condition):
        assert np.array_equal(matrix_for(condition, 0.0), IDENTITY)
        assert np.array_equal(matrix_for(condition, 1.0), discrete_matrix(condition))

    def test_out_of_range_severity_is_clamped(self):
        assert np.array_equal(matrix_for("protanopia", 3.0), matrix_for("protanopia", 1.0))
        assert np.array_equal(matrix_for("protanopia", -1.0), IDENTITY)

    def test_returned_matrix_is_writable_copy(self):
        m = matrix_for("tritanopia", 1.0)
        m[0, 0] = 0.0
        assert discrete_matrix("tritanopia")[0, 0] == 0.95


class TestInterpolation:

    def test_discrete_blend_is_linear(self):
        expected = lerp_matrix(IDENTITY, discrete_matrix("protanopia"), 0.5)
        assert np.allclose(matrix_for("protanopia", 0.5), expected)

    def test_two_tier_uses_smoothstep(self):
        weight = smoothstep(0.25)
        expected = lerp_matrix(IDENTITY, discrete_matrix("deuteranopia"), weight)
        assert np.allclose(matrix_for("deuteranomaly", 0.25), expected)

    def test_smoothstep_midpoint(self):
        assert smoothstep(0.5) == pytest.approx(0.5)
        assert smoothstep(0.0) == 0.0
        assert smoothstep(1.0) == 1.0

    def test_tritanomaly_passes_mild_breakpoint(self):
        """smoothstep(s) == 0.33 lands exactly on the mild matrix."""
        mild = np.array([[0.9, 0.1, 0.0], [0.0, 0.8, 0.2], [0.0, 0.2, 0.8]])
        low, high = 0.0, 1.0
        for _ in range(60):
            mid = (low + high) / 2
            if smoothstep(mid) < 0.33:
                low = mid
            else:
                high = mid
        assert np.allclose(matrix_for("tritanomaly", high), mild, atol=1e-6)

    def test_monochromacy_alias(self):
        assert is_color_condition("monochromacy")
        assert np.array_equal(matrix_for("monochromacy", 1.0), discrete_matrix("achromatopsia"))

    def test_unknown_condition_raises(self):
        with pytest.raises(ValueError):
            matrix_for("visualAura", 1.0)
        assert not is_color_condition("visualAura")


class TestFrameApplication:

    def test_identity_leaves_frame_unchanged(self, gradient_image):
        out = apply_color_matrix(gradient_image, IDENTITY)
        assert np.array_equal(out, gradient_image)

    def test_zero_intensity_is_copy(self, gradient_image):
        out = apply_color_matrix(gradient_image, discrete_matrix("achromatopsia"), intensity=0.0)
        assert np.array_equal(out, gradient_image)
        assert out is not gradient_image

    def test_achromatopsia_equalizes_channels(self, gradient_image):
        out = apply_color_matrix(gradient_image, discrete_matrix("achromatopsia"))
        assert np.abs(out[..., 0].astype(int) - out[..., 1].astype(int)).max() <= 1
        assert np.abs(out[..., 1].astype(int) - out[..., 2].astype(int)).max() <= 1

    def test_greys_survive_row_stochastic_matrices(self, grey_image):
        out = apply_color_matrix(grey_image, discrete_matrix("protanopia"))
        assert np.abs(out.astype(int) - 128).max() <= 1

    def test_output_dtype_and_shape(self, gradient_image):
        out = apply_color_matrix(gradient_image, discrete_matrix("tritanopia"))
        assert out.dtype == np.uint8
        assert out.shape == gradient_image.shape
