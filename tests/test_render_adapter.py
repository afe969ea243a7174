"""
Render Target Adapter Tests

Covers:
1. Separable blend modes
2. Field geometry for each layer kind
3. Rasterization and compositing (layers, ghosts, colour, glyphs)
4. Declarative description
"""

import numpy as np
import pytest

from src.core.contracts import BlendMode, GlyphFrame, OverlayFrame
from src.overlays import compose_frame
from src.overlays.layers import WHITE, circle, clear, conic, linear, radial, repeating_linear, solid
from src.render import RenderTargetAdapter, blend, field_position


def grid(width, height):
    xs = np.arange(width, dtype=np.float32) + 0.5
    ys = np.arange(height, dtype=np.float32) + 0.5
    return np.meshgrid(xs, ys)


class TestBlend:

    def setup_method(self):
        self.base = np.random.default_rng(0).random((4, 4, 3)).astype(np.float32)
        self.full = np.ones((4, 4), np.float32)

    def test_screen_with_black_is_noop(self):
        out = blend(self.base, np.zeros_like(self.base), self.full, BlendMode.SCREEN)
        assert np.allclose(out, self.base)

    def test_multiply_with_white_is_noop(self):
        out = blend(self.base, np.ones_like(self.base), self.full, BlendMode.MULTIPLY)
        assert np.allclose(out, self.base)

    def test_hard_light_with_mid_grey_is_noop(self):
        out = blend(self.base, np.full_like(self.base, 0.5), self.full, BlendMode.HARD_LIGHT)
        assert np.allclose(out, self.base)

    def test_normal_at_zero_alpha_is_noop(self):
        out = blend(self.base, np.ones_like(self.base), np.zeros((4, 4), np.float32), BlendMode.NORMAL)
        assert np.allclose(out, self.base)

    def test_normal_at_full_alpha_replaces(self):
        out = blend(self.base, np.ones_like(self.base), self.full, BlendMode.NORMAL)
        assert np.allclose(out, 1.0)

    def test_screen_never_darkens(self):
        source = np.random.default_rng(1).random((4, 4, 3)).astype(np.float32)
        out = blend(self.base, source, self.full, BlendMode.SCREEN)
        assert np.all(out >= self.base - 1e-6)


class TestFieldGeometry:

    def test_radial_center_is_zero(self):
        x, y = grid(100, 100)
        layer = radial("r", (50, 50), (50, 50), [(0, WHITE, 1.0), clear(100)])
        pos = field_position(layer, x, y, 100.0, 100.0)
        assert pos[50, 50] < 2.0
        assert pos[50, 99] == pytest.approx(99.0, abs=1.0)

    def test_linear_top_to_bottom(self):
        x, y = grid(10, 100)
        pos = field_position(linear("l", 180, [(0, WHITE, 1.0)]), x, y, 10.0, 100.0)
        assert pos[0, 5] == pytest.approx(0.5, abs=0.01)
        assert pos[99, 5] == pytest.approx(99.5, abs=0.01)

    def test_conic_starts_at_top(self):
        x, y = grid(101, 101)
        layer = conic("c", (50, 50), 0.0, [(0, WHITE, 1.0)])
        pos = field_position(layer, x, y, 101.0, 101.0)
        assert pos[50, 100] == pytest.approx(90.0, abs=2.0)
        assert pos[100, 50] == pytest.approx(180.0, abs=2.0)

    def test_repeating_linear_wraps_period(self):
        x, y = grid(10, 40)
        layer = repeating_linear("s", 180, 10.0, [(0, WHITE, 1.0), clear(10)])
        pos = field_position(layer, x, y, 10.0, 40.0)
        assert pos.max() < 10.0
        assert pos[0, 0] == pytest.approx(pos[10, 0], abs=1e-4)

    def test_circle_reaches_farthest_corner(self):
        x, y = grid(100, 100)
        layer = circle("c", (0, 0), [(0, WHITE, 1.0), clear(100)])
        pos = field_position(layer, x, y, 100.0, 100.0)
        assert pos.max() <= 100.0


class TestRasterize:

    def test_shape_and_dtype(self, adapter):
        frame = compose_frame("visualAura", 0.7, 1000.0)
        pixels = adapter.rasterize(frame, 64, 48)
        assert pixels.shape == (48, 64, 4)
        assert pixels.dtype == np.uint8

    def test_empty_frame_is_transparent(self, adapter):
        pixels = adapter.rasterize(OverlayFrame.empty("x"), 32, 16)
        assert not pixels.any()

    def test_solid_layer_is_uniform(self, adapter):
        frame = OverlayFrame("t", layers=[solid("s", (10, 20, 30), 0.5)])
        pixels = adapter.rasterize(frame, 8, 8)
        assert np.all(pixels[..., 3] == 128)
        assert np.all(pixels[..., 0] == 10)

    def test_radial_fades_outward(self, adapter):
        frame = OverlayFrame("t", layers=[radial("r", (50, 50), (50, 50), [(0, WHITE, 1.0), clear(100)])])
        pixels = adapter.rasterize(frame, 40, 40)
        assert pixels[20, 20, 3] > pixels[20, 35, 3] > pixels[0, 0, 3]

    def test_bounds_clip_layer(self, adapter):
        frame = OverlayFrame("t", layers=[linear("l", 180, [(0, WHITE, 1.0), (100, WHITE, 1.0)], bounds=(0, 0, 50, 100))])
        pixels = adapter.rasterize(frame, 20, 10)
        assert np.all(pixels[:, :10, 3] == 255)
        assert np.all(pixels[:, 10:, 3] == 0)

    def test_field_scale_matches_full_resolution_shape(self):
        frame = compose_frame("visualAura", 0.6, 500.0)
        full = RenderTargetAdapter().rasterize(frame, 64, 48)
        half = RenderTargetAdapter(field_scale=0.5).rasterize(frame, 64, 48)
        assert half.shape == full.shape
        assert np.abs(full.astype(int) - half.astype(int)).mean() < 20

    def test_rejects_bad_field_scale(self):
        with pytest.raises(ValueError):
            RenderTargetAdapter(field_scale=0.0)


class TestComposite:

    def test_empty_frame_leaves_image_unchanged(self, adapter, gradient_image):
        out = adapter.composite(gradient_image, OverlayFrame.empty("x"))
        assert np.array_equal(out, gradient_image)
        assert out is not gradient_image

    def test_opaque_black_layer(self, adapter, gradient_image):
        frame = OverlayFrame("t", layers=[solid("s", (0, 0, 0), 1.0)])
        assert not adapter.composite(gradient_image, frame).any()

    def test_input_not_mutated(self, adapter, gradient_image):
        before = gradient_image.copy()
        adapter.composite(gradient_image, compose_frame("geordiVisorSenseComplete", 1.0, 700.0))
        assert np.array_equal(before, gradient_image)

    def test_ghost_on_uniform_image_is_invisible(self, adapter, grey_image):
        frame = compose_frame("diplopiaBinocular", 1.0, 0.0)
        assert np.array_equal(adapter.composite(grey_image, frame), grey_image)

    def test_ghost_doubles_edges(self, adapter, gradient_image):
        frame = compose_frame("diplopiaBinocular", 1.0, 0.0)
        out = adapter.composite(gradient_image, frame)
        assert not np.array_equal(out, gradient_image)
        # columns left of the ghost offset see no ghost
        assert np.array_equal(out[:, :19], gradient_image[:, :19])

    def test_composite_all_applies_in_order(self, adapter, grey_image):
        frames = [
            OverlayFrame("a", layers=[solid("s", (255, 255, 255), 1.0)]),
            OverlayFrame("b", layers=[solid("s", (0, 0, 0), 1.0)]),
        ]
        assert not adapter.composite_all(grey_image, frames).any()

    def test_apply_color_bgr(self, adapter):
        red_bgr = np.zeros((2, 2, 3), np.uint8)
        red_bgr[..., 2] = 255
        out = adapter.apply_color(red_bgr, "achromatopsia", 1.0)
        assert out[0, 0, 0] == out[0, 0, 1] == out[0, 0, 2]

    def test_apply_color_zero_intensity(self, adapter, gradient_image):
        assert np.array_equal(adapter.apply_color(gradient_image, "protanopia", 0.0), gradient_image)


class TestGlyphComposite:

    def test_missing_frame_is_noop(self, adapter, grey_image):
        assert np.array_equal(adapter.composite_glyphs(grey_image, None), grey_image)

    def test_backdrop_darkens(self, adapter, grey_image):
        pixels = np.zeros((48, 64, 4), np.uint8)
        out = adapter.composite_glyphs(grey_image, GlyphFrame(pixels=pixels, backdrop_alpha=0.85))
        assert out.mean() < 40

    def test_stream_frame_composites(self, adapter, glyph_stream):
        image = np.full((98, 140, 3), 200, np.uint8)
        out = adapter.composite_glyphs(image, glyph_stream.tick(0.0))
        assert out.shape == image.shape
        assert out[..., 1].mean() >= out[..., 2].mean()


class TestDescribe:

    def test_overlay_description(self, adapter):
        data = adapter.describe(compose_frame("palinopsia", 0.5, 2000.0))
        assert data["condition_id"] == "palinopsia"
        assert all("kind" in layer for layer in data["layers"])

    def test_glyph_description(self, adapter, glyph_stream):
        data = adapter.describe(glyph_stream.tick(0.0))
        assert data["kind"] == "glyph-stream"
        assert data["size"] == [140, 98]
