"""
Glyph Stream Tests

Covers:
1. Trail shading monotonicity
2. Column arena sizing and recycling
3. Tick lifecycle (before resize, after resize, resize to zero)
4. Seeded reproducibility and glitch slices
"""

import numpy as np
import pytest

from src.core.contracts import GlyphColumn
from src.glyph_stream import ALPHABET, CELL_SIZE, ColumnArena, GlitchTimer, GlyphStream, trail_alpha, trail_style
from src.glyph_stream.glyph_rain import displace_slice, mutate_column


class TestTrailShading:

    @pytest.mark.parametrize("trail_length", [20, 27, 34])
    @pytest.mark.parametrize("brightness", [0.6, 0.8, 1.0])
    def test_alpha_never_increases_down_the_trail(self, trail_length, brightness):
        alphas = [trail_style(i, trail_length, brightness, 1.0).alpha for i in range(trail_length)]
        assert all(a >= b for a, b in zip(alphas, alphas[1:]))

    def test_head_is_pale_with_wide_glow(self):
        head = trail_style(0, 20, 1.0, 1.0)
        assert head.color == (220, 255, 220)
        assert head.glow_px > trail_style(10, 20, 1.0, 1.0).glow_px

    def test_base_alpha_is_linear(self):
        assert trail_alpha(0, 20, 1.0, 1.0) == 1.0
        assert trail_alpha(10, 20, 0.8, 0.5) == pytest.approx(0.2)

    def test_alphas_bounded(self):
        for i in range(30):
            assert 0.0 <= trail_style(i, 30, 1.0, 1.0).alpha <= 1.0


class TestColumnArena:

    def test_one_column_per_cell(self):
        arena = ColumnArena(14)
        arena.reset(200, 100, np.random.default_rng(0))
        assert len(arena) == 200 // 14
        assert [c.x for c in arena] == [float(i * 14) for i in range(len(arena))]

    def test_spawn_ranges(self):
        arena = ColumnArena(14)
        arena.reset(700, 300, np.random.default_rng(5))
        for column in arena:
            assert -300 <= column.y <= 0
            assert 3 <= column.speed <= 8
            assert 25 <= len(column.glyphs) < 45
            assert 20 <= column.trail_length < 35
            assert 0.75 <= column.brightness <= 1.0

    def test_recycle_moves_above_view_with_fresh_glyphs(self):
        arena = ColumnArena(14)
        rng = np.random.default_rng(9)
        arena.reset(140, 100, rng)
        column = arena[0]
        column.y = 5000.0
        before = list(column.glyphs)
        arena.recycle(column, rng)
        assert column.y <= 0
        assert len(column.glyphs) == len(before)
        assert column.glyphs != before
        assert 2 <= column.speed <= 6
        assert 0.6 <= column.brightness <= 1.0

    def test_mutation_changes_at_most_one_glyph(self):
        rng = np.random.default_rng(3)
        column = GlyphColumn(x=0.0, y=0.0, speed=3.0, glyphs=list("ABCDEFGH"), trail_length=20, brightness=1.0)
        before = list(column.glyphs)
        for _ in range(50):
            snapshot = list(column.glyphs)
            mutate_column(column, rng)
            assert sum(a != b for a, b in zip(snapshot, column.glyphs)) <= 1
        assert len(column.glyphs) == len(before)
        assert set(column.glyphs) <= set(ALPHABET) | set(before)


class TestStreamLifecycle:

    def test_tick_before_resize_is_noop(self):
        stream = GlyphStream(seed=1)
        assert not stream.is_ready
        assert stream.tick(0.0) is None

    def test_resize_builds_columns(self):
        stream = GlyphStream(seed=1)
        stream.resize(280, 120)
        assert stream.size == (280, 120)
        assert len(stream.columns) == 280 // CELL_SIZE

    def test_resize_to_zero_disables(self, glyph_stream):
        glyph_stream.resize(0, 0)
        assert glyph_stream.tick(16.0) is None

    def test_tick_produces_rgba_frame(self, glyph_stream):
        frame = glyph_stream.tick(0.0, 0.8)
        assert frame.pixels.shape == (98, 140, 4)
        assert frame.pixels.dtype == np.uint8
        assert frame.backdrop_alpha == pytest.approx(0.85 * 0.8)
        assert frame.z_index == 9999

    def test_columns_fall_over_time(self, glyph_stream):
        glyph_stream.tick(0.0)
        before = [c.y for c in glyph_stream.columns]
        glyph_stream.tick(33.34)
        after = [c.y for c in glyph_stream.columns]
        assert all(b > a for a, b in zip(before, after))

    def test_columns_recycle_after_leaving_view(self, glyph_stream):
        for step in range(120):
            glyph_stream.tick(step * 200.0)
        for column in glyph_stream.columns:
            assert column.y - column.trail_length * CELL_SIZE <= 98

    def test_seeded_streams_match(self):
        a, b = GlyphStream(seed=77), GlyphStream(seed=77)
        a.resize(140, 70)
        b.resize(140, 70)
        for t in (0.0, 16.67, 33.34):
            fa, fb = a.tick(t), b.tick(t)
        assert np.array_equal(fa.pixels, fb.pixels)
        assert [c.glyphs for c in a.columns] == [c.glyphs for c in b.columns]


class TestGlitch:

    def test_certain_glitch_starts_burst(self):
        timer = GlitchTimer(np.random.default_rng(0), probability=1.0)
        assert timer.update(1000.0)
        assert 1100.0 <= timer.end_ms <= 1250.0

    def test_burst_ends_after_deadline(self):
        timer = GlitchTimer(np.random.default_rng(0), probability=1.0)
        timer.update(0.0)
        timer.probability = 0.0
        assert not timer.update(timer.end_ms + 1.0)

    def test_slices_within_bounds(self):
        timer = GlitchTimer(np.random.default_rng(2))
        for top, band, offset in timer.slices(200):
            assert 0 <= top < 200
            assert 5 <= band < 25
            assert -15 <= offset < 15

    def test_displace_slice_shifts_rows(self):
        buffer = np.zeros((10, 10, 4), np.float32)
        buffer[2, 0] = 1.0
        displace_slice(buffer, 2, 1, 3)
        assert buffer[2, 3, 0] == 1.0

    def test_displace_slice_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            displace_slice(np.zeros((10, 10, 4), np.float32), 12, 4, 2)

    def test_glitching_stream_reports_slices(self):
        stream = GlyphStream(seed=4, glitch_probability=1.0)
        stream.resize(140, 98)
        frame = stream.tick(0.0)
        assert frame.glitched
        assert frame.slices > 0
