"""
Charles Bonnet Episode Tests

Covers:
1. Episode length, seed and fade envelope
2. Pattern selection counts and determinism
3. Frame structure
"""

import math

import pytest

from src.overlays import compose_frame, episode_timing, select_episode
from src.overlays.hallucinations import (
    COMPLEX_BUILDERS,
    COMPLEX_PATTERNS,
    EpisodeConfig,
    SIMPLE_PATTERNS,
    episode_duration,
    episode_patterns,
)
from src.timing import seeded_random


class TestEpisodeTiming:

    def test_duration_formula(self):
        expected = 10000 + seeded_random(math.floor(0.5 * 1000)) * 5000
        assert episode_duration(0.5) == pytest.approx(expected)
        assert 10000 <= episode_duration(0.9) < 15000

    def test_seed_and_progress(self):
        duration = episode_duration(0.7)
        timing = episode_timing(duration * 2.5, 0.7)
        assert timing.seed == 2
        assert timing.progress == pytest.approx(0.5)
        assert timing.opacity == pytest.approx(1.0)

    def test_fade_in_and_out(self):
        duration = episode_duration(0.7)
        assert episode_timing(0.0, 0.7).opacity == 0.0
        assert episode_timing(duration * 0.1, 0.7).opacity == pytest.approx(0.5)
        assert episode_timing(duration * 0.95, 0.7).opacity == pytest.approx(0.25)

    def test_start_time_skips_fade_in(self):
        timing = episode_timing(5000.0, 0.7, start_ms=5000.0)
        assert timing.progress == pytest.approx(0.1)
        assert timing.opacity == pytest.approx(0.5)


class TestSelection:

    @pytest.mark.parametrize("intensity, n_simple, n_complex", [
        (0.0, 1, 0),
        (0.4, 2, 0),
        (0.5, 2, 1),
        (0.8, 3, 1),
        (1.0, 3, 2),
    ])
    def test_counts_grow_with_intensity(self, intensity, n_simple, n_complex):
        config = select_episode(7, intensity)
        assert len(config.simple) == n_simple
        assert len(config.complex) == n_complex

    def test_selection_is_deterministic(self):
        assert select_episode(11, 0.9) == select_episode(11, 0.9)

    def test_selected_names_are_known_and_distinct(self):
        config = select_episode(3, 1.0)
        assert set(config.simple) <= set(SIMPLE_PATTERNS)
        assert set(config.complex) <= set(COMPLEX_PATTERNS)
        assert len(set(config.simple)) == len(config.simple)
        assert set(config.colored) == set(config.simple) | set(config.complex)

    def test_shapeless_patterns_keep_their_slot(self):
        config = select_episode(2, 1.0)
        assert len(config.complex) == 2
        drawn = [name for name in config.complex if name in COMPLEX_BUILDERS]
        assert drawn == ["humanSilhouette"]

    def test_bird_and_shadow_blob_draw_nothing(self):
        config = EpisodeConfig(complex=["bird", "shadowBlob"])
        assert episode_patterns(config, 1.0, 0.5, 0.5, 4) == []


class TestFrame:

    def test_vision_loss_sits_beneath_patterns(self):
        frame = compose_frame("hallucinations", 0.8, 12345.0)
        names = [layer.name for layer in frame.layers]
        assert names[:3] == ["vision_loss_lower", "vision_loss_upper", "vision_loss_main"]
        flashes = [i for i, n in enumerate(names) if n.startswith("persistent_flash")]
        assert len(flashes) == math.floor(2 + 0.8 * 3)
        assert min(flashes) > 2
        assert frame.opacity == pytest.approx(min(0.9, 0.6 + 0.8 * 0.3))
