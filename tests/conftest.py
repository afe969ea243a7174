"""Shared fixtures for the Vision Overlay Engine tests."""

import numpy as np
import pytest

from src.glyph_stream import GlyphStream
from src.render import RenderTargetAdapter


@pytest.fixture
def glyph_stream():
    """Seeded stream sized to a small surface."""
    stream = GlyphStream(seed=1234)
    stream.resize(140, 98)
    return stream


@pytest.fixture
def grey_image():
    """64x48 mid-grey BGR frame."""
    return np.full((48, 64, 3), 128, dtype=np.uint8)


@pytest.fixture
def gradient_image():
    """64x48 BGR frame with distinct values per pixel."""
    y, x = np.mgrid[0:48, 0:64]
    return np.stack([x * 4, y * 5, (x + y) * 2], axis=-1).astype(np.uint8)


@pytest.fixture
def adapter():
    return RenderTargetAdapter()
