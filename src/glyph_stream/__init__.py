"""
Glyph Stream Module.

Responsibilities:
- Own the falling-column state for one overlay instance
- Draw brightness-graded trails into a private RGBA buffer
- Fire short slice-displacement glitch bursts
- Reinitialize columns on resize
"""

from .glyph_rain import (
    ALPHABET,
    CELL_SIZE,
    ColumnArena,
    GlitchTimer,
    GlyphStream,
    TrailStyle,
    trail_alpha,
    trail_style,
)
