"""
Render Module.

Responsibilities:
- Describe overlay frames as plain data
- Rasterize layer stacks to RGBA
- Blend frames, ghosts, colour transforms and glyph rain onto host images
"""

from .adapter import RenderTargetAdapter, blend, evaluate_layer, field_position
