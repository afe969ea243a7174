"""
Core contracts for the Vision Overlay Engine.

Data flow per animation tick (NEVER REORDER):
1. Host supplies (condition id, intensity, time, params)
2. Phase clock derives periodic phases
3. Temporal state machine derives multipliers (when the condition uses one)
4. Layer compositor or glyph stream produces the frame
5. Render target adapter hands the frame to the host
"""

from .contracts import (
    BlendMode,
    LayerKind,
    DirectionBucket,
    ColorStop,
    OverlayLayer,
    OverlayFrame,
    ConditionState,
    StateReading,
    DiplopiaParams,
    DiplopiaTransform,
    GlyphColumn,
    GlyphFrame,
    clamp_unit,
)
