"""
Overlay Module.

Responsibilities:
- Build per-condition layer stacks from phase clock and state readings
- Keep the closed registry of condition ids
- Order multiple active conditions for compositing
- Never raise to the host during a tick
"""

from .compositor import (
    CONDITION_GENERATORS,
    GLYPH_STREAM_CONDITIONS,
    LayerCompositor,
    compose_frame,
    get_generator,
    layer_priority,
    list_conditions,
)
from .diplopia import diplopia_transform, direction_bucket
from .hallucinations import episode_timing, select_episode
