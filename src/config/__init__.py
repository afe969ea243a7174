"""
Configuration Module.

Responsibilities:
- Engine, glyph stream, render and logging settings
- YAML loading with a project default and dataclass fallbacks
"""

from .settings import (
    EngineConfig,
    GlyphStreamConfig,
    RenderConfig,
    LoggingConfig,
    load_config,
    DEFAULT_CONFIG_PATH,
)
