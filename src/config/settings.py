"""
Engine settings.

Settings are plain dataclasses. Values come from a YAML file with the
sections ``engine``, ``glyph_stream``, ``render`` and ``logging``; any
missing key keeps its dataclass default.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from loguru import logger


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "settings.yaml"


@dataclass
class GlyphStreamConfig:
    """Glyph rain settings."""
    cell_size: int = 14
    seed: Optional[int] = None
    glitch_probability: float = 0.001

    def __post_init__(self):
        if self.cell_size <= 0:
            raise ValueError(f"glyph_stream.cell_size must be positive, got {self.cell_size}")
        if not 0.0 <= self.glitch_probability <= 1.0:
            raise ValueError(
                f"glyph_stream.glitch_probability must be in [0, 1], got {self.glitch_probability}"
            )


@dataclass
class RenderConfig:
    """Output surface settings."""
    width: int = 1280
    height: int = 720
    # Gradient fields are evaluated at this fraction of the output size
    field_scale: float = 1.0

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"render size must be positive, got {self.width}x{self.height}")
        if not 0.0 < self.field_scale <= 1.0:
            raise ValueError(f"render.field_scale must be in (0, 1], got {self.field_scale}")


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = "logs/vision_overlay.log"


@dataclass
class EngineConfig:
    """
    Top-level engine configuration.

    Guarantees:
    - Every value is validated on construction
    - Constant tables (matrices, state durations, alphabet) are NOT configurable
    """
    default_intensity: float = 0.5
    frame_interval_ms: float = 100.0
    glyph_stream: GlyphStreamConfig = field(default_factory=GlyphStreamConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        if not 0.0 <= self.default_intensity <= 1.0:
            raise ValueError(f"engine.default_intensity must be in [0, 1], got {self.default_intensity}")
        if self.frame_interval_ms <= 0:
            raise ValueError(f"engine.frame_interval_ms must be positive, got {self.frame_interval_ms}")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> EngineConfig:
        """
        Build a config from parsed YAML.

        Args:
            data: Mapping with optional engine/glyph_stream/render/logging sections

        Returns:
            Validated EngineConfig

        Raises:
            ValueError: On unknown keys or out-of-range values
        """
        data = data or {}
        engine = _section(data, "engine")
        return cls(
            default_intensity=float(engine.get("default_intensity", cls.default_intensity)),
            frame_interval_ms=float(engine.get("frame_interval_ms", cls.frame_interval_ms)),
            glyph_stream=_build(GlyphStreamConfig, _section(data, "glyph_stream")),
            render=_build(RenderConfig, _section(data, "render")),
            logging=_build(LoggingConfig, _section(data, "logging")),
        )


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be a mapping, got {type(section).__name__}")
    return section


def _build(cls, section: Dict[str, Any]):
    known = {f.name for f in fields(cls)}
    unknown = set(section) - known
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {', '.join(sorted(unknown))}")
    return cls(**section)


def load_config(path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """
    Load configuration from file.

    Falls back to the project's config/settings.yaml, then to defaults.

    Args:
        path: Optional YAML file path

    Returns:
        EngineConfig
    """
    candidates = [Path(path)] if path else []
    candidates.append(DEFAULT_CONFIG_PATH)

    for candidate in candidates:
        if candidate.exists():
            with open(candidate) as f:
                data = yaml.safe_load(f)
            logger.debug(f"Loaded config from {candidate}")
            return EngineConfig.from_dict(data)
        if path and candidate == Path(path):
            logger.warning(f"Config file not found: {candidate}, falling back to {DEFAULT_CONFIG_PATH}")

    return EngineConfig()
