"""
Configuration Tests

Covers:
1. Defaults and the shipped settings file
2. YAML overrides and validation errors
"""

import pytest
from loguru import logger

from src.config import DEFAULT_CONFIG_PATH, EngineConfig, load_config


class TestLoadConfig:

    def test_defaults(self):
        config = EngineConfig()
        assert config.glyph_stream.cell_size == 14
        assert config.frame_interval_ms == 100.0
        assert config.render.field_scale == 1.0

    def test_shipped_settings_load(self):
        assert DEFAULT_CONFIG_PATH.exists()
        config = load_config()
        assert config.glyph_stream.glitch_probability == pytest.approx(0.001)

    def test_overrides_from_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "engine:\n"
            "  default_intensity: 0.8\n"
            "  frame_interval_ms: 16.67\n"
            "glyph_stream:\n"
            "  seed: 42\n"
            "render:\n"
            "  width: 320\n"
            "  height: 240\n"
        )
        config = load_config(path)
        assert config.default_intensity == 0.8
        assert config.frame_interval_ms == pytest.approx(16.67)
        assert config.glyph_stream.seed == 42
        assert config.glyph_stream.cell_size == 14
        assert (config.render.width, config.render.height) == (320, 240)

    def test_missing_file_falls_back(self, tmp_path):
        messages = []
        sink = logger.add(messages.append, level="WARNING", format="{message}")
        try:
            config = load_config(tmp_path / "nope.yaml")
        finally:
            logger.remove(sink)
        assert config == load_config(DEFAULT_CONFIG_PATH)
        assert len(messages) == 1
        assert f"falling back to {DEFAULT_CONFIG_PATH}" in messages[0]

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == EngineConfig()


class TestValidation:

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="cellsize"):
            EngineConfig.from_dict({"glyph_stream": {"cellsize": 10}})

    def test_field_scale_range(self):
        with pytest.raises(ValueError):
            EngineConfig.from_dict({"render": {"field_scale": 1.5}})

    def test_intensity_range(self):
        with pytest.raises(ValueError):
            EngineConfig.from_dict({"engine": {"default_intensity": -0.1}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ValueError):
            EngineConfig.from_dict({"render": [1, 2]})
