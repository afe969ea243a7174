"""
CLI Helper Tests

Covers:
1. YAML frame descriptions
2. Parameter parsing
3. Single-frame rendering through the engine
"""

import sys

import numpy as np
import pytest
import yaml

from main import VisionOverlayEngine, _parse_params, describe_condition, calibration_card, main
from src.config import EngineConfig
from src.overlays import list_conditions


class TestDescribe:

    @pytest.mark.parametrize("condition_id", list_conditions())
    def test_description_is_valid_yaml(self, condition_id):
        data = yaml.safe_load(describe_condition(condition_id, 0.6, 1500.0, {}))
        assert data["condition_id"] == condition_id

    def test_color_condition_describes_matrix(self):
        data = yaml.safe_load(describe_condition("deuteranopia", 1.0, 0.0, {}))
        assert data["color_matrix"][0] == [0.625, 0.375, 0.0]


class TestParams:

    def test_key_value_pairs(self):
        assert _parse_params(["separation=0.5", "direction=0.8"]) == {"separation": 0.5, "direction": 0.8}

    def test_missing_separator(self):
        with pytest.raises(ValueError):
            _parse_params(["separation"])

    def test_non_numeric_value(self):
        with pytest.raises(ValueError, match="separation"):
            _parse_params(["separation=wide"])

    @pytest.mark.parametrize("bad", ["foo", "k=abc"])
    def test_bad_param_exits_with_usage_error(self, bad, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["main.py", "--condition", "visualAura", "--param", bad])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 2
        assert "error:" in capsys.readouterr().err


class TestEngine:

    @pytest.mark.parametrize("condition_id", ["visualAura", "protanomaly", "neoMatrixCodeVision", "diplopiaMonocular"])
    def test_render_keeps_shape(self, condition_id):
        card = calibration_card(80, 60)
        engine = VisionOverlayEngine(EngineConfig(), condition_id, 0.7)
        out = engine.render(card, 500.0)
        assert out.shape == card.shape
        assert out.dtype == np.uint8
