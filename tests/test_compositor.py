"""
Layer Compositor Tests

Covers:
1. Determinism of every registered generator
2. Opacity bounds over ids, times and intensities
3. Unknown ids, zero intensity and failing generators
4. Stacking priority and multi-condition ordering
"""

import pytest

from src.core.contracts import ConditionState, OverlayFrame
from src.overlays import (
    CONDITION_GENERATORS,
    LayerCompositor,
    compose_frame,
    get_generator,
    layer_priority,
    list_conditions,
)
from src.overlays import compositor
from src.overlays.hallucinations import episode_duration, episode_timing


CONDITION_IDS = sorted(CONDITION_GENERATORS)
TIMES_MS = [0.0, 16.67, 1234.5, 8500.0, 33000.0, 125000.0]
INTENSITIES = [0.05, 0.3, 0.5, 0.8, 1.0]


class TestDeterminism:

    @pytest.mark.parametrize("condition_id", CONDITION_IDS)
    def test_same_inputs_same_frame(self, condition_id):
        params = {"separation": 0.5, "direction": 0.5}
        first = compose_frame(condition_id, 0.7, 4321.0, params)
        second = compose_frame(condition_id, 0.7, 4321.0, params)
        assert first.to_dict() == second.to_dict()

    def test_hallucination_start_param_shifts_episode(self):
        a = compose_frame("hallucinations", 0.8, 20000.0)
        b = compose_frame("hallucinations", 0.8, 20000.0, {"start_ms": 19000.0})
        assert a.success and b.success
        assert a.to_dict() != b.to_dict()
        timing = episode_timing(20000.0, 0.8, start_ms=19000.0)
        assert timing.progress == pytest.approx(0.1 + 1000.0 / episode_duration(0.8))


class TestOpacityBounds:

    @pytest.mark.parametrize("condition_id", CONDITION_IDS)
    def test_all_alphas_in_unit_interval(self, condition_id):
        for t in TIMES_MS:
            for level in INTENSITIES:
                frame = compose_frame(condition_id, level, t)
                assert frame.success, frame.error_message
                for value in frame.alphas():
                    assert 0.0 <= value <= 1.0, (condition_id, t, level, value)

    @pytest.mark.parametrize("condition_id", CONDITION_IDS)
    def test_frames_have_content(self, condition_id):
        frame = compose_frame(condition_id, 0.8, 2500.0)
        assert not frame.is_empty

    @pytest.mark.parametrize("condition_id", CONDITION_IDS)
    def test_zero_intensity_is_empty(self, condition_id):
        frame = compose_frame(condition_id, 0.0, 1000.0)
        assert frame.success
        assert frame.is_empty

    def test_intensity_above_one_is_clamped(self):
        high = compose_frame("visualAura", 5.0, 1000.0)
        full = compose_frame("visualAura", 1.0, 1000.0)
        assert high.to_dict() == full.to_dict()


class TestFailures:

    def test_unknown_condition_returns_empty_frame(self):
        frame = compose_frame("notACondition", 1.0, 0.0)
        assert frame.is_empty
        assert frame.success is False
        assert "notACondition" in frame.error_message

    def test_get_generator_lists_available(self):
        with pytest.raises(ValueError, match="visualAura"):
            get_generator("notACondition")

    def test_generator_exception_is_contained(self, monkeypatch):
        def broken(condition_id, intensity, time_ms, params):
            raise RuntimeError("boom")

        monkeypatch.setitem(compositor.CONDITION_GENERATORS, "visualAura", broken)
        frame = compose_frame("visualAura", 0.5, 0.0)
        assert frame.is_empty
        assert frame.success is False
        assert frame.error_message == "boom"

    def test_registry_listing_is_sorted(self):
        names = list_conditions()
        assert names == sorted(names)
        assert "neoMatrixCodeVision" in names


class TestLayerOrdering:

    def test_layers_are_bottom_first(self):
        """Ptosis droop is drawn last, over the lid layers."""
        frame = compose_frame("anselmoOcularMyasthenia", 0.8, 9000.0)
        names = [layer.name for layer in frame.layers]
        assert names[0] == "left_eyelid"
        assert names[-1] == "ptosis"

    def test_priority_table(self):
        assert layer_priority("hemianopiaLeft") == 1
        assert layer_priority("glaucoma") == 2
        assert layer_priority("palinopsia") == 3
        assert layer_priority("visualFloaters") == 4
        assert layer_priority("visualAuraLeft") == 5
        assert layer_priority("diplopiaBinocular") == 6

    def test_compose_active_sorts_and_filters(self):
        states = [
            ConditionState("diplopiaMonocular", intensity=0.6),
            ConditionState("visualAura", intensity=0.6),
            ConditionState("visualFloaters", intensity=0.6),
            ConditionState("palinopsia", enabled=False, intensity=0.6),
            ConditionState("starbursting", intensity=0.0),
            ConditionState("notACondition", intensity=1.0),
        ]
        frames = LayerCompositor().compose_active(states, 5000.0)
        assert [f.condition_id for f in frames] == [
            "visualFloaters", "visualAura", "diplopiaMonocular",
        ]

    def test_compose_active_skips_host_rendered(self):
        states = [ConditionState("neoMatrixCodeVision"), ConditionState("visualAura")]
        frames = LayerCompositor(skip={"neoMatrixCodeVision"}).compose_active(states, 0.0)
        assert [f.condition_id for f in frames] == ["visualAura"]

    def test_frame_to_dict_is_plain(self):
        frame = compose_frame("blueFieldPhenomena", 0.5, 1000.0)
        data = frame.to_dict()
        assert data["condition_id"] == "blueFieldPhenomena"
        assert isinstance(data["layers"], list)
        assert isinstance(OverlayFrame.empty("x").to_dict()["layers"], list)
