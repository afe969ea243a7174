"""
Layer Compositor.

Maps a condition id onto its generator and returns the condition's
OverlayFrame for one instant:

1. Clamp intensity into [0, 1]
2. Look up the generator in the registry
3. Build the layer stack from phase clock / state machine readings
4. Tag the frame with its stacking priority

Nothing here raises to the host during a tick. Unknown ids and failing
generators produce an empty frame carrying an error message.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from loguru import logger

from src.core.contracts import ConditionState, OverlayFrame, clamp_unit
from src.overlays.conditions import (
    generate_visual_aura,
    generate_blue_field,
    generate_palinopsia,
    generate_persistent_positive,
    generate_starbursting,
    generate_floaters,
    generate_christine_fluctuating,
    generate_heather_light_perception,
    generate_sugar_retinal_detachment,
    generate_stephen_keratoconus,
    generate_daredevil_radar,
    generate_geordi_visor,
    generate_blindspot_sonar,
    generate_kenshi_telekinetic,
    generate_toph_seismic,
    generate_neo_backdrop,
    generate_anselmo_myasthenia,
)
from src.overlays.hallucinations import generate_hallucinations
from src.overlays.diplopia import generate_diplopia


Generator = Callable[[str, float, float, Dict], OverlayFrame]


# ============================================================
# REGISTRY
# ============================================================

CONDITION_GENERATORS: Dict[str, Generator] = {
    "visualAura": generate_visual_aura,
    "visualAuraLeft": generate_visual_aura,
    "visualAuraRight": generate_visual_aura,
    "hallucinations": generate_hallucinations,
    "blueFieldPhenomena": generate_blue_field,
    "persistentPositiveVisualPhenomenon": generate_persistent_positive,
    "palinopsia": generate_palinopsia,
    "starbursting": generate_starbursting,
    "visualFloaters": generate_floaters,
    "christineFluctuatingVision": generate_christine_fluctuating,
    "sugarRetinalDetachmentComplete": generate_sugar_retinal_detachment,
    "sugarPeripheralFlashes": generate_sugar_retinal_detachment,
    "stephenKeratoconusComplete": generate_stephen_keratoconus,
    "heatherLightPerceptionComplete": generate_heather_light_perception,
    "daredevilRadarSenseComplete": generate_daredevil_radar,
    "geordiVisorSenseComplete": generate_geordi_visor,
    "blindspotSonarSenseComplete": generate_blindspot_sonar,
    "kenshiTelekineticSenseComplete": generate_kenshi_telekinetic,
    "tophSeismicSenseComplete": generate_toph_seismic,
    "anselmoOcularMyasthenia": generate_anselmo_myasthenia,
    "diplopiaMonocular": generate_diplopia,
    "diplopiaBinocular": generate_diplopia,
    "neoMatrixCodeVision": generate_neo_backdrop,
}

GLYPH_STREAM_CONDITIONS = frozenset({"neoMatrixCodeVision"})


def get_generator(condition_id: str) -> Generator:
    """
    Look up a condition generator.

    Raises:
        ValueError: If the id is not registered
    """
    if condition_id not in CONDITION_GENERATORS:
        available = ", ".join(sorted(CONDITION_GENERATORS))
        raise ValueError(f"Unknown condition '{condition_id}'. Available: {available}")
    return CONDITION_GENERATORS[condition_id]


def list_conditions() -> List[str]:
    return sorted(CONDITION_GENERATORS)


# ============================================================
# STACKING PRIORITY
# ============================================================

FIELD_LOSS = frozenset({
    "blindnessLeftEye", "blindnessRightEye", "hemianopiaLeft", "hemianopiaRight",
    "bitemporalHemianopia", "quadrantanopiaRight", "quadrantanopiaInferior", "quadrantanopiaSuperior",
})
FOCAL_LOSS = frozenset({"scotoma", "glaucoma", "amd", "retinitisPigmentosa", "stargardt", "tunnelVision"})
NOISE = frozenset({"visualSnow", "visualFloaters", "astigmatism"})
AURA = frozenset({"visualAura", "visualAuraLeft", "visualAuraRight"})
DIPLOPIA = frozenset({"diplopiaMonocular", "diplopiaBinocular"})

DEFAULT_PRIORITY = 3


def layer_priority(effect_id: str) -> int:
    """Stacking tier: field loss lowest, double vision on top."""
    if effect_id in FIELD_LOSS:
        return 1
    if effect_id in FOCAL_LOSS:
        return 2
    if effect_id in NOISE:
        return 4
    if effect_id in AURA:
        return 5
    if effect_id in DIPLOPIA:
        return 6
    return DEFAULT_PRIORITY


# ============================================================
# COMPOSITION
# ============================================================

def compose_frame(
    condition_id: str,
    intensity: float,
    time_ms: float,
    params: Optional[Dict] = None,
) -> OverlayFrame:
    """
    Build the overlay for one condition at one instant.

    Args:
        condition_id: Registry key
        intensity: Severity; clamped into [0, 1]
        time_ms: Host timestamp in milliseconds
        params: Condition-specific parameters

    Returns:
        OverlayFrame (empty for unknown ids, zero intensity or failures)
    """
    generator = CONDITION_GENERATORS.get(condition_id)
    if generator is None:
        logger.debug(f"No overlay generator for '{condition_id}'")
        return OverlayFrame.empty(condition_id, f"Unknown condition: {condition_id}")

    level = clamp_unit(intensity)
    if level <= 0.0:
        return OverlayFrame.empty(condition_id)

    try:
        frame = generator(condition_id, level, float(time_ms), dict(params or {}))
    except Exception as e:
        logger.error(f"Overlay generator for '{condition_id}' failed: {e}")
        return OverlayFrame.empty(condition_id, str(e))

    frame.priority = layer_priority(condition_id)
    return frame


class LayerCompositor:
    """
    Composes every enabled condition for a tick.

    Guarantees:
    - Stateless: output depends only on the states and time passed in
    - Ordered: frames sorted by (priority, z_index), bottom first
    - Never raises for a bad condition; failed frames are dropped
    """

    def __init__(self, skip: Iterable[str] = ()):
        """
        Args:
            skip: Condition ids the host renders by other means
        """
        self._skip = frozenset(skip)

    def compose(self, state: ConditionState, time_ms: float) -> OverlayFrame:
        return compose_frame(state.condition_id, state.intensity, time_ms, state.params)

    def compose_active(self, states: Iterable[ConditionState], time_ms: float) -> List[OverlayFrame]:
        """
        Compose all enabled conditions.

        Args:
            states: Host toggle/intensity model
            time_ms: Host timestamp

        Returns:
            Non-empty frames sorted bottom to top
        """
        frames = []
        for state in states:
            if not state.enabled or state.condition_id in self._skip:
                continue
            frame = self.compose(state, time_ms)
            if not frame.success:
                logger.debug(f"Dropping frame for '{state.condition_id}': {frame.error_message}")
                continue
            if frame.is_empty:
                continue
            frames.append(frame)

        frames.sort(key=lambda f: (f.priority, f.z_index))
        return frames
