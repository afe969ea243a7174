"""
Condition Generators.

Responsibilities:
- One pure function per animated condition
- Signature (condition_id, intensity, time_ms, params) -> OverlayFrame
- Layers returned bottom to top
"""

from .disturbances import (
    generate_visual_aura,
    generate_blue_field,
    generate_palinopsia,
    generate_persistent_positive,
    generate_starbursting,
    generate_floaters,
)
from .retinal import (
    generate_christine_fluctuating,
    generate_heather_light_perception,
    generate_sugar_retinal_detachment,
    generate_stephen_keratoconus,
)
from .senses import (
    generate_daredevil_radar,
    generate_geordi_visor,
    generate_blindspot_sonar,
    generate_kenshi_telekinetic,
    generate_toph_seismic,
    generate_neo_backdrop,
)
from .myasthenia import generate_anselmo_myasthenia
