"""
Insert presets - The labelled insert slots offered by the generator.

Seven of the eight slots have a fixed output position; "Personal Text Mail"
takes whatever position the caller supplies.
"""
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from datameq.allocation.types import InsertSpec
from datameq.core.exceptions import InvalidRequest


@dataclass(frozen=True)
class InsertPreset:
    label: str
    position: Optional[int]

    @property
    def is_fixed(self) -> bool:
        return self.position is not None


PRESETS: List[InsertPreset] = [
    InsertPreset("Personal Text Mail", None),
    InsertPreset("Team Report Text mail 1", 85),
    InsertPreset("Team Report Text mail 2", 86),
    InsertPreset("Team Report Text mail 3", 87),
    InsertPreset("Access All office Text Mail", 70),
    InsertPreset("All Team Report Text Mail", 200),
    InsertPreset("Personal Leader Text Mail", 250),
    InsertPreset("Mother Text mail", 350),
]

_BY_LABEL: Dict[str, InsertPreset] = {preset.label: preset for preset in PRESETS}


def build_preset_inserts(
    texts: Mapping[str, str],
    positions: Optional[Mapping[str, int]] = None
) -> List[InsertSpec]:
    """
    Turn {label: text} into InsertSpecs, in preset order.

    Fixed slots ignore `positions`; free slots take their position from
    `positions` and default to 0, which the compositor drops.

    Raises:
        InvalidRequest: If a label is not a known preset
    """
    unknown = [label for label in texts if label not in _BY_LABEL]
    if unknown:
        raise InvalidRequest(f"Unknown insert preset(s): {', '.join(unknown)}", field="presets")

    positions = positions or {}
    inserts = []
    for preset in PRESETS:
        text = texts.get(preset.label)
        if text is None:
            continue
        position = preset.position if preset.is_fixed else positions.get(preset.label, 0)
        inserts.append(InsertSpec(position=position, text=text))
    return inserts
