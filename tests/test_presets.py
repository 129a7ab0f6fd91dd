"""
Tests for the labelled insert presets.
"""
import pytest

from datameq.allocation.presets import PRESETS, build_preset_inserts
from datameq.allocation.types import InsertSpec
from datameq.core.exceptions import InvalidRequest


def test_fixed_positions():
    positions = {preset.label: preset.position for preset in PRESETS}
    assert positions["Access All office Text Mail"] == 70
    assert positions["Team Report Text mail 1"] == 85
    assert positions["Mother Text mail"] == 350
    assert positions["Personal Text Mail"] is None


def test_build_uses_preset_order_and_fixed_slots():
    inserts = build_preset_inserts({
        "Mother Text mail": "mom",
        "Team Report Text mail 2": "team",
    })
    assert inserts == [InsertSpec(86, "team"), InsertSpec(350, "mom")]


def test_free_slot_takes_caller_position():
    inserts = build_preset_inserts({"Personal Text Mail": "hi"}, {"Personal Text Mail": 3})
    assert inserts == [InsertSpec(3, "hi")]


def test_free_slot_without_position_is_dropped_later():
    assert build_preset_inserts({"Personal Text Mail": "hi"}) == [InsertSpec(0, "hi")]


def test_unknown_label():
    with pytest.raises(InvalidRequest) as exc_info:
        build_preset_inserts({"Not A Preset": "x"})
    assert exc_info.value.field == "presets"


def test_presets_through_service(service, alice, fill_pools):
    fill_pools(100, 0)
    result = service.allocate(
        alice, 100, 0,
        presets={"Access All office Text Mail": "office", "Personal Text Mail": "me"},
        preset_positions={"Personal Text Mail": 1},
    )
    assert result.lines[0] == "me"
    assert result.lines[result.lines.index("office") + 1] == "a70"
    assert result.total == 102
