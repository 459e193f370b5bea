import pytest

from schemas.vehicle_schema import VehicleRecord
from services.variant_disassembler import group_by_family, select_member, summarize_families

VEHICLES = [
    {"modelName": "X", "version": "1", "color": "Red"},
    {"modelName": "X", "version": "1", "color": "Blue"},
    {"modelName": "Y", "version": "2", "color": "Red"},
]


def test_groups_by_model_and_version_in_input_order():
    families = group_by_family(VEHICLES)
    assert list(families) == ["X 1", "Y 2"]
    assert [v["color"] for v in families["X 1"]] == ["Red", "Blue"]
    assert [v["color"] for v in families["Y 2"]] == ["Red"]


def test_grouping_is_stable_and_pure():
    first = group_by_family(VEHICLES)
    second = group_by_family(VEHICLES)
    assert first == second
    assert len(VEHICLES) == 3


def test_first_occurrence_fixes_family_position():
    vehicles = [
        {"modelName": "B", "version": "1", "color": "Red"},
        {"modelName": "A", "version": "1", "color": "Red"},
        {"modelName": "B", "version": "1", "color": "White"},
    ]
    assert list(group_by_family(vehicles)) == ["B 1", "A 1"]


def test_groups_pydantic_records():
    records = [VehicleRecord(**v) for v in VEHICLES]
    families = group_by_family(records)
    assert [v.color for v in families["X 1"]] == ["Red", "Blue"]


def test_missing_model_or_version_does_not_leak_none_into_key():
    families = group_by_family([
        {"modelName": "X", "version": None, "color": "Red"},
        {"modelName": None, "version": "2", "color": "Blue"},
    ])
    assert list(families) == ["X ", " 2"]


@pytest.mark.parametrize("index,expected", [(0, "Red"), (1, "Blue"), (99, "Red"), (-1, "Red"), (None, "Red")])
def test_select_member_clamps_to_first(index, expected):
    family = group_by_family(VEHICLES)["X 1"]
    assert select_member(family, index)["color"] == expected


def test_select_member_on_empty_family_raises():
    with pytest.raises(ValueError):
        select_member([], 0)


def test_summarize_resolves_selection_per_family():
    vehicles = [
        {"vehicleId": 1, "modelName": "VF 8", "version": "Plus", "color": "Red", "status": "AVAILABLE", "priceRetail": 100},
        {"vehicleId": 2, "modelName": "VF 8", "version": "Plus", "color": "Blue", "status": "DISCONTINUED", "priceRetail": 100},
        {"vehicleId": 3, "modelName": "VF 9", "version": "Eco", "color": "Red", "status": "AVAILABLE"},
    ]
    summaries = summarize_families(vehicles, {"VF 8 Plus": 1, "VF 9 Eco": 5})

    assert [s.familyKey for s in summaries] == ["VF 8 Plus", "VF 9 Eco"]
    assert summaries[0].selectedIndex == 1
    assert summaries[0].selected.vehicleId == 2
    assert summaries[0].selected.inStock is False
    assert summaries[1].selectedIndex == 0
    assert summaries[1].selected.color == "Red"
    assert summaries[1].selected.inStock is True
