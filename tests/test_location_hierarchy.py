"""Tests for the cascading site -> building -> floor -> room -> rack filter."""

import pytest

from dcims.core.exceptions import ValidationError
from dcims.locations.hierarchy import (
    ALL_LEVELS,
    LocationSelection,
    compute_options,
    options_for_level,
    resolve_level,
)

ROWS = [
    {"dc_site": "DC-East", "dc_building": "B1", "dc_floor": "1", "dc_room": "R100", "rack": "A01"},
    {"dc_site": "DC-East", "dc_building": "B1", "dc_floor": "2", "dc_room": "R200", "rack": "A02"},
    {"dc_site": "DC-East", "dc_building": "B2", "dc_floor": "1", "dc_room": "R110", "rack": "C01"},
    {"dc_site": "DC-West", "dc_building": "W1", "dc_floor": "1", "dc_room": "R1", "rack": "W01"},
    {"dc_site": "DC-West", "dc_building": None, "dc_floor": " ", "dc_room": None, "rack": None},
]


@pytest.fixture
def full_selection():
    return LocationSelection(
        dc_site="DC-East", dc_building="B1", dc_floor="1", dc_room="R100", rack="A01"
    )


class TestResolveLevel:
    def test_plural_aliases(self):
        assert resolve_level("sites") == "dc_site"
        assert resolve_level("racks") == "rack"

    def test_column_names_pass_through(self):
        for level in ALL_LEVELS:
            assert resolve_level(level) == level

    def test_unknown_level(self):
        with pytest.raises(ValidationError, match="Invalid level 'aisle'"):
            resolve_level("aisle")


class TestSelection:
    def test_selecting_site_clears_everything_below(self, full_selection):
        updated = full_selection.select("dc_site", "DC-West")
        assert updated.as_dict() == {
            "dc_site": "DC-West",
            "dc_building": None,
            "dc_floor": None,
            "dc_room": None,
            "rack": None,
        }

    def test_selecting_floor_keeps_ancestors(self, full_selection):
        updated = full_selection.select("floors", "2")
        assert updated.dc_site == "DC-East"
        assert updated.dc_building == "B1"
        assert updated.dc_floor == "2"
        assert updated.dc_room is None
        assert updated.rack is None

    def test_blank_value_clears_level(self, full_selection):
        updated = full_selection.select("dc_building", "  ")
        assert updated.dc_site == "DC-East"
        assert updated.dc_building is None

    def test_original_selection_unchanged(self, full_selection):
        full_selection.select("dc_site", "DC-West")
        assert full_selection.dc_building == "B1"

    def test_from_mapping_cleans_values(self):
        selection = LocationSelection.from_mapping({"dc_site": " DC-East ", "rack": "", "extra": "x"})
        assert selection.dc_site == "DC-East"
        assert selection.rack is None

    def test_ancestors_of(self, full_selection):
        assert full_selection.ancestors_of("dc_floor") == {"dc_site": "DC-East", "dc_building": "B1"}
        assert full_selection.ancestors_of("dc_site") == {}

    def test_with_rack_location(self):
        selection = LocationSelection(dc_site="DC-West").with_rack_location(
            "A02",
            {"dc_site": "DC-East", "dc_building": "B1", "dc_floor": "2", "dc_room": "R200"},
        )
        assert selection.as_dict() == {
            "dc_site": "DC-East",
            "dc_building": "B1",
            "dc_floor": "2",
            "dc_room": "R200",
            "rack": "A02",
        }


class TestOptions:
    def test_sites_unconstrained_and_sorted(self):
        assert options_for_level(ROWS, "dc_site", {}) == ["DC-East", "DC-West"]

    def test_buildings_for_site(self):
        assert options_for_level(ROWS, "dc_building", {"dc_site": "DC-East"}) == ["B1", "B2"]

    def test_blank_values_excluded(self):
        assert options_for_level(ROWS, "dc_floor", {"dc_site": "DC-West"}) == ["1"]

    def test_compute_options_follows_selection(self):
        selection = LocationSelection(dc_site="DC-East", dc_building="B1")
        options = compute_options(ROWS, selection)
        assert options["dc_site"] == ["DC-East", "DC-West"]
        assert options["dc_building"] == ["B1", "B2"]
        assert options["dc_floor"] == ["1", "2"]
        assert options["dc_room"] == ["R100", "R200"]
        assert options["rack"] == ["A01", "A02"]

    def test_compute_options_empty_selection(self):
        options = compute_options(ROWS, LocationSelection())
        assert options["rack"] == ["A01", "A02", "C01", "W01"]
