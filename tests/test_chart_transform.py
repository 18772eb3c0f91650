"""Tests for the rows -> chart payload transform."""

import json
from decimal import Decimal

import pytest

from dcims.widgets.transform import (
    CHART_COLORS,
    EMPTY_COLOR,
    bucket_label,
    build_chart_data,
    palette,
)


class TestEmpty:
    def test_no_rows(self):
        assert build_chart_data([], group_by="status") == {
            "labels": [],
            "datasets": [{"label": "No Data", "data": [], "backgroundColor": [EMPTY_COLOR]}],
            "total": 0,
        }


class TestCounts:
    def test_counts_by_status(self):
        rows = [{"status": "Active"}, {"status": "Active"}, {"status": "Offline"}]
        result = build_chart_data(rows, group_by="status")
        assert result["labels"] == ["Active", "Offline"]
        assert result["datasets"][0]["label"] == "Count"
        assert result["datasets"][0]["data"] == [2, 1]
        assert result["datasets"][0]["backgroundColor"] == CHART_COLORS[:2]
        assert result["total"] == 3

    def test_first_seen_order(self):
        rows = [{"rack": "R09"}, {"rack": "R01"}, {"rack": "R09"}]
        assert build_chart_data(rows, group_by="rack")["labels"] == ["R09", "R01"]

    def test_missing_values_bucket_as_unknown(self):
        rows = [{"status": None}, {"status": "Active"}, {"status": "  "}, {}, {"status": float("nan")}]
        result = build_chart_data(rows, group_by="status")
        assert result["labels"] == ["Unknown", "Active"]
        assert result["datasets"][0]["data"] == [4, 1]
        assert result["total"] == 5

    def test_numeric_group_values_become_strings(self):
        rows = [{"floor": 1}, {"floor": 2}, {"floor": 1}]
        result = build_chart_data(rows, group_by="floor")
        assert result["labels"] == ["1", "2"]
        assert result["datasets"][0]["data"] == [2, 1]

    def test_multi_level_labels(self):
        rows = [
            {"dc_site": "DC-East", "status": "Active"},
            {"dc_site": "DC-East", "status": "Active"},
            {"dc_site": "DC-West", "status": None},
        ]
        result = build_chart_data(rows, group_by=["dc_site", "status"])
        assert result["labels"] == ["DC-East / Active", "DC-West / Unknown"]
        assert result["datasets"][0]["data"] == [2, 1]

    def test_ungrouped_total(self):
        result = build_chart_data([{"id": 1}, {"id": 2}, {"id": 3}])
        assert result["labels"] == ["Total"]
        assert result["datasets"][0]["data"] == [3]
        assert result["datasets"][0]["backgroundColor"] == [CHART_COLORS[0]]
        assert result["total"] == 3

    def test_palette_cycles(self):
        rows = [{"rack": f"R{i:02d}"} for i in range(12)]
        colors = build_chart_data(rows, group_by="rack")["datasets"][0]["backgroundColor"]
        assert len(colors) == 12
        assert colors[10] == CHART_COLORS[0]
        assert colors[11] == CHART_COLORS[1]


class TestAggregations:
    def test_sum_by_group(self):
        rows = [
            {"site": "A", "width": 2},
            {"site": "B", "width": 3},
            {"site": "A", "width": 4},
        ]
        result = build_chart_data(rows, group_by="site", aggregation="sum", field="width")
        assert result["labels"] == ["A", "B"]
        assert result["datasets"][0]["label"] == "Sum"
        assert result["datasets"][0]["data"] == [6, 3]
        assert result["total"] == 9

    def test_avg_keeps_fraction(self):
        rows = [{"g": "x", "v": 1}, {"g": "x", "v": 2}]
        result = build_chart_data(rows, group_by="g", aggregation="avg", field="v")
        assert result["datasets"][0]["data"] == [1.5]
        assert result["total"] == 1.5

    def test_decimal_and_text_numbers(self):
        rows = [{"g": "x", "v": Decimal("2.5")}, {"g": "x", "v": "1.5"}]
        result = build_chart_data(rows, group_by="g", aggregation="max", field="v")
        assert result["datasets"][0]["data"] == [2.5]

    def test_non_numeric_values_ignored(self):
        rows = [{"g": "x", "v": "n/a"}, {"g": "x", "v": 5}]
        result = build_chart_data(rows, group_by="g", aggregation="min", field="v")
        assert result["datasets"][0]["data"] == [5]

    def test_group_with_no_numbers_is_zero(self):
        rows = [{"g": "x", "v": None}, {"g": "y", "v": 3}]
        result = build_chart_data(rows, group_by="g", aggregation="sum", field="v")
        assert result["datasets"][0]["data"] == [0, 3]

    def test_unsupported_aggregation(self):
        with pytest.raises(ValueError):
            build_chart_data([{"v": 1}], aggregation="median", field="v")

    def test_aggregation_requires_field(self):
        with pytest.raises(ValueError):
            build_chart_data([{"v": 1}], aggregation="sum")


class TestPurity:
    def test_same_input_same_json(self):
        rows = [{"status": "Active", "v": 1.0}, {"status": None, "v": 2}]
        first = json.dumps(build_chart_data(rows, group_by="status", aggregation="sum", field="v"))
        second = json.dumps(build_chart_data(rows, group_by="status", aggregation="sum", field="v"))
        assert first == second

    def test_input_rows_untouched(self):
        rows = [{"status": "Active"}]
        build_chart_data(rows, group_by="status")
        assert rows == [{"status": "Active"}]


class TestHelpers:
    def test_bucket_label(self):
        assert bucket_label({"a": " x ", "b": ""}, ["a", "b"]) == "x / Unknown"

    def test_palette(self):
        assert palette(0) == []
        assert palette(3) == CHART_COLORS[:3]
