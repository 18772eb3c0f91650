"""Tests for dashboard and widget payload normalization."""

import pytest
from pydantic import ValidationError

from dcims.dashboards.schemas import (
    DashboardCreate,
    DashboardUpdate,
    WidgetIn,
    WidgetUpdate,
    default_config,
    default_data_source,
    grid_position,
    strip_invalid_ids,
)

VALID_ID = "3f2b8c1e-9a4d-4e6f-8b7a-1c2d3e4f5a6b"


# =============================================================================
# strip_invalid_ids
# =============================================================================


class TestStripInvalidIds:
    def test_removes_client_ids_recursively(self):
        payload = {
            "id": "temp-123",
            "dashboard_id": VALID_ID,
            "nested": {"widget_id": "abc", "keep": 1},
            "items": [{"id": "widget-1", "title": "x"}],
        }
        assert strip_invalid_ids(payload) == {
            "dashboard_id": VALID_ID,
            "nested": {"keep": 1},
            "items": [{"title": "x"}],
        }

    def test_non_id_keys_untouched(self):
        payload = {"idle": "yes", "ident": None, "grid": [1, 2]}
        assert strip_invalid_ids(payload) == payload

    def test_null_id_removed(self):
        assert strip_invalid_ids({"id": None, "title": "t"}) == {"title": "t"}

    def test_input_not_mutated(self):
        payload = {"id": "temp"}
        strip_invalid_ids(payload)
        assert payload == {"id": "temp"}


# =============================================================================
# WidgetIn
# =============================================================================


class TestWidgetIn:
    def test_defaults(self):
        widget = WidgetIn(title="Servers", widget_type="metric")
        assert widget.width == 4
        assert widget.height == 1
        assert widget.config == default_config()
        assert widget.data_source == default_data_source()
        assert widget.filters == []

    def test_editor_shape_flattened(self):
        widget = WidgetIn.model_validate(
            {
                "id": "widget-1700000000",
                "type": "chart",
                "title": "  By status ",
                "position": {"x": 6, "y": 0},
                "size": {"width": 6, "height": 4},
            }
        )
        assert widget.id is None
        assert widget.widget_type == "chart"
        assert widget.title == "By status"
        assert (widget.position_x, widget.position_y) == (6, 0)
        assert (widget.width, widget.height) == (6, 4)

    def test_valid_id_kept(self):
        widget = WidgetIn.model_validate({"id": VALID_ID, "title": "t", "widget_type": "table"})
        assert widget.id == VALID_ID

    def test_explicit_nulls_take_defaults(self):
        widget = WidgetIn.model_validate(
            {"title": "t", "widget_type": "stat", "width": None, "config": None, "data_source": None}
        )
        assert widget.width == 4
        assert widget.config == default_config()
        assert widget.data_source == default_data_source()

    def test_missing_title_rejected(self):
        with pytest.raises(ValidationError):
            WidgetIn.model_validate({"widget_type": "chart"})

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            WidgetIn.model_validate({"title": "   ", "widget_type": "chart"})

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            WidgetIn.model_validate({"title": "t", "widget_type": "pie"})

    def test_invalid_data_source_rejected(self):
        with pytest.raises(ValidationError, match="invalid data_source"):
            WidgetIn.model_validate(
                {"title": "t", "widget_type": "chart", "data_source": {"table": "servers", "limit": 0}}
            )

    def test_to_row_places_unpositioned_widgets_on_grid(self):
        widget = WidgetIn(title="t", widget_type="gauge")
        row = widget.to_row(5)
        assert (row["position_x"], row["position_y"]) == (6, 4)
        assert row["id"] is None

    def test_to_row_keeps_explicit_position(self):
        widget = WidgetIn(title="t", widget_type="gauge", position_x=0, position_y=12)
        row = widget.to_row(3)
        assert (row["position_x"], row["position_y"]) == (0, 12)


class TestGridPosition:
    @pytest.mark.parametrize(
        "index, expected",
        [(0, (0, 0)), (1, (6, 0)), (3, (18, 0)), (4, (0, 4)), (9, (6, 8))],
    )
    def test_four_per_row(self, index, expected):
        pos = grid_position(index)
        assert (pos["x"], pos["y"]) == expected


# =============================================================================
# Dashboard payloads
# =============================================================================


class TestDashboardPayloads:
    def test_create_defaults(self):
        dashboard = DashboardCreate(name="Ops")
        assert dashboard.is_public is False
        assert dashboard.status == "active"
        assert dashboard.widgets == []

    def test_create_rejects_bad_widget(self):
        with pytest.raises(ValidationError):
            DashboardCreate.model_validate({"name": "Ops", "widgets": [{"type": "chart"}]})

    def test_create_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            DashboardCreate(name="Ops", status="deleted")

    def test_update_is_partial(self):
        update = DashboardUpdate.model_validate({"name": "Renamed", "version": 3})
        assert update.model_dump(exclude={"widgets", "version"}, exclude_none=True) == {"name": "Renamed"}
        assert update.version == 3
        assert update.widgets is None

    def test_widget_update_flattens_editor_shape(self):
        update = WidgetUpdate.model_validate({"position": {"x": 12, "y": 2}})
        assert update.model_dump(exclude_none=True) == {"position_x": 12, "position_y": 2}
