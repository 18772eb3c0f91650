"""Tests for SQL compilation of query specs."""

import pytest

from dcims.core.exceptions import ValidationError
from dcims.filters.query_builder import (
    compile_clause,
    compile_count,
    compile_scalar,
    compile_select,
    compile_where,
    escape_like,
    quote_ident,
)
from dcims.filters.schemas import DataSource
from dcims.filters.translation import Clause, QuerySpec, translate_data_source


# =============================================================================
# Clauses
# =============================================================================


class TestCompileClause:
    def test_equals_string_casts_to_text(self):
        assert compile_clause(Clause("status", "equals", "Active")) == ('"status"::text = %s', ["Active"])

    def test_equals_number_keeps_column_type(self):
        assert compile_clause(Clause("width", "equals", 4)) == ('"width" = %s', [4])

    def test_not_equals(self):
        assert compile_clause(Clause("status", "not_equals", "Retired")) == ('"status"::text <> %s', ["Retired"])

    def test_equals_none_is_null(self):
        assert compile_clause(Clause("rack", "equals", None)) == ('"rack" IS NULL', [])
        assert compile_clause(Clause("rack", "not_equals", None)) == ('"rack" IS NOT NULL', [])

    def test_equals_list_becomes_in(self):
        assert compile_clause(Clause("status", "equals", ["Active", "Inactive"])) == (
            '"status"::text = ANY(%s)',
            [["Active", "Inactive"]],
        )

    def test_not_in(self):
        assert compile_clause(Clause("status", "not_in", ["Retired"])) == (
            'NOT ("status"::text = ANY(%s))',
            [["Retired"]],
        )

    def test_empty_in_lists(self):
        assert compile_clause(Clause("status", "in", [])) == ("FALSE", [])
        assert compile_clause(Clause("status", "not_in", [])) == ("TRUE", [])

    def test_contains_escapes_wildcards(self):
        assert compile_clause(Clause("hostname", "contains", "50%_x")) == (
            '"hostname"::text ILIKE %s',
            ["%50\\%\\_x%"],
        )

    @pytest.mark.parametrize(
        "operator, symbol",
        [("gt", ">"), ("lt", "<"), ("gte", ">="), ("lte", "<=")],
    )
    def test_comparisons(self, operator, symbol):
        assert compile_clause(Clause("created_at", operator, "2024-01-01")) == (
            f'"created_at" {symbol} %s',
            ["2024-01-01"],
        )

    def test_unknown_operator(self):
        with pytest.raises(ValidationError):
            compile_clause(Clause("status", "between", [1, 2]))


class TestHelpers:
    def test_quote_ident_doubles_quotes(self):
        assert quote_ident('we"ird') == '"we""ird"'

    def test_escape_like_backslash_first(self):
        assert escape_like("a\\b%") == "a\\\\b\\%"


# =============================================================================
# WHERE composition
# =============================================================================


class TestCompileWhere:
    def test_no_clauses(self):
        assert compile_where(QuerySpec(table="servers")) == ("", [])

    def test_basic_clauses_anded(self):
        spec = QuerySpec(
            table="servers",
            clauses=[Clause("status", "equals", "Active"), Clause("dc_site", "equals", "DC-East")],
        )
        assert compile_where(spec) == (
            'WHERE "status"::text = %s AND "dc_site"::text = %s',
            ["Active", "DC-East"],
        )

    def test_server_clauses_grouped_with_own_logic(self):
        spec = QuerySpec(
            table="servers",
            clauses=[Clause("device_type", "equals", "Server")],
            server_clauses=[Clause("status", "equals", "Active"), Clause("rack", "in", ["R01", "R02"])],
            server_logic="OR",
        )
        assert compile_where(spec) == (
            'WHERE "device_type"::text = %s AND ("status"::text = %s OR "rack"::text = ANY(%s))',
            ["Server", "Active", ["R01", "R02"]],
        )

    def test_enhanced_servers_query_drops_basic_filters(self):
        ds = DataSource.model_validate(
            {
                "table": "servers",
                "serverFilters": {"dc_sites": ["DC-East"]},
                "basicFilters": [{"field": "status", "operator": "equals", "value": "Active"}],
            }
        )
        assert compile_where(translate_data_source(ds)) == (
            'WHERE ("dc_site"::text = ANY(%s))',
            [["DC-East"]],
        )

    def test_search_across_columns(self):
        spec = QuerySpec(table="servers", search_term=" web ", search_columns=("hostname", "brand"))
        assert compile_where(spec) == (
            'WHERE ("hostname"::text ILIKE %s OR "brand"::text ILIKE %s)',
            ["%web%", "%web%"],
        )

    def test_blank_search_ignored(self):
        spec = QuerySpec(table="servers", search_term="  ", search_columns=("hostname",))
        assert compile_where(spec) == ("", [])


# =============================================================================
# Statements
# =============================================================================


class TestStatements:
    def test_grouped_select_from_data_source(self):
        ds = DataSource.model_validate(
            {"groupBy": "status", "filters": [{"field": "dc_site", "value": "DC-East"}]}
        )
        sql, params = compile_select(translate_data_source(ds))
        assert sql == (
            'SELECT "status" FROM public."servers" WHERE "dc_site"::text = %s ORDER BY "status"'
        )
        assert params == ["DC-East"]

    def test_ungrouped_select_uses_id(self):
        sql, params = compile_select(QuerySpec(table="servers"))
        assert sql == 'SELECT "id" FROM public."servers"'
        assert params == []

    def test_limit_and_offset(self):
        spec = QuerySpec(table="servers", order_by=["hostname"], descending=True, limit=25)
        sql, params = compile_select(spec, columns=["hostname", "rack"], offset=50)
        assert sql == (
            'SELECT "hostname", "rack" FROM public."servers" '
            'ORDER BY "hostname" DESC LIMIT %s OFFSET %s'
        )
        assert params == [25, 50]

    def test_unknown_column_rejected(self):
        with pytest.raises(ValidationError, match="Unknown field 'secret'"):
            compile_select(QuerySpec(table="servers"), columns=["hostname", "secret"])

    def test_scalar_count(self):
        spec = QuerySpec(table="servers", clauses=[Clause("status", "equals", "Active")])
        assert compile_scalar(spec) == (
            'SELECT COUNT(*) AS value FROM public."servers" WHERE "status"::text = %s',
            ["Active"],
        )

    def test_scalar_avg(self):
        spec = QuerySpec(table="dashboard_widgets", aggregation="avg", field="width")
        assert compile_scalar(spec) == ('SELECT AVG("width") AS value FROM public."dashboard_widgets"', [])

    def test_count(self):
        spec = QuerySpec(table="servers", limit=10, order_by=["hostname"])
        assert compile_count(spec) == ('SELECT COUNT(*) FROM public."servers"', [])
