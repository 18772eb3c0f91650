"""Translate widget data sources into a normalized query specification.

Two filter dialects exist:

* basic filters (``FilterConfig``) work on any queryable table, one clause
  per filter;
* enhanced server filters (``ServerFilterConfig``) only apply to the
  ``servers`` table. Values may be lists, and sentinel values such as
  ``"All Brands"`` mean "no constraint".

Unknown tables, columns and operators are rejected with a ValidationError.
"""

import logging
from dataclasses import dataclass
from dataclasses import field as dc_field
from typing import Any, Dict, List, Optional, Sequence, Union

from dcims.core.exceptions import ValidationError
from dcims.filters.schemas import (
    AGGREGATIONS,
    FILTER_OPERATORS,
    DataSource,
    DateRange,
    FilterConfig,
    ServerFilterConfig,
)
from dcims.filters.tables import (
    SERVER_FILTER_ALIASES,
    SERVER_FILTER_COLUMNS,
    SERVER_FILTER_PLACEHOLDERS,
    TABLE_COLUMNS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Clause:
    column: str
    operator: str
    value: Any = None


@dataclass
class QuerySpec:
    table: str
    aggregation: str = "count"
    field: Optional[str] = None
    group_by: List[str] = dc_field(default_factory=list)
    # ANDed together
    clauses: List[Clause] = dc_field(default_factory=list)
    # Enhanced server filter clauses, combined with server_logic, then ANDed
    server_clauses: List[Clause] = dc_field(default_factory=list)
    server_logic: str = "AND"
    search_term: Optional[str] = None
    search_columns: Sequence[str] = ()
    order_by: List[str] = dc_field(default_factory=list)
    descending: bool = False
    limit: Optional[int] = None

    def select_columns(self) -> List[str]:
        """Columns the aggregation layer needs from each row."""
        cols = list(self.group_by)
        if self.field and self.field not in cols:
            cols.append(self.field)
        return cols or ["id"]


def normalize_group_by(group_by: Union[None, str, Sequence[str]]) -> List[str]:
    if group_by is None:
        return []
    if isinstance(group_by, str):
        return [group_by] if group_by.strip() else []
    return [g for g in group_by if g]


def _check_table(table: str) -> None:
    if table not in TABLE_COLUMNS:
        raise ValidationError(
            f"Unsupported table '{table}'. Supported tables: {', '.join(sorted(TABLE_COLUMNS))}"
        )


def _check_column(table: str, column: str) -> None:
    if column not in TABLE_COLUMNS[table]:
        raise ValidationError(f"Unknown field '{column}' for table '{table}'")


def is_no_constraint(value: Any, column: Optional[str] = None) -> bool:
    """
    True for values meaning "do not filter": None, blanks, empty lists and
    "all". With a server filter ``column``, that column's own dropdown
    placeholders ("All Brands" for brand) count too; other text starting
    with "All" is a real value.
    """
    if value is None:
        return True
    if isinstance(value, str):
        text = " ".join(value.lower().split())
        if text in ("", "all"):
            return True
        labels = SERVER_FILTER_PLACEHOLDERS.get(column or "", ())
        return any(text == f"all {label}" for label in labels)
    if isinstance(value, (list, tuple, set)):
        return all(is_no_constraint(v, column) for v in value)
    return False


def basic_filter_clause(table: str, flt: FilterConfig) -> Clause:
    operator = (flt.operator or "").strip().lower()
    if operator not in FILTER_OPERATORS:
        raise ValidationError(
            f"Unsupported filter operator '{flt.operator}' on field '{flt.field}'. "
            f"Supported operators: {', '.join(FILTER_OPERATORS)}"
        )
    _check_column(table, flt.field)

    value = flt.value
    if operator in ("in", "not_in"):
        if not isinstance(value, (list, tuple)):
            value = [value]
        value = list(value)
    elif operator in ("contains", "gt", "lt", "gte", "lte"):
        if value is None or isinstance(value, (list, tuple, dict)):
            raise ValidationError(
                f"Operator '{operator}' on field '{flt.field}' needs a single value"
            )
    return Clause(column=flt.field, operator=operator, value=value)


def server_filter_clauses(server_filters: ServerFilterConfig) -> List[Clause]:
    clauses: List[Clause] = []
    for key, value in server_filters.values.items():
        column = SERVER_FILTER_ALIASES.get(key, key)
        if column not in SERVER_FILTER_COLUMNS:
            raise ValidationError(
                f"Unknown server filter '{key}'. "
                f"Supported filters: {', '.join(sorted(SERVER_FILTER_COLUMNS))}"
            )
        if is_no_constraint(value, column):
            continue

        if isinstance(value, (list, tuple, set)):
            values = [v for v in value if not is_no_constraint(v, column)]
            clauses.append(Clause(column=column, operator="in", value=values))
        else:
            clauses.append(Clause(column=column, operator="equals", value=value))
    return clauses


def date_range_clauses(table: str, date_range: DateRange) -> List[Clause]:
    _check_column(table, date_range.field)
    return [
        Clause(column=date_range.field, operator="gte", value=date_range.start),
        Clause(column=date_range.field, operator="lte", value=date_range.end),
    ]


def translate_data_source(
    data_source: DataSource,
    extra_filters: Optional[List[FilterConfig]] = None,
) -> QuerySpec:
    """
    Build a QuerySpec from a widget data source.

    ``extra_filters`` carries the widget's legacy ``filters`` column, which
    is applied on top of the data source's own filters. A ``servers`` source
    with ``serverFilters`` uses only the enhanced dialect; its basic and
    legacy filters are ignored. The date range applies either way.
    """
    table = data_source.table
    _check_table(table)

    aggregation = (data_source.aggregation or "count").lower()
    if aggregation not in AGGREGATIONS:
        raise ValidationError(
            f"Unsupported aggregation '{data_source.aggregation}'. "
            f"Supported: {', '.join(AGGREGATIONS)}"
        )
    if aggregation != "count" and not data_source.field:
        raise ValidationError(f"Aggregation '{aggregation}' requires a field")
    if data_source.field:
        _check_column(table, data_source.field)

    group_by = normalize_group_by(data_source.group_by)
    for column in group_by:
        _check_column(table, column)

    spec = QuerySpec(
        table=table,
        aggregation=aggregation,
        field=data_source.field if aggregation != "count" else None,
        group_by=group_by,
        order_by=list(group_by),
        limit=data_source.limit,
    )

    if data_source.server_filters is not None:
        if table != "servers":
            raise ValidationError("serverFilters can only be used with the 'servers' table")
        spec.server_clauses = server_filter_clauses(data_source.server_filters)
        spec.server_logic = data_source.server_filters.logic
        ignored = len(data_source.filters) + len(extra_filters or [])
        if ignored:
            logger.debug("Ignoring %d basic filter(s) on enhanced servers query", ignored)
    else:
        for flt in list(data_source.filters) + list(extra_filters or []):
            spec.clauses.append(basic_filter_clause(table, flt))

    if data_source.date_range is not None:
        spec.clauses.extend(date_range_clauses(table, data_source.date_range))

    logger.debug(
        "Translated data source for %s: %d clause(s), %d server clause(s), group_by=%s",
        table,
        len(spec.clauses),
        len(spec.server_clauses),
        group_by,
    )
    return spec


def translate_server_filters(
    filters: Dict[str, Any],
    logic: str = "AND",
) -> QuerySpec:
    """QuerySpec over ``servers`` from a plain {column: value(s)} mapping."""
    server_filters = ServerFilterConfig.model_validate({**filters, "logic": logic})
    return QuerySpec(
        table="servers",
        server_clauses=server_filter_clauses(server_filters),
        server_logic=server_filters.logic,
    )
