# dcims/filters/query_builder.py
#
# Compiles a QuerySpec into parameterized SQL for psycopg2. Values are always
# bound as parameters; identifiers come from the whitelist in tables.py.

from typing import Any, List, Optional, Sequence, Tuple

from dcims.core.exceptions import ValidationError
from dcims.filters.tables import TABLE_COLUMNS
from dcims.filters.translation import Clause, QuerySpec

Compiled = Tuple[str, List[Any]]

_COMPARISONS = {"gt": ">", "lt": "<", "gte": ">=", "lte": "<="}


def quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def table_ref(table: str) -> str:
    if table not in TABLE_COLUMNS:
        raise ValidationError(f"Unsupported table '{table}'")
    return f"public.{quote_ident(table)}"


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def compile_clause(clause: Clause) -> Compiled:
    col = quote_ident(clause.column)
    op = clause.operator
    value = clause.value

    if op in ("equals", "not_equals"):
        negate = op == "not_equals"
        if value is None:
            return f"{col} IS {'NOT ' if negate else ''}NULL", []
        if isinstance(value, (list, tuple)):
            return compile_clause(Clause(clause.column, "not_in" if negate else "in", list(value)))
        if isinstance(value, str):
            # enum columns compare as text
            col = f"{col}::text"
        return f"{col} {'<>' if negate else '='} %s", [value]

    if op == "contains":
        return f"{col}::text ILIKE %s", [f"%{escape_like(str(value))}%"]

    if op in ("in", "not_in"):
        values = [str(v) for v in value if v is not None]
        if not values:
            # nothing can match an empty IN list; nothing is excluded by NOT IN
            return ("FALSE" if op == "in" else "TRUE"), []
        if op == "in":
            return f"{col}::text = ANY(%s)", [values]
        return f"NOT ({col}::text = ANY(%s))", [values]

    if op in _COMPARISONS:
        return f"{col} {_COMPARISONS[op]} %s", [value]

    raise ValidationError(f"Unsupported filter operator '{op}'")


def _join(clauses: Sequence[Clause], glue: str) -> Compiled:
    parts: List[str] = []
    params: List[Any] = []
    for clause in clauses:
        sql, p = compile_clause(clause)
        parts.append(sql)
        params.extend(p)
    return f" {glue} ".join(parts), params


def compile_where(spec: QuerySpec) -> Compiled:
    """
    WHERE fragment (including the keyword) or an empty string.

    Basic clauses and the date range are ANDed. Enhanced server clauses are
    combined with their own logic and the group is ANDed with the rest.
    """
    parts: List[str] = []
    params: List[Any] = []

    if spec.clauses:
        sql, p = _join(spec.clauses, "AND")
        parts.append(sql)
        params.extend(p)

    if spec.server_clauses:
        glue = "OR" if spec.server_logic == "OR" else "AND"
        sql, p = _join(spec.server_clauses, glue)
        parts.append(f"({sql})")
        params.extend(p)

    term = (spec.search_term or "").strip()
    if term and spec.search_columns:
        pattern = f"%{escape_like(term)}%"
        ors = [f"{quote_ident(c)}::text ILIKE %s" for c in spec.search_columns]
        parts.append("(" + " OR ".join(ors) + ")")
        params.extend([pattern] * len(ors))

    if not parts:
        return "", []
    return "WHERE " + " AND ".join(parts), params


def _order_by(spec: QuerySpec) -> str:
    if not spec.order_by:
        return ""
    direction = " DESC" if spec.descending else ""
    return "ORDER BY " + ", ".join(quote_ident(c) + direction for c in spec.order_by)


def compile_select(
    spec: QuerySpec,
    columns: Optional[Sequence[str]] = None,
    offset: Optional[int] = None,
) -> Compiled:
    cols = list(columns) if columns else spec.select_columns()
    allowed = TABLE_COLUMNS[spec.table]
    for c in cols:
        if c not in allowed:
            raise ValidationError(f"Unknown field '{c}' for table '{spec.table}'")

    where, params = compile_where(spec)
    sql = f"SELECT {', '.join(quote_ident(c) for c in cols)} FROM {table_ref(spec.table)}"
    if where:
        sql += f" {where}"
    order = _order_by(spec)
    if order:
        sql += f" {order}"
    if spec.limit is not None:
        sql += " LIMIT %s"
        params.append(spec.limit)
    if offset:
        sql += " OFFSET %s"
        params.append(offset)
    return sql, params


def compile_scalar(spec: QuerySpec) -> Compiled:
    """Single aggregate over the filtered rows, returned as ``value``."""
    if spec.aggregation == "count":
        expr = "COUNT(*)"
    else:
        if not spec.field:
            raise ValidationError(f"Aggregation '{spec.aggregation}' requires a field")
        expr = f"{spec.aggregation.upper()}({quote_ident(spec.field)})"

    where, params = compile_where(spec)
    sql = f"SELECT {expr} AS value FROM {table_ref(spec.table)}"
    if where:
        sql += f" {where}"
    return sql, params


def compile_count(spec: QuerySpec) -> Compiled:
    where, params = compile_where(spec)
    sql = f"SELECT COUNT(*) FROM {table_ref(spec.table)}"
    if where:
        sql += f" {where}"
    return sql, params
