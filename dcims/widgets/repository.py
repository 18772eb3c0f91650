# dcims/widgets/repository.py
from typing import Any, Dict, List, Optional, Sequence

from dcims.db.connection import get_db_connection, row_to_dict, rows_to_dicts
from dcims.filters.query_builder import compile_scalar, compile_select
from dcims.filters.translation import QuerySpec


def fetch_rows(
    spec: QuerySpec,
    columns: Optional[Sequence[str]] = None,
    offset: Optional[int] = None,
) -> List[Dict[str, Any]]:
    sql, params = compile_select(spec, columns=columns, offset=offset)
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, params)
        return rows_to_dicts(cur, cur.fetchall())


def fetch_scalar(spec: QuerySpec) -> Any:
    sql, params = compile_scalar(spec)
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, params)
        row = cur.fetchone()
        return row[0] if row else None


def fetch_widget_with_owner(widget_id: str) -> Optional[Dict[str, Any]]:
    """Widget row plus the owner / visibility of its dashboard."""
    sql = """
        SELECT
            w.id, w.dashboard_id, w.widget_type, w.title,
            w.config, w.data_source, w.filters,
            d.user_id AS owner_id, d.is_public
        FROM public.dashboard_widgets w
        JOIN public.dashboards d ON d.id = w.dashboard_id
        WHERE w.id = %s
        LIMIT 1;
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (widget_id,))
        return row_to_dict(cur, cur.fetchone())
