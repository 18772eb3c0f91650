# dcims/servers/repository.py
from typing import Any, Dict, List, Optional, Sequence, Tuple

from psycopg2.extras import execute_values

from dcims.db.connection import get_db_connection, row_to_dict, rows_to_dicts
from dcims.filters.query_builder import compile_count, compile_select
from dcims.filters.translation import QuerySpec
from .schemas import WRITABLE_COLUMNS

SERVER_SELECT_COLUMNS = ("id",) + WRITABLE_COLUMNS + ("created_by", "created_at", "updated_at")
_RETURNING = ", ".join(SERVER_SELECT_COLUMNS)


def list_servers(spec: QuerySpec, offset: int) -> Tuple[List[Dict[str, Any]], int]:
    """One page of servers matching ``spec`` plus the unpaged total."""
    count_sql, count_params = compile_count(spec)
    page_sql, page_params = compile_select(spec, columns=SERVER_SELECT_COLUMNS, offset=offset)
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(count_sql, count_params)
        total = int(cur.fetchone()[0])
        cur.execute(page_sql, page_params)
        return rows_to_dicts(cur, cur.fetchall()), total


def fetch_server(server_id: str) -> Optional[Dict[str, Any]]:
    sql = f"""
        SELECT {_RETURNING}
        FROM public.servers
        WHERE id = %s
        LIMIT 1;
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (server_id,))
        return row_to_dict(cur, cur.fetchone())


def insert_server(payload: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    cols = [c for c in WRITABLE_COLUMNS if c in payload]
    placeholders = ",".join(["%s"] * (len(cols) + 1))
    sql = f"""
        INSERT INTO public.servers ({", ".join(cols)}, created_by)
        VALUES ({placeholders})
        RETURNING {_RETURNING};
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, [payload[c] for c in cols] + [user_id])
        row = row_to_dict(cur, cur.fetchone())
        conn.commit()
        return row


def update_server(server_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    cols = [c for c in WRITABLE_COLUMNS if c in fields]
    if not cols:
        return fetch_server(server_id)
    assignments = ", ".join(f"{c} = %s" for c in cols)
    sql = f"""
        UPDATE public.servers
        SET {assignments}, updated_at = now()
        WHERE id = %s
        RETURNING {_RETURNING};
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, [fields[c] for c in cols] + [server_id])
        row = row_to_dict(cur, cur.fetchone())
        conn.commit()
        return row


def delete_server(server_id: str) -> bool:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute("DELETE FROM public.servers WHERE id = %s RETURNING id;", (server_id,))
        deleted = cur.fetchone() is not None
        conn.commit()
        return deleted


def bulk_insert_servers(records: Sequence[Dict[str, Any]], user_id: str) -> int:
    """Insert validated records in one statement; returns rows inserted."""
    if not records:
        return 0
    cols = list(WRITABLE_COLUMNS)
    # every column is listed, so column defaults have to be applied here
    defaults = {"status": "Active"}
    values = [
        [r.get(c) if r.get(c) is not None else defaults.get(c) for c in cols] + [user_id]
        for r in records
    ]
    sql = f"INSERT INTO public.servers ({', '.join(cols)}, created_by) VALUES %s"
    with get_db_connection() as conn, conn.cursor() as cur:
        execute_values(cur, sql, values, page_size=500)
        conn.commit()
    return len(values)


def distinct_values(column: str) -> List[str]:
    """Sorted non-empty distinct values of a whitelisted server column."""
    if column not in WRITABLE_COLUMNS:
        raise ValueError(f"Unknown server column '{column}'")
    sql = f"""
        SELECT DISTINCT {column}::text
        FROM public.servers
        WHERE {column} IS NOT NULL AND {column}::text <> ''
        ORDER BY 1;
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql)
        return [r[0] for r in cur.fetchall()]
