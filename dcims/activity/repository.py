# dcims/activity/repository.py
from typing import Any, Dict, List, Optional

from psycopg2.extras import Json

from dcims.db.connection import get_db_connection, rows_to_dicts


def insert_activity(
    user_id: Optional[str],
    action: str,
    entity_type: Optional[str],
    entity_id: Optional[str],
    details: Dict[str, Any],
) -> None:
    sql = """
        INSERT INTO public.activity_logs (
            user_id, action, entity_type, entity_id, details
        )
        VALUES (%s,%s,%s,%s,%s);
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (user_id, action, entity_type, entity_id, Json(details)))
        conn.commit()


def list_activity(
    user_id: Optional[str],
    limit: int,
    offset: int,
) -> List[Dict[str, Any]]:
    where = "WHERE user_id = %s" if user_id else ""
    params: tuple = (user_id,) if user_id else ()
    sql = f"""
        SELECT id, user_id, action, entity_type, entity_id, details, created_at
        FROM public.activity_logs
        {where}
        ORDER BY created_at DESC
        LIMIT %s OFFSET %s;
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, params + (limit, offset))
        return rows_to_dicts(cur, cur.fetchall())


def count_activity(user_id: Optional[str]) -> int:
    if user_id:
        sql, params = "SELECT COUNT(*) FROM public.activity_logs WHERE user_id = %s;", (user_id,)
    else:
        sql, params = "SELECT COUNT(*) FROM public.activity_logs;", ()
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, params)
        return int(cur.fetchone()[0])
