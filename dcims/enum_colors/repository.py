# dcims/enum_colors/repository.py
from typing import Any, Dict, List, Optional

from dcims.db.connection import get_db_connection, row_to_dict, rows_to_dicts

COLUMNS = """
    id, enum_type, enum_value, color_hex, color_name,
    user_id, is_active, created_by, created_at, updated_at
"""


def list_colors(
    user_id: str,
    enum_type: Optional[str] = None,
    enum_value: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Active global mappings plus the caller's own."""
    conditions = ["is_active = true", "(user_id IS NULL OR user_id = %s)"]
    params: List[Any] = [user_id]
    if enum_type:
        conditions.append("enum_type = %s")
        params.append(enum_type)
    if enum_value:
        conditions.append("enum_value = %s")
        params.append(enum_value)

    sql = f"""
        SELECT {COLUMNS}
        FROM public.enum_colors
        WHERE {" AND ".join(conditions)}
        ORDER BY enum_type, enum_value, user_id NULLS FIRST;
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, params)
        return rows_to_dicts(cur, cur.fetchall())


def upsert_color(
    enum_type: str,
    enum_value: str,
    color_hex: str,
    color_name: Optional[str],
    owner_id: Optional[str],
    created_by: str,
) -> Dict[str, Any]:
    """
    One active mapping per (enum_type, enum_value, owner). ``owner_id`` None
    is the global mapping.
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(
            """
            SELECT id FROM public.enum_colors
            WHERE enum_type = %s AND enum_value = %s AND is_active = true
              AND user_id IS NOT DISTINCT FROM %s
            LIMIT 1
            FOR UPDATE;
            """,
            (enum_type, enum_value, owner_id),
        )
        existing = cur.fetchone()
        if existing:
            cur.execute(
                f"""
                UPDATE public.enum_colors
                SET color_hex = %s, color_name = %s, updated_at = now()
                WHERE id = %s
                RETURNING {COLUMNS};
                """,
                (color_hex, color_name, existing[0]),
            )
        else:
            cur.execute(
                f"""
                INSERT INTO public.enum_colors (
                    enum_type, enum_value, color_hex, color_name,
                    user_id, created_by, is_active
                )
                VALUES (%s,%s,%s,%s,%s,%s,true)
                RETURNING {COLUMNS};
                """,
                (enum_type, enum_value, color_hex, color_name, owner_id, created_by),
            )
        row = row_to_dict(cur, cur.fetchone())
        conn.commit()
        return row


def update_color(color_id: str, user_id: str, color_hex: str, color_name: Optional[str]) -> Optional[Dict[str, Any]]:
    sql = f"""
        UPDATE public.enum_colors
        SET color_hex = %s, color_name = %s, updated_at = now()
        WHERE id = %s AND (user_id = %s OR user_id IS NULL)
        RETURNING {COLUMNS};
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (color_hex, color_name, color_id, user_id))
        row = row_to_dict(cur, cur.fetchone())
        conn.commit()
        return row


def delete_color(color_id: str, user_id: str) -> Optional[Dict[str, Any]]:
    sql = f"""
        DELETE FROM public.enum_colors
        WHERE id = %s AND (user_id = %s OR user_id IS NULL)
        RETURNING {COLUMNS};
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (color_id, user_id))
        row = row_to_dict(cur, cur.fetchone())
        conn.commit()
        return row
