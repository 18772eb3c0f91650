# dcims/dashboards/repository.py
import logging
from typing import Any, Dict, List, Optional

from psycopg2.extras import Json

from dcims.core.exceptions import ConflictError
from dcims.db.connection import get_db_connection, row_to_dict, rows_to_dicts

logger = logging.getLogger(__name__)

DASHBOARD_COLUMNS = """
    id, name, description, user_id, is_public, status,
    layout, settings, version, created_at, updated_at
"""

WIDGET_COLUMNS = """
    id, dashboard_id, title, widget_type,
    position_x, position_y, width, height,
    config, data_source, filters, created_at, updated_at
"""


def list_dashboards(user_id: Optional[str]) -> List[Dict[str, Any]]:
    """Dashboards owned by ``user_id`` or public; anonymous sees public only."""
    if user_id:
        visibility = "(d.user_id = %s OR d.is_public = true)"
        params: tuple = (user_id,)
    else:
        visibility = "d.is_public = true"
        params = ()

    sql = f"""
        SELECT
            d.id, d.name, d.description, d.user_id, d.is_public, d.status,
            d.version, d.created_at, d.updated_at,
            COUNT(w.id) AS widget_count
        FROM public.dashboards d
        LEFT JOIN public.dashboard_widgets w ON w.dashboard_id = d.id
        WHERE {visibility}
        GROUP BY d.id
        ORDER BY d.updated_at DESC;
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, params)
        return rows_to_dicts(cur, cur.fetchall())


def fetch_dashboard(dashboard_id: str) -> Optional[Dict[str, Any]]:
    sql = f"""
        SELECT {DASHBOARD_COLUMNS}
        FROM public.dashboards
        WHERE id = %s
        LIMIT 1;
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (dashboard_id,))
        return row_to_dict(cur, cur.fetchone())


def fetch_widgets(dashboard_id: str) -> List[Dict[str, Any]]:
    sql = f"""
        SELECT {WIDGET_COLUMNS}
        FROM public.dashboard_widgets
        WHERE dashboard_id = %s
        ORDER BY position_y ASC, position_x ASC;
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (dashboard_id,))
        return rows_to_dicts(cur, cur.fetchall())


def _insert_widget(cur, dashboard_id: str, widget: Dict[str, Any]) -> Dict[str, Any]:
    sql = f"""
        INSERT INTO public.dashboard_widgets (
            dashboard_id, title, widget_type,
            position_x, position_y, width, height,
            config, data_source, filters
        )
        VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
        RETURNING {WIDGET_COLUMNS};
    """
    cur.execute(
        sql,
        (
            dashboard_id,
            widget["title"],
            widget["widget_type"],
            widget["position_x"],
            widget["position_y"],
            widget["width"],
            widget["height"],
            Json(widget.get("config") or {}),
            Json(widget.get("data_source") or {}),
            Json(widget.get("filters") or []),
        ),
    )
    return row_to_dict(cur, cur.fetchone())


def _update_widget(cur, widget_id: str, dashboard_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    sql = f"""
        UPDATE public.dashboard_widgets
        SET
            title = COALESCE(%s, title),
            widget_type = COALESCE(%s, widget_type),
            position_x = COALESCE(%s, position_x),
            position_y = COALESCE(%s, position_y),
            width = COALESCE(%s, width),
            height = COALESCE(%s, height),
            config = COALESCE(%s, config),
            data_source = COALESCE(%s, data_source),
            filters = COALESCE(%s, filters),
            updated_at = now()
        WHERE id = %s AND dashboard_id = %s
        RETURNING {WIDGET_COLUMNS};
    """
    cur.execute(
        sql,
        (
            fields.get("title"),
            fields.get("widget_type"),
            fields.get("position_x"),
            fields.get("position_y"),
            fields.get("width"),
            fields.get("height"),
            Json(fields["config"]) if fields.get("config") is not None else None,
            Json(fields["data_source"]) if fields.get("data_source") is not None else None,
            Json(fields["filters"]) if fields.get("filters") is not None else None,
            widget_id,
            dashboard_id,
        ),
    )
    return row_to_dict(cur, cur.fetchone())


def _touch_dashboard(cur, dashboard_id: str) -> None:
    cur.execute(
        """
        UPDATE public.dashboards
        SET version = version + 1, updated_at = now()
        WHERE id = %s;
        """,
        (dashboard_id,),
    )


def insert_dashboard(
    user_id: str,
    payload: Dict[str, Any],
    widgets: List[Dict[str, Any]],
) -> Dict[str, Any]:
    """Dashboard and its widgets in a single transaction."""
    sql = f"""
        INSERT INTO public.dashboards (
            name, description, user_id, is_public, status, layout, settings
        )
        VALUES (%s,%s,%s,%s,%s,%s,%s)
        RETURNING {DASHBOARD_COLUMNS};
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(
            sql,
            (
                payload["name"],
                payload.get("description"),
                user_id,
                payload.get("is_public", False),
                payload.get("status", "active"),
                Json(payload.get("layout") or {}),
                Json(payload.get("settings") or {}),
            ),
        )
        dashboard = row_to_dict(cur, cur.fetchone())
        dashboard["widgets"] = [_insert_widget(cur, dashboard["id"], w) for w in widgets]
        conn.commit()
        return dashboard


def sync_widgets(cur, dashboard_id: str, widgets: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Make the stored widget set of ``dashboard_id`` equal to ``widgets``.

    Widgets carrying the id of a stored widget are updated in place, the
    rest are inserted, and stored widgets not listed are deleted.
    """
    cur.execute(
        "SELECT id FROM public.dashboard_widgets WHERE dashboard_id = %s;",
        (dashboard_id,),
    )
    existing = {str(r[0]) for r in cur.fetchall()}

    kept: List[str] = []
    to_update: List[Dict[str, Any]] = []
    to_insert: List[Dict[str, Any]] = []
    for widget in widgets:
        wid = widget.get("id")
        if wid and wid in existing and wid not in kept:
            kept.append(wid)
            to_update.append(widget)
        else:
            to_insert.append(widget)

    if kept:
        cur.execute(
            """
            DELETE FROM public.dashboard_widgets
            WHERE dashboard_id = %s AND NOT (id = ANY(%s::uuid[]));
            """,
            (dashboard_id, kept),
        )
    else:
        cur.execute(
            "DELETE FROM public.dashboard_widgets WHERE dashboard_id = %s;",
            (dashboard_id,),
        )
    removed = cur.rowcount

    for widget in to_update:
        _update_widget(cur, widget["id"], dashboard_id, widget)
    for widget in to_insert:
        _insert_widget(cur, dashboard_id, widget)

    logger.info(
        "Dashboard %s widgets synced: %d updated, %d inserted, %d removed",
        dashboard_id,
        len(to_update),
        len(to_insert),
        removed,
    )

    cur.execute(
        f"""
        SELECT {WIDGET_COLUMNS}
        FROM public.dashboard_widgets
        WHERE dashboard_id = %s
        ORDER BY position_y ASC, position_x ASC;
        """,
        (dashboard_id,),
    )
    return rows_to_dicts(cur, cur.fetchall())


def update_dashboard(
    dashboard_id: str,
    user_id: str,
    payload: Dict[str, Any],
    widgets: Optional[List[Dict[str, Any]]] = None,
    expected_version: Optional[int] = None,
) -> Optional[Dict[str, Any]]:
    """
    Update an owned dashboard and, when ``widgets`` is given, its widget set.

    The dashboard row is locked for the whole transaction. A stale
    ``expected_version`` raises ConflictError; a missing or foreign
    dashboard returns None.
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(
            """
            SELECT version FROM public.dashboards
            WHERE id = %s AND user_id = %s
            FOR UPDATE;
            """,
            (dashboard_id, user_id),
        )
        locked = cur.fetchone()
        if not locked:
            conn.rollback()
            return None

        current_version = locked[0]
        if expected_version is not None and expected_version != current_version:
            conn.rollback()
            raise ConflictError(
                f"Dashboard was modified by someone else (version {current_version}, "
                f"you sent {expected_version}). Reload and try again."
            )

        cur.execute(
            f"""
            UPDATE public.dashboards
            SET
                name = COALESCE(%s, name),
                description = COALESCE(%s, description),
                is_public = COALESCE(%s, is_public),
                status = COALESCE(%s, status),
                layout = COALESCE(%s, layout),
                settings = COALESCE(%s, settings),
                version = version + 1,
                updated_at = now()
            WHERE id = %s
            RETURNING {DASHBOARD_COLUMNS};
            """,
            (
                payload.get("name"),
                payload.get("description"),
                payload.get("is_public"),
                payload.get("status"),
                Json(payload["layout"]) if payload.get("layout") is not None else None,
                Json(payload["settings"]) if payload.get("settings") is not None else None,
                dashboard_id,
            ),
        )
        dashboard = row_to_dict(cur, cur.fetchone())

        if widgets is not None:
            dashboard["widgets"] = sync_widgets(cur, dashboard_id, widgets)

        conn.commit()
        return dashboard


def delete_dashboard(dashboard_id: str, user_id: str) -> bool:
    sql = """
        DELETE FROM public.dashboards
        WHERE id = %s AND user_id = %s
        RETURNING id;
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (dashboard_id, user_id))
        deleted = cur.fetchone() is not None
        conn.commit()
        return deleted


# -------------------------------------------------
# Single-widget operations
# -------------------------------------------------


def fetch_widget(widget_id: str) -> Optional[Dict[str, Any]]:
    sql = f"""
        SELECT {WIDGET_COLUMNS}
        FROM public.dashboard_widgets
        WHERE id = %s
        LIMIT 1;
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (widget_id,))
        return row_to_dict(cur, cur.fetchone())


def insert_widget(dashboard_id: str, widget: Dict[str, Any]) -> Dict[str, Any]:
    with get_db_connection() as conn, conn.cursor() as cur:
        row = _insert_widget(cur, dashboard_id, widget)
        _touch_dashboard(cur, dashboard_id)
        conn.commit()
        return row


def update_widget(widget_id: str, dashboard_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    with get_db_connection() as conn, conn.cursor() as cur:
        row = _update_widget(cur, widget_id, dashboard_id, fields)
        if row:
            _touch_dashboard(cur, dashboard_id)
        conn.commit()
        return row


def delete_widget(widget_id: str, dashboard_id: str) -> bool:
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(
            """
            DELETE FROM public.dashboard_widgets
            WHERE id = %s AND dashboard_id = %s
            RETURNING id;
            """,
            (widget_id, dashboard_id),
        )
        deleted = cur.fetchone() is not None
        if deleted:
            _touch_dashboard(cur, dashboard_id)
        conn.commit()
        return deleted
