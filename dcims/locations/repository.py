# dcims/locations/repository.py
from typing import Any, Dict, List, Optional

from dcims.db.connection import get_db_connection, row_to_dict, rows_to_dicts


def fetch_location_rows() -> List[Dict[str, Any]]:
    """Distinct (site, building, floor, room, rack) combinations in use."""
    sql = """
        SELECT DISTINCT dc_site, dc_building, dc_floor, dc_room, rack
        FROM public.servers;
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql)
        return rows_to_dicts(cur, cur.fetchall())


def fetch_rack_location(rack: str) -> Optional[Dict[str, Any]]:
    """
    Location of ``rack`` as recorded on its servers. When servers disagree
    the most common location wins.
    """
    sql = """
        SELECT dc_site, dc_building, dc_floor, dc_room, COUNT(*) AS server_count
        FROM public.servers
        WHERE rack = %s
        GROUP BY dc_site, dc_building, dc_floor, dc_room
        ORDER BY server_count DESC, dc_site, dc_building, dc_floor, dc_room
        LIMIT 1;
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql, (rack,))
        return row_to_dict(cur, cur.fetchone())


def fetch_first_rack() -> Optional[Dict[str, Any]]:
    sql = """
        SELECT rack, dc_site, dc_building, dc_floor, dc_room
        FROM public.servers
        WHERE rack IS NOT NULL AND rack <> ''
        ORDER BY dc_site, dc_building, dc_floor, dc_room, rack
        LIMIT 1;
    """
    with get_db_connection() as conn, conn.cursor() as cur:
        cur.execute(sql)
        return row_to_dict(cur, cur.fetchone())
