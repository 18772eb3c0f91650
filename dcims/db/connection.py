# dcims/db/connection.py

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import psycopg2

from dcims.core.config import settings

logger = logging.getLogger(__name__)


@contextmanager
def get_db_connection():
    """
    The one place a store connection is created. Rolls back whatever is
    left uncommitted when the block raises.
    """
    db_url = settings.DATABASE_URL
    if not db_url:
        raise ValueError("DATABASE_URL missing")

    conn = None
    try:
        conn = psycopg2.connect(db_url)
        yield conn
    except Exception:
        if conn is not None:
            conn.rollback()
        raise
    finally:
        if conn:
            conn.close()


def row_to_dict(cur, row) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    cols = [d[0] for d in cur.description]
    return dict(zip(cols, row))


def rows_to_dicts(cur, rows) -> List[Dict[str, Any]]:
    if not rows:
        return []
    cols = [d[0] for d in cur.description]
    return [dict(zip(cols, r)) for r in rows]
