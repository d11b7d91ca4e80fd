from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode
from mysql.connector import errors as mysql_errors

from ..core.exceptions import DuplicateRecordError, PersistenceError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


def is_duplicate_key(exc: BaseException) -> bool:
    return isinstance(exc, mysql_errors.IntegrityError) and getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)``; commit on success, roll back on error.

    Driver errors leave this block as :class:`DuplicateRecordError` (unique key
    hit) or :class:`PersistenceError` (anything else).
    """

    try:
        conn = conn_factory.connect()
    except mysql_errors.Error as exc:
        logger.exception("Could not open database connection")
        raise PersistenceError("Database unavailable") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql_errors.Error as exc:
        conn.rollback()
        if is_duplicate_key(exc):
            raise DuplicateRecordError(str(exc)) from exc
        logger.exception("Database operation failed")
        raise PersistenceError("Database operation failed") from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
