from __future__ import annotations

import json
import logging
from typing import Any, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee
from .repository import EmployeeDirectory

logger = logging.getLogger(__name__)


def _parse_descriptor(raw: Any) -> Optional[tuple[float, ...]]:
    if raw in (None, ""):
        return None
    try:
        values = json.loads(raw) if isinstance(raw, (str, bytes, bytearray)) else raw
        return tuple(float(v) for v in values)
    except (TypeError, ValueError):
        logger.warning("Ignoring malformed face descriptor in employees table")
        return None


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, user_id, employee_code, first_name, last_name, face_descriptor, is_active
                FROM employees
                WHERE user_id=%s
                """,
                (user_id,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Employee(
                employee_id=int(row["employee_id"]),
                user_id=int(row["user_id"]),
                employee_code=row.get("employee_code") or "",
                first_name=row.get("first_name") or "",
                last_name=row.get("last_name") or "",
                face_descriptor=_parse_descriptor(row.get("face_descriptor")),
                is_active=bool(row.get("is_active", True)),
            )
