from __future__ import annotations

import json
from typing import Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Notification
from .repository import NotificationSink


class MySQLNotificationSink(NotificationSink):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_notification(self, notification: Notification) -> int:
        related = notification.related_entity
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(
                    title, message, type, category, sender, priority, related_model, related_id, metadata
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    notification.title,
                    notification.message,
                    notification.type,
                    notification.category,
                    notification.sender,
                    notification.priority,
                    related.model if related else None,
                    related.id if related else None,
                    json.dumps(notification.metadata, default=str),
                ),
            )
            notification_id = int(cur.lastrowid)
            if notification.target_users:
                cur.executemany(
                    "INSERT INTO notification_targets(notification_id, user_id) VALUES(%s,%s)",
                    [(notification_id, int(uid)) for uid in notification.target_users],
                )
            return notification_id

    def list_active_admin_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id FROM users WHERE role=%s AND is_active=1 ORDER BY user_id",
                (Role.ADMIN.value,),
            )
            return [int(r["user_id"]) for r in fetchall(cur)]
