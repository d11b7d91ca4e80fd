from __future__ import annotations

from typing import Protocol, Sequence

from .model import Notification


class NotificationSink(Protocol):
    def create_notification(self, notification: Notification) -> int:
        raise NotImplementedError

    def list_active_admin_ids(self) -> Sequence[int]:
        raise NotImplementedError
