from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee


class EmployeeDirectory(Protocol):
    """Employee directory interface.

    Note (DIP): the attendance service depends on this interface, not on a concrete DB.
    """

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        raise NotImplementedError
