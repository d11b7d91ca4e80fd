from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: employee as seen by the attendance subsystem.

    Note: plain data object, no DB access. The face descriptor is produced
    elsewhere (face registration) and only consumed here.
    """

    employee_id: int
    user_id: int
    employee_code: str
    first_name: str
    last_name: str
    face_descriptor: Optional[tuple[float, ...]] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        name = f"{self.first_name or 'Employee'} {self.last_name or ''}".strip()
        return name

    @property
    def has_face_registered(self) -> bool:
        return bool(self.face_descriptor)
