from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class RelatedEntity:
    model: str
    id: int


@dataclass(frozen=True)
class Notification:
    """In-app notification addressed to a set of users."""

    title: str
    message: str
    target_users: tuple[int, ...]
    type: str = "info"
    category: str = "general"
    sender: Optional[int] = None
    priority: str = "medium"
    related_entity: Optional[RelatedEntity] = None
    metadata: dict[str, Any] = field(default_factory=dict)
