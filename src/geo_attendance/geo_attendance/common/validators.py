from __future__ import annotations

import json
import math
from typing import Any, Mapping, Optional, Sequence

from ..core.exceptions import ValidationError


def require_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or value is None or value == "":
        raise ValidationError(f"{field_name} is required")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"{field_name} must be a number") from None
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a finite number")
    return number


def require_coordinates(location: Optional[Mapping[str, Any]]) -> tuple[float, float]:
    """Presence/type/range check for a submitted ``{latitude, longitude}`` mapping."""

    if not isinstance(location, Mapping):
        raise ValidationError("Location data is required for attendance")
    if location.get("latitude") in (None, "") or location.get("longitude") in (None, ""):
        raise ValidationError("Location data is required for attendance")

    latitude = require_number(location.get("latitude"), "latitude")
    longitude = require_number(location.get("longitude"), "longitude")
    if not (-90 <= latitude <= 90):
        raise ValidationError("Latitude must be between -90 and 90")
    if not (-180 <= longitude <= 180):
        raise ValidationError("Longitude must be between -180 and 180")
    return latitude, longitude


def require_descriptor(value: Any, *, length: int) -> list[float]:
    """Validate a face descriptor: JSON array (or JSON string) of ``length`` finite numbers."""

    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            raise ValidationError("Invalid face descriptor format") from None

    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        raise ValidationError(f"Invalid face descriptor. Must be array of {length} numbers.")
    if len(value) != length:
        raise ValidationError(
            f"Invalid face descriptor. Must be array of {length} numbers (received {len(value)})."
        )

    out: list[float] = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            raise ValidationError("Face descriptor must contain only valid numbers")
        try:
            number = float(item)
        except OverflowError:
            raise ValidationError("Face descriptor must contain only valid numbers") from None
        if not math.isfinite(number):
            raise ValidationError("Face descriptor must contain only valid numbers")
        out.append(number)
    return out
