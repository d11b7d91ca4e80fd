from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    ``status_code`` is the HTTP status the controller answers with and
    ``payload()`` the kind-specific fields merged into the error body.
    """

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def payload(self) -> dict[str, Any]:
        return {}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class GeofenceError(DomainError):
    """Submitted location is outside the office radius."""

    def __init__(self, *, distance: float, radius: float):
        super().__init__(
            f"You are not within office premises (Distance: {round(distance)}m, Required: {round(radius)}m)"
        )
        self.distance = float(distance)
        self.radius = float(radius)

    def payload(self) -> dict[str, Any]:
        return {"distance": round(self.distance), "radius": self.radius}


class FaceMismatchError(DomainError):
    def __init__(self, *, similarity: float, threshold: float):
        super().__init__(f"Face not recognized. Similarity: {similarity:.4f} (Required: >{threshold})")
        self.similarity = float(similarity)
        self.threshold = float(threshold)

    def payload(self) -> dict[str, Any]:
        return {"similarity": f"{self.similarity:.4f}", "threshold": self.threshold}


class NoFaceRegisteredError(DomainError):
    def __init__(self, message: str = "No face registered for this employee. Please register your face first."):
        super().__init__(message)


class NotFoundError(DomainError):
    status_code = 404


class EmployeeNotFoundError(NotFoundError):
    def __init__(self, message: str = "Employee record not found"):
        super().__init__(message)


class NoOpenRecordError(NotFoundError):
    def __init__(self, message: str = "No check-in record found for checkout"):
        super().__init__(message)


class AlreadyMarkedError(DomainError):
    """An attendance record already exists for the employee's calendar day."""

    def __init__(self, existing: Optional[Any] = None, message: str = "Attendance already marked for today"):
        super().__init__(message)
        self.existing = existing


class AlreadyCheckedOutError(DomainError):
    def __init__(self, record: Optional[Any] = None, message: str = "Already checked out for this session"):
        super().__init__(message)
        self.record = record


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class PersistenceError(DomainError):
    """Storage failed for a reason other than a uniqueness conflict."""

    status_code = 500


class DuplicateRecordError(Exception):
    """Repository-level signal: the (employee, calendar day) unique key was hit.

    Services translate this into :class:`AlreadyMarkedError`.
    """
