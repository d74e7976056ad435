"""Custom exception hierarchy for the evaluation session."""

from __future__ import annotations

from typing import Any


class SessionError(Exception):
    """Base exception for all evaluation session errors.

    Args:
        message: Human-readable error description.
        context: Optional dict of extra context for logging/debugging.
    """

    code: str = "session_error"

    def __init__(self, message: str = "", context: dict | None = None) -> None:
        super().__init__(message)
        self.context = context or {}

    @property
    def message(self) -> str:
        return str(self)

    def to_payload(self) -> dict[str, Any]:
        """Machine-readable classification plus the human-readable message."""
        return {"error": self.code, "message": self.message}


class InputValidationError(SessionError):
    """Raised when a required input is missing or malformed."""

    code = "validation_error"


class NotFoundError(SessionError):
    """Raised when a lookup by key misses."""

    code = "not_found"


class TargetNotFoundError(NotFoundError):
    """Raised when the evaluated member cannot be resolved."""

    code = "target_not_found"


class EvaluatorNotFoundError(NotFoundError):
    """Raised when no member matches the evaluator key and role."""

    code = "evaluator_not_found"


class MemberNotFoundError(NotFoundError):
    """Raised when a member looked up by key (or a join slot owner) is missing."""

    code = "member_not_found"


class CriteriaNotFoundError(NotFoundError):
    """Raised when no criteria set is defined for an evaluation key."""

    code = "criteria_not_found"


class ConflictError(SessionError):
    """Raised when a request cannot be satisfied with the current resources."""

    code = "conflict"


class SlotUnavailableError(ConflictError):
    """Raised when every visitor slot is already taken."""

    code = "slot_unavailable"


class PersistenceError(SessionError):
    """Raised when the dataset cannot be read or written."""

    code = "persistence_error"


class ConfigurationError(SessionError):
    """Raised when configuration loading or validation fails."""

    code = "configuration_error"


# ── HTTP mapping ─────────────────────────────────────

_STATUS_BY_TYPE: list[tuple[type[SessionError], int]] = [
    (InputValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (PersistenceError, 500),
    (ConfigurationError, 500),
]


def http_status_for(exc: SessionError) -> int:
    """Return the HTTP status code a session error is reported with.

    Args:
        exc: The domain error raised by an operation.

    Returns:
        The status code of the first matching error family, 500 otherwise.
    """
    for exc_type, status in _STATUS_BY_TYPE:
        if isinstance(exc, exc_type):
            return status
    return 500
