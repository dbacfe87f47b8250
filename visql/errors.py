"""Custom exception hierarchy for visql.

All public errors inherit from VisqlError so callers can catch the base
class for any visql-specific failure.

Structural problems in a ``VisualQueryConfig`` are *not* exceptions: the
validator returns them as :class:`~visql.validate.issues.ValidationIssue`
data.  :class:`InvalidQueryConfigError` only wraps those issues for callers
that want to stop an execution path (e.g. ``validate_and_compile``).
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from visql.validate.issues import ValidationIssue


class VisqlError(Exception):
    """Base exception for all visql errors."""


class ConfigParseError(VisqlError):
    """Raised when a saved blob cannot be parsed as a VisualQueryConfig.

    Args:
        message: Human-readable description.
        raw: The raw string that failed to parse.
    """

    def __init__(self, message: str, raw: str | None = None) -> None:
        super().__init__(message)
        self.raw = raw


class InvalidQueryConfigError(VisqlError):
    """Raised when a caller requires a config to be valid and it is not.

    Args:
        issues: Every violation reported by the validator.
    """

    def __init__(self, issues: list[ValidationIssue]) -> None:
        kinds = ", ".join(sorted({issue.kind.value for issue in issues}))
        super().__init__(f"Query configuration is invalid: {kinds}.")
        self.issues = list(issues)

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response for the UI layer."""
        return {
            "error": "INVALID_QUERY_CONFIG",
            "message": str(self),
            "details": [issue.model_dump(mode="json") for issue in self.issues],
        }


class CompilationError(VisqlError):
    """Raised when the compiler is asked for something it cannot provide.

    The compiler itself is total over configs; this error covers caller
    mistakes such as naming an unregistered dialect.

    Args:
        message: Human-readable description.
        clause: The clause being compiled when the error occurred.
    """

    def __init__(self, message: str, clause: str | None = None) -> None:
        super().__init__(message)
        self.clause = clause
