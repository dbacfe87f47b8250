"""Structural validation of a VisualQueryConfig."""
from visql.validate.issues import ValidationIssue, ValidationIssueKind, ValidationResult
from visql.validate.validator import QueryValidator, ensure_valid, validate_config

__all__ = [
    "QueryValidator",
    "ValidationIssue",
    "ValidationIssueKind",
    "ValidationResult",
    "ensure_valid",
    "validate_config",
]
