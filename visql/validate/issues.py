"""Validation results.

The validator reports structural problems as data rather than raising, so
the builder can show every problem at once next to the control that caused
it.  ``location`` points into the config (``"joins[1]"``, ``"filters/c1"``).
"""
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ValidationIssueKind(str, Enum):
    NO_TABLE_SELECTED = "NoTableSelected"
    NO_COLUMNS_OR_AGGREGATIONS = "NoColumnsOrAggregations"
    ORPHAN_JOIN = "OrphanJoin"
    DEGENERATE_JOIN = "DegenerateJoin"
    UNGROUPED_COLUMN = "UngroupedColumn"
    INVALID_HAVING_REFERENCE = "InvalidHavingReference"
    MALFORMED_CONDITION_VALUE = "MalformedConditionValue"
    DUPLICATE_ALIAS = "DuplicateAlias"
    UNKNOWN_TABLE_REFERENCE = "UnknownTableReference"
    MISSING_AGGREGATION_COLUMN = "MissingAggregationColumn"
    EXCESSIVE_JOINS = "ExcessiveJoins"
    EXCESSIVE_FILTERS = "ExcessiveFilters"
    INVALID_LIMIT = "InvalidLimit"


class ValidationIssue(BaseModel):
    """A single structural problem found in a config.

    Attributes:
        kind: Issue category.
        message: Human-readable explanation shown in the builder.
        location: Path of the offending element, or ``None`` for
            config-level issues.
        details: Machine-readable extras (the offending alias, column, ...).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: ValidationIssueKind
    message: str
    location: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class ValidationResult(BaseModel):
    """Outcome of :func:`~visql.validate.validator.validate_config`.

    ``valid`` is true exactly when ``errors`` is empty.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    errors: tuple[ValidationIssue, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def kinds(self) -> list[ValidationIssueKind]:
        """Issue kinds in report order, with repeats."""
        return [issue.kind for issue in self.errors]
