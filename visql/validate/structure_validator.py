"""Structural validator: tables, selection and joins.

Checks that there is something to select from and to select, and that
every join connects two tables present in the config through at least one
ON comparison.
"""

from __future__ import annotations

from visql.schema.context import ValidationContext
from visql.validate.issues import ValidationIssue, ValidationIssueKind


class StructureValidator:
    """Validates the table / column / join skeleton of a config.

    Args:
        ctx: Validation context (config + limits).
    """

    def __init__(self, ctx: ValidationContext) -> None:
        self._ctx = ctx

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate_tables(self) -> list[ValidationIssue]:
        if self._ctx.config.tables:
            return []
        return [
            ValidationIssue(
                kind=ValidationIssueKind.NO_TABLE_SELECTED,
                message="Select at least one table.",
                location="tables",
            )
        ]

    def validate_selection(self) -> list[ValidationIssue]:
        config = self._ctx.config
        if config.columns or config.aggregations:
            return []
        return [
            ValidationIssue(
                kind=ValidationIssueKind.NO_COLUMNS_OR_AGGREGATIONS,
                message="Select at least one column or aggregation.",
                location="columns",
            )
        ]

    def validate_join_tables(self) -> list[ValidationIssue]:
        """One issue per join side that names a table not in the config."""
        issues: list[ValidationIssue] = []
        for index, join in enumerate(self._ctx.config.joins):
            for side in (join.left_table, join.right_table):
                if side in self._ctx.table_aliases:
                    continue
                issues.append(
                    ValidationIssue(
                        kind=ValidationIssueKind.ORPHAN_JOIN,
                        message=f"Join references table '{side}', which is not selected.",
                        location=f"joins[{index}]",
                        details={"join_id": join.id, "table": side},
                    )
                )
        return issues

    def validate_join_conditions(self) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for index, join in enumerate(self._ctx.config.joins):
            if join.conditions:
                continue
            issues.append(
                ValidationIssue(
                    kind=ValidationIssueKind.DEGENERATE_JOIN,
                    message=(
                        f"Join between '{join.left_table}' and '{join.right_table}' "
                        "has no ON condition."
                    ),
                    location=f"joins[{index}]",
                    details={"join_id": join.id},
                )
            )
        return issues

    def validate_join_count(self) -> list[ValidationIssue]:
        max_joins = self._ctx.limits.max_joins
        count = len(self._ctx.config.joins)
        if count <= max_joins:
            return []
        return [
            ValidationIssue(
                kind=ValidationIssueKind.EXCESSIVE_JOINS,
                message=f"{count} joins exceed the maximum of {max_joins}.",
                location="joins",
                details={"count": count, "max_joins": max_joins},
            )
        ]
