"""Aggregation validator: GROUP BY coverage and HAVING references."""

from __future__ import annotations

from visql.mutate.filter_tree import iter_conditions
from visql.schema.context import ValidationContext
from visql.schema.operators import COLUMNLESS_AGGREGATIONS
from visql.schema.query_config import ColumnSpec
from visql.validate.issues import ValidationIssue, ValidationIssueKind


class AggregationValidator:
    """Validates the rules that apply once a query aggregates.

    Args:
        ctx: Validation context (config + limits).
    """

    def __init__(self, ctx: ValidationContext) -> None:
        self._ctx = ctx

    def validate_grouping(self) -> list[ValidationIssue]:
        """Every plain column must be grouped when anything is aggregated.

        A column counts as grouped when GROUP BY lists it qualified
        (``o.region``), bare (``region``) or by its output alias.
        """
        config = self._ctx.config
        if not config.has_aggregation:
            return []
        grouped = set(config.group_by)
        issues: list[ValidationIssue] = []
        for index, spec in enumerate(config.columns):
            if spec.is_aggregated or _is_grouped(spec, grouped):
                continue
            issues.append(
                ValidationIssue(
                    kind=ValidationIssueKind.UNGROUPED_COLUMN,
                    message=(
                        f"Column '{spec.qualified_name}' must appear in GROUP BY "
                        "or be aggregated."
                    ),
                    location=f"columns[{index}]",
                    details={"column": spec.qualified_name},
                )
            )
        return issues

    def validate_having_references(self) -> list[ValidationIssue]:
        """HAVING leaves may only name GROUP BY entries or aggregation aliases."""
        allowed = set(self._ctx.config.group_by) | self._ctx.aggregation_aliases
        issues: list[ValidationIssue] = []
        for condition in iter_conditions(self._ctx.config.having):
            if condition.column in allowed:
                continue
            issues.append(
                ValidationIssue(
                    kind=ValidationIssueKind.INVALID_HAVING_REFERENCE,
                    message=(
                        f"HAVING condition on '{condition.column}' must reference a "
                        "GROUP BY column or an aggregation alias."
                    ),
                    location=f"having/{condition.id}",
                    details={"node_id": condition.id, "column": condition.column},
                )
            )
        return issues

    def validate_aggregation_columns(self) -> list[ValidationIssue]:
        """Only COUNT may be applied without a column (``COUNT(*)``)."""
        issues: list[ValidationIssue] = []
        for location, spec in self._located_aggregations():
            if spec.column or spec.aggregation in COLUMNLESS_AGGREGATIONS:
                continue
            issues.append(
                ValidationIssue(
                    kind=ValidationIssueKind.MISSING_AGGREGATION_COLUMN,
                    message=f"{spec.aggregation.value} requires a column.",
                    location=location,
                    details={"function": spec.aggregation.value, "alias": spec.alias},
                )
            )
        return issues

    def _located_aggregations(self) -> list[tuple[str, ColumnSpec]]:
        config = self._ctx.config
        located = [(f"aggregations[{i}]", spec) for i, spec in enumerate(config.aggregations)]
        located += [
            (f"columns[{i}]", spec) for i, spec in enumerate(config.columns) if spec.is_aggregated
        ]
        return located


def _is_grouped(spec: ColumnSpec, grouped: set[str]) -> bool:
    if spec.qualified_name in grouped or spec.column in grouped:
        return True
    return spec.alias is not None and spec.alias in grouped
