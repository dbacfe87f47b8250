"""Condition validator for the WHERE and HAVING trees.

Checks that each leaf's value has the shape its operator needs and that
the trees stay within the configured size.
"""

from __future__ import annotations

from visql.mutate.filter_tree import count_conditions, iter_conditions
from visql.schema.context import ValidationContext
from visql.schema.filters import Condition
from visql.schema.operators import MEMBERSHIP_OPS, NULL_OPS, RANGE_OPS, FilterOperator
from visql.schema.values import value_arity, value_matches_operator
from visql.validate.issues import ValidationIssue, ValidationIssueKind


class ConditionValidator:
    """Validates filter and having leaves.

    Args:
        ctx: Validation context (config + limits).
    """

    def __init__(self, ctx: ValidationContext) -> None:
        self._ctx = ctx

    def validate_values(self) -> list[ValidationIssue]:
        """One issue per leaf whose value arity does not fit its operator."""
        issues: list[ValidationIssue] = []
        for tree, root in (("filters", self._ctx.config.filters), ("having", self._ctx.config.having)):
            for condition in iter_conditions(root):
                if value_matches_operator(condition.operator, condition.value):
                    continue
                issues.append(_malformed(tree, condition))
        return issues

    def validate_condition_count(self) -> list[ValidationIssue]:
        config = self._ctx.config
        count = count_conditions(config.filters) + count_conditions(config.having)
        max_conditions = self._ctx.limits.max_filter_conditions
        if count <= max_conditions:
            return []
        return [
            ValidationIssue(
                kind=ValidationIssueKind.EXCESSIVE_FILTERS,
                message=f"{count} filter conditions exceed the maximum of {max_conditions}.",
                location="filters",
                details={"count": count, "max_filter_conditions": max_conditions},
            )
        ]


def _expected_arity(operator: FilterOperator) -> str:
    if operator in NULL_OPS:
        return "no value"
    if operator in RANGE_OPS:
        return "exactly 2 values"
    if operator in MEMBERSHIP_OPS:
        return "at least 1 value"
    return "exactly 1 value"


def _malformed(tree: str, condition: Condition) -> ValidationIssue:
    expected = _expected_arity(condition.operator)
    return ValidationIssue(
        kind=ValidationIssueKind.MALFORMED_CONDITION_VALUE,
        message=(
            f"Operator {condition.operator.value} on '{condition.column}' "
            f"expects {expected}."
        ),
        location=f"{tree}/{condition.id}",
        details={
            "node_id": condition.id,
            "operator": condition.operator.value,
            "expected": expected,
            "received": value_arity(condition.value),
        },
    )
