"""Semantic validator: alias uniqueness, alias references and LIMIT range."""

from __future__ import annotations

from collections import Counter

from visql.mutate.filter_tree import iter_conditions
from visql.schema.column_reference import ColumnReference
from visql.schema.context import ValidationContext
from visql.schema.query_config import ColumnSpec
from visql.validate.issues import ValidationIssue, ValidationIssueKind


class SemanticValidator:
    """Validates naming and range rules on a config.

    Args:
        ctx: Validation context (config + limits).
    """

    def __init__(self, ctx: ValidationContext) -> None:
        self._ctx = ctx

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate_aliases(self) -> list[ValidationIssue]:
        """Table and aggregation aliases share one namespace.

        An aggregation alias must also differ from every GROUP BY entry,
        otherwise a HAVING leaf naming it would be ambiguous.  Each
        offending name is reported once.
        """
        config = self._ctx.config
        counts = Counter([*config.table_aliases, *config.aggregation_aliases()])
        duplicated = [name for name, n in counts.items() if n > 1]
        grouped = set(config.group_by)
        shadowing = [
            name
            for name in dict.fromkeys(config.aggregation_aliases())
            if name in grouped and name not in duplicated
        ]
        issues = [
            ValidationIssue(
                kind=ValidationIssueKind.DUPLICATE_ALIAS,
                message=f"Alias '{name}' is used more than once.",
                location="aliases",
                details={"alias": name, "count": counts[name]},
            )
            for name in duplicated
        ]
        issues += [
            ValidationIssue(
                kind=ValidationIssueKind.DUPLICATE_ALIAS,
                message=f"Aggregation alias '{name}' collides with a GROUP BY column.",
                location="aliases",
                details={"alias": name, "group_by": name},
            )
            for name in shadowing
        ]
        return issues

    def validate_table_references(self) -> list[ValidationIssue]:
        """Qualified references must use an alias present in ``tables``.

        Skipped when no table is selected; that case is already reported.
        """
        config = self._ctx.config
        if not config.tables:
            return []
        refs: list[tuple[str, ColumnReference]] = []
        refs += [(f"columns[{i}]", _spec_ref(c)) for i, c in enumerate(config.columns)]
        refs += [(f"aggregations[{i}]", _spec_ref(a)) for i, a in enumerate(config.aggregations)]
        refs += [
            (f"filters/{c.id}", ColumnReference.parse(c.column))
            for c in iter_conditions(config.filters)
        ]
        refs += [(f"groupBy[{i}]", ColumnReference.parse(g)) for i, g in enumerate(config.group_by)]
        refs += [
            (f"sorts[{i}]", ColumnReference.parse(s.column)) for i, s in enumerate(config.sorts)
        ]
        return [
            ValidationIssue(
                kind=ValidationIssueKind.UNKNOWN_TABLE_REFERENCE,
                message=f"Table alias '{ref.table}' is not selected.",
                location=location,
                details={"table": ref.table},
            )
            for location, ref in refs
            if not ref.resolves_in(self._ctx.table_aliases)
        ]

    def validate_limit(self) -> list[ValidationIssue]:
        limit = self._ctx.config.limit
        if limit is None:
            return []
        max_limit = self._ctx.limits.max_limit
        if limit <= 0:
            message = "LIMIT value must be a positive integer."
        elif limit > max_limit:
            message = f"LIMIT {limit} exceeds max_limit={max_limit}."
        else:
            return []
        return [
            ValidationIssue(
                kind=ValidationIssueKind.INVALID_LIMIT,
                message=message,
                location="limit",
                details={"limit": limit, "max_limit": max_limit},
            )
        ]


def _spec_ref(spec: ColumnSpec) -> ColumnReference:
    return ColumnReference(table=spec.table or None, column=spec.column)
