"""Expression-level SQL builders.

Classes
-------
ColumnBuilder    : column references and aggregate calls
ValueBuilder     : inline literals for each filter value shape
ConditionBuilder : WHERE / HAVING trees

The builders never raise on a config.  A value whose shape does not suit
its operator is rendered as it is, with missing slots filled by ``NULL``;
reporting the mismatch is the validator's job.
"""
from __future__ import annotations

from visql.compile.context import CompilationContext
from visql.schema.column_reference import ColumnReference
from visql.schema.filters import Condition, Group
from visql.schema.operators import (
    MEMBERSHIP_OPS,
    NULL_OPS,
    RANGE_OPS,
    AggregationFunction,
)
from visql.schema.query_config import ColumnSpec
from visql.schema.values import FilterValue, ListValue, NoValue, PairValue, ScalarValue


class ColumnBuilder:
    """Renders column references and aggregate expressions."""

    def __init__(self, ctx: CompilationContext) -> None:
        self._ctx = ctx

    def reference(self, ref: str) -> str:
        """``"o.status"`` -> ``o.status``; each part quoted only if needed."""
        parsed = ColumnReference.parse(ref)
        return self.qualified(parsed.table or "", parsed.column)

    def qualified(self, table: str, column: str) -> str:
        render = self._ctx.compiler.render_identifier
        if table:
            return f"{render(table)}.{render(column)}"
        return render(column)

    def table_name(self, name: str) -> str:
        """Physical table name; ``schema.table`` is rendered part by part."""
        return ".".join(self._ctx.compiler.render_identifier(part) for part in name.split("."))

    def aggregate(self, spec: ColumnSpec) -> str:
        """``FN(t.c)``; COUNT without a column becomes ``COUNT(*)``."""
        function = spec.aggregation or AggregationFunction.COUNT
        argument = self.qualified(spec.table, spec.column) if spec.column else "*"
        return self._ctx.compiler.build_aggregate(function, argument)

    def select_item(self, spec: ColumnSpec) -> str:
        expr = self.aggregate(spec) if spec.is_aggregated else self.qualified(spec.table, spec.column)
        if spec.alias:
            return f"{expr} AS {self._ctx.compiler.render_identifier(spec.alias)}"
        return expr


class ValueBuilder:
    """Renders filter values as inline literals."""

    def __init__(self, ctx: CompilationContext) -> None:
        self._ctx = ctx

    def slots(self, value: FilterValue) -> list[str]:
        """Every literal carried by ``value``, in order."""
        literal = self._ctx.compiler.literal
        if isinstance(value, ScalarValue):
            return [literal(value.value)]
        if isinstance(value, PairValue):
            return [literal(value.low), literal(value.high)]
        if isinstance(value, ListValue):
            return [literal(item) for item in value.items]
        return []

    def scalar(self, value: FilterValue) -> str:
        parts = self.slots(value)
        if not parts:
            return self._ctx.compiler.null_literal()
        if len(parts) == 1 and not isinstance(value, ListValue):
            return parts[0]
        return f"({', '.join(parts)})"

    def range(self, value: FilterValue) -> str:
        """``low AND high``; more than two slots are listed in parentheses."""
        parts = self.slots(value)
        if len(parts) > 2:
            return f"({', '.join(parts)})"
        null = self._ctx.compiler.null_literal()
        low = parts[0] if parts else null
        high = parts[1] if len(parts) > 1 else null
        return f"{low} AND {high}"

    def membership(self, value: FilterValue) -> str:
        parts = self.slots(value) or [self._ctx.compiler.null_literal()]
        return f"({', '.join(parts)})"


class ConditionBuilder:
    """Compiles a filter tree to a SQL boolean expression.

    Args:
        ctx: Static compilation context.
        columns: Column renderer.
        values: Literal renderer.
        expand_aggregates: Render leaves that name an aggregation alias as
            the aggregate expression itself (used for HAVING).
    """

    def __init__(
        self,
        ctx: CompilationContext,
        columns: ColumnBuilder,
        values: ValueBuilder,
        expand_aggregates: bool = False,
    ) -> None:
        self._ctx = ctx
        self._columns = columns
        self._values = values
        self._expand_aggregates = expand_aggregates

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, root: Group) -> str:
        """Render ``root`` without outer parentheses; ``""`` when it is empty."""
        return self._build_group(root)

    # ------------------------------------------------------------------
    # Tree walk
    # ------------------------------------------------------------------

    def _build_group(self, group: Group) -> str:
        parts: list[str] = []
        for child in group.children:
            if isinstance(child, Condition):
                parts.append(self._build_condition(child))
                continue
            nested = self._build_group(child)
            if nested:
                parts.append(f"({nested})")
        return f" {group.logic.value} ".join(parts)

    def _build_condition(self, condition: Condition) -> str:
        column = self._column(condition.column)
        operator = condition.operator
        if operator in NULL_OPS:
            return f"{column} {operator.value}"
        if operator in RANGE_OPS:
            return f"{column} BETWEEN {self._values.range(condition.value)}"
        if operator in MEMBERSHIP_OPS:
            return f"{column} {operator.value} {self._values.membership(condition.value)}"
        return f"{column} {operator.value} {self._values.scalar(condition.value)}"

    def _column(self, ref: str) -> str:
        if self._expand_aggregates:
            spec = self._ctx.aggregates_by_alias.get(ref)
            if spec is not None:
                return self._columns.aggregate(spec)
        return self._columns.reference(ref)
