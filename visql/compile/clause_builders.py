"""Clause-level SQL builders.

Each class handles exactly one SQL clause and returns either the clause
text or ``""`` when the clause is omitted.

Classes
-------
SelectClauseBuilder  : ``SELECT <columns>, <aggregations>``
FromClauseBuilder    : ``FROM <table> AS <alias>``
JoinClauseBuilder    : ``<TYPE> JOIN … ON …``
GroupByClauseBuilder : ``GROUP BY …``
OrderByClauseBuilder : ``ORDER BY … ASC|DESC``
"""
from __future__ import annotations

from visql.compile.context import CompilationContext
from visql.compile.expression_builder import ColumnBuilder
from visql.schema.query_config import JoinSpec, TableRef, VisualQueryConfig


class SelectClauseBuilder:
    """Builds ``SELECT``: columns first, then aggregations, in config order."""

    def __init__(self, ctx: CompilationContext, columns: ColumnBuilder) -> None:
        self._ctx = ctx
        self._columns = columns

    def build(self, config: VisualQueryConfig) -> str:
        items = [self._columns.select_item(spec) for spec in config.columns]
        items += [self._columns.select_item(spec) for spec in config.aggregations]
        if not items:
            return "SELECT *"
        return f"SELECT {', '.join(items)}"


class FromClauseBuilder:
    """Builds the ``FROM <table> AS <alias>`` fragment for ``tables[0]``."""

    def __init__(self, ctx: CompilationContext, columns: ColumnBuilder) -> None:
        self._ctx = ctx
        self._columns = columns

    def build(self, config: VisualQueryConfig) -> str:
        if not config.tables:
            return ""
        return f"FROM {self.table_sql(config.tables[0])}"

    def table_sql(self, table: TableRef) -> str:
        name = self._columns.table_name(table.name)
        if not table.alias:
            return name
        return f"{name} AS {self._ctx.compiler.render_identifier(table.alias)}"


class JoinClauseBuilder:
    """Builds a single ``JOIN … ON …`` fragment.

    The joined table is ``right_table``; its physical name is looked up in
    ``tables``.  An alias missing from ``tables`` (an orphan join) is
    emitted as the table name itself.
    """

    def __init__(
        self,
        ctx: CompilationContext,
        columns: ColumnBuilder,
        from_builder: FromClauseBuilder,
    ) -> None:
        self._ctx = ctx
        self._columns = columns
        self._from = from_builder

    def build(self, join: JoinSpec) -> str:
        table = self._ctx.config.get_table(join.right_table) or TableRef(
            name=join.right_table, alias=""
        )
        sql = f"{join.type.value} JOIN {self._from.table_sql(table)}"
        if not join.conditions:
            return sql
        comparisons = [
            f"{self._columns.reference(c.left_column)} {c.operator.value} "
            f"{self._columns.reference(c.right_column)}"
            for c in join.conditions
        ]
        return f"{sql} ON {' AND '.join(comparisons)}"


class GroupByClauseBuilder:
    """Builds ``GROUP BY`` from the config's entries, in order."""

    def __init__(self, ctx: CompilationContext, columns: ColumnBuilder) -> None:
        self._ctx = ctx
        self._columns = columns

    def build(self, config: VisualQueryConfig) -> str:
        if not config.group_by:
            return ""
        return f"GROUP BY {', '.join(self._columns.reference(g) for g in config.group_by)}"


class OrderByClauseBuilder:
    """Builds ``ORDER BY <column> <direction>, …``."""

    def __init__(self, ctx: CompilationContext, columns: ColumnBuilder) -> None:
        self._ctx = ctx
        self._columns = columns

    def build(self, config: VisualQueryConfig) -> str:
        if not config.sorts:
            return ""
        parts = [
            f"{self._columns.reference(s.column)} {s.direction.value}" for s in config.sorts
        ]
        return f"ORDER BY {', '.join(parts)}"
