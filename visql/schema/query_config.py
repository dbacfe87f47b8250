"""Pydantic models for the VisualQueryConfig.

The builder UI owns one ``VisualQueryConfig`` snapshot per workspace.  It is
a plain frozen value: every edit goes through :mod:`visql.mutate` and
returns a new snapshot.  The JSON form (camelCase keys) is the request body
of the preview / execute endpoints and the persisted form of a saved query::

    {
      "connectionId": "conn-1",
      "tables": [{"name": "orders", "alias": "o"}],
      "joins": [],
      "columns": [{"table": "o", "column": "id"}],
      "filters": {"id": "root", "logic": "AND", "children": []},
      "groupBy": [],
      "aggregations": [],
      "having": {"id": "having-root", "logic": "AND", "children": []},
      "sorts": [],
      "limit": null
    }
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from visql.errors import ConfigParseError
from visql.schema.filters import Group
from visql.schema.operators import (
    AggregationFunction,
    JoinOperator,
    JoinType,
    SortDirection,
)

_MODEL_CONFIG = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

#: Id given to the root of the WHERE tree of a new config.
FILTER_ROOT_ID = "root"

#: Id given to the root of the HAVING tree of a new config.
HAVING_ROOT_ID = "having-root"


class TableRef(BaseModel):
    """A table placed on the builder canvas.

    Attributes:
        name: Physical table name.
        alias: Alias used everywhere else in the config; unique per config.
    """

    model_config = _MODEL_CONFIG

    name: str
    alias: str


class JoinCondition(BaseModel):
    """One ``left.col <op> right.col`` comparison of a JOIN's ON clause."""

    model_config = _MODEL_CONFIG

    left_column: str = Field(alias="leftColumn")
    right_column: str = Field(alias="rightColumn")
    operator: JoinOperator = JoinOperator.EQ


class JoinSpec(BaseModel):
    """A join between two tables already present in the config.

    Attributes:
        id: Join identifier.
        left_table: Alias of the left-hand table.
        right_table: Alias of the table being joined in.
        type: SQL join type.
        conditions: ON comparisons, combined with AND.  An empty tuple is
            representable (a degenerate cross join) and flagged by the
            validator.
    """

    model_config = _MODEL_CONFIG

    id: str
    left_table: str = Field(alias="leftTable")
    right_table: str = Field(alias="rightTable")
    type: JoinType = JoinType.INNER
    conditions: tuple[JoinCondition, ...] = ()


class ColumnSpec(BaseModel):
    """A selected column, optionally aggregated.

    Attributes:
        table: Alias of the owning table; empty for an unqualified column.
        column: Column name, ``"*"`` for all columns, or empty for
            ``COUNT(*)``.
        aggregation: Aggregate function applied to the column.
        alias: Output name.  Required in practice for aggregations; the
            mutation API assigns one automatically.
    """

    model_config = _MODEL_CONFIG

    table: str = ""
    column: str = ""
    aggregation: AggregationFunction | None = None
    alias: str | None = None

    @property
    def qualified_name(self) -> str:
        """``"alias.column"`` or the bare column when unqualified."""
        if self.table:
            return f"{self.table}.{self.column}"
        return self.column

    @property
    def is_aggregated(self) -> bool:
        return self.aggregation is not None


class SortSpec(BaseModel):
    """One ORDER BY entry; tuple order is the clause order."""

    model_config = _MODEL_CONFIG

    id: str
    column: str
    direction: SortDirection = SortDirection.ASC


class VisualQueryConfig(BaseModel):
    """The aggregate root edited by the visual query builder.

    Attributes:
        connection_id: Connection the query runs against.
        tables: Tables on the canvas; ``tables[0]`` is the FROM table.
        joins: Joins in clause order.
        columns: Selected columns in SELECT order.
        filters: Root of the WHERE tree (always a group, possibly empty).
        group_by: GROUP BY entries (``"region"`` or ``"o.region"``).
        aggregations: Aggregated output columns.
        having: Root of the HAVING tree.
        sorts: ORDER BY entries.
        limit: Optional row limit.
    """

    model_config = _MODEL_CONFIG

    connection_id: str = Field("", alias="connectionId")
    tables: tuple[TableRef, ...] = ()
    joins: tuple[JoinSpec, ...] = ()
    columns: tuple[ColumnSpec, ...] = ()
    filters: Group = Field(default_factory=lambda: Group(id=FILTER_ROOT_ID))
    group_by: tuple[str, ...] = Field((), alias="groupBy")
    aggregations: tuple[ColumnSpec, ...] = ()
    having: Group = Field(default_factory=lambda: Group(id=HAVING_ROOT_ID))
    sorts: tuple[SortSpec, ...] = ()
    limit: int | None = None

    # ------------------------------------------------------------------
    # Construction and wire format
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls, connection_id: str = "") -> VisualQueryConfig:
        """Return the blank config a new builder workspace starts from."""
        return cls(connection_id=connection_id)

    @classmethod
    def from_json(cls, raw: str) -> VisualQueryConfig:
        """Parse a saved blob.

        Raises:
            ConfigParseError: If ``raw`` is not valid JSON or not a valid
                config.
        """
        try:
            return cls.model_validate_json(raw)
        except ValueError as exc:
            raise ConfigParseError(
                f"VisualQueryConfig structure is invalid: {exc}", raw=raw
            ) from exc

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-compatible dict with camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        """Return the persisted / request-body JSON string."""
        return self.model_dump_json(by_alias=True)

    # ------------------------------------------------------------------
    # Domain helpers
    # ------------------------------------------------------------------

    @property
    def table_aliases(self) -> list[str]:
        return [t.alias for t in self.tables]

    def get_table(self, alias: str) -> TableRef | None:
        """Returns the TableRef with the given alias, or ``None``."""
        for table in self.tables:
            if table.alias == alias:
                return table
        return None

    def aggregated_items(self) -> list[ColumnSpec]:
        """Every aggregated output column: ``aggregations`` first, then any
        aggregated entries of ``columns``."""
        return [*self.aggregations, *(c for c in self.columns if c.is_aggregated)]

    def aggregation_aliases(self) -> list[str]:
        return [item.alias for item in self.aggregated_items() if item.alias]

    @property
    def has_aggregation(self) -> bool:
        return bool(self.aggregated_items())

    def reserved_aliases(self) -> set[str]:
        """Names a newly generated alias must not collide with."""
        return {*self.table_aliases, *self.aggregation_aliases(), *self.group_by}
