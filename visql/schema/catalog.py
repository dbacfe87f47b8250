"""Pydantic models for the schema catalog supplied by the metadata service.

The catalog only populates the builder's pickers (tables and their
columns).  visql never validates a config against it: validation is purely
structural, since the live schema can drift between preview and execution.

Wire shape::

    {"tables": [{"name": "orders", "columns": [{"name": "id", "type": "INTEGER"}]}]}
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from visql.schema.query_config import VisualQueryConfig


class ColumnSchema(BaseModel):
    """Metadata for a single column.

    Attributes:
        name: Column name.
        type: SQL type string (e.g. ``'TEXT'``, ``'INTEGER'``, ``'TIMESTAMP'``).
    """

    model_config = ConfigDict(extra="ignore")

    name: str
    type: str = ""


class TableSchema(BaseModel):
    """Metadata for a single table.

    Attributes:
        name: Table name.
        columns: Ordered list of column metadata.
    """

    model_config = ConfigDict(extra="ignore")

    name: str
    columns: list[ColumnSchema] = Field(default_factory=list)

    @property
    def column_names(self) -> list[str]:
        """Returns all column names for this table."""
        return [c.name for c in self.columns]


class SchemaCatalog(BaseModel):
    """Tables and columns visible on a connection.

    Attributes:
        tables: All tables the metadata service returned.
    """

    model_config = ConfigDict(extra="ignore")

    tables: list[TableSchema] = Field(default_factory=list)

    def get_table(self, name: str) -> TableSchema | None:
        """Returns the TableSchema for the given table name, or ``None``."""
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def get_column_names(self, table_name: str) -> list[str]:
        """Returns column names for ``table_name``, or ``[]`` if not found."""
        table = self.get_table(table_name)
        return table.column_names if table is not None else []

    @property
    def table_names(self) -> list[str]:
        """Returns all table names in the catalog."""
        return [t.name for t in self.tables]


def available_columns(config: VisualQueryConfig, catalog: SchemaCatalog) -> list[str]:
    """List ``alias.column`` references selectable in ``config``.

    Tables are visited in config order and columns in catalog order, so the
    first entry is the default column of a freshly added filter condition.
    Tables missing from the catalog contribute nothing.
    """
    refs: list[str] = []
    for table in config.tables:
        for column in catalog.get_column_names(table.name):
            refs.append(f"{table.alias}.{column}")
    return refs
