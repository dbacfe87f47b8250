"""Test fixtures: sample schema catalog, SQLite DDL and config builders."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from visql.schema.catalog import SchemaCatalog
from visql.schema.query_config import VisualQueryConfig

_FIXTURES_DIR = Path(__file__).parent


def load_catalog() -> SchemaCatalog:
    """Load the sample SchemaCatalog from catalog.json."""
    data = json.loads((_FIXTURES_DIR / "catalog.json").read_text())
    return SchemaCatalog.model_validate(data)


def load_ddl() -> str:
    """Return the sample SQLite DDL (schema and seed rows)."""
    return (_FIXTURES_DIR / "ddl_sqlite.sql").read_text()


def sequential_ids() -> Any:
    """Return an id factory producing ``cond-1``, ``group-2``, ... in call order."""
    counter = iter(range(1, 1_000_000))

    def factory(prefix: str) -> str:
        return f"{prefix}-{next(counter)}"

    return factory


def make_config(**overrides: Any) -> VisualQueryConfig:
    """Build a config from wire-shaped (camelCase) data.

    Starts from ``orders AS o`` selecting ``o.id``; any key passed replaces
    the corresponding default.
    """
    data: dict[str, Any] = {
        "connectionId": "conn-1",
        "tables": [{"name": "orders", "alias": "o"}],
        "columns": [{"table": "o", "column": "id"}],
    }
    data.update(overrides)
    return VisualQueryConfig.model_validate(data)


def cond(node_id: str, column: str, operator: str = "=", value: Any = "") -> dict[str, Any]:
    """Wire-shaped condition node."""
    return {"id": node_id, "column": column, "operator": operator, "value": value}


def group(node_id: str, *children: dict[str, Any], logic: str = "AND") -> dict[str, Any]:
    """Wire-shaped group node."""
    return {"id": node_id, "logic": logic, "children": list(children)}
