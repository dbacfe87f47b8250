"""Shared pytest fixtures for visql unit and integration tests."""
from __future__ import annotations

import sqlite3
from collections.abc import Iterator

import pytest

from visql.schema.catalog import SchemaCatalog
from visql.schema.query_config import VisualQueryConfig
from tests.fixtures import load_catalog, load_ddl, make_config, sequential_ids


@pytest.fixture(scope="session")
def catalog() -> SchemaCatalog:
    """Canonical schema catalog shared across all tests."""
    return load_catalog()


@pytest.fixture()
def ids():
    """Deterministic node id factory."""
    return sequential_ids()


@pytest.fixture()
def minimal_config() -> VisualQueryConfig:
    """``SELECT o.id FROM orders AS o``."""
    return make_config()


@pytest.fixture()
def joined_config() -> VisualQueryConfig:
    """orders joined to customers, grouped by region with a SUM."""
    return make_config(
        tables=[
            {"name": "orders", "alias": "o"},
            {"name": "customers", "alias": "c"},
        ],
        joins=[
            {
                "id": "j1",
                "leftTable": "o",
                "rightTable": "c",
                "type": "LEFT",
                "conditions": [{"leftColumn": "o.customer_id", "rightColumn": "c.id"}],
            }
        ],
        columns=[{"table": "o", "column": "region"}],
        aggregations=[
            {"table": "o", "column": "amount", "aggregation": "SUM", "alias": "sum_amount"}
        ],
        groupBy=["o.region"],
    )


@pytest.fixture()
def db() -> Iterator[sqlite3.Connection]:
    """In-memory SQLite database seeded from ddl_sqlite.sql."""
    conn = sqlite3.connect(":memory:")
    conn.executescript(load_ddl())
    yield conn
    conn.close()
