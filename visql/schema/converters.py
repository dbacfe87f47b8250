"""Schema catalog built by reflecting a database through SQLAlchemy.

The metadata service normally answers the builder's table and column
pickers.  A service that already holds a SQLAlchemy engine can produce the
same :class:`~visql.schema.catalog.SchemaCatalog` here instead.  SQLAlchemy
is an optional extra (``visql[sqlalchemy]``); the import happens on call so
the rest of the package works without it::

    engine = create_engine("postgresql+psycopg://localhost/shop")
    catalog = catalog_from_sqlalchemy(engine, schema="public", views=True)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from visql.schema.catalog import ColumnSchema, SchemaCatalog, TableSchema

if TYPE_CHECKING:
    from sqlalchemy import Engine, MetaData, Table

logger = logging.getLogger(__name__)


def catalog_from_sqlalchemy(
    engine: Engine,
    *,
    include_tables: Sequence[str] | None = None,
    schema: str | None = None,
    views: bool = False,
) -> SchemaCatalog:
    """Reflect ``engine`` and describe what the builder may query.

    Args:
        engine: Engine to open a short-lived connection on.
        include_tables: Names to restrict reflection to; every table when
            omitted.
        schema: Database schema to read instead of the default one.
        views: Also list views, which the builder treats like tables.

    Raises:
        ImportError: SQLAlchemy is not installed.
    """
    try:
        import sqlalchemy
    except ImportError as exc:
        raise ImportError(
            'catalog_from_sqlalchemy() needs SQLAlchemy: pip install "visql[sqlalchemy]"'
        ) from exc

    metadata = sqlalchemy.MetaData(schema=schema)
    only = list(include_tables) if include_tables is not None else None
    with engine.connect() as conn:
        metadata.reflect(bind=conn, only=only, views=views)

    catalog = metadata_to_catalog(metadata)
    logger.debug(
        "reflected %d relation(s) from %s: %s",
        len(catalog.tables),
        engine.dialect.name,
        catalog.table_names,
    )
    return catalog


def metadata_to_catalog(metadata: MetaData) -> SchemaCatalog:
    """Describe already reflected ``metadata``.

    Referenced tables come before the tables that point at them, then by
    name; columns keep their declaration order.
    """
    return SchemaCatalog(tables=[_describe(table) for table in metadata.sorted_tables])


def _describe(table: Table) -> TableSchema:
    return TableSchema(
        name=table.name,
        columns=[ColumnSchema(name=column.name, type=str(column.type)) for column in table.columns],
    )
