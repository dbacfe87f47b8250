"""Core VisualQueryConfig → SQL compilation logic.

``QueryBuilder`` is the top-level orchestrator.  It wires together focused
clause-level and expression-level sub-builders, then assembles the clauses
in SQL order.  All dialect-specific behaviour is delegated to the injected
``SQLCompiler``; clause rendering is delegated to the sub-builder hierarchy.

Sub-builder hierarchy
---------------------
QueryBuilder
  ├── ColumnBuilder         (expression_builder.py)
  ├── ValueBuilder          (expression_builder.py)
  ├── ConditionBuilder      (expression_builder.py) : WHERE
  ├── ConditionBuilder      (expression_builder.py) : HAVING, aliases expanded
  ├── SelectClauseBuilder   (clause_builders.py)
  ├── FromClauseBuilder     (clause_builders.py)
  ├── JoinClauseBuilder     (clause_builders.py)
  ├── GroupByClauseBuilder  (clause_builders.py)
  └── OrderByClauseBuilder  (clause_builders.py)

Compilation is total: any config the schema accepts compiles to a string.
Whether that string is a sensible query is decided by the validator.
"""

from __future__ import annotations

import logging
from typing import Any

from visql.compile.base import CompiledQuery, SQLCompiler
from visql.compile.clause_builders import (
    FromClauseBuilder,
    GroupByClauseBuilder,
    JoinClauseBuilder,
    OrderByClauseBuilder,
    SelectClauseBuilder,
)
from visql.compile.context import CompilationContext
from visql.compile.expression_builder import ColumnBuilder, ConditionBuilder, ValueBuilder
from visql.compile.registry import CompilerFactory
from visql.schema.query_config import VisualQueryConfig

logger = logging.getLogger(__name__)


class QueryBuilder:
    """Compiles a VisualQueryConfig to a single-line SQL string.

    Args:
        compiler: Dialect-specific compiler instance.
    """

    def __init__(self, compiler: SQLCompiler) -> None:
        self._compiler = compiler

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, config: VisualQueryConfig) -> CompiledQuery:
        """Compile ``config``.

        Args:
            config: Any structurally valid config; validation is not
                required first.

        Returns:
            :class:`~visql.compile.base.CompiledQuery` with the ``sql``
            string and the dialect name.
        """
        ctx = CompilationContext(compiler=self._compiler, config=config)
        sub_builders = self._make_sub_builders(ctx)
        return CompiledQuery(
            sql=self._build_query(config, sub_builders),
            dialect=self._compiler.dialect_name,
        )

    # ------------------------------------------------------------------
    # Query assembly (SELECT … LIMIT)
    # ------------------------------------------------------------------

    def _build_query(self, config: VisualQueryConfig, sub_builders: dict[str, Any]) -> str:
        parts: list[str] = [sub_builders["select"].build(config)]

        parts.append(sub_builders["from"].build(config))

        for join in config.joins:
            parts.append(sub_builders["join"].build(join))

        where_sql = sub_builders["where"].build(config.filters)
        if where_sql:
            parts.append(f"WHERE {where_sql}")

        parts.append(sub_builders["group_by"].build(config))

        if config.has_aggregation:
            having_sql = sub_builders["having"].build(config.having)
            if having_sql:
                parts.append(f"HAVING {having_sql}")

        parts.append(sub_builders["order_by"].build(config))

        if config.limit is not None:
            parts.append(f"LIMIT {config.limit}")

        return " ".join(part for part in parts if part)

    # ------------------------------------------------------------------
    # Sub-builder wiring
    # ------------------------------------------------------------------

    def _make_sub_builders(self, ctx: CompilationContext) -> dict[str, Any]:
        """Construct and wire the sub-builder graph for one compilation run."""
        columns = ColumnBuilder(ctx)
        values = ValueBuilder(ctx)
        from_builder = FromClauseBuilder(ctx, columns)
        return {
            "select": SelectClauseBuilder(ctx, columns),
            "from": from_builder,
            "join": JoinClauseBuilder(ctx, columns, from_builder),
            "where": ConditionBuilder(ctx, columns, values),
            "group_by": GroupByClauseBuilder(ctx, columns),
            "having": ConditionBuilder(ctx, columns, values, expand_aggregates=True),
            "order_by": OrderByClauseBuilder(ctx, columns),
        }


def compile_config(
    config: VisualQueryConfig, dialect: str = "postgres", always_quote: bool = False
) -> str:
    """Compile ``config`` to SQL for ``dialect``.

    Equal configs compile to byte-identical SQL for the same dialect.

    Args:
        config: The config to compile.
        dialect: A name registered with :class:`CompilerFactory`.
        always_quote: Quote every identifier instead of only those that
            need it.

    Raises:
        CompilationError: If ``dialect`` is not registered.
    """
    compiler = CompilerFactory.create(dialect, always_quote=always_quote)
    logger.debug("compiling config with %s", type(compiler).__name__)
    return QueryBuilder(compiler).build(config).sql
