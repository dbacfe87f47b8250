"""visql: the model behind a visual SQL query builder.

Point, click, preview.  Don't hand-write the SQL.

Public API
----------
``VisualQueryConfig``
    The frozen, JSON-serialisable description of a query being built.

``visql.mutate``
    Pure edit operations: filter trees, aliases, tables, joins, columns,
    aggregations, sorts and LIMIT.

``validate_config``
    Collect every structural problem of a config as ``ValidationIssue`` data.

``compile_config``
    Render a config to SQL for a registered dialect.

``build_preview`` / ``validate_and_compile``
    The preview and execute paths of the builder.

Extensibility
-------------
New dialect compilers can be registered via::

    from visql.compile.registry import CompilerFactory

    @CompilerFactory.register("duckdb")
    class DuckDBCompiler(SQLCompiler):
        ...

After registration, ``compile_config(config, dialect="duckdb")`` picks it
up automatically.
"""

from __future__ import annotations

from visql.compile.base import CompiledQuery, SQLCompiler
from visql.compile.builder import QueryBuilder, compile_config
from visql.compile.mysql import MySQLCompiler
from visql.compile.postgres import PostgresCompiler
from visql.compile.registry import CompilerFactory
from visql.compile.sqlite import SQLiteCompiler
from visql.errors import (
    CompilationError,
    ConfigParseError,
    InvalidQueryConfigError,
    VisqlError,
)
from visql.preview import (
    ConfigStats,
    QueryPreview,
    build_preview,
    can_execute,
    complexity,
    config_stats,
    validate_and_compile,
)
from visql.schema.catalog import ColumnSchema, SchemaCatalog, TableSchema, available_columns
from visql.schema.converters import catalog_from_sqlalchemy
from visql.schema.execution import ExecutionRequest, QueryExecutionResult
from visql.schema.filters import Condition, FilterNode, Group
from visql.schema.limits import DEFAULT_LIMITS, BuilderLimits
from visql.schema.operators import (
    AggregationFunction,
    FilterOperator,
    JoinOperator,
    JoinType,
    LogicalOperator,
    SortDirection,
)
from visql.schema.query_config import (
    FILTER_ROOT_ID,
    HAVING_ROOT_ID,
    ColumnSpec,
    JoinCondition,
    JoinSpec,
    SortSpec,
    TableRef,
    VisualQueryConfig,
)
from visql.schema.values import ListValue, NoValue, PairValue, ScalarValue
from visql.validate.issues import ValidationIssue, ValidationIssueKind, ValidationResult
from visql.validate.validator import QueryValidator, ensure_valid, validate_config

# ---------------------------------------------------------------------------
# Register built-in compilers with CompilerFactory
# ---------------------------------------------------------------------------

CompilerFactory.register_class("postgres", PostgresCompiler)
CompilerFactory.register_class("sqlite", SQLiteCompiler)
CompilerFactory.register_class("mysql", MySQLCompiler)

__all__ = [
    # Core pipeline
    "build_preview",
    "compile_config",
    "validate_and_compile",
    "validate_config",
    "ensure_valid",
    # Config model
    "VisualQueryConfig",
    "TableRef",
    "JoinSpec",
    "JoinCondition",
    "ColumnSpec",
    "SortSpec",
    "Condition",
    "Group",
    "FilterNode",
    "ScalarValue",
    "PairValue",
    "ListValue",
    "NoValue",
    "FILTER_ROOT_ID",
    "HAVING_ROOT_ID",
    # Enums
    "AggregationFunction",
    "FilterOperator",
    "JoinOperator",
    "JoinType",
    "LogicalOperator",
    "SortDirection",
    # Catalog
    "SchemaCatalog",
    "TableSchema",
    "ColumnSchema",
    "available_columns",
    "catalog_from_sqlalchemy",
    # Execution contract
    "ExecutionRequest",
    "QueryExecutionResult",
    # Configuration
    "BuilderLimits",
    "DEFAULT_LIMITS",
    # Validation
    "QueryValidator",
    "ValidationIssue",
    "ValidationIssueKind",
    "ValidationResult",
    # Compilation
    "CompiledQuery",
    "CompilerFactory",
    "MySQLCompiler",
    "PostgresCompiler",
    "SQLiteCompiler",
    "QueryBuilder",
    "SQLCompiler",
    # Preview
    "ConfigStats",
    "QueryPreview",
    "can_execute",
    "complexity",
    "config_stats",
    # Errors
    "VisqlError",
    "ConfigParseError",
    "InvalidQueryConfigError",
    "CompilationError",
]
