"""visql schema models: VisualQueryConfig, filter tree, catalog, limits."""
from visql.schema.catalog import ColumnSchema, SchemaCatalog, TableSchema, available_columns
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
from visql.schema.values import (
    FilterValue,
    ListValue,
    NoValue,
    PairValue,
    ScalarValue,
    coerce_value,
)

__all__ = [
    "AggregationFunction",
    "BuilderLimits",
    "ColumnSchema",
    "ColumnSpec",
    "Condition",
    "DEFAULT_LIMITS",
    "ExecutionRequest",
    "FILTER_ROOT_ID",
    "FilterNode",
    "FilterOperator",
    "FilterValue",
    "Group",
    "HAVING_ROOT_ID",
    "JoinCondition",
    "JoinOperator",
    "JoinSpec",
    "JoinType",
    "ListValue",
    "LogicalOperator",
    "NoValue",
    "PairValue",
    "QueryExecutionResult",
    "ScalarValue",
    "SchemaCatalog",
    "SortDirection",
    "SortSpec",
    "TableRef",
    "TableSchema",
    "VisualQueryConfig",
    "available_columns",
    "coerce_value",
]
