"""Constants and enums for filter operators and aggregation functions.

Both the validator and the compiler dispatch on the operator groups defined
here, so arity rules live in exactly one place.
"""

from __future__ import annotations

from enum import Enum

# ---------------------------------------------------------------------------
# Filter operators
# ---------------------------------------------------------------------------


class FilterOperator(str, Enum):
    """Operators a filter or having condition may use."""

    EQ = "="
    NE = "!="
    GT = ">"
    LT = "<"
    GTE = ">="
    LTE = "<="
    LIKE = "LIKE"
    IN = "IN"
    NOT_IN = "NOT IN"
    BETWEEN = "BETWEEN"
    IS_NULL = "IS NULL"
    IS_NOT_NULL = "IS NOT NULL"


class LogicalOperator(str, Enum):
    """Connectives that combine the children of a filter group."""

    AND = "AND"
    OR = "OR"


class JoinType(str, Enum):
    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    FULL = "FULL"


class JoinOperator(str, Enum):
    """Comparison operators allowed inside a JOIN ... ON condition."""

    EQ = "="
    NE = "!="
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class AggregationFunction(str, Enum):
    """Aggregate functions offered by the builder."""

    COUNT = "COUNT"
    COUNT_DISTINCT = "COUNT_DISTINCT"
    SUM = "SUM"
    AVG = "AVG"
    MIN = "MIN"
    MAX = "MAX"


# ---------------------------------------------------------------------------
# Operator groups (keep frozenset for O(1) membership tests)
# ---------------------------------------------------------------------------

#: Operators taking exactly one scalar value.
SCALAR_OPS: frozenset[FilterOperator] = frozenset(
    {
        FilterOperator.EQ,
        FilterOperator.NE,
        FilterOperator.GT,
        FilterOperator.LT,
        FilterOperator.GTE,
        FilterOperator.LTE,
        FilterOperator.LIKE,
    }
)

#: Range operator: takes an ordered (low, high) pair.
RANGE_OPS: frozenset[FilterOperator] = frozenset({FilterOperator.BETWEEN})

#: Membership operators: take a non-empty list.
MEMBERSHIP_OPS: frozenset[FilterOperator] = frozenset(
    {FilterOperator.IN, FilterOperator.NOT_IN}
)

#: Null-check operators: take no value.
NULL_OPS: frozenset[FilterOperator] = frozenset(
    {FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL}
)

#: Aggregations that may be used without a column (``COUNT(*)``).
COLUMNLESS_AGGREGATIONS: frozenset[AggregationFunction] = frozenset(
    {AggregationFunction.COUNT}
)
