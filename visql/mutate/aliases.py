"""Deterministic alias generation for tables and aggregations."""
from __future__ import annotations

from collections.abc import Collection

from visql.schema.operators import AggregationFunction
from visql.schema.query_config import ColumnSpec

#: Alias used when a table name does not start with a letter or underscore.
FALLBACK_TABLE_ALIAS = "t"


def next_table_alias(table_name: str, existing: Collection[str]) -> str:
    """Return the first free alias for ``table_name``.

    The candidate is the lowercased first character of the name; if it is
    taken, ``"1"``, ``"2"``, ... are appended until a free one is found::

        next_table_alias("orders", [])          -> "o"
        next_table_alias("orders", ["o"])       -> "o1"
        next_table_alias("orgs", ["o", "o1"])   -> "o2"
    """
    first = table_name[:1].lower()
    base = first if first.isalpha() or first == "_" else FALLBACK_TABLE_ALIAS
    if base not in existing:
        return base
    suffix = 1
    while f"{base}{suffix}" in existing:
        suffix += 1
    return f"{base}{suffix}"


def base_aggregation_alias(function: AggregationFunction, column: str) -> str:
    """``count`` for COUNT, otherwise ``<fn>_<column>`` on the bare column name."""
    if function is AggregationFunction.COUNT:
        return "count"
    bare = column.rsplit(".", 1)[-1]
    return f"{function.value.lower()}_{bare}"


def aggregation_alias(
    function: AggregationFunction, column: str, existing: Collection[str] = ()
) -> str:
    """Return a unique alias for an aggregation.

    ``SUM`` over ``o.amount`` gives ``"sum_amount"``.  If that name is
    already used by a table, another aggregation or a GROUP BY entry, the
    first free ``_1``, ``_2``, ... suffix is added.
    """
    base = base_aggregation_alias(function, column)
    if base not in existing:
        return base
    suffix = 1
    while f"{base}_{suffix}" in existing:
        suffix += 1
    return f"{base}_{suffix}"


def is_derived_alias(spec: ColumnSpec) -> bool:
    """True when ``spec.alias`` was generated from its function and column.

    A derived alias may be regenerated after the function or column
    changes; an alias typed by the user is kept.
    """
    if spec.alias is None:
        return True
    if spec.aggregation is None:
        return False
    base = base_aggregation_alias(spec.aggregation, spec.column)
    if spec.alias == base:
        return True
    head, sep, tail = spec.alias.rpartition("_")
    return bool(sep) and head == base and tail.isdigit()
