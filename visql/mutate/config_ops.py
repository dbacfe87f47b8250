"""Pure edit operations on a VisualQueryConfig.

Each function takes a snapshot and returns a new one; the builder UI keeps
the latest snapshot and hands it to the validator and the compiler.
Removals cascade so a config never keeps references to something the user
deleted: dropping a table drops its joins, columns, aggregations, sorts,
GROUP BY entries and filter leaves; dropping an aggregation or a GROUP BY
entry drops the HAVING leaves that named it.

Stale targets (unknown ids, out-of-range indexes) return the input config
itself, mirroring :mod:`visql.mutate.filter_tree`.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel

from visql.mutate.aliases import aggregation_alias, is_derived_alias, next_table_alias
from visql.mutate.filter_tree import IdFactory, new_node_id, prune_conditions
from visql.schema.column_reference import ColumnReference
from visql.schema.filters import Condition, FilterNode, Group
from visql.schema.limits import DEFAULT_LIMITS, BuilderLimits
from visql.schema.operators import AggregationFunction, JoinType, SortDirection
from visql.schema.query_config import (
    ColumnSpec,
    JoinCondition,
    JoinSpec,
    SortSpec,
    TableRef,
    VisualQueryConfig,
)

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=BaseModel)


# ---------------------------------------------------------------------------
# Tables and joins
# ---------------------------------------------------------------------------


def add_table(config: VisualQueryConfig, name: str, alias: str | None = None) -> VisualQueryConfig:
    """Place ``name`` on the canvas.

    Without an explicit ``alias`` one is generated with
    :func:`~visql.mutate.aliases.next_table_alias`.  An explicit alias that
    is already taken leaves the config unchanged.
    """
    taken = config.reserved_aliases()
    if alias is None:
        alias = next_table_alias(name, taken)
    elif alias in taken:
        logger.debug("add_table ignored: alias %r already in use", alias)
        return config
    return config.model_copy(update={"tables": (*config.tables, TableRef(name=name, alias=alias))})


def remove_table(config: VisualQueryConfig, alias: str) -> VisualQueryConfig:
    """Remove the table with ``alias`` and everything that refers to it."""
    if config.get_table(alias) is None:
        logger.debug("remove_table ignored: no table with alias %r", alias)
        return config

    def owned(ref: str) -> bool:
        return ColumnReference.parse(ref).belongs_to(alias)

    aggregations = tuple(a for a in config.aggregations if a.table != alias)
    columns = tuple(c for c in config.columns if c.table != alias)
    group_by = tuple(g for g in config.group_by if not owned(g))

    dropped = {
        *(a.alias for a in config.aggregations if a.table == alias and a.alias),
        *(c.alias for c in config.columns if c.table == alias and c.is_aggregated and c.alias),
        *(g for g in config.group_by if owned(g)),
    }
    having = prune_conditions(
        config.having, lambda cond: owned(cond.column) or cond.column in dropped
    )

    return config.model_copy(
        update={
            "tables": tuple(t for t in config.tables if t.alias != alias),
            "joins": tuple(
                j for j in config.joins if alias not in (j.left_table, j.right_table)
            ),
            "columns": columns,
            "aggregations": aggregations,
            "group_by": group_by,
            "filters": prune_conditions(config.filters, lambda cond: owned(cond.column)),
            "having": having,
            "sorts": tuple(s for s in config.sorts if not owned(s.column)),
        }
    )


def add_join(
    config: VisualQueryConfig,
    left_table: str,
    right_table: str,
    conditions: Iterable[JoinCondition | Mapping[str, Any]] = (),
    join_type: JoinType | str = JoinType.INNER,
    id_factory: IdFactory = new_node_id,
) -> VisualQueryConfig:
    """Append a join between two table aliases.

    Both aliases must already be on the canvas; otherwise the config is
    returned unchanged.
    """
    join = JoinSpec(
        id=id_factory("join"),
        left_table=left_table,
        right_table=right_table,
        type=JoinType(join_type),
        conditions=tuple(
            c if isinstance(c, JoinCondition) else JoinCondition.model_validate(c)
            for c in conditions
        ),
    )
    if not _join_tables_present(config, join):
        logger.debug("add_join ignored: %r or %r is not a selected table", left_table, right_table)
        return config
    return config.model_copy(update={"joins": (*config.joins, join)})


def update_join(
    config: VisualQueryConfig, join_id: str, patch: Mapping[str, Any]
) -> VisualQueryConfig:
    """Patch ``left_table``, ``right_table``, ``type`` or ``conditions``."""
    return _update_by_id(config, "joins", join_id, patch)


def remove_join(config: VisualQueryConfig, join_id: str) -> VisualQueryConfig:
    return _remove_by_id(config, "joins", join_id)


# ---------------------------------------------------------------------------
# Columns and aggregations
# ---------------------------------------------------------------------------


def add_column(
    config: VisualQueryConfig,
    table: str,
    column: str,
    alias: str | None = None,
    aggregation: AggregationFunction | str | None = None,
) -> VisualQueryConfig:
    """Append a selected column.

    An aggregated column without an alias gets a generated one, as with
    :func:`add_aggregation`.
    """
    if not _tables_present(config, table):
        logger.debug("add_column ignored: %r is not a selected table", table)
        return config
    function = AggregationFunction(aggregation) if aggregation is not None else None
    if function is not None and alias is None:
        alias = aggregation_alias(function, column, config.reserved_aliases())
    spec = ColumnSpec(table=table, column=column, aggregation=function, alias=alias)
    return config.model_copy(update={"columns": (*config.columns, spec)})


def update_column(
    config: VisualQueryConfig, index: int, patch: Mapping[str, Any]
) -> VisualQueryConfig:
    """Patch the column at ``index``; aggregated columns follow the alias
    rules of :func:`update_aggregation`."""
    return _update_spec(config, "columns", index, patch)


def remove_column(config: VisualQueryConfig, index: int) -> VisualQueryConfig:
    return _remove_spec(config, "columns", index)


def add_aggregation(
    config: VisualQueryConfig,
    function: AggregationFunction | str,
    table: str = "",
    column: str = "",
    alias: str | None = None,
) -> VisualQueryConfig:
    """Append an aggregation such as ``SUM(o.amount) AS sum_amount``.

    ``alias`` defaults to a name derived from the function and column that
    does not collide with any table alias, aggregation alias or GROUP BY
    entry.
    """
    if not _tables_present(config, table):
        logger.debug("add_aggregation ignored: %r is not a selected table", table)
        return config
    function = AggregationFunction(function)
    if alias is None:
        alias = aggregation_alias(function, column, config.reserved_aliases())
    spec = ColumnSpec(table=table, column=column, aggregation=function, alias=alias)
    return config.model_copy(update={"aggregations": (*config.aggregations, spec)})


def update_aggregation(
    config: VisualQueryConfig, index: int, patch: Mapping[str, Any]
) -> VisualQueryConfig:
    """Patch the aggregation at ``index``.

    If the function or column changes and the current alias was generated,
    a new alias is derived.  User-supplied aliases are kept.  HAVING leaves
    that named the old alias follow the rename.
    """
    return _update_spec(config, "aggregations", index, patch)


def remove_aggregation(config: VisualQueryConfig, index: int) -> VisualQueryConfig:
    """Remove the aggregation at ``index`` and the HAVING leaves naming it."""
    return _remove_spec(config, "aggregations", index)


# ---------------------------------------------------------------------------
# GROUP BY, filter trees, sorts, limit
# ---------------------------------------------------------------------------


def add_group_by(config: VisualQueryConfig, column: str) -> VisualQueryConfig:
    """Append a GROUP BY entry; aggregation aliases cannot be grouped on."""
    if column in config.group_by:
        return config
    if column in config.aggregation_aliases():
        logger.debug("add_group_by ignored: %r is an aggregation alias", column)
        return config
    return config.model_copy(update={"group_by": (*config.group_by, column)})


def remove_group_by(config: VisualQueryConfig, column: str) -> VisualQueryConfig:
    """Remove a GROUP BY entry and the HAVING leaves that referenced it."""
    if column not in config.group_by:
        logger.debug("remove_group_by ignored: %r is not grouped", column)
        return config
    return set_group_by(config, [g for g in config.group_by if g != column])


def set_group_by(config: VisualQueryConfig, columns: Iterable[str]) -> VisualQueryConfig:
    """Replace the GROUP BY list; duplicates are dropped, order kept.

    Entries naming an aggregation alias are left out.
    """
    aliases = set(config.aggregation_aliases())
    requested = tuple(dict.fromkeys(columns))
    group_by = tuple(g for g in requested if g not in aliases)
    if len(group_by) != len(requested):
        logger.debug("set_group_by dropped aggregation aliases from %s", requested)
    dropped = set(config.group_by) - set(group_by) - aliases
    having = config.having
    if dropped:
        having = prune_conditions(having, lambda cond: cond.column in dropped)
    return config.model_copy(update={"group_by": group_by, "having": having})


def with_filters(config: VisualQueryConfig, root: Group) -> VisualQueryConfig:
    """Install a WHERE tree produced by :mod:`visql.mutate.filter_tree`."""
    if root is config.filters:
        return config
    return config.model_copy(update={"filters": root})


def with_having(config: VisualQueryConfig, root: Group) -> VisualQueryConfig:
    """Install a HAVING tree produced by :mod:`visql.mutate.filter_tree`."""
    if root is config.having:
        return config
    return config.model_copy(update={"having": root})


def add_sort(
    config: VisualQueryConfig,
    column: str,
    direction: SortDirection | str = SortDirection.ASC,
    id_factory: IdFactory = new_node_id,
) -> VisualQueryConfig:
    sort = SortSpec(id=id_factory("sort"), column=column, direction=SortDirection(direction))
    return config.model_copy(update={"sorts": (*config.sorts, sort)})


def update_sort(
    config: VisualQueryConfig, sort_id: str, patch: Mapping[str, Any]
) -> VisualQueryConfig:
    """Patch ``column`` or ``direction`` of a sort."""
    return _update_by_id(config, "sorts", sort_id, patch)


def remove_sort(config: VisualQueryConfig, sort_id: str) -> VisualQueryConfig:
    return _remove_by_id(config, "sorts", sort_id)


def move_sort(config: VisualQueryConfig, sort_id: str, new_index: int) -> VisualQueryConfig:
    """Move a sort to ``new_index`` in the ORDER BY list."""
    sorts = list(config.sorts)
    old_index = next((i for i, s in enumerate(sorts) if s.id == sort_id), None)
    if old_index is None or not 0 <= new_index < len(sorts):
        logger.debug("move_sort ignored: sort %r to index %d", sort_id, new_index)
        return config
    if old_index == new_index:
        return config
    sorts.insert(new_index, sorts.pop(old_index))
    return config.model_copy(update={"sorts": tuple(sorts)})


def set_limit(config: VisualQueryConfig, limit: int | None) -> VisualQueryConfig:
    """Set or clear LIMIT.  Out-of-range values are kept for the validator."""
    if limit == config.limit:
        return config
    return config.model_copy(update={"limit": limit})


def apply_limit_policy(
    config: VisualQueryConfig, limits: BuilderLimits = DEFAULT_LIMITS
) -> VisualQueryConfig:
    """Fill in ``limits.default_limit`` when unset and clamp to ``limits.max_limit``."""
    limit = config.limit
    if limit is None:
        limit = limits.default_limit
    elif limit > limits.max_limit:
        limit = limits.max_limit
    return set_limit(config, limit)


def reset(config: VisualQueryConfig) -> VisualQueryConfig:
    """Return a blank config on the same connection."""
    return VisualQueryConfig.empty(config.connection_id)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _tables_present(config: VisualQueryConfig, *aliases: str) -> bool:
    """Blank aliases stand for unqualified columns and always pass."""
    selected = set(config.table_aliases)
    return all(alias in selected for alias in aliases if alias)


def _join_tables_present(config: VisualQueryConfig, join: JoinSpec) -> bool:
    return bool(join.left_table and join.right_table) and _tables_present(
        config, join.left_table, join.right_table
    )


def _patched(model: _M, patch: Mapping[str, Any]) -> _M:
    """Revalidate ``model`` with ``patch`` applied.

    Keys may be field names or their camelCase aliases; ``id`` and unknown
    keys are ignored.
    """
    names: dict[str, str] = {}
    for name, field in type(model).model_fields.items():
        names[name] = name
        if field.alias:
            names[field.alias] = name
    changes = {names[k]: v for k, v in patch.items() if k in names and names[k] != "id"}
    if not changes:
        return model
    data = {name: getattr(model, name) for name in type(model).model_fields}
    data.update(changes)
    return type(model).model_validate(data)


def _update_by_id(
    config: VisualQueryConfig, field: str, item_id: str, patch: Mapping[str, Any]
) -> VisualQueryConfig:
    items: tuple[Any, ...] = getattr(config, field)
    for index, item in enumerate(items):
        if item.id == item_id:
            updated = _patched(item, patch)
            if updated == item:
                return config
            if field == "joins" and not _join_tables_present(config, updated):
                logger.debug("update ignored: join %r names a table not selected", item_id)
                return config
            return config.model_copy(
                update={field: (*items[:index], updated, *items[index + 1 :])}
            )
    logger.debug("update ignored: no %s entry with id %r", field, item_id)
    return config


def _remove_by_id(config: VisualQueryConfig, field: str, item_id: str) -> VisualQueryConfig:
    items: tuple[Any, ...] = getattr(config, field)
    kept = tuple(item for item in items if item.id != item_id)
    if len(kept) == len(items):
        logger.debug("remove ignored: no %s entry with id %r", field, item_id)
        return config
    return config.model_copy(update={field: kept})


def _update_spec(
    config: VisualQueryConfig, field: str, index: int, patch: Mapping[str, Any]
) -> VisualQueryConfig:
    items: tuple[ColumnSpec, ...] = getattr(config, field)
    if not 0 <= index < len(items):
        logger.debug("update ignored: %s index %d out of range", field, index)
        return config
    old = items[index]
    updated = _patched(old, patch)
    if updated == old:
        return config
    if not _tables_present(config, updated.table):
        logger.debug("update ignored: %r is not a selected table", updated.table)
        return config

    cleared = old.is_aggregated and not updated.is_aggregated
    if cleared and "alias" not in patch and is_derived_alias(old):
        updated = updated.model_copy(update={"alias": None})

    if (
        updated.aggregation is not None
        and "alias" not in patch
        and is_derived_alias(old)
        and (updated.aggregation, updated.column) != (old.aggregation, old.column)
    ):
        taken = config.reserved_aliases() - {old.alias}
        updated = updated.model_copy(
            update={"alias": aggregation_alias(updated.aggregation, updated.column, taken)}
        )

    changes: dict[str, Any] = {field: (*items[:index], updated, *items[index + 1 :])}
    if old.is_aggregated and old.alias:
        if cleared and old.alias not in config.group_by:
            changes["having"] = prune_conditions(
                config.having, lambda cond: cond.column == old.alias
            )
        elif not cleared and updated.alias != old.alias:
            changes["having"] = _rename_leaves(config.having, old.alias, updated.alias)
    return config.model_copy(update=changes)


def _remove_spec(config: VisualQueryConfig, field: str, index: int) -> VisualQueryConfig:
    items: tuple[ColumnSpec, ...] = getattr(config, field)
    if not 0 <= index < len(items):
        logger.debug("remove ignored: %s index %d out of range", field, index)
        return config
    removed = items[index]
    changes: dict[str, Any] = {field: (*items[:index], *items[index + 1 :])}
    if removed.is_aggregated and removed.alias and removed.alias not in config.group_by:
        changes["having"] = prune_conditions(
            config.having, lambda cond: cond.column == removed.alias
        )
    return config.model_copy(update=changes)


def _rename_leaves(root: Group, old: str, new: str | None) -> Group:
    """Point HAVING leaves at a renamed aggregation alias.

    When the alias is cleared the leaves are dropped instead.
    """
    if new is None:
        return prune_conditions(root, lambda cond: cond.column == old)
    return _map_conditions(
        root, lambda cond: cond.model_copy(update={"column": new}) if cond.column == old else cond
    )


def _map_conditions(root: Group, fn: Callable[[Condition], Condition]) -> Group:
    children: list[FilterNode] = []
    changed = False
    for child in root.children:
        mapped = fn(child) if isinstance(child, Condition) else _map_conditions(child, fn)
        changed = changed or mapped is not child
        children.append(mapped)
    if not changed:
        return root
    return root.model_copy(update={"children": tuple(children)})
