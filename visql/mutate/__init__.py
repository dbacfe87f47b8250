"""Pure edit operations: filter trees, aliases and whole-config mutations."""
from visql.mutate.aliases import aggregation_alias, is_derived_alias, next_table_alias
from visql.mutate.config_ops import (
    add_aggregation,
    add_column,
    add_group_by,
    add_join,
    add_sort,
    add_table,
    apply_limit_policy,
    move_sort,
    remove_aggregation,
    remove_column,
    remove_group_by,
    remove_join,
    remove_sort,
    remove_table,
    reset,
    set_group_by,
    set_limit,
    update_aggregation,
    update_column,
    update_join,
    update_sort,
    with_filters,
    with_having,
)
from visql.mutate.filter_tree import (
    add_condition,
    add_group,
    count_conditions,
    find_node,
    iter_conditions,
    new_node_id,
    prune_conditions,
    remove_node,
    tree_depth,
    update_node,
)

__all__ = [
    "add_aggregation",
    "add_column",
    "add_condition",
    "add_group",
    "add_group_by",
    "add_join",
    "add_sort",
    "add_table",
    "aggregation_alias",
    "apply_limit_policy",
    "count_conditions",
    "find_node",
    "is_derived_alias",
    "iter_conditions",
    "move_sort",
    "new_node_id",
    "next_table_alias",
    "prune_conditions",
    "remove_aggregation",
    "remove_column",
    "remove_group_by",
    "remove_join",
    "remove_node",
    "remove_sort",
    "remove_table",
    "reset",
    "set_group_by",
    "set_limit",
    "tree_depth",
    "update_aggregation",
    "update_column",
    "update_join",
    "update_node",
    "update_sort",
    "with_filters",
    "with_having",
]
