"""Pure operations over the recursive filter tree.

Every function takes the current root :class:`~visql.schema.filters.Group`
and returns a new root; the input is never modified.  Only the nodes on the
path from the root to the edited node are copied, so untouched subtrees are
shared by identity between the old and the new tree.

Unknown ids are not errors.  The UI may replay an action against a node that
a concurrent edit already removed, so a stale id simply returns the input
tree unchanged (the very same object).

Usage::

    from visql.mutate.filter_tree import add_condition, add_group, update_node

    root = config.filters
    root = add_condition(root, root.id, available_columns=["o.status"])
    root = update_node(root, root.children[0].id, {"value": "active"})
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from visql.schema.filters import Condition, FilterNode, Group
from visql.schema.limits import DEFAULT_LIMITS
from visql.schema.operators import FilterOperator, LogicalOperator
from visql.schema.values import ScalarValue, reshape_value

logger = logging.getLogger(__name__)

#: ``(prefix) -> id``; injectable so tests get deterministic ids.
IdFactory = Callable[[str], str]

_CONDITION_FIELDS = frozenset({"column", "operator", "value"})
_GROUP_FIELDS = frozenset({"logic"})

# Sentinel returned by a rewrite callback to delete the visited node.
_REMOVE = object()


def new_node_id(prefix: str) -> str:
    """Return a fresh random id such as ``"cond-3f2a9c1b7d4e"``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


# ---------------------------------------------------------------------------
# Public mutations
# ---------------------------------------------------------------------------


def add_condition(
    root: Group,
    target_group_id: str,
    available_columns: list[str] | tuple[str, ...] = (),
    id_factory: IdFactory = new_node_id,
) -> Group:
    """Append a default condition as the last child of a group.

    The condition uses the first available column (or ``""``), the ``=``
    operator and an empty scalar value.

    Args:
        root: Current tree root.
        target_group_id: Id of the group to append to.  If it names no
            group, ``root`` is returned unchanged.
        available_columns: Columns offered by the picker, in display order.
        id_factory: Generates the new condition's id.
    """

    def append(node: FilterNode) -> FilterNode:
        if not isinstance(node, Group):
            return node
        condition = Condition(
            id=id_factory("cond"),
            column=available_columns[0] if available_columns else "",
            operator=FilterOperator.EQ,
            value=ScalarValue(value=""),
        )
        return node.model_copy(update={"children": (*node.children, condition)})

    return _rewrite_root(root, target_group_id, append, "add_condition")


def add_group(
    root: Group,
    parent_group_id: str,
    max_depth: int = DEFAULT_LIMITS.max_filter_depth,
    id_factory: IdFactory = new_node_id,
) -> Group:
    """Append an empty ``AND`` group as the last child of a group.

    The root sits at depth 1.  If the new group would sit deeper than
    ``max_depth`` the call is a no-op.

    Args:
        root: Current tree root.
        parent_group_id: Id of the group to append to.
        max_depth: Deepest level a group may occupy.
        id_factory: Generates the new group's id.
    """
    parent_depth = _group_depth(root, parent_group_id)
    if parent_depth is not None and parent_depth + 1 > max_depth:
        logger.debug(
            "add_group ignored: group %r is at depth %d, max_depth=%d",
            parent_group_id,
            parent_depth,
            max_depth,
        )
        return root

    def append(node: FilterNode) -> FilterNode:
        if not isinstance(node, Group):
            return node
        group = Group(id=id_factory("group"), logic=LogicalOperator.AND)
        return node.model_copy(update={"children": (*node.children, group)})

    return _rewrite_root(root, parent_group_id, append, "add_group")


def update_node(root: Group, node_id: str, patch: Mapping[str, Any]) -> Group:
    """Apply a partial update to the condition or group with ``node_id``.

    Conditions accept ``column``, ``operator`` and ``value``; groups accept
    ``logic``.  Other keys are ignored.  When ``operator`` changes without a
    new ``value``, the old value is carried over with
    :func:`~visql.schema.values.reshape_value`.  A raw ``value`` is coerced
    for the resulting operator.

    Raises:
        pydantic.ValidationError: If the patch holds an invalid operator,
            logic or value.
    """
    return _rewrite_root(root, node_id, lambda node: _apply_patch(node, patch), "update_node")


def remove_node(root: Group, node_id: str) -> Group:
    """Remove the node with ``node_id`` together with its subtree.

    The root group itself cannot be removed; passing its id is a no-op.
    """
    if node_id == root.id:
        logger.debug("remove_node ignored: %r is the root group", node_id)
        return root
    return _rewrite_root(root, node_id, lambda node: _REMOVE, "remove_node")


def prune_conditions(root: Group, predicate: Callable[[Condition], bool]) -> Group:
    """Remove every condition for which ``predicate`` is true.

    Groups are kept even if they end up empty.  Subtrees without a matching
    condition are shared by identity.
    """
    kept: list[FilterNode] = []
    changed = False
    for child in root.children:
        if isinstance(child, Condition):
            if predicate(child):
                changed = True
                continue
            kept.append(child)
        else:
            pruned = prune_conditions(child, predicate)
            changed = changed or pruned is not child
            kept.append(pruned)
    if not changed:
        return root
    return root.model_copy(update={"children": tuple(kept)})


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def find_node(root: Group, node_id: str) -> FilterNode | None:
    """Depth-first search for ``node_id``; returns ``None`` when absent."""
    if root.id == node_id:
        return root
    for child in root.children:
        if child.id == node_id:
            return child
        if isinstance(child, Group):
            found = find_node(child, node_id)
            if found is not None:
                return found
    return None


def iter_conditions(root: Group) -> Iterator[Condition]:
    """Yield every leaf condition in depth-first, left-to-right order."""
    for child in root.children:
        if isinstance(child, Condition):
            yield child
        else:
            yield from iter_conditions(child)


def count_conditions(root: Group) -> int:
    return sum(1 for _ in iter_conditions(root))


def tree_depth(root: Group) -> int:
    """Depth of the deepest group, counting ``root`` as 1."""
    nested = [tree_depth(c) for c in root.children if isinstance(c, Group)]
    return 1 + max(nested, default=0)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _rewrite_root(
    root: Group,
    node_id: str,
    fn: Callable[[FilterNode], Any],
    operation: str,
) -> Group:
    if root.id == node_id:
        result = fn(root)
        return root if result is _REMOVE else result
    rewritten = _rewrite(root, node_id, fn)
    if rewritten is root:
        logger.debug("%s ignored: no node with id %r", operation, node_id)
    return rewritten


def _rewrite(group: Group, node_id: str, fn: Callable[[FilterNode], Any]) -> Group:
    """Replace the first node with ``node_id`` under ``group`` by ``fn(node)``.

    Copies only the groups on the path to the node; returns ``group`` itself
    when nothing changed.
    """
    for index, child in enumerate(group.children):
        if child.id == node_id:
            replacement = fn(child)
            if replacement is child:
                return group
            middle = () if replacement is _REMOVE else (replacement,)
            children = (*group.children[:index], *middle, *group.children[index + 1 :])
            return group.model_copy(update={"children": children})
        if isinstance(child, Group):
            new_child = _rewrite(child, node_id, fn)
            if new_child is not child:
                children = (*group.children[:index], new_child, *group.children[index + 1 :])
                return group.model_copy(update={"children": children})
    return group


def _group_depth(root: Group, group_id: str, depth: int = 1) -> int | None:
    if root.id == group_id:
        return depth
    for child in root.children:
        if isinstance(child, Group):
            found = _group_depth(child, group_id, depth + 1)
            if found is not None:
                return found
    return None


def _apply_patch(node: FilterNode, patch: Mapping[str, Any]) -> FilterNode:
    if isinstance(node, Group):
        changes = {k: v for k, v in patch.items() if k in _GROUP_FIELDS}
        if not changes:
            return node
        updated = Group.model_validate(
            {"id": node.id, "logic": changes["logic"], "children": node.children}
        )
    else:
        changes = {k: v for k, v in patch.items() if k in _CONDITION_FIELDS}
        if not changes:
            return node
        data: dict[str, Any] = {
            "id": node.id,
            "column": node.column,
            "operator": node.operator,
            "value": node.value,
        }
        if "operator" in changes and "value" not in changes:
            try:
                operator = FilterOperator(changes["operator"])
            except ValueError:
                operator = None  # Left for Condition validation to report.
            if operator is not None:
                data["value"] = reshape_value(operator, node.value)
        data.update(changes)
        updated = Condition.model_validate(data)
    return node if updated == node else updated
