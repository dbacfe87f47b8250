"""Filter tree models: the recursive WHERE / HAVING predicate.

A node is either a :class:`Condition` (leaf comparison) or a :class:`Group`
(AND / OR over child nodes).  The union is closed and discriminated by the
presence of ``children``, so the saved JSON carries no extra tag::

    {"id": "root", "logic": "AND", "children": [
        {"id": "c1", "column": "o.status", "operator": "=", "value": "active"},
        {"id": "g1", "logic": "OR", "children": [...]}
    ]}

Nodes are frozen; the functions in :mod:`visql.mutate.filter_tree` build
new trees instead of editing existing ones.
"""
from __future__ import annotations

from typing import Annotated, Any, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Tag,
    field_serializer,
    model_validator,
)

from visql.schema.operators import NULL_OPS, FilterOperator, LogicalOperator
from visql.schema.values import FilterValue, coerce_value

_NODE_CONFIG = ConfigDict(extra="forbid", frozen=True)


class Condition(BaseModel):
    """A leaf comparison ``column operator value``.

    Attributes:
        id: Node identifier, unique within the tree.
        column: Column reference (``"o.status"``), or an aggregation alias
            when used inside a HAVING tree.
        operator: Comparison operator.
        value: Typed value; raw JSON is coerced for the given operator.
    """

    model_config = _NODE_CONFIG

    id: str
    column: str = ""
    operator: FilterOperator = FilterOperator.EQ
    value: FilterValue

    @model_validator(mode="before")
    @classmethod
    def _coerce_raw_value(cls, data: Any) -> Any:
        """Turn the raw wire ``value`` into the variant the operator expects."""
        if not isinstance(data, dict):
            return data
        try:
            operator = FilterOperator(data.get("operator", FilterOperator.EQ))
        except ValueError:
            return data  # Reported by field validation.
        data = dict(data)
        if "value" not in data:
            data["value"] = None if operator in NULL_OPS else ""
        data["value"] = coerce_value(operator, data["value"])
        return data

    @field_serializer("value")
    def _dump_value(self, value: FilterValue) -> Any:
        return value.to_raw()


class Group(BaseModel):
    """A boolean combination of child nodes.

    Attributes:
        id: Node identifier, unique within the tree.
        logic: Connective placed between children.
        children: Ordered child nodes.
    """

    model_config = _NODE_CONFIG

    id: str
    logic: LogicalOperator = LogicalOperator.AND
    children: tuple[FilterNode, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.children


def _node_discriminator(v: Any) -> str | None:
    """Return the tag for the FilterNode discriminated union."""
    if isinstance(v, dict):
        return "group" if "children" in v or "logic" in v else "condition"
    if isinstance(v, Group):
        return "group"
    if isinstance(v, Condition):
        return "condition"
    return None


FilterNode = Annotated[
    Union[
        Annotated[Condition, Tag("condition")],
        Annotated[Group, Tag("group")],
    ],
    Discriminator(_node_discriminator),
]

# Resolve the forward reference created by the recursive Group type.
Group.model_rebuild()
