"""Typed filter values.

A condition's value is a closed variant whose shape is tied to the
operator: a single scalar, an ordered ``(low, high)`` pair for ``BETWEEN``,
a list for ``IN`` / ``NOT IN``, or nothing for the null checks.

On the wire (and in saved blobs) the value is plain JSON::

    "active"        -> ScalarValue(value="active")
    [10, 20]        -> PairValue(low=10, high=20)      # under BETWEEN
    ["a", "b"]      -> ListValue(items=("a", "b"))
    null            -> NoValue()

:func:`coerce_value` performs that mapping using the condition's operator.
A shape that does not match the operator (e.g. ``BETWEEN`` with ``[10]``)
is still representable so the validator can report it.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from visql.schema.operators import (
    MEMBERSHIP_OPS,
    NULL_OPS,
    RANGE_OPS,
    SCALAR_OPS,
    FilterOperator,
)

_FROZEN = ConfigDict(extra="forbid", frozen=True)

#: Literal types a filter value may carry.
Scalar = Union[bool, int, float, datetime, date, str]


class ScalarValue(BaseModel):
    """A single literal: ``{"value": "active"}``."""

    model_config = _FROZEN

    kind: Literal["scalar"] = "scalar"
    value: Scalar = ""

    def to_raw(self) -> Any:
        return _raw(self.value)


class PairValue(BaseModel):
    """An ordered ``(low, high)`` pair for ``BETWEEN``."""

    model_config = _FROZEN

    kind: Literal["pair"] = "pair"
    low: Scalar
    high: Scalar

    def to_raw(self) -> Any:
        return [_raw(self.low), _raw(self.high)]


class ListValue(BaseModel):
    """A list of literals for ``IN`` / ``NOT IN``."""

    model_config = _FROZEN

    kind: Literal["list"] = "list"
    items: tuple[Scalar, ...] = ()

    def to_raw(self) -> Any:
        return [_raw(item) for item in self.items]


class NoValue(BaseModel):
    """The absence of a value, used by ``IS NULL`` / ``IS NOT NULL``."""

    model_config = _FROZEN

    kind: Literal["none"] = "none"

    def to_raw(self) -> Any:
        return None


FilterValue = Annotated[
    Union[ScalarValue, PairValue, ListValue, NoValue],
    Field(discriminator="kind"),
]

#: Parse a tagged dict (``{"kind": "pair", ...}``) into a typed value.
FILTER_VALUE_ADAPTER: TypeAdapter[FilterValue] = TypeAdapter(FilterValue)

_TYPED_VALUES = (ScalarValue, PairValue, ListValue, NoValue)


def _raw(item: Scalar) -> Any:
    # Saved blobs keep the text the compiler renders, offset included.
    if isinstance(item, (datetime, date)):
        return item.isoformat()
    return item


def coerce_value(operator: FilterOperator, raw: Any) -> FilterValue:
    """Convert a raw wire value to a typed ``FilterValue``.

    Args:
        operator: The condition's operator; decides how a 2-element list is
            read (pair under ``BETWEEN``, list otherwise).
        raw: JSON-ish input, an already-typed value, or a tagged dict.

    Returns:
        A typed ``FilterValue`` instance.
    """
    if isinstance(raw, _TYPED_VALUES):
        return raw
    if raw is None:
        return NoValue()
    if isinstance(raw, dict) and "kind" in raw:
        return FILTER_VALUE_ADAPTER.validate_python(raw)
    if isinstance(raw, (list, tuple)):
        if operator in RANGE_OPS and len(raw) == 2:
            return PairValue(low=raw[0], high=raw[1])
        return ListValue(items=tuple(raw))
    return ScalarValue(value=raw)


def default_value(operator: FilterOperator) -> FilterValue:
    """Return the empty value a freshly created condition gets."""
    if operator in NULL_OPS:
        return NoValue()
    if operator in MEMBERSHIP_OPS:
        return ListValue()
    return ScalarValue()


def reshape_value(operator: FilterOperator, value: FilterValue) -> FilterValue:
    """Carry an existing value over to a newly chosen operator.

    Used when the operator of a condition changes but no new value is
    supplied.  Obvious conversions are made (a list of two becomes a pair,
    a scalar becomes a one-element list, null checks drop the value);
    anything else is kept as-is for the validator to report.
    """
    if operator in NULL_OPS:
        return NoValue()

    if isinstance(value, NoValue):
        return default_value(operator)

    if operator in RANGE_OPS:
        if isinstance(value, ListValue) and len(value.items) == 2:
            return PairValue(low=value.items[0], high=value.items[1])
        return value

    if operator in MEMBERSHIP_OPS:
        if isinstance(value, PairValue):
            return ListValue(items=(value.low, value.high))
        if isinstance(value, ScalarValue):
            items = () if value.value == "" else (value.value,)
            return ListValue(items=items)
        return value

    if operator in SCALAR_OPS and isinstance(value, ListValue) and len(value.items) == 1:
        return ScalarValue(value=value.items[0])
    return value


def value_matches_operator(operator: FilterOperator, value: FilterValue) -> bool:
    """True when ``value`` has the arity ``operator`` requires."""
    if operator in NULL_OPS:
        return isinstance(value, NoValue)
    if operator in RANGE_OPS:
        return isinstance(value, PairValue)
    if operator in MEMBERSHIP_OPS:
        return isinstance(value, ListValue) and len(value.items) >= 1
    return isinstance(value, ScalarValue)


def value_arity(value: FilterValue) -> int:
    """Number of literal slots carried by ``value``."""
    if isinstance(value, PairValue):
        return 2
    if isinstance(value, ListValue):
        return len(value.items)
    if isinstance(value, ScalarValue):
        return 1
    return 0
