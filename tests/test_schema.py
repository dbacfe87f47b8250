"""Unit tests for the visql schema models and their wire format."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from visql.errors import ConfigParseError
from visql.schema.catalog import SchemaCatalog, available_columns
from visql.schema.column_reference import ColumnReference
from visql.schema.execution import ExecutionRequest, QueryExecutionResult
from visql.schema.filters import Condition, Group
from visql.schema.limits import BuilderLimits
from visql.schema.operators import FilterOperator
from visql.schema.query_config import FILTER_ROOT_ID, HAVING_ROOT_ID, VisualQueryConfig
from visql.schema.values import (
    ListValue,
    NoValue,
    PairValue,
    ScalarValue,
    coerce_value,
    reshape_value,
)
from tests.fixtures import cond, group, make_config


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


class TestValueCoercion:
    def test_pair_only_under_between(self) -> None:
        assert coerce_value(FilterOperator.BETWEEN, [1, 2]) == PairValue(low=1, high=2)
        assert coerce_value(FilterOperator.IN, [1, 2]) == ListValue(items=(1, 2))

    def test_between_with_wrong_length_stays_a_list(self) -> None:
        assert coerce_value(FilterOperator.BETWEEN, [1, 2, 3]) == ListValue(items=(1, 2, 3))

    def test_null_and_scalar(self) -> None:
        assert coerce_value(FilterOperator.IS_NULL, None) == NoValue()
        assert coerce_value(FilterOperator.EQ, "x") == ScalarValue(value="x")

    def test_scalar_types_are_preserved(self) -> None:
        assert coerce_value(FilterOperator.EQ, True).value is True
        assert type(coerce_value(FilterOperator.EQ, 3).value) is int
        assert type(coerce_value(FilterOperator.EQ, 3.5).value) is float
        assert coerce_value(FilterOperator.EQ, "2024-01-01").value == "2024-01-01"

    def test_tagged_dict(self) -> None:
        assert coerce_value(FilterOperator.BETWEEN, {"kind": "pair", "low": 1, "high": 9}) == (
            PairValue(low=1, high=9)
        )

    def test_reshape_between_to_in(self) -> None:
        assert reshape_value(FilterOperator.IN, PairValue(low=1, high=2)) == ListValue(items=(1, 2))

    def test_reshape_list_to_between(self) -> None:
        assert reshape_value(FilterOperator.BETWEEN, ListValue(items=(1, 2))) == (
            PairValue(low=1, high=2)
        )

    def test_reshape_from_null_check(self) -> None:
        assert reshape_value(FilterOperator.IN, NoValue()) == ListValue()
        assert reshape_value(FilterOperator.EQ, NoValue()) == ScalarValue()

    def test_reshape_single_item_list_to_scalar(self) -> None:
        assert reshape_value(FilterOperator.GT, ListValue(items=(4,))) == ScalarValue(value=4)


# ---------------------------------------------------------------------------
# Filter nodes
# ---------------------------------------------------------------------------


class TestFilterNodes:
    def test_nodes_are_discriminated_by_children(self) -> None:
        root = Group.model_validate(
            group("root", cond("c1", "o.id", "=", 1), group("g1", logic="OR"))
        )
        assert isinstance(root.children[0], Condition)
        assert isinstance(root.children[1], Group)

    def test_missing_value_defaults_by_operator(self) -> None:
        assert Condition.model_validate({"id": "c", "operator": "IS NULL"}).value == NoValue()
        assert Condition.model_validate({"id": "c"}).value == ScalarValue(value="")

    def test_condition_with_children_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Group.model_validate(
                {"id": "root", "children": [{"id": "x", "column": "o.id", "children": []}]}
            )

    def test_unknown_operator_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Condition.model_validate({"id": "c", "operator": "REGEXP", "value": "a"})

    def test_nodes_are_frozen(self) -> None:
        node = Condition.model_validate(cond("c", "o.id", "=", 1))
        with pytest.raises(ValidationError):
            node.column = "o.status"  # type: ignore[misc]

    def test_value_serialises_raw(self) -> None:
        node = Condition.model_validate(cond("c", "o.amount", "BETWEEN", [1, 5]))
        assert node.model_dump(mode="json") == {
            "id": "c",
            "column": "o.amount",
            "operator": "BETWEEN",
            "value": [1, 5],
        }


# ---------------------------------------------------------------------------
# VisualQueryConfig
# ---------------------------------------------------------------------------


class TestVisualQueryConfig:
    def test_empty_config(self) -> None:
        config = VisualQueryConfig.empty("conn-9")
        assert config.connection_id == "conn-9"
        assert config.filters == Group(id=FILTER_ROOT_ID)
        assert config.having == Group(id=HAVING_ROOT_ID)
        assert config.limit is None

    def test_wire_keys_are_camel_case(self, joined_config: VisualQueryConfig) -> None:
        wire = joined_config.to_wire()
        assert list(wire) == [
            "connectionId",
            "tables",
            "joins",
            "columns",
            "filters",
            "groupBy",
            "aggregations",
            "having",
            "sorts",
            "limit",
        ]
        assert wire["joins"][0]["conditions"][0] == {
            "leftColumn": "o.customer_id",
            "rightColumn": "c.id",
            "operator": "=",
        }

    def test_json_round_trip(self) -> None:
        config = make_config(
            filters=group(
                "root",
                cond("c1", "o.amount", "BETWEEN", [10, 20]),
                cond("c2", "o.status", "IN", ["a"]),
                cond("c3", "o.region", "IS NULL", None),
            ),
            limit=25,
        )
        assert VisualQueryConfig.from_json(config.to_json()) == config

    def test_from_json_invalid_json(self) -> None:
        with pytest.raises(ConfigParseError) as exc_info:
            VisualQueryConfig.from_json("{not json")
        assert exc_info.value.raw == "{not json"

    def test_from_json_wrong_structure(self) -> None:
        with pytest.raises(ConfigParseError):
            VisualQueryConfig.from_json(json.dumps({"tables": "orders"}))

    def test_unknown_keys_are_rejected(self) -> None:
        with pytest.raises(ConfigParseError):
            VisualQueryConfig.from_json(json.dumps({"tables": [], "offset": 5}))

    def test_aggregation_helpers(self) -> None:
        config = make_config(
            columns=[
                {"table": "o", "column": "region"},
                {"table": "o", "column": "amount", "aggregation": "AVG", "alias": "avg_amount"},
            ],
            aggregations=[{"aggregation": "COUNT", "alias": "count"}],
            groupBy=["o.region"],
        )
        assert config.has_aggregation
        assert config.aggregation_aliases() == ["count", "avg_amount"]
        assert config.reserved_aliases() == {"o", "count", "avg_amount", "o.region"}
        assert config.get_table("o").name == "orders"
        assert config.get_table("z") is None


class TestColumnReference:
    def test_qualified(self) -> None:
        ref = ColumnReference.parse("o.status")
        assert ref.belongs_to("o")
        assert not ref.belongs_to("c")
        assert (ref.table, ref.column) == ("o", "status")
        assert ref.qualified
        assert str(ref) == "o.status"

    def test_bare(self) -> None:
        ref = ColumnReference.parse("status")
        assert ref.table is None
        assert not ref.qualified
        assert ref.resolves_in([])

    def test_only_first_dot_splits(self) -> None:
        ref = ColumnReference.parse("o.data.x")
        assert ref.column == "data.x"
        assert ref.resolves_in(["o"])
        assert not ref.resolves_in(["c"])


# ---------------------------------------------------------------------------
# Catalog, limits, execution contract
# ---------------------------------------------------------------------------


def test_available_columns_follow_table_order(catalog: SchemaCatalog) -> None:
    config = make_config(
        tables=[
            {"name": "customers", "alias": "c"},
            {"name": "missing", "alias": "m"},
            {"name": "orders", "alias": "o"},
        ]
    )
    refs = available_columns(config, catalog)
    assert refs[:3] == ["c.id", "c.name", "c.country"]
    assert refs[3] == "o.id"
    assert not any(r.startswith("m.") for r in refs)


def test_catalog_lookup(catalog: SchemaCatalog) -> None:
    assert catalog.table_names == ["orders", "customers", "order_items"]
    assert catalog.get_column_names("order_items") == ["id", "order_id", "sku", "quantity"]
    assert catalog.get_column_names("nope") == []


def test_builder_limits_defaults_and_bounds() -> None:
    limits = BuilderLimits()
    assert (limits.max_filter_depth, limits.max_joins) == (3, 10)
    assert (limits.max_filter_conditions, limits.max_limit) == (50, 10000)
    assert limits.default_limit is None
    with pytest.raises(ValidationError):
        BuilderLimits(max_filter_depth=0)


def test_execution_request_body(minimal_config: VisualQueryConfig) -> None:
    body = ExecutionRequest.for_config(minimal_config).to_request_body()
    assert body["connection_id"] == "conn-1"
    assert body["config"]["tables"] == [{"name": "orders", "alias": "o"}]


def test_execution_result_accepts_both_key_styles() -> None:
    camel = QueryExecutionResult.model_validate(
        {"success": True, "data": [{"id": 1}], "rowCount": 1, "executionTime": 12}
    )
    snake = QueryExecutionResult.model_validate(
        {"success": True, "data": [{"id": 1}], "row_count": 1, "execution_time": 12}
    )
    assert camel == snake
    assert camel.summary() == "1 rows in 12ms"


def test_execution_result_failure() -> None:
    result = QueryExecutionResult.model_validate({"success": False, "error": "timeout"})
    assert result.rows == []
    assert result.summary() == "Query execution failed: timeout"
