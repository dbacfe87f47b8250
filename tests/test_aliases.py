"""Unit tests for visql.mutate.aliases."""

from __future__ import annotations

from visql.mutate.aliases import aggregation_alias, is_derived_alias, next_table_alias
from visql.schema.operators import AggregationFunction
from visql.schema.query_config import ColumnSpec


class TestTableAlias:
    def test_first_letter_lowercased(self) -> None:
        assert next_table_alias("Orders", []) == "o"

    def test_suffix_on_collision(self) -> None:
        assert next_table_alias("orders", ["o"]) == "o1"
        assert next_table_alias("organisations", ["o", "o1"]) == "o2"

    def test_gap_is_reused(self) -> None:
        assert next_table_alias("orders", ["o", "o2"]) == "o1"

    def test_non_letter_falls_back(self) -> None:
        assert next_table_alias("2024_sales", []) == "t"
        assert next_table_alias("", ["t"]) == "t1"

    def test_underscore_is_kept(self) -> None:
        assert next_table_alias("_staging", []) == "_"

    def test_deterministic(self) -> None:
        existing = ["o", "c"]
        assert next_table_alias("orders", existing) == next_table_alias("orders", existing)


class TestAggregationAlias:
    def test_count_is_plain(self) -> None:
        assert aggregation_alias(AggregationFunction.COUNT, "") == "count"
        assert aggregation_alias(AggregationFunction.COUNT, "o.id") == "count"

    def test_function_and_bare_column(self) -> None:
        assert aggregation_alias(AggregationFunction.SUM, "o.amount") == "sum_amount"
        assert aggregation_alias(AggregationFunction.COUNT_DISTINCT, "customer_id") == (
            "count_distinct_customer_id"
        )

    def test_collision_adds_numeric_suffix(self) -> None:
        assert aggregation_alias(AggregationFunction.SUM, "amount", {"sum_amount"}) == "sum_amount_1"
        assert (
            aggregation_alias(AggregationFunction.COUNT, "", {"count", "count_1"}) == "count_2"
        )


class TestDerivedAlias:
    def test_generated_alias_is_derived(self) -> None:
        spec = ColumnSpec(column="amount", aggregation="SUM", alias="sum_amount")
        assert is_derived_alias(spec)

    def test_suffixed_alias_is_derived(self) -> None:
        spec = ColumnSpec(column="amount", aggregation="SUM", alias="sum_amount_3")
        assert is_derived_alias(spec)

    def test_user_alias_is_not_derived(self) -> None:
        spec = ColumnSpec(column="amount", aggregation="SUM", alias="revenue")
        assert not is_derived_alias(spec)

    def test_missing_alias_counts_as_derived(self) -> None:
        assert is_derived_alias(ColumnSpec(column="amount", aggregation="AVG"))
