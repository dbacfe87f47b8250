"""Unit tests for QueryBuilder / compile_config (all dialects)."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from visql.compile import compile_config
from visql.compile.base import SQLCompiler
from visql.compile.builder import QueryBuilder
from visql.compile.mysql import MySQLCompiler
from visql.compile.postgres import PostgresCompiler
from visql.compile.registry import CompilerFactory
from visql.compile.sqlite import SQLiteCompiler
from visql.errors import CompilationError
from visql.mutate.filter_tree import add_condition, update_node
from visql.mutate.config_ops import with_filters
from visql.schema.filters import Condition, Group
from visql.schema.query_config import VisualQueryConfig
from tests.fixtures import cond, group, make_config


def _pg(config: VisualQueryConfig) -> str:
    return compile_config(config, "postgres")


def _where(operator: str, value: object, column: str = "o.amount", dialect: str = "postgres") -> str:
    config = make_config(filters=group("root", cond("c1", column, operator, value)))
    sql = compile_config(config, dialect)
    return sql.split(" WHERE ", 1)[1]


# ---------------------------------------------------------------------------
# Basic shape
# ---------------------------------------------------------------------------


def test_minimal_query(minimal_config: VisualQueryConfig) -> None:
    assert _pg(minimal_config) == "SELECT o.id FROM orders AS o"


def test_minimal_query_same_for_every_dialect(minimal_config: VisualQueryConfig) -> None:
    for dialect in ("postgres", "mysql", "sqlite"):
        assert compile_config(minimal_config, dialect) == "SELECT o.id FROM orders AS o"


def test_compilation_is_deterministic(joined_config: VisualQueryConfig) -> None:
    assert _pg(joined_config) == _pg(joined_config)
    same = VisualQueryConfig.from_json(joined_config.to_json())
    assert _pg(same) == _pg(joined_config)


def test_select_star_when_nothing_selected() -> None:
    assert _pg(make_config(columns=[])) == "SELECT * FROM orders AS o"


def test_no_tables_omits_from() -> None:
    assert _pg(VisualQueryConfig.empty()) == "SELECT *"


def test_column_alias() -> None:
    config = make_config(columns=[{"table": "o", "column": "status", "alias": "state"}])
    assert _pg(config) == "SELECT o.status AS state FROM orders AS o"


def test_unqualified_column() -> None:
    config = make_config(columns=[{"column": "status"}])
    assert _pg(config) == "SELECT status FROM orders AS o"


def test_full_query(joined_config: VisualQueryConfig) -> None:
    config = make_config(
        **{
            **joined_config.to_wire(),
            "filters": group("root", cond("f1", "o.status", "=", "active")),
            "having": group("having-root", cond("h1", "sum_amount", ">", 100)),
            "sorts": [{"id": "s1", "column": "sum_amount", "direction": "DESC"}],
            "limit": 10,
        }
    )
    assert _pg(config) == (
        "SELECT o.region, SUM(o.amount) AS sum_amount "
        "FROM orders AS o "
        "LEFT JOIN customers AS c ON o.customer_id = c.id "
        "WHERE o.status = 'active' "
        "GROUP BY o.region "
        "HAVING SUM(o.amount) > 100 "
        "ORDER BY sum_amount DESC "
        "LIMIT 10"
    )


# ---------------------------------------------------------------------------
# Joins
# ---------------------------------------------------------------------------


class TestJoins:
    def _config(self, **join: object) -> VisualQueryConfig:
        return make_config(
            tables=[{"name": "orders", "alias": "o"}, {"name": "order_items", "alias": "i"}],
            joins=[{"id": "j1", "leftTable": "o", "rightTable": "i", **join}],
        )

    def test_multiple_conditions_are_anded(self) -> None:
        config = self._config(
            conditions=[
                {"leftColumn": "o.id", "rightColumn": "i.order_id"},
                {"leftColumn": "o.amount", "rightColumn": "i.quantity", "operator": ">="},
            ]
        )
        assert _pg(config).endswith(
            "INNER JOIN order_items AS i ON o.id = i.order_id AND o.amount >= i.quantity"
        )

    def test_join_without_conditions_has_no_on(self) -> None:
        assert _pg(self._config(type="FULL")).endswith("FULL JOIN order_items AS i")

    def test_orphan_join_uses_alias_as_table(self) -> None:
        config = make_config(
            joins=[
                {
                    "id": "j1",
                    "leftTable": "o",
                    "rightTable": "x",
                    "conditions": [{"leftColumn": "o.id", "rightColumn": "x.id"}],
                }
            ]
        )
        assert _pg(config).endswith("INNER JOIN x ON o.id = x.id")


# ---------------------------------------------------------------------------
# WHERE
# ---------------------------------------------------------------------------


class TestWhere:
    def test_scalar_filter_added_through_mutation(self, minimal_config: VisualQueryConfig) -> None:
        root = add_condition(minimal_config.filters, "root", ["o.status"])
        root = update_node(root, root.children[0].id, {"value": "active"})
        sql = _pg(with_filters(minimal_config, root))
        assert "WHERE o.status = 'active'" in sql

    def test_between(self) -> None:
        assert _where("BETWEEN", [10, 20]) == "o.amount BETWEEN 10 AND 20"

    def test_between_with_one_value_is_not_corrected(self) -> None:
        assert _where("BETWEEN", [10]) == "o.amount BETWEEN 10 AND NULL"

    def test_between_with_extra_values_keeps_them_all(self) -> None:
        assert _where("BETWEEN", [1, 2, 3]) == "o.amount BETWEEN (1, 2, 3)"

    def test_in_and_not_in(self) -> None:
        assert _where("IN", ["a", "b"], "o.status") == "o.status IN ('a', 'b')"
        assert _where("NOT IN", [1], "o.id") == "o.id NOT IN (1)"

    def test_in_with_scalar_value(self) -> None:
        assert _where("IN", "a", "o.status") == "o.status IN ('a')"

    def test_in_with_empty_list(self) -> None:
        assert _where("IN", [], "o.status") == "o.status IN (NULL)"

    def test_null_checks(self) -> None:
        assert _where("IS NULL", None, "o.region") == "o.region IS NULL"
        assert _where("IS NOT NULL", None, "o.region") == "o.region IS NOT NULL"

    def test_like_value_is_used_verbatim(self) -> None:
        assert _where("LIKE", "%act%", "o.status") == "o.status LIKE '%act%'"

    @pytest.mark.parametrize("operator", ["=", "!=", ">", "<", ">=", "<="])
    def test_comparison_operators(self, operator: str) -> None:
        assert _where(operator, 5) == f"o.amount {operator} 5"

    def test_nested_groups(self) -> None:
        config = make_config(
            filters=group(
                "root",
                cond("c1", "o.status", "=", "active"),
                group(
                    "g1",
                    cond("c2", "o.amount", ">", 10),
                    cond("c3", "o.region", "=", "north"),
                    logic="OR",
                ),
            )
        )
        assert _pg(config).endswith(
            "WHERE o.status = 'active' AND (o.amount > 10 OR o.region = 'north')"
        )

    def test_root_or(self) -> None:
        config = make_config(
            filters=group(
                "root",
                cond("c1", "o.id", "=", 1),
                cond("c2", "o.id", "=", 2),
                logic="OR",
            )
        )
        assert _pg(config).endswith("WHERE o.id = 1 OR o.id = 2")

    def test_empty_nested_groups_are_skipped(self) -> None:
        config = make_config(
            filters=group("root", group("g1"), cond("c1", "o.id", "=", 1), group("g2", group("g3")))
        )
        assert _pg(config).endswith("WHERE o.id = 1")

    def test_only_empty_groups_omits_where(self) -> None:
        config = make_config(filters=group("root", group("g1")))
        assert _pg(config) == "SELECT o.id FROM orders AS o"

    def test_wrong_shape_scalar_operator(self) -> None:
        assert _where("=", [1, 2], "o.id") == "o.id = (1, 2)"

    def test_date_values_are_iso_quoted(self) -> None:
        config = make_config()
        root = Group(
            id="root",
            children=(Condition(id="c1", column="o.created_at", operator=">=", value=date(2024, 2, 1)),),
        )
        sql = _pg(with_filters(config, root))
        assert sql.endswith("WHERE o.created_at >= '2024-02-01'")

    def test_aware_datetime_compiles_the_same_after_reload(self) -> None:
        stamp = datetime(2024, 2, 1, 3, 4, 5, tzinfo=timezone.utc)
        root = Group(
            id="root",
            children=(Condition(id="c1", column="o.created_at", operator=">=", value=stamp),),
        )
        config = with_filters(make_config(), root)
        reloaded = VisualQueryConfig.from_json(config.to_json())
        assert _pg(config).endswith("'2024-02-01T03:04:05+00:00'")
        assert _pg(reloaded) == _pg(config)


# ---------------------------------------------------------------------------
# Literals and dialects
# ---------------------------------------------------------------------------


class TestDialects:
    def test_string_escaping(self) -> None:
        assert _where("=", "O'Neil", "c.name") == "c.name = 'O''Neil'"

    def test_mysql_doubles_backslashes(self) -> None:
        assert _where("=", "a\\b'c", "o.status", "mysql") == "o.status = 'a\\\\b''c'"
        assert _where("=", "a\\b", "o.status", "postgres") == "o.status = 'a\\b'"

    def test_booleans(self) -> None:
        assert _where("=", True, "o.is_paid") == "o.is_paid = TRUE"
        assert _where("=", False, "o.is_paid", "mysql") == "o.is_paid = FALSE"
        assert _where("=", True, "o.is_paid", "sqlite") == "o.is_paid = 1"
        assert _where("=", False, "o.is_paid", "sqlite") == "o.is_paid = 0"

    def test_numbers_are_bare(self) -> None:
        assert _where(">", 2.5) == "o.amount > 2.5"

    def test_reserved_word_is_quoted_per_dialect(self) -> None:
        config = make_config(
            tables=[{"name": "order", "alias": "o"}],
            columns=[{"table": "o", "column": "user"}],
        )
        assert compile_config(config, "postgres") == 'SELECT o."user" FROM "order" AS o'
        assert compile_config(config, "mysql") == "SELECT o.`user` FROM `order` AS o"
        assert compile_config(config, "sqlite") == 'SELECT o."user" FROM "order" AS o'

    def test_postgres_quotes_mixed_case(self) -> None:
        config = make_config(columns=[{"table": "o", "column": "createdAt"}])
        assert compile_config(config, "postgres") == 'SELECT o."createdAt" FROM orders AS o'
        assert compile_config(config, "mysql") == "SELECT o.createdAt FROM orders AS o"

    def test_identifier_with_space_is_quoted(self) -> None:
        config = make_config(columns=[{"table": "o", "column": "order date"}])
        assert compile_config(config, "mysql") == "SELECT o.`order date` FROM orders AS o"

    def test_always_quote(self, minimal_config: VisualQueryConfig) -> None:
        assert compile_config(minimal_config, "postgres", always_quote=True) == (
            'SELECT "o"."id" FROM "orders" AS "o"'
        )

    def test_schema_qualified_table(self) -> None:
        config = make_config(tables=[{"name": "sales.orders", "alias": "o"}])
        assert _pg(config) == "SELECT o.id FROM sales.orders AS o"

    def test_unknown_dialect_raises(self, minimal_config: VisualQueryConfig) -> None:
        with pytest.raises(CompilationError, match="oracle"):
            compile_config(minimal_config, "oracle")

    def test_registered_targets(self) -> None:
        assert {"mysql", "postgres", "sqlite"} <= set(CompilerFactory.registered_targets())

    def test_custom_dialect_registration(self, minimal_config: VisualQueryConfig) -> None:
        class UpperCompiler(SQLCompiler):
            @property
            def dialect_name(self) -> str:
                return "upper"

            def quote_identifier(self, name: str) -> str:
                return f"[{name}]"

        CompilerFactory.register_class("Upper-Test", UpperCompiler)
        try:
            sql = compile_config(minimal_config, "upper-test", always_quote=True)
            assert sql == "SELECT [o].[id] FROM [orders] AS [o]"
        finally:
            CompilerFactory.unregister("upper-test")
        assert "upper-test" not in CompilerFactory.registered_targets()

    def test_dialect_names_are_case_insensitive(self, minimal_config: VisualQueryConfig) -> None:
        assert compile_config(minimal_config, "SQLite") == compile_config(minimal_config, "sqlite")

    def test_query_builder_reports_dialect(self, minimal_config: VisualQueryConfig) -> None:
        assert QueryBuilder(SQLiteCompiler()).build(minimal_config).dialect == "sqlite"
        assert QueryBuilder(MySQLCompiler()).build(minimal_config).dialect == "mysql"
        assert QueryBuilder(PostgresCompiler()).build(minimal_config).dialect == "postgres"


# ---------------------------------------------------------------------------
# Aggregation, GROUP BY, HAVING, ORDER BY
# ---------------------------------------------------------------------------


class TestAggregation:
    def test_count_star_and_count_distinct(self) -> None:
        config = make_config(
            columns=[],
            aggregations=[
                {"aggregation": "COUNT", "alias": "count"},
                {"table": "o", "column": "customer_id", "aggregation": "COUNT_DISTINCT", "alias": "buyers"},
            ],
        )
        assert _pg(config) == (
            "SELECT COUNT(*) AS count, COUNT(DISTINCT o.customer_id) AS buyers FROM orders AS o"
        )

    def test_aggregated_column_in_columns(self) -> None:
        config = make_config(
            columns=[{"table": "o", "column": "amount", "aggregation": "MAX", "alias": "max_amount"}]
        )
        assert _pg(config) == "SELECT MAX(o.amount) AS max_amount FROM orders AS o"

    def test_columns_come_before_aggregations(self, joined_config: VisualQueryConfig) -> None:
        assert _pg(joined_config).startswith("SELECT o.region, SUM(o.amount) AS sum_amount FROM")

    def test_having_without_aggregation_is_omitted(self) -> None:
        config = make_config(
            groupBy=["o.id"],
            having=group("having-root", cond("h1", "o.id", ">", 1)),
        )
        assert _pg(config) == "SELECT o.id FROM orders AS o GROUP BY o.id"

    def test_having_on_group_by_column(self, joined_config: VisualQueryConfig) -> None:
        config = make_config(
            **{
                **joined_config.to_wire(),
                "having": group(
                    "having-root",
                    cond("h1", "o.region", "!=", "west"),
                    cond("h2", "sum_amount", "BETWEEN", [1, 50]),
                    logic="OR",
                ),
            }
        )
        assert "HAVING o.region != 'west' OR SUM(o.amount) BETWEEN 1 AND 50" in _pg(config)

    def test_multiple_sorts_in_order(self) -> None:
        config = make_config(
            sorts=[
                {"id": "s1", "column": "o.status"},
                {"id": "s2", "column": "o.amount", "direction": "DESC"},
            ]
        )
        assert _pg(config).endswith("ORDER BY o.status ASC, o.amount DESC")
