"""Preview helpers for the builder's side panel.

These combine the validator and the compiler into the shapes the UI shows
next to the canvas: the SQL preview, the list of problems, a complexity
badge and a few counters.
"""
from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict

from visql.compile.base import CompiledQuery
from visql.compile.builder import compile_config
from visql.errors import ConfigParseError, InvalidQueryConfigError
from visql.mutate.filter_tree import count_conditions
from visql.schema.limits import BuilderLimits
from visql.schema.query_config import VisualQueryConfig
from visql.validate.issues import ValidationResult
from visql.validate.validator import validate_config

logger = logging.getLogger(__name__)

Complexity = Literal["simple", "moderate", "complex"]


class QueryPreview(BaseModel):
    """SQL preview plus the validation result it was produced with.

    The SQL is produced even for an invalid config so the user can see
    what they are building.
    """

    model_config = ConfigDict(frozen=True)

    sql: str
    validation: ValidationResult
    complexity: Complexity | None = None


class ConfigStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    tables: int
    joins: int
    columns: int
    filter_conditions: int
    aggregations: int
    group_by: int


def complexity(config: VisualQueryConfig) -> Complexity | None:
    """Rate a config by the features it uses.

    One point each for more than one table, any join, any filter, any
    aggregation, any GROUP BY and any HAVING condition.  No points gives
    ``None``; up to 2 is simple, up to 4 moderate, otherwise complex.
    """
    score = sum(
        [
            len(config.tables) > 1,
            bool(config.joins),
            bool(count_conditions(config.filters)),
            config.has_aggregation,
            bool(config.group_by),
            bool(count_conditions(config.having)),
        ]
    )
    if score == 0:
        return None
    if score <= 2:
        return "simple"
    if score <= 4:
        return "moderate"
    return "complex"


def config_stats(config: VisualQueryConfig) -> ConfigStats:
    return ConfigStats(
        tables=len(config.tables),
        joins=len(config.joins),
        columns=len(config.columns),
        filter_conditions=count_conditions(config.filters),
        aggregations=len(config.aggregated_items()),
        group_by=len(config.group_by),
    )


def can_execute(config: VisualQueryConfig) -> bool:
    """True when the Run button should be enabled."""
    return bool(config.tables) and bool(config.columns or config.aggregations)


def build_preview(
    config: VisualQueryConfig,
    dialect: str = "postgres",
    limits: BuilderLimits | None = None,
) -> QueryPreview:
    """Compile and validate ``config`` for display.

    Raises:
        CompilationError: If ``dialect`` is not registered.
    """
    return QueryPreview(
        sql=compile_config(config, dialect),
        validation=validate_config(config, limits),
        complexity=complexity(config),
    )


def validate_and_compile(
    config: VisualQueryConfig | str,
    dialect: str = "postgres",
    limits: BuilderLimits | None = None,
) -> CompiledQuery:
    """Parse, validate and compile a config for execution.

    This is the entry point for the execute path::

        compiled = visql.validate_and_compile(saved_json, dialect="postgres")
        cursor.execute(compiled.sql)

    Args:
        config: A config or its saved JSON form.
        dialect: Target dialect name.
        limits: Limits for the validation step.

    Returns:
        ``CompiledQuery`` with ``sql`` and ``dialect``.

    Raises:
        ConfigParseError: If ``config`` is a string that is not a valid config.
        InvalidQueryConfigError: If the config has any validation issue.
        CompilationError: If ``dialect`` is not registered.
    """
    # 1. Parse
    if isinstance(config, str):
        config = VisualQueryConfig.from_json(config)
    elif not isinstance(config, VisualQueryConfig):
        raise ConfigParseError(
            f"Expected a VisualQueryConfig or JSON string, got {type(config).__name__}."
        )

    # 2. Validate
    result = validate_config(config, limits)
    if not result.valid:
        logger.debug("refusing to compile invalid config: %s", [k.value for k in result.kinds])
        raise InvalidQueryConfigError(list(result.errors))

    # 3. Compile
    return CompiledQuery(sql=compile_config(config, dialect), dialect=dialect)
