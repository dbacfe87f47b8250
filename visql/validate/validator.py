"""Config validation orchestrator.

``QueryValidator`` is the public entry point.  It wires together the
focused sub-validators and runs their checks in a fixed order, so the
issue list is stable for a given config.

Sub-validator hierarchy
-----------------------
QueryValidator
  ├── StructureValidator    (structure_validator.py)  : tables, selection, joins
  ├── AggregationValidator  (aggregation_validator.py): GROUP BY / HAVING rules
  ├── ConditionValidator    (condition_validator.py)  : filter leaf values
  └── SemanticValidator     (semantic_validator.py)   : aliases, references, LIMIT

Unlike a parser, the validator never raises: the builder shows every
problem at once.  :func:`ensure_valid` is the raising wrapper for callers
that must stop on an invalid config.
"""
from __future__ import annotations

import logging
from collections.abc import Callable

from visql.errors import InvalidQueryConfigError
from visql.schema.context import ValidationContext
from visql.schema.limits import DEFAULT_LIMITS, BuilderLimits
from visql.schema.query_config import VisualQueryConfig
from visql.validate.aggregation_validator import AggregationValidator
from visql.validate.condition_validator import ConditionValidator
from visql.validate.issues import ValidationIssue, ValidationResult
from visql.validate.semantic_validator import SemanticValidator
from visql.validate.structure_validator import StructureValidator

logger = logging.getLogger(__name__)


class QueryValidator:
    """Validates a VisualQueryConfig against BuilderLimits.

    Checks run in this order:
    1. Structure   : tables and selection present, joins well formed.
    2. Aggregation : plain columns grouped, HAVING references resolvable.
    3. Conditions  : value arity per operator in WHERE and HAVING.
    4. Semantics   : alias uniqueness, then the supplementary reference,
       count and LIMIT checks.

    Args:
        limits: Ceilings for joins, filter conditions and LIMIT.
    """

    def __init__(self, limits: BuilderLimits | None = None) -> None:
        self._limits = limits or DEFAULT_LIMITS

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate(self, config: VisualQueryConfig) -> ValidationResult:
        """Collect every violation in ``config``.

        Args:
            config: The config to check; it is not modified.

        Returns:
            A ``ValidationResult`` whose ``errors`` are in check order.
        """
        ctx = ValidationContext(config=config, limits=self._limits)
        issues: list[ValidationIssue] = []
        for check in self._checks(ctx):
            issues.extend(check())
        result = ValidationResult(errors=tuple(issues))
        logger.debug(
            "validated config: %d issue(s) %s",
            len(issues),
            [kind.value for kind in result.kinds],
        )
        return result

    # ------------------------------------------------------------------
    # Sub-validator wiring
    # ------------------------------------------------------------------

    def _checks(self, ctx: ValidationContext) -> list[Callable[[], list[ValidationIssue]]]:
        structure = StructureValidator(ctx)
        aggregation = AggregationValidator(ctx)
        conditions = ConditionValidator(ctx)
        semantic = SemanticValidator(ctx)
        return [
            structure.validate_tables,
            structure.validate_selection,
            structure.validate_join_tables,
            structure.validate_join_conditions,
            aggregation.validate_grouping,
            aggregation.validate_having_references,
            conditions.validate_values,
            semantic.validate_aliases,
            semantic.validate_table_references,
            aggregation.validate_aggregation_columns,
            structure.validate_join_count,
            conditions.validate_condition_count,
            semantic.validate_limit,
        ]


def validate_config(
    config: VisualQueryConfig, limits: BuilderLimits | None = None
) -> ValidationResult:
    """Validate ``config`` and return every issue found."""
    return QueryValidator(limits).validate(config)


def ensure_valid(config: VisualQueryConfig, limits: BuilderLimits | None = None) -> None:
    """Raise if ``config`` has any validation issue.

    Raises:
        InvalidQueryConfigError: Carrying every issue found.
    """
    result = validate_config(config, limits)
    if not result.valid:
        raise InvalidQueryConfigError(list(result.errors))
