"""Validation context value object.

Packages the ``(config, limits)`` pair that every sub-validator needs,
together with the lookups derived from the config, so each is computed once
per validation run.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from visql.schema.limits import BuilderLimits
from visql.schema.query_config import VisualQueryConfig


@dataclass(frozen=True)
class ValidationContext:
    """Immutable context for a single validation run.

    Attributes:
        config: The config under validation.
        limits: Ceilings for joins, filters and LIMIT.
        table_aliases: Aliases of ``config.tables``.
        aggregation_aliases: Aliases of every aggregated output column.
    """

    config: VisualQueryConfig
    limits: BuilderLimits
    table_aliases: frozenset[str] = field(init=False)
    aggregation_aliases: frozenset[str] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "table_aliases", frozenset(self.config.table_aliases))
        object.__setattr__(
            self, "aggregation_aliases", frozenset(self.config.aggregation_aliases())
        )
