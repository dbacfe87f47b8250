"""Compilation context value object.

Packages the ``(compiler, config)`` pair shared by ``QueryBuilder`` and
all clause-level sub-builders into a single cohesive object.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from visql.compile.base import SQLCompiler
from visql.schema.query_config import ColumnSpec, VisualQueryConfig


@dataclass(frozen=True)
class CompilationContext:
    """Immutable context for a single compilation run.

    Attributes:
        compiler: Dialect-specific SQL compiler instance.
        config: The config being compiled.
        aggregates_by_alias: Aggregated items keyed by output alias, used to
            expand HAVING references.  The first item wins on duplicates.
    """

    compiler: SQLCompiler
    config: VisualQueryConfig
    aggregates_by_alias: dict[str, ColumnSpec] = field(init=False)

    def __post_init__(self) -> None:
        by_alias: dict[str, ColumnSpec] = {}
        for item in self.config.aggregated_items():
            if item.alias and item.alias not in by_alias:
                by_alias[item.alias] = item
        object.__setattr__(self, "aggregates_by_alias", by_alias)
