"""Builder limits: the tunable policy knobs of the builder.

``BuilderLimits`` is the single configuration object of visql.  It is passed
explicitly to the mutation API (filter depth, LIMIT policy) and to the
validator (join / filter / LIMIT ceilings); there are no environment
variables or files to read.

Example::

    from visql import BuilderLimits

    limits = BuilderLimits(max_filter_depth=4, default_limit=500)
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BuilderLimits(BaseModel):
    """Limits enforced while editing and validating a config.

    Attributes:
        max_filter_depth: Deepest level a filter group may sit at, counting
            the root group as level 1.  Enforced by ``add_group``.
        max_joins: Upper bound on the number of joins.
        max_filter_conditions: Upper bound on leaf conditions across the
            WHERE and HAVING trees.
        max_limit: Upper bound on the LIMIT value.
        default_limit: LIMIT applied by ``apply_limit_policy`` when the
            config has none (``None`` leaves it unset).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_filter_depth: int = Field(3, ge=1)
    max_joins: int = Field(10, ge=0)
    max_filter_conditions: int = Field(50, ge=0)
    max_limit: int = Field(10000, ge=1)
    default_limit: int | None = Field(None, ge=1)


#: Limits used when a caller passes none.
DEFAULT_LIMITS = BuilderLimits()
