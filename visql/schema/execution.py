"""Models for the preview / execute endpoint contract.

visql does not execute queries.  These models describe what the caller
sends to the execution service and what it gets back, so both sides of that
boundary share one definition.
"""
from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from visql.schema.query_config import VisualQueryConfig


class ExecutionRequest(BaseModel):
    """Request body for the preview / execute endpoints.

    Attributes:
        connection_id: Connection to run against; defaults to the config's.
        config: The query configuration.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    connection_id: str
    config: VisualQueryConfig

    @classmethod
    def for_config(cls, config: VisualQueryConfig) -> ExecutionRequest:
        return cls(connection_id=config.connection_id, config=config)

    def to_request_body(self) -> dict[str, Any]:
        """Return ``{"connection_id": ..., "config": {...}}`` ready for JSON."""
        return {"connection_id": self.connection_id, "config": self.config.to_wire()}


class QueryExecutionResult(BaseModel):
    """Response of the preview / execute endpoints.

    Both camelCase and snake_case keys are accepted for the counters
    (``rowCount`` / ``row_count``).
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    success: bool
    data: list[dict[str, Any]] | None = None
    columns: list[str] | None = None
    row_count: int | None = Field(
        None, validation_alias=AliasChoices("rowCount", "row_count"), serialization_alias="rowCount"
    )
    execution_time: float | None = Field(
        None,
        validation_alias=AliasChoices("executionTime", "execution_time"),
        serialization_alias="executionTime",
    )
    error: str | None = None

    @property
    def rows(self) -> list[dict[str, Any]]:
        return self.data or []

    def summary(self) -> str:
        """One-line status text, e.g. ``"42 rows in 12ms"``."""
        if not self.success:
            return f"Query execution failed: {self.error or 'unknown error'}"
        count = self.row_count if self.row_count is not None else len(self.rows)
        elapsed = self.execution_time or 0
        return f"{count} rows in {elapsed:g}ms"
