"""PostgreSQL dialect compiler."""

from __future__ import annotations

import re

from visql.compile.base import SQLCompiler


class PostgresCompiler(SQLCompiler):
    """Compiles configs to PostgreSQL.

    Unquoted identifiers are folded to lower case by PostgreSQL, so names
    containing upper-case letters are quoted to preserve them.
    """

    simple_identifier = re.compile(r"^[a-z_][a-z0-9_]*$")

    @property
    def dialect_name(self) -> str:
        return "postgres"

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace('"', '""')
        return f'"{escaped}"'
