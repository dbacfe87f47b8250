"""SQLite dialect compiler."""
from __future__ import annotations

from visql.compile.base import SQLCompiler


class SQLiteCompiler(SQLCompiler):
    """Compiles configs to SQLite.

    Note: SQLite has no boolean type; ``TRUE`` / ``FALSE`` are only
    accepted from 3.23 on, so booleans are emitted as ``1`` / ``0``.
    """

    @property
    def dialect_name(self) -> str:
        return "sqlite"

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace('"', '""')
        return f'"{escaped}"'

    def boolean_literal(self, value: bool) -> str:
        return "1" if value else "0"
