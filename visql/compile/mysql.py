"""MySQL dialect compiler."""

from __future__ import annotations

from visql.compile.base import SQLCompiler


class MySQLCompiler(SQLCompiler):
    """Compiles configs to MySQL.

    Identifiers are quoted with backticks (`` ` ``) rather than double-quotes.

    Note: with the default ``sql_mode`` MySQL treats backslash as an escape
    character inside string literals, so it is doubled along with quotes.
    """

    @property
    def dialect_name(self) -> str:
        return "mysql"

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace("`", "``")
        return f"`{escaped}`"

    def escape_string(self, value: str) -> str:
        return value.replace("\\", "\\\\").replace("'", "''")
