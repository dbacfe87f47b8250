"""Compiler abstractions: CompiledQuery and the SQLCompiler ABC.

The Template Method pattern (GoF) is used:
- ``SQLCompiler`` defines the rendering steps shared by every clause
  (identifiers, literals, aggregate calls).
- ``PostgresCompiler``, ``MySQLCompiler`` and ``SQLiteCompiler`` override
  the dialect-specific steps (quote character, escaping, boolean literals).

The preview SQL is shown to the user, so literals are inlined rather than
bound, and identifiers are only quoted when they have to be.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime

from visql.schema.operators import AggregationFunction

#: Words that must be quoted when used as an identifier.
RESERVED_WORDS: frozenset[str] = frozenset(
    {
        "all", "and", "any", "as", "asc", "between", "by", "case", "check",
        "column", "constraint", "create", "cross", "default", "delete", "desc",
        "distinct", "drop", "else", "end", "exists", "false", "for", "foreign",
        "from", "full", "group", "having", "in", "index", "inner", "insert",
        "into", "is", "join", "key", "left", "like", "limit", "not", "null",
        "offset", "on", "or", "order", "outer", "primary", "references",
        "right", "select", "set", "table", "then", "to", "true", "union",
        "unique", "update", "user", "using", "values", "when", "where", "with",
    }
)


@dataclass(frozen=True)
class CompiledQuery:
    """The output of a successful compilation.

    Attributes:
        sql: The compiled SQL string with inlined literals.
        dialect: The target dialect (``'postgres'``, ``'mysql'``, ``'sqlite'``).
    """

    sql: str
    dialect: str


class SQLCompiler(ABC):
    """Abstract base for dialect-specific SQL compilers.

    Subclasses implement the dialect-specific methods; the ``QueryBuilder``
    uses this interface via the Strategy / Template Method patterns.

    Args:
        always_quote: Quote every identifier, not only those that need it.
    """

    #: Identifiers matching this pattern may be emitted bare.
    simple_identifier = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

    reserved_words: frozenset[str] = RESERVED_WORDS

    def __init__(self, always_quote: bool = False) -> None:
        self.always_quote = always_quote

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the canonical dialect name."""

    @abstractmethod
    def quote_identifier(self, name: str) -> str:
        """Return a properly-quoted SQL identifier.

        Args:
            name: Unquoted identifier (table, column or alias name).

        Returns:
            Quoted identifier.
        """

    # ------------------------------------------------------------------
    # Identifiers
    # ------------------------------------------------------------------

    def render_identifier(self, name: str) -> str:
        """Return ``name`` bare when it is safe, quoted otherwise."""
        if name == "*":
            return name
        if self.always_quote or self.needs_quoting(name):
            return self.quote_identifier(name)
        return name

    def needs_quoting(self, name: str) -> bool:
        if not self.simple_identifier.match(name):
            return True
        return name.lower() in self.reserved_words

    # ------------------------------------------------------------------
    # Literals
    # ------------------------------------------------------------------

    def escape_string(self, value: str) -> str:
        """Escape the body of a single-quoted string literal."""
        return value.replace("'", "''")

    def string_literal(self, value: str) -> str:
        return f"'{self.escape_string(value)}'"

    def boolean_literal(self, value: bool) -> str:
        return "TRUE" if value else "FALSE"

    def null_literal(self) -> str:
        return "NULL"

    def literal(self, value: object) -> str:
        """Render a scalar filter value as an inline SQL literal.

        ``bool`` is checked before ``int`` because it is a subclass of it.
        """
        if value is None:
            return self.null_literal()
        if isinstance(value, bool):
            return self.boolean_literal(value)
        if isinstance(value, (int, float)):
            return repr(value)
        if isinstance(value, (datetime, date)):
            return self.string_literal(value.isoformat())
        return self.string_literal(str(value))

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def build_aggregate(self, function: AggregationFunction, argument: str) -> str:
        """Return the SQL call for ``function`` applied to ``argument``.

        Dialects can override this to map functions to native spellings.
        """
        if function is AggregationFunction.COUNT_DISTINCT:
            return f"COUNT(DISTINCT {argument})"
        return f"{function.value}({argument})"
