"""Parsing of the string column references used throughout a config.

Filter leaves, GROUP BY entries, sort entries and join conditions name a
column as ``"o.status"`` (table alias + column) or just ``"status"``.  The
validator, the removal cascade and the compiler all read those strings
through :class:`ColumnReference` so they agree on what a reference points
to.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class ColumnReference:
    """A column reference split into its alias and column parts.

    Attributes:
        table: Table alias, or ``None`` when the reference is bare.
        column: Column name; may itself contain dots (``"data.x"``).
    """

    table: str | None
    column: str

    @classmethod
    def parse(cls, ref: str) -> ColumnReference:
        """Split ``ref`` at its first dot.

        ``"o.data.x"`` is column ``"data.x"`` of alias ``"o"``; a string
        without a dot is a bare column.
        """
        alias, sep, rest = ref.partition(".")
        if not sep:
            return cls(table=None, column=ref)
        return cls(table=alias, column=rest)

    @property
    def qualified(self) -> bool:
        return self.table is not None

    def belongs_to(self, alias: str) -> bool:
        """True when the reference is qualified by exactly ``alias``."""
        return self.table == alias

    def resolves_in(self, aliases: Iterable[str]) -> bool:
        """True for bare references and for aliases found in ``aliases``."""
        return self.table is None or self.table in set(aliases)

    def __str__(self) -> str:
        return self.column if self.table is None else f"{self.table}.{self.column}"
