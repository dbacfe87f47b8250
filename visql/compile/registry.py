"""Dialect registry for the SQL compiler.

``CompilerFactory`` maps dialect names to
:class:`~visql.compile.base.SQLCompiler` subclasses.  The built-in
dialects are registered by ``visql/__init__.py``; an application adds its
own once at start-up and ``compile_config`` finds it by name::

    from visql.compile.base import SQLCompiler
    from visql.compile.registry import CompilerFactory

    @CompilerFactory.register("duckdb")
    class DuckDBCompiler(SQLCompiler):
        ...

Names are case-insensitive: ``"Postgres"`` and ``"postgres"`` are the same
dialect.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import ClassVar

from visql.compile.base import SQLCompiler
from visql.errors import CompilationError

logger = logging.getLogger(__name__)


class CompilerFactory:
    """Class-level registry of compiler classes keyed by dialect name."""

    _compilers: ClassVar[dict[str, type[SQLCompiler]]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[type[SQLCompiler]], type[SQLCompiler]]:
        """Class decorator form of :meth:`register_class`."""

        def decorator(compiler_cls: type[SQLCompiler]) -> type[SQLCompiler]:
            cls.register_class(name, compiler_cls)
            return compiler_cls

        return decorator

    @classmethod
    def register_class(cls, name: str, compiler_cls: type[SQLCompiler]) -> None:
        """Register ``compiler_cls`` under ``name``, replacing any previous entry."""
        key = name.lower()
        previous = cls._compilers.get(key)
        if previous is not None and previous is not compiler_cls:
            logger.debug(
                "dialect %r: %s replaces %s", key, compiler_cls.__name__, previous.__name__
            )
        cls._compilers[key] = compiler_cls

    @classmethod
    def unregister(cls, name: str) -> None:
        """Forget ``name``; unknown names are ignored."""
        cls._compilers.pop(name.lower(), None)

    @classmethod
    def create(cls, name: str, always_quote: bool = False) -> SQLCompiler:
        """Return a new compiler for ``name``.

        Raises:
            CompilationError: If no compiler is registered for ``name``.
        """
        compiler_cls = cls._compilers.get(name.lower())
        if compiler_cls is None:
            raise CompilationError(
                f"Unsupported dialect: '{name}'. "
                f"Registered dialects: {cls.registered_targets()}."
            )
        return compiler_cls(always_quote=always_quote)

    @classmethod
    def registered_targets(cls) -> list[str]:
        """Sorted names of every registered dialect."""
        return sorted(cls._compilers)
