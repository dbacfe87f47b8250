"""visql compilation layer: VisualQueryConfig → SQL."""
from visql.compile.base import CompiledQuery, SQLCompiler
from visql.compile.builder import QueryBuilder, compile_config
from visql.compile.mysql import MySQLCompiler
from visql.compile.postgres import PostgresCompiler
from visql.compile.registry import CompilerFactory
from visql.compile.sqlite import SQLiteCompiler

__all__ = [
    "CompiledQuery",
    "CompilerFactory",
    "MySQLCompiler",
    "PostgresCompiler",
    "QueryBuilder",
    "SQLCompiler",
    "SQLiteCompiler",
    "compile_config",
]
