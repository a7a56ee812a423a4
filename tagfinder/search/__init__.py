"""Tag query parsing and compilation to SQL."""

from tagfinder.search.ast_nodes import And, Expr, KeyValue, Not, Or, Tag
from tagfinder.search.clauses import combine_and, combine_or, generate_clause
from tagfinder.search.compiler import compile_query, to_sql
from tagfinder.search.escaping import escape_fts_phrase, escape_like_pattern
from tagfinder.search.parser import DEFAULT_ALLOWED_KEYS, KNOWN_KEYS, parse_query
from tagfinder.search.render import fts_query, sql_clause

__all__ = [
    "DEFAULT_ALLOWED_KEYS",
    "KNOWN_KEYS",
    "And",
    "Expr",
    "KeyValue",
    "Not",
    "Or",
    "Tag",
    "combine_and",
    "combine_or",
    "compile_query",
    "escape_fts_phrase",
    "escape_like_pattern",
    "fts_query",
    "generate_clause",
    "parse_query",
    "sql_clause",
    "to_sql",
]
