"""Show what a tag query compiles to."""

from __future__ import annotations

from collections.abc import Iterable

import click
from rich.markup import escape

from tagfinder.cli import Context, pass_context
from tagfinder.exceptions import QueryError
from tagfinder.search.clauses import generate_clause
from tagfinder.search.compiler import to_sql
from tagfinder.search.ir import Fts
from tagfinder.search.parser import DEFAULT_ALLOWED_KEYS, parse_query
from tagfinder.search.render import fts_query
from tagfinder.utils.output import error, print_sql, verbose

EXIT_PARSE_ERROR = 1


def _render(query: str, allowed_keys: Iterable[str], *, show_ast: bool, show_fts: bool) -> str:
    """Return the text to print for a query, raising QueryError if invalid."""
    if not (show_ast or show_fts):
        return to_sql(query, allowed_keys)

    expr = parse_query(query, allowed_keys)
    if show_ast:
        return repr(expr)

    clause = generate_clause(expr)
    if not isinstance(clause, Fts):
        error(
            "Query is not a pure full-text query",
            hint="Drop the key:value filters or use plain compile",
        )
        raise SystemExit(EXIT_PARSE_ERROR)
    return fts_query(clause.part)


@click.command("compile")
@click.argument("query")
@click.option(
    "--ast",
    "show_ast",
    is_flag=True,
    default=False,
    help="Print the parsed syntax tree instead of SQL",
)
@click.option(
    "--fts",
    "show_fts",
    is_flag=True,
    default=False,
    help="Print only the full-text query (pure tag queries only)",
)
@pass_context
def cli(ctx: Context, query: str, show_ast: bool, show_fts: bool) -> None:
    """Compile QUERY and print the resulting SQL where-fragment.

    \b
    Examples:
      tag-finder compile "a b c"
      tag-finder compile "kick -snare in:Drums/"
      tag-finder compile --fts "-b -c"
      tag-finder compile --ast "a | b (c d)"
    """
    allowed_keys = ctx.config.allowed_keys if ctx.config else DEFAULT_ALLOWED_KEYS

    try:
        output = _render(query, allowed_keys, show_ast=show_ast, show_fts=show_fts)
    except QueryError as e:
        error(f"Invalid search query: {escape(query)}")
        verbose(escape(str(e)))
        raise SystemExit(EXIT_PARSE_ERROR) from e

    print_sql(output)
