"""Search the item database with a tag query."""

from __future__ import annotations

from pathlib import Path

import click
from rich.markup import escape
from sqlalchemy.exc import SQLAlchemyError

from tagfinder.cli import Context, pass_context
from tagfinder.config import get_default_database_path
from tagfinder.db.session import get_session
from tagfinder.exceptions import DatabaseNotFoundError, InvalidQueryError
from tagfinder.search.parser import DEFAULT_ALLOWED_KEYS
from tagfinder.search.query import query_ids, query_items
from tagfinder.utils.output import console, create_table, error, info, verbose

EXIT_PARSE_ERROR = 1
EXIT_DATABASE_ERROR = 2


@click.command("search")
@click.argument("query", default="")
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Item database (default: paths.database from config)",
)
@click.option(
    "--ids",
    "ids_only",
    is_flag=True,
    default=False,
    help="Print matching item ids only, one per line",
)
@pass_context
def cli(ctx: Context, query: str, db_path: Path | None, ids_only: bool) -> None:
    """Search tagged items matching QUERY.

    An empty QUERY lists every item.

    \b
    Query syntax:
      kick drum          items tagged both kick and drum
      kick | snare       items tagged kick or snare
      -snare             items not tagged snare
      (a | b) c          grouping
      'two words'        quoted tag, double the quote to include it
      in:Drums/          below a directory
      children:Drums     directly inside a directory
      ext:wav            by file extension
      inpath:live        path contains text
      leading:Dr         path starts with text

    \b
    Examples:
      tag-finder search "kick -snare in:Drums/"
      tag-finder search --ids "ext:wav (clap | fx)"
    """
    config = ctx.config
    allowed_keys = config.allowed_keys if config else DEFAULT_ALLOWED_KEYS
    if db_path is None:
        db_path = config.database if config else get_default_database_path()

    try:
        with get_session(db_path, create=False) as session:
            if ids_only:
                for item_id in query_ids(session, query, allowed_keys):
                    console.print(str(item_id), markup=False, highlight=False)
                return

            items = query_items(session, query, allowed_keys)
            verbose(escape(f"{len(items)} item(s) match {query!r}"))

            if not items:
                if not ctx.quiet:
                    info("No matching items")
                return

            table = create_table()
            table.add_column("Path", style="path")
            table.add_column("Tags", style="tags")
            for item in items:
                table.add_row(escape(item.path), escape(item.tags))
            console.print(table)

            if not ctx.quiet:
                info(f"{len(items)} item(s)")
    except InvalidQueryError as e:
        error(escape(str(e)), hint="Run 'tag-finder search --help' for the query syntax")
        if e.__cause__ is not None:
            verbose(escape(str(e.__cause__)))
        raise SystemExit(EXIT_PARSE_ERROR) from e
    except DatabaseNotFoundError as e:
        error(str(e))
        raise SystemExit(EXIT_DATABASE_ERROR) from e
    except SQLAlchemyError as e:
        error(f"Database error: {e}")
        raise SystemExit(EXIT_DATABASE_ERROR) from e
