"""Full-text index and SQL functions required by compiled tag queries.

Compiled queries expect, next to the ``items`` table:

* ``tag_query``: an FTS5 external-content table over ``items.tags`` and
  ``items.meta_tags``, kept in sync by triggers;
* ``dirname(path)`` and ``extname(path)`` scalar functions.
"""

from __future__ import annotations

import logging
import posixpath

from sqlalchemy import event, text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

FTS_TABLE = "tag_query"

_SCHEMA_STATEMENTS: tuple[str, ...] = (
    # Use the ascii tokenizer to keep tags as close to the original as possible
    f"""
    CREATE VIRTUAL TABLE IF NOT EXISTS {FTS_TABLE} USING fts5 (
        id UNINDEXED,
        tags,
        meta_tags,
        content=items,
        content_rowid=id,
        tokenize="ascii"
    )
    """,
    f"""
    CREATE TRIGGER IF NOT EXISTS items_trigger_ai AFTER INSERT ON items BEGIN
        INSERT INTO {FTS_TABLE}(rowid, tags, meta_tags)
        VALUES (NEW.id, NEW.tags, NEW.meta_tags);
    END
    """,
    f"""
    CREATE TRIGGER IF NOT EXISTS items_trigger_ad AFTER DELETE ON items BEGIN
        INSERT INTO {FTS_TABLE}({FTS_TABLE}, rowid, tags, meta_tags)
        VALUES ('delete', OLD.id, OLD.tags, OLD.meta_tags);
    END
    """,
    f"""
    CREATE TRIGGER IF NOT EXISTS items_trigger_au AFTER UPDATE ON items BEGIN
        INSERT INTO {FTS_TABLE}({FTS_TABLE}, rowid, tags, meta_tags)
        VALUES ('delete', OLD.id, OLD.tags, OLD.meta_tags);
        INSERT INTO {FTS_TABLE}(rowid, tags, meta_tags)
        VALUES (NEW.id, NEW.tags, NEW.meta_tags);
    END
    """,
    "CREATE INDEX IF NOT EXISTS items_path_dirname ON items(dirname(path))",
    "CREATE INDEX IF NOT EXISTS items_path_extname ON items(extname(path))",
)


def dirname(path: str | None) -> str | None:
    """Parent directory of a storage path, ``""`` for top-level items."""
    if path is None:
        return None
    return posixpath.dirname(path)


def extname(path: str | None) -> str | None:
    """File extension of a storage path without the dot, ``""`` if none."""
    if path is None:
        return None
    ext = posixpath.splitext(path)[1]
    return ext[1:]


def register_functions(dbapi_connection) -> None:
    """Register the scalar functions on a raw sqlite3 connection.

    They are deterministic so they can back the expression indexes.
    """
    dbapi_connection.create_function("dirname", 1, dirname, deterministic=True)
    dbapi_connection.create_function("extname", 1, extname, deterministic=True)


def install_functions(engine: Engine) -> None:
    """Register the scalar functions on every connection of ``engine``."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        register_functions(dbapi_connection)


def create_search_schema(engine: Engine) -> None:
    """Create the FTS5 index, sync triggers and expression indexes.

    The ``items`` table must exist already. Safe to call repeatedly.
    """
    with engine.begin() as conn:
        for statement in _SCHEMA_STATEMENTS:
            conn.execute(text(statement))
    logger.info("Search schema ready on %s", engine.url)
