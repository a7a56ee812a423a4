"""Execute compiled tag queries against the item database."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from sqlalchemy import TextClause, select, text

from tagfinder.db.models import Item
from tagfinder.search.compiler import compile_query
from tagfinder.search.parser import DEFAULT_ALLOWED_KEYS

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_ITEMS_SQL = """
SELECT i.id, i.path, i.tags, i.meta_tags
FROM items i
INNER JOIN
    tag_query tq ON tq.id = i.id
WHERE {where}
ORDER BY i.path
"""

_IDS_SQL = """
SELECT i.id
FROM items i
INNER JOIN
    tag_query tq ON tq.id = i.id
WHERE {where}
ORDER BY i.path
"""


def _literal_text(sql: str) -> TextClause:
    """Wrap generated SQL in text() without treating ``:word`` as binds.

    Tags and paths end up inside string literals and may contain colons.
    """
    return text(sql.replace(":", "\\:"))


def query_items(
    session: Session,
    query: str,
    allowed_keys: Iterable[str] = DEFAULT_ALLOWED_KEYS,
) -> list[Item]:
    """Return the items matching a tag query, ordered by path.

    Args:
        session: SQLAlchemy session connected to the item database.
        query: Tag query string; blank matches everything.
        allowed_keys: Keys recognised in ``key:value`` predicates.

    Raises:
        InvalidQueryError: If the query cannot be compiled.
    """
    sql = _ITEMS_SQL.format(where=compile_query(query, allowed_keys))
    logger.debug("Executing: %s", sql)
    stmt = select(Item).from_statement(_literal_text(sql))
    return list(session.scalars(stmt).all())


def query_ids(
    session: Session,
    query: str,
    allowed_keys: Iterable[str] = DEFAULT_ALLOWED_KEYS,
) -> list[int]:
    """Return the ids of the items matching a tag query, ordered by path.

    Raises:
        InvalidQueryError: If the query cannot be compiled.
    """
    sql = _IDS_SQL.format(where=compile_query(query, allowed_keys))
    logger.debug("Executing: %s", sql)
    return list(session.execute(_literal_text(sql)).scalars().all())


def list_directories(session: Session) -> list[str]:
    """Return every distinct item directory, sorted."""
    result = session.execute(
        text("SELECT DISTINCT dirname(i.path) FROM items i ORDER BY dirname(i.path)")
    )
    return list(result.scalars().all())
