"""Compile tag query strings into SQL where-fragments."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from tagfinder.exceptions import InvalidQueryError, QueryError
from tagfinder.search.clauses import generate_clause
from tagfinder.search.parser import DEFAULT_ALLOWED_KEYS, parse_query
from tagfinder.search.render import sql_clause

logger = logging.getLogger(__name__)

# Fragment for an empty query: match every item.
MATCH_ALL = "true"


def to_sql(query: str, allowed_keys: Iterable[str] = DEFAULT_ALLOWED_KEYS) -> str:
    """Compile a tag query into a boolean SQL expression.

    The result is meant for::

        SELECT ... FROM items i
        INNER JOIN tag_query tq ON tq.id = i.id
        WHERE <result>

    A blank query matches everything and is not parsed at all.

    Raises:
        QueryParseError: If the query cannot be parsed.
        UnknownKeyError: If a key-value key has no clause mapping.
    """
    if not query.strip():
        return MATCH_ALL

    expr = parse_query(query, allowed_keys)
    clause = generate_clause(expr)
    fragment = sql_clause(clause, is_root=True)
    logger.debug("Compiled query %r to %s", query, fragment)
    return fragment


def compile_query(query: str, allowed_keys: Iterable[str] = DEFAULT_ALLOWED_KEYS) -> str:
    """Compile a query for end users, hiding parser details.

    Raises:
        InvalidQueryError: If the query cannot be parsed or compiled.
    """
    try:
        return to_sql(query, allowed_keys)
    except QueryError as e:
        logger.debug("Rejected query %r: %s", query, e)
        raise InvalidQueryError(query) from e
