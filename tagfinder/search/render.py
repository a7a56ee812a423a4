"""Render IR clauses as an FTS5 query string and as SQL."""

from __future__ import annotations

from tagfinder.search.escaping import (
    LIKE_ESCAPE_CHAR,
    escape_fts_phrase,
    escape_like_pattern,
    to_storage_path,
)
from tagfinder.search.ir import (
    ChildrenOf,
    ClauseAnd,
    ClauseNot,
    ClauseOr,
    Fts,
    FtsAnd,
    FtsNot,
    FtsOr,
    FTSPart,
    FtsPhrase,
    HasExt,
    InDir,
    InPath,
    LeadingPath,
    WhereClause,
)

# FTS5 column holding the item tags.
TAGS_COLUMN = "tags"

# Every indexed row carries ANCHOR_VALUE in ANCHOR_COLUMN. FTS5 has no
# free-standing NOT, so negative-only groups are anchored on this term.
ANCHOR_COLUMN = "meta_tags"
ANCHOR_VALUE = "all"
ANCHOR_TERM = f'{ANCHOR_COLUMN}:"{ANCHOR_VALUE}"'

_ESCAPE_CLAUSE = f"ESCAPE '{LIKE_ESCAPE_CHAR}'"


def fts_query(part: FTSPart) -> str:
    """Render a full-text part as an FTS5 query string.

    In an AND group, positive terms come first joined by ``AND``, then every
    negative term follows as ``NOT <term>``. A group with only negative
    terms is anchored on :data:`ANCHOR_TERM`.
    """
    if isinstance(part, FtsPhrase):
        return f'{TAGS_COLUMN}:"{escape_fts_phrase(part.name)}"'

    if isinstance(part, FtsAnd):
        positives = [p for p in part.children if not isinstance(p, FtsNot)]
        negatives = [p.child for p in part.children if isinstance(p, FtsNot)]
        if not negatives:
            return "(" + " AND ".join(fts_query(p) for p in positives) + ")"

        if positives:
            head = " AND ".join(fts_query(p) for p in positives)
        else:
            head = ANCHOR_TERM
        tail = "".join(f" NOT {fts_query(n)}" for n in negatives)
        return f"({head}{tail})"

    if isinstance(part, FtsOr):
        return "(" + " OR ".join(fts_query(p) for p in part.children) + ")"

    if isinstance(part, FtsNot):
        return f"({ANCHOR_TERM} NOT {fts_query(part.child)})"

    raise TypeError(f"Not a full-text part: {part!r}")


def _directory_pattern(path: str) -> str:
    """Escaped LIKE prefix for a directory, always ending in a slash."""
    escaped = escape_like_pattern(to_storage_path(path), LIKE_ESCAPE_CHAR)
    if not escaped.endswith("/"):
        escaped += "/"
    return escaped


def sql_clause(clause: WhereClause, is_root: bool = True) -> str:
    """Render a where-clause as a boolean SQL expression.

    The statement joins ``tag_query tq`` on the item id, and only one FTS
    lookup per statement may use that join. The root ``Fts`` clause gets
    it; nested ones become ``IN`` subqueries against the index.

    Args:
        clause: The clause to render.
        is_root: Whether ``clause`` is the outermost clause of the statement.
    """
    if isinstance(clause, Fts):
        query = fts_query(clause.part)
        if is_root:
            return f"tq.tag_query = '{query}'"
        return f"i.id IN (SELECT id FROM tag_query('{query}'))"

    if isinstance(clause, InDir):
        return f"i.path LIKE '{_directory_pattern(clause.path)}%' {_ESCAPE_CLAUSE}"

    if isinstance(clause, HasExt):
        ext = escape_like_pattern(clause.ext, LIKE_ESCAPE_CHAR)
        return f"extname(i.path) LIKE '{ext}' {_ESCAPE_CLAUSE}"

    if isinstance(clause, InPath):
        substring = escape_like_pattern(clause.substring, LIKE_ESCAPE_CHAR)
        return f"i.path LIKE '%{substring}%' {_ESCAPE_CLAUSE}"

    if isinstance(clause, ChildrenOf):
        prefix = _directory_pattern(clause.path)
        return (
            f"i.path LIKE '{prefix}%' {_ESCAPE_CLAUSE} "
            f"AND NOT i.path LIKE '{prefix}%/%' {_ESCAPE_CLAUSE}"
        )

    if isinstance(clause, LeadingPath):
        prefix = escape_like_pattern(to_storage_path(clause.path), LIKE_ESCAPE_CHAR)
        return f"i.path LIKE '{prefix}%' {_ESCAPE_CLAUSE}"

    if isinstance(clause, ClauseAnd):
        return "(" + " AND ".join(sql_clause(c, False) for c in clause.children) + ")"

    if isinstance(clause, ClauseOr):
        return "(" + " OR ".join(sql_clause(c, False) for c in clause.children) + ")"

    if isinstance(clause, ClauseNot):
        inner = clause.child
        # Negate inside the index so it stays a single lookup
        if isinstance(inner, Fts):
            return sql_clause(Fts(FtsNot(inner.part)), is_root)
        return f"NOT ({sql_clause(inner, False)})"

    raise TypeError(f"Not a where-clause: {clause!r}")
