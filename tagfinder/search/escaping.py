"""String escaping for the FTS5 mini-query language and SQL LIKE patterns."""

from __future__ import annotations

LIKE_ESCAPE_CHAR = "\\"


def escape_fts_phrase(text: str) -> str:
    """Escape text for use inside an FTS5 phrase.

    Both single and double quotes are doubled. The double quotes keep the
    phrase closed, the single quotes keep the SQL string literal that wraps
    the whole FTS query closed.
    """
    return text.replace("'", "''").replace('"', '""')


def escape_like_pattern(text: str, escape_char: str = LIKE_ESCAPE_CHAR) -> str:
    """Escape text so a LIKE pattern matches it literally.

    Prefixes ``%``, ``_`` and ``escape_char`` with ``escape_char`` and
    doubles single quotes. The result must be used as::

        WHERE column LIKE '<returned string>' ESCAPE '<escape_char>'

    Args:
        text: The literal text to match.
        escape_char: A single character used as the LIKE escape.

    Returns:
        The escaped pattern body (without any wildcards added).
    """
    if len(escape_char) != 1:
        raise ValueError(f"escape_char must be a single character, got {escape_char!r}")

    result: list[str] = []
    for char in text:
        if char in ("%", "_") or char == escape_char:
            result.append(escape_char)
            result.append(char)
        elif char == "'":
            result.append("''")
        else:
            result.append(char)
    return "".join(result)


def to_storage_path(path: str) -> str:
    """Convert a user-supplied path to the forward-slash storage form."""
    return path.replace("\\", "/")
