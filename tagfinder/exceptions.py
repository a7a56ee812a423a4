"""Exception hierarchy for tag-finder."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class TagFinderError(Exception):
    """Base exception for all tag-finder errors.

    All exceptions in this package inherit from this class,
    allowing callers to catch all tag-finder errors with
    a single except clause.
    """

    pass


# Configuration Errors
class ConfigError(TagFinderError):
    """Configuration-related errors."""

    pass


class ConfigParseError(ConfigError):
    """Configuration file has invalid syntax."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config at {path}: {detail}")


class ConfigValidationError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# Database Errors
class DatabaseError(TagFinderError):
    """Database-related errors."""

    pass


class DatabaseNotFoundError(DatabaseError):
    """Database file doesn't exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Database not found: {path}")


# Query Errors
class QueryError(TagFinderError):
    """Search query errors."""

    pass


class QueryParseError(QueryError):
    """The query string could not be parsed."""

    def __init__(self, query: str, message: str) -> None:
        self.query = query
        super().__init__(f"Failed to parse search query '{query}': {message}")


class QuerySyntaxError(QueryParseError):
    """The grammar failed to match at ``position``."""

    def __init__(self, query: str, position: int, remaining: str) -> None:
        self.position = position
        self.remaining = remaining
        super().__init__(query, f"unexpected input at offset {position}: {remaining!r}")


class InputNotFullyConsumedError(QueryParseError):
    """A valid prefix was parsed but trailing input was left over.

    ``partial`` holds the AST of the prefix, for diagnostics only.
    """

    def __init__(self, query: str, remaining: str, partial: Any) -> None:
        self.remaining = remaining
        self.partial = partial
        super().__init__(query, f"unparsed trailing input {remaining!r}")


class CompileError(QueryError):
    """A parsed query could not be compiled to SQL."""

    pass


class UnknownKeyError(CompileError):
    """A key-value predicate used a key with no structural mapping."""

    def __init__(self, key: str, value: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Unrecognised key-value pair: {key!r} = {value!r}")


class InvalidQueryError(QueryError):
    """User-facing error for any query that cannot be turned into SQL."""

    def __init__(self, query: str) -> None:
        self.query = query
        super().__init__(f"Invalid search query: {query}")
