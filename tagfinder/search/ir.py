"""Intermediate representation produced from the query AST.

Two node families:

* ``FTSPart`` - the part of a query answered by the FTS5 index
  (``FtsPhrase``, ``FtsAnd``, ``FtsOr``, ``FtsNot``).
* ``WhereClause`` - the SQL level, where a whole ``FTSPart`` is one
  ``Fts`` leaf next to structural path predicates.

All nodes are frozen, so subtrees can be shared and wrapped freely
(e.g. ``FtsNot(part)`` for an existing ``part``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class FtsPhrase:
    """A single tag, matched as a phrase in the ``tags`` column."""

    name: str


@dataclass(frozen=True)
class FtsAnd:
    children: tuple[FTSPart, ...]


@dataclass(frozen=True)
class FtsOr:
    children: tuple[FTSPart, ...]


@dataclass(frozen=True)
class FtsNot:
    child: FTSPart


FTSPart = Union[FtsPhrase, FtsAnd, FtsOr, FtsNot]


@dataclass(frozen=True)
class Fts:
    """A full-text lookup against the ``tag_query`` index."""

    part: FTSPart


@dataclass(frozen=True)
class InDir:
    """Item lives anywhere below directory ``path``."""

    path: str


@dataclass(frozen=True)
class HasExt:
    """Item has file extension ``ext`` (without the dot)."""

    ext: str


@dataclass(frozen=True)
class InPath:
    """Item path contains ``substring``."""

    substring: str


@dataclass(frozen=True)
class ChildrenOf:
    """Item is a direct child of directory ``path``."""

    path: str


@dataclass(frozen=True)
class LeadingPath:
    """Item path starts with ``path``."""

    path: str


@dataclass(frozen=True)
class ClauseAnd:
    children: tuple[WhereClause, ...]


@dataclass(frozen=True)
class ClauseOr:
    children: tuple[WhereClause, ...]


@dataclass(frozen=True)
class ClauseNot:
    child: WhereClause


WhereClause = Union[
    Fts,
    InDir,
    HasExt,
    InPath,
    ChildrenOf,
    LeadingPath,
    ClauseAnd,
    ClauseOr,
    ClauseNot,
]
