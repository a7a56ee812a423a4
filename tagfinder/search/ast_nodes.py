"""AST data classes for parsed tag queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class And:
    """Conjunction of terms, implicit (juxtaposition) or from parentheses.

    Never directly contains another ``And``.
    """

    children: tuple[Expr, ...]


@dataclass(frozen=True)
class Or:
    """Disjunction of terms separated by `` | ``.

    Never directly contains another ``Or``.
    """

    children: tuple[Expr, ...]


@dataclass(frozen=True)
class Not:
    """A ``-`` prefixed term or group."""

    child: Expr


@dataclass(frozen=True)
class Tag:
    """A bare word or quoted string matched against an item's tags."""

    name: str


@dataclass(frozen=True)
class KeyValue:
    """A structural predicate like ``in:Drums/`` or ``ext:wav``."""

    key: str
    value: str


Expr = Union[And, Or, Not, Tag, KeyValue]
