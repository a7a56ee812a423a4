"""Generate IR where-clauses from a parsed query AST."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from tagfinder.exceptions import UnknownKeyError
from tagfinder.search.ast_nodes import And, Expr, KeyValue, Not, Or, Tag
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

# Map key-value keys to structural clause types.
_KEY_TO_CLAUSE: dict[str, Callable[[str], WhereClause]] = {
    "in": InDir,
    "ext": HasExt,
    "inpath": InPath,
    "children": ChildrenOf,
    "leading": LeadingPath,
}


def _combine(parts: Sequence[FTSPart], group: type) -> FTSPart:
    if not parts:
        raise ValueError("cannot combine an empty list of full-text parts")
    if len(parts) == 1:
        return parts[0]

    children: list[FTSPart] = []
    for part in parts:
        if isinstance(part, group):
            children.extend(part.children)
        else:
            children.append(part)
    return group(tuple(children))


def combine_and(parts: Sequence[FTSPart]) -> FTSPart:
    """AND full-text parts together.

    A single part is returned as is. Top-level ``FtsAnd`` parts are spliced
    into the new group; their own children are left untouched.
    """
    return _combine(parts, FtsAnd)


def combine_or(parts: Sequence[FTSPart]) -> FTSPart:
    """OR full-text parts together, the counterpart of :func:`combine_and`."""
    return _combine(parts, FtsOr)


def _generate_group(
    exprs: Sequence[Expr],
    combine: Callable[[Sequence[FTSPart]], FTSPart],
    group: type,
) -> WhereClause:
    """Generate an And/Or group, merging all full-text children into one.

    The merged ``Fts`` clause goes first, followed by the structural
    clauses in their original order.
    """
    if not exprs:
        raise ValueError(f"{group.__name__} group has no children")

    fts_parts: list[FTSPart] = []
    sql_clauses: list[WhereClause] = []
    for expr in exprs:
        clause = generate_clause(expr)
        if isinstance(clause, Fts):
            fts_parts.append(clause.part)
        else:
            sql_clauses.append(clause)

    if fts_parts:
        sql_clauses.insert(0, Fts(combine(fts_parts)))

    if len(sql_clauses) == 1:
        return sql_clauses[0]
    return group(tuple(sql_clauses))


def generate_clause(expr: Expr) -> WhereClause:
    """Generate the where-clause IR for a query AST.

    Assumes And and Or groups don't directly contain a group of the same
    type, which the parser guarantees.

    Raises:
        UnknownKeyError: If a ``KeyValue`` uses a key without a clause.
    """
    if isinstance(expr, And):
        return _generate_group(expr.children, combine_and, ClauseAnd)

    if isinstance(expr, Or):
        return _generate_group(expr.children, combine_or, ClauseOr)

    if isinstance(expr, Not):
        clause = generate_clause(expr.child)
        # Keep negated full-text terms inside the FTS query
        if isinstance(clause, Fts):
            return Fts(FtsNot(clause.part))
        return ClauseNot(clause)

    if isinstance(expr, Tag):
        return Fts(FtsPhrase(expr.name))

    if isinstance(expr, KeyValue):
        clause_type = _KEY_TO_CLAUSE.get(expr.key)
        if clause_type is None:
            raise UnknownKeyError(expr.key, expr.value)
        return clause_type(expr.value)

    raise TypeError(f"Not a query expression: {expr!r}")
