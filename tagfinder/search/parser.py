"""Parse tag query syntax into an AST."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from functools import lru_cache
from importlib import resources
from typing import Any

from lark import Lark, Token, Transformer, UnexpectedInput

from tagfinder.exceptions import InputNotFullyConsumedError, QuerySyntaxError
from tagfinder.search.ast_nodes import And, Expr, KeyValue, Not, Or, Tag

logger = logging.getLogger(__name__)

# Keys that have a structural clause mapping.
KNOWN_KEYS: frozenset[str] = frozenset(
    {
        "in",
        "ext",
        "inpath",
        "children",
        "leading",
    }
)

DEFAULT_ALLOWED_KEYS: frozenset[str] = KNOWN_KEYS

_KEY_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Whitespace around the whole query (not inside quoted strings).
_OUTER_WS = " \t"


def _load_grammar() -> str:
    """Load the Lark grammar from the package resources."""
    return resources.files("tagfinder.search").joinpath("grammar.lark").read_text()


_GRAMMAR_TEXT = _load_grammar()


@lru_cache(maxsize=16)
def _build_parser(keys: frozenset[str]) -> Lark:
    # Longest keys first so "inpath" is not cut short by "in".
    alternatives = "|".join(re.escape(k) for k in sorted(keys, key=lambda k: (-len(k), k)))
    grammar = _GRAMMAR_TEXT.replace("@KEYS@", alternatives)
    return Lark(grammar, parser="lalr", lexer="contextual")


def build_parser(allowed_keys: Iterable[str] = DEFAULT_ALLOWED_KEYS) -> Lark:
    """Return a (cached) Lark parser accepting the given key-value keys.

    Raises:
        ValueError: If no keys are given or a key is not a plain identifier.
    """
    keys = frozenset(allowed_keys)
    if not keys:
        raise ValueError("at least one key-value key must be allowed")
    for key in keys:
        if not _KEY_NAME_RE.match(key):
            raise ValueError(f"invalid key name: {key!r}")
    return _build_parser(keys)


def _flatten(terms: list[Any], kind: type) -> tuple[Expr, ...]:
    """Splice the children of same-kind groups in place, one level deep."""
    flattened: list[Expr] = []
    for term in terms:
        if isinstance(term, kind):
            flattened.extend(term.children)
        else:
            flattened.append(term)
    return tuple(flattened)


def _unquote(raw: str, quote: str) -> str:
    return raw[1:-1].replace(quote * 2, quote)


class _ExprTransformer(Transformer):
    """Transform Lark parse tree into AST data classes."""

    def start(self, items: list[Any]) -> Expr:
        return items[0]

    def or_terms(self, items: list[Any]) -> Or:
        return Or(_flatten(items, Or))

    def and_terms(self, items: list[Any]) -> And:
        return And(_flatten(items, And))

    def negated(self, items: list[Any]) -> Not:
        return Not(items[0])

    def key_val(self, items: list[Any]) -> KeyValue:
        return KeyValue(key=items[0], value=items[1])

    def tag(self, items: list[Any]) -> Tag:
        return Tag(items[0])

    def KEY(self, token: Token) -> str:
        # Token includes the trailing colon
        return str(token)[:-1]

    def DQ_STRING(self, token: Token) -> str:
        return _unquote(str(token), '"')

    def SQ_STRING(self, token: Token) -> str:
        return _unquote(str(token), "'")

    def LITERAL(self, token: Token) -> str:
        return str(token)


_transformer = _ExprTransformer()


def _error_position(exc: UnexpectedInput, text: str) -> int:
    token = getattr(exc, "token", None)
    if token is not None and token.type == "$END":
        return len(text)
    pos = exc.pos_in_stream
    return len(text) if pos is None else pos


def parse_query(
    query_string: str,
    allowed_keys: Iterable[str] = DEFAULT_ALLOWED_KEYS,
) -> Expr:
    """Parse a tag query string into an AST.

    Surrounding spaces are ignored. The rest of the input must be consumed
    completely: the parser remembers the longest prefix that formed a
    complete query, so trailing garbage (e.g. a stray ``)``) is reported
    together with the AST of that prefix.

    Args:
        query_string: The search query to parse.
        allowed_keys: Keys recognised in ``key:value`` predicates.

    Returns:
        The root ``Expr`` of the query.

    Raises:
        QuerySyntaxError: If no prefix of the query is a valid query.
        InputNotFullyConsumedError: If a valid prefix was followed by
            input that could not be parsed.
    """
    parser = build_parser(allowed_keys)
    text = query_string.strip(_OUTER_WS)

    interactive = parser.parse_interactive(text)
    checkpoint = None
    try:
        for token in interactive.iter_parse():
            # The tokens fed so far form a complete query
            if "$END" in interactive.accepts():
                checkpoint = (interactive.copy(), token.start_pos)
        tree = interactive.feed_eof()
    except UnexpectedInput as e:
        if checkpoint is None:
            position = _error_position(e, text)
            raise QuerySyntaxError(query_string, position, text[position:]) from e
        prefix_parser, end = checkpoint
        partial = _transformer.transform(prefix_parser.feed_eof())
        remaining = text[end:].lstrip(_OUTER_WS)
        logger.debug("Query %r only parsed up to %r", query_string, remaining)
        raise InputNotFullyConsumedError(query_string, remaining, partial) from e

    expr = _transformer.transform(tree)
    logger.debug("Parsed query %r into %r", query_string, expr)
    return expr
