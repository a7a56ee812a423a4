"""Unit tests for the tag query parser."""

from __future__ import annotations

import pytest

from tagfinder.exceptions import (
    InputNotFullyConsumedError,
    QueryParseError,
    QuerySyntaxError,
)
from tagfinder.search.ast_nodes import And, KeyValue, Not, Or, Tag
from tagfinder.search.parser import build_parser, parse_query


def and_(*children):
    return And(tuple(children))


def or_(*children):
    return Or(tuple(children))


def tags(*names):
    return [Tag(name) for name in names]


# ---------------------------------------------------------------------------
# Quoted strings
# ---------------------------------------------------------------------------


class TestQuotedStrings:
    def test_double_quoted_with_doubled_quote(self) -> None:
        assert parse_query('"aaa""sss"') == Tag('aaa"sss')

    def test_double_quoted_keeps_single_quotes(self) -> None:
        assert parse_query('"aaaa\' \' \'\'bbbb""cccc"') == Tag("aaaa' ' ''bbbb\"cccc")

    def test_double_quoted_ending_in_quote(self) -> None:
        assert parse_query('"aaa"""') == Tag('aaa"')

    def test_only_escaped_quote(self) -> None:
        assert parse_query('""""') == Tag('"')

    def test_single_quoted_with_doubled_quote(self) -> None:
        assert parse_query("'aaa''sss'") == Tag("aaa'sss")

    def test_single_quoted_keeps_double_quotes(self) -> None:
        assert parse_query("'aaa\"\"''\"'") == Tag("aaa\"\"'\"")

    def test_quoted_spaces_are_one_tag(self) -> None:
        assert parse_query("'black octopus'") == Tag("black octopus")

    def test_quoted_operators_are_literal(self) -> None:
        assert parse_query("\"c ( 'a' b )\"") == Tag("c ( 'a' b )")

    def test_unterminated_string(self) -> None:
        with pytest.raises(QuerySyntaxError):
            parse_query("\"aaa'")

    def test_string_never_ends_before_escaped_quote(self) -> None:
        # "''" is an escaped quote, so the string is left unterminated
        with pytest.raises(QuerySyntaxError) as exc_info:
            parse_query("'x''")
        assert exc_info.value.position == 0

    def test_odd_quote_run_closes_string(self) -> None:
        assert parse_query("'x'''") == Tag("x'")

    def test_string_followed_by_other_quote_kind(self) -> None:
        assert parse_query("'a'\"b\"") == and_(Tag("a"), Tag("b"))


# ---------------------------------------------------------------------------
# Unquoted literals
# ---------------------------------------------------------------------------


class TestLiterals:
    def test_colon_inside_literal(self) -> None:
        assert parse_query("a:sd qwe") == and_(Tag("a:sd"), Tag("qwe"))

    def test_leading_colon(self) -> None:
        assert parse_query(":sd") == Tag(":sd")

    def test_inner_quote(self) -> None:
        assert parse_query("m'lady") == Tag("m'lady")

    def test_leading_quote_is_invalid(self) -> None:
        with pytest.raises(QuerySyntaxError):
            parse_query("'mlady")

    def test_ampersand_is_a_literal(self) -> None:
        assert parse_query("a & b c") == and_(*tags("a", "&", "b", "c"))

    def test_ampersand_prefix(self) -> None:
        assert parse_query("a &b & c") == and_(*tags("a", "&b", "&", "c"))

    def test_no_spaces_is_one_literal(self) -> None:
        assert parse_query("a&b&c") == Tag("a&b&c")

    def test_surrounding_spaces_ignored(self) -> None:
        assert parse_query(" as ") == Tag("as")

    def test_inner_dash_is_literal(self) -> None:
        assert parse_query("lo-fi") == Tag("lo-fi")


# ---------------------------------------------------------------------------
# Key-value predicates
# ---------------------------------------------------------------------------


class TestKeyValue:
    def test_literal_value(self) -> None:
        assert parse_query("in:src/") == KeyValue("in", "src/")

    def test_quoted_value(self) -> None:
        assert parse_query('in:"D:/Audio Samples/"') == KeyValue("in", "D:/Audio Samples/")

    def test_quoted_value_with_escaped_quote(self) -> None:
        assert parse_query('in:"quote in path for some reason"""') == KeyValue(
            "in", 'quote in path for some reason"'
        )

    def test_single_quoted_value(self) -> None:
        assert parse_query("in:'black octopus'") == KeyValue("in", "black octopus")

    @pytest.mark.parametrize("key", ["in", "ext", "inpath", "children", "leading"])
    def test_all_default_keys(self, key: str) -> None:
        assert parse_query(f"{key}:x") == KeyValue(key, "x")

    def test_longer_key_not_cut_short(self) -> None:
        assert parse_query("inpath:live") == KeyValue("inpath", "live")

    def test_quoted_key_is_not_a_key(self) -> None:
        assert parse_query('"spaced key":hello') == and_(Tag("spaced key"), Tag(":hello"))

    def test_unknown_key_is_a_tag(self) -> None:
        assert parse_query("foo:bar") == Tag("foo:bar")

    def test_key_without_value_is_a_tag(self) -> None:
        assert parse_query("in:") == Tag("in:")

    def test_key_with_invalid_value_is_a_tag(self) -> None:
        assert parse_query("in:-x") == Tag("in:-x")

    def test_key_with_unterminated_quote_is_a_tag(self) -> None:
        assert parse_query("in:'abc") == Tag("in:'abc")

    def test_key_with_lone_pipe_is_a_tag(self) -> None:
        assert parse_query("in:|") == Tag("in:|")

    def test_key_with_lone_pipe_before_term(self) -> None:
        assert parse_query("in:| b") == and_(Tag("in:|"), Tag("b"))

    def test_key_with_lone_pipe_after_term(self) -> None:
        assert parse_query("a in:|") == and_(Tag("a"), Tag("in:|"))

    def test_key_with_pipe_prefixed_value(self) -> None:
        assert parse_query("in:|x") == KeyValue("in", "|x")

    def test_key_with_dangling_single_quote_is_a_tag(self) -> None:
        assert parse_query("in:'x''") == Tag("in:'x''")

    def test_key_with_dangling_double_quote_is_a_tag(self) -> None:
        assert parse_query('in:"x""') == Tag('in:"x""')

    def test_disallowed_key_is_a_tag(self) -> None:
        assert parse_query("ext:wav", allowed_keys={"in"}) == Tag("ext:wav")

    def test_extra_allowed_key(self) -> None:
        assert parse_query("foo:bar", allowed_keys={"in", "foo"}) == KeyValue("foo", "bar")

    def test_key_value_in_and(self) -> None:
        assert parse_query("kick in:Drums/") == and_(Tag("kick"), KeyValue("in", "Drums/"))


# ---------------------------------------------------------------------------
# Boolean structure
# ---------------------------------------------------------------------------


class TestBooleanStructure:
    def test_implicit_and(self) -> None:
        assert parse_query("a b c") == and_(*tags("a", "b", "c"))

    def test_or(self) -> None:
        assert parse_query("a | b | c") == or_(*tags("a", "b", "c"))

    def test_pipe_prefix_is_literal(self) -> None:
        assert parse_query("a | |b | c") == or_(*tags("a", "|b", "c"))

    def test_pipe_without_spaces_is_literal(self) -> None:
        assert parse_query("a|b | c") == or_(Tag("a|b"), Tag("c"))

    def test_trailing_pipe_is_literal(self) -> None:
        assert parse_query("a| b | c") == or_(and_(Tag("a|"), Tag("b")), Tag("c"))

    def test_and_binds_tighter_than_or(self) -> None:
        assert parse_query("a b | c | d e f") == or_(
            and_(Tag("a"), Tag("b")),
            Tag("c"),
            and_(Tag("d"), Tag("e"), Tag("f")),
        )

    def test_parens_in_or(self) -> None:
        assert parse_query("(a b) | c") == or_(and_(Tag("a"), Tag("b")), Tag("c"))

    def test_parens_flattened_into_and(self) -> None:
        assert parse_query("(a b) c") == and_(*tags("a", "b", "c"))

    def test_parens_with_inner_spaces(self) -> None:
        assert parse_query("( a b ) c") == and_(*tags("a", "b", "c"))

    def test_trailing_parens(self) -> None:
        assert parse_query("c ( a b )") == and_(*tags("c", "a", "b"))

    def test_quoted_tags_in_parens(self) -> None:
        assert parse_query("\"c\" ( 'a' \"b\" )") == and_(*tags("c", "a", "b"))

    def test_nested_or_in_parens_kept(self) -> None:
        assert parse_query("a (b | c)") == and_(Tag("a"), or_(Tag("b"), Tag("c")))

    def test_or_of_ors_flattened(self) -> None:
        assert parse_query("(a | b) | c") == or_(*tags("a", "b", "c"))

    def test_redundant_parens(self) -> None:
        assert parse_query("((a))") == Tag("a")


# ---------------------------------------------------------------------------
# Negation
# ---------------------------------------------------------------------------


class TestNegation:
    def test_negated_tag(self) -> None:
        assert parse_query("-ambient") == Not(Tag("ambient"))

    def test_negation_with_space(self) -> None:
        assert parse_query("- ambient") == Not(Tag("ambient"))

    def test_negated_key_value(self) -> None:
        assert parse_query("-in:Drums/") == Not(KeyValue("in", "Drums/"))

    def test_mixed(self) -> None:
        assert parse_query("a b -e in:1 | d e in:0") == or_(
            and_(Tag("a"), Tag("b"), Not(Tag("e")), KeyValue("in", "1")),
            and_(Tag("d"), Tag("e"), KeyValue("in", "0")),
        )

    def test_negated_group(self) -> None:
        assert parse_query("a -(b e in:1) | -d e in:0") == or_(
            and_(Tag("a"), Not(and_(Tag("b"), Tag("e"), KeyValue("in", "1")))),
            and_(Not(Tag("d")), Tag("e"), KeyValue("in", "0")),
        )

    def test_double_negation_is_invalid(self) -> None:
        with pytest.raises(QuerySyntaxError):
            parse_query("--a")


# ---------------------------------------------------------------------------
# Full queries
# ---------------------------------------------------------------------------


class TestFullQueries:
    def test_common(self) -> None:
        assert parse_query("kick drum -snare (clap | fx) in:'black octopus'") == and_(
            Tag("kick"),
            Tag("drum"),
            Not(Tag("snare")),
            or_(Tag("clap"), Tag("fx")),
            KeyValue("in", "black octopus"),
        )

    def test_complex(self) -> None:
        assert parse_query("a & b | c ( in:src/ | d &e ) & f") == or_(
            and_(Tag("a"), Tag("&"), Tag("b")),
            and_(
                Tag("c"),
                or_(KeyValue("in", "src/"), and_(Tag("d"), Tag("&e"))),
                Tag("&"),
                Tag("f"),
            ),
        )


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestParseErrors:
    def test_trailing_paren_keeps_partial(self) -> None:
        with pytest.raises(InputNotFullyConsumedError) as exc_info:
            parse_query("a b )")
        assert exc_info.value.remaining == ")"
        assert exc_info.value.partial == and_(Tag("a"), Tag("b"))

    def test_unclosed_paren_after_valid_prefix(self) -> None:
        with pytest.raises(InputNotFullyConsumedError) as exc_info:
            parse_query("a (b")
        assert exc_info.value.remaining == "(b"
        assert exc_info.value.partial == Tag("a")

    def test_dangling_pipe(self) -> None:
        with pytest.raises(InputNotFullyConsumedError) as exc_info:
            parse_query("a |")
        assert exc_info.value.remaining == "|"

    def test_lone_paren(self) -> None:
        with pytest.raises(QuerySyntaxError) as exc_info:
            parse_query(")")
        assert exc_info.value.position == 0

    def test_unclosed_paren(self) -> None:
        with pytest.raises(QuerySyntaxError):
            parse_query("(a b")

    def test_lone_dash(self) -> None:
        with pytest.raises(QuerySyntaxError):
            parse_query("-")

    def test_empty_query(self) -> None:
        with pytest.raises(QuerySyntaxError):
            parse_query("")

    def test_errors_share_base_class(self) -> None:
        for query in (")", "a b )"):
            with pytest.raises(QueryParseError) as exc_info:
                parse_query(query)
            assert exc_info.value.query == query


# ---------------------------------------------------------------------------
# Parser construction
# ---------------------------------------------------------------------------


class TestBuildParser:
    def test_cached_per_key_set(self) -> None:
        assert build_parser(["in", "ext"]) is build_parser(("ext", "in"))

    def test_empty_keys_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_parser([])

    def test_non_identifier_key_rejected(self) -> None:
        with pytest.raises(ValueError):
            build_parser(["bad key"])
