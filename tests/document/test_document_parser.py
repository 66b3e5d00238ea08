"""
Tests for the document parser: tags, attributes, text runs and errors.
"""

import time

import pytest

from compmd.config import ParserOptions
from compmd.document import (
    DocumentParser,
    Interpolation,
    Tag,
    Text,
    collect_text_content,
    format_ast_tree,
)
from compmd.engines import identity_engine, markdown_it_engine
from compmd.errors import ErrorKind, ExpressionParseError, StructuralParseError
from compmd.expressions import Accessor, SourceLocation


class TestTextAndTags:

    def test_text_block(self, parse_plain):
        assert parse_plain("Some text") == (Text(("Some text",)),)

    def test_plain_text_round_trip(self, parse_plain):
        text = "Plain text,\nwith lines; and (punctuation) > arrows!\n"
        ast = parse_plain(text)

        assert len(ast) == 1
        assert collect_text_content(ast) == text

    def test_interpolation_in_text(self, parse_plain):
        (node,) = parse_plain("Hello {name}!")

        assert node.blocks == (
            "Hello ",
            Interpolation(Accessor("name"), SourceLocation(1, 7)),
            "!",
        )

    def test_interpolation_location_on_later_line(self, parse_plain):
        (node,) = parse_plain("line\n  {x}")

        assert node.interpolations[0].location == SourceLocation(2, 3)

    def test_recursive_tags(self, parse_plain):
        ast = parse_plain(
            "<Outer a={ x.y }>\n"
            "  <Inner a=123>\n"
            "  </Inner>\n"
            "</Outer>"
        )

        assert len(ast) == 1
        outer = ast[0]
        assert isinstance(outer, Tag)
        assert outer.name == "outer"
        assert outer.raw_name == "Outer"
        assert outer.attrs == {"a": Interpolation(Accessor("x.y"), SourceLocation(1, 10))}
        assert len(outer.children) == 1
        inner = outer.children[0]
        assert inner.name == "inner"
        assert inner.attrs == {"a": 123.0}
        assert inner.children == ()
        assert inner.location == SourceLocation(2, 3)

    def test_tag_children_match_parse_of_inner_content(self, parse_plain):
        inner = "Some *text* with {value} and <B x=1>more</B>"
        (tag,) = parse_plain(f"<A>{inner}</A>")
        expected = parse_plain(inner)

        # позиции отличаются на длину "<A>", структура совпадает
        assert len(tag.children) == len(expected) == 2
        assert collect_text_content(tag.children) == collect_text_content(expected)
        assert tag.children[0].interpolations[0].expression == expected[0].interpolations[0].expression
        assert tag.children[1].attrs == expected[1].attrs
        assert tag.children[1].children == expected[1].children

    def test_closing_tag_is_case_insensitive(self, parse_plain):
        (tag,) = parse_plain("<Outer>hi</OUTER >")

        assert tag.children == (Text(("hi",)),)

    def test_self_closing_tag(self, parse_plain):
        ast = parse_plain("<Br/> and <Hr />")

        assert ast[0] == Tag(name="br", raw_name="Br", self_closing=True, location=SourceLocation(1, 1))
        assert ast[1] == Text((" and ",))
        assert ast[2].name == "hr"
        assert ast[2].self_closing

    def test_hyphenated_tag_name(self, parse_plain):
        (tag,) = parse_plain("<my-widget/>")

        assert tag.name == "my-widget"

    def test_whitespace_only_runs_are_dropped(self, parse_plain):
        ast = parse_plain("<A/>\n\n   <B/>\n")

        assert [node.name for node in ast] == ["a", "b"]

    def test_escapes_render_single_characters(self, parse_plain):
        ast = parse_plain("a {{ b }} c << d >> e")

        assert ast == (Text(("a { b } c < d > e",)),)

    def test_lone_angle_bracket_is_literal(self, parse_plain):
        assert parse_plain("a > b") == (Text(("a > b",)),)


class TestAttributes:

    def test_attribute_typing(self, parse_plain):
        (tag,) = parse_plain("<X a=\"str\" b=1.5 c d=false e={x.y} f='single' g=-2 h=true/>")

        assert tag.attrs == {
            "a": "str",
            "b": 1.5,
            "c": True,
            "d": False,
            "e": Interpolation(Accessor("x.y"), SourceLocation(1, 30)),
            "f": "single",
            "g": -2.0,
            "h": True,
        }

    def test_attributes_across_lines(self, parse_plain):
        (tag,) = parse_plain('<X\n  a="1"\n  b=2\n>body</X>')

        assert tag.attrs == {"a": "1", "b": 2.0}
        assert tag.children == (Text(("body",)),)

    def test_invalid_attribute_value(self, parse_plain):
        with pytest.raises(StructuralParseError, match="Invalid value for attribute 'a'") as exc:
            parse_plain("<X a=bogus>")
        assert exc.value.kind == ErrorKind.INVALID_ATTRIBUTE
        assert (exc.value.line_number, exc.value.column_number) == (1, 6)

    def test_invalid_attribute_expression(self, parse_plain):
        with pytest.raises(ExpressionParseError, match="Empty interpolation"):
            parse_plain("<X a={}>")


class TestStructuralErrors:

    def test_unexpected_closing_tag(self, parse_plain):
        with pytest.raises(StructuralParseError, match=r"Unexpected closing tag </outer> at 1:15") as exc:
            parse_plain("<outer><inner></outer>")
        assert exc.value.kind == ErrorKind.UNEXPECTED_CLOSING_TAG

    def test_no_closing_tag(self, parse_plain):
        with pytest.raises(StructuralParseError, match=r"Expecting closing tag </outer> for tag opened at 1:1") as exc:
            parse_plain("<outer><inner></inner>")
        assert exc.value.kind == ErrorKind.NO_CLOSING_TAG

    def test_missing_end_bracket(self, parse_plain):
        with pytest.raises(StructuralParseError, match="Missing end bracket") as exc:
            parse_plain("<X a=1")
        assert exc.value.kind == ErrorKind.MISSING_END_BRACKET

    def test_unmatched_closing_brace(self, parse_plain):
        with pytest.raises(StructuralParseError, match=r"Unmatched '}' .* at 1:3") as exc:
            parse_plain("a } b")
        assert exc.value.kind == ErrorKind.UNEXPECTED_CHARACTER

    def test_lone_opening_angle_bracket(self, parse_plain):
        with pytest.raises(StructuralParseError, match=r"Unexpected '<'") as exc:
            parse_plain("a < b")
        assert exc.value.kind == ErrorKind.UNEXPECTED_CHARACTER
        assert exc.value.column_number == 3

    def test_max_depth(self, parse_plain):
        with pytest.raises(StructuralParseError, match="exceeds maximum nesting depth 2") as exc:
            parse_plain("<a><b><c></c></b></a>", max_depth=2)
        assert exc.value.kind == ErrorKind.MAX_DEPTH_EXCEEDED
        assert exc.value.column_number == 7

    def test_placeholder_in_input(self, parse_plain):
        with pytest.raises(StructuralParseError, match="interpolation point") as exc:
            parse_plain("a XX b", interpolation_point="XX")
        assert exc.value.kind == ErrorKind.PLACEHOLDER_COLLISION
        assert exc.value.column_number == 3


class TestIndentedMarkdown:

    def test_bad_indentation_position(self, parse_plain):
        text = "<A>\n     line one\n   line two\n</A>"

        with pytest.raises(StructuralParseError, match="at least 5 characters, found 3") as exc:
            parse_plain(text, indented_markdown=True)
        assert exc.value.kind == ErrorKind.BAD_INDENTATION
        assert (exc.value.line_number, exc.value.column_number) == (3, 4)

    def test_dedent_removes_base_indent(self, parse_plain):
        (tag,) = parse_plain("<A>\n    # Title\n      nested\n\n    text\n  </A>", indented_markdown=True)

        assert tag.children == (Text(("\n# Title\n  nested\n\ntext\n",)),)

    def test_indent_is_kept_when_disabled(self, parse_plain):
        (tag,) = parse_plain("<A>\n    # Title\n</A>")

        assert tag.children == (Text(("\n    # Title\n",)),)

    def test_indented_heading_with_markdown_it(self):
        options = ParserOptions(markdown_engine=markdown_it_engine(), indented_markdown=True)
        (tag,) = DocumentParser(options).parse("<A>\n    # Title\n</A>")

        assert tag.children == (Text(("<h1>Title</h1>",)),)

    def test_indented_code_without_dedent(self):
        options = ParserOptions(markdown_engine=markdown_it_engine())
        (tag,) = DocumentParser(options).parse("<A>\n    # Title\n</A>")

        assert tag.children[0].blocks[0].startswith("<pre><code>")


class TestMarkdownDelegation:

    def test_interpolation_survives_markdown(self):
        options = ParserOptions(markdown_engine=markdown_it_engine())
        (node,) = DocumentParser(options).parse(
            "# heading1\nText after and interpolation {x.y} heading1\n"
        )

        assert node.blocks == (
            "<h1>heading1</h1>\n<p>Text after and interpolation ",
            Interpolation(Accessor("x.y"), SourceLocation(2, 30)),
            " heading1</p>",
        )

    def test_engine_called_once_per_run(self):
        calls = []

        def engine(text, render):
            calls.append(text)
            render(text)

        options = ParserOptions(markdown_engine=engine, interpolation_point="@@")
        DocumentParser(options).parse("a {x} b {y} c<T/>tail")

        assert calls == ["a @@ b @@ c", "tail"]

    def test_engine_output_collision(self):
        def doubling(text, render):
            render(text + text)

        options = ParserOptions(markdown_engine=doubling)
        with pytest.raises(StructuralParseError, match="expected 1") as exc:
            DocumentParser(options).parse("a {x}")
        assert exc.value.kind == ErrorKind.PLACEHOLDER_COLLISION


class TestAstHelpers:

    def test_format_ast_tree(self, parse_plain):
        tree = format_ast_tree(parse_plain('<Box title="t">\nHi {name}\n</Box>'))

        assert tree.splitlines() == [
            'Tag<Box title="t"> @1:1',
            "  Text('\\nHi ', {name}, '\\n')",
        ]

    def test_parser_is_reusable(self):
        parser = DocumentParser(ParserOptions(markdown_engine=identity_engine))

        assert parser.parse("one") == (Text(("one",)),)
        assert parser.parse("two") == (Text(("two",)),)


class TestLargeInput:

    def test_ten_thousand_tags_parse_in_linear_time(self, parse_plain):
        count = 10_000
        text = "".join(f"line {i} <T n={{n}}/>\n" for i in range(count))

        started = time.perf_counter()
        ast = parse_plain(text)
        elapsed = time.perf_counter() - started

        tags = [node for node in ast if isinstance(node, Tag)]
        assert len(tags) == count
        assert tags[-1].location == SourceLocation(count, len(f"line {count - 1} ") + 1)
        assert tags[-1].attrs["n"].location == SourceLocation(count, len(f"line {count - 1} <T n=") + 1)
        assert elapsed < 5.0
