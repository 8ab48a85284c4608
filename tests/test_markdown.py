"""Tests for the markdown line parser and inline span tokenizer."""

from __future__ import annotations

import unittest

from ghr.text.markdown import body_to_lines, markdown_to_lines, parse_inline_spans
from ghr.text.spans import InlineSpan


class InlineSpanTests(unittest.TestCase):
    def test_code_link_and_commit_hash_spans(self) -> None:
        spans = parse_inline_spans("Fixed in `abcd123`, see [PR](http://x/y).", "http://h")
        self.assertEqual(
            spans,
            [
                InlineSpan("Fixed in "),
                InlineSpan("abcd123", color="blue", underline=True, link="http://h/commit/abcd123"),
                InlineSpan(", see "),
                InlineSpan("PR", color="blue", underline=True, link="http://x/y"),
                InlineSpan(" (http://x/y)", dim=True),
                InlineSpan("."),
            ],
        )

    def test_code_span_without_commit_base_is_yellow(self) -> None:
        self.assertEqual(parse_inline_spans("`abcd123`"), [InlineSpan("abcd123", color="yellow")])

    def test_bold_and_italics(self) -> None:
        self.assertEqual(
            parse_inline_spans("**b** *i* _u_"),
            [
                InlineSpan("b", bold=True),
                InlineSpan(" "),
                InlineSpan("i", italic=True),
                InlineSpan(" "),
                InlineSpan("u", italic=True),
            ],
        )

    def test_commit_heuristic_needs_a_hex_letter_and_word_boundary(self) -> None:
        base = "https://github.com/o/r"
        self.assertEqual(parse_inline_spans("build 1234567 ok", base), [InlineSpan("build 1234567 ok")])
        self.assertEqual(parse_inline_spans("xabcd1234", base), [InlineSpan("xabcd1234")])
        spans = parse_inline_spans("see DEADBEEF1", base)
        self.assertEqual(spans[1], InlineSpan("DEADBEEF1", color="blue", underline=True, link=f"{base}/commit/DEADBEEF1"))

    def test_commit_base_trailing_slash_is_stripped(self) -> None:
        spans = parse_inline_spans("abcdef0", "http://h/")
        self.assertEqual(spans[0].link, "http://h/commit/abcdef0")


class MarkdownLineTests(unittest.TestCase):
    def test_block_line_kinds(self) -> None:
        lines = markdown_to_lines("## Head\n> quoted\n* item\n12. step\n\nplain")
        self.assertEqual(lines[0].color, "cyan")
        self.assertEqual(lines[0].plain_text, "Head")
        self.assertEqual((lines[1].prefix, lines[1].plain_text, lines[1].dim), ("> ", "quoted", True))
        self.assertEqual((lines[2].prefix, lines[2].plain_text), ("• ", "item"))
        self.assertEqual((lines[3].prefix, lines[3].plain_text), ("12. ", "step"))
        self.assertEqual(lines[4].spans, (InlineSpan(""),))
        self.assertEqual((lines[5].prefix, lines[5].plain_text), ("", "plain"))

    def test_fenced_lines_are_verbatim_and_markers_dropped(self) -> None:
        lines = markdown_to_lines("```py\ncode *x* abcdef0\n```\nafter", "http://h")
        self.assertEqual(len(lines), 2)
        self.assertEqual(lines[0].spans, (InlineSpan("code *x* abcdef0"),))
        self.assertEqual(lines[0].color, "yellow")
        self.assertIsNone(lines[1].color)

    def test_body_to_lines_normalizes_first(self) -> None:
        lines = body_to_lines("<b>hi</b><br>there")
        self.assertEqual([line.plain_text for line in lines], ["hi", "there"])
        self.assertTrue(lines[0].spans[0].bold)

    def test_missing_body_renders_placeholder(self) -> None:
        self.assertEqual([line.plain_text for line in body_to_lines(None)], ["(no body)"])


if __name__ == "__main__":
    unittest.main()
