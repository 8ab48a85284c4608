"""Tests for pagination and list-window math."""

from __future__ import annotations

import unittest

from ghr.render.viewport import (
    SelectorEntryRows,
    centered_window_start,
    comment_list_window,
    fill_selector_rows,
    indicator_text,
    max_offset,
    page_step,
    paginate_lines,
    selector_window,
)
from ghr.text.spans import InlineSpan, WrappedBodyLine


def _row(text: str) -> WrappedBodyLine:
    return WrappedBodyLine(spans=(InlineSpan(text),))


class PaginateLinesTests(unittest.TestCase):
    def test_overflow_reserves_a_slot_for_the_indicator(self) -> None:
        page = paginate_lines(list(range(10)), 0, 4)

        self.assertEqual(page.lines, [0, 1, 2])
        self.assertEqual(page.hidden, 7)
        self.assertEqual(page.pad, 0)
        self.assertTrue(page.has_indicator)

    def test_tail_page_is_padded(self) -> None:
        page = paginate_lines(list(range(10)), 8, 4)

        self.assertEqual(page.lines, [8, 9])
        self.assertEqual(page.hidden, 0)
        self.assertEqual(page.pad, 2)

    def test_start_is_clamped(self) -> None:
        page = paginate_lines(list(range(10)), 50, 4)

        self.assertEqual(page.start, 9)
        self.assertEqual(page.lines, [9])
        self.assertEqual(page.pad, 3)
        self.assertEqual(paginate_lines(list(range(3)), -5, 4).start, 0)

    def test_unbounded_page_shows_everything_after_start(self) -> None:
        page = paginate_lines(list(range(10)), 3)

        self.assertEqual(page.lines, list(range(3, 10)))
        self.assertEqual((page.hidden, page.pad), (0, 0))

    def test_empty_input_is_all_padding(self) -> None:
        page = paginate_lines([], 0, 5)

        self.assertEqual((page.lines, page.hidden, page.pad), ([], 0, 5))

    def test_shown_plus_indicator_plus_pad_fills_the_budget(self) -> None:
        for total in range(0, 12):
            for start in range(0, 12):
                page = paginate_lines(list(range(total)), start, 5)
                used = len(page.lines) + (1 if page.has_indicator else 0) + page.pad
                self.assertEqual(used, 5, (total, start))

    def test_indicator_text(self) -> None:
        self.assertEqual(indicator_text(1), "... (1 more line)")
        self.assertEqual(indicator_text(3, 2), "  ... (3 more lines)")


class WindowMathTests(unittest.TestCase):
    def test_centered_window_start(self) -> None:
        self.assertEqual(centered_window_start(5, 4, 10), 3)
        self.assertEqual(centered_window_start(0, 4, 10), 0)
        self.assertEqual(centered_window_start(9, 4, 10), 6)
        self.assertEqual(centered_window_start(2, 8, 3), 0)

    def test_window_sizes(self) -> None:
        self.assertEqual(selector_window(10, 20), 6)
        self.assertEqual(selector_window(10, 3), 3)
        self.assertEqual(selector_window(0, 0), 2)
        self.assertEqual(comment_list_window(5, 3), 3)
        self.assertEqual(comment_list_window(5, 0), 1)

    def test_page_step_and_max_offset(self) -> None:
        self.assertEqual(page_step(1), 1)
        self.assertEqual(page_step(5), 4)
        self.assertEqual(max_offset(10, 4), 6)
        self.assertEqual(max_offset(3, 4), 0)

    def test_fill_selector_rows_stops_at_budget(self) -> None:
        entries = [
            SelectorEntryRows(0, True, [_row("a1"), _row("a2")], [_row("a-sub")]),
            SelectorEntryRows(1, False, [_row("b1"), _row("b2")], [_row("b-sub")]),
            SelectorEntryRows(2, False, [_row("c1")], [_row("c-sub")]),
        ]

        filled = fill_selector_rows(entries, 4)

        self.assertEqual(len(filled), 2)
        self.assertEqual(len(filled[0].headline) + len(filled[0].subline), 3)
        self.assertEqual([row.plain_text for row in filled[1].headline], ["b1"])
        self.assertEqual(filled[1].subline, [])


if __name__ == "__main__":
    unittest.main()
