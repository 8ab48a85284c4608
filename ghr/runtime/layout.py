"""Layout policy and geometry for the selector and viewer screens.

Layouts are pure functions of the current terminal dimensions and the text
that will occupy the header and help rows. The event loop recomputes them on
every render so resizes are just another input: navigation state is then
re-clamped against the fresh bounds.

Screen structure (1-based terminal rows)::

    header block        header_line_count rows
    blank               1 row
    list panel          list_panel_height rows (border, title, content, border)
    detail panel        detail_panel_height rows (viewer only)
    blank + help        1 + help_line_count rows
"""

from __future__ import annotations

import shutil
from collections.abc import Sequence
from dataclasses import dataclass

from ..render.viewport import clamp, comment_list_window, page_step, selector_window
from ..text.wrap import MIN_WRAP_WIDTH, count_wrapped_plain_lines

DEFAULT_ROWS = 24
DEFAULT_COLUMNS = 80
MIN_APP_WRAP_WIDTH = 16
PANEL_CHROME_ROWS = 2
LIST_PANEL_SHARE = 0.35


@dataclass(frozen=True)
class Dimensions:
    rows: int
    columns: int

    @classmethod
    def current(cls) -> Dimensions:
        size = shutil.get_terminal_size((DEFAULT_COLUMNS, DEFAULT_ROWS))
        return cls(rows=size.lines or DEFAULT_ROWS, columns=size.columns or DEFAULT_COLUMNS)


def app_wrap_width(columns: int) -> int:
    return max(MIN_APP_WRAP_WIDTH, columns - 2)


def count_text_rows(texts: Sequence[str], wrap_width: int) -> int:
    return sum(count_wrapped_plain_lines(text, wrap_width) for text in texts)


@dataclass(frozen=True)
class SelectorLayout:
    dimensions: Dimensions
    app_wrap_width: int
    list_wrap_width: int
    header_line_count: int
    help_line_count: int
    list_panel_height: int
    list_content_budget: int
    list_window: int
    list_page_step: int
    list_top_row: int


def compute_selector_layout(
    dimensions: Dimensions,
    header_texts: Sequence[str],
    help_text: str,
    item_count: int,
) -> SelectorLayout:
    app_width = app_wrap_width(dimensions.columns)
    header_lines = count_text_rows(header_texts, app_width)
    help_lines = count_wrapped_plain_lines(help_text, app_width)
    list_height = max(8, dimensions.rows - (header_lines + help_lines + 5))
    budget = max(1, list_height - 3)
    window = selector_window(budget, item_count)
    return SelectorLayout(
        dimensions=dimensions,
        app_wrap_width=app_width,
        list_wrap_width=max(MIN_WRAP_WIDTH, dimensions.columns - 8),
        header_line_count=header_lines,
        help_line_count=help_lines,
        list_panel_height=list_height,
        list_content_budget=budget,
        list_window=window,
        list_page_step=page_step(window),
        list_top_row=header_lines + 2,
    )


@dataclass(frozen=True)
class ViewerLayout:
    dimensions: Dimensions
    app_wrap_width: int
    list_wrap_width: int
    detail_wrap_width: int
    header_line_count: int
    help_line_count: int
    list_panel_height: int
    detail_panel_height: int
    list_content_budget: int
    list_window: int
    list_page_step: int
    detail_body_lines: int
    detail_page_step: int
    list_top_row: int
    detail_top_row: int


def compute_viewer_layout(
    dimensions: Dimensions,
    header_texts: Sequence[str],
    help_text: str,
    row_count: int,
    detail_header_texts: Sequence[str],
) -> ViewerLayout:
    """Derive viewer geometry.

    ``detail_header_texts`` are the rows printed above the comment body in
    the detail panel (title, location, URL, or the empty-state message).
    """
    app_width = app_wrap_width(dimensions.columns)
    detail_width = max(MIN_WRAP_WIDTH, dimensions.columns - 8)
    header_lines = count_text_rows(header_texts, app_width)
    help_lines = count_wrapped_plain_lines(help_text, app_width)

    available = max(9, dimensions.rows - (header_lines + help_lines + 4))
    list_height = clamp(int(available * LIST_PANEL_SHARE), 5, max(5, available - 6))
    detail_height = max(6, available - list_height)
    detail_inner = max(1, detail_height - PANEL_CHROME_ROWS)

    budget = max(1, list_height - 3)
    window = comment_list_window(budget, row_count)

    # Panel title plus whatever metadata rows precede the body.
    above_body = 1 + count_text_rows(detail_header_texts, detail_width)
    body_lines = max(1, detail_inner - above_body)

    list_top = header_lines + 2
    return ViewerLayout(
        dimensions=dimensions,
        app_wrap_width=app_width,
        list_wrap_width=max(MIN_WRAP_WIDTH, dimensions.columns - 10),
        detail_wrap_width=detail_width,
        header_line_count=header_lines,
        help_line_count=help_lines,
        list_panel_height=list_height,
        detail_panel_height=detail_height,
        list_content_budget=budget,
        list_window=window,
        list_page_step=page_step(window),
        detail_body_lines=body_lines,
        detail_page_step=page_step(body_lines),
        list_top_row=list_top,
        detail_top_row=list_top + list_height,
    )


__all__ = [
    "DEFAULT_ROWS",
    "DEFAULT_COLUMNS",
    "Dimensions",
    "app_wrap_width",
    "count_text_rows",
    "SelectorLayout",
    "compute_selector_layout",
    "ViewerLayout",
    "compute_viewer_layout",
]
