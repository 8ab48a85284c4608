"""Frame composition for the selector and viewer screens.

A frame is a list of rows, each row a list of styled spans no wider than the
terminal. Header and help text are hard-wrapped so their row counts match
the layout exactly. Panels are round-bordered boxes whose inner rows are
clipped and padded to the panel height.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field, replace

from ..comments import UnifiedCommentRow, author_color
from ..models import LoadedPrComments, PrListItem
from ..runtime.layout import SelectorLayout, ViewerLayout
from ..text.normalize import truncate_text
from ..text.spans import (
    InlineSpan,
    SpanColor,
    WrappedBodyLine,
    merge_spans,
    span_text_length,
    trim_styled_spans,
)
from ..text.wrap import hard_wrap_plain_text, wrap_plain_text
from ..timefmt import fmt_interval, fmt_relative_or_absolute, fmt_time_of_day
from .ansi import pad_spans, spans_to_ansi
from .theme import UITheme
from .viewport import (
    SelectorEntryRows,
    centered_window_start,
    fill_selector_rows,
    indicator_text,
    paginate_lines,
)

FrameRow = list[InlineSpan]

CLEAR_SCREEN = "\033[H\033[J"
NON_INTERACTIVE_HELP = "Non-interactive terminal detected: rendered once and exiting."
VIEWER_HELP = "Keys: j/k move, Tab focus, b PR list, m mouse capture, q quit"
SELECTOR_HELP = "Keys: up/down or j/k move, Enter open PR, r refresh list, q quit"
NO_COMMENTS = "No comments found."
NO_DETAIL = "No detail to show."
NO_PRS = "No open pull requests found. Press r to refresh, or q to quit."
FOCUS_SUFFIX = "  [focus]"


@dataclass(frozen=True)
class HeaderLine:
    """One logical line of the header block before hard wrapping."""

    text: str
    color: SpanColor | None = None
    dim: bool = False


def header_texts(lines: Sequence[HeaderLine]) -> list[str]:
    return [line.text for line in lines]


def viewer_header_lines(
    data: LoadedPrComments,
    *,
    open_pr_count: int,
    mouse_capture: bool,
    refresh_seconds: float,
    last_updated: float | None,
    refreshing: bool,
    refresh_error: str | None,
) -> list[HeaderLine]:
    refreshing_suffix = " | refreshing..." if refreshing else ""
    lines = [
        HeaderLine(f"ghr  {data.repo.name_with_owner}  #{data.pr.number}  {data.pr.title}", color="green"),
        HeaderLine(f"PR: {data.pr.url}", dim=True),
        HeaderLine(f"Inference: {data.pr_inference}", dim=True),
        HeaderLine(
            f"Open PRs: {open_pr_count} | mouse capture {'on' if mouse_capture else 'off'}",
            dim=True,
        ),
        HeaderLine(
            f"Auto refresh: every {fmt_interval(refresh_seconds)} | "
            f"last update {fmt_time_of_day(last_updated)}{refreshing_suffix}",
            color="yellow" if refresh_error else None,
            dim=not refresh_error,
        ),
    ]
    if refresh_error:
        lines.append(HeaderLine(f"Last refresh failed: {refresh_error}", color="red"))
    return lines


def selector_header_lines(
    repo_name: str,
    *,
    pr_count: int,
    refreshing: bool,
    error: str | None,
) -> list[HeaderLine]:
    lines = [
        HeaderLine(f"ghr  {repo_name}", color="green"),
        HeaderLine(f"Open PRs: {pr_count}{' | refreshing...' if refreshing else ''}", dim=True),
    ]
    if error:
        lines.append(HeaderLine(error, color="red"))
    return lines


def viewer_help_text(interactive: bool) -> str:
    return VIEWER_HELP if interactive else NON_INTERACTIVE_HELP


def selector_help_text(interactive: bool) -> str:
    return SELECTOR_HELP if interactive else NON_INTERACTIVE_HELP


def detail_header_lines(row: UnifiedCommentRow | None, now: float | None = None) -> list[HeaderLine]:
    """Rows shown above the comment body in the detail panel."""
    if row is None:
        return [HeaderLine(NO_DETAIL, dim=True)]
    kind = "Discussion" if row.kind == "discussion" else "Inline"
    return [
        HeaderLine(f"{kind}  {row.author}  {fmt_relative_or_absolute(row.created_at, now)}"),
        HeaderLine(f"Location: {row.location}", dim=True),
        HeaderLine(row.html_url, dim=True),
    ]


def format_comment_list_line(
    *,
    selected: bool,
    depth: int,
    author: str,
    preview: str,
    when: str,
    width: int,
) -> list[InlineSpan]:
    """Build one comment-list row: marker, indent, author, preview, right-aligned time."""
    safe_width = max(8, width)
    safe_when = truncate_text(when, max(2, safe_width - 2))
    max_left = max(1, safe_width - len(safe_when) - 1)
    left = [
        InlineSpan("> " if selected else "  ", color="yellow" if selected else "gray"),
        InlineSpan(" " * (max(0, depth) * 2)),
        InlineSpan(author, color=author_color(author), bold=True),
        InlineSpan(" "),
        InlineSpan(preview, dim=depth > 0),
    ]
    trimmed = trim_styled_spans(left, max_left)
    gap = max(1, safe_width - span_text_length(trimmed) - len(safe_when))
    return merge_spans([*trimmed, InlineSpan(" " * gap), InlineSpan(safe_when, color="gray", dim=True)])


def _styled_text_rows(line: HeaderLine, wrap_width: int) -> list[FrameRow]:
    return [
        [InlineSpan(text, color=line.color, dim=line.dim)] if text else []
        for text in hard_wrap_plain_text(line.text, wrap_width)
    ]


def _block_rows(lines: Sequence[HeaderLine], wrap_width: int) -> list[FrameRow]:
    out: list[FrameRow] = []
    for line in lines:
        out.extend(_styled_text_rows(line, wrap_width))
    return out


def apply_line_style(line: WrappedBodyLine) -> FrameRow:
    """Push line-level color and dim down onto spans that do not set their own."""
    if line.color is None and not line.dim:
        return list(line.spans)
    return merge_spans(
        replace(span, color=span.color or line.color, dim=span.dim or line.dim)
        for span in line.spans
    )


def _app_row(spans: FrameRow, columns: int) -> FrameRow:
    return [InlineSpan(" "), *pad_spans(spans, max(1, columns - 2))]


def _panel(title: FrameRow, content: Sequence[FrameRow], height: int, columns: int) -> list[FrameRow]:
    inner_width = max(1, columns - 6)
    rule = "─" * max(0, columns - 4)
    inner_rows = max(0, height - 2)
    body = [title, *content][:inner_rows]
    body += [[] for _ in range(inner_rows - len(body))]

    rows: list[FrameRow] = [[InlineSpan(f" ╭{rule}╮")]]
    for spans in body:
        rows.append([InlineSpan(" │ "), *pad_spans(spans, inner_width), InlineSpan(" │")])
    rows.append([InlineSpan(f" ╰{rule}╯")])
    return rows


@dataclass
class ViewerRenderContext:
    header: list[HeaderLine]
    help_text: str
    rows: list[UnifiedCommentRow]
    layout: ViewerLayout
    focus: str
    active_index: int
    detail_header: list[HeaderLine]
    body_lines: list[WrappedBodyLine] = field(default_factory=list)
    detail_offset: int = 0
    now: float | None = None


def _comment_list_rows(context: ViewerRenderContext) -> list[FrameRow]:
    rows = context.rows
    if not rows:
        return [[InlineSpan(NO_COMMENTS, dim=True)]]
    layout = context.layout
    window = layout.list_window
    start = centered_window_start(context.active_index, window, len(rows))
    out: list[FrameRow] = []
    for absolute in range(start, min(len(rows), start + window)):
        row = rows[absolute]
        out.append(
            format_comment_list_line(
                selected=absolute == context.active_index,
                depth=row.depth,
                author=row.author,
                preview=row.subline,
                when=fmt_relative_or_absolute(row.created_at, context.now),
                width=layout.list_wrap_width,
            )
        )
    return out


def _detail_rows(context: ViewerRenderContext) -> list[FrameRow]:
    layout = context.layout
    out = _block_rows(context.detail_header, layout.detail_wrap_width)
    if not context.rows:
        return out
    page = paginate_lines(context.body_lines, context.detail_offset, layout.detail_body_lines)
    out.extend(apply_line_style(line) for line in page.lines)
    if page.has_indicator:
        out.append([InlineSpan(indicator_text(page.hidden), dim=True)])
    out.extend([] for _ in range(page.pad))
    return out


def build_viewer_frame(context: ViewerRenderContext) -> list[FrameRow]:
    layout = context.layout
    columns = layout.dimensions.columns
    list_focused = context.focus == "list"

    frame = [_app_row(row, columns) for row in _block_rows(context.header, layout.app_wrap_width)]
    frame.append([])

    list_title = f"Comments ({len(context.rows)}){FOCUS_SUFFIX if list_focused else ''}"
    frame.extend(
        _panel(
            [InlineSpan(list_title, color="yellow" if list_focused else "cyan")],
            _comment_list_rows(context),
            layout.list_panel_height,
            columns,
        )
    )
    detail_title = f"Details{'' if list_focused else FOCUS_SUFFIX}"
    frame.extend(
        _panel(
            [InlineSpan(detail_title, color="magenta" if list_focused else "yellow")],
            _detail_rows(context),
            layout.detail_panel_height,
            columns,
        )
    )

    frame.append([])
    help_line = HeaderLine(context.help_text, dim=True)
    frame.extend(_app_row(row, columns) for row in _styled_text_rows(help_line, layout.app_wrap_width))
    return frame


@dataclass
class SelectorRenderContext:
    header: list[HeaderLine]
    help_text: str
    prs: list[PrListItem]
    layout: SelectorLayout
    active_index: int
    now: float | None = None


def selector_entries(context: SelectorRenderContext) -> list[SelectorEntryRows]:
    """Wrap the windowed PR entries, then trim them to the panel budget."""
    prs = context.prs
    if not prs:
        return []
    layout = context.layout
    window = layout.list_window
    start = centered_window_start(context.active_index, window, len(prs))
    entries: list[SelectorEntryRows] = []
    for absolute in range(start, min(len(prs), start + window)):
        pr = prs[absolute]
        selected = absolute == context.active_index
        headline = f"{'>' if selected else ' '} [{absolute + 1}] #{pr.number} {pr.title}"
        subline = (
            f"    {pr.head_ref_name} -> {pr.base_ref_name}  "
            f"updated {fmt_relative_or_absolute(pr.updated_at, context.now)}"
        )
        entries.append(
            SelectorEntryRows(
                index=absolute,
                selected=selected,
                headline=wrap_plain_text(headline, layout.list_wrap_width),
                subline=wrap_plain_text(subline, layout.list_wrap_width),
            )
        )
    return fill_selector_rows(entries, layout.list_content_budget)


def _selector_list_rows(context: SelectorRenderContext) -> list[FrameRow]:
    if not context.prs:
        return [[InlineSpan(NO_PRS, dim=True)]]
    out: list[FrameRow] = []
    for entry in selector_entries(context):
        color: SpanColor = "yellow" if entry.selected else "white"
        out.extend([replace(span, color=color) for span in line.spans] for line in entry.headline)
        out.extend([replace(span, dim=True) for span in line.spans] for line in entry.subline)
    return out


def build_selector_frame(context: SelectorRenderContext) -> list[FrameRow]:
    layout = context.layout
    columns = layout.dimensions.columns
    frame = [_app_row(row, columns) for row in _block_rows(context.header, layout.app_wrap_width)]
    frame.append([])
    frame.extend(
        _panel(
            [InlineSpan("Select Pull Request", color="cyan")],
            _selector_list_rows(context),
            layout.list_panel_height,
            columns,
        )
    )
    frame.append([])
    help_line = HeaderLine(context.help_text, dim=True)
    frame.extend(_app_row(row, columns) for row in _styled_text_rows(help_line, layout.app_wrap_width))
    return frame


def frame_to_ansi(frame: Sequence[FrameRow], theme: UITheme) -> str:
    """Serialize a frame as one screen-clearing ANSI payload."""
    return CLEAR_SCREEN + "\r\n".join(spans_to_ansi(row, theme) for row in frame)


def frame_to_text(frame: Sequence[FrameRow], theme: UITheme) -> str:
    """Line-oriented rendition for one-shot output, without cursor control."""
    return "".join(spans_to_ansi(row, theme).rstrip(" ") + "\n" for row in frame)


def write_frame(frame: Sequence[FrameRow], theme: UITheme, fd: int | None = None) -> None:
    target = sys.stdout.fileno() if fd is None else fd
    os.write(target, frame_to_ansi(frame, theme).encode("utf-8", errors="replace"))


__all__ = [
    "FrameRow",
    "HeaderLine",
    "NON_INTERACTIVE_HELP",
    "VIEWER_HELP",
    "SELECTOR_HELP",
    "header_texts",
    "viewer_header_lines",
    "selector_header_lines",
    "viewer_help_text",
    "selector_help_text",
    "detail_header_lines",
    "format_comment_list_line",
    "apply_line_style",
    "ViewerRenderContext",
    "build_viewer_frame",
    "SelectorRenderContext",
    "selector_entries",
    "build_selector_frame",
    "frame_to_ansi",
    "frame_to_text",
    "write_frame",
]
