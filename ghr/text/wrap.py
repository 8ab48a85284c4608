"""Word wrapping for styled markdown lines.

Wrapping works on character counts: the wrap width is the column budget for
one physical row, floored at ``MIN_WRAP_WIDTH`` so narrow terminals stay usable.
"""

from __future__ import annotations

import math
import re

from .markdown import body_to_lines
from .spans import InlineSpan, MarkdownLine, WrappedBodyLine, push_wrapped_span

MIN_WRAP_WIDTH = 24

_LINE_SPLIT_RE = re.compile(r"\r?\n")


def count_leading_spaces(text: str) -> int:
    return len(text) - len(text.lstrip(" "))


def wrap_markdown_line(line: MarkdownLine, indent: int, wrap_width: int) -> list[WrappedBodyLine]:
    """Wrap one logical line into physical rows no wider than the wrap width.

    The first row starts with ``indent`` spaces and the line prefix.
    Continuation rows are indented to line up under the text after the
    prefix (or under existing leading spaces), never using the full width.
    """
    safe_width = max(MIN_WRAP_WIDTH, wrap_width)
    first_prefix = " " * max(0, indent) + line.prefix
    line_leading = count_leading_spaces(line.prefix + line.plain_text)
    continuation_base = line_leading if line_leading > 0 else len(line.prefix)
    continuation_prefix = (" " * max(0, indent + continuation_base))[: max(0, safe_width - 1)]

    output: list[WrappedBodyLine] = []
    current: list[InlineSpan] = []
    current_width = 0

    def start_new_row() -> None:
        nonlocal current, current_width
        output.append(WrappedBodyLine(spans=tuple(current), color=line.color, dim=line.dim))
        current = []
        current_width = 0
        if continuation_prefix:
            push_wrapped_span(current, InlineSpan(continuation_prefix))
            current_width = len(continuation_prefix)

    for span in (InlineSpan(first_prefix), *line.spans):
        remaining = span.text
        while remaining:
            room = safe_width - current_width
            if room <= 0:
                start_new_row()
                room = safe_width - current_width

            if len(remaining) <= room:
                push_wrapped_span(current, span.with_text(remaining))
                current_width += len(remaining)
                remaining = ""
                continue

            split_at = remaining[:room].rfind(" ")
            if split_at <= 0:
                split_at = room
            else:
                split_at += 1

            chunk = remaining[:split_at]
            push_wrapped_span(current, span.with_text(chunk))
            current_width += len(chunk)
            remaining = remaining[split_at:]
            if remaining:
                start_new_row()

    output.append(WrappedBodyLine(spans=tuple(current), color=line.color, dim=line.dim))
    return output


def wrap_lines(lines, indent: int, wrap_width: int) -> list[WrappedBodyLine]:
    out: list[WrappedBodyLine] = []
    for line in lines:
        out.extend(wrap_markdown_line(line, indent, wrap_width))
    return out


def wrap_body(
    raw: str | None,
    indent: int,
    wrap_width: int,
    commit_base_url: str | None = None,
) -> list[WrappedBodyLine]:
    """Run a raw comment body through normalize, parse, and wrap."""
    return wrap_lines(body_to_lines(raw, commit_base_url), indent, wrap_width)


def wrap_plain_text(text: str, wrap_width: int) -> list[WrappedBodyLine]:
    """Wrap unstyled text as a single prefix-less markdown line."""
    return wrap_markdown_line(MarkdownLine(prefix="", spans=(InlineSpan(text),)), 0, wrap_width)


def count_wrapped_markdown_lines(
    raw: str | None,
    indent: int,
    wrap_width: int,
    commit_base_url: str | None = None,
) -> int:
    return len(wrap_body(raw, indent, wrap_width, commit_base_url))


def count_wrapped_plain_lines(text: str, wrap_width: int) -> int:
    """Count rows a plain string occupies when hard-wrapped at ``wrap_width``."""
    safe_width = max(1, wrap_width)
    total = 0
    for line in _LINE_SPLIT_RE.split(text or ""):
        if not line:
            total += 1
            continue
        total += max(1, math.ceil(len(line) / safe_width))
    return total


def hard_wrap_plain_text(text: str, wrap_width: int) -> list[str]:
    """Split ``text`` into rows of at most ``wrap_width`` characters.

    Row counts always agree with ``count_wrapped_plain_lines``.
    """
    safe_width = max(1, wrap_width)
    rows: list[str] = []
    for line in _LINE_SPLIT_RE.split(text or ""):
        if not line:
            rows.append("")
            continue
        rows.extend(line[start : start + safe_width] for start in range(0, len(line), safe_width))
    return rows


__all__ = [
    "MIN_WRAP_WIDTH",
    "count_leading_spaces",
    "wrap_markdown_line",
    "wrap_lines",
    "wrap_body",
    "wrap_plain_text",
    "count_wrapped_markdown_lines",
    "count_wrapped_plain_lines",
    "hard_wrap_plain_text",
]
