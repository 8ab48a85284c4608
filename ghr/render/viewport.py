"""Viewport and pagination math for panels.

Everything here is a pure function of counts, budgets, and offsets. Offsets
are clamped, never rejected, so stale cursor state can never index past the
content it refers to.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from ..text.spans import WrappedBodyLine

T = TypeVar("T")


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def max_offset(total: int, visible: int) -> int:
    """Return the largest scroll offset that still fills ``visible`` rows."""
    return max(0, total - max(1, visible))


@dataclass(frozen=True)
class BodyPage(Generic[T]):
    """Visible slice of a paginated sequence.

    ``hidden`` counts every item after the shown slice; when it is positive a
    ``... (N more lines)`` indicator occupies one budget slot. ``pad`` is the
    number of blank rows needed to fill the budget exactly.
    """

    lines: list[T]
    start: int
    hidden: int
    pad: int

    @property
    def has_indicator(self) -> bool:
        return self.hidden > 0


def paginate_lines(lines: Sequence[T], start: int, max_lines: int | None = None) -> BodyPage[T]:
    total = len(lines)
    safe_start = clamp(start, 0, max(0, total - 1))

    if max_lines is None:
        shown = list(lines[safe_start:])
        return BodyPage(lines=shown, start=safe_start, hidden=total - safe_start - len(shown), pad=0)

    budget = max(1, max_lines)
    overflow = total - safe_start > budget
    content_limit = budget - 1 if overflow else budget
    shown = list(lines[safe_start : safe_start + content_limit])
    hidden = max(0, total - safe_start - len(shown))
    pad = budget - len(shown) - (1 if hidden > 0 else 0)
    return BodyPage(lines=shown, start=safe_start, hidden=hidden, pad=max(0, pad))


def indicator_text(hidden: int, indent: int = 0) -> str:
    noun = "line" if hidden == 1 else "lines"
    return f"{' ' * max(0, indent)}... ({hidden} more {noun})"


def centered_window_start(active: int, window: int, total: int) -> int:
    """Return the first index of a ``window``-sized slice centered on ``active``."""
    return clamp(active - window // 2, 0, max(0, total - window))


def selector_window(content_budget: int, item_count: int) -> int:
    """Number of PR entries shown at once; each needs a headline and subline."""
    return clamp(max(2, content_budget // 2 + 1), 2, max(2, item_count))


def comment_list_window(content_budget: int, item_count: int) -> int:
    return clamp(content_budget, 1, max(1, item_count))


def page_step(window: int) -> int:
    return max(1, window - 1)


@dataclass(frozen=True)
class SelectorEntryRows:
    """Wrapped rows for one selector entry after budget trimming."""

    index: int
    selected: bool
    headline: list[WrappedBodyLine]
    subline: list[WrappedBodyLine]


def fill_selector_rows(entries: Sequence[SelectorEntryRows], budget: int) -> list[SelectorEntryRows]:
    """Keep headline then subline rows of each entry until ``budget`` runs out."""
    out: list[SelectorEntryRows] = []
    remaining = budget
    for entry in entries:
        if remaining <= 0:
            break
        headline = entry.headline[:remaining]
        remaining -= len(headline)
        subline = entry.subline[:remaining] if remaining > 0 else []
        remaining -= len(subline)
        if not headline and not subline:
            break
        out.append(SelectorEntryRows(entry.index, entry.selected, headline, subline))
    return out


__all__ = [
    "clamp",
    "max_offset",
    "BodyPage",
    "paginate_lines",
    "indicator_text",
    "centered_window_start",
    "selector_window",
    "comment_list_window",
    "page_step",
    "SelectorEntryRows",
    "fill_selector_rows",
]
