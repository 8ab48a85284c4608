"""Styled text records shared by the parser, wrapper, and renderers.

Spans carry a fixed set of style flags plus one color from a closed palette.
Everything here is immutable; merging produces new span instances.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

SpanColor = Literal["blue", "yellow", "cyan", "gray", "white", "magenta", "green", "red"]
LineColor = Literal["yellow", "cyan", "gray"]


@dataclass(frozen=True)
class InlineSpan:
    """A run of text with one uniform style."""

    text: str
    bold: bool = False
    italic: bool = False
    underline: bool = False
    dim: bool = False
    color: SpanColor | None = None
    link: str | None = None

    def style_key(self) -> tuple[bool, bool, bool, bool, str | None, str | None]:
        """Return the attributes that decide whether two spans may merge."""
        return (self.bold, self.italic, self.underline, self.dim, self.color, self.link)

    def with_text(self, text: str) -> InlineSpan:
        return replace(self, text=text)


@dataclass(frozen=True)
class MarkdownLine:
    """One logical source line: literal prefix plus inline spans."""

    prefix: str
    spans: tuple[InlineSpan, ...]
    color: LineColor | None = None
    dim: bool = False

    @property
    def plain_text(self) -> str:
        return "".join(span.text for span in self.spans)


@dataclass(frozen=True)
class WrappedBodyLine:
    """One physical terminal row produced by the wrapper."""

    spans: tuple[InlineSpan, ...]
    color: LineColor | None = None
    dim: bool = False

    @property
    def plain_text(self) -> str:
        return "".join(span.text for span in self.spans)


def same_inline_style(a: InlineSpan, b: InlineSpan) -> bool:
    return a.style_key() == b.style_key()


def span_text_length(spans) -> int:
    """Return the summed character length of ``spans``."""
    return sum(len(span.text) for span in spans)


def push_wrapped_span(target: list[InlineSpan], span: InlineSpan) -> None:
    """Append ``span`` to ``target``, merging into the tail when styles match.

    Empty spans are dropped so no zero-width style runs reach the output.
    """
    if not span.text:
        return
    if target and same_inline_style(target[-1], span):
        target[-1] = target[-1].with_text(target[-1].text + span.text)
        return
    target.append(span)


def merge_spans(spans) -> list[InlineSpan]:
    out: list[InlineSpan] = []
    for span in spans:
        push_wrapped_span(out, span)
    return out


def trim_styled_spans(spans, max_chars: int) -> list[InlineSpan]:
    """Trim spans to ``max_chars`` characters, ending with a dim ellipsis.

    Lines that already fit are returned unchanged (merged). When there is
    no room for text plus ``...`` the result is only dots.
    """
    if max_chars <= 0:
        return []

    total = span_text_length(spans)
    if total <= max_chars:
        return merge_spans(spans)

    if max_chars <= 3:
        return [InlineSpan("." * max_chars, dim=True)]

    remaining = max_chars - 3
    out: list[InlineSpan] = []
    for span in spans:
        if remaining <= 0:
            break
        if len(span.text) <= remaining:
            push_wrapped_span(out, span)
            remaining -= len(span.text)
            continue
        push_wrapped_span(out, span.with_text(span.text[:remaining]))
        remaining = 0

    push_wrapped_span(out, InlineSpan("...", dim=True))
    return out


__all__ = [
    "SpanColor",
    "LineColor",
    "InlineSpan",
    "MarkdownLine",
    "WrappedBodyLine",
    "same_inline_style",
    "span_text_length",
    "push_wrapped_span",
    "merge_spans",
    "trim_styled_spans",
]
