"""Markdown subset parser producing styled logical lines.

Supports headings, blockquotes, bullet and numbered lists, fenced code, and
inline links, bold, code, and italics. Probable commit hashes are turned into
hyperlinked spans when a repository base URL is known.
"""

from __future__ import annotations

import re

from .normalize import NO_BODY_PLACEHOLDER, normalize_body_for_display
from .spans import InlineSpan, MarkdownLine

_LINE_SPLIT_RE = re.compile(r"\r?\n")
_HEADING_RE = re.compile(r"^\s*(#{1,6})\s+(.*)$")
_QUOTE_RE = re.compile(r"^\s*>\s?(.*)$")
_BULLET_RE = re.compile(r"^\s*[-*+]\s+(.*)$")
_NUMBERED_RE = re.compile(r"^\s*(\d+)\.\s+(.*)$")
_INLINE_TOKEN_RE = re.compile(r"(\[[^\]]+\]\(([^)]+)\)|\*\*[^*]+\*\*|`[^`]+`|\*[^*]+\*|_[^_]+_)")
_LINK_RE = re.compile(r"^\[([^\]]+)\]\(([^)]+)\)$")
# 7-40 hex chars with at least one letter so plain numbers are left alone.
COMMIT_HASH_RE = re.compile(r"\b(?=[0-9a-f]{7,40}\b)(?=[0-9a-f]*[a-f])[0-9a-f]+\b", re.IGNORECASE | re.ASCII)

FENCE_MARKER = "```"


def _commit_base(commit_base_url: str | None) -> str:
    return (commit_base_url or "").rstrip("/")


def append_text_with_commit_links(
    text: str,
    target: list[InlineSpan],
    commit_base_url: str | None = None,
    base: InlineSpan | None = None,
) -> None:
    """Append ``text`` as spans styled like ``base``, linking commit hashes."""
    if not text:
        return
    if base is None:
        base = InlineSpan("")

    commit_base = _commit_base(commit_base_url)
    if not commit_base:
        target.append(base.with_text(text))
        return

    last = 0
    for match in COMMIT_HASH_RE.finditer(text):
        if match.start() > last:
            target.append(base.with_text(text[last : match.start()]))
        commit = match.group(0)
        target.append(
            InlineSpan(
                commit,
                color="blue",
                underline=True,
                link=f"{commit_base}/commit/{commit}",
            )
        )
        last = match.end()
    if last < len(text):
        target.append(base.with_text(text[last:]))


def parse_inline_spans(text: str, commit_base_url: str | None = None) -> list[InlineSpan]:
    """Tokenize one line into styled spans.

    Token priority is links, bold, inline code, then italics. Plain text
    between tokens and the content of code spans get commit-hash detection.
    """
    spans: list[InlineSpan] = []
    last = 0
    for match in _INLINE_TOKEN_RE.finditer(text):
        if match.start() > last:
            append_text_with_commit_links(text[last : match.start()], spans, commit_base_url)

        value = match.group(0)
        if value.startswith("[") and value.endswith(")"):
            link = _LINK_RE.match(value)
            if link:
                url = link.group(2)
                spans.append(InlineSpan(link.group(1), color="blue", underline=True, link=url))
                spans.append(InlineSpan(f" ({url})", dim=True))
            else:
                spans.append(InlineSpan(value))
        elif value.startswith("**") and value.endswith("**"):
            spans.append(InlineSpan(value[2:-2], bold=True))
        elif value.startswith("`") and value.endswith("`"):
            append_text_with_commit_links(
                value[1:-1],
                spans,
                commit_base_url,
                base=InlineSpan("", color="yellow"),
            )
        elif (value.startswith("*") and value.endswith("*")) or (
            value.startswith("_") and value.endswith("_")
        ):
            spans.append(InlineSpan(value[1:-1], italic=True))
        else:
            spans.append(InlineSpan(value))
        last = match.end()

    if last < len(text):
        append_text_with_commit_links(text[last:], spans, commit_base_url)
    return spans


def _classify_line(source_line: str, commit_base_url: str | None) -> MarkdownLine:
    if not source_line.strip():
        return MarkdownLine(prefix="", spans=(InlineSpan(""),))

    heading = _HEADING_RE.match(source_line)
    if heading:
        return MarkdownLine(
            prefix="",
            spans=tuple(parse_inline_spans(heading.group(2), commit_base_url)),
            color="cyan",
        )

    quote = _QUOTE_RE.match(source_line)
    if quote:
        return MarkdownLine(
            prefix="> ",
            spans=tuple(parse_inline_spans(quote.group(1), commit_base_url)),
            dim=True,
        )

    bullet = _BULLET_RE.match(source_line)
    if bullet:
        return MarkdownLine(prefix="• ", spans=tuple(parse_inline_spans(bullet.group(1), commit_base_url)))

    numbered = _NUMBERED_RE.match(source_line)
    if numbered:
        return MarkdownLine(
            prefix=f"{numbered.group(1)}. ",
            spans=tuple(parse_inline_spans(numbered.group(2), commit_base_url)),
        )

    return MarkdownLine(prefix="", spans=tuple(parse_inline_spans(source_line, commit_base_url)))


def markdown_to_lines(text: str, commit_base_url: str | None = None) -> list[MarkdownLine]:
    """Parse normalized text into logical markdown lines.

    Fence marker lines toggle code mode and are not emitted. Lines inside a
    fence are kept verbatim in the code color and skip all other detection.
    """
    output: list[MarkdownLine] = []
    in_fence = False
    for source_line in _LINE_SPLIT_RE.split(text):
        if source_line.strip().startswith(FENCE_MARKER):
            in_fence = not in_fence
            continue
        if in_fence:
            output.append(MarkdownLine(prefix="", spans=(InlineSpan(source_line),), color="yellow"))
            continue
        output.append(_classify_line(source_line, commit_base_url))
    return output


def body_to_lines(raw: str | None, commit_base_url: str | None = None) -> list[MarkdownLine]:
    """Normalize a raw comment body and parse it into markdown lines."""
    return markdown_to_lines(normalize_body_for_display(raw or NO_BODY_PLACEHOLDER), commit_base_url)


__all__ = [
    "COMMIT_HASH_RE",
    "FENCE_MARKER",
    "append_text_with_commit_links",
    "parse_inline_spans",
    "markdown_to_lines",
    "body_to_lines",
]
