"""HTML-laced comment bodies to a small markdown dialect.

GitHub comment bodies mix markdown with HTML fragments (bot summaries,
``<details>`` blocks, anchors). This module decodes entities and rewrites the
structural tags it knows into line breaks or markdown markers, then strips
whatever tags remain.
"""

from __future__ import annotations

import re

NO_BODY_PLACEHOLDER = "(no body)"
MAX_ENTITY_PASSES = 4

HTML_TAG_RE = re.compile(r"</?[a-z][a-z0-9-]*(?:\s[^>]*?)?/?>", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")
_BLANK_RUN_RE = re.compile(r"\n{3,}")

_NAMED_ENTITIES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"&amp;", re.IGNORECASE), "&"),
    (re.compile(r"&lt;", re.IGNORECASE), "<"),
    (re.compile(r"&gt;", re.IGNORECASE), ">"),
    (re.compile(r"&quot;", re.IGNORECASE), '"'),
    (re.compile(r"&#39;", re.IGNORECASE), "'"),
    (re.compile(r"&nbsp;", re.IGNORECASE), " "),
)
_DECIMAL_ENTITY_RE = re.compile(r"&#(\d+);")
_HEX_ENTITY_RE = re.compile(r"&#x([0-9a-f]+);", re.IGNORECASE)


def _open_tag(names: str) -> re.Pattern[str]:
    return re.compile(rf"<(?:{names})\b[^>]*>", re.IGNORECASE)


def _close_tag(names: str, eat_space: bool = False) -> re.Pattern[str]:
    suffix = r"\s*" if eat_space else ""
    return re.compile(rf"</(?:{names})>{suffix}", re.IGNORECASE)


_BLOCK_NAMES = "div|section|article|header|footer|aside"

# Applied in order; later rules see the output of earlier ones.
_TAG_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"<br\s*/?>", re.IGNORECASE), "\n"),
    (_open_tag(_BLOCK_NAMES), "\n"),
    (_close_tag(_BLOCK_NAMES, eat_space=True), "\n"),
    (_close_tag("p", eat_space=True), "\n\n"),
    (_open_tag("p"), ""),
    (re.compile(r"<summary\b[^>]*>(.*?)</summary>", re.IGNORECASE), r"\n**\1**\n"),
    (_open_tag("details|summary"), "\n"),
    (_close_tag("details|summary", eat_space=True), "\n"),
    (_open_tag("blockquote"), "\n> "),
    (_close_tag("blockquote", eat_space=True), "\n"),
    (_open_tag("li"), "- "),
    (_close_tag("li", eat_space=True), "\n"),
    (_open_tag("ul|ol"), "\n"),
    (_close_tag("ul|ol", eat_space=True), "\n"),
    (_open_tag("h[1-6]"), "\n## "),
    (_close_tag("h[1-6]", eat_space=True), "\n"),
    (_open_tag("strong|b"), "**"),
    (_close_tag("strong|b"), "**"),
    (_open_tag("em|i"), "*"),
    (_close_tag("em|i"), "*"),
    (_open_tag("code"), "`"),
    (_close_tag("code"), "`"),
    (_open_tag("pre"), "```\n"),
    (_close_tag("pre"), "\n```"),
)

_ANCHOR_RE = re.compile(r"""<a\b[^>]*href=["']([^"']+)["'][^>]*>(.*?)</a>""", re.IGNORECASE)


def safe_code_point(value: int) -> str:
    """Return the character for ``value`` or ``""`` when it is not a scalar value."""
    if value < 0 or value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
        return ""
    return chr(value)


def _decode_decimal(match: re.Match[str]) -> str:
    return safe_code_point(int(match.group(1), 10))


def _decode_hex(match: re.Match[str]) -> str:
    return safe_code_point(int(match.group(1), 16))


def decode_html_entities(text: str) -> str:
    """Decode the entity subset used in comment bodies.

    Runs at most ``MAX_ENTITY_PASSES`` passes so double-encoded input such as
    ``&amp;lt;`` resolves, and stops as soon as a pass changes nothing.
    """
    output = text
    for _ in range(MAX_ENTITY_PASSES):
        before = output
        for pattern, replacement in _NAMED_ENTITIES:
            output = pattern.sub(replacement, output)
        output = _DECIMAL_ENTITY_RE.sub(_decode_decimal, output)
        output = _HEX_ENTITY_RE.sub(_decode_hex, output)
        if output == before:
            break
    return output


def _anchor_to_markdown(match: re.Match[str]) -> str:
    href = match.group(1)
    label = decode_html_entities(HTML_TAG_RE.sub("", match.group(2)))
    return f"[{label or href}]({href})"


def normalize_body_for_display(text: str | None) -> str:
    """Flatten a raw comment body into the markdown dialect the parser reads."""
    if not text:
        return NO_BODY_PLACEHOLDER

    output = decode_html_entities(text)
    output = output.replace("\r\n", "\n")
    for pattern, replacement in _TAG_RULES:
        output = pattern.sub(replacement, output)
    output = _ANCHOR_RE.sub(_anchor_to_markdown, output)
    output = decode_html_entities(output)
    output = HTML_TAG_RE.sub("", output)
    output = decode_html_entities(output)
    output = _BLANK_RUN_RE.sub("\n\n", output).strip()
    return output or NO_BODY_PLACEHOLDER


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def preview_body(text: str | None) -> str:
    """Return a single-line preview used by comment list rows."""
    return collapse_whitespace(normalize_body_for_display(text)) or NO_BODY_PLACEHOLDER


def truncate_text(text: str, max_width: int) -> str:
    clean = collapse_whitespace(text)
    if len(clean) <= max_width:
        return clean
    if max_width <= 3:
        return clean[: max(0, max_width)]
    return f"{clean[: max_width - 3]}..."


__all__ = [
    "NO_BODY_PLACEHOLDER",
    "MAX_ENTITY_PASSES",
    "HTML_TAG_RE",
    "safe_code_point",
    "decode_html_entities",
    "normalize_body_for_display",
    "collapse_whitespace",
    "preview_body",
    "truncate_text",
]
