"""Display-width measurement and span-to-ANSI conversion.

Frames are built from styled spans and only turned into escape sequences at
the very end, so clipping operates on plain text and never splits an escape.
"""

from __future__ import annotations

import unicodedata

from ..text.spans import InlineSpan, push_wrapped_span
from .theme import UITheme

OSC8_PREFIX = "\x1b]8;;"
BEL = "\x07"


def char_display_width(ch: str) -> int:
    """Return terminal column width for one character.

    Combining marks consume no columns and East Asian wide/fullwidth
    characters consume two.
    """
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    return sum(char_display_width(ch) for ch in text)


def is_control_char(ch: str) -> bool:
    """True for C0, DEL and C1 code points; any of them can start an escape."""
    code = ord(ch)
    return code < 32 or 127 <= code < 160


def sanitize_text(text: str) -> str:
    """Replace control characters that would corrupt the terminal grid."""
    return "".join(" " if ch == "\t" else ("" if is_control_char(ch) else ch) for ch in text)


def safe_link(url: str | None) -> str | None:
    """Return ``url`` when it can sit inside an OSC 8 sequence, else ``None``."""
    if not url or any(is_control_char(ch) for ch in url):
        return None
    return url


def clip_spans(spans, max_cols: int) -> list[InlineSpan]:
    """Trim spans to at most ``max_cols`` display columns."""
    if max_cols <= 0:
        return []

    out: list[InlineSpan] = []
    col = 0
    for span in spans:
        if col >= max_cols:
            break
        text = sanitize_text(span.text)
        kept: list[str] = []
        for ch in text:
            w = char_display_width(ch)
            if col + w > max_cols:
                break
            kept.append(ch)
            col += w
        push_wrapped_span(out, span.with_text("".join(kept)))
        if len(kept) < len(text):
            break
    return out


def pad_spans(spans, width: int) -> list[InlineSpan]:
    """Clip then right-pad spans with unstyled spaces to exactly ``width``."""
    clipped = clip_spans(spans, width)
    used = sum(display_width(span.text) for span in clipped)
    if used < width:
        push_wrapped_span(clipped, InlineSpan(" " * (width - used)))
    return clipped


def sgr_for_span(span: InlineSpan, theme: UITheme) -> str:
    """Build the SGR sequence for one span, or ``""`` when it is unstyled."""
    if theme.plain:
        return ""
    params: list[str] = []
    if span.bold:
        params.append(theme.bold)
    if span.dim:
        params.append(theme.dim)
    if span.italic:
        params.append(theme.italic)
    if span.underline:
        params.append(theme.underline)
    if span.color and span.color in theme.colors:
        params.append(theme.colors[span.color])
    params = [param for param in params if param]
    if not params:
        return ""
    return f"\033[{';'.join(params)}m"


def hyperlink(text: str, url: str) -> str:
    return f"{OSC8_PREFIX}{url}{BEL}{text}{OSC8_PREFIX}{BEL}"


def spans_to_ansi(spans, theme: UITheme) -> str:
    """Render spans as one ANSI string, resetting after every styled run."""
    out: list[str] = []
    for span in spans:
        if not span.text:
            continue
        text = span.text
        link = safe_link(span.link)
        if link and theme.hyperlinks:
            text = hyperlink(text, link)
        sgr = sgr_for_span(span, theme)
        if sgr:
            out.append(f"{sgr}{text}{theme.reset}")
        else:
            out.append(text)
    return "".join(out)


__all__ = [
    "char_display_width",
    "display_width",
    "is_control_char",
    "sanitize_text",
    "safe_link",
    "clip_spans",
    "pad_spans",
    "sgr_for_span",
    "hyperlink",
    "spans_to_ansi",
]
