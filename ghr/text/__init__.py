"""Text pipeline: normalize raw bodies, parse markdown lines, wrap to width."""

from .markdown import body_to_lines, markdown_to_lines, parse_inline_spans
from .normalize import (
    NO_BODY_PLACEHOLDER,
    decode_html_entities,
    normalize_body_for_display,
    preview_body,
    truncate_text,
)
from .spans import InlineSpan, MarkdownLine, WrappedBodyLine, push_wrapped_span, trim_styled_spans
from .wrap import (
    MIN_WRAP_WIDTH,
    count_wrapped_markdown_lines,
    count_wrapped_plain_lines,
    wrap_body,
    wrap_markdown_line,
    wrap_plain_text,
)

__all__ = [
    "NO_BODY_PLACEHOLDER",
    "MIN_WRAP_WIDTH",
    "InlineSpan",
    "MarkdownLine",
    "WrappedBodyLine",
    "decode_html_entities",
    "normalize_body_for_display",
    "preview_body",
    "truncate_text",
    "parse_inline_spans",
    "markdown_to_lines",
    "body_to_lines",
    "push_wrapped_span",
    "trim_styled_spans",
    "wrap_markdown_line",
    "wrap_body",
    "wrap_plain_text",
    "count_wrapped_markdown_lines",
    "count_wrapped_plain_lines",
]
