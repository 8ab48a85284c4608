"""Rendering helpers: themes, ANSI conversion, viewport math, frame composition.

Frame composition lives in ``ghr.render.screens`` and is imported from there
directly, since it depends on runtime layout types.
"""

from __future__ import annotations

from .ansi import clip_spans, display_width, pad_spans, spans_to_ansi
from .theme import DEFAULT_THEME, PLAIN_THEME, UITheme, resolve_theme
from .viewport import BodyPage, indicator_text, paginate_lines

__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "PLAIN_THEME",
    "resolve_theme",
    "clip_spans",
    "display_width",
    "pad_spans",
    "spans_to_ansi",
    "BodyPage",
    "indicator_text",
    "paginate_lines",
]
