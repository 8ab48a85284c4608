"""UI theme definitions and selection helpers.

Themes map the closed span palette and style flags onto ANSI SGR codes.
The plain theme drops every escape so ``--no-color`` output is bare text.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    colors: dict[str, str] = field(default_factory=dict)
    bold: str = ""
    dim: str = ""
    italic: str = ""
    underline: str = ""
    reset: str = ""
    hyperlinks: bool = False

    @property
    def plain(self) -> bool:
        return not self.reset


DEFAULT_THEME = UITheme(
    name="default",
    colors={
        "blue": "34",
        "yellow": "33",
        "cyan": "36",
        "gray": "90",
        "white": "37",
        "magenta": "35",
        "green": "32",
        "red": "31",
    },
    bold="1",
    dim="2",
    italic="3",
    underline="4",
    reset="\033[0m",
    hyperlinks=True,
)

PLAIN_THEME = UITheme(name="plain")

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    PLAIN_THEME.name: PLAIN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
