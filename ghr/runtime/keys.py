"""Key-combo registry used by the screen state machines.

A registry maps key tokens (as produced by ``ghr.runtime.input.decode_keys``)
to zero-argument handlers. Handlers return an action name for the host loop
or ``None`` when the key only changed local state.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

KeyAction = Callable[[], "str | None"]

ACTION_QUIT = "quit"
ACTION_BACK = "back"
ACTION_REFRESH = "refresh"
ACTION_SELECT = "select"

QUIT_KEYS = ("q", "ESC", "CTRL_C")
DOWN_KEYS = ("j", "DOWN")
UP_KEYS = ("k", "UP")


@dataclass(frozen=True)
class KeyComboBinding:
    """Mapping from one or more key tokens to a single handler."""

    combos: tuple[str, ...]
    handler: KeyAction


class KeyComboRegistry:
    """Exact-match key dispatch table."""

    def __init__(self) -> None:
        self._handlers: dict[str, KeyAction] = {}

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        """Register bindings in order; later combos overwrite earlier ones."""
        for binding in bindings:
            for combo in binding.combos:
                self._handlers[combo] = binding.handler
        return self

    def dispatch(self, key: str) -> str | None:
        """Invoke the handler bound to ``key``; unbound keys are ignored."""
        handler = self._handlers.get(key)
        if handler is None:
            return None
        return handler()


__all__ = [
    "ACTION_QUIT",
    "ACTION_BACK",
    "ACTION_REFRESH",
    "ACTION_SELECT",
    "QUIT_KEYS",
    "DOWN_KEYS",
    "UP_KEYS",
    "KeyComboBinding",
    "KeyComboRegistry",
]
