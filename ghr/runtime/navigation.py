"""Cursor and viewport state machines for the selector and viewer screens.

State is mutated only from the event loop thread. Every render first feeds
fresh bounds in (``apply_layout``), so keys and mouse events always act on
clamped offsets.
"""

from __future__ import annotations

from typing import Literal

from ..render.viewport import clamp
from .input import LEFT_BUTTON, WHEEL_DOWN, WHEEL_UP, MouseEvent
from .keys import (
    ACTION_BACK,
    ACTION_QUIT,
    ACTION_REFRESH,
    ACTION_SELECT,
    DOWN_KEYS,
    QUIT_KEYS,
    UP_KEYS,
    KeyComboBinding,
    KeyComboRegistry,
)
from .layout import SelectorLayout, ViewerLayout

PanelFocus = Literal["list", "detail"]


class ViewerNavigation:
    """Focus, comment cursor, and detail scroll offset for the viewer."""

    def __init__(self, *, mouse_capture: bool = True, interactive: bool = True) -> None:
        self.focus: PanelFocus = "list"
        self.active_index = 0
        self.detail_offset = 0
        self.mouse_capture = mouse_capture
        self.interactive = interactive

        self.row_count = 0
        self.max_detail_offset = 0
        self.list_page_step = 1
        self.detail_page_step = 1
        self.list_top_row = 1
        self.detail_top_row = 1
        self._selected_key: str | None = None

        self._keys = KeyComboRegistry().register_bindings(
            KeyComboBinding(QUIT_KEYS, lambda: ACTION_QUIT),
            KeyComboBinding(("b",), lambda: ACTION_BACK),
            KeyComboBinding(("m",), self.toggle_mouse_capture),
            KeyComboBinding(("TAB",), self.toggle_focus),
            KeyComboBinding(("g", "HOME"), self.jump_first),
            KeyComboBinding(("G", "END"), self.jump_last),
            KeyComboBinding(("PAGE_DOWN",), lambda: self._move_focused(page=1)),
            KeyComboBinding(("PAGE_UP",), lambda: self._move_focused(page=-1)),
            KeyComboBinding(DOWN_KEYS, lambda: self._move_focused(1)),
            KeyComboBinding(UP_KEYS, lambda: self._move_focused(-1)),
        )

    @property
    def max_index(self) -> int:
        return max(0, self.row_count - 1)

    def set_row_count(self, row_count: int) -> None:
        """Clamp the cursor after the comment list changed size."""
        self.row_count = max(0, row_count)
        self.set_active_index(self.active_index)

    def set_active_index(self, index: int) -> None:
        """Move the cursor; any change resets the detail scroll to the top."""
        target = clamp(index, 0, self.max_index)
        if target != self.active_index:
            self.detail_offset = 0
        self.active_index = target

    def sync_selected_key(self, key: str | None) -> None:
        """Reset the detail scroll when a refresh puts a new row under the cursor."""
        if key != self._selected_key:
            self.detail_offset = 0
            self._selected_key = key

    def apply_layout(self, layout: ViewerLayout, row_count: int, max_detail_offset: int) -> None:
        self.set_row_count(row_count)
        self.max_detail_offset = max(0, max_detail_offset)
        self.detail_offset = clamp(self.detail_offset, 0, self.max_detail_offset)
        self.list_page_step = layout.list_page_step
        self.detail_page_step = layout.detail_page_step
        self.list_top_row = layout.list_top_row
        self.detail_top_row = layout.detail_top_row

    def move_index(self, delta: int) -> None:
        self.set_active_index(self.active_index + delta)

    def move_detail(self, delta: int) -> None:
        self.detail_offset = clamp(self.detail_offset + delta, 0, self.max_detail_offset)

    def _move_panel(self, panel: PanelFocus, delta: int) -> None:
        if panel == "list":
            self.move_index(delta)
        else:
            self.move_detail(delta)

    def _move_focused(self, delta: int = 0, *, page: int = 0) -> None:
        if page:
            step = self.list_page_step if self.focus == "list" else self.detail_page_step
            delta = page * step
        self._move_panel(self.focus, delta)

    def toggle_focus(self) -> None:
        self.focus = "detail" if self.focus == "list" else "list"

    def toggle_mouse_capture(self) -> None:
        self.mouse_capture = not self.mouse_capture

    def jump_first(self) -> None:
        if self.focus == "list":
            self.set_active_index(0)
        else:
            self.detail_offset = 0

    def jump_last(self) -> None:
        if self.focus == "list":
            self.set_active_index(self.max_index)
        else:
            self.detail_offset = self.max_detail_offset

    def handle_key(self, key: str) -> str | None:
        """Apply one key token; return a host action such as quit or back."""
        if not self.interactive:
            return None
        return self._keys.dispatch(key)

    def panel_at_row(self, row: int) -> PanelFocus | None:
        if row >= self.detail_top_row:
            return "detail"
        if row >= self.list_top_row:
            return "list"
        return None

    def handle_mouse(self, event: MouseEvent) -> bool:
        """Apply one mouse report; return whether it changed anything visible."""
        if not self.interactive or not self.mouse_capture:
            return False

        if event.code in (WHEEL_UP, WHEEL_DOWN):
            target = self.panel_at_row(event.y) or self.focus
            self.focus = target
            self._move_panel(target, -1 if event.code == WHEEL_UP else 1)
            return True

        if event.code == LEFT_BUTTON and event.is_press:
            clicked = self.panel_at_row(event.y)
            if clicked is not None:
                self.focus = clicked
                return True
        return False


class SelectorNavigation:
    """Cursor over the open pull-request list."""

    def __init__(self, *, interactive: bool = True) -> None:
        self.active_index = 0
        self.item_count = 0
        self.page_step = 1
        self.interactive = interactive

        self._keys = KeyComboRegistry().register_bindings(
            KeyComboBinding(QUIT_KEYS, lambda: ACTION_QUIT),
            KeyComboBinding(("r",), lambda: ACTION_REFRESH),
            KeyComboBinding(("ENTER",), self._select),
            KeyComboBinding(("g", "HOME"), lambda: self.set_active_index(0)),
            KeyComboBinding(("G", "END"), lambda: self.set_active_index(self.max_index)),
            KeyComboBinding(("PAGE_DOWN",), lambda: self.move(self.page_step)),
            KeyComboBinding(("PAGE_UP",), lambda: self.move(-self.page_step)),
            KeyComboBinding(DOWN_KEYS, lambda: self.move(1)),
            KeyComboBinding(UP_KEYS, lambda: self.move(-1)),
        )

    @property
    def max_index(self) -> int:
        return max(0, self.item_count - 1)

    def set_item_count(self, item_count: int) -> None:
        self.item_count = max(0, item_count)
        self.set_active_index(self.active_index)

    def set_active_index(self, index: int) -> None:
        self.active_index = clamp(index, 0, self.max_index)

    def apply_layout(self, layout: SelectorLayout, item_count: int) -> None:
        self.set_item_count(item_count)
        self.page_step = layout.list_page_step

    def move(self, delta: int) -> None:
        self.set_active_index(self.active_index + delta)

    def _select(self) -> str | None:
        if self.item_count == 0:
            return None
        return ACTION_SELECT

    def handle_key(self, key: str) -> str | None:
        if not self.interactive:
            return None
        return self._keys.dispatch(key)


__all__ = [
    "PanelFocus",
    "ViewerNavigation",
    "SelectorNavigation",
]
