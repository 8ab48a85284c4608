"""Tests for viewer and selector cursor state machines."""

from __future__ import annotations

import unittest

from ghr.runtime.input import MouseEvent
from ghr.runtime.layout import Dimensions, compute_selector_layout, compute_viewer_layout
from ghr.runtime.navigation import SelectorNavigation, ViewerNavigation


def _viewer_nav(row_count: int = 10, max_detail: int = 20, **kwargs) -> ViewerNavigation:
    nav = ViewerNavigation(**kwargs)
    layout = compute_viewer_layout(Dimensions(24, 80), ["a", "b"], "h", row_count, ["t"])
    nav.apply_layout(layout, row_count, max_detail)
    return nav


class ViewerKeyTests(unittest.TestCase):
    def test_list_movement(self) -> None:
        nav = _viewer_nav()

        nav.handle_key("j")
        self.assertEqual(nav.active_index, 1)
        nav.handle_key("G")
        self.assertEqual(nav.active_index, 9)
        nav.handle_key("DOWN")
        self.assertEqual(nav.active_index, 9)
        nav.handle_key("HOME")
        self.assertEqual(nav.active_index, 0)
        nav.handle_key("k")
        self.assertEqual(nav.active_index, 0)

    def test_detail_scrolling_after_tab(self) -> None:
        nav = _viewer_nav()

        nav.handle_key("TAB")
        self.assertEqual(nav.focus, "detail")
        nav.handle_key("j")
        self.assertEqual(nav.detail_offset, 1)
        nav.handle_key("PAGE_DOWN")
        self.assertEqual(nav.detail_offset, 8)
        nav.handle_key("END")
        self.assertEqual(nav.detail_offset, 20)
        nav.handle_key("PAGE_DOWN")
        self.assertEqual(nav.detail_offset, 20)
        nav.handle_key("g")
        self.assertEqual(nav.detail_offset, 0)
        self.assertEqual(nav.active_index, 0)

    def test_moving_the_cursor_resets_detail_scroll(self) -> None:
        nav = _viewer_nav()
        nav.handle_key("TAB")
        nav.handle_key("G")
        nav.handle_key("TAB")

        nav.handle_key("j")

        self.assertEqual(nav.active_index, 1)
        self.assertEqual(nav.detail_offset, 0)

    def test_actions(self) -> None:
        nav = _viewer_nav()

        for key in ("q", "ESC", "CTRL_C"):
            self.assertEqual(nav.handle_key(key), "quit")
        self.assertEqual(nav.handle_key("b"), "back")
        self.assertIsNone(nav.handle_key("m"))
        self.assertFalse(nav.mouse_capture)

    def test_non_interactive_ignores_keys(self) -> None:
        nav = _viewer_nav(interactive=False)

        self.assertIsNone(nav.handle_key("q"))
        nav.handle_key("j")
        self.assertEqual(nav.active_index, 0)

    def test_layout_reclamps_offsets(self) -> None:
        nav = _viewer_nav()
        nav.handle_key("G")
        nav.handle_key("TAB")
        nav.handle_key("G")

        layout = compute_viewer_layout(Dimensions(24, 80), ["a", "b"], "h", 3, ["t"])
        nav.apply_layout(layout, 3, 4)

        self.assertEqual(nav.active_index, 2)
        self.assertEqual(nav.detail_offset, 0)

    def test_detail_offset_clamped_to_new_maximum(self) -> None:
        nav = _viewer_nav()
        nav.handle_key("TAB")
        nav.handle_key("G")

        layout = compute_viewer_layout(Dimensions(24, 80), ["a", "b"], "h", 10, ["t"])
        nav.apply_layout(layout, 10, 4)

        self.assertEqual(nav.detail_offset, 4)

    def test_new_selected_key_resets_detail_scroll(self) -> None:
        nav = _viewer_nav()
        nav.sync_selected_key("discussion-1")
        nav.handle_key("TAB")
        nav.handle_key("j")

        nav.sync_selected_key("discussion-1")
        self.assertEqual(nav.detail_offset, 1)
        nav.sync_selected_key("inline-2")
        self.assertEqual(nav.detail_offset, 0)


class ViewerMouseTests(unittest.TestCase):
    def test_wheel_scrolls_the_panel_under_the_pointer(self) -> None:
        nav = _viewer_nav()

        self.assertTrue(nav.handle_mouse(MouseEvent(65, 5, 10, "M")))
        self.assertEqual(nav.focus, "detail")
        self.assertEqual(nav.detail_offset, 1)

        self.assertTrue(nav.handle_mouse(MouseEvent(65, 5, 5, "M")))
        self.assertEqual(nav.focus, "list")
        self.assertEqual(nav.active_index, 1)

    def test_left_click_focuses_panel(self) -> None:
        nav = _viewer_nav()

        self.assertTrue(nav.handle_mouse(MouseEvent(0, 5, 12, "M")))
        self.assertEqual(nav.focus, "detail")
        self.assertFalse(nav.handle_mouse(MouseEvent(0, 5, 12, "m")))
        self.assertFalse(nav.handle_mouse(MouseEvent(0, 5, 1, "M")))

    def test_mouse_ignored_when_capture_is_off(self) -> None:
        nav = _viewer_nav(mouse_capture=False)

        self.assertFalse(nav.handle_mouse(MouseEvent(65, 5, 10, "M")))
        self.assertEqual(nav.detail_offset, 0)


class SelectorNavigationTests(unittest.TestCase):
    def _nav(self, count: int = 20) -> SelectorNavigation:
        nav = SelectorNavigation()
        nav.apply_layout(compute_selector_layout(Dimensions(24, 80), ["x"], "h", count), count)
        return nav

    def test_movement_and_paging(self) -> None:
        nav = self._nav()

        nav.handle_key("PAGE_DOWN")
        self.assertEqual(nav.active_index, 7)
        nav.handle_key("END")
        self.assertEqual(nav.active_index, 19)
        nav.handle_key("j")
        self.assertEqual(nav.active_index, 19)
        nav.handle_key("PAGE_UP")
        self.assertEqual(nav.active_index, 12)

    def test_actions(self) -> None:
        nav = self._nav()

        self.assertEqual(nav.handle_key("ENTER"), "select")
        self.assertEqual(nav.handle_key("r"), "refresh")
        self.assertEqual(nav.handle_key("q"), "quit")

    def test_enter_on_empty_list_does_nothing(self) -> None:
        nav = self._nav(0)

        self.assertIsNone(nav.handle_key("ENTER"))
        self.assertEqual(nav.active_index, 0)


if __name__ == "__main__":
    unittest.main()
