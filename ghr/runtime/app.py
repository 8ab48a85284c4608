"""Interactive application loop for the selector and comment viewer.

Each iteration drains finished background loads, starts an auto refresh when
one is due, renders if anything changed, then waits for one input chunk.
Every render re-derives layout from the current terminal size and data, and
feeds the fresh bounds back into the navigation state before composing the
frame.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..comments import UnifiedCommentRow, build_unified_rows
from ..github import INFERENCE_SELECTED, list_open_prs, load_pr_comments
from ..models import LoadedPrComments, PrListItem, RepoInfo
from ..render.screens import (
    FrameRow,
    SelectorRenderContext,
    ViewerRenderContext,
    build_selector_frame,
    build_viewer_frame,
    detail_header_lines,
    frame_to_text,
    header_texts,
    selector_header_lines,
    selector_help_text,
    viewer_header_lines,
    viewer_help_text,
    write_frame,
)
from ..render.theme import UITheme
from ..render.viewport import max_offset
from ..text.spans import WrappedBodyLine
from ..text.wrap import wrap_body
from .input import decode_keys, parse_mouse_sequences, read_input_chunk
from .keys import ACTION_BACK, ACTION_QUIT, ACTION_REFRESH, ACTION_SELECT
from .layout import Dimensions, compute_selector_layout, compute_viewer_layout
from .navigation import SelectorNavigation, ViewerNavigation
from .refresh import RefreshResult, RefreshScheduler
from .terminal import TerminalController

logger = logging.getLogger(__name__)

POLL_INTERVAL_MS = 250

KIND_VIEWER_REFRESH = "viewer-refresh"
KIND_OPEN_PR = "open-pr"
KIND_PR_LIST = "pr-list"


@dataclass(frozen=True)
class AppOptions:
    repo: RepoInfo
    theme: UITheme
    refresh_seconds: float = 30.0
    mouse_capture: bool = True
    interactive: bool = True


@dataclass(frozen=True)
class ViewerSnapshot:
    """Result of one viewer refresh: comments plus the open PR list."""

    data: LoadedPrComments
    prs: list[PrListItem]


class ViewerScreen:
    """Comment data plus navigation for one open pull request."""

    def __init__(self, data: LoadedPrComments, *, mouse_capture: bool, interactive: bool) -> None:
        self.nav = ViewerNavigation(mouse_capture=mouse_capture, interactive=interactive)
        self.data = data
        self.rows: list[UnifiedCommentRow] = build_unified_rows(data)
        self._body_cache: dict[tuple[str, int], list[WrappedBodyLine]] = {}

    @property
    def pr_number(self) -> int:
        return self.data.pr.number

    def replace_data(self, data: LoadedPrComments) -> None:
        """Swap in refreshed data; the cursor is re-clamped on the next render."""
        self.data = data
        self.rows = build_unified_rows(data)
        self._body_cache.clear()

    def selected_row(self) -> UnifiedCommentRow | None:
        if not self.rows:
            return None
        return self.rows[self.nav.active_index]

    def body_lines(self, row: UnifiedCommentRow | None, wrap_width: int) -> list[WrappedBodyLine]:
        if row is None:
            return []
        cache_key = (row.key, wrap_width)
        cached = self._body_cache.get(cache_key)
        if cached is None:
            cached = wrap_body(row.body, 0, wrap_width, self.data.repo.web_url)
            self._body_cache[cache_key] = cached
        return cached


class SelectorScreen:
    """Open pull-request list plus its cursor."""

    def __init__(self, prs: list[PrListItem], *, interactive: bool, preferred_pr: int | None = None) -> None:
        self.nav = SelectorNavigation(interactive=interactive)
        self.prs = list(prs)
        self.error: str | None = None
        self.nav.set_item_count(len(self.prs))
        self.focus_pr(preferred_pr)

    def focus_pr(self, number: int | None) -> None:
        for index, pr in enumerate(self.prs):
            if pr.number == number:
                self.nav.set_active_index(index)
                return

    def replace_prs(self, prs: list[PrListItem]) -> None:
        current = self.selected_pr()
        self.prs = list(prs)
        self.nav.set_item_count(len(self.prs))
        self.focus_pr(current.number if current else None)

    def selected_pr(self) -> PrListItem | None:
        if not self.prs:
            return None
        return self.prs[self.nav.active_index]


class GhrApp:
    """Own both screens, the refresh worker, and the terminal loop."""

    def __init__(
        self,
        options: AppOptions,
        *,
        prs: list[PrListItem],
        data: LoadedPrComments | None = None,
        list_prs: Callable[[RepoInfo], list[PrListItem]] = list_open_prs,
        load_comments: Callable[..., LoadedPrComments] = load_pr_comments,
        scheduler: RefreshScheduler | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.options = options
        self.prs = list(prs)
        self._list_prs = list_prs
        self._load_comments = load_comments
        self.scheduler = scheduler if scheduler is not None else RefreshScheduler()
        self._clock = clock
        self.mouse_capture = options.mouse_capture

        self.viewer: ViewerScreen | None = None
        self.selector: SelectorScreen | None = None
        self.last_updated: float | None = None
        self.refresh_error: str | None = None
        self._next_refresh_at = 0.0
        self.dirty = True

        if data is not None:
            self._show_viewer(data)
        else:
            self._show_selector()

    @property
    def interactive(self) -> bool:
        return self.options.interactive

    def _show_viewer(self, data: LoadedPrComments) -> None:
        self.viewer = ViewerScreen(data, mouse_capture=self.mouse_capture, interactive=self.interactive)
        self.selector = None
        self.last_updated = self._clock()
        self.refresh_error = None
        self._next_refresh_at = self.last_updated + self.options.refresh_seconds
        self.dirty = True

    def _show_selector(self, preferred_pr: int | None = None) -> None:
        if self.viewer is not None:
            self.mouse_capture = self.viewer.nav.mouse_capture
        self.viewer = None
        self.selector = SelectorScreen(self.prs, interactive=self.interactive, preferred_pr=preferred_pr)
        self.dirty = True

    def wants_mouse(self) -> bool:
        return self.interactive and self.viewer is not None and self.viewer.nav.mouse_capture

    def build_frame(self, dims: Dimensions) -> list[FrameRow]:
        """Derive layout and frame from the current data, size, and cursor state."""
        now = self._clock()
        refreshing = self.scheduler.busy
        if self.viewer is not None:
            return self._build_viewer_frame(self.viewer, dims, now, refreshing)
        return self._build_selector_frame(self.selector, dims, now, refreshing)

    def _build_viewer_frame(
        self,
        screen: ViewerScreen,
        dims: Dimensions,
        now: float,
        refreshing: bool,
    ) -> list[FrameRow]:
        nav = screen.nav
        nav.set_row_count(len(screen.rows))
        selected = screen.selected_row()
        nav.sync_selected_key(selected.key if selected else None)

        header = viewer_header_lines(
            screen.data,
            open_pr_count=len(self.prs),
            mouse_capture=nav.mouse_capture,
            refresh_seconds=self.options.refresh_seconds,
            last_updated=self.last_updated,
            refreshing=refreshing,
            refresh_error=self.refresh_error,
        )
        help_text = viewer_help_text(self.interactive)
        detail_header = detail_header_lines(selected, now)
        layout = compute_viewer_layout(
            dims,
            header_texts(header),
            help_text,
            len(screen.rows),
            header_texts(detail_header),
        )
        body = screen.body_lines(selected, layout.detail_wrap_width)
        nav.apply_layout(layout, len(screen.rows), max_offset(len(body), layout.detail_body_lines))
        return build_viewer_frame(
            ViewerRenderContext(
                header=header,
                help_text=help_text,
                rows=screen.rows,
                layout=layout,
                focus=nav.focus,
                active_index=nav.active_index,
                detail_header=detail_header,
                body_lines=body,
                detail_offset=nav.detail_offset,
                now=now,
            )
        )

    def _build_selector_frame(
        self,
        screen: SelectorScreen,
        dims: Dimensions,
        now: float,
        refreshing: bool,
    ) -> list[FrameRow]:
        header = selector_header_lines(
            self.options.repo.name_with_owner,
            pr_count=len(screen.prs),
            refreshing=refreshing,
            error=screen.error,
        )
        help_text = selector_help_text(self.interactive)
        layout = compute_selector_layout(dims, header_texts(header), help_text, len(screen.prs))
        screen.nav.apply_layout(layout, len(screen.prs))
        return build_selector_frame(
            SelectorRenderContext(
                header=header,
                help_text=help_text,
                prs=screen.prs,
                layout=layout,
                active_index=screen.nav.active_index,
                now=now,
            )
        )

    def _viewer_load(self, number: int, inference: str) -> Callable[[], ViewerSnapshot]:
        repo = self.options.repo

        def load() -> ViewerSnapshot:
            return ViewerSnapshot(data=self._load_comments(repo, number, inference), prs=self._list_prs(repo))

        return load

    def schedule_viewer_refresh(self) -> None:
        if self.viewer is None:
            return
        data = self.viewer.data
        self.scheduler.schedule(KIND_VIEWER_REFRESH, self._viewer_load(data.pr.number, data.pr_inference))
        self._next_refresh_at = self._clock() + self.options.refresh_seconds
        self.dirty = True

    def schedule_open_pr(self, number: int) -> None:
        self.scheduler.schedule(KIND_OPEN_PR, self._viewer_load(number, INFERENCE_SELECTED))
        self.dirty = True

    def schedule_pr_list(self) -> None:
        repo = self.options.repo
        self.scheduler.schedule(KIND_PR_LIST, lambda: self._list_prs(repo))
        self.dirty = True

    def maybe_auto_refresh(self) -> None:
        if self.viewer is None or self.options.refresh_seconds <= 0:
            return
        if self._clock() < self._next_refresh_at or self.scheduler.busy:
            return
        self.schedule_viewer_refresh()

    def apply_refresh_result(self, result: RefreshResult) -> None:
        """Fold one finished load into the screen it belongs to."""
        self.dirty = True
        if not self.scheduler.is_current(result):
            logger.debug("dropping stale %s result #%d", result.request.kind, result.request.request_id)
            return

        kind = result.request.kind
        if kind == KIND_VIEWER_REFRESH and self.viewer is not None:
            self._next_refresh_at = self._clock() + self.options.refresh_seconds
            if not result.ok:
                self.refresh_error = result.error
                return
            snapshot = result.value
            if snapshot.data.pr.number != self.viewer.pr_number:
                return
            self.viewer.replace_data(snapshot.data)
            self.prs = snapshot.prs
            self.last_updated = self._clock()
            self.refresh_error = None
        elif kind == KIND_OPEN_PR and self.selector is not None:
            if not result.ok:
                self.selector.error = f"Failed to load PR: {result.error}"
                return
            self.prs = result.value.prs
            self._show_viewer(result.value.data)
        elif kind == KIND_PR_LIST and self.selector is not None:
            if not result.ok:
                self.selector.error = f"Failed to refresh PR list: {result.error}"
                return
            self.prs = list(result.value)
            self.selector.replace_prs(self.prs)
            self.selector.error = None

    def drain_refresh_results(self) -> None:
        for result in self.scheduler.drain_results():
            self.apply_refresh_result(result)

    def handle_action(self, action: str | None) -> bool:
        """Apply a navigation action; return ``False`` when the app should exit."""
        if action == ACTION_QUIT:
            return False
        if action == ACTION_BACK and self.viewer is not None:
            self._show_selector(preferred_pr=self.viewer.pr_number)
        elif action == ACTION_REFRESH and self.selector is not None:
            self.schedule_pr_list()
        elif action == ACTION_SELECT and self.selector is not None:
            pr = self.selector.selected_pr()
            if pr is not None:
                self.schedule_open_pr(pr.number)
        return True

    def handle_chunk(self, chunk: str) -> bool:
        """Dispatch one raw input chunk; return ``False`` to quit."""
        if self.viewer is not None:
            for event in parse_mouse_sequences(chunk):
                self.viewer.nav.handle_mouse(event)
        for key in decode_keys(chunk):
            if self.viewer is not None:
                action = self.viewer.nav.handle_key(key)
            elif self.selector is not None:
                action = self.selector.nav.handle_key(key)
            else:
                action = None
            if not self.handle_action(action):
                return False
        self.dirty = True
        return True

    def _poll_timeout_ms(self) -> int:
        if self.viewer is None or self.scheduler.busy:
            return POLL_INTERVAL_MS
        until_refresh = int(max(0.0, self._next_refresh_at - self._clock()) * 1000)
        return max(1, min(POLL_INTERVAL_MS, until_refresh))

    def render_once(self, fd: int | None = None) -> None:
        """Write one frame as plain lines and return; used off-terminal."""
        target = sys.stdout.fileno() if fd is None else fd
        text = frame_to_text(self.build_frame(Dimensions.current()), self.options.theme)
        os.write(target, text.encode("utf-8", errors="replace"))

    def run(self, stdin_fd: int, stdout_fd: int) -> None:
        """Run the raw-mode loop until quit."""
        terminal = TerminalController(stdin_fd, stdout_fd)
        last_dims: Dimensions | None = None
        was_busy = False
        with terminal.raw_mode():
            while True:
                self.drain_refresh_results()
                self.maybe_auto_refresh()

                busy = self.scheduler.busy
                if busy != was_busy:
                    self.dirty = True
                    was_busy = busy

                dims = Dimensions.current()
                if dims != last_dims:
                    self.dirty = True
                    last_dims = dims
                if self.dirty:
                    write_frame(self.build_frame(dims), self.options.theme, stdout_fd)
                    self.dirty = False
                terminal.set_mouse_reporting(self.wants_mouse())

                chunk = read_input_chunk(stdin_fd, self._poll_timeout_ms())
                if chunk and not self.handle_chunk(chunk):
                    return


def run_app(
    options: AppOptions,
    *,
    prs: list[PrListItem],
    data: LoadedPrComments | None = None,
) -> None:
    """Start the UI on the viewer when ``data`` is given, else on the selector."""
    app = GhrApp(options, prs=prs, data=data)
    if not options.interactive:
        app.render_once()
        return
    app.run(sys.stdin.fileno(), sys.stdout.fileno())


__all__ = [
    "POLL_INTERVAL_MS",
    "AppOptions",
    "ViewerSnapshot",
    "ViewerScreen",
    "SelectorScreen",
    "GhrApp",
    "run_app",
]
