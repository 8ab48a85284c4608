"""Tests for the application state machine with loads run synchronously."""

from __future__ import annotations

import os
import unittest
from unittest import mock

from ghr.github import INFERENCE_SELECTED, GitHubCliError
from ghr.models import IssueComment, LoadedPrComments, PrInfo, PrListItem, RepoInfo
from ghr.render.screens import frame_to_text
from ghr.render.theme import PLAIN_THEME
from ghr.runtime.app import POLL_INTERVAL_MS, AppOptions, GhrApp
from ghr.runtime.layout import Dimensions
from ghr.runtime.refresh import RefreshRequest, RefreshResult, describe_error

REPO = RepoInfo("o/r", "https://github.com/o/r")
PRS = [
    PrListItem(3, "Three", "feat-3", "main", None),
    PrListItem(5, "Five", "feat-5", "main", None),
    PrListItem(8, "Eight", "feat-8", "main", None),
]
DIMS = Dimensions(30, 100)


def _data(number: int, inference: str = "current branch feat", title: str | None = None) -> LoadedPrComments:
    return LoadedPrComments(
        repo=REPO,
        pr=PrInfo(number=number, title=title or f"PR {number}", url=f"https://github.com/o/r/pull/{number}"),
        issue_comments=(
            IssueComment(id=1, body="hello", user_login="alice", created_at="2024-01-01T00:00:00Z", html_url="u1"),
        ),
        pr_inference=inference,
    )


class FakeScheduler:
    """Records scheduled loads and runs them on demand in the calling thread."""

    def __init__(self) -> None:
        self.latest_request_id = 0
        self.busy = False
        self.pending: list[RefreshRequest] = []
        self._results: list[RefreshResult] = []

    def schedule(self, kind, load) -> int:
        self.latest_request_id += 1
        self.pending.append(RefreshRequest(self.latest_request_id, kind, load))
        return self.latest_request_id

    def run_pending(self) -> None:
        for request in self.pending:
            try:
                self._results.append(RefreshResult(request=request, value=request.load()))
            except Exception as exc:
                self._results.append(RefreshResult(request=request, error=describe_error(exc)))
        self.pending = []

    def is_current(self, result: RefreshResult) -> bool:
        return result.request.request_id == self.latest_request_id

    def drain_results(self) -> list[RefreshResult]:
        out, self._results = self._results, []
        return out


class AppTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.now = [1000.0]
        self.scheduler = FakeScheduler()
        self.list_prs = mock.Mock(return_value=list(PRS))
        self.load_comments = mock.Mock(side_effect=lambda repo, number, inference: _data(number, inference))

    def make_app(self, data: LoadedPrComments | None = None, **options) -> GhrApp:
        return GhrApp(
            AppOptions(repo=REPO, theme=PLAIN_THEME, **options),
            prs=list(PRS),
            data=data,
            list_prs=self.list_prs,
            load_comments=self.load_comments,
            scheduler=self.scheduler,
            clock=lambda: self.now[0],
        )

    def settle(self, app: GhrApp) -> None:
        self.scheduler.run_pending()
        app.drain_refresh_results()

    def frame_text(self, app: GhrApp) -> str:
        return frame_to_text(app.build_frame(DIMS), PLAIN_THEME)


class ScreenSwitchingTests(AppTestCase):
    def test_starts_on_viewer_when_data_is_given(self) -> None:
        app = self.make_app(_data(5))

        self.assertIsNotNone(app.viewer)
        self.assertIsNone(app.selector)
        text = self.frame_text(app)
        self.assertIn("ghr  o/r  #5  PR 5", text)
        self.assertIn("Comments (1)", text)

    def test_selecting_a_pr_loads_it_in_the_background(self) -> None:
        app = self.make_app()
        self.assertIsNotNone(app.selector)

        self.assertTrue(app.handle_chunk("j\r"))
        self.assertIsNotNone(app.selector)
        self.assertEqual([request.kind for request in self.scheduler.pending], ["open-pr"])

        self.settle(app)

        self.assertIsNotNone(app.viewer)
        self.assertEqual(app.viewer.pr_number, 5)
        self.load_comments.assert_called_once_with(REPO, 5, INFERENCE_SELECTED)
        self.assertIn("Inference: selected from open PR list", self.frame_text(app))

    def test_failed_open_shows_error_on_selector(self) -> None:
        self.load_comments.side_effect = GitHubCliError(["gh"], "HTTP 502")
        app = self.make_app()

        app.handle_chunk("\r")
        self.settle(app)

        self.assertIsNotNone(app.selector)
        self.assertEqual(app.selector.error, "Failed to load PR: HTTP 502")
        self.assertIn("Failed to load PR: HTTP 502", self.frame_text(app))

    def test_back_returns_to_selector_focused_on_current_pr(self) -> None:
        app = self.make_app(_data(8))

        app.handle_chunk("b")

        self.assertIsNone(app.viewer)
        self.assertEqual(app.selector.selected_pr().number, 8)
        self.assertIn("> [3] #8 Eight", self.frame_text(app))

    def test_quit_keys_stop_the_app(self) -> None:
        self.assertFalse(self.make_app(_data(5)).handle_chunk("q"))
        self.assertFalse(self.make_app().handle_chunk("\x03"))

    def test_mouse_capture_toggle_survives_screen_changes(self) -> None:
        app = self.make_app(_data(5))
        self.assertTrue(app.wants_mouse())

        app.handle_chunk("m")
        self.assertFalse(app.wants_mouse())
        self.assertIn("mouse capture off", self.frame_text(app))

        app.handle_chunk("b")
        self.assertFalse(app.wants_mouse())
        app.handle_chunk("\r")
        self.settle(app)

        self.assertIsNotNone(app.viewer)
        self.assertFalse(app.viewer.nav.mouse_capture)

    def test_selector_refresh_keeps_cursor_on_same_pr(self) -> None:
        app = self.make_app()
        app.handle_chunk("jj")
        self.list_prs.return_value = [PrListItem(9, "Nine", "n", "main", None), *PRS]

        app.handle_chunk("r")
        self.settle(app)

        self.assertEqual(len(app.selector.prs), 4)
        self.assertEqual(app.selector.selected_pr().number, 8)
        self.assertIsNone(app.selector.error)


class AutoRefreshTests(AppTestCase):
    def test_refresh_is_scheduled_once_the_interval_elapses(self) -> None:
        app = self.make_app(_data(5), refresh_seconds=30.0)

        self.now[0] += 10
        app.maybe_auto_refresh()
        self.assertEqual(self.scheduler.pending, [])

        self.now[0] += 25
        app.maybe_auto_refresh()
        self.assertEqual([request.kind for request in self.scheduler.pending], ["viewer-refresh"])

        self.list_prs.return_value = PRS[:1]
        self.settle(app)

        self.assertEqual(app.last_updated, self.now[0])
        self.assertEqual(len(app.prs), 1)
        self.load_comments.assert_called_with(REPO, 5, "current branch feat")

    def test_no_refresh_while_a_load_is_running(self) -> None:
        app = self.make_app(_data(5), refresh_seconds=30.0)
        self.scheduler.busy = True

        self.now[0] += 60
        app.maybe_auto_refresh()

        self.assertEqual(self.scheduler.pending, [])

    def test_slow_load_does_not_spin_the_poll_loop(self) -> None:
        app = self.make_app(_data(5), refresh_seconds=5.0)
        app.schedule_viewer_refresh()
        self.scheduler.busy = True

        self.now[0] += 6
        self.assertEqual(app._poll_timeout_ms(), POLL_INTERVAL_MS)

        self.scheduler.busy = False
        self.settle(app)

        self.assertEqual(app._poll_timeout_ms(), POLL_INTERVAL_MS)
        app.maybe_auto_refresh()
        self.assertEqual(self.scheduler.pending, [])

        self.now[0] += 5
        app.maybe_auto_refresh()
        self.assertEqual([request.kind for request in self.scheduler.pending], ["viewer-refresh"])

    def test_failed_refresh_keeps_data_and_reports_error(self) -> None:
        app = self.make_app(_data(5), refresh_seconds=30.0)
        self.load_comments.side_effect = GitHubCliError(["gh"], "rate limited")

        app.schedule_viewer_refresh()
        self.settle(app)

        self.assertEqual(app.viewer.data.pr.title, "PR 5")
        self.assertEqual(app.refresh_error, "rate limited")
        self.assertIn("Last refresh failed: rate limited", self.frame_text(app))

    def test_stale_results_are_dropped(self) -> None:
        app = self.make_app(_data(5), refresh_seconds=30.0)
        loads = iter(
            [
                _data(5, title="stale"),
                GitHubCliError(["gh"], "second failed"),
            ]
        )

        def load(repo, number, inference):
            value = next(loads)
            if isinstance(value, Exception):
                raise value
            return value

        self.load_comments.side_effect = load
        app.schedule_viewer_refresh()
        app.schedule_viewer_refresh()
        self.settle(app)

        self.assertEqual(app.viewer.data.pr.title, "PR 5")
        self.assertEqual(app.refresh_error, "second failed")

    def test_refreshed_comments_replace_the_rows(self) -> None:
        app = self.make_app(_data(5))
        refreshed = LoadedPrComments(
            repo=REPO,
            pr=PrInfo(5, "PR 5", "u"),
            issue_comments=(
                IssueComment(1, "hello", "alice", "2024-01-01T00:00:00Z", "u1"),
                IssueComment(2, "again", "bob", "2024-01-02T00:00:00Z", "u2"),
            ),
        )
        self.load_comments.side_effect = lambda repo, number, inference: refreshed

        app.schedule_viewer_refresh()
        self.settle(app)

        self.assertEqual(len(app.viewer.rows), 2)
        self.assertIn("Comments (2)", self.frame_text(app))


class NonInteractiveTests(AppTestCase):
    def test_keys_are_ignored(self) -> None:
        app = self.make_app(_data(5), interactive=False)

        self.assertTrue(app.handle_chunk("q"))
        self.assertFalse(app.wants_mouse())

    def test_render_once_writes_plain_lines(self) -> None:
        app = self.make_app(_data(5), interactive=False)
        read_fd, write_fd = os.pipe()
        try:
            with mock.patch("ghr.runtime.app.Dimensions.current", return_value=Dimensions(24, 80)):
                app.render_once(write_fd)
            os.close(write_fd)
            with os.fdopen(read_fd, "rb") as reader:
                output = reader.read().decode("utf-8")
        finally:
            try:
                os.close(write_fd)
            except OSError:
                pass

        self.assertNotIn("\x1b", output)
        self.assertIn("ghr  o/r  #5  PR 5", output)
        self.assertIn("Non-interactive terminal detected", output)


if __name__ == "__main__":
    unittest.main()
