"""Tests for the latest-request-wins background loader."""

from __future__ import annotations

import threading
import time
import unittest

from ghr.runtime.refresh import RefreshResult, RefreshScheduler, describe_error


def _wait_for_results(scheduler: RefreshScheduler, count: int, timeout: float = 2.0) -> list[RefreshResult]:
    results: list[RefreshResult] = []
    deadline = time.monotonic() + timeout
    while len(results) < count and time.monotonic() < deadline:
        results.extend(scheduler.drain_results())
        time.sleep(0.01)
    return results


def _wait_until_idle(scheduler: RefreshScheduler, timeout: float = 2.0) -> None:
    deadline = time.monotonic() + timeout
    while scheduler.busy and time.monotonic() < deadline:
        time.sleep(0.01)


class RefreshSchedulerTests(unittest.TestCase):
    def test_successful_load_is_delivered(self) -> None:
        scheduler = RefreshScheduler()

        request_id = scheduler.schedule("pr-list", lambda: [1, 2])
        results = _wait_for_results(scheduler, 1)

        self.assertEqual(len(results), 1)
        self.assertTrue(results[0].ok)
        self.assertEqual(results[0].value, [1, 2])
        self.assertEqual(results[0].request.request_id, request_id)
        self.assertTrue(scheduler.is_current(results[0]))
        _wait_until_idle(scheduler)
        self.assertFalse(scheduler.busy)

    def test_pending_request_is_replaced_while_busy(self) -> None:
        scheduler = RefreshScheduler()
        release = threading.Event()
        started = threading.Event()
        ran: list[str] = []

        def blocking() -> str:
            started.set()
            release.wait(2.0)
            ran.append("first")
            return "first"

        def make(name: str):
            def load() -> str:
                ran.append(name)
                return name

            return load

        scheduler.schedule("viewer-refresh", blocking)
        self.assertTrue(started.wait(2.0))
        scheduler.schedule("viewer-refresh", make("second"))
        third_id = scheduler.schedule("viewer-refresh", make("third"))
        release.set()

        results = _wait_for_results(scheduler, 2)

        self.assertEqual(ran, ["first", "third"])
        self.assertEqual([result.value for result in results], ["first", "third"])
        self.assertFalse(scheduler.is_current(results[0]))
        self.assertTrue(scheduler.is_current(results[1]))
        self.assertEqual(scheduler.latest_request_id, third_id)

    def test_failures_become_error_results(self) -> None:
        scheduler = RefreshScheduler()

        def broken() -> None:
            raise RuntimeError("")

        with self.assertLogs("ghr.runtime.refresh", level="WARNING"):
            scheduler.schedule("open-pr", broken)
            results = _wait_for_results(scheduler, 1)

        self.assertEqual(len(results), 1)
        self.assertFalse(results[0].ok)
        self.assertEqual(results[0].error, "RuntimeError")

    def test_describe_error_prefers_message(self) -> None:
        self.assertEqual(describe_error(ValueError(" bad value ")), "bad value")
        self.assertEqual(describe_error(KeyError()), "KeyError")


if __name__ == "__main__":
    unittest.main()
