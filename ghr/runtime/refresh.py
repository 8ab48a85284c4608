"""Background refresh worker for pull-request data.

Loads run on one daemon thread at a time. Scheduling while a load is in
flight replaces the pending request, so only the newest request is ever
started next. Results are handed back through a queue the event loop drains
between input polls.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from queue import Empty, Queue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefreshRequest:
    """One data load job."""

    request_id: int
    kind: str
    load: Callable[[], object]


@dataclass(frozen=True)
class RefreshResult:
    """Completed load; exactly one of ``value`` or ``error`` is meaningful."""

    request: RefreshRequest
    value: object = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def describe_error(exc: BaseException) -> str:
    text = str(exc).strip()
    return text or type(exc).__name__


class RefreshScheduler:
    """Single-threaded latest-request-wins load scheduler."""

    def __init__(self, thread_name: str = "ghr-refresh") -> None:
        self._thread_name = thread_name
        self._lock = threading.Lock()
        self._pending: RefreshRequest | None = None
        self._running = False
        self._next_request_id = 1
        self._latest_request_id = 0
        self._results: Queue[RefreshResult] = Queue()

    @property
    def latest_request_id(self) -> int:
        with self._lock:
            return self._latest_request_id

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._running

    def _worker(self) -> None:
        while True:
            with self._lock:
                request = self._pending
                self._pending = None
                if request is None:
                    self._running = False
                    return

            logger.debug("refresh %s #%d started", request.kind, request.request_id)
            try:
                value = request.load()
            except Exception as exc:
                logger.warning("refresh %s #%d failed: %s", request.kind, request.request_id, exc)
                self._results.put(RefreshResult(request=request, error=describe_error(exc)))
                continue
            self._results.put(RefreshResult(request=request, value=value))

    def schedule(self, kind: str, load: Callable[[], object]) -> int:
        """Queue or replace pending work and return its request id."""
        with self._lock:
            request_id = self._next_request_id
            self._next_request_id += 1
            self._latest_request_id = request_id
            self._pending = RefreshRequest(request_id=request_id, kind=kind, load=load)
            if self._running:
                return request_id
            self._running = True

        worker = threading.Thread(target=self._worker, name=self._thread_name, daemon=True)
        worker.start()
        return request_id

    def is_current(self, result: RefreshResult) -> bool:
        return result.request.request_id == self.latest_request_id

    def drain_results(self) -> list[RefreshResult]:
        """Drain all completed results."""
        out: list[RefreshResult] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out


__all__ = [
    "RefreshRequest",
    "RefreshResult",
    "RefreshScheduler",
    "describe_error",
]
