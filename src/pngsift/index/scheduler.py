"""Fixed-size worker pool consuming a single shared job queue."""

from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import Future, wait
from typing import Any, Callable, Deque, Iterable, List, Tuple

from pngsift.config import AppConfig

LOGGER = logging.getLogger(__name__)

_WorkItem = Tuple[Future, Callable[..., Any], tuple, dict]


class WorkerPool:
    """Run submitted callables on a bounded number of threads.

    The queue is unbounded; only concurrent execution is bounded by the
    worker count. ``shutdown`` drains the queue before the workers exit.
    """

    def __init__(self, num_workers: int | None = None, *, name: str = "pngsift-worker") -> None:
        if num_workers is None:
            num_workers = AppConfig().resolve_workers()
        if num_workers < 1:
            raise ValueError("num_workers must be at least 1")

        self.num_workers = num_workers
        self._queue: Deque[_WorkItem] = deque()
        self._condition = threading.Condition()
        self._stopping = False
        self._shutdown_lock = threading.Lock()
        self._joined = False
        self._threads: List[threading.Thread] = []
        for index in range(num_workers):
            thread = threading.Thread(target=self._worker, name=f"{name}-{index}", daemon=True)
            thread.start()
            self._threads.append(thread)
        LOGGER.debug("Started worker pool with %d threads", num_workers)

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        """Queue ``fn(*args, **kwargs)`` and return a future for its result."""
        future: Future = Future()
        with self._condition:
            if self._stopping:
                raise RuntimeError("cannot submit to a pool that is shutting down")
            self._queue.append((future, fn, args, kwargs))
            self._condition.notify()
        return future

    @staticmethod
    def wait_all(handles: Iterable[Future], timeout: float | None = None) -> None:
        """Block until every handle has finished, in any order.

        Raises ``TimeoutError`` if ``timeout`` seconds pass first. Job
        failures are not raised here; inspect each handle instead.
        """
        pending = list(handles)
        if not pending:
            return
        _, not_done = wait(pending, timeout=timeout)
        if not_done:
            raise TimeoutError(f"{len(not_done)} job(s) still running after {timeout}s")

    def shutdown(self) -> None:
        """Stop accepting work, let the workers drain the queue, then join them."""
        with self._shutdown_lock:
            if self._joined:
                return
            with self._condition:
                self._stopping = True
                self._condition.notify_all()
            for thread in self._threads:
                thread.join()
            self._joined = True
        LOGGER.debug("Worker pool shut down")

    @property
    def is_shutdown(self) -> bool:
        return self._joined

    def _next_item(self) -> _WorkItem | None:
        with self._condition:
            self._condition.wait_for(lambda: self._stopping or bool(self._queue))
            if self._queue:
                return self._queue.popleft()
            return None

    def _worker(self) -> None:
        while True:
            item = self._next_item()
            if item is None:
                return
            future, fn, args, kwargs = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                result = fn(*args, **kwargs)
            except BaseException as exc:
                LOGGER.error("Job %r failed: %s", getattr(fn, "__name__", fn), exc)
                future.set_exception(exc)
            else:
                future.set_result(result)
