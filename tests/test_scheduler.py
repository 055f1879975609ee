"""Tests for the worker pool."""

from __future__ import annotations

import random
import threading
import time

import pytest

from pngsift.index.builder import SharedIndex
from pngsift.index.scheduler import WorkerPool


class TestWorkerPool:
    """Submission, completion and shutdown."""

    def test_submit_returns_result(self) -> None:
        with WorkerPool(2) as pool:
            handle = pool.submit(lambda a, b: a + b, 2, 3)
            pool.wait_all([handle])
        assert handle.result() == 5

    def test_kwargs_forwarded(self) -> None:
        with WorkerPool(1) as pool:
            handle = pool.submit(dict, name="value")
        assert handle.result() == {"name": "value"}

    def test_invalid_worker_count(self) -> None:
        with pytest.raises(ValueError):
            WorkerPool(0)

    def test_default_worker_count(self) -> None:
        pool = WorkerPool()
        try:
            assert pool.num_workers >= 1
        finally:
            pool.shutdown()

    def test_concurrency_bounded_by_workers(self) -> None:
        """No more than num_workers jobs run at the same time."""
        lock = threading.Lock()
        running = 0
        peak = 0

        def job() -> None:
            nonlocal running, peak
            with lock:
                running += 1
                peak = max(peak, running)
            time.sleep(0.01)
            with lock:
                running -= 1

        with WorkerPool(3) as pool:
            handles = [pool.submit(job) for _ in range(30)]
            pool.wait_all(handles)

        assert 1 <= peak <= 3
        assert all(handle.done() for handle in handles)

    def test_failing_job_does_not_kill_worker(self) -> None:
        """An exception is stored on the handle and the worker keeps going."""

        def boom() -> None:
            raise RuntimeError("broken file")

        with WorkerPool(1) as pool:
            failed = pool.submit(boom)
            later = [pool.submit(lambda i=i: i * 2) for i in range(5)]
            pool.wait_all([failed, *later])

        assert isinstance(failed.exception(), RuntimeError)
        assert [handle.result() for handle in later] == [0, 2, 4, 6, 8]

    def test_shutdown_drains_queue(self) -> None:
        """Jobs queued before shutdown still run."""
        results = []
        lock = threading.Lock()

        def job(value: int) -> None:
            time.sleep(0.001)
            with lock:
                results.append(value)

        pool = WorkerPool(2)
        handles = [pool.submit(job, i) for i in range(50)]
        pool.shutdown()

        assert sorted(results) == list(range(50))
        assert all(handle.done() for handle in handles)

    def test_shutdown_twice_is_noop(self) -> None:
        pool = WorkerPool(2)
        pool.shutdown()
        pool.shutdown()
        assert pool.is_shutdown

    def test_submit_after_shutdown(self) -> None:
        pool = WorkerPool(1)
        pool.shutdown()
        with pytest.raises(RuntimeError):
            pool.submit(print)

    def test_workers_exit_after_shutdown(self) -> None:
        pool = WorkerPool(4, name="exit-check")
        pool.shutdown()
        names = {thread.name for thread in threading.enumerate()}
        assert not any(name.startswith("exit-check") for name in names)

    def test_wait_all_empty(self) -> None:
        WorkerPool.wait_all([])

    def test_wait_all_timeout(self) -> None:
        release = threading.Event()
        with WorkerPool(1) as pool:
            handle = pool.submit(release.wait)
            with pytest.raises(TimeoutError):
                pool.wait_all([handle], timeout=0.05)
            release.set()
        assert handle.result() is True

    def test_cancelled_job_skipped(self) -> None:
        """A job cancelled while queued never runs."""
        release = threading.Event()
        ran = []
        with WorkerPool(1) as pool:
            blocker = pool.submit(release.wait)
            queued = pool.submit(ran.append, "ran")
            assert queued.cancel()
            release.set()
            pool.wait_all([blocker])
        assert ran == []


class TestPoolWithSharedIndex:
    """Stress the pool and index together with random interleavings."""

    @pytest.mark.parametrize("workers", [1, 2, 4, 8])
    def test_every_job_merged(self, workers: int) -> None:
        index = SharedIndex()
        rng = random.Random(workers)
        delays = [rng.uniform(0, 0.003) for _ in range(120)]

        def job(identity: str, delay: float) -> None:
            time.sleep(delay)
            index.merge(identity, f"Title: {identity}\n")

        with WorkerPool(workers) as pool:
            handles = [pool.submit(job, f"img{i}", delay) for i, delay in enumerate(delays)]
            pool.wait_all(handles)

        snapshot = index.snapshot()
        assert len(snapshot) == 120
        assert snapshot["img7"] == "Title: img7\n"
