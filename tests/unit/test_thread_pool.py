"""
Unit tests for the worker pool.
"""

import queue
import threading
import time

import pytest

from httpengine.core.thread_pool import ThreadPool


def wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


class TestThreadPool:
    """Tests for ThreadPool."""

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            ThreadPool(workers=0)

    def test_queue_defaults_to_worker_count(self):
        assert ThreadPool(workers=3).queue_size == 3

    def test_submit_before_start(self):
        with pytest.raises(RuntimeError):
            ThreadPool(workers=1).submit(lambda: None)

    def test_all_workers_started(self):
        pool = ThreadPool(workers=4)
        pool.start()
        try:
            assert pool.stats["workers"]["total"] == 4
        finally:
            pool.shutdown()

    def test_runs_tasks(self):
        pool = ThreadPool(workers=2)
        pool.start()

        results = []
        lock = threading.Lock()

        def record(value):
            with lock:
                results.append(value)

        for i in range(20):
            pool.submit(record, args=(i,))

        pool.shutdown(wait=True)

        assert sorted(results) == list(range(20))

    def test_kwargs(self):
        pool = ThreadPool(workers=1)
        pool.start()
        seen = {}

        pool.submit(seen.update, kwargs={"key": "value"})
        pool.shutdown(wait=True)

        assert seen == {"key": "value"}

    def test_failing_task_does_not_kill_worker(self):
        """An exception in one task leaves the worker serving the next."""
        pool = ThreadPool(workers=1)
        pool.start()
        done = threading.Event()

        def boom():
            raise RuntimeError("boom")

        pool.submit(boom)
        pool.submit(done.set)

        assert done.wait(5.0)
        pool.shutdown(wait=True)

    def test_failures_counted(self):
        pool = ThreadPool(workers=1)
        pool.start()

        def boom():
            raise RuntimeError("boom")

        pool.submit(boom)
        pool.submit(lambda: None)

        assert wait_for(lambda: pool.stats["tasks"]["completed"] == 1)
        assert pool.stats["tasks"]["failed"] == 1
        pool.shutdown(wait=True)

    def test_submit_blocks_when_full(self):
        """With every worker busy and the queue full, submit() waits."""
        pool = ThreadPool(workers=1, queue_size=1)
        pool.start()
        release = threading.Event()
        started = threading.Event()

        def hold():
            started.set()
            release.wait(5.0)

        pool.submit(hold)
        assert started.wait(5.0)

        pool.submit(lambda: None)  # Fills the queue

        with pytest.raises(queue.Full):
            pool.submit(lambda: None, timeout=0.1)

        release.set()
        pool.submit(lambda: None, timeout=5.0)  # Space again
        pool.shutdown(wait=True)

    def test_busy_workers(self):
        pool = ThreadPool(workers=2)
        pool.start()
        release = threading.Event()

        pool.submit(release.wait, args=(5.0,))

        assert wait_for(lambda: pool.busy_workers == 1)
        assert pool.idle_workers == 1

        release.set()
        pool.shutdown(wait=True)

    def test_submit_after_shutdown(self):
        pool = ThreadPool(workers=1)
        pool.start()
        pool.shutdown()

        with pytest.raises(RuntimeError):
            pool.submit(lambda: None)

    def test_shutdown_without_wait_drops_queue(self):
        pool = ThreadPool(workers=1, queue_size=5)
        pool.start()
        release = threading.Event()
        started = threading.Event()
        ran = []

        def hold():
            started.set()
            release.wait(5.0)

        pool.submit(hold)
        assert started.wait(5.0)
        for i in range(3):
            pool.submit(ran.append, args=(i,))

        # Release only after the queue has been dropped
        timer = threading.Timer(0.5, release.set)
        timer.start()
        pool.shutdown(wait=False)
        timer.join()

        assert ran == []

    def test_shutdown_waits_for_queued_jobs(self):
        pool = ThreadPool(workers=1, queue_size=5)
        pool.start()
        ran = []

        for i in range(5):
            pool.submit(lambda i=i: (time.sleep(0.01), ran.append(i)))

        pool.shutdown(wait=True, timeout=5.0)

        assert ran == [0, 1, 2, 3, 4]

    def test_shutdown_timeout_gives_up_on_slow_job(self, caplog):
        pool = ThreadPool(workers=1)
        pool.start()
        release = threading.Event()
        started = threading.Event()

        def hold():
            started.set()
            release.wait(5.0)

        pool.submit(hold)
        assert started.wait(5.0)

        timer = threading.Timer(0.5, release.set)
        timer.start()
        with caplog.at_level("WARNING", logger="httpengine.core.thread_pool"):
            pool.shutdown(wait=True, timeout=0.1)
        timer.join()

        assert "Shutdown timeout" in caplog.text
