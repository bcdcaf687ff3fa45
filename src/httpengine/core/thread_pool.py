"""
=============================================================================
WORKER POOL
=============================================================================

A fixed number of worker threads pull jobs from one bounded queue. The
acceptor puts each accepted connection on the queue; a free worker takes
it and runs the whole exchange before taking the next one.

    acceptor ──submit()──► ┌─────┬─────┬─────┐  queue.Queue(maxsize=Q)
                           │ job │ job │ ... │
                           └──┬──┴──┬──┴──┬──┘
                              ▼     ▼     ▼
                          Worker-0  ...  Worker-(N-1)     all N started
                                                          by start()

=============================================================================
ADMISSION CONTROL
=============================================================================

submit() blocks while the queue is full. With all N workers busy and Q
jobs already waiting, the acceptor stops calling accept() until a worker
frees up. Nothing is rejected or shed; further clients wait in the
kernel's listen backlog.

=============================================================================
ISOLATION
=============================================================================

A job that raises is logged and counted. The worker survives and moves
on to the next job, so one bad connection never takes down another.

=============================================================================
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional


logger = logging.getLogger(__name__)

# Queued in place of a job to make one worker exit
_STOP = None


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Job:
    """One queued call, plus when it was queued (for wait-time logging)."""

    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    queued_at: float = field(default_factory=time.monotonic)

    def __call__(self) -> None:
        self.func(*self.args, **self.kwargs)


class Worker(threading.Thread):
    """
    Runs jobs from the shared queue until it receives the stop marker.

    Counters are only written by this thread and read by monitoring code,
    so they need no lock.
    """

    def __init__(self, jobs: queue.Queue, index: int):
        super().__init__(name=f"Worker-{index}", daemon=True)
        self.jobs = jobs
        self.index = index

        self.state = WorkerState.IDLE
        self.completed = 0
        self.failed = 0

    def run(self):
        logger.debug(f"{self.name} started")

        while True:
            job = self.jobs.get()
            try:
                if job is _STOP:
                    break
                self._run_job(job)
            finally:
                self.jobs.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"{self.name} stopped")

    def _run_job(self, job: Job):
        self.state = WorkerState.BUSY
        started = time.monotonic()

        try:
            job()
        except Exception as e:
            self.failed += 1
            logger.exception(
                f"{self.name} job failed after {time.monotonic() - started:.3f}s: {e}"
            )
        else:
            self.completed += 1
            logger.debug(
                f"{self.name} finished job in {time.monotonic() - started:.3f}s "
                f"(waited {started - job.queued_at:.3f}s in queue)"
            )
        finally:
            self.state = WorkerState.IDLE


class ThreadPool:
    """
    Fixed-size thread pool with a bounded, blocking job queue.

    Usage:
        pool = ThreadPool(workers=10)
        pool.start()
        pool.submit(handle, args=(conn,))   # blocks while the queue is full
        pool.shutdown(wait=True)
    """

    def __init__(self, workers: int = 10, queue_size: Optional[int] = None):
        """
        Args:
            workers: Number of worker threads, all started by start().
            queue_size: Capacity of the job queue. Defaults to `workers`.
        """
        if workers < 1:
            raise ValueError("workers must be >= 1")

        self.workers = workers
        self.queue_size = workers if queue_size is None else queue_size

        self._jobs: queue.Queue = queue.Queue(maxsize=self.queue_size)
        self._threads: List[Worker] = []
        self._lock = threading.Lock()
        self._running = False

    def start(self):
        """Start every worker thread. A second call does nothing."""
        with self._lock:
            if self._running:
                return

            logger.info(f"Starting thread pool with {self.workers} workers")
            self._threads = [Worker(self._jobs, i) for i in range(self.workers)]
            for thread in self._threads:
                thread.start()
            self._running = True

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Queue func(*args, **kwargs) for a worker.

        Blocks while the queue is full.

        Args:
            timeout: Longest wait for queue space. None waits forever.

        Raises:
            RuntimeError: The pool is not running.
            queue.Full: `timeout` passed without queue space.
        """
        if not self._running:
            raise RuntimeError("Thread pool is not running")

        self._jobs.put(Job(func, args, kwargs or {}), timeout=timeout)

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the pool.

        Args:
            wait: Run the jobs already queued before stopping. With False
                  they are dropped.
            timeout: Longest wait for the queue to drain when wait=True.
        """
        with self._lock:
            if not self._running:
                return
            self._running = False

        logger.info("Shutting down thread pool...")

        if wait:
            self._drain(timeout)
        else:
            self._discard_queued()

        for _ in self._threads:
            try:
                self._jobs.put(_STOP, timeout=1.0)
            except queue.Full:
                logger.warning("Could not deliver stop signal to a worker")

        for thread in self._threads:
            thread.join(timeout=2.0)

        logger.info("Thread pool shutdown complete")

    def _drain(self, timeout: Optional[float]):
        """Wait for every queued job to finish, for at most `timeout` seconds."""
        waiter = threading.Thread(
            target=self._jobs.join, name="ThreadPool-drain", daemon=True
        )
        waiter.start()
        waiter.join(timeout)

        if waiter.is_alive():
            logger.warning("Shutdown timeout, abandoning queued jobs")

    def _discard_queued(self):
        while True:
            try:
                self._jobs.get_nowait()
            except queue.Empty:
                return
            self._jobs.task_done()

    # =========================================================================
    # MONITORING
    # =========================================================================

    @property
    def busy_workers(self) -> int:
        return sum(1 for t in self._threads if t.state is WorkerState.BUSY)

    @property
    def idle_workers(self) -> int:
        return sum(1 for t in self._threads if t.state is WorkerState.IDLE)

    @property
    def stats(self) -> dict:
        """Worker and job counts, for logging and tests."""
        return {
            "workers": {
                "total": len(self._threads),
                "busy": self.busy_workers,
                "idle": self.idle_workers,
            },
            "tasks": {
                "queued": self._jobs.qsize(),
                "completed": sum(t.completed for t in self._threads),
                "failed": sum(t.failed for t in self._threads),
            },
        }
