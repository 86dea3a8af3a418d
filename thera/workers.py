"""A pool of reusable worker threads for background tasks."""

from __future__ import annotations

import atexit
import functools
import queue
import threading
from typing import Callable, Optional, Set

from .console import log_error, log_warning

Task = Callable[[], object]


class Worker:
    """A thread that runs one task at a time and then waits for the next."""

    def __init__(
        self,
        task: Optional[Task] = None,
        cancel_task: Optional[Task] = None,
        on_idle: Optional[Callable[["Worker"], object]] = None,
    ) -> None:
        self._condition = threading.Condition()
        self._task = task
        self._cancel_task = cancel_task
        self._on_idle = on_idle
        self._alive = True
        self._thread = threading.Thread(target=self._run, name="thera-worker", daemon=True)
        self._thread.start()

    @property
    def thread_id(self) -> Optional[int]:
        return self._thread.ident

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive()

    def _run(self) -> None:
        while True:
            with self._condition:
                while self._alive and self._task is None:
                    self._condition.wait()
                if not self._alive:
                    break
                task = self._task
            try:
                task()
            except Exception as exc:  # a failing task must not kill the worker
                log_error(f"Worker task failed: {exc!r}", False)
            with self._condition:
                self._task = None
                self._cancel_task = None
                if not self._alive:
                    break
            if self._on_idle is not None:
                self._on_idle(self)

    def assign(self, task: Task, cancel_task: Optional[Task] = None) -> None:
        """Give an idle worker its next task."""
        with self._condition:
            self._task = task
            self._cancel_task = cancel_task
            self._condition.notify_all()

    def _stop(self) -> None:
        with self._condition:
            self._alive = False
            self._condition.notify_all()

    def _join(self, timeout: Optional[float] = None) -> bool:
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def kill(self) -> None:
        """Stop the worker once its current task ends and wait for the thread."""
        self._stop()
        self._join()

    def try_cancel(self) -> bool:
        """Call the running task's cancel function, if it has one."""
        cancel = self._cancel_task
        if cancel is None:
            return False
        cancel()
        return True


class WorkerPool:
    """Hands tasks to idle workers, starting a new worker when none is free."""

    def __init__(self) -> None:
        self._available: "queue.SimpleQueue[Worker]" = queue.SimpleQueue()
        self._workers: Set[Worker] = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._workers)

    @property
    def idle_count(self) -> int:
        return self._available.qsize()

    def run_task(self, task: Task, cancel_task: Optional[Task] = None) -> Worker:
        """Run ``task`` on a worker thread and return that worker."""
        try:
            worker = self._available.get_nowait()
        except queue.Empty:
            worker = Worker(task, cancel_task, on_idle=self._available.put)
            with self._lock:
                self._workers.add(worker)
        else:
            worker.assign(task, cancel_task)
        return worker

    def shutdown(self, timeout: float = 2.0) -> None:
        """Stop every worker, cancelling those that do not finish in time."""
        with self._lock:
            workers = list(self._workers)
            self._workers.clear()
        for worker in workers:
            worker._stop()
            if worker._join(timeout):
                continue
            message = (
                f"Thread id {worker.thread_id} has taken longer than "
                f"{timeout:g} seconds to join."
            )
            if worker.try_cancel():
                message += (
                    " Thread's cancel function was available and called."
                    " It is recommended to handle this within the application."
                )
            else:
                message += " No cancel available. Program may hang indefinitely."
            log_warning(message)
            worker._join()
        while True:
            try:
                self._available.get_nowait()
            except queue.Empty:
                break


@functools.lru_cache(maxsize=None)
def _default_pool() -> WorkerPool:
    pool = WorkerPool()
    atexit.register(pool.shutdown)
    return pool


def run_task(task: Task, cancel_task: Optional[Task] = None) -> Worker:
    """Run ``task`` on the shared worker pool."""
    return _default_pool().run_task(task, cancel_task)


def shutdown_workers() -> None:
    """Stop all workers of the shared pool."""
    _default_pool().shutdown()