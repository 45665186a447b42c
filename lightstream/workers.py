"""A pool of worker threads that process jobs in the order they were given."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

__all__ = ["Worker", "WorkersPool"]

_log = logging.getLogger(__name__)


class Worker:
    """One thread of a pool, holding its own job object."""

    def __init__(self, pool: WorkersPool, number: int, name: str, job: Any) -> None:
        self.pool = pool
        self.number = number
        self.name = name
        self.job = job
        self.last_job_time = 0.0
        self.job_timely = False
        self.job_failed = False
        self.job_start_ts = 0.0
        self._has_job = False
        self._cond = threading.Condition()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    @property
    def has_job(self) -> bool:
        """Whether the worker is busy with a job."""
        return self._has_job

    def _give_job(self) -> None:
        with self._cond:
            self._has_job = True
            self._cond.notify()

    def _run(self) -> None:
        pool = self.pool
        _log.debug("Hello! I am a worker %s", self.name)
        while not pool._stop:
            with self._cond:
                self._cond.wait_for(lambda: self._has_job)

            if not pool._stop:
                start_ts = time.monotonic()
                try:
                    ok = bool(pool._run_job(self))
                except Exception:
                    _log.exception("Worker %s: job crashed", self.name)
                    ok = False
                self.job_failed = not ok
                if ok:
                    self.job_start_ts = start_ts
                    self.last_job_time = time.monotonic() - start_ts
                self._has_job = False

            with pool._free_cond:
                pool._free_workers += 1
                pool._free_cond.notify()
        _log.debug("Bye-bye (worker %s)", self.name)


class WorkersPool:
    """Workers that run ``run_job`` on their jobs, handed out by :meth:`wait`."""

    def __init__(
        self,
        name: str,
        wr_prefix: str,
        n_workers: int,
        desired_interval: float,
        job_init: Callable[[], Any],
        job_destroy: Callable[[Any], None],
        run_job: Callable[[Worker], bool],
    ) -> None:
        _log.info("Creating pool %s with %u workers ...", name, n_workers)
        if n_workers < 1:
            raise ValueError("A pool needs at least one worker")
        self.name = name
        self.desired_interval = desired_interval
        self.approx_job_time = 0.0
        self._job_destroy = job_destroy
        self._run_job = run_job
        self._stop = False
        self._destroyed = False
        self._free_cond = threading.Condition()
        self._free_workers = 0
        self._queue: list[Worker] = []  # assigned workers, oldest first
        self.workers: list[Worker] = []
        for number in range(n_workers):
            worker = Worker(self, number, f"{wr_prefix}-{number}", job_init())
            self.workers.append(worker)
            worker._thread.start()
            self._free_workers += 1

    @property
    def n_workers(self) -> int:
        return len(self.workers)

    def destroy(self) -> None:
        """Stop all workers, join their threads and destroy their jobs."""
        if self._destroyed:
            return
        self._destroyed = True
        _log.info("Destroying workers pool %s ...", self.name)
        self._stop = True
        for worker in self.workers:
            worker._give_job()  # final job: die
            worker._thread.join()
            self._job_destroy(worker.job)

    def wait(self) -> Worker:
        """Block until a worker is free and return it.

        The oldest assigned worker is returned when it has finished, with
        ``job_timely`` set; otherwise the first free worker, not timely.
        """
        with self._free_cond:
            self._free_cond.wait_for(lambda: self._free_workers > 0)

        if self._queue and not self._queue[0].has_job:
            ready = self._queue.pop(0)
            ready.job_timely = True
            return ready

        ready = next(worker for worker in self.workers if not worker.has_job)
        ready.job_timely = False
        return ready

    def assign(self, worker: Worker) -> None:
        """Start the worker on its job and mark it as the latest one."""
        if worker in self._queue:
            self._queue.remove(worker)
        self._queue.append(worker)
        worker._give_job()
        with self._free_cond:
            self._free_workers -= 1

    def get_fluency_delay(self, worker: Worker) -> float:
        """Update the average job time and return the delay before the next grab."""
        approx = self.approx_job_time * 0.9 + worker.last_job_time * 0.1
        _log.debug(
            "Correcting pool's %s approx_job_time: %.3f -> %.3f (last_job_time=%.3f)",
            self.name, self.approx_job_time, approx, worker.last_job_time,
        )
        self.approx_job_time = approx
        min_delay = approx / self.n_workers
        if self.desired_interval > 0 and min_delay > 0 and self.desired_interval > min_delay:
            return self.desired_interval
        return min_delay

    def __enter__(self) -> WorkersPool:
        return self

    def __exit__(self, *args: object) -> None:
        self.destroy()