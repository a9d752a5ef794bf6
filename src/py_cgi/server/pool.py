"""Worker pool — a fixed number of threads draining a job queue.

Each accepted connection becomes one job.  A worker takes a job, runs
it to completion (socket read, script run, socket write, all
blocking), and only then takes the next one.  Jobs start in the order
they were submitted; they finish in whatever order the work allows.

The pool never grows: if every worker is busy, new jobs wait in the
queue.  Shutdown puts one stop marker per worker at the back of the
queue, so jobs already submitted are still served first.
"""

from __future__ import annotations

import queue
import threading
from typing import TYPE_CHECKING, TypeAlias

from py_cgi.errors import PoolError
from py_cgi.logging import Logger, get_logger

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

Job: TypeAlias = "Callable[[], None]"

_STOP = None


class WorkerPool:
    """A fixed-size pool of daemon worker threads."""

    def __init__(self, size: int, *, name: str = "worker", logger: Logger | None = None) -> None:
        """Start *size* workers.

        Raises:
            PoolError: If *size* is less than one.

        """
        if size < 1:
            msg = f"Worker pool size must be at least 1, got {size}"
            raise PoolError(msg)
        self._size = size
        self._jobs: queue.Queue[Job | None] = queue.Queue()
        self._logger = logger if logger is not None else get_logger()
        self._closed = False
        self._lock = threading.Lock()
        self._workers = [
            threading.Thread(target=self._work, name=f"{name}-{i}", daemon=True)
            for i in range(size)
        ]
        for worker in self._workers:
            worker.start()

    @property
    def size(self) -> int:
        """Return the number of workers."""
        return self._size

    @property
    def closed(self) -> bool:
        """Return whether the pool has been shut down."""
        return self._closed

    @property
    def pending(self) -> int:
        """Return the approximate number of queued, not-yet-started jobs."""
        return self._jobs.qsize()

    def submit(self, job: Job) -> None:
        """Queue *job* for the next free worker.

        Raises:
            PoolError: If the pool has been shut down.

        """
        with self._lock:
            if self._closed:
                msg = "Cannot submit to a worker pool that has been shut down"
                raise PoolError(msg)
            self._jobs.put(job)

    def _work(self) -> None:
        """Run jobs until the stop marker arrives."""
        while True:
            job = self._jobs.get()
            try:
                if job is _STOP:
                    return
                job()
            except Exception as e:  # noqa: BLE001
                self._logger.error(
                    f"{threading.current_thread().name} job failed: {e!r}", source="pool"
                )
            finally:
                self._jobs.task_done()

    def join(self) -> None:
        """Block until every submitted job has finished."""
        self._jobs.join()

    def shutdown(self, *, wait: bool = True) -> None:
        """Stop accepting jobs and let the workers exit.

        Args:
            wait: If True, block until every worker has exited.

        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for _ in self._workers:
                self._jobs.put(_STOP)
        if wait:
            for worker in self._workers:
                worker.join()

    def __enter__(self) -> WorkerPool:
        """Return the pool for use in a ``with`` block."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Shut the pool down, waiting for outstanding jobs."""
        self.shutdown(wait=True)
