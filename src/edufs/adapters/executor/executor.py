"""Executor adapters implementing ExecutorPort."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Callable


class SynchronousExecutor:
    """Runs each submitted upload immediately in the calling thread.

    Gives the concurrent publish path deterministic scheduling in tests.
    """

    def submit(
        self,
        fn: Callable[..., object],
        *args: object,
        **kwargs: object,
    ) -> Future[object]:
        """Call fn now and return an already-resolved future."""
        future: Future[object] = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future

    def __enter__(self) -> SynchronousExecutor:
        return self

    def __exit__(
        self, exc_type: object, exc_val: object, exc_tb: object
    ) -> object | None:
        return None


class ThreadPoolExecutorAdapter:
    """Thread pool for uploading several files at once.

    Each ``with`` block runs on a fresh pool that is shut down when the
    block exits, so one adapter can serve many publishes.

    Args:
        max_workers: Number of concurrent uploads. None uses the
            ThreadPoolExecutor default.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        self._max_workers = max_workers
        self._executor: ThreadPoolExecutor | None = None

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers, thread_name_prefix="edufs-upload"
            )
        return self._executor

    def submit(
        self,
        fn: Callable[..., object],
        *args: object,
        **kwargs: object,
    ) -> Future[object]:
        """Schedule fn on the pool."""
        return self._pool().submit(fn, *args, **kwargs)

    def __enter__(self) -> ThreadPoolExecutorAdapter:
        self._pool()
        return self

    def __exit__(
        self, exc_type: object, exc_val: object, exc_tb: object
    ) -> object | None:
        executor, self._executor = self._executor, None
        if executor is not None:
            # Waits for every submitted upload.
            executor.shutdown(wait=True)
        return None
