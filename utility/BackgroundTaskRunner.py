# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-28
# Description: BackgroundTaskRunner.py
# -----------------------------------------------------------------------------
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Set

from utility.logging_utils import get_class_logger


class BackgroundTaskRunner:
    """
    Fire-and-forget side writes (cache fills, status snapshots).

    Task failures go to the log only; they never reach the caller that
    submitted them. With the default single worker, tasks run in submission
    order, so later snapshots of the same key win.
    """

    def __init__(self, *, max_workers: int = 1, logger=None):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="bizsearch-bg")
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()
        self._closed = False
        self.logger = logger or get_class_logger(self.__class__)

    def submit(self, label: str, fn: Callable, *args, **kwargs) -> None:
        if self._closed:
            self.logger.warning("Background runner closed; dropping task '%s'", label)
            return

        def _run():
            try:
                fn(*args, **kwargs)
            except Exception as e:
                self.logger.warning("Background task '%s' failed: %s", label, e)

        fut = self._executor.submit(_run)
        with self._lock:
            self._pending.add(fut)
        fut.add_done_callback(self._discard)

    def _discard(self, fut: Future) -> None:
        with self._lock:
            self._pending.discard(fut)

    def flush(self, timeout: float | None = None) -> None:
        """Block until every task submitted so far has finished."""
        with self._lock:
            outstanding = list(self._pending)
        if outstanding:
            wait(outstanding, timeout=timeout)

    def shutdown(self) -> None:
        self._closed = True
        self._executor.shutdown(wait=True)
