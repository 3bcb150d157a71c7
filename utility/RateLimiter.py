# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-27
# Description: RateLimiter.py
# -----------------------------------------------------------------------------
import threading
import time
from collections import deque
from typing import Callable, Deque, Optional, TypeVar

from utility.errors import TransientProviderFailure
from utility.logging_utils import get_class_logger

T = TypeVar("T")


class RateLimiter:
    """
    Serializes outbound calls to a provider.

    Enforces a minimum spacing between calls and, optionally, a ceiling on
    calls per sliding window. Callers block until a slot is free; if that
    would take longer than wait_timeout the call is rejected as transient.
    """

    def __init__(
            self,
            *,
            name: str,
            min_interval_seconds: float = 0.0,
            max_calls: Optional[int] = None,
            window_seconds: float = 3600.0,
            wait_timeout_seconds: float = 30.0,
            clock: Callable[[], float] = time.monotonic,
            sleep: Callable[[float], None] = time.sleep,
            logger=None,
    ):
        self.name = name
        self.min_interval_seconds = min_interval_seconds
        self.max_calls = max_calls
        self.window_seconds = window_seconds
        self.wait_timeout_seconds = wait_timeout_seconds
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_call: Optional[float] = None
        self._calls: Deque[float] = deque()
        self.logger = logger or get_class_logger(self.__class__)

    def _wait_needed(self, now: float) -> float:
        wait = 0.0
        if self._last_call is not None and self.min_interval_seconds > 0:
            wait = max(wait, self._last_call + self.min_interval_seconds - now)

        if self.max_calls:
            while self._calls and self._calls[0] <= now - self.window_seconds:
                self._calls.popleft()
            if len(self._calls) >= self.max_calls:
                wait = max(wait, self._calls[0] + self.window_seconds - now)
        return wait

    def acquire(self) -> None:
        with self._lock:
            wait = self._wait_needed(self._clock())
            if wait > self.wait_timeout_seconds:
                raise TransientProviderFailure(
                    f"rate limit wait of {wait:.1f}s exceeds {self.wait_timeout_seconds:.1f}s",
                    provider=self.name,
                    retry_after=wait,
                )
            if wait > 0:
                self.logger.debug("Rate limiter '%s' delaying call by %.3fs", self.name, wait)
                self._sleep(wait)

            now = self._clock()
            self._last_call = now
            if self.max_calls:
                self._calls.append(now)

    def call(self, fn: Callable[..., T], *args, **kwargs) -> T:
        self.acquire()
        return fn(*args, **kwargs)
