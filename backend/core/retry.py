import logging
import threading
import time
from typing import Callable, TypeVar

from core.errors import SquareApiError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_with_backoff(
    operation: Callable[[], T],
    retries: int = 3,
    initial_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run `operation`, retrying only when Square answers 429.

    Delay before retry n (0-based) is initial_delay * 2**n. After `retries`
    retries the last 429 is raised; any other error is raised immediately.
    """
    attempt = 0
    while True:
        try:
            return operation()
        except SquareApiError as e:
            if not e.is_rate_limited or attempt >= retries:
                raise
            delay = initial_delay * (2 ** attempt)
            logger.warning("Rate limited. Retrying in %.2fs (attempt %d of %d)", delay, attempt + 1, retries)
            sleep(delay)
            attempt += 1


class RequestThrottle:
    """Caps outbound requests per one-second window, pausing once the cap is hit."""

    def __init__(
        self,
        max_per_second: int = 25,
        pause: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_per_second = max_per_second
        self.pause = pause
        self._clock = clock
        self._sleep = sleep
        self._count = 0
        self._window_start = clock()
        self._lock = threading.Lock()

    def wait(self) -> None:
        if self.max_per_second <= 0:
            return
        # held while pausing so queued callers wait for the next window
        with self._lock:
            now = self._clock()
            if now - self._window_start >= 1.0:
                self._window_start = now
                self._count = 0
            self._count += 1
            if self._count > self.max_per_second:
                logger.debug("Throttling Square requests for %.2fs", self.pause)
                self._sleep(self.pause)
                self._window_start = self._clock()
                self._count = 1
