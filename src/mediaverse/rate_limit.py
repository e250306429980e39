"""Fixed-delay pacing between provider requests."""

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class FixedDelayLimiter:
    """Sleeps a fixed interval each time wait() is called.

    A zero interval never sleeps, which is what tests inject.
    """

    def __init__(self, interval_seconds: float, sleep: Callable[[float], None] = time.sleep):
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        self.interval_seconds = interval_seconds
        self._sleep = sleep

    @classmethod
    def from_milliseconds(cls, interval_ms: int) -> "FixedDelayLimiter":
        return cls(interval_ms / 1000.0)

    def wait(self) -> None:
        if self.interval_seconds > 0:
            logger.debug(f"Pausing {self.interval_seconds}s before the next request")
            self._sleep(self.interval_seconds)
