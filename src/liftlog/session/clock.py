"""Time sources for a session."""

import time
from typing import Callable

Clock = Callable[[], int]


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def format_clock(seconds: int) -> str:
    """Format seconds as ``m:ss``."""
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"


class SessionClock:
    """Elapsed time since the session started.

    Independent of the rest timer: it keeps counting while resting.
    """

    def __init__(self, start_time: int, clock: Clock = now_millis):
        self.start_time = start_time
        self._clock = clock

    @property
    def elapsed_seconds(self) -> int:
        return max(0, (self._clock() - self.start_time) // 1000)

    def get_display(self) -> str:
        return format_clock(self.elapsed_seconds)
