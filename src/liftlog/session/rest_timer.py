"""Rest countdown with audio cues."""

import asyncio
import logging
from enum import Enum
from typing import Callable

from .clock import format_clock

logger = logging.getLogger(__name__)

ADJUST_STEP_SECONDS = 10
WARNING_SECONDS = 3


class TimerStatus(str, Enum):
    """Rest timer state."""

    RUNNING = "running"
    EXPIRED = "expired"


class AudioCue(Enum):
    """Beeps played near and at the end of a rest."""

    WARNING = (880, 0.2)  # Hz, seconds
    FINAL = (1200, 0.8)

    @property
    def frequency(self) -> int:
        return self.value[0]

    @property
    def duration(self) -> float:
        return self.value[1]


class RestTimer:
    """Countdown that resumes the session when it reaches zero.

    The timer knows nothing about navigation: ``on_complete`` is whatever the
    engine captured when the rest began. Skipping or closing the timer takes
    the same completion path, so a rest always ends by resuming.
    """

    def __init__(
        self,
        target_seconds: int,
        on_complete: Callable[[], None],
        *,
        on_cue: Callable[[AudioCue], None] | None = None,
    ):
        self.target_seconds = max(0, int(target_seconds))
        self.seconds_left = self.target_seconds
        self.status = TimerStatus.RUNNING
        self._on_complete = on_complete
        self._on_cue = on_cue

    @property
    def is_running(self) -> bool:
        return self.status == TimerStatus.RUNNING

    @property
    def is_urgent(self) -> bool:
        """Whether the countdown is in its final warning seconds."""
        return self.seconds_left <= WARNING_SECONDS

    def get_display(self) -> str:
        return format_clock(self.seconds_left)

    def start(self) -> None:
        """Handle a zero-length rest, which expires immediately."""
        if self.is_running and self.seconds_left == 0:
            self._set_seconds(0, force=True)

    def tick(self) -> None:
        """Advance the countdown by one second."""
        if not self.is_running:
            return
        self._set_seconds(self.seconds_left - 1)

    def add_time(self, seconds: int = ADJUST_STEP_SECONDS) -> None:
        if self.is_running:
            self._set_seconds(self.seconds_left + seconds)

    def subtract_time(self, seconds: int = ADJUST_STEP_SECONDS) -> None:
        if self.is_running:
            self._set_seconds(self.seconds_left - seconds)

    def reset(self) -> None:
        """Restart the countdown from the target duration."""
        if self.is_running:
            self._set_seconds(self.target_seconds)

    def skip(self) -> None:
        """End the rest now."""
        self._complete()

    def close(self) -> None:
        """Dismiss the timer; same as skipping."""
        self._complete()

    async def run(self, interval: float = 1.0) -> None:
        """Tick on a free-running interval until the timer expires."""
        self.start()
        while self.is_running:
            await asyncio.sleep(interval)
            self.tick()

    def _set_seconds(self, seconds: int, force: bool = False) -> None:
        seconds = max(0, seconds)
        if seconds == self.seconds_left and not force:
            return
        self.seconds_left = seconds

        if seconds == 0:
            self._cue(AudioCue.FINAL)
            self._complete()
        elif seconds <= WARNING_SECONDS:
            self._cue(AudioCue.WARNING)

    def _cue(self, cue: AudioCue) -> None:
        if self._on_cue is not None:
            self._on_cue(cue)

    def _complete(self) -> None:
        if not self.is_running:
            return
        self.status = TimerStatus.EXPIRED
        self.seconds_left = 0
        logger.debug("Rest finished")
        self._on_complete()
