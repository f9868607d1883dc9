from __future__ import annotations
import asyncio
import logging
from typing import Optional

logger = logging.getLogger(__name__)


def format_clock(seconds: int) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class CountdownTimer:
    """Exam countdown. Reaching zero only marks the timer expired."""

    def __init__(self, duration_seconds: int, *, tick_seconds: float = 1.0) -> None:
        self.duration_seconds = max(0, int(duration_seconds))
        self.remaining = self.duration_seconds
        self.tick_seconds = tick_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def expired(self) -> bool:
        return self.remaining == 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> int:
        if self.remaining > 0:
            self.remaining -= 1
        return self.remaining

    def start(self) -> None:
        # Must be called from inside the event loop that owns the session
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while self.remaining > 0:
            await asyncio.sleep(self.tick_seconds)
            self.tick()
        logger.info("Exam timer expired after %ss", self.duration_seconds)

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def format(self) -> str:
        return format_clock(self.remaining)
