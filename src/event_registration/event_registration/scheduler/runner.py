from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_SWEEP_HOUR
from ..events.sweep import EventSweeper

logger = logging.getLogger(__name__)


def next_run_at(now: datetime, hour: int) -> datetime:
    """First `hour:00` strictly after `now`."""
    candidate = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


class DailySweepScheduler:
    """Runs the event sweep once a day on a background daemon thread."""

    def __init__(
        self,
        sweeper: EventSweeper,
        *,
        hour: int = DEFAULT_SWEEP_HOUR,
        clock: Callable[[], datetime] = now_local,
    ):
        if not 0 <= int(hour) <= 23:
            raise ValueError("hour must be between 0 and 23")
        self._sweeper = sweeper
        self._hour = int(hour)
        self._clock = clock
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="event-sweep", daemon=True)
        self._thread.start()
        logger.info("Daily event sweep scheduled at %02d:00", self._hour)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_once(self):
        try:
            return self._sweeper.run(now=self._clock())
        except Exception:
            logger.exception("Scheduled event sweep failed")
            return None

    def _loop(self) -> None:
        while not self._stop.is_set():
            now = self._clock()
            delay = (next_run_at(now, self._hour) - now).total_seconds()
            if self._stop.wait(delay):
                break
            self.run_once()
