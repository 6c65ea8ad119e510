from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class InlineDispatcher:
    """Runs the job in the calling thread and returns its result."""

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        return fn(*args, **kwargs)

    def shutdown(self) -> None:
        pass


class ThreadPoolDispatcher:
    """Runs jobs on a small worker pool; callers do not wait for the result."""

    def __init__(self, max_workers: int = 4):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify")

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Optional[Any]:
        future: Future = self._executor.submit(fn, *args, **kwargs)
        future.add_done_callback(self._log_failure)
        return None

    @staticmethod
    def _log_failure(future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error("Notification job failed", exc_info=exc)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
