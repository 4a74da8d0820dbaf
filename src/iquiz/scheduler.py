import logging
import math
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Fires a callback at a fixed wall-clock rate from one worker thread.

    Ticks are due every `interval` seconds from `start()`; a callback that
    overruns makes the missed ticks collapse into the next one. Changing the
    interval means `stop()` followed by `start()`; a running timer is never
    rescheduled in place.
    """

    def __init__(self, name: str = "refresh-scheduler"):
        self.name = name
        self._lock = threading.Lock()
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._interval: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def interval(self) -> Optional[float]:
        return self._interval

    def start(self, interval_seconds: float, callback: Callable[[], object]) -> None:
        if not math.isfinite(interval_seconds) or interval_seconds <= 0:
            raise ValueError(
                f"interval must be positive and finite, got {interval_seconds}"
            )
        with self._lock:
            if self.running:
                raise RuntimeError("scheduler is already running")
            stop_event = threading.Event()
            self._stop_event = stop_event
            self._interval = interval_seconds
            self._thread = threading.Thread(
                target=self._run,
                args=(interval_seconds, callback, stop_event),
                name=self.name,
                daemon=True,
            )
            self._thread.start()
        logger.info(f"Refresh scheduler started [interval: {interval_seconds}s]")

    def stop(self) -> None:
        """Prevent further ticks. An in-flight callback is left to finish."""
        with self._lock:
            stop_event = self._stop_event
            self._thread = None
            self._stop_event = None
            self._interval = None
            if stop_event is None:
                return
            stop_event.set()
        logger.info("Refresh scheduler stopped")

    def _run(
        self,
        interval: float,
        callback: Callable[[], object],
        stop_event: threading.Event,
    ) -> None:
        next_run = time.monotonic() + interval
        while not stop_event.wait(max(0.0, next_run - time.monotonic())):
            # stop() sets the event under this lock; a tick not yet past this
            # check when stop() returns never runs.
            with self._lock:
                if stop_event.is_set():
                    break
            try:
                callback()
            except Exception:
                logger.exception("Scheduled refresh raised")
            next_run += interval
            # An overrun runs the tick that just came due; older ones are dropped.
            behind = time.monotonic() - next_run
            if behind > interval:
                next_run += math.floor(behind / interval) * interval
