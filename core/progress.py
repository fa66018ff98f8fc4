# progress.py reports bisection progress from a separate thread.
# The engine publishes into a single-slot channel that overwrites on put, so a
# slow reporter can never hold up the search.

import logging
import threading
import time
from dataclasses import dataclass

from colors import SliceColors as SC

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    low: int
    high: int
    malicious: bool
    elapsed: float


class LatestValue:
    """Single-slot channel holding only the newest value."""

    def __init__(self):
        self._cond = threading.Condition()
        self._value = None
        self._fresh = False
        self._closed = False

    def put(self, value):
        with self._cond:
            if self._closed:
                raise RuntimeError("put on closed channel")
            self._value = value
            self._fresh = True
            self._cond.notify_all()

    def take(self):
        """Newest value not yet taken, or None."""
        with self._cond:
            if not self._fresh:
                return None
            self._fresh = False
            return self._value

    def close(self):
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def wait_closed(self, timeout=None) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: self._closed, timeout)


def format_event(event: ProgressEvent) -> str:
    return f"0x{event.low:X} -> 0x{event.high:X} - malicious: {event.malicious} - {event.elapsed:.2f}s"


def print_event(event: ProgressEvent):
    print(SC.paint(SC.for_flag(event.malicious), f"[*] {format_event(event)}"), flush=True)


class ProgressReporter(threading.Thread):
    """
    Emits the most recent ProgressEvent once per interval.

    Ticks are counted from `started` (the search start), or from the moment
    the reporter starts when none is given. A tick with no new
    event since the previous one emits nothing. The thread exits as soon as
    the channel is closed.
    """

    def __init__(self, channel: LatestValue, interval: float = 2.0, emit=print_event, started=None):
        super().__init__(name="progress-reporter", daemon=True)
        self.channel = channel
        self.interval = interval
        self.emit = emit
        self.reported = 0
        self.started = started

    def run(self):
        origin = time.monotonic() if self.started is None else self.started
        next_tick = origin + self.interval
        now = time.monotonic()
        while next_tick <= now:
            next_tick += self.interval

        while True:
            if self.channel.wait_closed(max(0.0, next_tick - time.monotonic())):
                logger.debug(f"Progress channel closed after {self.reported} reports")
                return

            event = self.channel.take()
            if event is not None:
                try:
                    self.emit(event)
                except Exception as e:
                    logger.error(f"Progress output failed: {e}")
                self.reported += 1

            now = time.monotonic()
            while next_tick <= now:
                next_tick += self.interval
