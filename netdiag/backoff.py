"""An event recorder that backs off when events arrive too quickly."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from netdiag.events import EVENT_NORMAL, EVENT_WARNING

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc).astimezone()


def _rfc3339(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.astimezone()
    base = ts.strftime("%Y-%m-%dT%H:%M:%S")
    offset = ts.utcoffset()
    if not offset:
        return base + "Z"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    total = abs(total)
    return f"{base}{sign}{total // 3600:02d}:{total % 3600 // 60:02d}"


@dataclass
class EventInfo:
    """An event message and the time it was recorded."""

    timestamp: datetime
    message: str

    def __str__(self) -> str:
        return f"{_rfc3339(self.timestamp)}: {self.message}"


def join_event_messages(event_infos: list[EventInfo]) -> str:
    """Join events into one summary message, one timestamped line each."""
    if not event_infos:
        return ""
    if len(event_infos) == 1:
        return event_infos[0].message
    return "\n".join(str(info) for info in event_infos)


class _Ticker:
    """Fires at each period after its start; missed ticks collapse into one."""

    def __init__(self, period: timedelta, now: datetime):
        if period <= timedelta(0):
            raise ValueError("ticker period must be positive")
        self.period = period
        self._start = now
        self._next = now + period

    def poll(self, now: datetime) -> bool:
        if now < self._next:
            return False
        ticks = (now - self._start) // self.period
        self._next = self._start + (ticks + 1) * self.period
        return True


class BackoffEventRecorder:
    """Wraps a recorder, holding events back while they arrive too fast.

    If more than ``short_window_max`` events arrive within ``short_window``, or
    more than ``long_window_max`` within ``long_window``, recording pauses for
    ``backoff``. Events kept during the pause are recorded afterwards as one
    summary event per type and reason.
    """

    def __init__(
        self,
        recorder,
        *,
        short_window: timedelta = timedelta(seconds=30),
        short_window_max: int = 30,
        long_window: timedelta = timedelta(minutes=10),
        long_window_max: int = 600,
        backoff: timedelta = timedelta(minutes=30),
        clock: Callable[[], datetime] = _now,
    ):
        self._recorder = recorder
        self._clock = clock
        self._lock = threading.Lock()
        self._events: dict[str, dict[str, list[EventInfo]]] = {}
        self.short_window = short_window
        self.short_window_max = short_window_max
        self.long_window = long_window
        self.long_window_max = long_window_max
        self.backoff = backoff
        self._short_count = 0
        self._long_count = 0
        now = clock()
        self._short_ticker = _Ticker(short_window, now)
        self._long_ticker = _Ticker(long_window, now)
        self._backoff_ticker: _Ticker | None = None

    def event(self, reason: str, message: str, *args) -> None:
        """Record a normal event; ``args`` are %-formatted into ``message``."""
        self._record(EVENT_NORMAL, reason, message % args if args else message)

    def warning(self, reason: str, message: str, *args) -> None:
        """Record a warning event; ``args`` are %-formatted into ``message``."""
        self._record(EVENT_WARNING, reason, message % args if args else message)

    def _record(self, event_type: str, reason: str, message: str) -> None:
        with self._lock:
            now = self._clock()
            self._events.setdefault(event_type, {}).setdefault(reason, []).append(
                EventInfo(now, message)
            )

            if self._backoff_ticker is not None:
                if not self._backoff_ticker.poll(now):
                    return
                logger.debug("Resuming connectivity event recording.")
                self._backoff_ticker = None
                self._long_count = 0
                self._short_count = 0

            if self._short_ticker.poll(now):
                self._short_count = 0
            else:
                self._short_count += 1
            if self._long_ticker.poll(now):
                self._long_count = 0
            else:
                self._long_count += 1

            short_exceeded = self._short_count > self.short_window_max
            if short_exceeded or self._long_count > self.long_window_max:
                if short_exceeded:
                    logger.debug(
                        "More than %d events (%d) in the last %s.",
                        self.short_window_max, self._short_count, self.short_window,
                    )
                else:
                    logger.debug(
                        "More than %d events (%d) in the last %s.",
                        self.long_window_max, self._long_count, self.long_window,
                    )
                logger.debug("Backing off event recording for the next %s.", self.backoff)
                self._backoff_ticker = _Ticker(self.backoff, now)
                return

            for kind, by_reason in self._events.items():
                for event_reason, infos in by_reason.items():
                    infos.sort(key=lambda info: info.timestamp)
                    summary = join_event_messages(infos)
                    if kind == EVENT_NORMAL:
                        self._recorder.event(event_reason, summary)
                    elif kind == EVENT_WARNING:
                        self._recorder.warning(event_reason, summary)
            self._events = {}