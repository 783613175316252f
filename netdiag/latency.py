"""Capture of DNS and TCP connect latency for a connection attempt."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class LatencyInfo:
    """Start times and durations of the DNS lookup and TCP connect phases."""

    dns: timedelta = timedelta(0)
    connect: timedelta = timedelta(0)
    dns_start: datetime | None = None
    connect_start: datetime | None = None
    clock: Callable[[], datetime] = field(default=_utcnow, repr=False, compare=False)

    def dns_started(self) -> None:
        """Record the start of the DNS lookup."""
        self.dns_start = self.clock()

    def dns_done(self) -> None:
        """Record the end of the DNS lookup."""
        if self.dns_start is not None:
            self.dns = self.clock() - self.dns_start

    def connect_started(self, addr: str) -> None:
        """Record the start of the first connect attempt."""
        if self.connect_start is None:
            self.connect_start = self.clock()

    def connect_done(self, addr: str) -> None:
        """Record the end of a connect attempt."""
        if self.connect_start is not None:
            self.connect = self.clock() - self.connect_start