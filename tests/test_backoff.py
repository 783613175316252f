from datetime import datetime, timedelta, timezone

import pytest

from netdiag.backoff import BackoffEventRecorder, EventInfo, join_event_messages
from netdiag.events import EVENT_NORMAL, EVENT_WARNING, InMemoryRecorder


class FakeClock:
    def __init__(self):
        self.now = datetime(2000, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, delta):
        self.now += delta


def test_with_short_window():
    short_duration = timedelta(milliseconds=20)
    short_count_max = 3
    long_duration = 2 * short_duration
    long_count_max = 60
    backoff_duration = long_duration
    excessive_event_count = 10

    clock = FakeClock()
    in_memory = InMemoryRecorder("TestWithShortWindow")
    r = BackoffEventRecorder(
        in_memory,
        short_window=short_duration,
        short_window_max=short_count_max,
        long_window=long_duration,
        long_window_max=long_count_max,
        backoff=backoff_duration,
        clock=clock,
    )

    r.event("TestWithShortWindow", "TEST")
    clock.advance(short_duration)
    for _ in range(short_count_max + excessive_event_count):
        r.event("TestWithShortWindow", "TEST")
    clock.advance(backoff_duration)
    for _ in range(short_count_max - 1):
        r.event("TestWithShortWindow", "TEST")

    events = in_memory.events()
    assert len(events) == 1 + short_count_max + 1 + short_count_max - 1
    summary = events[1 + short_count_max + 1].message
    assert len(summary.split("\n")) == excessive_event_count


def test_with_long_window():
    short_duration = timedelta(milliseconds=20)
    short_count_max = 3
    long_duration = 5 * short_duration
    long_count_max = (short_count_max - 1) * 3
    backoff_duration = long_duration
    excessive_event_count = 10

    clock = FakeClock()
    in_memory = InMemoryRecorder("TestWithLongWindow")
    r = BackoffEventRecorder(
        in_memory,
        short_window=short_duration,
        short_window_max=short_count_max,
        long_window=long_duration,
        long_window_max=long_count_max,
        backoff=backoff_duration,
        clock=clock,
    )

    fired = 0
    while fired < long_count_max:
        for _ in range(short_count_max - 1):
            r.event("TestWithLongWindow", "TEST")
        clock.advance(short_duration)
        fired += short_count_max - 1

    for _ in range(excessive_event_count):
        r.event("TestWithLongWindow", "TEST")

    clock.advance(backoff_duration)

    for _ in range(2):
        r.event("TestWithLongWindow", "TEST")

    events = in_memory.events()
    assert len(events) == long_count_max + 1 + 1
    assert len(events[long_count_max].message.split("\n")) == excessive_event_count + 1


def test_warnings_are_forwarded_as_warnings():
    in_memory = InMemoryRecorder()
    r = BackoffEventRecorder(in_memory, clock=FakeClock())
    r.warning("Outage", "down %s", "host")
    r.event("Restored", "up")
    assert [(e.type, e.reason, e.message) for e in in_memory.events()] == [
        (EVENT_WARNING, "Outage", "down host"),
        (EVENT_NORMAL, "Restored", "up"),
    ]


def test_events_held_during_backoff():
    clock = FakeClock()
    in_memory = InMemoryRecorder()
    r = BackoffEventRecorder(
        in_memory,
        short_window=timedelta(seconds=10),
        short_window_max=1,
        backoff=timedelta(seconds=60),
        clock=clock,
    )
    r.event("R", "a")
    r.event("R", "b")
    assert len(in_memory.events()) == 1
    clock.advance(timedelta(seconds=5))
    r.event("R", "c")
    assert len(in_memory.events()) == 1


def test_non_positive_window_rejected():
    with pytest.raises(ValueError):
        BackoffEventRecorder(InMemoryRecorder(), short_window=timedelta(0))


def test_event_info_str():
    info = EventInfo(datetime(2000, 1, 1, tzinfo=timezone.utc), "m")
    assert str(info) == "2000-01-01T00:00:00Z: m"


def test_join_event_messages():
    assert join_event_messages([]) == ""
    one = EventInfo(datetime(2000, 1, 1, tzinfo=timezone.utc), "only")
    assert join_event_messages([one]) == "only"
    two = EventInfo(datetime(2000, 1, 1, 0, 0, 1, tzinfo=timezone.utc), "second")
    assert join_event_messages([one, two]) == f"{one}\n{two}"