"""Helpers for updating the status of connectivity checks."""

from __future__ import annotations

import random
import threading
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Iterable

from netdiag.model import (
    ConflictError,
    LogEntry,
    NotFoundError,
    PodNetworkConnectivityCheck,
    PodNetworkConnectivityCheckCondition,
    PodNetworkConnectivityCheckStatus,
)

UpdateStatusFunc = Callable[[PodNetworkConnectivityCheckStatus], None]

_MAX_LOG_ENTRIES = 10
_RETRY_STEPS = 4
_RETRY_DELAY = 0.01
_RETRY_FACTOR = 5.0
_RETRY_JITTER = 0.1


class CheckClient:
    """An in-memory store of connectivity checks with optimistic concurrency."""

    def __init__(self, checks: Iterable[PodNetworkConnectivityCheck] = ()):
        self._lock = threading.Lock()
        self._checks = {check.name: check.copy() for check in checks}

    def get(self, name: str) -> PodNetworkConnectivityCheck:
        """Return a copy of the named check."""
        with self._lock:
            try:
                return self._checks[name].copy()
            except KeyError:
                raise NotFoundError(f"podnetworkconnectivitycheck {name!r} not found") from None

    def update_status(self, check: PodNetworkConnectivityCheck) -> PodNetworkConnectivityCheck:
        """Store the status of ``check``; fail if it was read from a stale version."""
        with self._lock:
            stored = self._checks.get(check.name)
            if stored is None:
                raise NotFoundError(f"podnetworkconnectivitycheck {check.name!r} not found")
            if check.resource_version != stored.resource_version:
                raise ConflictError(
                    f"podnetworkconnectivitycheck {check.name!r} has been modified"
                )
            updated = stored.copy()
            updated.status = check.status.copy()
            updated.resource_version = str(int(stored.resource_version or 0) + 1)
            self._checks[check.name] = updated
            return updated.copy()


def set_condition(
    conditions: list[PodNetworkConnectivityCheckCondition],
    new_condition: PodNetworkConnectivityCheckCondition,
) -> None:
    """Add or update the condition of the same type in ``conditions``."""
    existing = None
    for condition in conditions:
        if condition.type == new_condition.type:
            existing = condition
    now = datetime.now(timezone.utc)
    if existing is None:
        conditions.append(replace(new_condition, last_transition_time=now))
        return
    if existing.status != new_condition.status:
        existing.status = new_condition.status
        existing.last_transition_time = now
    existing.reason = new_condition.reason
    existing.message = new_condition.message


def _try_update(
    client, name: str, update_funcs: tuple[UpdateStatusFunc, ...]
) -> tuple[PodNetworkConnectivityCheckStatus, bool]:
    check = client.get(name)
    new_status = check.status.copy()
    for update in update_funcs:
        update(new_status)
    if new_status == check.status:
        return new_status, False
    check = client.get(name)
    check.status = new_status
    updated = client.update_status(check)
    return updated.status, True


def update_status(
    client, name: str, *update_funcs: UpdateStatusFunc
) -> tuple[PodNetworkConnectivityCheckStatus, bool]:
    """Apply ``update_funcs`` to the named check's status, retrying on conflicts.

    Returns the resulting status and whether it was written.
    """
    delay = _RETRY_DELAY
    for attempt in range(_RETRY_STEPS):
        try:
            return _try_update(client, name, update_funcs)
        except ConflictError:
            if attempt == _RETRY_STEPS - 1:
                raise
            time.sleep(delay * (1 + random.random() * _RETRY_JITTER))
            delay *= _RETRY_FACTOR
    raise ConflictError(f"podnetworkconnectivitycheck {name!r} could not be updated")


def _start_key(entry: LogEntry) -> datetime:
    if entry.start is None:
        return datetime.min.replace(tzinfo=timezone.utc)
    if entry.start.tzinfo is None:
        return entry.start.replace(tzinfo=timezone.utc)
    return entry.start


def append_log_entry(log: list[LogEntry], *entries: LogEntry) -> list[LogEntry]:
    """Return the log with ``entries`` added, newest first, at most ten long."""
    merged = sorted([*entries, *log], key=_start_key, reverse=True)
    return merged[:_MAX_LOG_ENTRIES]


def add_success_log_entry(entry: LogEntry) -> UpdateStatusFunc:
    """Return an update adding ``entry`` to the successes log."""

    def update(status: PodNetworkConnectivityCheckStatus) -> None:
        status.successes = append_log_entry(status.successes, entry)

    return update


def add_failure_log_entry(entry: LogEntry) -> UpdateStatusFunc:
    """Return an update adding ``entry`` to the failures log."""

    def update(status: PodNetworkConnectivityCheckStatus) -> None:
        status.failures = append_log_entry(status.failures, entry)

    return update