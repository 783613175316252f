"""Data types describing pod network connectivity checks and their status."""

from __future__ import annotations

import copy as _copy
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum


class NotFoundError(LookupError):
    """Raised when a requested object does not exist."""


class ConflictError(RuntimeError):
    """Raised when an update was based on a stale version of an object."""


class ConditionStatus(str, Enum):
    """The status of a condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class LogEntryReason(str, Enum):
    """Reasons recorded on connectivity log entries."""

    TCP_CONNECT = "TCPConnect"
    TCP_CONNECT_ERROR = "TCPConnectError"
    DNS_RESOLVE = "DNSResolve"
    DNS_ERROR = "DNSError"


# Condition type reporting whether the target endpoint is reachable.
REACHABLE = "Reachable"


@dataclass
class LogEntry:
    """A single connectivity check result."""

    start: datetime | None = None
    success: bool = False
    reason: str = ""
    message: str = ""
    latency: timedelta = timedelta(0)


@dataclass
class OutageEntry:
    """A period during which the target endpoint was unreachable."""

    start: datetime | None = None
    end: datetime | None = None
    start_logs: list[LogEntry] = field(default_factory=list)
    end_logs: list[LogEntry] = field(default_factory=list)
    message: str = ""


@dataclass
class PodNetworkConnectivityCheckCondition:
    """A condition reported on a connectivity check."""

    type: str = ""
    status: str = ConditionStatus.UNKNOWN
    reason: str = ""
    message: str = ""
    last_transition_time: datetime | None = None


@dataclass
class PodNetworkConnectivityCheckStatus:
    """Observed state of a connectivity check."""

    successes: list[LogEntry] = field(default_factory=list)
    failures: list[LogEntry] = field(default_factory=list)
    outages: list[OutageEntry] = field(default_factory=list)
    conditions: list[PodNetworkConnectivityCheckCondition] = field(default_factory=list)

    def copy(self) -> PodNetworkConnectivityCheckStatus:
        """Return a deep copy."""
        return _copy.deepcopy(self)


@dataclass
class PodNetworkConnectivityCheckSpec:
    """What to check and from where."""

    source_pod: str = ""
    target_endpoint: str = ""
    tls_client_cert: str = ""


@dataclass
class PodNetworkConnectivityCheck:
    """A connectivity check from a source pod to a target endpoint."""

    name: str = ""
    namespace: str = ""
    spec: PodNetworkConnectivityCheckSpec = field(default_factory=PodNetworkConnectivityCheckSpec)
    status: PodNetworkConnectivityCheckStatus = field(
        default_factory=PodNetworkConnectivityCheckStatus
    )
    resource_version: str = ""

    def copy(self) -> PodNetworkConnectivityCheck:
        """Return a deep copy."""
        return _copy.deepcopy(self)