"""Counters and gauges describing connectivity check results."""

from __future__ import annotations

import socket
import threading
from datetime import timedelta
from typing import Mapping

from netdiag.latency import LatencyInfo

CHECK_COUNT = "pod_network_connectivity_check_count"
TCP_CONNECT_LATENCY = "pod_network_connectivity_check_tcp_connect_latency_gauge"
DNS_RESOLVE_LATENCY = "pod_network_connectivity_check_dns_resolve_latency_gauge"

_COUNTER_LABELS = ("component", "checkName", "targetEndpoint", "tcpConnect", "dnsResolve")
_GAUGE_LABELS = ("component", "checkName", "targetEndpoint")


def is_dns_error(err: BaseException | None) -> bool:
    """Return True if ``err`` is a name-lookup failure or was directly caused by one."""
    if err is None:
        return False
    return isinstance(err, socket.gaierror) or isinstance(err.__cause__, socket.gaierror)


def _nanoseconds(duration: timedelta) -> float:
    return float(
        (duration.days * 86400 + duration.seconds) * 1_000_000_000
        + duration.microseconds * 1000
    )


def _key(labels: Mapping[str, str], names: tuple[str, ...]) -> tuple[str, ...]:
    if set(labels) != set(names):
        raise ValueError(f"expected labels {sorted(names)}, got {sorted(labels)}")
    return tuple(labels[name] for name in names)


class MetricsRegistry:
    """Holds the check counter and the latency gauges."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counts: dict[tuple[str, ...], int] = {}
        self._gauges: dict[str, dict[tuple[str, ...], float]] = {
            TCP_CONNECT_LATENCY: {},
            DNS_RESOLVE_LATENCY: {},
        }

    def increment(self, labels: Mapping[str, str]) -> None:
        """Add one to the check counter for ``labels``."""
        key = _key(labels, _COUNTER_LABELS)
        with self._lock:
            self._counts[key] = self._counts.get(key, 0) + 1

    def set_gauge(self, name: str, labels: Mapping[str, str], value: float) -> None:
        """Set the named gauge for ``labels``."""
        key = _key(labels, _GAUGE_LABELS)
        with self._lock:
            self._gauge_series(name)[key] = value

    def counter(self, labels: Mapping[str, str]) -> int:
        """Return the check count for ``labels``."""
        key = _key(labels, _COUNTER_LABELS)
        with self._lock:
            return self._counts.get(key, 0)

    def gauge(self, name: str, labels: Mapping[str, str]) -> float | None:
        """Return the named gauge for ``labels``, or None if never set."""
        key = _key(labels, _GAUGE_LABELS)
        with self._lock:
            return self._gauge_series(name).get(key)

    def _gauge_series(self, name: str) -> dict[tuple[str, ...], float]:
        try:
            return self._gauges[name]
        except KeyError:
            raise ValueError(f"unknown gauge {name!r}") from None


REGISTRY = MetricsRegistry()


class MetricsContext:
    """Updates the metrics of one check run by one component."""

    def __init__(
        self, component_name: str, check_name: str, registry: MetricsRegistry | None = None
    ):
        self.component_name = component_name
        self.check_name = check_name
        self.registry = registry if registry is not None else REGISTRY

    def update(
        self, target_endpoint: str, latency: LatencyInfo, check_err: BaseException | None
    ) -> None:
        """Record the result of one check."""
        self.registry.increment(self.counter_labels(target_endpoint, latency, check_err))
        if latency.connect > timedelta(0):
            self.registry.set_gauge(
                TCP_CONNECT_LATENCY,
                self.metric_labels(target_endpoint),
                _nanoseconds(latency.connect),
            )
        if latency.dns > timedelta(0):
            self.registry.set_gauge(
                DNS_RESOLVE_LATENCY,
                self.metric_labels(target_endpoint),
                _nanoseconds(latency.dns),
            )

    def counter_labels(
        self, target_endpoint: str, latency: LatencyInfo, check_err: BaseException | None
    ) -> dict[str, str]:
        """Return the counter labels describing the check result."""
        labels = self.metric_labels(target_endpoint)
        labels["dnsResolve"] = ""
        labels["tcpConnect"] = ""
        if is_dns_error(check_err):
            labels["dnsResolve"] = "failure"
            return labels
        if latency.dns != timedelta(0):
            labels["dnsResolve"] = "success"
        labels["tcpConnect"] = "failure" if check_err is not None else "success"
        return labels

    def metric_labels(self, target_endpoint: str) -> dict[str, str]:
        """Return the labels shared by all metrics of this check."""
        return {
            "component": self.component_name,
            "checkName": self.check_name,
            "targetEndpoint": target_endpoint,
        }