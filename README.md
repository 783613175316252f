# netdiag

Building blocks for pod network connectivity checks: the check and status
types, helpers that update a check's status, templates that name and target
checks, event recorders (including one that backs off when events arrive too
fast), check metrics, and a small HTTP server that checks can target.

A connectivity check names a source pod and a target endpoint (`host:port`).
Its status keeps lists of successes and failures, outages and conditions.

## Modules

| Module | Contents |
| --- | --- |
| `netdiag.model` | `PodNetworkConnectivityCheck`, its spec and status, `LogEntry`, `OutageEntry`, `PodNetworkConnectivityCheckCondition`, `ConditionStatus`, `LogEntryReason`, and the `NotFoundError` and `ConflictError` exceptions |
| `netdiag.helpers` | `CheckClient` (an in-memory check store that rejects stale writes), `update_status`, `set_condition`, `add_success_log_entry`, `add_failure_log_entry`, `append_log_entry` |
| `netdiag.latency` | `LatencyInfo`, the DNS and connect start times and durations of one connection attempt |
| `netdiag.template` | `new_check_template` and the `with_source`, `with_target` and `with_tls_client_cert` options |
| `netdiag.events` | `LoggingRecorder`, `InMemoryRecorder` and `RecordedEvent` |
| `netdiag.backoff` | `BackoffEventRecorder`, `EventInfo`, `join_event_messages` |
| `netdiag.metrics` | `MetricsRegistry`, `MetricsContext`, `is_dns_error` |
| `netdiag.providers` | `TemplateProvider` and the `ClusterState` objects it reads: `Service`, `ServicePort`, `Endpoints`, `EndpointSubset`, `EndpointAddress`, `Pod`, `Infrastructure` |
| `netdiag.crdwatch` | `check_type_exists`, `TimeToStartController`, `StopController` |
| `netdiag.egress` | `L4RedirectRule`, `allowed_destinations_config_json`, `is_valid_cidr`, `is_valid_ip_address` |
| `netdiag.target` | `greeting`, `make_server` and the `netdiag-check-target` command |
| `netdiag.bootstrap` | Data classes for bootstrap results (`BootstrapResult` and its parts) |
| `netdiag.pki` | `OperatorPKI`, `OperatorPKIList` with `to_dict`/`from_dict`, and `group_version_kind` |

## Updating a check's status

Status updates are plain functions applied to a copy of the status.
`update_status` reads the check, applies them, writes the result only if it
changed, and retries a few times when the write meets a `ConflictError`.
Success and failure logs are kept newest first, at most 10 entries each.

```python
from datetime import datetime, timedelta, timezone

from netdiag.helpers import CheckClient, add_success_log_entry, update_status
from netdiag.model import LogEntry, LogEntryReason, PodNetworkConnectivityCheck

client = CheckClient([PodNetworkConnectivityCheck(name="a-to-b")])
entry = LogEntry(
    start=datetime.now(timezone.utc),
    success=True,
    reason=LogEntryReason.TCP_CONNECT,
    message="b: tcp connection to host:port succeeded",
    latency=timedelta(milliseconds=1),
)
status, written = update_status(client, "a-to-b", add_success_log_entry(entry))
```

## Check names

Templates are named `$(SOURCE)-to-$(TARGET)`; the options fill in the tokens:

```python
from netdiag.template import new_check_template, with_source, with_target

check = new_check_template(
    "10.0.0.1:6443",
    "openshift-network-diagnostics",
    with_target("kubernetes-apiserver-endpoint-master-0"),
    with_source("network-check-source-worker-1"),
)
# check.name == "network-check-source-worker-1-to-kubernetes-apiserver-endpoint-master-0"
```

`TemplateProvider.generate` builds templates for the kube-apiserver service and
endpoints, the in-cluster kubernetes service (from `KUBERNETES_SERVICE_HOST`
and `KUBERNETES_SERVICE_PORT`), the openshift-apiserver service and endpoints,
the external and internal API load balancers and the network-check-target
service and endpoints, then copies each template once for every
`app=network-check-source` pod that has a node. Whatever cannot be found is
reported to the recorder as an `EndpointDetectionFailure` warning.

```python
from netdiag.events import LoggingRecorder
from netdiag.providers import ClusterState, Pod, TemplateProvider

state = ClusterState(pods=[
    Pod("openshift-network-diagnostics", "network-check-source-abc",
        node_name="worker-1.example.com", labels={"app": "network-check-source"}),
])
checks = TemplateProvider(state, environ={}).generate(LoggingRecorder())
# one check: "network-check-source-worker-1-to-network-check-target-service-cluster"
```

## Event backoff

`BackoffEventRecorder` wraps another recorder. By default, once more than 30
events arrive within 30 seconds, or more than 600 within 10 minutes, it holds
events back for 30 minutes. The first event after the pause passes on
everything held, as one event per type and reason; when more than one event is
joined, each becomes a line of the form `<RFC 3339 time>: <message>`. The
windows, limits and pause are keyword arguments (`short_window`,
`short_window_max`, `long_window`, `long_window_max`, `backoff`).

```python
from netdiag.backoff import BackoffEventRecorder
from netdiag.events import InMemoryRecorder

sink = InMemoryRecorder()
recorder = BackoffEventRecorder(sink)
recorder.event("ConnectivityRestored", "Connectivity restored after %s", "5s")
# sink.events()[0].message == "Connectivity restored after 5s"
```

## Metrics

`MetricsContext.update` counts each check result in
`pod_network_connectivity_check_count`, labelled with `tcpConnect` and
`dnsResolve` set to `success`, `failure` or empty, and sets the TCP connect and
DNS resolve latency gauges in nanoseconds. Contexts use the module-level
`REGISTRY` unless given a `MetricsRegistry`.

## The check target server

`netdiag-check-target` serves HTTP on port 8080 and answers every request with
a line naming the caller, the local address it reached and the node name from
the `K8S_NODE_NAME` environment variable:

```
K8S_NODE_NAME=worker-1 netdiag-check-target
```

```
Hello, 10.128.0.5. You have reached 10.129.0.7 on worker-1
```

## What the package does not do

It does not probe endpoints itself. There is no loop that opens TCP
connections to check targets, no derivation of outage entries or of the
`Reachable` condition from the success and failure logs, no reordering of
status updates, and no controller that runs one prober per check. It also does
not talk to a cluster: `CheckClient` keeps checks in memory, and
`TemplateProvider` reads whatever `ClusterState` it is given.