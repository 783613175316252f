"""Results gathered while bootstrapping the cluster network configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

_UINT32_MAX = 2**32 - 1


@dataclass
class KuryrBootstrapResult:
    """Settings discovered for the Kuryr network provider."""

    service_subnet: str = ""
    pod_subnetpool: str = ""
    worker_nodes_router: str = ""
    worker_nodes_subnets: list[str] = field(default_factory=list)
    pods_network_mtu: int = 0
    pod_security_groups: list[str] = field(default_factory=list)
    external_network: str = ""
    cluster_id: str = ""
    octavia_provider: str = ""
    octavia_multiple_listeners: bool = False
    octavia_version: str = ""
    openstack_cloud: dict[str, Any] = field(default_factory=dict)
    webhook_ca: str = ""
    webhook_ca_key: str = ""
    webhook_cert: str = ""
    webhook_key: str = ""
    user_ca_cert: str = ""
    https_proxy: str = ""
    http_proxy: str = ""
    no_proxy: str = ""

    def __post_init__(self) -> None:
        if not 0 <= self.pods_network_mtu <= _UINT32_MAX:
            raise ValueError(f"pods_network_mtu out of range: {self.pods_network_mtu}")


@dataclass
class OVNConfigBootstrapResult:
    """Gateway and node modes for OVN-Kubernetes."""

    gateway_mode: str = ""
    node_mode: str = ""


@dataclass
class FlowsConfig:
    """Flow collector settings."""

    target: str = ""
    """Target IP:port of the flow collector."""
    cache_active_timeout: int | None = None
    """Longest period, in seconds, over which flows are aggregated before sending."""
    cache_max_flows: int | None = None
    """Number of flows in an aggregate at which the flows are sent."""
    sampling: int | None = None
    """Sampling rate: 100 sends one flow in 100; 0 disables sampling."""

    def __post_init__(self) -> None:
        for name in ("cache_active_timeout", "cache_max_flows", "sampling"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must not be negative: {value}")


@dataclass
class OVNBootstrapResult:
    """State discovered for the OVN-Kubernetes network provider."""

    master_ips: list[str] = field(default_factory=list)
    cluster_initiator: str = ""
    existing_master_daemonset: dict[str, Any] | None = None
    existing_node_daemonset: dict[str, Any] | None = None
    ovn_kubernetes_config: OVNConfigBootstrapResult | None = None
    pre_puller_daemonset: dict[str, Any] | None = None
    flows_config: FlowsConfig | None = None


@dataclass
class InfraBootstrapResult:
    """Facts about the platform the cluster runs on."""

    platform_type: str = ""
    platform_region: str = ""
    platform_status: dict[str, Any] | None = None
    external_control_plane: bool = False
    kube_cloud_config: dict[str, str] = field(default_factory=dict)
    """Contents of the openshift-config-managed/kube-cloud-config ConfigMap."""


@dataclass
class BootstrapResult:
    """Everything gathered during bootstrap."""

    kuryr: KuryrBootstrapResult = field(default_factory=KuryrBootstrapResult)
    ovn: OVNBootstrapResult = field(default_factory=OVNBootstrapResult)
    infra: InfraBootstrapResult = field(default_factory=InfraBootstrapResult)