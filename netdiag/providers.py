"""Generates the connectivity checks that network-check-source pods should run."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Mapping
from urllib.parse import urlsplit

from netdiag.model import NotFoundError, PodNetworkConnectivityCheck
from netdiag.template import new_check_template, with_source, with_target

DIAGNOSTICS_NAMESPACE = "openshift-network-diagnostics"
KUBE_APISERVER_NAMESPACE = "openshift-kube-apiserver"
OPENSHIFT_APISERVER_NAMESPACE = "openshift-apiserver"
SOURCE_APP_LABEL = "network-check-source"

_REASON = "EndpointDetectionFailure"
_APISERVER_TARGET_PORT = 6443
_INT_TEXT = re.compile(r"[+-]?\d+")


@dataclass
class ServicePort:
    """A port exposed by a service and the port it forwards to."""

    port: int
    target_port: int | str = 0

    def target_port_value(self) -> int:
        """Return the target port as a number; a named port counts as 0."""
        if isinstance(self.target_port, int):
            return self.target_port
        if _INT_TEXT.fullmatch(self.target_port):
            return int(self.target_port)
        return 0


@dataclass
class Service:
    """A cluster service."""

    namespace: str
    name: str
    cluster_ip: str = ""
    ports: list[ServicePort] = field(default_factory=list)


@dataclass
class EndpointAddress:
    """An address backing a service and the node it runs on."""

    ip: str
    node_name: str | None = None


@dataclass
class EndpointSubset:
    """Addresses that share the same set of port numbers."""

    addresses: list[EndpointAddress] = field(default_factory=list)
    ports: list[int] = field(default_factory=list)


@dataclass
class Endpoints:
    """The endpoints of a service."""

    namespace: str
    name: str
    subsets: list[EndpointSubset] = field(default_factory=list)


@dataclass
class Pod:
    """A pod and the node it has been scheduled on."""

    namespace: str
    name: str
    node_name: str = ""
    labels: dict[str, str] = field(default_factory=dict)


@dataclass
class Infrastructure:
    """Cluster infrastructure facts: the API server URLs."""

    name: str = "cluster"
    api_server_url: str = ""
    api_server_internal_url: str = ""


@dataclass
class ClusterState:
    """The cluster objects the template provider looks at.

    ``pods`` is None when the pods could not be listed.
    """

    services: list[Service] = field(default_factory=list)
    endpoints: list[Endpoints] = field(default_factory=list)
    pods: list[Pod] | None = field(default_factory=list)
    infrastructures: list[Infrastructure] = field(default_factory=list)

    def get_service(self, namespace: str, name: str) -> Service:
        """Return the named service or raise :class:`NotFoundError`."""
        for service in self.services:
            if service.namespace == namespace and service.name == name:
                return service
        raise NotFoundError(f'services "{name}" not found')

    def get_endpoints(self, namespace: str, name: str) -> Endpoints:
        """Return the named endpoints or raise :class:`NotFoundError`."""
        for endpoints in self.endpoints:
            if endpoints.namespace == namespace and endpoints.name == name:
                return endpoints
        raise NotFoundError(f'endpoints "{name}" not found')

    def get_infrastructure(self, name: str) -> Infrastructure:
        """Return the named infrastructure or raise :class:`NotFoundError`."""
        for infrastructure in self.infrastructures:
            if infrastructure.name == name:
                return infrastructure
        raise NotFoundError(f'infrastructure "{name}" not found')

    def list_pods(self, namespace: str, labels: Mapping[str, str]) -> list[Pod]:
        """Return the pods in ``namespace`` carrying all of ``labels``."""
        if self.pods is None:
            raise LookupError("pods could not be listed")
        return [
            pod
            for pod in self.pods
            if pod.namespace == namespace
            and all(pod.labels.get(key) == value for key, value in labels.items())
        ]


@dataclass
class _EndpointInfo:
    host_name: str
    port: str
    node_name: str


def _join_host_port(host: str, port: str) -> str:
    return f"[{host}]:{port}" if ":" in host else f"{host}:{port}"


def _short_node(node_name: str) -> str:
    return node_name.split(".")[0]


def _template(address: str, label: str, target: str) -> PodNetworkConnectivityCheck:
    return new_check_template(address, DIAGNOSTICS_NAMESPACE, with_target(f"{label}-{target}"))


def _url_host(url: str) -> str:
    return urlsplit(url).netloc.rpartition("@")[2]


class TemplateProvider:
    """Builds check templates for the API servers, load balancers and check targets."""

    def __init__(self, state: ClusterState, environ: Mapping[str, str] | None = None):
        self.state = state
        self.environ = os.environ if environ is None else environ

    def generate(self, recorder) -> list[PodNetworkConnectivityCheck]:
        """Return one check per template for every scheduled network-check-source pod."""
        templates = [
            *self.kubernetes_service_monitor_templates(recorder),
            *self.kubernetes_default_service_templates(recorder),
            *self.kubernetes_endpoint_templates(recorder),
            *self.openshift_apiserver_service_templates(recorder),
            *self.openshift_apiserver_endpoint_templates(recorder),
            *self.load_balancer_templates(recorder),
            *self.generic_pod_service_templates(recorder),
            *self.generic_pod_endpoint_templates(recorder),
        ]
        try:
            pods = self.state.list_pods(DIAGNOSTICS_NAMESPACE, {"app": SOURCE_APP_LABEL})
        except LookupError as err:
            recorder.warning(_REASON, "failed to list network-check-source pods: %s", err)
            return []

        checks = []
        for pod in pods:
            if not pod.node_name:
                continue
            for template in templates:
                check = template.copy()
                with_source(f"network-check-source-{_short_node(pod.node_name)}")(check)
                check.spec.source_pod = pod.name
                checks.append(check)
        return checks

    def kubernetes_default_service_templates(self, recorder) -> list[PodNetworkConnectivityCheck]:
        """Template for the in-cluster kubernetes service address."""
        host = self.environ.get("KUBERNETES_SERVICE_HOST", "")
        port = self.environ.get("KUBERNETES_SERVICE_PORT", "")
        if not host or not port:
            recorder.warning(
                _REASON,
                "unable to determine kubernetes service endpoint: "
                "in-cluster configuration not found",
            )
            return []
        return [_template(_join_host_port(host, port), "kubernetes-default-service", "cluster")]

    def _service_addresses(self, namespace: str, name: str) -> list[str]:
        service = self.state.get_service(namespace, name)
        for port in service.ports:
            if port.target_port_value() == _APISERVER_TARGET_PORT:
                return [_join_host_port(service.cluster_ip, str(port.port))]
        return [_join_host_port(service.cluster_ip, "443")]

    def kubernetes_service_monitor_templates(self, recorder) -> list[PodNetworkConnectivityCheck]:
        """Templates for the kube-apiserver service address."""
        try:
            addresses = self._service_addresses(KUBE_APISERVER_NAMESPACE, "apiserver")
        except NotFoundError as err:
            recorder.warning(
                _REASON,
                "unable to determine openshift-kube-apiserver apiserver service endpoint: %s",
                err,
            )
            return []
        return [
            _template(address, "kubernetes-apiserver-service", "cluster") for address in addresses
        ]

    def _all_endpoint_infos(self, namespace: str, name: str) -> list[_EndpointInfo]:
        endpoints = self.state.get_endpoints(namespace, name)
        return [
            _EndpointInfo(address.ip, str(port), address.node_name or "")
            for subset in endpoints.subsets
            for address in subset.addresses
            for port in subset.ports
        ]

    def kubernetes_endpoint_templates(self, recorder) -> list[PodNetworkConnectivityCheck]:
        """Templates for every kube-apiserver endpoint address and port."""
        try:
            infos = self._all_endpoint_infos(KUBE_APISERVER_NAMESPACE, "apiserver")
        except NotFoundError as err:
            recorder.warning(
                _REASON, "unable to determine openshift-kube-apiserver apiserver endpoints: %s", err
            )
            return []
        return [
            _template(
                _join_host_port(info.host_name, info.port),
                "kubernetes-apiserver-endpoint",
                _short_node(info.node_name),
            )
            for info in infos
        ]

    def openshift_apiserver_service_templates(self, recorder) -> list[PodNetworkConnectivityCheck]:
        """Templates for the openshift-apiserver service address."""
        try:
            addresses = self._service_addresses(OPENSHIFT_APISERVER_NAMESPACE, "api")
        except NotFoundError as err:
            recorder.warning(
                _REASON, "unable to determine openshift-apiserver apiserver service: %s", err
            )
            return []
        return [
            _template(address, "openshift-apiserver-service", "cluster") for address in addresses
        ]

    def _openshift_apiserver_endpoint_infos(self) -> list[_EndpointInfo]:
        endpoints = self.state.get_endpoints(OPENSHIFT_APISERVER_NAMESPACE, "api")
        if not endpoints.subsets or not endpoints.subsets[0].ports:
            raise NotFoundError("no openshift-apiserver api endpoints found")
        first = endpoints.subsets[0]
        port = str(first.ports[0])
        return [
            _EndpointInfo(address.ip, port, address.node_name or "") for address in first.addresses
        ]

    def openshift_apiserver_endpoint_templates(self, recorder) -> list[PodNetworkConnectivityCheck]:
        """Templates for the openshift-apiserver endpoint addresses, on their first port."""
        try:
            infos = self._openshift_apiserver_endpoint_infos()
        except NotFoundError as err:
            recorder.warning(
                _REASON,
                "unable to determine openshift-apiserver apiserver service endpoints: %s",
                err,
            )
            return []
        return [
            _template(
                _join_host_port(info.host_name, info.port),
                "openshift-apiserver-endpoint",
                _short_node(info.node_name),
            )
            for info in infos
        ]

    def generic_pod_service_templates(self, recorder) -> list[PodNetworkConnectivityCheck]:
        """Template for the network-check-target service."""
        return [_template("network-check-target:80", "network-check-target-service", "cluster")]

    def generic_pod_endpoint_templates(self, recorder) -> list[PodNetworkConnectivityCheck]:
        """Templates for every network-check-target endpoint address and port."""
        try:
            infos = self._all_endpoint_infos(DIAGNOSTICS_NAMESPACE, "network-check-target")
        except NotFoundError as err:
            recorder.warning(
                _REASON,
                "unable to determine openshift-network-diagnostics network-check-target "
                "endpoints: %s",
                err,
            )
            return []
        return [
            _template(
                _join_host_port(info.host_name, info.port),
                "network-check-target",
                _short_node(info.node_name),
            )
            for info in infos
        ]

    def load_balancer_templates(self, recorder) -> list[PodNetworkConnectivityCheck]:
        """Templates for the external and internal API load balancers."""
        try:
            infrastructure = self.state.get_infrastructure("cluster")
        except NotFoundError as err:
            recorder.warning(_REASON, "error detecting api load balancer endpoints: %s", err)
            return []

        templates = []
        try:
            host = _url_host(infrastructure.api_server_url)
        except ValueError as err:
            recorder.warning(
                _REASON, "error detecting external api load balancer endpoint: %s", err
            )
        else:
            templates.append(_template(host, "load-balancer", "api-external"))

        try:
            host = _url_host(infrastructure.api_server_internal_url)
        except ValueError as err:
            recorder.warning(
                _REASON, "error detecting internal api load balancer endpoint: %s", err
            )
        else:
            templates.append(_template(host, "load-balancer", "api-internal"))
        return templates