"""The OperatorPKI resource of the network.operator.openshift.io/v1 API group.

An OperatorPKI names a small certificate authority managed by the operator:
a CA and a certificate signed by it, usable for both client and server auth.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, NamedTuple

GROUP_NAME = "network.operator.openshift.io"
VERSION = "v1"
API_VERSION = f"{GROUP_NAME}/{VERSION}"


class GroupVersionKind(NamedTuple):
    """The API group, version and kind of a resource type."""

    group: str
    version: str
    kind: str

    def __str__(self) -> str:
        return f"{self.group}/{self.version}, Kind={self.kind}"


def _check_type_meta(data: Mapping[str, Any], kind: str) -> None:
    if not isinstance(data, Mapping):
        raise ValueError(f"{kind} must be a mapping")
    if "kind" in data and data["kind"] != kind:
        raise ValueError(f"expected kind {kind!r}, got {data['kind']!r}")
    if "apiVersion" in data and data["apiVersion"] != API_VERSION:
        raise ValueError(f"expected apiVersion {API_VERSION!r}, got {data['apiVersion']!r}")


@dataclass
class CertSpec:
    """Certificate settings."""

    common_name: str = ""


@dataclass
class OperatorPKISpec:
    """The PKI configuration."""

    target_cert: CertSpec = field(default_factory=CertSpec)


@dataclass
class OperatorPKIStatus:
    """Status of an OperatorPKI; it carries no fields."""


@dataclass
class OperatorPKI:
    """A certificate authority and one certificate signed by it."""

    name: str = ""
    namespace: str = ""
    spec: OperatorPKISpec = field(default_factory=OperatorPKISpec)
    status: OperatorPKIStatus = field(default_factory=OperatorPKIStatus)

    def to_dict(self) -> dict[str, Any]:
        """Return the resource as a JSON-ready mapping."""
        metadata: dict[str, str] = {}
        if self.name:
            metadata["name"] = self.name
        if self.namespace:
            metadata["namespace"] = self.namespace
        return {
            "apiVersion": API_VERSION,
            "kind": "OperatorPKI",
            "metadata": metadata,
            "spec": {"targetCert": {"commonName": self.spec.target_cert.common_name}},
            "status": {},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> OperatorPKI:
        """Build a resource from a mapping, validating required fields."""
        _check_type_meta(data, "OperatorPKI")
        metadata = data.get("metadata") or {}
        spec = data.get("spec")
        if not isinstance(spec, Mapping):
            raise ValueError("OperatorPKI spec is required")
        target = spec.get("targetCert")
        if not isinstance(target, Mapping):
            raise ValueError("OperatorPKI spec.targetCert is required")
        common_name = target.get("commonName")
        if not isinstance(common_name, str) or len(common_name) < 1:
            raise ValueError("OperatorPKI spec.targetCert.commonName must be a non-empty string")
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            spec=OperatorPKISpec(target_cert=CertSpec(common_name=common_name)),
        )


@dataclass
class OperatorPKIList:
    """A list of OperatorPKI resources."""

    items: list[OperatorPKI] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the list as a JSON-ready mapping."""
        return {
            "apiVersion": API_VERSION,
            "kind": "OperatorPKIList",
            "metadata": {},
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> OperatorPKIList:
        """Build a list from a mapping."""
        _check_type_meta(data, "OperatorPKIList")
        items = data.get("items") or []
        return cls(items=[OperatorPKI.from_dict(item) for item in items])


_KINDS = {OperatorPKI: "OperatorPKI", OperatorPKIList: "OperatorPKIList"}


def group_version_kind(obj: Any) -> GroupVersionKind:
    """Return the group, version and kind registered for ``obj`` or its type."""
    kind_type = obj if isinstance(obj, type) else type(obj)
    try:
        kind = _KINDS[kind_type]
    except KeyError:
        raise TypeError(f"{kind_type.__name__} has no kind registered") from None
    return GroupVersionKind(GROUP_NAME, VERSION, kind)