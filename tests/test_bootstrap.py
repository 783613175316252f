from dataclasses import replace

import pytest

from netdiag.bootstrap import (
    BootstrapResult,
    FlowsConfig,
    InfraBootstrapResult,
    KuryrBootstrapResult,
    OVNBootstrapResult,
    OVNConfigBootstrapResult,
)


def test_defaults_are_empty():
    result = BootstrapResult()
    assert result.kuryr.worker_nodes_subnets == []
    assert result.kuryr.pods_network_mtu == 0
    assert result.ovn.flows_config is None
    assert result.ovn.ovn_kubernetes_config is None
    assert result.infra.kube_cloud_config == {}
    assert result.infra.external_control_plane is False


def test_mutable_defaults_not_shared():
    first = BootstrapResult()
    second = BootstrapResult()
    first.kuryr.worker_nodes_subnets.append("subnet-a")
    first.ovn.master_ips.append("10.0.0.1")
    first.infra.kube_cloud_config["config"] = "x"
    assert second.kuryr.worker_nodes_subnets == []
    assert second.ovn.master_ips == []
    assert second.infra.kube_cloud_config == {}


def test_nested_values_compare_equal():
    flows = FlowsConfig(target="10.0.0.2:2055", sampling=100)
    ovn = OVNBootstrapResult(
        master_ips=["10.0.0.1"],
        ovn_kubernetes_config=OVNConfigBootstrapResult(gateway_mode="local"),
        flows_config=flows,
    )
    result = BootstrapResult(ovn=ovn, infra=InfraBootstrapResult(platform_type="AWS"))
    assert result == BootstrapResult(ovn=replace(ovn), infra=InfraBootstrapResult(platform_type="AWS"))
    assert result.ovn.flows_config.sampling == 100
    assert result != BootstrapResult()


def test_mtu_must_fit_uint32():
    assert KuryrBootstrapResult(pods_network_mtu=1400).pods_network_mtu == 1400
    with pytest.raises(ValueError):
        KuryrBootstrapResult(pods_network_mtu=-1)
    with pytest.raises(ValueError):
        KuryrBootstrapResult(pods_network_mtu=2**32)


def test_flows_config_rejects_negative():
    with pytest.raises(ValueError):
        FlowsConfig(cache_max_flows=-5)
    assert FlowsConfig(sampling=0).sampling == 0