import json

import pytest

from netdiag.egress import (
    L4RedirectRule,
    allowed_destinations_config_json,
    is_valid_cidr,
    is_valid_ip_address,
)


def test_full_rule_format():
    rules = [L4RedirectRule("10.0.0.1", port=80, protocol="TCP", target_port=8080)]
    assert json.loads(allowed_destinations_config_json(rules)) == ["80 TCP 10.0.0.1 8080"]


def test_rule_without_target_port():
    rules = [L4RedirectRule("10.0.0.2", port=53, protocol="UDP")]
    assert json.loads(allowed_destinations_config_json(rules)) == ["53 UDP 10.0.0.2"]


def test_rule_without_port_or_protocol_is_bare_destination():
    rules = [
        L4RedirectRule("10.0.0.3"),
        L4RedirectRule("10.0.0.4", port=80),
        L4RedirectRule("10.0.0.5", protocol="TCP", target_port=9),
    ]
    assert json.loads(allowed_destinations_config_json(rules)) == [
        "10.0.0.3",
        "10.0.0.4",
        "10.0.0.5",
    ]


def test_json_is_compact_and_ordered():
    rules = [L4RedirectRule("10.0.0.3"), L4RedirectRule("10.0.0.1", port=80, protocol="TCP")]
    assert allowed_destinations_config_json(rules) == '["10.0.0.3","80 TCP 10.0.0.1"]'


def test_no_rules_gives_empty_list():
    assert allowed_destinations_config_json([]) == "[]"


@pytest.mark.parametrize("cidr", ["10.0.0.1/24", "192.168.1.0/24", "fd00::1/64"])
def test_valid_cidr(cidr):
    assert is_valid_cidr(cidr) is True


@pytest.mark.parametrize("cidr", ["10.0.0.1", "10.0.0.1/33", "not-a-cidr", "", None])
def test_invalid_cidr(cidr):
    assert is_valid_cidr(cidr) is False


@pytest.mark.parametrize("ip", ["10.0.0.1", "::1", "fd00::10"])
def test_valid_ip(ip):
    assert is_valid_ip_address(ip) is True


@pytest.mark.parametrize("ip", ["10.0.0.1/24", "300.0.0.1", "", "fe80::1%eth0", None])
def test_invalid_ip(ip):
    assert is_valid_ip_address(ip) is False