"""Configuration helpers for the egress router."""

from __future__ import annotations

import ipaddress
import json
import logging
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)


@dataclass
class L4RedirectRule:
    """A rule redirecting traffic to a destination, optionally by port and protocol."""

    destination_ip: str
    port: int = 0
    protocol: str = ""
    target_port: int = 0


def _rule_config(rule: L4RedirectRule) -> str:
    if rule.port != 0 and rule.protocol:
        if rule.target_port != 0:
            return f"{rule.port} {rule.protocol} {rule.destination_ip} {rule.target_port}"
        return f"{rule.port} {rule.protocol} {rule.destination_ip}"
    return rule.destination_ip


def allowed_destinations_config_json(rules: Iterable[L4RedirectRule]) -> str:
    """Return the allowed destinations as a compact JSON list of rule strings.

    The field order matches what the egress router plugin parses.
    """
    return json.dumps([_rule_config(rule) for rule in rules], separators=(",", ":"))


def is_valid_cidr(cidr: str) -> bool:
    """Return whether ``cidr`` is an address with a prefix length, such as 10.0.0.1/24."""
    try:
        if not isinstance(cidr, str) or "/" not in cidr or "%" in cidr:
            raise ValueError(f"invalid CIDR address: {cidr}")
        ipaddress.ip_interface(cidr)
    except ValueError as err:
        logger.error("%s", err)
        return False
    return True


def is_valid_ip_address(ip: str) -> bool:
    """Return whether ``ip`` is a plain IPv4 or IPv6 address."""
    if not isinstance(ip, str) or "%" in ip:
        return False
    try:
        ipaddress.ip_address(ip)
    except ValueError:
        return False
    return True