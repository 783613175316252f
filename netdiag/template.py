"""Templates for connectivity checks named ``$(SOURCE)-to-$(TARGET)``."""

from __future__ import annotations

from typing import Callable

from netdiag.model import PodNetworkConnectivityCheck, PodNetworkConnectivityCheckSpec

CheckOption = Callable[[PodNetworkConnectivityCheck], None]

SOURCE_TOKEN = "$(SOURCE)"
TARGET_TOKEN = "$(TARGET)"


def new_check_template(
    address: str, namespace: str, *options: CheckOption
) -> PodNetworkConnectivityCheck:
    """Return a check for ``address`` with the given options applied."""
    check = PodNetworkConnectivityCheck(
        name=f"{SOURCE_TOKEN}-to-{TARGET_TOKEN}",
        namespace=namespace,
        spec=PodNetworkConnectivityCheckSpec(target_endpoint=address),
    )
    for option in options:
        option(check)
    return check


def with_tls_client_cert(secret_name: str) -> CheckOption:
    """Use the TLS client certificate from the named secret, if one is given."""

    def apply(check: PodNetworkConnectivityCheck) -> None:
        if secret_name:
            check.spec.tls_client_cert = secret_name

    return apply


def with_source(source: str) -> CheckOption:
    """Replace the source token in the check name."""

    def apply(check: PodNetworkConnectivityCheck) -> None:
        check.name = check.name.replace(SOURCE_TOKEN, source)

    return apply


def with_target(target: str) -> CheckOption:
    """Replace the target token in the check name."""

    def apply(check: PodNetworkConnectivityCheck) -> None:
        check.name = check.name.replace(TARGET_TOKEN, target)

    return apply