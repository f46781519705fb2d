"""Direccionamiento IPv6 secundario por VLAN.

Convención fija (la consumen sistemas downstream, no cambiarla):
- red:     `{prefix}:{vlan}::1/64`
- gateway: base de la red + 2
- inicio del pool de asignación: base de la red + 4
"""

from __future__ import annotations

import ipaddress

from core.domain.models import Ipv6Addressing
from core.errors import InvalidAddressError

GATEWAY_OFFSET = 2
START_ADDRESS_OFFSET = 4

_MIN_VLAN = 1
_MAX_VLAN = 4094


def synthesize_ipv6(prefix: str, vlan_number: int) -> Ipv6Addressing:
    """Deriva prefijo, longitud CIDR, gateway y dirección inicial para una VLAN."""

    if not _MIN_VLAN <= vlan_number <= _MAX_VLAN:
        raise InvalidAddressError(
            f"VLAN number {vlan_number} outside {_MIN_VLAN}-{_MAX_VLAN}"
        )

    template = f"{prefix.strip()}:{vlan_number}::1/64"
    try:
        interface = ipaddress.IPv6Interface(template)
    except ValueError as exc:
        raise InvalidAddressError(
            f"IPv6 prefix {prefix!r} does not form a valid network ({template}): {exc}"
        ) from exc

    network = interface.network
    return Ipv6Addressing(
        prefix=str(interface),
        cidr_length=network.prefixlen,
        gateway=str(network.network_address + GATEWAY_OFFSET),
        start_address=str(network.network_address + START_ADDRESS_OFFSET),
    )
