"""Resolución DNS de endpoints."""

from __future__ import annotations

import socket

from core.errors import ResolutionError


def resolve_host(name: str) -> list[str]:
    """Devuelve las IPs de `name` sin duplicados, en el orden del resolver."""

    try:
        infos = socket.getaddrinfo(name, None, proto=socket.IPPROTO_TCP)
    except (socket.gaierror, UnicodeError) as exc:
        raise ResolutionError(f"unable to resolve {name}: {exc}") from exc

    addresses: list[str] = []
    for _family, _type, _proto, _canonname, sockaddr in infos:
        address = str(sockaddr[0])
        if address not in addresses:
            addresses.append(address)

    if not addresses:
        raise ResolutionError(f"unable to resolve {name}: no addresses returned")
    return addresses
