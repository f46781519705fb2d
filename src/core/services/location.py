"""Resolución de la ubicación física de un vCenter.

Flujo:
1. DNS del nombre del vCenter (fallo = fatal para toda la ejecución).
2. Se pregunta a cada cuenta IBM Cloud, en orden alfabético, qué ubicación
   contiene esas IPs; gana la primera que devuelve un datacenter.
3. Datacenter sin pod, o ninguna cuenta: ubicación sin resolver (`resolved=False`).
4. El hostname que reporta el propio vCenter se compara con el nombre usado;
   una diferencia solo genera un warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from core.domain.models import Diagnostic, DiagnosticCode, PhysicalLocation
from core.interfaces.inventory import (
    CloudInventoryProvider,
    HostResolver,
    VSphereInventoryProvider,
)

logger = logging.getLogger(__name__)


@dataclass
class LocationResolution:
    endpoint: str
    ip_addresses: list[str]
    location: PhysicalLocation = field(default_factory=PhysicalLocation)
    account: str | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return self.account is not None and self.location.is_resolved


def check_endpoint_identity(
    *,
    endpoint: str,
    vsphere: VSphereInventoryProvider,
) -> Diagnostic | None:
    """Compara el hostname auto-reportado por el vCenter con `endpoint`."""

    reported = vsphere.get_endpoint_identity_hostname(endpoint)
    if reported == endpoint:
        return None
    message = f"vCenter URL does not match {endpoint} != {reported}"
    logger.warning(message)
    return Diagnostic(
        code=DiagnosticCode.HOSTNAME_MISMATCH,
        endpoint=endpoint,
        message=message,
    )


def resolve_location(
    *,
    endpoint: str,
    vsphere: VSphereInventoryProvider,
    cloud: CloudInventoryProvider,
    accounts: Sequence[str],
    resolver: HostResolver,
) -> LocationResolution:
    identity = check_endpoint_identity(endpoint=endpoint, vsphere=vsphere)

    # ResolutionError propagates: without an address no location can be found.
    ip_addresses = resolver(endpoint)
    result = LocationResolution(endpoint=endpoint, ip_addresses=list(ip_addresses))
    if identity is not None:
        result.diagnostics.append(identity)

    first_ip = ip_addresses[0] if ip_addresses else "<none>"

    for account in sorted(accounts):
        location = cloud.resolve_physical_location(account, ip_addresses)
        if not location.datacenter_name:
            continue

        result.location = location
        if not location.pod_name:
            message = (
                f"unable to find datacenter pod of vCenter {endpoint} in "
                f"{location.datacenter_name} using IP address {first_ip}"
            )
            logger.warning(message)
            result.diagnostics.append(
                Diagnostic(
                    code=DiagnosticCode.POD_UNRESOLVED,
                    endpoint=endpoint,
                    message=message,
                )
            )
            return result

        result.account = account
        logger.debug(
            "vCenter %s located in %s/%s via account %s",
            endpoint,
            location.datacenter_name,
            location.pod_name,
            account,
        )
        return result

    message = f"unable to find physical location of vCenter {endpoint} using IP address {first_ip}"
    logger.warning(message)
    result.diagnostics.append(
        Diagnostic(
            code=DiagnosticCode.LOCATION_UNRESOLVED,
            endpoint=endpoint,
            message=message,
        )
    )
    return result
