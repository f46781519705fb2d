"""Join de port groups (vSphere) con VLANs del proveedor.

El índice se construye por clave compuesta `(endpoint, vlan_id)`: dos vCenters
pueden reutilizar el mismo VLAN id con otro propósito, y un port group solo
compite con las subredes resueltas para la ubicación de su propio vCenter.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from core.domain.models import (
    Diagnostic,
    DiagnosticCode,
    Ipv6Addressing,
    MatchedNetwork,
    NetworkSegment,
    PhysicalLocation,
    ProviderSubnet,
    SubnetBlock,
)
from core.errors import DataIntegrityFault

logger = logging.getLogger(__name__)

SegmentKey = tuple[str, int]


@dataclass(frozen=True)
class VlanMatch:
    endpoint: str
    segment: NetworkSegment
    record: ProviderSubnet
    block: SubnetBlock
    location: PhysicalLocation

    @property
    def machine_network_cidr(self) -> str:
        return f"{self.block.network_identifier}/{self.block.cidr}"


@dataclass
class MatchResult:
    matches: list[VlanMatch] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def index_segments(endpoint: str, segments: Iterable[NetworkSegment]) -> dict[SegmentKey, NetworkSegment]:
    """Indexa por `(endpoint, vlan_id)`; si un VLAN id se repite gana el último."""

    index: dict[SegmentKey, NetworkSegment] = {}
    for segment in segments:
        key = (endpoint, segment.vlan_id)
        previous = index.get(key)
        if previous is not None and previous.name != segment.name:
            logger.debug(
                "vCenter %s: VLAN %d used by %s and %s, keeping %s",
                endpoint,
                segment.vlan_id,
                previous.name,
                segment.name,
                segment.name,
            )
        index[key] = segment
    return index


def _select_block(endpoint: str, record: ProviderSubnet, result: MatchResult) -> SubnetBlock:
    if not record.blocks:
        raise DataIntegrityFault(
            f"VLAN {record.vlan_number} in {record.location.datacenter_name}/"
            f"{record.location.pod_name} has no subnets"
        )

    if len(record.blocks) > 1:
        message = (
            f"VLAN {record.vlan_number} has {len(record.blocks)} subnets, "
            "using only the first entry"
        )
        logger.warning(message)
        result.diagnostics.append(
            Diagnostic(
                code=DiagnosticCode.AMBIGUOUS_SUBNET,
                endpoint=endpoint,
                message=message,
            )
        )

    block = record.blocks[0]
    if not block.network_identifier or block.cidr is None:
        raise DataIntegrityFault(
            f"VLAN {record.vlan_number} subnet is missing its network identifier or CIDR "
            f"(networkIdentifier={block.network_identifier!r}, cidr={block.cidr!r})"
        )
    return block


def match_vlans(
    *,
    endpoint: str,
    segments: Iterable[NetworkSegment],
    subnets: Iterable[ProviderSubnet],
    location: PhysicalLocation,
) -> MatchResult:
    """Produce un `VlanMatch` por cada VLAN presente en ambos lados.

    VLANs presentes solo en un lado se ignoran en silencio.
    """

    index = index_segments(endpoint, segments)
    result = MatchResult()

    for record in subnets:
        segment = index.get((endpoint, record.vlan_number))
        if segment is None:
            continue

        block = _select_block(endpoint, record, result)
        result.matches.append(
            VlanMatch(
                endpoint=endpoint,
                segment=segment,
                record=record,
                block=block,
                location=location,
            )
        )

    return result


def build_matched_network(match: VlanMatch, ipv6: Ipv6Addressing) -> MatchedNetwork:
    block = match.block
    return MatchedNetwork(
        name=match.segment.name,
        endpoint=match.endpoint,
        vlan_id=match.record.vlan_number,
        port_group_name=match.segment.name,
        pod_name=block.pod_name or match.location.pod_name,
        datacenter_name=block.datacenter_name or match.location.datacenter_name,
        cidr=block.cidr,
        gateway=block.gateway,
        ip_address_count=block.ip_address_count,
        netmask=block.netmask,
        subnet_type=block.subnet_type,
        machine_network_cidr=match.machine_network_cidr,
        ip_addresses=list(block.ip_addresses),
        ipv6_prefix=ipv6.prefix,
        cidr_ipv6=ipv6.cidr_length,
        gateway_ipv6=ipv6.gateway,
        start_ipv6_address=ipv6.start_address,
    )
