from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import pytest

from core.domain.models import (
    DatacenterRef,
    FailureDomain,
    FailureDomainTopology,
    NetworkSegment,
    PhysicalLocation,
    ProviderSubnet,
    SoftLayerCredential,
    SubnetBlock,
    VCenterCredential,
)
from core.errors import ResolutionError, UpstreamQueryError


def make_failure_domain(name: str, server: str, cluster: str = "cluster1") -> FailureDomain:
    return FailureDomain(
        name=name,
        region="us-east",
        zone=name,
        server=server,
        topology=FailureDomainTopology(
            datacenter="dc1",
            compute_cluster=f"/dc1/host/{cluster}",
            datastore="/dc1/datastore/ds1",
        ),
    )


def make_block(
    network_identifier: str | None = "10.10.0.0",
    cidr: int | None = 24,
    pod: str = "dal10.pod01",
) -> SubnetBlock:
    return SubnetBlock(
        network_identifier=network_identifier,
        cidr=cidr,
        gateway="10.10.0.1",
        netmask="255.255.255.0",
        ip_address_count=256,
        ip_addresses=["10.10.0.1", "10.10.0.2"],
        subnet_type="ADDITIONAL_PRIMARY",
        pod_name=pod,
        datacenter_name="dal10",
    )


def make_vlan(vlan: int, *blocks: SubnetBlock, pod: str = "dal10.pod01") -> ProviderSubnet:
    return ProviderSubnet(
        vlan_number=vlan,
        location=PhysicalLocation(datacenter_name="dal10", pod_name=pod),
        blocks=list(blocks) if blocks else [make_block(f"10.{vlan % 256}.0.0", 24, pod)],
    )


@dataclass
class FakeEndpoint:
    failure_domains: list[FailureDomain] = field(default_factory=list)
    capacity: dict[str, tuple[int, int]] = field(default_factory=dict)
    datacenters: list[DatacenterRef] = field(default_factory=list)
    segments: list[NetworkSegment] = field(default_factory=list)
    hostname: str | None = None


class FakeVSphere:
    def __init__(self, endpoints: dict[str, FakeEndpoint]) -> None:
        self.endpoints = endpoints
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    def add_credentials(self, endpoint: str, user: str, password: str) -> None:
        self.calls.append(("add_credentials", endpoint))

    def get_failure_domains(self, endpoint: str) -> list[FailureDomain]:
        self.calls.append(("get_failure_domains", endpoint))
        return list(self.endpoints[endpoint].failure_domains)

    def get_cluster_capacity(self, endpoint: str, cluster_path: str) -> tuple[int, int]:
        self.calls.append(("get_cluster_capacity", endpoint))
        try:
            return self.endpoints[endpoint].capacity[cluster_path]
        except KeyError:
            raise UpstreamQueryError(f"cluster {cluster_path} not found") from None

    def get_datacenters(self, endpoint: str) -> list[DatacenterRef]:
        return list(self.endpoints[endpoint].datacenters)

    def get_distributed_port_groups(self, endpoint: str, name_filter: str) -> list[NetworkSegment]:
        self.calls.append(("get_distributed_port_groups", endpoint))
        return [s for s in self.endpoints[endpoint].segments if name_filter in s.name]

    def get_endpoint_identity_hostname(self, endpoint: str) -> str:
        return self.endpoints[endpoint].hostname or endpoint

    def close(self) -> None:
        self.closed = True


class FakeCloud:
    def __init__(
        self,
        locations: dict[tuple[str, str], PhysicalLocation] | None = None,
        subnets: dict[tuple[str, str, str], list[ProviderSubnet]] | None = None,
    ) -> None:
        self.locations = locations or {}
        self.subnets = subnets or {}
        self.accounts: list[str] = []
        self.probes: list[str] = []
        self.closed = False

    def add_credentials(self, account: str, user: str, token: str) -> None:
        self.accounts.append(account)

    def resolve_physical_location(self, account: str, ip_addresses: Sequence[str]) -> PhysicalLocation:
        self.probes.append(account)
        for ip in ip_addresses:
            location = self.locations.get((account, ip))
            if location is not None:
                return location
        return PhysicalLocation()

    def get_vlan_subnets(self, account: str, datacenter_name: str, pod_name: str) -> list[ProviderSubnet]:
        return list(self.subnets.get((account, datacenter_name, pod_name), []))

    def close(self) -> None:
        self.closed = True


class FakeResolver:
    def __init__(self, table: dict[str, list[str]]) -> None:
        self.table = table

    def __call__(self, name: str) -> list[str]:
        try:
            return list(self.table[name])
        except KeyError:
            raise ResolutionError(f"unable to resolve {name}") from None


@pytest.fixture
def vcenter_credentials() -> dict[str, VCenterCredential]:
    return {
        "vc-b.example.com": VCenterCredential(username="admin", password="secret"),
        "vc-a.example.com": VCenterCredential(username="admin", password="secret"),
    }


@pytest.fixture
def softlayer_credentials() -> dict[str, SoftLayerCredential]:
    return {
        "primary": SoftLayerCredential(username="sl-user", api_token="token"),
        "secondary": SoftLayerCredential(username="sl-user2", api_token="token2"),
    }


@pytest.fixture
def two_endpoint_world() -> tuple[FakeVSphere, FakeCloud, FakeResolver]:
    """vc-a resolves to dal10.pod01 with three VLANs; vc-b has no known location."""

    vsphere = FakeVSphere(
        {
            "vc-a.example.com": FakeEndpoint(
                failure_domains=[make_failure_domain("fd-a", "vc-a.example.com", "cluster-a")],
                capacity={"/dc1/host/cluster-a": (32, 137438953472)},
                datacenters=[DatacenterRef(name="dc1", path="/dc1")],
                segments=[
                    NetworkSegment(name="ci-vlan-100", vlan_id=100),
                    NetworkSegment(name="ci-vlan-200", vlan_id=200),
                    NetworkSegment(name="ci-vlan-999", vlan_id=999),
                ],
            ),
            "vc-b.example.com": FakeEndpoint(
                failure_domains=[make_failure_domain("fd-b", "vc-b.example.com", "cluster-b")],
                capacity={"/dc1/host/cluster-b": (64, 274877906944)},
                datacenters=[DatacenterRef(name="dc1", path="/dc1")],
                segments=[NetworkSegment(name="ci-vlan-100", vlan_id=100)],
            ),
        }
    )
    cloud = FakeCloud(
        locations={
            ("secondary", "192.0.2.10"): PhysicalLocation(datacenter_name="dal10", pod_name="dal10.pod01"),
        },
        subnets={
            ("secondary", "dal10", "dal10.pod01"): [
                make_vlan(100),
                make_vlan(200),
                make_vlan(300),
            ],
        },
    )
    resolver = FakeResolver(
        {
            "vc-a.example.com": ["192.0.2.10"],
            "vc-b.example.com": ["198.51.100.20"],
        }
    )
    return vsphere, cloud, resolver
