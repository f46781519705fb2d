"""Correlation orchestration.

This module drives the whole run: for each vCenter (in sorted order) it
authenticates, collects failure domains and their capacity, lists
datacenters, resolves the physical location in IBM Cloud, matches port groups
against the VLANs of that location and synthesizes IPv6 addressing for every
match. The CLI only wires collaborators and renders the result; all the
continuation policy (what aborts, what degrades to a warning) lives here.

Processing is strictly sequential: one endpoint at a time, one account probe
at a time. Fatal conditions raise a `CorrelationError` subclass; degraded
conditions become `Diagnostic` entries on the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping

from core.domain.models import (
    CapacityRecord,
    Diagnostic,
    DiagnosticCode,
    FailureDomain,
    MatchedNetwork,
    MergedEnvironmentConfig,
    SoftLayerCredential,
    VCenterCredential,
    VCenterSpec,
)
from core.interfaces.inventory import (
    CloudInventoryProvider,
    HostResolver,
    VSphereInventoryProvider,
)
from core.services.addressing import synthesize_ipv6
from core.services.capacity import summarize_capacity
from core.services.location import resolve_location
from core.services.vlan_matcher import build_matched_network, match_vlans

logger = logging.getLogger(__name__)


@dataclass
class CorrelationRequest:
    """Parameters that control a correlation run."""

    vcenter_credentials: Mapping[str, VCenterCredential]
    softlayer_credentials: Mapping[str, SoftLayerCredential]
    ipv6_prefix: str
    port_group_filter: str = ""


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, warnings)."""

    warning: Callable[[str], None] | None = None
    endpoint_start: Callable[[str, int, int], None] | None = None
    endpoint_done: Callable[[str], None] | None = None


@dataclass
class PipelineResult:
    """Output of a pipeline invocation."""

    config: MergedEnvironmentConfig
    endpoints: list[str] = field(default_factory=list)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return self.config.diagnostics

    @property
    def warnings(self) -> list[str]:
        return [d.message for d in self.config.diagnostics]


@dataclass
class _Accumulator:
    vcenters: list[VCenterSpec] = field(default_factory=list)
    failure_domains: list[FailureDomain] = field(default_factory=list)
    capacity: list[CapacityRecord] = field(default_factory=list)
    networks: list[MatchedNetwork] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def freeze(self) -> MergedEnvironmentConfig:
        return MergedEnvironmentConfig(
            vcenters=self.vcenters,
            failure_domains=self.failure_domains,
            failure_domains_resource_capacity=self.capacity,
            matched_networks=self.networks,
            diagnostics=self.diagnostics,
        )


def _warn(acc: _Accumulator, hooks: PipelineHooks, diagnostic: Diagnostic) -> None:
    acc.diagnostics.append(diagnostic)
    if hooks.warning:
        hooks.warning(diagnostic.message)


def _correlate_endpoint(
    *,
    endpoint: str,
    request: CorrelationRequest,
    vsphere: VSphereInventoryProvider,
    cloud: CloudInventoryProvider,
    resolver: HostResolver,
    hooks: PipelineHooks,
    acc: _Accumulator,
) -> None:
    credential = request.vcenter_credentials[endpoint]
    vsphere.add_credentials(endpoint, credential.username, credential.password)

    failure_domains = vsphere.get_failure_domains(endpoint)
    if not failure_domains:
        message = f"No failure domains found for {endpoint}"
        logger.warning(message)
        _warn(
            acc,
            hooks,
            Diagnostic(code=DiagnosticCode.NO_FAILURE_DOMAINS, endpoint=endpoint, message=message),
        )
        return

    for fd in failure_domains:
        cpu, memory = vsphere.get_cluster_capacity(fd.server, fd.topology.compute_cluster)
        record = summarize_capacity(fd.name, cpu, memory)
        logger.info(
            "failure domain %s: %d cores, %d bytes memory",
            fd.name,
            record.vcpu_count,
            record.total_memory_bytes,
        )
        acc.capacity.append(record)
    acc.failure_domains.extend(failure_domains)

    datacenters = vsphere.get_datacenters(endpoint)
    acc.vcenters.append(
        VCenterSpec(server=endpoint, datacenters=[dc.path for dc in datacenters])
    )

    resolution = resolve_location(
        endpoint=endpoint,
        vsphere=vsphere,
        cloud=cloud,
        accounts=list(request.softlayer_credentials),
        resolver=resolver,
    )
    for diagnostic in resolution.diagnostics:
        _warn(acc, hooks, diagnostic)

    if not resolution.resolved:
        return

    location = resolution.location
    segments = vsphere.get_distributed_port_groups(endpoint, request.port_group_filter)
    subnets = cloud.get_vlan_subnets(
        resolution.account,
        location.datacenter_name,
        location.pod_name,
    )

    matched = match_vlans(
        endpoint=endpoint,
        segments=segments,
        subnets=subnets,
        location=location,
    )
    for diagnostic in matched.diagnostics:
        _warn(acc, hooks, diagnostic)

    for match in matched.matches:
        ipv6 = synthesize_ipv6(request.ipv6_prefix, match.record.vlan_number)
        acc.networks.append(build_matched_network(match, ipv6))

    logger.info(
        "vCenter %s: %d port groups, %d provider VLANs, %d matched",
        endpoint,
        len(segments),
        len(subnets),
        len(matched.matches),
    )


def correlate(
    *,
    request: CorrelationRequest,
    vsphere: VSphereInventoryProvider,
    cloud: CloudInventoryProvider,
    resolver: HostResolver,
    hooks: PipelineHooks | None = None,
) -> PipelineResult:
    """Run the correlation over every configured vCenter.

    Raises the first fatal `CorrelationError` encountered; nothing partial is
    returned in that case.
    """

    hooks = hooks or PipelineHooks()
    acc = _Accumulator()

    # Fail before any remote call if the prefix cannot form a network.
    synthesize_ipv6(request.ipv6_prefix, 1)

    for account in sorted(request.softlayer_credentials):
        credential = request.softlayer_credentials[account]
        cloud.add_credentials(account, credential.username, credential.api_token)

    endpoints = sorted(request.vcenter_credentials)
    for position, endpoint in enumerate(endpoints, start=1):
        if hooks.endpoint_start:
            hooks.endpoint_start(endpoint, position, len(endpoints))
        _correlate_endpoint(
            endpoint=endpoint,
            request=request,
            vsphere=vsphere,
            cloud=cloud,
            resolver=resolver,
            hooks=hooks,
            acc=acc,
        )
        if hooks.endpoint_done:
            hooks.endpoint_done(endpoint)

    return PipelineResult(config=acc.freeze(), endpoints=endpoints)
