"""Contratos de los inventarios externos.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite que el adaptador pyVmomi / SoftLayer sea intercambiable por fakes en
  memoria durante los tests, sin acoplar el Core a los SDKs.

Reglas de diseño:
- Las llamadas son bloqueantes y síncronas desde el punto de vista del Core.
- Los errores se lanzan (`UpstreamQueryError`, `ResolutionError`), nunca se
  devuelven ni terminan el proceso: el orquestador decide si continuar.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from core.domain.models import (
    DatacenterRef,
    FailureDomain,
    NetworkSegment,
    PhysicalLocation,
    ProviderSubnet,
)


@runtime_checkable
class VSphereInventoryProvider(Protocol):
    def add_credentials(self, endpoint: str, user: str, password: str) -> None:
        """Autentica contra `endpoint` y guarda la sesión."""

        ...

    def get_failure_domains(self, endpoint: str) -> list[FailureDomain]:
        ...

    def get_cluster_capacity(self, endpoint: str, cluster_path: str) -> tuple[int, int]:
        """Devuelve `(cpu_cores, memory_bytes)` del cluster en `cluster_path`."""

        ...

    def get_datacenters(self, endpoint: str) -> list[DatacenterRef]:
        ...

    def get_distributed_port_groups(self, endpoint: str, name_filter: str) -> list[NetworkSegment]:
        ...

    def get_endpoint_identity_hostname(self, endpoint: str) -> str:
        """Hostname que el propio vCenter reporta (identidad del lado plataforma)."""

        ...


@runtime_checkable
class CloudInventoryProvider(Protocol):
    def add_credentials(self, account: str, user: str, token: str) -> None:
        ...

    def resolve_physical_location(
        self,
        account: str,
        ip_addresses: Sequence[str],
    ) -> PhysicalLocation:
        """Ubicación física que contiene alguna de las IPs (vacía si ninguna)."""

        ...

    def get_vlan_subnets(
        self,
        account: str,
        datacenter_name: str,
        pod_name: str,
    ) -> list[ProviderSubnet]:
        ...


class HostResolver(Protocol):
    def __call__(self, name: str) -> list[str]:
        """Resuelve un nombre de red a una o más direcciones IP."""

        ...
