"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O (pyVmomi, httpx).
- Facilita serializar el artefacto final con claves camelCase estables, que es
  lo que espera el consumidor downstream (capacity manager).

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
- Todos son inmutables (`frozen`): se crean una vez durante la correlación.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

SCHEMA_VERSION = 1


class _DomainModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class VCenterCredential(BaseModel):
    """Credenciales de un vCenter (clave: nombre del servidor en el JSON)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    username: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("username", "Username"),
    )
    password: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("password", "Password"),
    )


class SoftLayerCredential(BaseModel):
    """Credenciales de una cuenta IBM Cloud classic (SoftLayer)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    username: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("username", "Username"),
    )
    api_token: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("apiToken", "ApiToken", "api_token"),
    )


class DatacenterRef(_DomainModel):
    name: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1, description="Inventory path, p.ej. '/dc1'.")


class VCenterSpec(_DomainModel):
    """Un endpoint vCenter tal como aparece en el artefacto final."""

    server: str = Field(..., min_length=1, description="Nombre de red del vCenter.")
    datacenters: list[str] = Field(
        default_factory=list,
        description="Inventory paths de los datacenters del vCenter.",
    )


class FailureDomainTopology(_DomainModel):
    datacenter: str = Field(..., min_length=1)
    compute_cluster: str = Field(
        ...,
        min_length=1,
        description="Inventory path del cluster, p.ej. '/dc1/host/cluster1'.",
    )
    datastore: str | None = None
    networks: list[str] = Field(default_factory=list)
    resource_pool: str | None = None


class FailureDomain(_DomainModel):
    """Unidad de topología (región/zona) que agrupa un cluster de cómputo.

    Por qué `server` dentro del failure domain:
    - Varios vCenters pueden reutilizar nombres de cluster; el par
      (server, computeCluster) es lo que identifica el recurso físico.
    """

    name: str = Field(..., min_length=1)
    region: str = Field(..., min_length=1)
    zone: str = Field(..., min_length=1)
    server: str = Field(..., min_length=1)
    topology: FailureDomainTopology


class CapacityRecord(_DomainModel):
    """Capacidad de cómputo de un failure domain.

    La memoria se mantiene en bytes: la conversión a GiB es cosa de la capa de
    presentación (manifests, tablas CLI).
    """

    name: str = Field(..., min_length=1)
    vcpu_count: int = Field(..., ge=0, alias="vCPUCount")
    total_memory_bytes: int = Field(..., ge=0)


class NetworkSegment(_DomainModel):
    """Port group distribuido del lado vSphere."""

    name: str = Field(..., min_length=1)
    vlan_id: int = Field(..., ge=0, le=4095)


class PhysicalLocation(_DomainModel):
    """Ubicación física según el proveedor (datacenter + pod).

    Cualquiera de los dos campos puede faltar: eso significa "sin resolver".
    """

    datacenter_name: str | None = None
    pod_name: str | None = None

    @property
    def is_resolved(self) -> bool:
        return bool(self.datacenter_name) and bool(self.pod_name)


class SubnetBlock(_DomainModel):
    """Un bloque de subred dentro de una VLAN del proveedor."""

    network_identifier: str | None = None
    cidr: int | None = Field(default=None, ge=0, le=128)
    gateway: str | None = None
    netmask: str | None = None
    ip_address_count: int | None = Field(default=None, ge=0)
    ip_addresses: list[str] = Field(default_factory=list)
    subnet_type: str | None = None
    pod_name: str | None = None
    datacenter_name: str | None = None


class ProviderSubnet(_DomainModel):
    """Registro VLAN del proveedor con sus bloques de subred."""

    vlan_number: int = Field(..., ge=0, le=4095)
    location: PhysicalLocation = Field(default_factory=PhysicalLocation)
    blocks: list[SubnetBlock] = Field(default_factory=list)


class Ipv6Addressing(_DomainModel):
    """Direccionamiento IPv6 secundario derivado de (prefijo, VLAN)."""

    prefix: str
    cidr_length: int = Field(..., ge=0, le=128)
    gateway: str
    start_address: str


class MatchedNetwork(_DomainModel):
    """Resultado del join port group <-> VLAN del proveedor.

    Solo existe para VLAN ids presentes en ambos lados.
    """

    name: str = Field(..., min_length=1)
    endpoint: str = Field(..., min_length=1)
    vlan_id: int = Field(..., ge=0, le=4095)
    port_group_name: str = Field(..., min_length=1)
    pod_name: str | None = None
    datacenter_name: str | None = None
    cidr: int
    gateway: str | None = None
    ip_address_count: int | None = None
    netmask: str | None = None
    subnet_type: str | None = None
    machine_network_cidr: str
    ip_addresses: list[str] = Field(default_factory=list)
    ipv6_prefix: str
    cidr_ipv6: int = Field(..., alias="cidrIPv6")
    gateway_ipv6: str = Field(..., alias="gatewayIPv6")
    start_ipv6_address: str = Field(..., alias="startIPv6Address")


class DiagnosticCode(str, Enum):
    NO_FAILURE_DOMAINS = "no_failure_domains"
    HOSTNAME_MISMATCH = "hostname_mismatch"
    LOCATION_UNRESOLVED = "location_unresolved"
    POD_UNRESOLVED = "pod_unresolved"
    AMBIGUOUS_SUBNET = "ambiguous_subnet"


class Diagnostic(_DomainModel):
    """Condición degradada no fatal registrada durante la ejecución.

    Por qué existe:
    - Permite distinguir programáticamente una ejecución limpia de una con
      endpoints omitidos, sin depender de parsear logs.
    """

    severity: Literal["warning"] = "warning"
    code: DiagnosticCode
    endpoint: str
    message: str


class MergedEnvironmentConfig(_DomainModel):
    """Agregado final: el artefacto que consume el capacity manager."""

    schema_version: int = Field(default=SCHEMA_VERSION, ge=1)
    vcenters: list[VCenterSpec] = Field(default_factory=list)
    failure_domains: list[FailureDomain] = Field(default_factory=list)
    failure_domains_resource_capacity: list[CapacityRecord] = Field(default_factory=list)
    matched_networks: list[MatchedNetwork] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.diagnostics)
