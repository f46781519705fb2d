"""Inventario vSphere (pyVmomi + tagging REST).

Responsabilidad:
- Sesión SOAP por vCenter (`SmartConnect`) y sesión REST para tags.
- Failure domains: clusters con tag de zona cuyo datacenter tiene tag de región.
- Capacidad, datacenters, port groups distribuidos e identidad del vCenter.

Los fallos de pyVmomi/red se traducen a `UpstreamQueryError`.
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator
from urllib.parse import urlparse

from pyVim import connect
from pyVmomi import vim, vmodl

from adapters.vsphere_tags import VSphereTagClient
from core.config import AppSettings
from core.domain.models import (
    DatacenterRef,
    FailureDomain,
    FailureDomainTopology,
    NetworkSegment,
)
from core.errors import UpstreamQueryError

logger = logging.getLogger(__name__)

HOSTNAME_URL_OPTION = "config.vpxd.hostnameUrl"


def inventory_path(obj: Any) -> str:
    """Path de inventario estilo govc (`/dc1/host/cluster1`), sin el root folder."""

    names: list[str] = []
    current = obj
    while current is not None and getattr(current, "parent", None) is not None:
        names.append(current.name)
        current = current.parent
    return "/" + "/".join(reversed(names))


def segment_vlan(port_config: Any) -> int | None:
    """VLAN id de un port group; `None` para trunk/PVLAN o sin configuración."""

    vlan = getattr(port_config, "vlan", None)
    vlan_id = getattr(vlan, "vlanId", None)
    if isinstance(vlan_id, int) and not isinstance(vlan_id, bool):
        return vlan_id
    return None


def hostname_from_url(value: str) -> str:
    """`https://vc.example.com:443/sdk` -> `vc.example.com`; un hostname pelado se devuelve tal cual."""

    value = value.strip()
    if "://" in value:
        return urlparse(value).hostname or value
    return value


@dataclass
class _Session:
    si: Any
    tags: VSphereTagClient

    @property
    def content(self) -> Any:
        return self.si.RetrieveContent()


@contextlib.contextmanager
def _upstream(endpoint: str, what: str) -> Iterator[None]:
    try:
        yield
    except (vmodl.MethodFault, OSError) as exc:
        raise UpstreamQueryError(f"vCenter {endpoint}: {what} failed: {exc}") from exc


class VSphereInventory:
    """Implementa `VSphereInventoryProvider` sobre pyVmomi."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        tag_client_factory: Callable[..., VSphereTagClient] = VSphereTagClient,
    ) -> None:
        self._settings = settings or AppSettings()
        self._tag_client_factory = tag_client_factory
        self._sessions: dict[str, _Session] = {}

    def add_credentials(self, endpoint: str, user: str, password: str) -> None:
        with _upstream(endpoint, "login"):
            si = connect.SmartConnect(
                host=endpoint,
                user=user,
                pwd=password,
                disableSslCertValidation=not self._settings.vsphere_verify_ssl,
            )
        try:
            tags = self._tag_client_factory(endpoint, user, password, settings=self._settings)
        except Exception:
            with contextlib.suppress(vmodl.MethodFault, OSError):
                connect.Disconnect(si)
            raise
        self._sessions[endpoint] = _Session(si=si, tags=tags)
        logger.debug("connected to vCenter %s", endpoint)

    def close(self) -> None:
        for endpoint, session in self._sessions.items():
            session.tags.close()
            with contextlib.suppress(vmodl.MethodFault, OSError):
                connect.Disconnect(session.si)
            logger.debug("disconnected from vCenter %s", endpoint)
        self._sessions.clear()

    def _session(self, endpoint: str) -> _Session:
        try:
            return self._sessions[endpoint]
        except KeyError:
            raise UpstreamQueryError(f"no session for vCenter {endpoint}") from None

    def _objects(self, endpoint: str, vim_type: Any) -> list[Any]:
        """Debe llamarse dentro de `_upstream`."""

        content = self._session(endpoint).content
        view = content.viewManager.CreateContainerView(content.rootFolder, [vim_type], True)
        try:
            return list(view.view)
        finally:
            view.Destroy()

    def get_failure_domains(self, endpoint: str) -> list[FailureDomain]:
        tags = self._session(endpoint).tags
        regions = tags.objects_by_tag_name(self._settings.region_tag_category, "Datacenter")
        zones = tags.objects_by_tag_name(self._settings.zone_tag_category, "ClusterComputeResource")
        if not regions or not zones:
            return []

        domains: list[FailureDomain] = []
        with _upstream(endpoint, "failure domain discovery"):
            for cluster in self._objects(endpoint, vim.ClusterComputeResource):
                zone = zones.get(cluster._moId)
                if zone is None:
                    continue
                datacenter = self._parent_datacenter(cluster)
                region = regions.get(datacenter._moId) if datacenter is not None else None
                if datacenter is None or region is None:
                    logger.debug("cluster %s has zone %s but no region", cluster.name, zone)
                    continue

                cluster_path = inventory_path(cluster)
                datastores = sorted(cluster.datastore, key=lambda ds: ds.name)
                domains.append(
                    FailureDomain(
                        name=f"{region}-{zone}",
                        region=region,
                        zone=zone,
                        server=endpoint,
                        topology=FailureDomainTopology(
                            datacenter=datacenter.name,
                            compute_cluster=cluster_path,
                            datastore=inventory_path(datastores[0]) if datastores else None,
                            resource_pool=f"{cluster_path}/Resources",
                        ),
                    )
                )
        return sorted(domains, key=lambda fd: fd.name)

    @staticmethod
    def _parent_datacenter(obj: Any) -> Any:
        current = obj.parent
        while current is not None and not isinstance(current, vim.Datacenter):
            current = current.parent
        return current

    def get_cluster_capacity(self, endpoint: str, cluster_path: str) -> tuple[int, int]:
        session = self._session(endpoint)
        with _upstream(endpoint, f"capacity of {cluster_path}"):
            content = session.content
            cluster = content.searchIndex.FindByInventoryPath(cluster_path.lstrip("/"))
            if not isinstance(cluster, vim.ClusterComputeResource):
                raise UpstreamQueryError(f"vCenter {endpoint}: cluster {cluster_path} not found")
            summary = cluster.summary
            return int(summary.numCpuCores or 0), int(summary.totalMemory or 0)

    def get_datacenters(self, endpoint: str) -> list[DatacenterRef]:
        with _upstream(endpoint, "datacenter listing"):
            refs = [
                DatacenterRef(name=dc.name, path=inventory_path(dc))
                for dc in self._objects(endpoint, vim.Datacenter)
            ]
        return sorted(refs, key=lambda ref: ref.path)

    def get_distributed_port_groups(self, endpoint: str, name_filter: str) -> list[NetworkSegment]:
        segments: list[NetworkSegment] = []
        with _upstream(endpoint, "port group listing"):
            for pg in self._objects(endpoint, vim.dvs.DistributedVirtualPortgroup):
                config = pg.config
                if getattr(config, "uplink", False):
                    continue
                if name_filter and name_filter not in config.name:
                    continue
                vlan_id = segment_vlan(config.defaultPortConfig)
                if vlan_id is None:
                    logger.debug("port group %s has no single VLAN id, skipping", config.name)
                    continue
                segments.append(NetworkSegment(name=config.name, vlan_id=vlan_id))
        return sorted(segments, key=lambda s: s.name)

    def get_endpoint_identity_hostname(self, endpoint: str) -> str:
        session = self._session(endpoint)
        with _upstream(endpoint, f"query of {HOSTNAME_URL_OPTION}"):
            content = session.content
            options = content.setting.QueryOptions(HOSTNAME_URL_OPTION)
        if not options:
            raise UpstreamQueryError(f"vCenter {endpoint}: {HOSTNAME_URL_OPTION} is not set")
        return hostname_from_url(str(options[0].value))
