"""Inventario IBM Cloud classic (SoftLayer) vía API REST.

Responsabilidad:
- Localizar el datacenter/pod que contiene una IP (la del vCenter).
- Listar las VLANs de un datacenter/pod con sus bloques de subred.
- Normalizar la respuesta a `PhysicalLocation` / `ProviderSubnet`.

La API se consume con httpx (basic auth: usuario + API key). Errores HTTP y
respuestas no-JSON se traducen a `UpstreamQueryError`.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

import httpx
from pydantic import ValidationError

from adapters.http_client import build_client
from core.config import AppSettings
from core.domain.models import PhysicalLocation, ProviderSubnet, SubnetBlock
from core.errors import CredentialError, UpstreamQueryError

logger = logging.getLogger(__name__)

IP_ADDRESS_MASK = "mask[id,ipAddress,subnet[id,podName,datacenter[name]]]"

VLAN_MASK = (
    "mask[id,vlanNumber,primaryRouter[hostname,datacenter[name]],"
    "subnets[id,networkIdentifier,cidr,gateway,netmask,ipAddressCount,subnetType,"
    "podName,datacenter[name],ipAddresses[ipAddress]]]"
)


def _datacenter_filter(datacenter_name: str) -> str:
    return json.dumps(
        {"networkVlans": {"primaryRouter": {"datacenter": {"name": {"operation": datacenter_name}}}}}
    )


def _nested_name(value: Any) -> str | None:
    if isinstance(value, dict) and isinstance(value.get("name"), str):
        return value["name"]
    return None


def parse_subnet_block(raw: dict[str, Any]) -> SubnetBlock:
    addresses: list[str] = []
    for entry in raw.get("ipAddresses") or []:
        if isinstance(entry, dict) and isinstance(entry.get("ipAddress"), str):
            addresses.append(entry["ipAddress"])

    return SubnetBlock(
        network_identifier=raw.get("networkIdentifier"),
        cidr=raw.get("cidr"),
        gateway=raw.get("gateway"),
        netmask=raw.get("netmask"),
        ip_address_count=raw.get("ipAddressCount"),
        ip_addresses=addresses,
        subnet_type=raw.get("subnetType"),
        pod_name=raw.get("podName"),
        datacenter_name=_nested_name(raw.get("datacenter")),
    )


def parse_vlans(
    payload: Any,
    *,
    datacenter_name: str,
    pod_name: str,
) -> list[ProviderSubnet]:
    """Convierte la respuesta de `getNetworkVlans` y filtra por pod."""

    if not isinstance(payload, list):
        raise UpstreamQueryError("SoftLayer getNetworkVlans returned a non-list payload")

    location = PhysicalLocation(datacenter_name=datacenter_name, pod_name=pod_name)
    out: list[ProviderSubnet] = []
    for raw_vlan in payload:
        if not isinstance(raw_vlan, dict) or raw_vlan.get("vlanNumber") is None:
            continue
        try:
            blocks = [
                parse_subnet_block(raw)
                for raw in raw_vlan.get("subnets") or []
                if isinstance(raw, dict)
            ]
            if not any(block.pod_name == pod_name for block in blocks):
                continue
            subnet = ProviderSubnet(
                vlan_number=int(raw_vlan["vlanNumber"]),
                location=location,
                blocks=blocks,
            )
        except (ValidationError, ValueError, TypeError) as exc:
            raise UpstreamQueryError(
                f"SoftLayer VLAN {raw_vlan.get('vlanNumber')!r} has an invalid shape: {exc}"
            ) from exc
        out.append(subnet)
    return out


class SoftLayerInventory:
    """Implementa `CloudInventoryProvider` contra SoftLayer REST v3.1."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport
        self._clients: dict[str, httpx.Client] = {}

    def add_credentials(self, account: str, user: str, token: str) -> None:
        if not user or not token:
            raise CredentialError(f"IBM Cloud account {account} needs a username and API token")
        if account in self._clients:
            self._clients[account].close()
        self._clients[account] = build_client(
            self._settings,
            base_url=self._settings.softlayer_api_url.rstrip("/") + "/",
            auth=(user, token),
            transport=self._transport,
        )

    def close(self) -> None:
        for client in self._clients.values():
            client.close()
        self._clients.clear()

    def _client(self, account: str) -> httpx.Client:
        try:
            return self._clients[account]
        except KeyError:
            raise UpstreamQueryError(f"no credentials registered for IBM Cloud account {account}") from None

    def _get(
        self,
        account: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        allow_not_found: bool = False,
    ) -> Any:
        client = self._client(account)
        try:
            response = client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamQueryError(f"SoftLayer request {path} failed for {account}: {exc}") from exc

        if allow_not_found and response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise UpstreamQueryError(
                f"SoftLayer request {path} failed for {account}: HTTP {response.status_code} {response.text[:200]}"
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamQueryError(f"SoftLayer request {path} returned invalid JSON") from exc

    def resolve_physical_location(
        self,
        account: str,
        ip_addresses: Sequence[str],
    ) -> PhysicalLocation:
        for ip in ip_addresses:
            payload = self._get(
                account,
                f"SoftLayer_Network_Subnet_IpAddress/getByIpAddress/{ip}.json",
                params={"objectMask": IP_ADDRESS_MASK},
                allow_not_found=True,
            )
            if not isinstance(payload, dict):
                continue
            subnet = payload.get("subnet")
            if not isinstance(subnet, dict):
                continue
            datacenter = _nested_name(subnet.get("datacenter"))
            if not datacenter:
                continue
            logger.debug("account %s: %s is in %s pod %s", account, ip, datacenter, subnet.get("podName"))
            return PhysicalLocation(datacenter_name=datacenter, pod_name=subnet.get("podName"))
        return PhysicalLocation()

    def get_vlan_subnets(
        self,
        account: str,
        datacenter_name: str,
        pod_name: str,
    ) -> list[ProviderSubnet]:
        payload = self._get(
            account,
            "SoftLayer_Account/getNetworkVlans.json",
            params={
                "objectMask": VLAN_MASK,
                "objectFilter": _datacenter_filter(datacenter_name),
            },
        )
        return parse_vlans(payload or [], datacenter_name=datacenter_name, pod_name=pod_name)
