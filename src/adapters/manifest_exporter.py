"""Manifests `Pool` / `Network` para el capacity manager.

Por qué un exportador aparte:
- El artefacto principal guarda la memoria en bytes; los `Pool` la expresan en
  GiB (división entera), que es la unidad que usa el CRD.
- Permite aplicar los recursos directamente (`kubectl apply -f`) sin
  transformar el JSON combinado.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from core.domain.models import MergedEnvironmentConfig
from core.services.capacity import memory_gib

API_VERSION = "vspherecapacitymanager.splat.io/v1"


def build_pool_manifests(config: MergedEnvironmentConfig) -> list[dict[str, Any]]:
    # Los registros de capacidad van en el mismo orden que los failure domains;
    # el nombre no es único entre vCenters.
    pools: list[dict[str, Any]] = []
    for fd, record in zip(config.failure_domains, config.failure_domains_resource_capacity, strict=True):
        pools.append(
            {
                "apiVersion": API_VERSION,
                "kind": "Pool",
                "metadata": {"name": fd.name},
                "spec": {
                    **fd.model_dump(mode="json", by_alias=True),
                    "vcpus": record.vcpu_count,
                    "memory": memory_gib(record),
                    "storage": 0,
                    "exclude": False,
                },
            }
        )
    return pools


def build_network_manifests(config: MergedEnvironmentConfig) -> list[dict[str, Any]]:
    networks: list[dict[str, Any]] = []
    for network in config.matched_networks:
        spec = network.model_dump(mode="json", by_alias=True, exclude={"name", "endpoint"})
        spec["vlanId"] = str(network.vlan_id)
        networks.append(
            {
                "apiVersion": API_VERSION,
                "kind": "Network",
                "metadata": {"name": network.name},
                "spec": spec,
            }
        )
    return networks


def export_manifests(*, config: MergedEnvironmentConfig, output_dir: Path) -> list[Path]:
    """Escribe `pools.json` y `networks.json` (listas de manifests) en `output_dir`."""

    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for filename, items in (
        ("pools.json", build_pool_manifests(config)),
        ("networks.json", build_network_manifests(config)),
    ):
        path = output_dir / filename
        path.write_text(
            json.dumps(items, ensure_ascii=False, indent=2) + "\n",
            encoding="utf-8",
        )
        written.append(path)
    return written
