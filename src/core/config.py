"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (vSphere/SoftLayer) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import set_key
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "vcmd"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "vcmd"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "vcmd"
    return Path.home() / ".config" / "vcmd"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def write_user_env_vars(values: dict[str, str | None], *, env_path: Path | None = None) -> Path:
    """Actualiza claves `VCMD_*` en el .env del usuario (el mismo que lee `AppSettings`).

    Por qué python-dotenv: es el parser que usa pydantic-settings para ese
    archivo, así lo que se escribe es exactamente lo que luego se lee.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)
    env_path.touch(exist_ok=True)
    for key, value in sorted(values.items()):
        if value is not None:
            set_key(env_path, key, value, quote_mode="never")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="VCMD_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    vcenter_auth_path: Path = Field(
        default=Path("vcenter.json"),
        description="JSON con credenciales por vCenter.",
    )
    ibmcloud_auth_path: Path = Field(
        default=Path("ibmcloud.json"),
        description="JSON con credenciales por cuenta IBM Cloud (SoftLayer).",
    )
    output_path: Path = Field(
        default=Path("output.json"),
        description="Destino del artefacto JSON combinado.",
    )

    ipv6_prefix: str | None = Field(
        default=None,
        description="Prefijo IPv6 (p.ej. 'fd65:a1a8:60ad'); la VLAN se añade como siguiente grupo.",
    )
    port_group_filter: str = Field(
        default="",
        description="Subcadena que deben contener los port groups distribuidos (vacío = todos).",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request HTTP (SoftLayer, vSphere REST).",
    )
    softlayer_api_url: str = Field(
        default="https://api.softlayer.com/rest/v3.1",
        min_length=8,
        description="Base URL de la API REST de SoftLayer.",
    )
    vsphere_verify_ssl: bool = Field(
        default=True,
        description="Validar certificados TLS de los vCenter.",
    )

    region_tag_category: str = Field(
        default="openshift-region",
        min_length=1,
        description="Categoría de tags vSphere que marca regiones (datacenters).",
    )
    zone_tag_category: str = Field(
        default="openshift-zone",
        min_length=1,
        description="Categoría de tags vSphere que marca zonas (clusters).",
    )

    log_level: str = Field(
        default="INFO",
        description="Nivel de logging (DEBUG, INFO, WARNING, ...).",
    )
