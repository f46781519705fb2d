"""Carga de credenciales desde JSON.

Formato (ambos ficheros): un objeto cuyo key es el servidor/cuenta.
- vCenter:  {"vcenter.example.com": {"username": "...", "password": "..."}}
- IBM Cloud: {"account-name": {"username": "...", "apiToken": "..."}}

Cualquier problema aquí es fatal y ocurre antes de tocar ningún inventario.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from core.domain.models import SoftLayerCredential, VCenterCredential
from core.errors import CredentialError

_T = TypeVar("_T", bound=BaseModel)


def _load_credentials(path: Path, model: type[_T]) -> dict[str, _T]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CredentialError(f"unable to read credentials file {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CredentialError(f"credentials file {path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise CredentialError(f"credentials file {path} must contain a JSON object")

    out: dict[str, _T] = {}
    for key, value in data.items():
        if not key.strip():
            raise CredentialError(f"credentials file {path} contains an empty key")
        try:
            out[key] = model.model_validate(value)
        except ValidationError as exc:
            raise CredentialError(f"invalid credentials for {key!r} in {path}: {exc}") from exc
    return out


def load_vcenter_credentials(path: Path) -> dict[str, VCenterCredential]:
    return _load_credentials(path, VCenterCredential)


def load_softlayer_credentials(path: Path) -> dict[str, SoftLayerCredential]:
    return _load_credentials(path, SoftLayerCredential)
