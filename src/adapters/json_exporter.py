"""Exportación JSON del agregado.

Por qué JSON:
- Es el formato que consume el capacity manager downstream.
- Claves camelCase y orden estable: artefactos diffables entre ejecuciones.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import MergedEnvironmentConfig


def export_environment_json(*, config: MergedEnvironmentConfig, output_path: Path) -> Path:
    """Exporta `MergedEnvironmentConfig` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = config.model_dump(mode="json", by_alias=True)
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )
    return output_path
