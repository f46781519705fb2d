"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y TLS para SoftLayer y la API REST de vSphere.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings

USER_AGENT = "vcmd/0.1"


def build_client(
    settings: AppSettings | None = None,
    *,
    base_url: str = "",
    auth: httpx.Auth | tuple[str, str] | None = None,
    verify: bool = True,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que todos los adaptadores se comporten igual.
    - `transport` permite sustituir la red en tests.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.Client(
        base_url=base_url,
        auth=auth,
        verify=verify,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )
