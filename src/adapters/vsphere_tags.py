"""Cliente mínimo del servicio de tagging de vSphere (Automation REST API).

Por qué REST y no pyVmomi:
- Los tags/categorías no existen en la API SOAP (vim25); solo en `/api/cis`.

Solo lectura: categorías, tags por categoría y objetos asociados a cada tag.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from adapters.http_client import build_client
from core.config import AppSettings
from core.errors import UpstreamQueryError

logger = logging.getLogger(__name__)

SESSION_HEADER = "vmware-api-session-id"


class VSphereTagClient:
    """Sesión REST contra un vCenter (`/api/session`)."""

    def __init__(
        self,
        server: str,
        user: str,
        password: str,
        *,
        settings: AppSettings | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        settings = settings or AppSettings()
        self._server = server
        self._client = build_client(
            settings,
            base_url=f"https://{server}/api/",
            verify=settings.vsphere_verify_ssl,
            transport=transport,
        )
        try:
            token = self._request("POST", "session", auth=(user, password))
            if not isinstance(token, str) or not token:
                raise UpstreamQueryError(f"vCenter {server} did not return a REST session token")
        except UpstreamQueryError:
            self._client.close()
            raise
        self._client.headers[SESSION_HEADER] = token

    def close(self) -> None:
        try:
            self._client.delete("session")
        except httpx.HTTPError as exc:
            logger.debug("vCenter %s REST logout failed: %s", self._server, exc)
        self._client.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise UpstreamQueryError(f"vCenter {self._server} tagging request {path} failed: {exc}") from exc
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamQueryError(f"vCenter {self._server} tagging request {path} returned invalid JSON") from exc

    def find_category_id(self, name: str) -> str | None:
        for category_id in self._request("GET", "cis/tagging/category") or []:
            category = self._request("GET", f"cis/tagging/category/{category_id}") or {}
            if category.get("name") == name:
                return category_id
        return None

    def tags_for_category(self, category_id: str) -> dict[str, str]:
        """Devuelve `{tag_id: tag_name}` para la categoría."""

        tag_ids = self._request(
            "POST",
            "cis/tagging/tag",
            params={"action": "list-tags-for-category"},
            json={"category_id": category_id},
        ) or []
        out: dict[str, str] = {}
        for tag_id in tag_ids:
            tag = self._request("GET", f"cis/tagging/tag/{tag_id}") or {}
            if isinstance(tag.get("name"), str):
                out[tag_id] = tag["name"]
        return out

    def attached_objects(self, tag_id: str) -> list[tuple[str, str]]:
        """Objetos asociados al tag como `(type, moref_id)`."""

        objects = self._request(
            "POST",
            f"cis/tagging/tag-association/{tag_id}",
            params={"action": "list-attached-objects"},
        ) or []
        return [
            (str(obj.get("type")), str(obj.get("id")))
            for obj in objects
            if isinstance(obj, dict) and obj.get("id")
        ]

    def objects_by_tag_name(self, category_name: str, object_type: str) -> dict[str, str]:
        """Mapa `{moref_id: tag_name}` para objetos de `object_type` en la categoría."""

        category_id = self.find_category_id(category_name)
        if category_id is None:
            return {}
        out: dict[str, str] = {}
        for tag_id, tag_name in sorted(self.tags_for_category(category_id).items(), key=lambda kv: kv[1]):
            for obj_type, obj_id in self.attached_objects(tag_id):
                if obj_type == object_type:
                    out[obj_id] = tag_name
        return out
