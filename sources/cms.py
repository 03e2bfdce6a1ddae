from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import requests

import config
from sources.errors import SchemaError, TransportError

logger = logging.getLogger(__name__)

_HEADERS = {"User-Agent": config.USER_AGENT, "Accept": "application/json"}


class Transport(Protocol):
    async def get(self, path: str, query: dict[str, Any]) -> Any: ...


def encode_query(query: dict[str, Any], prefix: str = "") -> list[tuple[str, Any]]:
    """Flatten a query mapping into Strapi's bracket syntax.

    Lists become ``key[0]=a&key[1]=b`` and nested mappings
    ``key[sub]=value``; keys already written in bracket form pass through.
    """
    params: list[tuple[str, Any]] = []
    for key, value in query.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if isinstance(value, dict):
            params.extend(encode_query(value, name))
        elif isinstance(value, (list, tuple)):
            for i, item in enumerate(value):
                if isinstance(item, dict):
                    params.extend(encode_query(item, f"{name}[{i}]"))
                else:
                    params.append((f"{name}[{i}]", _scalar(item)))
        elif value is not None:
            params.append((name, _scalar(value)))
    return params


def _scalar(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class CMSClient:
    """Read-only CMS transport; each call runs in a worker thread."""

    def __init__(
        self,
        base_url: str = config.CMS_API_URL,
        timeout: float = config.CMS_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    async def get(self, path: str, query: dict[str, Any] | None = None) -> Any:
        return await asyncio.to_thread(self._get, path, query or {})

    def close(self) -> None:
        self._session.close()

    def _get(self, path: str, query: dict[str, Any]) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self._session.get(
                url, params=encode_query(query), headers=_HEADERS, timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.error("CMS request to %s failed: %s", url, exc)
            raise TransportError(str(exc) or "Network error") from exc

        if not resp.ok:
            message = _server_message(resp) or f"HTTP {resp.status_code}"
            logger.error("CMS %s returned %s: %s", url, resp.status_code, message)
            raise TransportError(message, status=resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            raise TransportError(f"Invalid JSON from {url}", status=resp.status_code) from exc


def _server_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return ""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return str(error.get("message") or "")
    return ""


def envelope_data(payload: Any) -> Any:
    """Return the ``data`` member of a CMS response envelope."""
    if not isinstance(payload, dict) or "data" not in payload:
        raise SchemaError("Response envelope missing 'data'")
    data = payload["data"]
    if data is None:
        return []
    if not isinstance(data, (list, dict)):
        raise SchemaError(f"Unexpected 'data' of type {type(data).__name__}")
    return data


def page_count(payload: Any) -> int:
    meta = payload.get("meta") if isinstance(payload, dict) else None
    pagination = meta.get("pagination") if isinstance(meta, dict) else None
    if not isinstance(pagination, dict):
        return 1
    try:
        return max(1, int(pagination.get("pageCount") or 1))
    except (TypeError, ValueError):
        return 1
