from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import config
from sources.base import MediaRef

logger = logging.getLogger(__name__)

_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


def media_origin(api_url: str = config.CMS_API_URL, api_path: str = config.CMS_API_PATH) -> str:
    """Strip the trailing API path segment from the API URL.

    ``http://cms:1337/api`` -> ``http://cms:1337``.
    """
    parts = urlsplit(api_url)
    path = parts.path.rstrip("/")
    suffix = "/" + api_path.strip("/") if api_path.strip("/") else ""
    if suffix and path.endswith(suffix):
        path = path[: -len(suffix)]
    return urlunsplit((parts.scheme, parts.netloc, path, "", "")).rstrip("/")


def default_origin() -> str:
    return (config.CMS_MEDIA_ORIGIN or media_origin()).rstrip("/")


def absolute_url(url: str, origin: str | None = None) -> str:
    if _SCHEME.match(url):
        return url
    origin = (origin if origin is not None else default_origin()).rstrip("/")
    if url.startswith("//"):
        scheme = urlsplit(origin).scheme or "https"
        return f"{scheme}:{url}"
    if url.startswith("/"):
        return f"{origin}{url}"
    return f"{origin}/{url}"


def _unwrap(node: Any) -> dict | None:
    # {data: [..]} / [..] -> first, {data: {..}} -> inner, {attributes: {..}} -> inner
    for _ in range(3):
        if isinstance(node, list):
            node = node[0] if node else None
        elif isinstance(node, dict) and isinstance(node.get("data"), (dict, list)) and "url" not in node:
            node = node["data"]
        else:
            break
    if not isinstance(node, dict):
        return None
    attrs = node.get("attributes")
    if "url" not in node and isinstance(attrs, dict):
        return attrs
    return node


def resolve_media(node: Any, origin: str | None = None) -> MediaRef | None:
    """Resolve a raw media node (direct or nested under data/attributes)."""
    media = _unwrap(node)
    if media is None:
        return None
    url = media.get("url")
    if not isinstance(url, str) or not url.strip():
        return None

    variants: dict[str, str] = {}
    formats = media.get("formats")
    if isinstance(formats, dict):
        for tag, fmt in formats.items():
            fmt_url = fmt.get("url") if isinstance(fmt, dict) else fmt
            if isinstance(fmt_url, str) and fmt_url.strip():
                variants[tag] = absolute_url(fmt_url.strip(), origin)

    alt = media.get("alternativeText") or media.get("caption") or None
    return MediaRef(absolute_url(url.strip(), origin), variants, alt)


def media_mime(node: Any) -> str:
    media = _unwrap(node)
    mime = media.get("mime") if media else None
    return mime.lower() if isinstance(mime, str) else ""
