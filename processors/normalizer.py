from __future__ import annotations

import logging
from typing import Any, Callable

import config
from processors.blocks import render
from processors.media import resolve_media
from sources.base import Entity, EntityType, RejectionReason
from utils.text_extraction_utils import extract_plain_text

logger = logging.getLogger(__name__)


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


# Tried in order; the first non-null value wins.
_ACCESSORS: tuple[Callable[[dict, str], Any], ...] = (
    lambda node, key: node.get(key),
    lambda node, key: _as_dict(node.get("attributes")).get(key),
    lambda node, key: _as_dict(_as_dict(node.get("data")).get("attributes")).get(key),
)


def lookup(node: dict, key: str) -> Any:
    for accessor in _ACCESSORS:
        value = accessor(node, key)
        if value is not None:
            return value
    return None


def unwrap(raw: Any) -> dict:
    """Step into a ``{"data": {...}}`` envelope node."""
    node = _as_dict(raw)
    inner = node.get("data")
    if isinstance(inner, dict) and "id" not in node and "attributes" not in node:
        return inner
    return node


_DIFFICULTY_ALIASES = {
    "easy": "Beginner",
    "beginner": "Beginner",
    "low": "Beginner",
    "medium": "Intermediate",
    "moderate": "Intermediate",
    "intermediate": "Intermediate",
    "hard": "Advanced",
    "difficult": "Advanced",
    "high": "Advanced",
    "advanced": "Advanced",
    "expert": "Advanced",
}


def normalize_difficulty(value: Any) -> str:
    if isinstance(value, str):
        tier = _DIFFICULTY_ALIASES.get(value.strip().lower())
        if tier:
            return tier
    if value is not None:
        logger.debug("Unknown difficulty level %r, using %s", value, config.Defaults.DIFFICULTY)
    return config.Defaults.DIFFICULTY


_COERCERS: dict[str, Callable[[Any], Any]] = {
    "difficultyLevel": normalize_difficulty,
}


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _coerce_id(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        # isdigit() also accepts superscripts, which int() rejects
        if text.isascii() and text.isdigit():
            return int(text)
    return None


def normalize(
    entity_type: EntityType, raw: Any, origin: str | None = None
) -> Entity | RejectionReason:
    """Map one raw CMS record onto the canonical ``Entity``.

    Returns a ``RejectionReason`` instead when the id or any required field
    is missing at every lookup location.
    """
    if isinstance(raw, Entity):
        return raw

    node = unwrap(raw)
    raw_id = lookup(node, "id")
    entity_id = _coerce_id(raw_id)

    missing = [] if entity_id is not None else ["id"]
    required = {}
    for name in entity_type.required:
        value = lookup(node, name)
        if _present(value):
            required[name] = value.strip() if isinstance(value, str) else value
        else:
            missing.append(name)
    if missing:
        return RejectionReason(entity_type.name, raw_id, tuple(missing))

    fields = {name: value for name, value in required.items() if name != "slug"}
    for name, default in entity_type.optional.items():
        value = lookup(node, name)
        if name in entity_type.text_fields and value is not None:
            value = extract_plain_text(value)
        if name in _COERCERS:
            value = _COERCERS[name](value)
        fields[name] = value if value is not None else default

    media = {slot: resolve_media(lookup(node, slot), origin) for slot in entity_type.media_slots}

    document = None
    if entity_type.content_field:
        content = lookup(node, entity_type.content_field)
        if content is not None:
            document = render(content, origin)

    return Entity(
        id=entity_id,
        slug=str(required["slug"]),
        entity_type=entity_type.name,
        fields=fields,
        media=media,
        document=document,
    )


def normalize_many(
    entity_type: EntityType, raw_nodes: list, origin: str | None = None
) -> tuple[list[Entity], list[RejectionReason]]:
    entities: list[Entity] = []
    rejected: list[RejectionReason] = []
    for raw in raw_nodes:
        result = normalize(entity_type, raw, origin)
        if isinstance(result, RejectionReason):
            logger.warning("Rejected %s", result)
            rejected.append(result)
        else:
            entities.append(result)
    return entities, rejected
