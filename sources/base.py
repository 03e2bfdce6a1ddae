from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import config

_MEDIA_PREFERENCE = ("medium", "small", "thumbnail")


@dataclass(frozen=True)
class MediaRef:
    """An uploaded file with its resized variants, all URLs absolute."""

    base_url: str
    variants: dict[str, str] = field(default_factory=dict)
    alt: str | None = None

    @property
    def url(self) -> str:
        for tag in _MEDIA_PREFERENCE:
            if self.variants.get(tag):
                return self.variants[tag]
        return self.base_url

    def to_raw(self) -> dict[str, Any]:
        raw: dict[str, Any] = {"url": self.base_url}
        if self.variants:
            raw["formats"] = {tag: {"url": url} for tag, url in self.variants.items()}
        if self.alt:
            raw["alternativeText"] = self.alt
        return raw


@dataclass(frozen=True)
class EntityType:
    """How one CMS collection is queried and which fields its records carry."""

    name: str
    path: str
    sort: str
    required: tuple[str, ...]
    optional: dict[str, Any] = field(default_factory=dict)
    text_fields: tuple[str, ...] = ()
    media_slots: tuple[str, ...] = ()
    content_field: str | None = "content"
    detail_populate: tuple[str, ...] = ()
    list_populate: str = "*"

    @property
    def title_field(self) -> str:
        return next(f for f in self.required if f != "slug")

    def list_query(self, page: int, page_size: int = config.PAGE_SIZE) -> dict[str, Any]:
        return {
            "populate": self.list_populate,
            "sort": self.sort,
            "pagination[page]": page,
            "pagination[pageSize]": page_size,
            "publicationState": config.PUBLICATION_STATE,
        }

    def detail_query(self, slug: str) -> dict[str, Any]:
        return {
            "filters[slug][$eq]": slug,
            "populate": list(self.detail_populate) or "*",
        }


ARTICLES = EntityType(
    name="articles",
    path="/articles",
    sort="publishedDate:desc",
    required=("title", "slug"),
    optional={"publishedBy": config.Defaults.AUTHOR, "publishedDate": None},
    media_slots=("mainImage",),
    detail_populate=("mainImage", "content.image"),
)

COMPANIES = EntityType(
    name="companies",
    path="/companies",
    sort="title:asc",
    required=("title", "slug"),
    optional={
        "short_description": None,
        "website_url": None,
        "established_year": None,
        "headquarters": None,
        "specialization": None,
        "number_of_facilities": None,
        "key_technologies": None,
    },
    text_fields=("short_description",),
    media_slots=("logo", "featured_image"),
    detail_populate=("logo", "featured_image", "content.image"),
)

CROPS = EntityType(
    name="crops",
    path="/crops",
    sort="name:asc",
    required=("name", "slug"),
    optional={
        "scientificName": None,
        "description": None,
        "growthTime": None,
        "difficultyLevel": config.Defaults.DIFFICULTY,
        "lightRequirements": None,
        "waterRequirements": None,
        "nutrientRequirements": None,
        "harvestTips": None,
        "yieldPerSquareFoot": None,
    },
    text_fields=("description", "harvestTips"),
    media_slots=("mainImage",),
    detail_populate=("mainImage", "content"),
)

ENTITY_TYPES = {t.name: t for t in (ARTICLES, COMPANIES, CROPS)}


@dataclass(frozen=True)
class Entity:
    """Canonical content record, independent of the CMS payload shape."""

    id: int
    slug: str
    entity_type: str
    fields: dict[str, Any] = field(default_factory=dict)
    media: dict[str, MediaRef | None] = field(default_factory=dict)
    document: tuple | None = None

    @property
    def title(self) -> str:
        return self.fields.get("title") or self.fields.get("name") or self.slug

    def as_payload(self) -> dict[str, Any]:
        """Flat CMS-shaped mapping that normalizes back to this entity."""
        payload: dict[str, Any] = {"id": self.id, "slug": self.slug, **self.fields}
        for slot, media in self.media.items():
            payload[slot] = media.to_raw() if media else None
        content_field = ENTITY_TYPES[self.entity_type].content_field
        if content_field and self.document is not None:
            payload[content_field] = [block.to_raw() for block in self.document]
        return payload


@dataclass(frozen=True)
class RejectionReason:
    entity_type: str
    raw_id: Any
    missing: tuple[str, ...]

    def __str__(self) -> str:
        return f"{self.entity_type} record {self.raw_id!r} missing {', '.join(self.missing)}"
