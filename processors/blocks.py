"""Dynamic-zone rendering.

A CMS dynamic zone is an ordered list of authored components, each tagged
with ``__component`` (``heading.heading``, ``paragraph.paragraph``, ...), or
a rich-text node tree tagged with ``type``. ``render`` turns either into a
``Document``: a tuple of block values in authoring order. Components that
cannot be rendered are skipped, never fatal.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Union

import config
from processors.media import media_mime, resolve_media
from sources.base import MediaRef
from utils.text_extraction_utils import inline_text, node_text, split_inline

logger = logging.getLogger(__name__)


class Emphasis(str, Enum):
    NONE = "none"
    BOLD = "bold"


@dataclass(frozen=True)
class Run:
    text: str
    emphasis: Emphasis = Emphasis.NONE
    link: str | None = None

    def to_markup(self) -> str:
        text = f"**{self.text}**" if self.emphasis is Emphasis.BOLD else self.text
        if self.link:
            text = f"[{text}]({self.link})"
        return text


@dataclass(frozen=True)
class Heading:
    kind: ClassVar[str] = "heading"

    text: str
    level: int = config.HEADING_BASE_LEVEL

    def to_raw(self) -> dict[str, Any]:
        return {"__component": "heading.heading", "heading": self.text, "level": self.level}


@dataclass(frozen=True)
class Paragraph:
    kind: ClassVar[str] = "paragraph"

    runs: tuple[Run, ...]

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

    def to_raw(self) -> dict[str, Any]:
        markup = "".join(run.to_markup() for run in self.runs)
        return {
            "__component": "paragraph.paragraph",
            "paragraph": [{"type": "paragraph", "children": [{"type": "text", "text": markup}]}],
        }


@dataclass(frozen=True)
class ImageBlock:
    kind: ClassVar[str] = "image"

    media: MediaRef
    caption: str | None = None

    def to_raw(self) -> dict[str, Any]:
        raw: dict[str, Any] = {"__component": "image.image", "image": self.media.to_raw()}
        if self.caption:
            raw["caption"] = self.caption
        return raw


@dataclass(frozen=True)
class VideoBlock:
    kind: ClassVar[str] = "video"

    title: str
    url: str

    def to_raw(self) -> dict[str, Any]:
        return {"__component": "video.video", "title": self.title, "url": self.url}


@dataclass(frozen=True)
class ListBlock:
    kind: ClassVar[str] = "list"

    items: tuple[str, ...]
    ordered: bool = False

    def to_raw(self) -> dict[str, Any]:
        return {
            "__component": "list.list",
            "items": list(self.items),
            "format": "ordered" if self.ordered else "unordered",
        }


ContentBlock = Union[Heading, Paragraph, ImageBlock, VideoBlock, ListBlock]
Document = tuple  # tuple[ContentBlock, ...]

_LEVEL = re.compile(r"^[hH]?([1-6])$")
_RICH_TEXT_NODES = ("paragraph", "heading", "quote")


def _heading_level(value: Any) -> int:
    if isinstance(value, bool):
        return config.HEADING_BASE_LEVEL
    if isinstance(value, int):
        return min(max(value, 1), 6)
    if isinstance(value, str):
        match = _LEVEL.match(value.strip())
        if match:
            return int(match.group(1))
    return config.HEADING_BASE_LEVEL


def _merge_runs(runs: list[Run]) -> tuple[Run, ...]:
    merged: list[Run] = []
    for run in runs:
        if merged and merged[-1].emphasis is run.emphasis and merged[-1].link == run.link:
            merged[-1] = Run(merged[-1].text + run.text, run.emphasis, run.link)
        else:
            merged.append(run)
    return tuple(merged)


def _runs_from_text(text: str, bold: bool = False) -> list[Run]:
    return [
        Run(seg, Emphasis.BOLD if (seg_bold or bold) else Emphasis.NONE, link)
        for seg, seg_bold, link in split_inline(text)
    ]


def _runs_from_children(children: Any) -> list[Run]:
    runs: list[Run] = []
    for child in children if isinstance(children, list) else []:
        if not isinstance(child, dict):
            continue
        if child.get("type") == "link":
            text = inline_text(child.get("children"))
            bold = any(isinstance(c, dict) and c.get("bold") for c in child.get("children") or [])
            if text:
                runs.append(Run(text, Emphasis.BOLD if bold else Emphasis.NONE, child.get("url") or None))
        else:
            runs.extend(_runs_from_text(str(child.get("text") or ""), bool(child.get("bold"))))
    return runs


def _paragraph_blocks(runs: list[Run]) -> list[Paragraph]:
    if not any(run.text.strip() for run in runs):
        logger.debug("Dropping empty paragraph block")
        return []
    return [Paragraph(_merge_runs(runs))]


def _blocks_from_nodes(nodes: list, origin: str | None) -> list[ContentBlock]:
    """Render a rich-text sequence; list nodes split it into separate blocks."""
    blocks: list[ContentBlock] = []
    runs: list[Run] = []
    for node in nodes:
        if not isinstance(node, dict):
            continue
        if node.get("type") == "list":
            blocks.extend(_paragraph_blocks(runs))
            runs = []
            blocks.extend(_render_list(node, origin))
            continue
        if node.get("type") in _RICH_TEXT_NODES:
            node_runs = _runs_from_children(node.get("children"))
        else:
            node_runs = _runs_from_text(node_text(node))
        if not any(run.text.strip() for run in node_runs):
            continue
        if runs:
            runs.append(Run("\n\n"))
        runs.extend(node_runs)
    blocks.extend(_paragraph_blocks(runs))
    return blocks


def _render_heading(raw: dict, origin: str | None) -> list[Heading]:
    text = raw.get("heading") or raw.get("text") or inline_text(raw.get("children"))
    if not isinstance(text, str) or not text.strip():
        logger.debug("Dropping empty heading block")
        return []
    return [Heading(text.strip(), _heading_level(raw.get("level")))]


def _render_paragraph(raw: dict, origin: str | None) -> list[ContentBlock]:
    if raw.get("type") == "paragraph" and isinstance(raw.get("children"), list):
        return _paragraph_blocks(_runs_from_children(raw["children"]))
    for key in ("paragraph", "text", "body"):
        value = raw.get(key)
        if isinstance(value, str):
            return _paragraph_blocks(_runs_from_text(value))
        if isinstance(value, list):
            return _blocks_from_nodes(value, origin)
    return _paragraph_blocks([])


def _render_list(raw: dict, origin: str | None) -> list[ListBlock]:
    items = raw.get("items")
    if not isinstance(items, list):
        items = raw.get("children") if isinstance(raw.get("children"), list) else []
    texts = []
    for item in items:
        if isinstance(item, dict):
            text = item.get("text") or inline_text(item.get("children"))
        else:
            text = item
        if isinstance(text, (str, int, float)) and str(text).strip():
            texts.append(str(text).strip())
    if not texts:
        logger.debug("Dropping empty list block")
        return []
    return [ListBlock(tuple(texts), raw.get("format") == "ordered")]


def _render_image(raw: dict, origin: str | None) -> list[ImageBlock]:
    media = resolve_media(raw.get("image"), origin)
    if media is None:
        logger.debug("Dropping image block without resolvable media")
        return []
    caption = raw.get("caption") if isinstance(raw.get("caption"), str) else None
    return [ImageBlock(media, caption or media.alt)]


def _render_video(raw: dict, origin: str | None) -> list[VideoBlock]:
    url = raw.get("url") if isinstance(raw.get("url"), str) else None
    media = None
    if not url:
        media = resolve_media(raw.get("video"), origin)
        url = media.url if media else None
    if not url:
        logger.warning("Dropping video block %r without a URL", raw.get("id"))
        return []
    title = raw.get("title") or (media.alt if media else None) or ""
    return [VideoBlock(str(title), url)]


def _render_media(raw: dict, origin: str | None) -> list[ContentBlock]:
    # shared.media carries one upload in `file`; its mime type picks the block
    upload = raw.get("file")
    if media_mime(upload).startswith("video/"):
        return _render_video({"id": raw.get("id"), "video": upload, "title": raw.get("title")}, origin)
    return _render_image({"image": upload, "caption": raw.get("caption")}, origin)


_RENDERERS: dict[str, Callable[[dict, str | None], list]] = {
    "heading": _render_heading,
    "paragraph": _render_paragraph,
    "list": _render_list,
    "image": _render_image,
    "video": _render_video,
    "media": _render_media,
}


def block_kind(raw: dict) -> str | None:
    component = raw.get("__component")
    if isinstance(component, str) and component:
        return component.rsplit(".", 1)[-1]
    kind = raw.get("type")
    return kind if isinstance(kind, str) else None


def render(raw_blocks: Any, origin: str | None = None) -> Document:
    if raw_blocks is None:
        return ()
    if not isinstance(raw_blocks, (list, tuple)):
        logger.warning("Content is %s, not a block list; rendering nothing", type(raw_blocks).__name__)
        return ()

    blocks: list[ContentBlock] = []
    for index, raw in enumerate(raw_blocks):
        if not isinstance(raw, dict):
            logger.warning("Skipping content block %d: not an object", index)
            continue
        kind = block_kind(raw)
        renderer = _RENDERERS.get(kind or "")
        if renderer is None:
            logger.warning(
                "Skipping unknown content block %d (%s)", index, raw.get("__component") or kind
            )
            continue
        blocks.extend(renderer(raw, origin))
    return tuple(blocks)
