from __future__ import annotations

import re
from typing import Any

from bs4 import BeautifulSoup

_HTML_TAG = re.compile(r"<(?:[a-zA-Z][a-zA-Z0-9]*|/[a-zA-Z][a-zA-Z0-9]*)\b[^>]*>")

# [label](url) or **bold**
_INLINE = re.compile(
    r"\[(?P<label>[^\]]+)\]\((?P<url>[^)\s]+)\)|\*\*(?P<bold>.+?)\*\*",
    re.DOTALL,
)
_BOLD_LABEL = re.compile(r"^\*\*(.+)\*\*$", re.DOTALL)

_TEXT_NODES = ("paragraph", "heading", "quote", "code")


def strip_html(text: str) -> str:
    soup = BeautifulSoup(text, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    for br in soup.find_all("br"):
        br.replace_with("\n")
    paragraphs = [p.get_text().strip() for p in soup.find_all("p")]
    if paragraphs:
        text = "\n\n".join(p for p in paragraphs if p)
    else:
        text = soup.get_text().strip()
    return re.sub(r" {2,}", " ", text)


def inline_text(children: Any) -> str:
    """Concatenate the text runs of a rich-text node's children, in order."""
    if not isinstance(children, list):
        return ""
    parts = []
    for child in children:
        if not isinstance(child, dict):
            continue
        if isinstance(child.get("children"), list):
            parts.append(inline_text(child["children"]))
        else:
            parts.append(str(child.get("text") or ""))
    return "".join(parts)


def node_text(node: Any) -> str:
    if not isinstance(node, dict):
        return ""
    kind = node.get("type")
    if kind in _TEXT_NODES:
        return inline_text(node.get("children"))
    if kind == "list":
        items = [inline_text(item.get("children")) for item in node.get("children") or [] if isinstance(item, dict)]
        return "\n".join(item for item in items if item.strip())
    return ""


def extract_plain_text(value: Any) -> str:
    """Flatten a CMS long-text field into one string.

    Plain strings are returned untouched, HTML strings are reduced to their
    text, and structured rich-text sequences are joined paragraph by
    paragraph with a blank line.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return strip_html(value) if _HTML_TAG.search(value) else value
    if isinstance(value, list):
        texts = [node_text(node) for node in value]
        return "\n\n".join(text for text in texts if text.strip())
    return ""


def split_inline(text: str) -> list[tuple[str, bool, str | None]]:
    """Split authored text on the ``**bold**`` and ``[text](url)`` conventions.

    Returns ``(text, bold, link)`` segments in reading order with the markup
    removed. Empty segments are dropped.
    """
    segments: list[tuple[str, bool, str | None]] = []
    pos = 0
    for match in _INLINE.finditer(text):
        if match.start() > pos:
            segments.append((text[pos:match.start()], False, None))
        if match.group("bold") is not None:
            segments.append((match.group("bold"), True, None))
        else:
            label = match.group("label")
            bold = _BOLD_LABEL.match(label)
            if bold:
                segments.append((bold.group(1), True, match.group("url")))
            else:
                segments.append((label, False, match.group("url")))
        pos = match.end()
    if pos < len(text):
        segments.append((text[pos:], False, None))
    return [seg for seg in segments if seg[0]]
