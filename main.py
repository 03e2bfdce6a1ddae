"""FarmContent: list and inspect CMS content from the command line."""

from __future__ import annotations

import asyncio
import logging
import sys

import config
from processors.blocks import Heading, ImageBlock, ListBlock, Paragraph, VideoBlock
from sources.base import ENTITY_TYPES, Entity
from sources.cms import CMSClient
from sync.detail import load_detail
from sync.list_sync import ListSynchronizer
from sync.state import DetailPhase, Phase

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("main")

USAGE = "Usage: python main.py list <articles|companies|crops> [pages] | show <type> <slug>"


def _format_block(block) -> str:
    if isinstance(block, Heading):
        return f"{'#' * block.level} {block.text}"
    if isinstance(block, Paragraph):
        return "".join(run.to_markup() for run in block.runs)
    if isinstance(block, ListBlock):
        return "\n".join(
            f"{i}. {item}" if block.ordered else f"- {item}"
            for i, item in enumerate(block.items, 1)
        )
    if isinstance(block, ImageBlock):
        return f"[image] {block.media.url}" + (f" ({block.caption})" if block.caption else "")
    if isinstance(block, VideoBlock):
        return f"[video] {block.title} {block.url}".strip()
    return ""


def _print_entity(entity: Entity) -> None:
    print(entity.title)
    print("=" * len(entity.title))
    for name, value in entity.fields.items():
        if value not in (None, "") and name != ENTITY_TYPES[entity.entity_type].title_field:
            print(f"{name}: {value}")
    for slot, media in entity.media.items():
        if media:
            print(f"{slot}: {media.url}")
    for block in entity.document or ():
        print()
        print(_format_block(block))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

async def run_list(type_name: str, pages: int = 1) -> int:
    client = CMSClient()
    sync = ListSynchronizer(ENTITY_TYPES[type_name], client)
    try:
        state = await sync.load()
        while state.phase is Phase.READY and state.page < min(pages, state.total_pages):
            state = await sync.load_more()
            if state.last_error:
                break
    finally:
        client.close()

    if state.phase is Phase.ERROR or state.last_error:
        logger.error("Listing %s failed: %s", type_name, state.last_error.message)
        if state.phase is Phase.ERROR:
            return 1

    for entity in state.items:
        print(f"{entity.id:>5}  {entity.slug:<40} {entity.title}")
    logger.info(
        "%d %s (page %d of %d)", len(state.items), type_name, state.page, state.total_pages
    )
    return 0


async def run_show(type_name: str, slug: str) -> int:
    client = CMSClient()
    try:
        state = await load_detail(ENTITY_TYPES[type_name], slug, client)
    finally:
        client.close()

    if state.phase is not DetailPhase.READY:
        if state.not_found:
            print(f"{type_name} {slug!r} not found")
        else:
            logger.error("Loading %s/%s failed: %s", type_name, slug, state.last_error.message)
        return 1

    _print_entity(state.entity)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) < 2 or args[1] not in ENTITY_TYPES:
        print(USAGE)
        return 1

    cmd, type_name = args[0], args[1]
    if cmd == "list":
        try:
            pages = int(args[2]) if len(args) > 2 else 1
        except ValueError:
            print(USAGE)
            return 1
        return asyncio.run(run_list(type_name, pages))
    if cmd == "show" and len(args) > 2:
        return asyncio.run(run_show(type_name, args[2]))

    print(f"Unknown command: {' '.join(args)}")
    print(USAGE)
    return 1


if __name__ == "__main__":
    sys.exit(main())
