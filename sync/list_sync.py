from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable

import config
from processors.normalizer import normalize_many
from sources.base import Entity, EntityType
from sources.cms import Transport, envelope_data, page_count
from sources.errors import CMSError, ErrorInfo, SchemaError
from sync.state import ListState, Phase

logger = logging.getLogger(__name__)

Listener = Callable[[ListState], None]


def _log_failure(exc: Exception, msg: str, *args) -> None:
    if isinstance(exc, CMSError):
        logger.warning(msg + ": %s", *args, exc.message)
    else:
        logger.exception(msg, *args)


@dataclass(frozen=True)
class PageResult:
    entities: tuple[Entity, ...]
    page_count: int
    rejected: int = 0


def _dedupe(entities: tuple[Entity, ...], seen: set[int]) -> list[Entity]:
    fresh = []
    for entity in entities:
        if entity.id in seen:
            logger.debug("Dropping duplicate %s id=%s", entity.entity_type, entity.id)
            continue
        seen.add(entity.id)
        fresh.append(entity)
    return fresh


class ListSynchronizer:
    """Paginated list state machine for one entity type.

    ``load`` and ``refresh`` replace the list with page 1; ``load_more``
    appends the next page. Every fetch takes a new request number and only
    the completion carrying the latest number is applied, so a newer refresh
    always wins over older in-flight replies.
    """

    def __init__(
        self,
        entity_type: EntityType,
        transport: Transport,
        origin: str | None = None,
        page_size: int = config.PAGE_SIZE,
    ):
        self.entity_type = entity_type
        self._transport = transport
        self._origin = origin
        self._page_size = page_size
        self._state = ListState()
        self._seq = 0
        self._disposed = False
        self._listeners: list[Listener] = []

    @property
    def state(self) -> ListState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispose(self) -> None:
        self._disposed = True
        self._listeners.clear()

    def _publish(self, state: ListState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _is_current(self, seq: int) -> bool:
        if self._disposed:
            logger.debug("Ignoring %s reply #%d after dispose", self.entity_type.name, seq)
            return False
        if seq != self._seq:
            logger.debug("Discarding stale %s reply #%d (latest #%d)", self.entity_type.name, seq, self._seq)
            return False
        return True

    async def _fetch_page(self, page: int) -> PageResult:
        payload = await self._transport.get(
            self.entity_type.path, self.entity_type.list_query(page, self._page_size)
        )
        data = envelope_data(payload)
        raw_nodes = data if isinstance(data, list) else [data]
        entities, rejected = normalize_many(self.entity_type, raw_nodes, self._origin)
        if raw_nodes and not entities:
            raise SchemaError(
                f"All {len(raw_nodes)} {self.entity_type.name} on page {page} failed normalization"
            )
        logger.info(
            "Fetched %s page %d: %d accepted, %d rejected",
            self.entity_type.name, page, len(entities), len(rejected),
        )
        return PageResult(tuple(entities), page_count(payload), len(rejected))

    async def _reload(self, phase: Phase) -> ListState:
        self._seq += 1
        seq = self._seq
        self._publish(replace(self._state, phase=phase, last_error=None))
        try:
            result = await self._fetch_page(1)
        except Exception as exc:
            if self._is_current(seq):
                _log_failure(exc, "Loading %s failed", self.entity_type.name)
                self._publish(ListState(phase=Phase.ERROR, last_error=ErrorInfo.from_exception(exc)))
            return self._state

        if self._is_current(seq):
            items = _dedupe(result.entities, set())
            self._publish(ListState(tuple(items), 1, result.page_count, Phase.READY))
        return self._state

    async def load(self) -> ListState:
        if self._state.phase not in (Phase.IDLE, Phase.ERROR):
            logger.debug("load() ignored for %s in phase %s", self.entity_type.name, self._state.phase.value)
            return self._state
        return await self._reload(Phase.LOADING)

    async def refresh(self) -> ListState:
        return await self._reload(Phase.REFRESHING)

    async def load_more(self) -> ListState:
        if not self._state.can_load_more:
            return self._state

        self._seq += 1
        seq = self._seq
        next_page = self._state.page + 1
        self._publish(replace(self._state, phase=Phase.LOADING_MORE, last_error=None))
        try:
            result = await self._fetch_page(next_page)
        except Exception as exc:
            if self._is_current(seq):
                _log_failure(exc, "Loading %s page %d failed", self.entity_type.name, next_page)
                self._publish(
                    replace(self._state, phase=Phase.READY, last_error=ErrorInfo.from_exception(exc))
                )
            return self._state

        if self._is_current(seq):
            items = self._state.items + tuple(_dedupe(result.entities, self._state.ids))
            self._publish(ListState(items, next_page, max(result.page_count, next_page), Phase.READY))
        return self._state
