from __future__ import annotations

import logging

from processors.normalizer import normalize
from sources.base import EntityType, RejectionReason
from sources.cms import Transport, envelope_data
from sources.errors import CMSError, ErrorInfo, NotFoundError
from sync.state import DetailPhase, DetailState

logger = logging.getLogger(__name__)


class DetailLoader:
    """One-shot fetch of a single entity by slug, with its rendered document."""

    def __init__(self, entity_type: EntityType, transport: Transport, origin: str | None = None):
        self.entity_type = entity_type
        self._transport = transport
        self._origin = origin
        self._state = DetailState()
        self._disposed = False

    @property
    def state(self) -> DetailState:
        return self._state

    def dispose(self) -> None:
        self._disposed = True

    async def load(self, slug: str) -> DetailState:
        self._state = DetailState(phase=DetailPhase.LOADING)
        try:
            entity = await self._fetch(slug)
        except CMSError as exc:
            if not self._disposed:
                logger.warning("Loading %s/%s failed: %s", self.entity_type.name, slug, exc.message)
                self._state = DetailState(phase=DetailPhase.ERROR, last_error=ErrorInfo.from_exception(exc))
            return self._state
        except Exception as exc:
            if not self._disposed:
                logger.exception("Unexpected error loading %s/%s", self.entity_type.name, slug)
                self._state = DetailState(phase=DetailPhase.ERROR, last_error=ErrorInfo.from_exception(exc))
            return self._state

        if not self._disposed:
            self._state = DetailState(entity=entity, phase=DetailPhase.READY)
        return self._state

    async def _fetch(self, slug: str):
        payload = await self._transport.get(self.entity_type.path, self.entity_type.detail_query(slug))
        data = envelope_data(payload)
        matches = data if isinstance(data, list) else [data]
        if not matches:
            raise NotFoundError(f"No {self.entity_type.name} with slug {slug!r}")
        if len(matches) > 1:
            logger.warning("%d %s match slug %r, using the first", len(matches), self.entity_type.name, slug)

        result = normalize(self.entity_type, matches[0], self._origin)
        if isinstance(result, RejectionReason):
            logger.warning("Rejected %s", result)
            raise NotFoundError(f"No valid {self.entity_type.name} with slug {slug!r}")
        return result


async def load_detail(
    entity_type: EntityType, slug: str, transport: Transport, origin: str | None = None
) -> DetailState:
    return await DetailLoader(entity_type, transport, origin).load(slug)
