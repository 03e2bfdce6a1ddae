from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sources.base import Entity
from sources.errors import ErrorInfo, ErrorKind


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    REFRESHING = "refreshing"
    LOADING_MORE = "loading_more"
    READY = "ready"
    ERROR = "error"


IN_FLIGHT = (Phase.LOADING, Phase.REFRESHING, Phase.LOADING_MORE)


class DetailPhase(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class ListState:
    """Snapshot published to a list screen. Replaced, never mutated."""

    items: tuple[Entity, ...] = ()
    page: int = 1
    total_pages: int = 1
    phase: Phase = Phase.IDLE
    last_error: ErrorInfo | None = None

    @property
    def is_busy(self) -> bool:
        return self.phase in IN_FLIGHT

    @property
    def can_load_more(self) -> bool:
        return self.phase is Phase.READY and self.page < self.total_pages

    @property
    def ids(self) -> set[int]:
        return {item.id for item in self.items}


@dataclass(frozen=True)
class DetailState:
    entity: Entity | None = None
    phase: DetailPhase = DetailPhase.LOADING
    last_error: ErrorInfo | None = None

    @property
    def not_found(self) -> bool:
        return self.last_error is not None and self.last_error.kind is ErrorKind.NOT_FOUND
