"""In-process search index stand-in: records what would be (re)indexed."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from flatport.domain.model import Entity, EntityType

log = logging.getLogger(__name__)


class LoggingSearchIndexer:
    def __init__(self, *, enabled: bool = True) -> None:
        self._enabled = enabled
        self.indexed: list[tuple[EntityType, UUID]] = []

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False

    def index(self, entity: Entity) -> None:
        log.debug("Indexing %s %s", entity.entity_type, entity.id)
        self.indexed.append((entity.entity_type, entity.id))


if TYPE_CHECKING:
    from flatport.domain.ports import SearchIndexer

    _indexer_check: SearchIndexer = LoggingSearchIndexer()
