"""Port for the search index updated as entities are saved."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from flatport.domain.model import Entity


@runtime_checkable
class SearchIndexer(Protocol):
    """Process-wide toggle plus a per-entity update hook."""

    @property
    def enabled(self) -> bool: ...

    def enable(self) -> None: ...

    def disable(self) -> None: ...

    def index(self, entity: Entity) -> None: ...
