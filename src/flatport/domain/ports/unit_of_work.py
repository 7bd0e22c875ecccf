"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from flatport.domain.ports.indexing import SearchIndexer
    from flatport.domain.ports.persistence import (
        AgentRepository,
        DescriptionRepository,
        EventRepository,
        KeymapRepository,
        NoteRepository,
        PhysicalObjectRepository,
        PropertyRepository,
        RelationRepository,
        RightsRepository,
        TermRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...  # the repo list itself should be immutable

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class ImportRepositories(RepositoryCollection):
    """Repositories required to import one flat file."""

    descriptions: DescriptionRepository
    agents: AgentRepository
    notes: NoteRepository
    events: EventRepository
    properties: PropertyRepository
    relations: RelationRepository
    rights: RightsRepository
    physical_objects: PhysicalObjectRepository
    terms: TermRepository
    keymap: KeymapRepository
    indexer: SearchIndexer


type ImportUnitOfWork = UnitOfWork[ImportRepositories]
