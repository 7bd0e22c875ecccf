"""Domain port definitions for adapters."""

from __future__ import annotations

from .indexing import SearchIndexer
from .persistence import (
    AgentRepository,
    DescriptionRepository,
    EntityStore,
    EventRepository,
    KeymapRepository,
    NoteRepository,
    PhysicalObjectRepository,
    PropertyRepository,
    RelationRepository,
    Repository,
    RightsRepository,
    TermRepository,
)
from .unit_of_work import (
    ImportRepositories,
    ImportUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AgentRepository",
    "DescriptionRepository",
    "EntityStore",
    "EventRepository",
    "ImportRepositories",
    "ImportUnitOfWork",
    "KeymapRepository",
    "NoteRepository",
    "PhysicalObjectRepository",
    "PropertyRepository",
    "RelationRepository",
    "Repository",
    "RepositoryCollection",
    "RightsRepository",
    "SearchIndexer",
    "TermRepository",
    "UnitOfWork",
]
