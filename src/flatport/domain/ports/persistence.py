"""Ports for persisting imported entities and their dependent records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from flatport.domain.model import (
    Actor,
    ContactInformation,
    Description,
    EntityType,
    Event,
    KeymapEntry,
    Note,
    ObjectTermRelation,
    PhysicalObject,
    Property,
    Relation,
    Rights,
    Taxonomy,
    Term,
)

if TYPE_CHECKING:
    from uuid import UUID

    from flatport.domain.model import Culture, TypeId


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class EntityStore[TEntity](Repository[TEntity], Protocol):
    """Store with immediate identity: ``save`` flushes and optionally indexes."""

    def save(self, entity: TEntity, *, index: bool = True) -> None: ...

    def get(self, entity_id: UUID) -> TEntity | None: ...

    def delete(self, entity: TEntity) -> None: ...


@runtime_checkable
class DescriptionRepository(EntityStore[Description], Protocol):
    """Persistence contract for archival descriptions."""

    def get_by_slug(self, slug: str) -> Description | None: ...

    def find_by_fields(
        self, *, identifier: str, title: str, repository_name: str
    ) -> Description | None: ...

    def detach_children(self, description: Description) -> None:
        """Null out ``parent_id`` on every direct child of ``description``."""
        ...

    def inherited_repository_id(self, description: Description) -> UUID | None: ...

    def collection_root_id(self, description: Description) -> UUID: ...


@runtime_checkable
class AgentRepository(EntityStore[Actor], Protocol):
    """Persistence contract for actors, repositories, rights holders and donors."""

    def get_by_slug(self, slug: str) -> Actor | None: ...

    def find_by_name[TActor: Actor](
        self,
        name: str,
        *,
        kind: type[TActor],
        history: str | None = None,
        repository_id: UUID | None = None,
    ) -> TActor | None:
        """Match on authorized form of name within ``kind``.

        ``repository_id`` restricts the match to agents maintained by that
        repository.
        """
        ...

    def contact_information(self, actor_id: UUID) -> ContactInformation | None: ...

    def add_contact_information(self, info: ContactInformation) -> None: ...


@runtime_checkable
class NoteRepository(EntityStore[Note], Protocol):
    def ids_for(self, object_id: UUID, type_id: TypeId) -> list[UUID]:
        """Note ids for an owner and type, oldest first."""
        ...

    def contents_for(self, object_id: UUID, type_id: TypeId, culture: Culture) -> list[str]: ...


@runtime_checkable
class EventRepository(EntityStore[Event], Protocol):
    def for_object(self, object_id: UUID) -> list[Event]: ...


@runtime_checkable
class PropertyRepository(EntityStore[Property], Protocol):
    def find(self, object_id: UUID, name: str) -> Property | None: ...

    def for_object(self, object_id: UUID) -> list[Property]: ...


@runtime_checkable
class RelationRepository(EntityStore[Relation], Protocol):
    def exists(self, subject_id: UUID, object_id: UUID) -> bool:
        """Return whether any relation links the pair, whatever its type."""
        ...

    def find(
        self,
        *,
        subject_id: UUID | None = None,
        object_id: UUID | None = None,
        type_id: TypeId | None = None,
    ) -> list[Relation]: ...


@runtime_checkable
class RightsRepository(EntityStore[Rights], Protocol):
    """Persistence contract for rights statements."""


@runtime_checkable
class PhysicalObjectRepository(EntityStore[PhysicalObject], Protocol):
    def find(
        self, name: str, location: str | None, type_id: UUID | None
    ) -> PhysicalObject | None: ...


@runtime_checkable
class TermRepository(Protocol):
    """Terms scoped by taxonomy and culture, plus object/term links."""

    def get(self, term_id: UUID) -> Term | None: ...

    def load(self, taxonomy: Taxonomy, culture: Culture) -> list[Term]: ...

    def create(self, taxonomy: Taxonomy, name: str, culture: Culture) -> Term: ...

    def relation_exists(self, object_id: UUID, term_id: UUID) -> bool: ...

    def relate(self, object_id: UUID, term_id: UUID) -> ObjectTermRelation: ...

    def relations_for(self, object_id: UUID) -> list[ObjectTermRelation]: ...


@runtime_checkable
class KeymapRepository(Repository[KeymapEntry], Protocol):
    """Append-only external id registry; newest entry wins."""

    def latest(
        self, source_id: str, source_name: str, target_name: EntityType
    ) -> KeymapEntry | None: ...

    def remove(self, entry: KeymapEntry) -> None: ...
