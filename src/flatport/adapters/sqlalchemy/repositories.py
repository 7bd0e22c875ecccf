"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, cast

from sqlalchemy import exists, or_, select

from flatport.adapters.sqlalchemy.mappings import (
    SLUGGED_TABLES,
    actor_i18n_table,
    actor_table,
    contact_information_table,
    description_i18n_table,
    description_table,
    event_table,
    keymap_table,
    note_i18n_table,
    note_table,
    object_term_relation_table,
    physical_object_table,
    property_table,
    relation_table,
    term_table,
)
from flatport.domain.model import (
    Actor,
    ContactInformation,
    Description,
    Event,
    KeymapEntry,
    Note,
    ObjectTermRelation,
    PhysicalObject,
    Property,
    Relation,
    RelationType,
    Rights,
    Term,
    slugify,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from flatport.domain.model import (
        Culture,
        CulturedEntity,
        Entity,
        EntityType,
        Taxonomy,
        TypeId,
    )
    from flatport.domain.ports import SearchIndexer

log = logging.getLogger(__name__)

_MAX_HIERARCHY_DEPTH = 1000


class _SlugAllocator:
    """Assign slugs unique across every slugged table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def assign(self, entity: CulturedEntity, *, label: str | None) -> None:
        slug = getattr(entity, "slug", None)
        if slug:
            return
        base = slugify(label or "") or "untitled"
        candidate = base
        suffix = 2
        while self._taken(candidate):
            candidate = f"{base}-{suffix}"
            suffix += 1
        entity.set_field("slug", candidate)

    def _taken(self, slug: str) -> bool:
        return any(
            self.session.execute(select(exists().where(table.c.slug == slug))).scalar()
            for table in SLUGGED_TABLES
        )


class _SqlAlchemyStore[TEntity: Entity]:
    """Shared save/get/delete for entities with immediate identity."""

    def __init__(self, session: Session, entity_cls: type[TEntity], indexer: SearchIndexer) -> None:
        self.session = session
        self._entity_cls = entity_cls
        self._indexer = indexer

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)

    def save(self, entity: TEntity, *, index: bool = True) -> None:
        self._prepare(entity)
        self.session.add(entity)
        self.session.flush()
        if index and self._indexer.enabled:
            self._indexer.index(entity)

    def get(self, entity_id: uuid.UUID) -> TEntity | None:
        return self.session.get(self._entity_cls, entity_id)

    def delete(self, entity: TEntity) -> None:
        self.session.delete(entity)
        self.session.flush()

    def _prepare(self, entity: TEntity) -> None:
        _ = entity


def _remove_dependents(session: Session, object_id: uuid.UUID) -> None:
    """Delete every record hanging off ``object_id`` (notes, events, links...)."""

    for note in session.execute(select(Note).where(note_table.c.object_id == object_id)).scalars():
        session.delete(note)

    events = list(
        session.execute(select(Event).where(event_table.c.object_id == object_id)).scalars()
    )
    owned_ids = [object_id, *(event.id for event in events)]
    for event in events:
        session.delete(event)
    for link in session.execute(
        select(ObjectTermRelation).where(object_term_relation_table.c.object_id.in_(owned_ids))
    ).scalars():
        session.delete(link)

    for prop in session.execute(
        select(Property).where(property_table.c.object_id == object_id)
    ).scalars():
        session.delete(prop)

    relations = list(
        session.execute(
            select(Relation).where(
                or_(
                    relation_table.c.subject_id == object_id,
                    relation_table.c.object_id == object_id,
                )
            )
        ).scalars()
    )
    for relation in relations:
        if relation.type_id == RelationType.RIGHT and relation.subject_id == object_id:
            rights = session.get(Rights, relation.object_id)
            if rights is not None:
                session.delete(rights)
        session.delete(relation)
    session.flush()


class SqlAlchemyDescriptionRepository(_SqlAlchemyStore[Description]):
    def __init__(self, session: Session, indexer: SearchIndexer) -> None:
        super().__init__(session, Description, indexer)
        self._slugs = _SlugAllocator(session)

    def _prepare(self, entity: Description) -> None:
        self._slugs.assign(entity, label=entity.title or entity.identifier)

    def delete(self, entity: Description) -> None:
        _remove_dependents(self.session, entity.id)
        super().delete(entity)

    def get_by_slug(self, slug: str) -> Description | None:
        stmt = select(Description).where(description_table.c.slug == slug)
        return self.session.execute(stmt).scalar_one_or_none()

    def find_by_fields(
        self, *, identifier: str, title: str, repository_name: str
    ) -> Description | None:
        stmt = (
            select(description_table.c.id)
            .join(
                description_i18n_table,
                description_i18n_table.c.description_id == description_table.c.id,
            )
            .join(
                actor_i18n_table,
                actor_i18n_table.c.actor_id == description_table.c.repository_id,
            )
            .where(description_table.c.identifier == identifier)
            .where(description_i18n_table.c.title == title)
            .where(actor_i18n_table.c.authorized_form_of_name == repository_name)
            .limit(1)
        )
        description_id = self.session.execute(stmt).scalar_one_or_none()
        if description_id is None:
            return None
        return self.get(description_id)

    def detach_children(self, description: Description) -> None:
        children = self.session.execute(
            select(Description).where(description_table.c.parent_id == description.id)
        ).scalars()
        for child in children:
            child.parent_id = None
        self.session.flush()

    def inherited_repository_id(self, description: Description) -> uuid.UUID | None:
        for node in self._lineage(description):
            if node.repository_id is not None:
                return node.repository_id
        return None

    def collection_root_id(self, description: Description) -> uuid.UUID:
        root = description
        for node in self._lineage(description):
            root = node
        return root.id

    def _lineage(self, description: Description) -> list[Description]:
        lineage = [description]
        node = description
        while node.parent_id is not None and len(lineage) < _MAX_HIERARCHY_DEPTH:
            parent = self.get(node.parent_id)
            if parent is None:
                break
            lineage.append(parent)
            node = parent
        return lineage


class SqlAlchemyAgentRepository(_SqlAlchemyStore[Actor]):
    def __init__(self, session: Session, indexer: SearchIndexer) -> None:
        super().__init__(session, Actor, indexer)
        self._slugs = _SlugAllocator(session)

    def _prepare(self, entity: Actor) -> None:
        self._slugs.assign(entity, label=entity.authorized_form_of_name)

    def delete(self, entity: Actor) -> None:
        _remove_dependents(self.session, entity.id)
        for event in self.session.execute(
            select(Event).where(event_table.c.actor_id == entity.id)
        ).scalars():
            event.actor_id = None
        for info in self.session.execute(
            select(ContactInformation).where(contact_information_table.c.actor_id == entity.id)
        ).scalars():
            self.session.delete(info)
        super().delete(entity)

    def get_by_slug(self, slug: str) -> Actor | None:
        stmt = select(Actor).where(actor_table.c.slug == slug)
        return self.session.execute(stmt).scalar_one_or_none()

    def find_by_name[TActor: Actor](
        self,
        name: str,
        *,
        kind: type[TActor],
        history: str | None = None,
        repository_id: uuid.UUID | None = None,
    ) -> TActor | None:
        stmt = (
            select(actor_table.c.id)
            .join(actor_i18n_table, actor_i18n_table.c.actor_id == actor_table.c.id)
            .where(actor_i18n_table.c.authorized_form_of_name == name)
            .where(actor_table.c.kind == kind.ENTITY_TYPE)
        )
        if history is not None:
            stmt = stmt.where(actor_i18n_table.c.history == history)
        if repository_id is not None:
            stmt = stmt.join(
                relation_table,
                (relation_table.c.object_id == actor_table.c.id)
                & (relation_table.c.subject_id == repository_id)
                & (relation_table.c.type_id == RelationType.MAINTAINING_REPOSITORY),
            )
        actor_id = self.session.execute(stmt.limit(1)).scalar_one_or_none()
        if actor_id is None:
            return None
        return cast("TActor | None", self.session.get(kind, actor_id))

    def contact_information(self, actor_id: uuid.UUID) -> ContactInformation | None:
        stmt = (
            select(ContactInformation)
            .where(contact_information_table.c.actor_id == actor_id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def add_contact_information(self, info: ContactInformation) -> None:
        self.session.add(info)
        self.session.flush()


class SqlAlchemyNoteRepository(_SqlAlchemyStore[Note]):
    def __init__(self, session: Session, indexer: SearchIndexer) -> None:
        super().__init__(session, Note, indexer)

    def ids_for(self, object_id: uuid.UUID, type_id: TypeId) -> list[uuid.UUID]:
        stmt = (
            select(note_table.c.id)
            .where(note_table.c.object_id == object_id)
            .where(note_table.c.type_id == type_id)
            .order_by(note_table.c.created_at, note_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    def contents_for(self, object_id: uuid.UUID, type_id: TypeId, culture: Culture) -> list[str]:
        stmt = (
            select(note_i18n_table.c.content)
            .join(note_table, note_table.c.id == note_i18n_table.c.note_id)
            .where(note_table.c.object_id == object_id)
            .where(note_table.c.type_id == type_id)
            .where(note_i18n_table.c.culture == culture)
        )
        return [content for content in self.session.execute(stmt).scalars() if content is not None]


class SqlAlchemyEventRepository(_SqlAlchemyStore[Event]):
    def __init__(self, session: Session, indexer: SearchIndexer) -> None:
        super().__init__(session, Event, indexer)

    def for_object(self, object_id: uuid.UUID) -> list[Event]:
        stmt = select(Event).where(event_table.c.object_id == object_id)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyPropertyRepository(_SqlAlchemyStore[Property]):
    def __init__(self, session: Session, indexer: SearchIndexer) -> None:
        super().__init__(session, Property, indexer)

    def find(self, object_id: uuid.UUID, name: str) -> Property | None:
        stmt = (
            select(Property)
            .where(property_table.c.object_id == object_id)
            .where(property_table.c.name == name)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def for_object(self, object_id: uuid.UUID) -> list[Property]:
        stmt = select(Property).where(property_table.c.object_id == object_id)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyRelationRepository(_SqlAlchemyStore[Relation]):
    def __init__(self, session: Session, indexer: SearchIndexer) -> None:
        super().__init__(session, Relation, indexer)

    def exists(self, subject_id: uuid.UUID, object_id: uuid.UUID) -> bool:
        stmt = select(
            exists()
            .where(relation_table.c.subject_id == subject_id)
            .where(relation_table.c.object_id == object_id)
        )
        return bool(self.session.execute(stmt).scalar())

    def find(
        self,
        *,
        subject_id: uuid.UUID | None = None,
        object_id: uuid.UUID | None = None,
        type_id: TypeId | None = None,
    ) -> list[Relation]:
        stmt = select(Relation)
        if subject_id is not None:
            stmt = stmt.where(relation_table.c.subject_id == subject_id)
        if object_id is not None:
            stmt = stmt.where(relation_table.c.object_id == object_id)
        if type_id is not None:
            stmt = stmt.where(relation_table.c.type_id == type_id)
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyRightsRepository(_SqlAlchemyStore[Rights]):
    def __init__(self, session: Session, indexer: SearchIndexer) -> None:
        super().__init__(session, Rights, indexer)


class SqlAlchemyPhysicalObjectRepository(_SqlAlchemyStore[PhysicalObject]):
    def __init__(self, session: Session, indexer: SearchIndexer) -> None:
        super().__init__(session, PhysicalObject, indexer)

    def find(
        self, name: str, location: str | None, type_id: uuid.UUID | None
    ) -> PhysicalObject | None:
        location_column = physical_object_table.c.location
        type_column = physical_object_table.c.type_id
        stmt = (
            select(PhysicalObject)
            .where(physical_object_table.c.name == name)
            .where(location_column.is_(None) if location is None else location_column == location)
            .where(type_column.is_(None) if type_id is None else type_column == type_id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyTermRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, term_id: uuid.UUID) -> Term | None:
        return self.session.get(Term, term_id)

    def load(self, taxonomy: Taxonomy, culture: Culture) -> list[Term]:
        stmt = (
            select(Term)
            .where(term_table.c.taxonomy == taxonomy)
            .where(term_table.c.culture == culture)
        )
        return list(self.session.execute(stmt).scalars())

    def create(self, taxonomy: Taxonomy, name: str, culture: Culture) -> Term:
        term = Term(taxonomy=taxonomy, name=name, culture=culture)
        self.session.add(term)
        self.session.flush()
        log.debug("Created %s term %r (%s)", taxonomy, name, culture)
        return term

    def relation_exists(self, object_id: uuid.UUID, term_id: uuid.UUID) -> bool:
        stmt = select(
            exists()
            .where(object_term_relation_table.c.object_id == object_id)
            .where(object_term_relation_table.c.term_id == term_id)
        )
        return bool(self.session.execute(stmt).scalar())

    def relate(self, object_id: uuid.UUID, term_id: uuid.UUID) -> ObjectTermRelation:
        relation = ObjectTermRelation(object_id=object_id, term_id=term_id)
        self.session.add(relation)
        self.session.flush()
        return relation

    def relations_for(self, object_id: uuid.UUID) -> list[ObjectTermRelation]:
        stmt = select(ObjectTermRelation).where(
            object_term_relation_table.c.object_id == object_id
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyKeymapRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: KeymapEntry) -> None:
        self.session.add(entity)
        self.session.flush()

    def latest(
        self, source_id: str, source_name: str, target_name: EntityType
    ) -> KeymapEntry | None:
        stmt = (
            select(KeymapEntry)
            .where(keymap_table.c.source_id == source_id)
            .where(keymap_table.c.source_name == source_name)
            .where(keymap_table.c.target_name == target_name)
            .order_by(keymap_table.c.id.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def remove(self, entry: KeymapEntry) -> None:
        self.session.delete(entry)
        self.session.flush()


if TYPE_CHECKING:
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

    _session_stub = cast("Session", object())
    _indexer_stub = cast("SearchIndexer", object())
    _description_repo: DescriptionRepository = SqlAlchemyDescriptionRepository(
        _session_stub, _indexer_stub
    )
    _agent_repo: AgentRepository = SqlAlchemyAgentRepository(_session_stub, _indexer_stub)
    _note_repo: NoteRepository = SqlAlchemyNoteRepository(_session_stub, _indexer_stub)
    _event_repo: EventRepository = SqlAlchemyEventRepository(_session_stub, _indexer_stub)
    _property_repo: PropertyRepository = SqlAlchemyPropertyRepository(_session_stub, _indexer_stub)
    _relation_repo: RelationRepository = SqlAlchemyRelationRepository(_session_stub, _indexer_stub)
    _rights_repo: RightsRepository = SqlAlchemyRightsRepository(_session_stub, _indexer_stub)
    _physical_repo: PhysicalObjectRepository = SqlAlchemyPhysicalObjectRepository(
        _session_stub, _indexer_stub
    )
    _term_repo: TermRepository = SqlAlchemyTermRepository(_session_stub)
    _keymap_repo: KeymapRepository = SqlAlchemyKeymapRepository(_session_stub)
