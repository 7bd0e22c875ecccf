"""SQLAlchemy mapping metadata for the flatport domain model."""

from __future__ import annotations

import logging
import re
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import attribute_keyed_dict, configure_mappers, relationship

from flatport.domain.model import (
    Actor,
    ActorI18n,
    ContactInformation,
    Description,
    DescriptionI18n,
    Donor,
    EntityType,
    Event,
    KeymapEntry,
    Note,
    NoteI18n,
    ObjectTermRelation,
    PhysicalObject,
    Property,
    Relation,
    Repository,
    Rights,
    RightsHolder,
    Taxonomy,
    Term,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]

_YEAR_ONLY = re.compile(r"^\d{4}$")
YEAR_PADDING: Final[str] = "-00-00"


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class PaddedDate(TypeDecorator[str]):
    """Date string column that stores year-only values as ``YYYY-00-00``."""

    impl = String(10)
    cache_ok = True

    def process_bind_param(self, value: str | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        value = value.strip()
        if _YEAR_ONLY.match(value):
            return value + YEAR_PADDING
        return value

    def process_result_value(self, value: str | None, dialect: Dialect) -> str | None:
        _ = dialect
        return value


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Taxonomy ---------------------------------------------------------------------

term_table = Table(
    "term",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("taxonomy", Enum(Taxonomy, native_enum=False), nullable=False),
    Column("culture", String(16), nullable=False),
    Column("name", String, nullable=False),
    UniqueConstraint("taxonomy", "culture", "name"),
)

object_term_relation_table = Table(
    "object_term_relation",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("object_id", UUIDColumnType, nullable=False),
    Column("term_id", UUIDColumnType, ForeignKey("term.id"), nullable=False),
    UniqueConstraint("object_id", "term_id"),
)

# Agents -------------------------------------------------------------------------

actor_table = Table(
    "actor",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("kind", Enum(EntityType, native_enum=False), nullable=False),
    Column("source_culture", String(16), nullable=False),
    Column("slug", String, nullable=True, unique=True),
    Column("description_identifier", String, nullable=True),
    Column("corporate_body_identifiers", String, nullable=True),
    Column("entity_type_id", UUIDColumnType, ForeignKey("term.id"), nullable=True),
    Column("identifier", String, nullable=True),
    Column("upload_limit", String, nullable=True),
    Index("ix_actor_kind", "kind"),
)

actor_i18n_table = Table(
    "actor_i18n",
    mapper_registry.metadata,
    Column("actor_id", UUIDColumnType, ForeignKey("actor.id"), primary_key=True),
    Column("culture", String(16), primary_key=True),
    Column("authorized_form_of_name", String, nullable=True),
    Column("dates_of_existence", Text, nullable=True),
    Column("history", Text, nullable=True),
    Column("places", Text, nullable=True),
    Column("legal_status", Text, nullable=True),
    Column("functions", Text, nullable=True),
    Column("mandates", Text, nullable=True),
    Column("internal_structures", Text, nullable=True),
    Column("general_context", Text, nullable=True),
    Column("geocultural_context", Text, nullable=True),
    Column("collecting_policies", Text, nullable=True),
    Column("buildings", Text, nullable=True),
    Column("holdings", Text, nullable=True),
    Column("finding_aids", Text, nullable=True),
    Column("opening_times", Text, nullable=True),
    Column("access_conditions", Text, nullable=True),
    Column("research_services", Text, nullable=True),
    Index("ix_actor_i18n_name", "authorized_form_of_name"),
)

contact_information_table = Table(
    "contact_information",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("actor_id", UUIDColumnType, ForeignKey("actor.id"), nullable=False),
    Column("email", String, nullable=True),
    Column("telephone", String, nullable=True),
    Column("street_address", Text, nullable=True),
    Column("city", String, nullable=True),
    Column("region", String, nullable=True),
    Column("postal_code", String, nullable=True),
    Column("country_code", String(3), nullable=True),
    Column("fax", String, nullable=True),
    Column("note", Text, nullable=True),
    Column("contact_person", String, nullable=True),
)

# Descriptions ---------------------------------------------------------------------

description_table = Table(
    "description",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("source_culture", String(16), nullable=False),
    Column("identifier", String, nullable=True),
    Column("slug", String, nullable=True, unique=True),
    Column("parent_id", UUIDColumnType, ForeignKey("description.id"), nullable=True),
    Column("repository_id", UUIDColumnType, ForeignKey("actor.id"), nullable=True),
    Column("level_of_description_id", UUIDColumnType, ForeignKey("term.id"), nullable=True),
    Index("ix_description_identifier", "identifier"),
)

description_i18n_table = Table(
    "description_i18n",
    mapper_registry.metadata,
    Column("description_id", UUIDColumnType, ForeignKey("description.id"), primary_key=True),
    Column("culture", String(16), primary_key=True),
    Column("title", String, nullable=True),
    Column("alternate_title", String, nullable=True),
    Column("extent_and_medium", Text, nullable=True),
    Column("archival_history", Text, nullable=True),
    Column("acquisition", Text, nullable=True),
    Column("scope_and_content", Text, nullable=True),
    Column("arrangement", Text, nullable=True),
    Column("access_conditions", Text, nullable=True),
    Column("reproduction_conditions", Text, nullable=True),
    Column("physical_characteristics", Text, nullable=True),
    Column("finding_aids", Text, nullable=True),
    Column("location_of_originals", Text, nullable=True),
    Column("related_units_of_description", Text, nullable=True),
    Column("rules", Text, nullable=True),
    Column("sources", Text, nullable=True),
    Column("revision_history", Text, nullable=True),
    Index("ix_description_i18n_title", "title"),
)

# Dependent records -------------------------------------------------------------

note_table = Table(
    "note",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("object_id", UUIDColumnType, nullable=False),
    Column("type_id", String, nullable=False),
    Column("source_culture", String(16), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_note_owner", "object_id", "type_id"),
)

note_i18n_table = Table(
    "note_i18n",
    mapper_registry.metadata,
    Column("note_id", UUIDColumnType, ForeignKey("note.id"), primary_key=True),
    Column("culture", String(16), primary_key=True),
    Column("content", Text, nullable=True),
)

event_table = Table(
    "event",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("object_id", UUIDColumnType, nullable=False),
    Column("type_id", String, nullable=False),
    Column("actor_id", UUIDColumnType, ForeignKey("actor.id"), nullable=True),
    Column("start_date", PaddedDate(), nullable=True),
    Column("end_date", PaddedDate(), nullable=True),
    Column("start_time", String, nullable=True),
    Column("end_time", String, nullable=True),
    Column("date", String, nullable=True),
    Column("name", String, nullable=True),
    Column("description", Text, nullable=True),
    Column("culture", String(16), nullable=False),
    Index("ix_event_object", "object_id"),
)

property_table = Table(
    "property",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("object_id", UUIDColumnType, nullable=False),
    Column("name", String, nullable=False),
    Column("value", Text, nullable=True),
    Column("scope", String, nullable=True),
    Column("culture", String(16), nullable=False),
    Index("ix_property_owner", "object_id", "name"),
)

relation_table = Table(
    "relation",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("subject_id", UUIDColumnType, nullable=False),
    Column("object_id", UUIDColumnType, nullable=False),
    Column("type_id", String, nullable=False),
    Index("ix_relation_pair", "subject_id", "object_id"),
)

rights_table = Table(
    "rights",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("rights_holder_id", UUIDColumnType, ForeignKey("actor.id"), nullable=True),
    Column("basis_id", UUIDColumnType, ForeignKey("term.id"), nullable=True),
    Column("act_id", UUIDColumnType, ForeignKey("term.id"), nullable=True),
    Column("copyright_status_id", UUIDColumnType, ForeignKey("term.id"), nullable=True),
    Column("restriction", Boolean, nullable=True),
    Column("start_date", PaddedDate(), nullable=True),
    Column("end_date", PaddedDate(), nullable=True),
    Column("rights_note", Text, nullable=True),
    Column("culture", String(16), nullable=False),
)

physical_object_table = Table(
    "physical_object",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("location", String, nullable=True),
    Column("type_id", UUIDColumnType, ForeignKey("term.id"), nullable=True),
    Column("culture", String(16), nullable=False),
)

keymap_table = Table(
    "keymap",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("source_name", String, nullable=False),
    Column("source_id", String, nullable=False),
    Column("target_name", Enum(EntityType, native_enum=False), nullable=False),
    Column("target_id", UUIDColumnType, nullable=False),
    Index("ix_keymap_source", "source_id", "source_name", "target_name"),
)

# tables carrying a public slug; slugs are unique across all of them
SLUGGED_TABLES: Final[tuple[Table, ...]] = (description_table, actor_table)

AGENT_CLASS_BY_KIND: Final[dict[EntityType, type[Actor]]] = {
    EntityType.ACTOR: Actor,
    EntityType.REPOSITORY: Repository,
    EntityType.RIGHTS_HOLDER: RightsHolder,
    EntityType.DONOR: Donor,
}


def _translations_relationship(i18n_cls: type) -> orm.RelationshipProperty[object]:
    return relationship(
        i18n_cls,
        collection_class=attribute_keyed_dict("culture"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Term, term_table)
    mapper_registry.map_imperatively(ObjectTermRelation, object_term_relation_table)

    mapper_registry.map_imperatively(ActorI18n, actor_i18n_table)
    mapper_registry.map_imperatively(
        Actor,
        actor_table,
        polymorphic_on=actor_table.c.kind,
        polymorphic_identity=EntityType.ACTOR,
        properties={"_i18n": _translations_relationship(ActorI18n)},
    )
    for kind, agent_cls in AGENT_CLASS_BY_KIND.items():
        if agent_cls is Actor:
            continue
        mapper_registry.map_imperatively(agent_cls, inherits=Actor, polymorphic_identity=kind)
    mapper_registry.map_imperatively(ContactInformation, contact_information_table)

    mapper_registry.map_imperatively(DescriptionI18n, description_i18n_table)
    mapper_registry.map_imperatively(
        Description,
        description_table,
        properties={"_i18n": _translations_relationship(DescriptionI18n)},
    )

    mapper_registry.map_imperatively(NoteI18n, note_i18n_table)
    mapper_registry.map_imperatively(
        Note,
        note_table,
        properties={"_i18n": _translations_relationship(NoteI18n)},
    )
    mapper_registry.map_imperatively(Event, event_table)
    mapper_registry.map_imperatively(Property, property_table)
    mapper_registry.map_imperatively(Relation, relation_table)
    mapper_registry.map_imperatively(Rights, rights_table)
    mapper_registry.map_imperatively(PhysicalObject, physical_object_table)
    mapper_registry.map_imperatively(KeymapEntry, keymap_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
