"""Records hanging off a primary entity: notes, events and ad hoc properties.

Owners are referenced by bare id (``object_id``); the owning entity may be a
description or any kind of actor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, ClassVar

from flatport.domain.model.entity import CulturedEntity, Entity
from flatport.domain.model.enums import EntityType
from flatport.domain.model.primitives import DEFAULT_CULTURE

if TYPE_CHECKING:
    from uuid import UUID

    from flatport.domain.model.primitives import Culture, TypeId


@dataclass(eq=False, kw_only=True)
class NoteI18n:
    culture: Culture
    content: str | None = None


@dataclass(eq=False, kw_only=True)
class Note(CulturedEntity):
    """A typed note; one logical note carries its body in several cultures."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.NOTE
    I18N_CLASS: ClassVar[type[NoteI18n]] = NoteI18n
    I18N_FIELDS: ClassVar[frozenset[str]] = frozenset({"content"})

    object_id: UUID
    type_id: TypeId
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def content(self, culture: Culture | None = None) -> str | None:
        return self.get_field("content", culture=culture)


@dataclass(eq=False, kw_only=True)
class Event(Entity):
    """Something that happened to an object: creation, accumulation, custody..."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.EVENT

    object_id: UUID
    type_id: TypeId
    actor_id: UUID | None = None
    # ISO-like ``YYYY[-MM[-DD]]``; year-only values are stored zero padded
    start_date: str | None = None
    end_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    date: str | None = None
    name: str | None = None
    description: str | None = None
    culture: Culture = DEFAULT_CULTURE


@dataclass(eq=False, kw_only=True)
class Property(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PROPERTY

    object_id: UUID
    name: str
    value: str | None = None
    scope: str | None = None
    culture: Culture = DEFAULT_CULTURE
