"""Typed links between entities, rights statements and physical storage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from flatport.domain.model.entity import Entity
from flatport.domain.model.enums import EntityType
from flatport.domain.model.primitives import DEFAULT_CULTURE

if TYPE_CHECKING:
    from uuid import UUID

    from flatport.domain.model.primitives import Culture, TypeId


@dataclass(eq=False, kw_only=True)
class Relation(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.RELATION

    subject_id: UUID
    object_id: UUID
    type_id: TypeId


@dataclass(eq=False, kw_only=True)
class Rights(Entity):
    """Rights statement; attached to its object through a ``right`` relation."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.RIGHTS

    rights_holder_id: UUID | None = None
    basis_id: UUID | None = None
    act_id: UUID | None = None
    copyright_status_id: UUID | None = None
    restriction: bool | None = None
    start_date: str | None = None
    end_date: str | None = None
    rights_note: str | None = None
    culture: Culture = DEFAULT_CULTURE


@dataclass(eq=False, kw_only=True)
class PhysicalObject(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PHYSICAL_OBJECT

    name: str
    location: str | None = None
    type_id: UUID | None = None
    culture: Culture = DEFAULT_CULTURE
