"""Controlled-vocabulary terms and their links to described objects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from flatport.domain.model.entity import Entity
from flatport.domain.model.enums import EntityType, Taxonomy
from flatport.domain.model.primitives import DEFAULT_CULTURE

if TYPE_CHECKING:
    from uuid import UUID

    from flatport.domain.model.primitives import Culture


@dataclass(eq=False, kw_only=True)
class Term(Entity):
    """A named term, unique per (taxonomy, culture, name)."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.TERM

    taxonomy: Taxonomy
    name: str
    culture: Culture = DEFAULT_CULTURE


@dataclass(eq=False, kw_only=True)
class ObjectTermRelation(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.OBJECT_TERM_RELATION

    object_id: UUID
    term_id: UUID
