"""Public domain model surface."""

from __future__ import annotations

from flatport.domain.model.agents import (
    Actor,
    ActorI18n,
    ContactInformation,
    Donor,
    Repository,
    RightsHolder,
)
from flatport.domain.model.annotations import Event, Note, NoteI18n, Property
from flatport.domain.model.description import Description, DescriptionI18n
from flatport.domain.model.entity import CulturedEntity, Entity, EntityRef, new_id
from flatport.domain.model.enums import EntityType, EventType, NoteType, RelationType, Taxonomy
from flatport.domain.model.keymap import KeymapEntry
from flatport.domain.model.primitives import DEFAULT_CULTURE, Culture, Slug, TypeId, slugify
from flatport.domain.model.relations import PhysicalObject, Relation, Rights
from flatport.domain.model.taxonomy import ObjectTermRelation, Term

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "EntityRef",
    "CulturedEntity",
    "new_id",
    # primitives
    "Culture",
    "DEFAULT_CULTURE",
    "Slug",
    "TypeId",
    "slugify",
    # enums
    "EntityType",
    "EventType",
    "NoteType",
    "RelationType",
    "Taxonomy",
    # primary entities
    "Description",
    "DescriptionI18n",
    "Actor",
    "ActorI18n",
    "Repository",
    "RightsHolder",
    "Donor",
    "ContactInformation",
    # children
    "Note",
    "NoteI18n",
    "Event",
    "Property",
    "Relation",
    "Rights",
    "PhysicalObject",
    "Term",
    "ObjectTermRelation",
    # keymap
    "KeymapEntry",
]
