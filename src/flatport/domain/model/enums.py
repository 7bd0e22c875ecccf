"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Typed-reference discriminator for polymorphic ownership (keymap, notes, relations)."""

    DESCRIPTION = "description"
    ACTOR = "actor"
    REPOSITORY = "repository"
    RIGHTS_HOLDER = "rights_holder"
    DONOR = "donor"

    TERM = "term"
    NOTE = "note"
    EVENT = "event"
    PROPERTY = "property"
    RELATION = "relation"
    RIGHTS = "rights"
    PHYSICAL_OBJECT = "physical_object"
    OBJECT_TERM_RELATION = "object_term_relation"
    CONTACT_INFORMATION = "contact_information"


class Taxonomy(StrEnum):
    SUBJECT = "subject"
    PLACE = "place"
    GENRE = "genre"
    LEVEL_OF_DESCRIPTION = "level_of_description"
    ACTOR_ENTITY_TYPE = "actor_entity_type"
    MATERIAL_TYPE = "material_type"
    RIGHT_BASIS = "right_basis"
    RIGHT_ACT = "right_act"
    COPYRIGHT_STATUS = "copyright_status"
    PHYSICAL_OBJECT_TYPE = "physical_object_type"


class NoteType(StrEnum):
    GENERAL = "general_note"
    ARCHIVIST = "archivist_note"
    PUBLICATION = "publication_note"
    LANGUAGE = "language_note"
    MAINTENANCE = "maintenance_note"


class EventType(StrEnum):
    CREATION = "creation"
    ACCUMULATION = "accumulation"
    COLLECTION = "collection"
    CONTRIBUTION = "contribution"
    CUSTODY = "custody"
    PUBLICATION = "publication"
    REPRODUCTION = "reproduction"


class RelationType(StrEnum):
    RIGHT = "right"
    NAME_ACCESS_POINT = "name_access_point"
    MAINTAINING_REPOSITORY = "maintaining_repository"
    HAS_PHYSICAL_OBJECT = "has_physical_object"
    DONOR = "donor"
