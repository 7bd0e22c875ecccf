"""Built-in column layouts for description, actor and repository CSVs.

Each preset pairs an entity kind with a column registry and the hooks that
handle the columns no single rule can (parent links, events, contact
details). Column names follow the camelCase convention of the CSV templates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import zip_longest
from typing import TYPE_CHECKING

from flatport.domain.flatfile.columns import (
    ArrayColumn,
    ColumnRegistry,
    LanguageColumn,
    NoteColumn,
    PropertyColumn,
    ScriptColumn,
    TermRelationColumn,
    VariableColumn,
    snake_case,
)
from flatport.domain.flatfile.errors import FlatfileError, ValidationError
from flatport.domain.flatfile.hooks import ImportHooks
from flatport.domain.model import (
    Actor,
    Description,
    EntityType,
    EventType,
    NoteType,
    RelationType,
    Repository,
    Taxonomy,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from flatport.domain.flatfile.row import Row
    from flatport.domain.flatfile.run import ImportRun
    from flatport.domain.model import CulturedEntity

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Preset:
    entity_kind: type[CulturedEntity]
    build_registry: Callable[[], ColumnRegistry]
    build_hooks: Callable[[], ImportHooks]


def _vars_list(row: Row, column: str) -> list[str]:
    values: list[str] = row.vars.get(column, [])
    return values


def _var(row: Row, column: str) -> str:
    value: str = row.vars.get(column, "")
    return value


# Descriptions ----------------------------------------------------------------

DESCRIPTION_STANDARD_COLUMNS = (
    "identifier",
    "title",
    "alternateTitle",
    "extentAndMedium",
    "archivalHistory",
    "acquisition",
    "scopeAndContent",
    "arrangement",
    "accessConditions",
    "reproductionConditions",
    "physicalCharacteristics",
    "findingAids",
    "locationOfOriginals",
    "relatedUnitsOfDescription",
    "rules",
    "sources",
    "revisionHistory",
)

EVENT_ARRAY_COLUMNS = (
    "eventTypes",
    "eventDates",
    "eventStartDates",
    "eventEndDates",
    "eventActors",
    "eventActorHistories",
    "eventPlaces",
)

RIGHTS_COLUMNS = (
    "rightsBasis",
    "rightsAct",
    "rightsHolder",
    "copyrightStatus",
    "rightsRestriction",
    "rightsStartDate",
    "rightsEndDate",
    "rightsNote",
)


def description_registry() -> ColumnRegistry:
    registry = ColumnRegistry()
    registry.standard(*DESCRIPTION_STANDARD_COLUMNS)
    registry.add(
        *(ArrayColumn(column) for column in (*EVENT_ARRAY_COLUMNS, "nameAccessPoints")),
        *(
            VariableColumn(column)
            for column in (
                "repository",
                "levelOfDescription",
                "parentId",
                "qubitParentSlug",
                "physicalObjectName",
                "physicalObjectLocation",
                "physicalObjectType",
                "donorName",
                *RIGHTS_COLUMNS,
            )
        ),
        PropertyColumn("alternativeIdentifiers", "alternativeIdentifiers"),
        TermRelationColumn("subjectAccessPoints", Taxonomy.SUBJECT),
        TermRelationColumn("placeAccessPoints", Taxonomy.PLACE),
        TermRelationColumn("genreAccessPoints", Taxonomy.GENRE),
        NoteColumn("generalNote", NoteType.GENERAL),
        NoteColumn("archivistNote", NoteType.ARCHIVIST),
        NoteColumn("publicationNote", NoteType.PUBLICATION),
        NoteColumn("languageNote", NoteType.LANGUAGE),
        LanguageColumn("language", "language"),
        ScriptColumn("script", "script"),
        LanguageColumn("languageOfDescription", "languageOfDescription"),
        ScriptColumn("scriptOfDescription", "scriptOfDescription"),
    )
    return registry


def description_hooks() -> ImportHooks:
    return ImportHooks(
        before_update=_clear_description_events,
        pre_save=_link_description,
        post_save=_description_children,
    )


def _clear_description_events(run: ImportRun, row: Row) -> None:
    """Drop a matched description's events so the row's events replace them."""

    _ = row
    options = run.options
    if not options.match_and_update or options.keep_existing_children:
        return
    entity = run.require_entity()
    events = run.repositories.events
    for event in events.for_object(entity.id):
        events.delete(event)


def _link_description(run: ImportRun, row: Row) -> None:
    if run.is_translation:
        return
    description = run.require_entity()
    if not isinstance(description, Description):
        raise FlatfileError(f"Expected a description, got {type(description).__name__}")
    children = run.children

    repository_name = _var(row, "repository")
    if repository_name:
        repository = children.fetch_or_create_repository(repository_name)
        if repository is not None:
            description.repository_id = repository.id

    level = _var(row, "levelOfDescription")
    if level:
        description.level_of_description_id = children.fetch_or_create_term(
            Taxonomy.LEVEL_OF_DESCRIPTION, level
        ).id

    parent_slug = _var(row, "qubitParentSlug")
    parent_legacy_id = _var(row, "parentId")
    if parent_slug:
        parent = run.repositories.descriptions.get_by_slug(parent_slug)
        if parent is None:
            run.log_error(f'Could not find parent with slug "{parent_slug}"', level=logging.WARNING)
        else:
            description.parent_id = parent.id
    elif parent_legacy_id:
        entry = run.repositories.keymap.latest(
            parent_legacy_id, run.source_name, EntityType.DESCRIPTION
        )
        if entry is None:
            run.log_error(
                f"Could not find parent with legacyId {parent_legacy_id}", level=logging.WARNING
            )
        else:
            description.parent_id = entry.target_id


def _description_children(run: ImportRun, row: Row) -> None:
    description = run.require_entity()
    children = run.children
    # events and rights belong to the record, not to one of its cultures
    owns_children = not run.is_translation

    if owns_children:
        _create_events(run, row)

    for name in _vars_list(row, "nameAccessPoints"):
        if not name:
            continue
        actor = children.fetch_or_create_actor(name)
        children.create_relation(description.id, actor.id, RelationType.NAME_ACCESS_POINT)

    object_name = _var(row, "physicalObjectName")
    if object_name:
        object_type = _var(row, "physicalObjectType")
        type_id = (
            children.fetch_or_create_term(Taxonomy.PHYSICAL_OBJECT_TYPE, object_type).id
            if object_type
            else None
        )
        physical_object = children.fetch_or_create_physical_object(
            object_name, _var(row, "physicalObjectLocation"), type_id
        )
        children.create_relation(
            physical_object.id, description.id, RelationType.HAS_PHYSICAL_OBJECT
        )

    donor_name = _var(row, "donorName")
    if donor_name:
        donor = children.fetch_or_create_donor(donor_name)
        children.create_relation(description.id, donor.id, RelationType.DONOR)

    if owns_children and any(_var(row, column) for column in RIGHTS_COLUMNS):
        children.create_rights(
            rights_holder=_var(row, "rightsHolder") or None,
            basis=_var(row, "rightsBasis") or None,
            act=_var(row, "rightsAct") or None,
            copyright_status=_var(row, "copyrightStatus") or None,
            restriction=_restriction(_var(row, "rightsRestriction")),
            start_date=_var(row, "rightsStartDate") or None,
            end_date=_var(row, "rightsEndDate") or None,
            rights_note=_var(row, "rightsNote") or None,
        )


def _create_events(run: ImportRun, row: Row) -> None:
    """One event per position across the event array columns.

    A missing event type defaults to creation.
    """

    columns = [_vars_list(row, column) for column in EVENT_ARRAY_COLUMNS]
    for types, dates, starts, ends, actors, histories, places in zip_longest(*columns):
        if not any((dates, starts, ends, actors, histories, places)):
            continue
        run.children.create_or_update_event(
            _event_type(types),
            date=dates or None,
            start_date=starts or None,
            end_date=ends or None,
            actor_name=actors or None,
            actor_history=histories or None,
            place=places or None,
        )


def _event_type(name: str | None) -> EventType:
    if not name:
        return EventType.CREATION
    try:
        return EventType(name.strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown event type: {name}") from None


def _restriction(value: str) -> bool | None:
    match value.lower():
        case "":
            return None
        case "allow" | "yes" | "1":
            return True
        case "disallow" | "no" | "0":
            return False
        case _:
            raise ValidationError(f"Invalid rights restriction: {value}")


# Actors ----------------------------------------------------------------------

ACTOR_STANDARD_COLUMNS = (
    "authorizedFormOfName",
    "datesOfExistence",
    "history",
    "places",
    "legalStatus",
    "functions",
    "mandates",
    "internalStructures",
    "generalContext",
    "descriptionIdentifier",
    "corporateBodyIdentifiers",
)


def actor_registry() -> ColumnRegistry:
    registry = ColumnRegistry()
    registry.standard(*ACTOR_STANDARD_COLUMNS)
    registry.add(
        VariableColumn("typeOfEntity"),
        VariableColumn("maintainingRepository"),
        TermRelationColumn("subjectAccessPoints", Taxonomy.SUBJECT),
        TermRelationColumn("placeAccessPoints", Taxonomy.PLACE),
        NoteColumn("maintenanceNotes", NoteType.MAINTENANCE),
        LanguageColumn("language", "language"),
        ScriptColumn("script", "script"),
    )
    return registry


def actor_hooks() -> ImportHooks:
    return ImportHooks(pre_save=_set_entity_type, post_save=_link_maintaining_repository)


def _set_entity_type(run: ImportRun, row: Row) -> None:
    if run.is_translation:
        return
    entity_type = _var(row, "typeOfEntity")
    if not entity_type:
        return
    actor = run.require_entity()
    if not isinstance(actor, Actor):
        raise FlatfileError(f"Expected an actor, got {type(actor).__name__}")
    actor.entity_type_id = run.children.fetch_or_create_term(
        Taxonomy.ACTOR_ENTITY_TYPE, entity_type
    ).id


def _link_maintaining_repository(run: ImportRun, row: Row) -> None:
    name = _var(row, "maintainingRepository")
    if not name:
        return
    actor = run.require_entity()
    repository = run.children.fetch_or_create_repository(name)
    if repository is not None:
        run.children.create_relation(repository.id, actor.id, RelationType.MAINTAINING_REPOSITORY)


# Repositories ----------------------------------------------------------------

REPOSITORY_STANDARD_COLUMNS = (
    "authorizedFormOfName",
    "identifier",
    "history",
    "geoculturalContext",
    "collectingPolicies",
    "buildings",
    "holdings",
    "findingAids",
    "openingTimes",
    "accessConditions",
    "researchServices",
    "descriptionIdentifier",
    "uploadLimit",
)

CONTACT_COLUMNS = ("email", "telephone", "streetAddress", "city", "region", "postalCode")


def repository_registry() -> ColumnRegistry:
    registry = ColumnRegistry()
    registry.standard(*REPOSITORY_STANDARD_COLUMNS)
    registry.add(
        *(VariableColumn(column) for column in CONTACT_COLUMNS),
        NoteColumn("maintenanceNotes", NoteType.MAINTENANCE),
        LanguageColumn("language", "language"),
        ScriptColumn("script", "script"),
    )
    return registry


def repository_hooks() -> ImportHooks:
    return ImportHooks(post_save=_store_contact_information)


def _store_contact_information(run: ImportRun, row: Row) -> None:
    if run.is_translation:
        return
    fields: dict[str, str | None] = {
        snake_case(column): _var(row, column)
        for column in CONTACT_COLUMNS
        if _var(row, column)
    }
    if not fields:
        return
    repository = run.require_entity()
    run.children.fetch_or_create_contact_information(repository.id, **fields)


PRESETS: dict[str, Preset] = {
    "description": Preset(Description, description_registry, description_hooks),
    "actor": Preset(Actor, actor_registry, actor_hooks),
    "repository": Preset(Repository, repository_registry, repository_hooks),
}
