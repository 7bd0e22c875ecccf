from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select

from flatport.domain.flatfile import UpdateOptions
from flatport.domain.model import (
    Actor,
    ContactInformation,
    Note,
    Relation,
    RelationType,
    Repository,
    Taxonomy,
    Term,
)
from tests.helpers.csv_files import csv_bytes

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from flatport.adapters.sqlalchemy.unit_of_work import SqlAlchemyImportUnitOfWork
    from flatport.domain.flatfile import RunStatus

    ImportBytes = Callable[..., RunStatus]
    UowFactory = Callable[[], SqlAlchemyImportUnitOfWork]

pytestmark = pytest.mark.integration

ACTOR_HEADER = ["authorizedFormOfName", "history", "typeOfEntity", "maintainingRepository"]
MATCH_AND_UPDATE = UpdateOptions.from_flags(update="match-and-update")


def _all[T](uow_factory: UowFactory, entity_cls: type[T]) -> list[T]:
    with uow_factory() as uow:
        return list(uow.session.execute(select(entity_cls)).scalars())


def _actors(uow_factory: UowFactory) -> dict[str, Actor]:
    """Plain actors by name; repositories, donors and rights holders excluded."""

    return {
        actor.authorized_form_of_name or "": actor
        for actor in _all(uow_factory, Actor)
        if type(actor) is Actor
    }


def _seed_actors(import_csv_bytes: ImportBytes) -> None:
    import_csv_bytes(
        csv_bytes(
            ACTOR_HEADER,
            ["Smith, John", "Writer", "Person", "Archive A"],
            ["Jones, Ann", "Painter", "Person", "Archive B"],
        ),
        preset="actor",
    )


def test_actor_rows_create_actors_with_type_and_repository(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    status = import_csv_bytes(
        csv_bytes(
            [*ACTOR_HEADER, "maintenanceNotes"],
            ["Smith, John", "Writer", "Person", "Archive A", "Checked 2020"],
        ),
        preset="actor",
    )

    assert status.created == 1
    smith = _actors(sqlite_unit_of_work)["Smith, John"]
    assert smith.history == "Writer"
    terms = {t.id: t for t in _all(sqlite_unit_of_work, Term)}
    assert smith.entity_type_id is not None
    assert terms[smith.entity_type_id].taxonomy is Taxonomy.ACTOR_ENTITY_TYPE
    repositories = _all(sqlite_unit_of_work, Repository)
    assert [r.authorized_form_of_name for r in repositories] == ["Archive A"]
    relations = _all(sqlite_unit_of_work, Relation)
    assert [(r.subject_id, r.object_id, r.type_id) for r in relations] == [
        (repositories[0].id, smith.id, RelationType.MAINTAINING_REPOSITORY)
    ]
    assert [note.content() for note in _all(sqlite_unit_of_work, Note)] == ["Checked 2020"]


def test_skip_matched_actor_is_a_duplicate(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory, tmp_path: Path
) -> None:
    _seed_actors(import_csv_bytes)
    error_log = tmp_path / "errors.log"

    status = import_csv_bytes(
        csv_bytes(["authorizedFormOfName"], ["Smith, John"], ["Brown, Lee"]),
        preset="actor",
        options=UpdateOptions(skip_matched=True),
        error_log=error_log,
    )

    assert status.duplicates == 1
    assert status.created == 1
    assert set(_actors(sqlite_unit_of_work)) == {"Smith, John", "Jones, Ann", "Brown, Lee"}
    assert 'Row 1: Matching record found for "Smith, John", skipping.' in (
        error_log.read_text(encoding="utf-8")
    )


def test_match_and_update_actor_in_place(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    _seed_actors(import_csv_bytes)
    original = _actors(sqlite_unit_of_work)["Smith, John"]

    status = import_csv_bytes(
        csv_bytes(["authorizedFormOfName", "history"], ["Smith, John", "Novelist"]),
        preset="actor",
        options=MATCH_AND_UPDATE,
    )

    assert status.updated == 1
    assert status.created == 0
    smith = _actors(sqlite_unit_of_work)["Smith, John"]
    assert smith.id == original.id
    assert smith.history == "Novelist"


def test_delete_and_replace_actor(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    _seed_actors(import_csv_bytes)
    original = _actors(sqlite_unit_of_work)["Smith, John"]

    status = import_csv_bytes(
        csv_bytes(["authorizedFormOfName", "history"], ["Smith, John", "Novelist"]),
        preset="actor",
        options=UpdateOptions.from_flags(update="delete-and-replace"),
    )

    assert status.updated == 1
    assert status.created == 1
    smith = _actors(sqlite_unit_of_work)["Smith, John"]
    assert smith.id != original.id
    assert smith.history == "Novelist"
    assert all(r.object_id != original.id for r in _all(sqlite_unit_of_work, Relation))


def test_skip_unmatched_actor(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    _seed_actors(import_csv_bytes)

    status = import_csv_bytes(
        csv_bytes(["authorizedFormOfName", "history"], ["Brown, Lee", "Sculptor"]),
        preset="actor",
        options=UpdateOptions.from_flags(update="match-and-update", skip_unmatched=True),
    )

    assert status.updated == 0
    assert status.created == 0
    assert "Brown, Lee" not in _actors(sqlite_unit_of_work)


def test_limit_only_updates_actors_maintained_by_the_repository(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory, tmp_path: Path
) -> None:
    _seed_actors(import_csv_bytes)
    error_log = tmp_path / "errors.log"

    status = import_csv_bytes(
        csv_bytes(
            ["authorizedFormOfName", "history"],
            ["Smith, John", "Novelist"],
            ["Jones, Ann", "Sculptor"],
        ),
        preset="actor",
        options=MATCH_AND_UPDATE,
        limit="archive-a",
        error_log=error_log,
    )

    assert status.updated == 1
    actors = _actors(sqlite_unit_of_work)
    assert actors["Smith, John"].history == "Novelist"
    assert actors["Jones, Ann"].history == "Painter"
    assert 'Row 2: Match found outside the repository limit for record "Jones, Ann"' in (
        error_log.read_text(encoding="utf-8")
    )


def test_event_actor_history_follows_the_maintaining_repository(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    description_header = [
        "legacyId",
        "title",
        "repository",
        "eventStartDates",
        "eventActors",
        "eventActorHistories",
    ]
    import_csv_bytes(csv_bytes(description_header, ["1", "Letters", "Archive A", "", "", ""]))
    import_csv_bytes(
        csv_bytes(ACTOR_HEADER, ["Smith, John", "Writer", "", "Archive A"]), preset="actor"
    )

    import_csv_bytes(
        csv_bytes(
            description_header, ["1", "Letters", "Archive A", "1900", "Smith, John", "Poet"]
        ),
        options=MATCH_AND_UPDATE,
    )

    actors = [a for a in _all(sqlite_unit_of_work, Actor) if type(a) is Actor]
    assert len(actors) == 1
    assert actors[0].history == "Poet"


def test_event_actor_with_other_history_outside_repository_is_a_new_actor(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    import_csv_bytes(csv_bytes(ACTOR_HEADER, ["Smith, John", "Writer", "", ""]), preset="actor")

    import_csv_bytes(
        csv_bytes(
            ["legacyId", "title", "eventStartDates", "eventActors", "eventActorHistories"],
            ["1", "Letters", "1900", "Smith, John", "Poet"],
        )
    )

    histories = sorted(
        a.history or "" for a in _all(sqlite_unit_of_work, Actor) if type(a) is Actor
    )
    assert histories == ["Poet", "Writer"]


# Repositories -----------------------------------------------------------------


def test_repository_rows_store_contact_information(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    header = ["authorizedFormOfName", "identifier", "email", "city", "postalCode", "uploadLimit"]
    data = csv_bytes(header, ["City Archives", "CA", "desk@example.org", "Ghent", "9000", "2"])

    created = import_csv_bytes(data, preset="repository")
    updated = import_csv_bytes(data, preset="repository", options=MATCH_AND_UPDATE)

    assert created.created == 1
    assert updated.updated == 1
    repositories = _all(sqlite_unit_of_work, Repository)
    assert len(repositories) == 1
    repository = repositories[0]
    assert repository.identifier == "CA"
    assert repository.upload_limit == "2"
    assert repository.slug == "city-archives"
    contacts = _all(sqlite_unit_of_work, ContactInformation)
    assert len(contacts) == 1
    assert contacts[0].actor_id == repository.id
    assert (contacts[0].email, contacts[0].city, contacts[0].postal_code) == (
        "desk@example.org",
        "Ghent",
        "9000",
    )


def test_repository_and_actor_with_same_name_are_distinct(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    import_csv_bytes(csv_bytes(["authorizedFormOfName"], ["Smith Family"]), preset="actor")

    status = import_csv_bytes(
        csv_bytes(["authorizedFormOfName"], ["Smith Family"]),
        preset="repository",
        options=UpdateOptions(skip_matched=True),
    )

    assert status.duplicates == 0
    assert status.created == 1
    slugs = sorted(a.slug or "" for a in _all(sqlite_unit_of_work, Actor))
    assert slugs == ["smith-family", "smith-family-2"]
