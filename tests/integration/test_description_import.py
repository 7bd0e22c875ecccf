from __future__ import annotations

import io
import json
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select

from flatport.adapters.sqlalchemy.mappings import event_table
from flatport.config import ConfigurationError
from flatport.domain.flatfile import (
    ColumnRegistry,
    FlatfileImporter,
    ImportHooks,
    ImportSettings,
    MalformedInputError,
    UpdateOptions,
)
from flatport.domain.model import (
    Actor,
    Description,
    Event,
    KeymapEntry,
    Note,
    ObjectTermRelation,
    Property,
    Relation,
    RelationType,
    Repository,
    Rights,
    Taxonomy,
    Term,
)
from tests.helpers.csv_files import csv_bytes

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from flatport.adapters.search import LoggingSearchIndexer
    from flatport.adapters.sqlalchemy.unit_of_work import SqlAlchemyImportUnitOfWork
    from flatport.domain.flatfile import ImportRun, Row, RunStatus

    ImportBytes = Callable[..., RunStatus]
    UowFactory = Callable[[], SqlAlchemyImportUnitOfWork]

pytestmark = pytest.mark.integration

MATCH_AND_UPDATE = UpdateOptions.from_flags(update="match-and-update")
DELETE_AND_REPLACE = UpdateOptions.from_flags(update="delete-and-replace")


def _all[T](uow_factory: UowFactory, entity_cls: type[T]) -> list[T]:
    with uow_factory() as uow:
        return list(uow.session.execute(select(entity_cls)).scalars())


def _description(uow_factory: UowFactory, title: str) -> Description:
    for description in _all(uow_factory, Description):
        if description.title == title:
            return description
    raise AssertionError(f"No description titled {title!r}")


# Create-only ------------------------------------------------------------------


def test_create_only_translation_rows_fan_in(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    data = csv_bytes(
        ["legacyId", "identifier", "title", "culture"],
        ["1", "F-1", "Letters", "en"],
        ["1", "F-1", "Lettres", "fr"],
        ["2", "F-2", "Diaries", ""],
    )

    status = import_csv_bytes(data)

    assert status.created == 2
    assert status.rows == 3
    descriptions = _all(sqlite_unit_of_work, Description)
    assert len(descriptions) == 2
    letters = _description(sqlite_unit_of_work, "Letters")
    assert letters.source_culture == "en"
    assert letters.get_field("title", culture="fr") == "Lettres"
    assert letters.identifier == "F-1"
    assert len(_all(sqlite_unit_of_work, KeymapEntry)) == 2


def test_bom_and_plain_input_import_identically(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    header = ["legacyId", "title"]

    plain = import_csv_bytes(csv_bytes(header, ["1", "Letters"]), source_name="plain")
    with_bom = import_csv_bytes(csv_bytes(header, ["1", "Letters"], bom=True), source_name="bom")

    assert (plain.rows, plain.created) == (with_bom.rows, with_bom.created) == (1, 1)
    titles = sorted(d.title or "" for d in _all(sqlite_unit_of_work, Description))
    assert titles == ["Letters", "Letters"]


def test_blank_and_skipped_rows_are_counted_but_not_imported(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    data = csv_bytes(
        ["legacyId", "title"],
        ["1", "Header notes"],
        [" ", ""],
        ["2", "Letters"],
    )

    status = import_csv_bytes(data, skip_rows=1)

    assert status.rows == 3
    assert status.skipped_rows == 1
    assert status.created == 1
    assert [d.title for d in _all(sqlite_unit_of_work, Description)] == ["Letters"]


def test_skip_matched_counts_duplicates(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory, tmp_path: Path
) -> None:
    data = csv_bytes(["legacyId", "title"], ["1", "Letters"], ["2", "Diaries"])
    import_csv_bytes(data)
    error_log = tmp_path / "errors.log"

    status = import_csv_bytes(
        data, options=UpdateOptions(skip_matched=True), error_log=error_log
    )

    assert status.duplicates == 2
    assert status.created == 0
    assert len(_all(sqlite_unit_of_work, Description)) == 2
    lines = error_log.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("Row 1: Matching description found, skipping;")
    assert lines[-1] == "Duplicates found: 2"


def test_terms_are_deduplicated_within_a_row_and_across_rows(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    data = csv_bytes(
        ["legacyId", "title", "subjectAccessPoints"],
        ["1", "Letters", "Trees|Trees|Forests"],
        ["2", "Diaries", "Forests| "],
    )

    import_csv_bytes(data)

    terms = [t for t in _all(sqlite_unit_of_work, Term) if t.taxonomy is Taxonomy.SUBJECT]
    assert sorted(t.name for t in terms) == ["Forests", "Trees"]
    letters = _description(sqlite_unit_of_work, "Letters")
    links = _all(sqlite_unit_of_work, ObjectTermRelation)
    assert len([link for link in links if link.object_id == letters.id]) == 2
    assert len(links) == 3


def test_notes_are_deduplicated_and_translated_by_position(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    data = csv_bytes(
        ["legacyId", "title", "generalNote", "culture"],
        ["1", "Letters", "Fragile|Fragile", "en"],
        ["1", "Lettres", "Fragile (fr)", "fr"],
    )

    import_csv_bytes(data)

    notes = _all(sqlite_unit_of_work, Note)
    assert len(notes) == 1
    assert notes[0].content("en") == "Fragile"
    assert notes[0].content("fr") == "Fragile (fr)"


def test_properties_and_vocabularies(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    data = csv_bytes(
        ["legacyId", "title", "alternativeIdentifiers", "language", "script"],
        ["1", "Letters", "ALT-1", "EN|fr|en", "latn"],
    )

    import_csv_bytes(data)

    values = {p.name: p.value for p in _all(sqlite_unit_of_work, Property)}
    assert values["alternativeIdentifiers"] == "ALT-1"
    assert json.loads(values["language"] or "") == ["en", "fr"]
    assert json.loads(values["script"] or "") == ["Latn"]


def test_invalid_vocabulary_value_abandons_only_that_rows_children(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    data = csv_bytes(
        ["legacyId", "title", "language", "subjectAccessPoints"],
        ["1", "Letters", "en|klingon", "Trees"],
        ["2", "Diaries", "fr", "Forests"],
    )

    status = import_csv_bytes(data)

    assert status.errors == 1
    assert status.created == 2
    assert len(_all(sqlite_unit_of_work, Description)) == 2
    languages = [p for p in _all(sqlite_unit_of_work, Property) if p.name == "language"]
    assert [json.loads(p.value or "") for p in languages] == [["fr"]]


def test_repository_level_parent_and_physical_object(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    data = csv_bytes(
        [
            "legacyId",
            "parentId",
            "title",
            "repository",
            "levelOfDescription",
            "physicalObjectName",
            "physicalObjectLocation",
            "physicalObjectType",
            "donorName",
        ],
        ["10", "", "Fonds", "City Archives", "Fonds", "Box 1", "Shelf 4", "Box", "J. Donor"],
        ["11", "10", "Series", "", "Series", "Box 1", "Shelf 4", "Box", ""],
    )

    import_csv_bytes(data)

    fonds = _description(sqlite_unit_of_work, "Fonds")
    series = _description(sqlite_unit_of_work, "Series")
    assert series.parent_id == fonds.id
    repositories = _all(sqlite_unit_of_work, Repository)
    assert [r.authorized_form_of_name for r in repositories] == ["City Archives"]
    assert fonds.repository_id == repositories[0].id
    assert fonds.level_of_description_id is not None
    relations = _all(sqlite_unit_of_work, Relation)
    assert len([r for r in relations if r.type_id == RelationType.HAS_PHYSICAL_OBJECT]) == 2
    assert len([r for r in relations if r.type_id == RelationType.DONOR]) == 1


def test_events_with_actor_place_and_rights(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    data = csv_bytes(
        [
            "legacyId",
            "title",
            "eventTypes",
            "eventDates",
            "eventStartDates",
            "eventEndDates",
            "eventActors",
            "eventActorHistories",
            "eventPlaces",
            "nameAccessPoints",
            "rightsBasis",
            "rightsHolder",
            "rightsRestriction",
        ],
        [
            "1",
            "Letters",
            "Creation|Accumulation",
            "1900-1910|1920",
            "1900|1920",
            "1910|1920",
            "Smith, John|Jones, Ann",
            "Writer|",
            "Paris|",
            "Smith, John",
            "Copyright",
            "Estate of John Smith",
            "disallow",
        ],
    )

    status = import_csv_bytes(data)

    assert status.errors == 0
    events = _all(sqlite_unit_of_work, Event)
    assert len(events) == 2
    actors = {a.authorized_form_of_name: a for a in _all(sqlite_unit_of_work, Actor)}
    assert {"Smith, John", "Jones, Ann"} <= set(actors)
    assert actors["Smith, John"].history == "Writer"
    rights = _all(sqlite_unit_of_work, Rights)
    assert len(rights) == 1
    assert rights[0].restriction is False
    relation_types = sorted(r.type_id for r in _all(sqlite_unit_of_work, Relation))
    assert relation_types == sorted([RelationType.NAME_ACCESS_POINT, RelationType.RIGHT])

    with sqlite_unit_of_work() as uow:
        stored = sorted(uow.session.execute(select(event_table.c.start_date)).scalars())
    assert stored == ["1900-00-00", "1920-00-00"]


def test_unknown_event_type_is_a_row_error(import_csv_bytes: ImportBytes) -> None:
    data = csv_bytes(
        ["legacyId", "title", "eventTypes", "eventDates"], ["1", "Letters", "Birth", "1900"]
    )

    status = import_csv_bytes(data)

    assert status.errors == 1
    assert status.created == 1


# Updating ---------------------------------------------------------------------


def test_match_and_update_is_idempotent(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    data = csv_bytes(
        ["legacyId", "title", "scopeAndContent", "generalNote", "subjectAccessPoints"],
        ["1", "Letters", "Family letters", "Fragile", "Trees"],
        ["2", "Diaries", "Pocket diaries", "", ""],
    )
    import_csv_bytes(data)

    first = import_csv_bytes(data, options=MATCH_AND_UPDATE)
    second = import_csv_bytes(data, options=MATCH_AND_UPDATE)

    for status in (first, second):
        assert status.updated == 2
        assert status.duplicates == 0
        assert status.created == 0
    assert len(_all(sqlite_unit_of_work, Description)) == 2
    assert len(_all(sqlite_unit_of_work, Note)) == 1
    assert len(_all(sqlite_unit_of_work, ObjectTermRelation)) == 1
    assert len(_all(sqlite_unit_of_work, KeymapEntry)) == 2


def test_match_and_update_changes_fields_in_place(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    import_csv_bytes(csv_bytes(["legacyId", "title", "identifier"], ["1", "Letters", "F-1"]))
    original = _description(sqlite_unit_of_work, "Letters")

    import_csv_bytes(
        csv_bytes(["legacyId", "title", "identifier"], ["1", "Correspondence", "F-1a"]),
        options=MATCH_AND_UPDATE,
    )

    updated = _description(sqlite_unit_of_work, "Correspondence")
    assert updated.id == original.id
    assert updated.identifier == "F-1a"
    assert updated.slug == original.slug


def test_events_are_not_duplicated_when_keeping_children(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    data = csv_bytes(
        ["legacyId", "title", "eventStartDates", "eventEndDates", "eventActors"],
        ["1", "Letters", "1900", "1910", "Smith, John"],
    )
    import_csv_bytes(data)
    keep = UpdateOptions.from_flags(update="match-and-update", keep_existing_children=True)

    import_csv_bytes(data, options=keep)
    import_csv_bytes(data, options=MATCH_AND_UPDATE)

    events = _all(sqlite_unit_of_work, Event)
    assert len(events) == 1
    assert events[0].start_date == "1900-00-00"
    assert len(_all(sqlite_unit_of_work, Actor)) == 1


def test_rights_are_not_duplicated_on_reimport(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    data = csv_bytes(
        ["legacyId", "title", "rightsBasis", "rightsHolder", "rightsStartDate"],
        ["1", "Letters", "Copyright", "Estate of John Smith", "1950"],
    )
    import_csv_bytes(data)

    import_csv_bytes(data, options=MATCH_AND_UPDATE)
    import_csv_bytes(data, options=MATCH_AND_UPDATE)

    assert len(_all(sqlite_unit_of_work, Rights)) == 1
    rights_relations = [
        r for r in _all(sqlite_unit_of_work, Relation) if r.type_id == RelationType.RIGHT
    ]
    assert len(rights_relations) == 1


def test_changed_rights_are_added_alongside_existing_ones(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    header = ["legacyId", "title", "rightsBasis", "rightsNote"]
    import_csv_bytes(csv_bytes(header, ["1", "Letters", "Copyright", "Until 2030"]))

    import_csv_bytes(
        csv_bytes(header, ["1", "Letters", "Copyright", "Until 2040"]), options=MATCH_AND_UPDATE
    )

    notes = sorted(r.rights_note or "" for r in _all(sqlite_unit_of_work, Rights))
    assert notes == ["Until 2030", "Until 2040"]


def test_translation_rows_do_not_repeat_events_or_rights(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    data = csv_bytes(
        ["legacyId", "title", "culture", "eventStartDates", "rightsBasis"],
        ["1", "Letters", "en", "1900", "Copyright"],
        ["1", "Lettres", "fr", "1900", "Copyright"],
    )

    status = import_csv_bytes(data)

    assert status.created == 1
    events = _all(sqlite_unit_of_work, Event)
    assert [(e.culture, e.start_date) for e in events] == [("en", "1900-00-00")]
    assert len(_all(sqlite_unit_of_work, Rights)) == 1
    letters = _description(sqlite_unit_of_work, "Letters")
    assert letters.get_field("title", culture="fr") == "Lettres"


def test_delete_and_replace_keeps_slug_and_leaves_no_orphans(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    data = csv_bytes(
        ["legacyId", "title", "generalNote", "subjectAccessPoints", "eventStartDates"],
        ["1", "Letters", "Fragile", "Trees", "1900"],
    )
    import_csv_bytes(data)
    original = _description(sqlite_unit_of_work, "Letters")
    child_data = csv_bytes(["legacyId", "parentId", "title"], ["2", "1", "Item"])
    import_csv_bytes(child_data)

    status = import_csv_bytes(data, options=DELETE_AND_REPLACE)

    assert status.updated == 1
    replacement = _description(sqlite_unit_of_work, "Letters")
    assert replacement.id != original.id
    assert replacement.slug == original.slug
    descriptions = _all(sqlite_unit_of_work, Description)
    live_ids = {d.id for d in descriptions}
    assert original.id not in live_ids
    assert all(note.object_id in live_ids for note in _all(sqlite_unit_of_work, Note))
    assert len(_all(sqlite_unit_of_work, Note)) == 1
    assert all(e.object_id in live_ids for e in _all(sqlite_unit_of_work, Event))
    assert all(
        link.object_id in live_ids for link in _all(sqlite_unit_of_work, ObjectTermRelation)
    )
    child = _description(sqlite_unit_of_work, "Item")
    assert child.parent_id is None


def test_update_in_another_culture_adds_a_translation(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    import_csv_bytes(csv_bytes(["legacyId", "title", "identifier"], ["1", "Letters", "F-1"]))

    status = import_csv_bytes(
        csv_bytes(["legacyId", "title", "identifier", "culture"], ["1", "Lettres", "X", "fr"]),
        options=MATCH_AND_UPDATE,
    )

    assert status.updated == 0
    assert status.created == 0
    letters = _description(sqlite_unit_of_work, "Letters")
    assert letters.get_field("title", culture="fr") == "Lettres"
    assert letters.identifier == "F-1"


def test_skip_unmatched_skips_new_rows(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory, tmp_path: Path
) -> None:
    import_csv_bytes(csv_bytes(["legacyId", "title"], ["1", "Letters"]))
    error_log = tmp_path / "errors.log"
    options = UpdateOptions.from_flags(update="match-and-update", skip_unmatched=True)

    status = import_csv_bytes(
        csv_bytes(["legacyId", "title", "identifier"], ["1", "Letters", ""], ["9", "New", "N-9"]),
        options=options,
        error_log=error_log,
    )

    assert status.updated == 1
    assert status.created == 0
    assert len(_all(sqlite_unit_of_work, Description)) == 1
    assert "Row 2: Unable to match row. Skipping record: New (id: N-9)" in (
        error_log.read_text(encoding="utf-8")
    )


def test_match_by_identifier_title_and_repository(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    header = ["identifier", "title", "repository", "scopeAndContent"]
    import_csv_bytes(csv_bytes(header, ["F-1", "Letters", "City Archives", "old"]))

    status = import_csv_bytes(
        csv_bytes(header, ["F-1", "Letters", "City Archives", "new"]), options=MATCH_AND_UPDATE
    )

    assert status.updated == 1
    descriptions = _all(sqlite_unit_of_work, Description)
    assert len(descriptions) == 1
    assert descriptions[0].get_field("scope_and_content") == "new"


def test_roundtrip_matches_internal_ids(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    import_csv_bytes(csv_bytes(["legacyId", "title"], ["a", "Letters"]))
    letters = _description(sqlite_unit_of_work, "Letters")
    options = UpdateOptions.from_flags(update="match-and-update", roundtrip=True)

    status = import_csv_bytes(
        csv_bytes(["legacyId", "title"], [str(letters.id), "Correspondence"], ["a", "Other"]),
        options=options,
    )

    assert status.updated == 1
    assert status.created == 0
    assert _description(sqlite_unit_of_work, "Correspondence").id == letters.id


def test_stale_keymap_entries_are_removed(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    data = csv_bytes(["legacyId", "title"], ["x1", "Letters"])
    import_csv_bytes(data)
    with sqlite_unit_of_work() as uow:
        doomed = uow.repositories.descriptions.get_by_slug("letters")
        assert doomed is not None
        uow.repositories.descriptions.delete(doomed)
        uow.commit()

    status = import_csv_bytes(data, options=MATCH_AND_UPDATE)

    assert status.created == 1
    replacement = _description(sqlite_unit_of_work, "Letters")
    entries = _all(sqlite_unit_of_work, KeymapEntry)
    assert [(e.source_id, e.target_id) for e in entries] == [("x1", replacement.id)]


def test_limit_discards_matches_outside_the_repository(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    header = ["legacyId", "title", "repository"]
    import_csv_bytes(
        csv_bytes(header, ["a1", "In A", "Archive A"], ["b1", "In B", "Archive B"])
    )
    child_of_a = csv_bytes(["legacyId", "parentId", "title"], ["a2", "a1", "Under A"])
    import_csv_bytes(child_of_a)
    options = UpdateOptions.from_flags(update="match-and-update", skip_unmatched=True)

    status = import_csv_bytes(
        csv_bytes(
            ["legacyId", "title"],
            ["a1", "In A (updated)"],
            ["a2", "Under A (updated)"],
            ["b1", "In B (updated)"],
        ),
        options=options,
        limit="archive-a",
    )

    assert status.updated == 2
    titles = sorted(d.title or "" for d in _all(sqlite_unit_of_work, Description))
    assert titles == ["In A (updated)", "In B", "Under A (updated)"]


def test_unknown_limit_slug_is_fatal(import_csv_bytes: ImportBytes) -> None:
    with pytest.raises(ConfigurationError, match="Could not find object matching slug"):
        import_csv_bytes(
            csv_bytes(["legacyId", "title"], ["1", "Letters"]),
            options=MATCH_AND_UPDATE,
            limit="nowhere",
        )


# Run configuration ------------------------------------------------------------


def test_indexing_is_disabled_for_the_run_and_restored(
    import_csv_bytes: ImportBytes, indexer: LoggingSearchIndexer
) -> None:
    data = csv_bytes(["legacyId", "title"], ["1", "Letters"])

    import_csv_bytes(data)
    assert indexer.indexed == []
    assert indexer.enabled

    import_csv_bytes(data, index=True, source_name="indexed")
    assert len(indexer.indexed) == 1


def test_empty_input_is_malformed(import_csv_bytes: ImportBytes) -> None:
    with pytest.raises(MalformedInputError):
        import_csv_bytes(b"")


def test_cells_beyond_the_header_stop_the_run(
    import_csv_bytes: ImportBytes, sqlite_unit_of_work: UowFactory
) -> None:
    data = csv_bytes(["legacyId", "title"], ["1", "Letters", ""], ["2", "Diaries", "zz"])

    with pytest.raises(MalformedInputError, match="Row 2"):
        import_csv_bytes(data)

    descriptions = _all(sqlite_unit_of_work, Description)
    assert [(d.title, d.source_culture) for d in descriptions] == [("Letters", "en")]


def test_invalid_options_fail_before_reading(import_csv_bytes: ImportBytes) -> None:
    with pytest.raises(ConfigurationError):
        import_csv_bytes(b"", options=UpdateOptions(roundtrip=True))


def test_row_init_hook_is_required_without_entity_kind(sqlite_unit_of_work: UowFactory) -> None:
    importer = FlatfileImporter(
        ImportSettings(), ColumnRegistry(), unit_of_work_factory=sqlite_unit_of_work
    )

    with pytest.raises(ConfigurationError, match="row_init"):
        importer.import_stream(io.BytesIO(csv_bytes(["title"], ["Letters"])))


def test_hook_driven_rows(sqlite_unit_of_work: UowFactory) -> None:
    seen: list[str] = []

    def row_init(run: ImportRun, row: Row) -> Description | None:
        _ = run
        if row.value("kind") != "description":
            return None
        return Description(source_culture=row.culture)

    def post_save(run: ImportRun, row: Row) -> None:
        _ = row
        seen.append(run.require_entity().get_field("title") or "")

    completed: list[int] = []
    hooks = ImportHooks(
        row_init=row_init,
        post_save=post_save,
        on_complete=lambda run: completed.append(run.status.rows),
    )
    importer = FlatfileImporter(
        ImportSettings(progress_interval=0),
        ColumnRegistry().standard("title"),
        hooks=hooks,
        unit_of_work_factory=sqlite_unit_of_work,
    )

    importer.import_stream(
        io.BytesIO(csv_bytes(["kind", "title"], ["description", "Letters"], ["other", "Nope"]))
    )

    assert seen == ["Letters"]
    assert completed == [2]
    assert [d.title for d in _all(sqlite_unit_of_work, Description)] == ["Letters"]
