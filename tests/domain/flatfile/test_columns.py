from __future__ import annotations

from typing import TYPE_CHECKING, cast

import pytest

from flatport.config import ConfigurationError
from flatport.domain.flatfile import (
    ArrayColumn,
    AttributeColumn,
    ColumnRegistry,
    CustomColumn,
    ImportHooks,
    ImportRun,
    ImportSettings,
    PropertyColumn,
    Row,
    StandardColumn,
    VariableColumn,
)
from flatport.domain.flatfile.columns import snake_case
from flatport.domain.model import Description

if TYPE_CHECKING:
    from flatport.domain.ports import ImportRepositories


def _run(
    registry: ColumnRegistry, row: Row, *, settings: ImportSettings | None = None
) -> ImportRun:
    run = ImportRun(
        settings=settings or ImportSettings(),
        columns=row.columns,
        registry=registry,
        hooks=ImportHooks(),
        repositories=cast("ImportRepositories", None),
    )
    run.begin_row(row)
    run.entity = Description(source_culture="en")
    return run


@pytest.mark.parametrize(
    ("column", "expected"),
    [
        ("scopeAndContent", "scope_and_content"),
        ("title", "title"),
        ("Extent and medium", "extent_and_medium"),
        ("relatedUnitsOfDescription", "related_units_of_description"),
    ],
)
def test_snake_case(column: str, expected: str) -> None:
    assert snake_case(column) == expected


def test_bind_rejects_unknown_attributes() -> None:
    registry = ColumnRegistry().standard("title", "favouriteColour")

    with pytest.raises(ConfigurationError, match="favourite_colour"):
        registry.bind(Description)


def test_bind_accepts_known_attributes() -> None:
    registry = ColumnRegistry([AttributeColumn("name", "title")]).standard("identifier")

    registry.bind(Description)
    registry.bind(None)


def test_pre_creation_rules_fill_row_vars() -> None:
    registry = ColumnRegistry([VariableColumn("repository"), ArrayColumn("eventDates")])
    row = Row.from_cells(("repository", "eventDates"), ["Archives", "1900| NULL |1910"])
    run = _run(registry, row)

    registry.apply_pre_creation(run, row)

    assert row.vars == {"repository": "Archives", "eventDates": ["1900", "1910"]}


def test_array_column_with_custom_delimiter_skips_empty_cells() -> None:
    registry = ColumnRegistry([ArrayColumn("places", delimiter=";"), ArrayColumn("empty")])
    row = Row.from_cells(("places", "empty"), ["Paris; Lyon", ""])

    registry.apply_pre_creation(_run(registry, row), row)

    assert row.vars == {"places": ["Paris", "Lyon"]}


def test_attribute_rule_takes_precedence_over_standard_rule() -> None:
    registry = ColumnRegistry(
        [StandardColumn("title"), AttributeColumn("title", "alternate_title")]
    )
    row = Row.from_cells(("title",), ["Letters"])
    run = _run(registry, row)

    registry.apply_pre_save(run, row)

    entity = run.require_entity()
    assert entity.get_field("alternate_title") == "Letters"
    assert entity.get_field("title") is None


def test_attribute_rule_clears_field_on_empty_value() -> None:
    registry = ColumnRegistry([AttributeColumn("alternateTitle", "alternate_title")])
    row = Row.from_cells(("alternateTitle",), [""])
    run = _run(registry, row)
    run.require_entity().set_field("alternate_title", "old", culture="en")

    registry.apply_pre_save(run, row)

    assert run.require_entity().get_field("alternate_title") is None


def test_standard_rule_ignores_empty_values() -> None:
    registry = ColumnRegistry().standard("title")
    row = Row.from_cells(("title",), ["  "])
    run = _run(registry, row)
    run.require_entity().set_field("title", "Kept", culture="en")

    registry.apply_pre_save(run, row)

    assert run.require_entity().get_field("title") == "Kept"


def test_attribute_transform_and_content_filter() -> None:
    registry = ColumnRegistry(
        [AttributeColumn("title", "title", transform=lambda _run, value: f"[{value}]")]
    )
    row = Row.from_cells(("title",), ["letters"])
    settings = ImportSettings(content_filter=lambda text: text.upper())
    run = _run(registry, row, settings=settings)

    registry.apply_pre_save(run, row)

    assert run.require_entity().get_field("title") == "[LETTERS]"


def test_property_rule_defers_non_empty_values() -> None:
    registry = ColumnRegistry([PropertyColumn("altIds", "alternativeIdentifiers")])
    row = Row.from_cells(("altIds",), ["A-1"])
    run = _run(registry, row)

    registry.apply_pre_save(run, row)

    assert run.pending_properties == [("alternativeIdentifiers", "A-1")]


def test_property_rule_is_skipped_on_translation_rows() -> None:
    registry = ColumnRegistry([PropertyColumn("altIds", "alternativeIdentifiers")])
    row = Row.from_cells(("altIds", "culture"), ["A-1", "fr"])
    run = _run(registry, row)
    run.is_translation = True

    registry.apply_pre_save(run, row)

    assert run.pending_properties == []


def test_custom_rule_receives_unfiltered_value() -> None:
    received: list[str] = []

    def handler(_run: ImportRun, _row: Row, value: str) -> None:
        received.append(value)

    registry = ColumnRegistry([CustomColumn("code", handler)])
    row = Row.from_cells(("code",), ["  abc  "])
    settings = ImportSettings(content_filter=lambda text: text.upper())

    registry.apply_pre_save(_run(registry, row, settings=settings), row)

    assert received == ["abc"]


def test_translation_rows_only_write_per_culture_fields() -> None:
    registry = ColumnRegistry().standard("identifier", "title")
    row = Row.from_cells(("identifier", "title", "culture"), ["F-1", "Lettres", "fr"])
    run = _run(registry, row)
    run.is_translation = True

    registry.apply_pre_save(run, row)

    entity = run.require_entity()
    assert entity.get_field("identifier") is None
    assert entity.get_field("title", culture="fr") == "Lettres"
    assert entity.get_field("title", culture="en") is None


def test_rules_for_absent_columns_are_inert() -> None:
    registry = ColumnRegistry().standard("title", "scopeAndContent")
    row = Row.from_cells(("title",), ["Letters"])
    run = _run(registry, row)

    registry.apply_pre_save(run, row)

    assert run.require_entity().get_field("title") == "Letters"
    assert registry.columns() == frozenset({"title", "scopeAndContent"})
