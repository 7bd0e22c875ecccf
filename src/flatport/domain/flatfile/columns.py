"""Column rules and the registry that applies them per processing phase.

Rules are evaluated in header order. Within the pre-save phase only the first
rule that accepts a column's value applies (attribute, property, custom,
standard); post-save rules all apply. Rules naming a column the header does
not have are inert.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, ClassVar, Final

from flatport.config.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from flatport.domain.flatfile.hooks import ColumnHandler, ValueTransform
    from flatport.domain.flatfile.row import Row
    from flatport.domain.flatfile.run import ImportRun
    from flatport.domain.model import CulturedEntity, Taxonomy, TypeId

VALUE_DELIMITER: Final[str] = "|"
NULL_TOKEN: Final[str] = "NULL"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def snake_case(name: str) -> str:
    """``scopeAndContent`` -> ``scope_and_content``."""

    return _CAMEL_BOUNDARY.sub("_", name.strip()).replace(" ", "_").lower()


def split_values(value: str, delimiter: str = VALUE_DELIMITER) -> list[str]:
    return value.split(delimiter)


class Phase(IntEnum):
    PRE_CREATION = 1
    PRE_SAVE = 2
    POST_SAVE = 3


# Pre-creation --------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class VariableColumn:
    """Capture the value into ``row.vars`` under the column name."""

    PHASE: ClassVar[Phase] = Phase.PRE_CREATION
    column: str

    def apply(self, run: ImportRun, row: Row, value: str) -> None:
        _ = run
        row.vars[self.column] = value


@dataclass(frozen=True, slots=True)
class ArrayColumn:
    """Split into ``row.vars``; ``NULL`` tokens are dropped."""

    PHASE: ClassVar[Phase] = Phase.PRE_CREATION
    column: str
    delimiter: str = VALUE_DELIMITER

    def apply(self, run: ImportRun, row: Row, value: str) -> None:
        _ = run
        if not value:
            return
        row.vars[self.column] = [
            item.strip() for item in value.split(self.delimiter) if item.strip() != NULL_TOKEN
        ]


# Pre-save ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AttributeColumn:
    """Write the column to an entity field, optionally transformed first.

    Applies to empty values as well, clearing the field.
    """

    PHASE: ClassVar[Phase] = Phase.PRE_SAVE
    PRECEDENCE: ClassVar[int] = 0
    column: str
    attribute: str
    transform: ValueTransform | None = None

    def accepts(self, value: str) -> bool:
        _ = value
        return True

    def apply(self, run: ImportRun, row: Row, value: str) -> None:
        _ = row
        if self.transform is not None:
            value = self.transform(run, value)
        run.set_attribute(self.attribute, run.content(value) or None)


@dataclass(frozen=True, slots=True)
class PropertyColumn:
    """Store the value as a named property, saved right after the entity.

    Translation rows do not touch properties.
    """

    PHASE: ClassVar[Phase] = Phase.PRE_SAVE
    PRECEDENCE: ClassVar[int] = 1
    column: str
    name: str

    def accepts(self, value: str) -> bool:
        return bool(value)

    def apply(self, run: ImportRun, row: Row, value: str) -> None:
        _ = row
        if run.is_translation:
            return
        run.pending_properties.append((self.name, run.content(value)))


@dataclass(frozen=True, slots=True)
class CustomColumn:
    """Hand the raw trimmed value to a handler; no content filtering."""

    PHASE: ClassVar[Phase] = Phase.PRE_SAVE
    PRECEDENCE: ClassVar[int] = 2
    column: str
    handler: ColumnHandler

    def accepts(self, value: str) -> bool:
        _ = value
        return True

    def apply(self, run: ImportRun, row: Row, value: str) -> None:
        self.handler(run, row, value)


@dataclass(frozen=True, slots=True)
class StandardColumn:
    """Write non-empty values to the field named after the column."""

    PHASE: ClassVar[Phase] = Phase.PRE_SAVE
    PRECEDENCE: ClassVar[int] = 3
    column: str

    @property
    def attribute(self) -> str:
        return snake_case(self.column)

    def accepts(self, value: str) -> bool:
        return bool(value)

    def apply(self, run: ImportRun, row: Row, value: str) -> None:
        _ = row
        run.set_attribute(self.attribute, run.content(value))


# Post-save -----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TermRelationColumn:
    PHASE: ClassVar[Phase] = Phase.POST_SAVE
    column: str
    taxonomy: Taxonomy

    def apply(self, run: ImportRun, row: Row, value: str) -> None:
        _ = row
        if value:
            run.children.relate_terms(self.taxonomy, split_values(value))


@dataclass(frozen=True, slots=True)
class NoteColumn:
    PHASE: ClassVar[Phase] = Phase.POST_SAVE
    column: str
    type_id: TypeId
    transform: ValueTransform | None = None

    def apply(self, run: ImportRun, row: Row, value: str) -> None:
        _ = row
        if value:
            run.children.create_or_update_notes(
                self.type_id, split_values(value), transform=self.transform
            )


@dataclass(frozen=True, slots=True)
class LanguageColumn:
    PHASE: ClassVar[Phase] = Phase.POST_SAVE
    column: str
    property_name: str

    def apply(self, run: ImportRun, row: Row, value: str) -> None:
        _ = row
        if value:
            run.children.store_languages(self.property_name, split_values(value))


@dataclass(frozen=True, slots=True)
class ScriptColumn:
    PHASE: ClassVar[Phase] = Phase.POST_SAVE
    column: str
    property_name: str

    def apply(self, run: ImportRun, row: Row, value: str) -> None:
        _ = row
        if value:
            run.children.store_scripts(self.property_name, split_values(value))


type PreCreationRule = VariableColumn | ArrayColumn
type PreSaveRule = AttributeColumn | PropertyColumn | CustomColumn | StandardColumn
type PostSaveRule = TermRelationColumn | NoteColumn | LanguageColumn | ScriptColumn
type ColumnRule = PreCreationRule | PreSaveRule | PostSaveRule


class ColumnRegistry:
    """Ordered column rules for one run."""

    def __init__(self, rules: Iterable[ColumnRule] = ()) -> None:
        self._rules: list[ColumnRule] = []
        self._by_column: dict[tuple[str, Phase], list[ColumnRule]] | None = None
        self.add(*rules)

    def add(self, *rules: ColumnRule) -> ColumnRegistry:
        self._rules.extend(rules)
        self._by_column = None
        return self

    def standard(self, *columns: str) -> ColumnRegistry:
        return self.add(*(StandardColumn(column) for column in columns))

    def extend(self, other: ColumnRegistry) -> ColumnRegistry:
        return self.add(*other.rules)

    @property
    def rules(self) -> tuple[ColumnRule, ...]:
        return tuple(self._rules)

    def columns(self) -> frozenset[str]:
        return frozenset(rule.column for rule in self._rules)

    def bind(self, entity_kind: type[CulturedEntity] | None) -> None:
        """Check attribute targets against the fields ``entity_kind`` exposes."""

        if entity_kind is None:
            return
        allowed = entity_kind.settable_fields()
        for rule in self._rules:
            if not isinstance(rule, AttributeColumn | StandardColumn):
                continue
            if rule.attribute not in allowed:
                raise ConfigurationError(
                    f'Column "{rule.column}" targets unknown attribute '
                    f'"{rule.attribute}" of {entity_kind.__name__}'
                )

    def rules_for(self, column: str, phase: Phase) -> list[ColumnRule]:
        if self._by_column is None:
            index: dict[tuple[str, Phase], list[ColumnRule]] = {}
            for rule in self._rules:
                index.setdefault((rule.column, rule.PHASE), []).append(rule)
            self._by_column = index
        return self._by_column.get((column, phase), [])

    def apply_pre_creation(self, run: ImportRun, row: Row) -> None:
        for column, value in row.items():
            for rule in self.rules_for(column, Phase.PRE_CREATION):
                rule.apply(run, row, value)

    def apply_pre_save(self, run: ImportRun, row: Row) -> None:
        for column, value in row.items():
            for rule in self._pre_save_rules(column):
                if rule.accepts(value):
                    rule.apply(run, row, value)
                    break

    def apply_post_save(self, run: ImportRun, row: Row) -> None:
        for column, value in row.items():
            for rule in self.rules_for(column, Phase.POST_SAVE):
                rule.apply(run, row, value)

    def _pre_save_rules(self, column: str) -> list[PreSaveRule]:
        rules = [
            rule
            for rule in self.rules_for(column, Phase.PRE_SAVE)
            if isinstance(rule, AttributeColumn | PropertyColumn | CustomColumn | StandardColumn)
        ]
        return sorted(rules, key=lambda rule: rule.PRECEDENCE)
