"""
Base building blocks:
identity, typed field exposure and per-culture (i18n) records.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, runtime_checkable
from uuid import UUID, uuid4

from flatport.domain.model.primitives import DEFAULT_CULTURE

if TYPE_CHECKING:
    from flatport.domain.model.enums import EntityType
    from flatport.domain.model.primitives import Culture


def new_id() -> UUID:
    return uuid4()


@runtime_checkable
class EntityRef(Protocol):
    """Reference to a typed entity using its stable identity."""

    @property
    def entity_type(self) -> EntityType: ...

    @property
    def id(self) -> UUID: ...


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain."""

    id: UUID = field(default_factory=new_id)

    # class-level discriminator; subclasses must override
    ENTITY_TYPE: ClassVar[EntityType]

    @property
    def entity_type(self) -> EntityType:
        return self.ENTITY_TYPE


@dataclass(eq=False, kw_only=True)
class CulturedEntity(Entity, ABC):
    """Entity with plain fields plus per-culture i18n records.

    ``FIELDS`` and ``I18N_FIELDS`` are the only attributes flat-file column
    rules may write; anything else is rejected when a run is configured.
    """

    FIELDS: ClassVar[frozenset[str]] = frozenset()
    I18N_FIELDS: ClassVar[frozenset[str]] = frozenset()
    I18N_CLASS: ClassVar[type[Any]]

    source_culture: Culture = DEFAULT_CULTURE

    _i18n: dict[Culture, Any] = field(default_factory=dict["Culture", Any], repr=False)

    @classmethod
    def settable_fields(cls) -> frozenset[str]:
        return cls.FIELDS | cls.I18N_FIELDS

    @classmethod
    def is_i18n_field(cls, name: str) -> bool:
        return name in cls.I18N_FIELDS

    @property
    def cultures(self) -> tuple[Culture, ...]:
        return tuple(self._i18n)

    def translation(self, culture: Culture | None = None) -> Any:
        """Return the i18n record for ``culture``, creating it when absent."""

        key = culture or self.source_culture
        record = self._i18n.get(key)
        if record is None:
            record = self.I18N_CLASS(culture=key)
            self._i18n[key] = record
        return record

    def has_translation(self, culture: Culture) -> bool:
        return culture in self._i18n

    def set_field(self, name: str, value: str | None, *, culture: Culture | None = None) -> None:
        if name in self.I18N_FIELDS:
            setattr(self.translation(culture), name, value)
            return
        if name in self.FIELDS:
            setattr(self, name, value)
            return
        raise AttributeError(f"{type(self).__name__} does not expose field {name!r}")

    def get_field(self, name: str, *, culture: Culture | None = None) -> str | None:
        if name in self.I18N_FIELDS:
            record = self._i18n.get(culture or self.source_culture)
            return None if record is None else getattr(record, name)
        if name in self.FIELDS:
            return getattr(self, name)
        raise AttributeError(f"{type(self).__name__} does not expose field {name!r}")
