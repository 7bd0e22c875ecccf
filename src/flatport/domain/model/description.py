"""Archival descriptions (information objects) and their per-culture values.

A description sits in a hierarchy through ``parent_id`` and may be held by a
repository (``repository_id``). Both are plain ids: navigation goes through the
description repository port so the domain stays free of lazy loading.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from flatport.domain.model.entity import CulturedEntity
from flatport.domain.model.enums import EntityType

if TYPE_CHECKING:
    from uuid import UUID

    from flatport.domain.model.primitives import Culture


@dataclass(eq=False, kw_only=True)
class DescriptionI18n:
    culture: Culture
    title: str | None = None
    alternate_title: str | None = None
    extent_and_medium: str | None = None
    archival_history: str | None = None
    acquisition: str | None = None
    scope_and_content: str | None = None
    arrangement: str | None = None
    access_conditions: str | None = None
    reproduction_conditions: str | None = None
    physical_characteristics: str | None = None
    finding_aids: str | None = None
    location_of_originals: str | None = None
    related_units_of_description: str | None = None
    rules: str | None = None
    sources: str | None = None
    revision_history: str | None = None


@dataclass(eq=False, kw_only=True)
class Description(CulturedEntity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.DESCRIPTION
    I18N_CLASS: ClassVar[type[DescriptionI18n]] = DescriptionI18n

    FIELDS: ClassVar[frozenset[str]] = frozenset({"identifier", "slug"})
    I18N_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {
            "title",
            "alternate_title",
            "extent_and_medium",
            "archival_history",
            "acquisition",
            "scope_and_content",
            "arrangement",
            "access_conditions",
            "reproduction_conditions",
            "physical_characteristics",
            "finding_aids",
            "location_of_originals",
            "related_units_of_description",
            "rules",
            "sources",
            "revision_history",
        }
    )

    identifier: str | None = None
    slug: str | None = None
    parent_id: UUID | None = None
    repository_id: UUID | None = None
    level_of_description_id: UUID | None = None

    @property
    def title(self) -> str | None:
        return self.get_field("title")

    def display_name(self) -> str:
        return self.title or self.identifier or str(self.id)
