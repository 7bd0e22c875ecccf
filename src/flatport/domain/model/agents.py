"""Agents: actors and the actor-like records that share their storage.

Repositories, rights holders and donors are actors with a different kind;
they are matched on their authorized form of name within that kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from flatport.domain.model.entity import CulturedEntity, Entity
from flatport.domain.model.enums import EntityType

if TYPE_CHECKING:
    from uuid import UUID

    from flatport.domain.model.primitives import Culture

_ACTOR_I18N_FIELDS = frozenset(
    {
        "authorized_form_of_name",
        "dates_of_existence",
        "history",
        "places",
        "legal_status",
        "functions",
        "mandates",
        "internal_structures",
        "general_context",
    }
)

_REPOSITORY_I18N_FIELDS = frozenset(
    {
        "authorized_form_of_name",
        "history",
        "geocultural_context",
        "collecting_policies",
        "buildings",
        "holdings",
        "finding_aids",
        "opening_times",
        "access_conditions",
        "research_services",
    }
)


@dataclass(eq=False, kw_only=True)
class ActorI18n:
    culture: Culture
    authorized_form_of_name: str | None = None
    dates_of_existence: str | None = None
    history: str | None = None
    places: str | None = None
    legal_status: str | None = None
    functions: str | None = None
    mandates: str | None = None
    internal_structures: str | None = None
    general_context: str | None = None
    geocultural_context: str | None = None
    collecting_policies: str | None = None
    buildings: str | None = None
    holdings: str | None = None
    finding_aids: str | None = None
    opening_times: str | None = None
    access_conditions: str | None = None
    research_services: str | None = None


@dataclass(eq=False, kw_only=True)
class Actor(CulturedEntity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.ACTOR
    I18N_CLASS: ClassVar[type[ActorI18n]] = ActorI18n

    FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"slug", "description_identifier", "corporate_body_identifiers"}
    )
    I18N_FIELDS: ClassVar[frozenset[str]] = _ACTOR_I18N_FIELDS

    slug: str | None = None
    description_identifier: str | None = None
    corporate_body_identifiers: str | None = None
    entity_type_id: UUID | None = None

    @property
    def authorized_form_of_name(self) -> str | None:
        return self.get_field("authorized_form_of_name")

    @property
    def history(self) -> str | None:
        return self.get_field("history")


@dataclass(eq=False, kw_only=True)
class Repository(Actor):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.REPOSITORY

    FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"slug", "identifier", "description_identifier", "upload_limit"}
    )
    I18N_FIELDS: ClassVar[frozenset[str]] = _REPOSITORY_I18N_FIELDS

    identifier: str | None = None
    upload_limit: str | None = None


@dataclass(eq=False, kw_only=True)
class RightsHolder(Actor):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.RIGHTS_HOLDER


@dataclass(eq=False, kw_only=True)
class Donor(Actor):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.DONOR


@dataclass(eq=False, kw_only=True)
class ContactInformation(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.CONTACT_INFORMATION

    FIELDS: ClassVar[frozenset[str]] = frozenset(
        {
            "email",
            "telephone",
            "street_address",
            "city",
            "region",
            "postal_code",
            "country_code",
            "fax",
            "note",
            "contact_person",
        }
    )

    actor_id: UUID
    email: str | None = None
    telephone: str | None = None
    street_address: str | None = None
    city: str | None = None
    region: str | None = None
    postal_code: str | None = None
    country_code: str | None = None
    fax: str | None = None
    note: str | None = None
    contact_person: str | None = None
