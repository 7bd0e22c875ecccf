"""Child-record reconciliation for a row's entity.

Everything here runs after the primary save, so ``run.entity`` already has
its id. Existence checks suppress duplicates on re-import; they assume a
single writer per dataset.
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Final

from flatport.domain.flatfile.errors import ValidationError
from flatport.domain.flatfile.vocabulary import LANGUAGE_CODES, SCRIPT_CODES, canonical_lookup
from flatport.domain.model import (
    DEFAULT_CULTURE,
    Actor,
    ContactInformation,
    Description,
    Donor,
    Event,
    KeymapEntry,
    Note,
    PhysicalObject,
    Property,
    Relation,
    RelationType,
    Repository,
    Rights,
    RightsHolder,
    Taxonomy,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from flatport.domain.flatfile.hooks import ValueTransform
    from flatport.domain.flatfile.run import ImportRun
    from flatport.domain.model import Culture, CulturedEntity, ObjectTermRelation, Term, TypeId
    from flatport.domain.ports import ImportRepositories

log = logging.getLogger(__name__)

YEAR_PADDING: Final[str] = "-00-00"
_YEAR_ONLY = re.compile(r"^\d{4}$")

EVENT_COMPARED_FIELDS: Final[tuple[str, ...]] = (
    "start_date",
    "start_time",
    "end_date",
    "end_time",
    "type_id",
    "object_id",
    "actor_id",
    "name",
    "description",
    "date",
    "culture",
)

RIGHTS_COMPARED_FIELDS: Final[tuple[str, ...]] = (
    "rights_holder_id",
    "basis_id",
    "act_id",
    "copyright_status_id",
    "restriction",
    "start_date",
    "end_date",
    "rights_note",
    "culture",
)

_LANGUAGES = canonical_lookup(LANGUAGE_CODES)
_SCRIPTS = canonical_lookup(SCRIPT_CODES)


def dates_equal(stored: str | None, imported: str | None) -> bool:
    """Compare a stored date with an imported one.

    Year-only values are stored zero padded, so ``"2001"`` equals a stored
    ``"2001-00-00"``.
    """

    stored_value = (stored or "").strip()
    imported_value = (imported or "").strip()
    if stored_value.endswith(YEAR_PADDING) and _YEAR_ONLY.match(imported_value):
        imported_value += YEAR_PADDING
    return stored_value == imported_value


def _fields_match(existing: object, candidate: object, names: Sequence[str]) -> bool:
    for name in names:
        stored = getattr(existing, name)
        imported = getattr(candidate, name)
        if "date" in name:
            if not dates_equal(stored, imported):
                return False
        elif stored != imported:
            return False
    return True


def events_match(existing: Event, candidate: Event) -> bool:
    return _fields_match(existing, candidate, EVENT_COMPARED_FIELDS)


def rights_match(existing: Rights, candidate: Rights) -> bool:
    return _fields_match(existing, candidate, RIGHTS_COMPARED_FIELDS)


class ChildReconciler:
    """Create or fetch the records hanging off ``run.entity``."""

    def __init__(self, run: ImportRun) -> None:
        self.run = run

    @property
    def _repos(self) -> ImportRepositories:
        return self.run.repositories

    # Notes ---------------------------------------------------------------

    def create_or_update_notes(
        self,
        type_id: TypeId,
        texts: Sequence[str],
        *,
        transform: ValueTransform | None = None,
    ) -> list[Note]:
        """Add note bodies, skipping any already stored for this owner, type and culture.

        On a row whose culture differs from the entity's source culture the
        existing notes of the type are reused by position, so each culture's
        body lands on the same logical note.
        """

        entity = self.run.require_entity()
        culture = self.run.culture
        notes = self._repos.notes

        note_ids: list[UUID] = []
        if culture != entity.source_culture:
            note_ids = notes.ids_for(entity.id, type_id)

        # fetched once per call; grows as bodies are added so repeats within
        # the cell are caught too
        existing = notes.contents_for(entity.id, type_id, culture)

        created: list[Note] = []
        for position, text in enumerate(texts):
            if self._note_exists(existing, self.run.content(text)):
                continue
            note_id = note_ids[position] if position < len(note_ids) else None
            created.append(
                self.create_or_update_note(type_id, text, note_id=note_id, transform=transform)
            )
        return created

    def create_or_update_note(
        self,
        type_id: TypeId,
        text: str,
        *,
        note_id: UUID | None = None,
        transform: ValueTransform | None = None,
    ) -> Note:
        entity = self.run.require_entity()
        culture = self.run.culture
        notes = self._repos.notes

        note = notes.get(note_id) if note_id is not None else None
        if note is None:
            note = Note(object_id=entity.id, type_id=type_id, source_culture=culture)

        text = text.strip()
        if transform is not None:
            text = transform(self.run, text)
        note.set_field("content", self.run.content(text), culture=culture)
        notes.save(note, index=False)
        return note

    @staticmethod
    def _note_exists(existing: list[str], content: str) -> bool:
        if content in existing:
            return True
        existing.append(content)
        return False

    # Events --------------------------------------------------------------

    def create_or_update_event(
        self,
        type_id: TypeId,
        *,
        start_date: str | None = None,
        end_date: str | None = None,
        start_time: str | None = None,
        end_time: str | None = None,
        date: str | None = None,
        name: str | None = None,
        description: str | None = None,
        actor_name: str | None = None,
        actor_history: str | None = None,
        place: str | None = None,
        culture: Culture | None = None,
    ) -> Event | None:
        """Create an event for the row's entity, optionally linking an actor and a place.

        Returns ``None`` when an identical event already exists (match-and-update
        only).
        """

        entity = self.run.require_entity()
        event = Event(
            object_id=entity.id,
            type_id=type_id,
            start_date=start_date,
            end_date=end_date,
            start_time=start_time,
            end_time=end_time,
            date=date,
            name=name,
            description=description,
            culture=culture or self.run.culture,
        )

        # history without a name goes to an untitled actor
        if actor_history and actor_name is None:
            actor_name = ""

        if actor_name is not None:
            if isinstance(entity, Description):
                actor = self.fetch_or_create_actor_for_description(
                    actor_name, history=actor_history
                )
            else:
                actor = self.fetch_or_create_actor(actor_name, history=actor_history)
            event.actor_id = actor.id

        if self.run.options.match_and_update and self.has_duplicate_event(event):
            log.debug("Skipping duplicate %s event for %s", type_id, entity.id)
            return None

        self._repos.events.save(event, index=False)

        if place:
            term = self.fetch_or_create_term(
                Taxonomy.PLACE, place, culture=culture or DEFAULT_CULTURE
            )
            self.relate_term(event.id, term.id)
        return event

    def has_duplicate_event(self, event: Event) -> bool:
        entity = self.run.require_entity()
        return any(
            events_match(existing, event)
            for existing in self._repos.events.for_object(entity.id)
        )

    # Agents --------------------------------------------------------------

    def fetch_or_create_actor(
        self, name: str, *, history: str | None = None, entity_type_id: UUID | None = None
    ) -> Actor:
        """Return the actor named ``name``; untitled actors are never matched."""

        actor = self._repos.agents.find_by_name(name, kind=Actor) if name else None
        if actor is None:
            actor = self._create_actor(name, history=history, entity_type_id=entity_type_id)
        return actor

    def fetch_or_create_actor_for_description(
        self, name: str, *, history: str | None = None
    ) -> Actor:
        """Resolve an event actor for a description, taking its repository into account.

        A name match with a different history only counts when the actor is
        maintained by the description's repository; under match-and-update its
        history is then replaced.
        """

        agents = self._repos.agents
        actor = agents.find_by_name(name, kind=Actor) if name else None
        if actor is None:
            return self._create_actor(name, history=history)
        if not history:
            return actor

        same_history = agents.find_by_name(name, kind=Actor, history=history)
        if same_history is not None:
            return same_history

        entity = self.run.require_entity()
        repository_id = entity.repository_id if isinstance(entity, Description) else None
        maintained = (
            agents.find_by_name(name, kind=Actor, repository_id=repository_id)
            if repository_id is not None
            else None
        )
        if maintained is None:
            return self._create_actor(name, history=history)

        if self.run.options.match_and_update:
            maintained.set_field("history", history, culture=self.run.culture)
            agents.save(maintained)
            return maintained
        return self._create_actor(name, history=history)

    def _create_actor(
        self, name: str, *, history: str | None = None, entity_type_id: UUID | None = None
    ) -> Actor:
        culture = self.run.culture
        actor = Actor(source_culture=culture, entity_type_id=entity_type_id)
        actor.set_field("authorized_form_of_name", name, culture=culture)
        if history is not None:
            actor.set_field("history", history, culture=culture)
        self._repos.agents.save(actor)
        return actor

    def fetch_or_create_repository(
        self, name: str, *, fetch_only: bool = False
    ) -> Repository | None:
        repository = self._repos.agents.find_by_name(name, kind=Repository) if name else None
        if repository is not None or fetch_only:
            return repository
        return self._create_named(Repository, name)

    def fetch_or_create_rights_holder(self, name: str) -> RightsHolder:
        holder = self._repos.agents.find_by_name(name, kind=RightsHolder)
        return holder or self._create_named(RightsHolder, name)

    def fetch_or_create_donor(self, name: str) -> Donor:
        donor = self._repos.agents.find_by_name(name, kind=Donor)
        return donor or self._create_named(Donor, name)

    def _create_named[TActor: Actor](self, kind: type[TActor], name: str) -> TActor:
        culture = self.run.culture
        agent = kind(source_culture=culture)
        agent.set_field("authorized_form_of_name", name, culture=culture)
        self._repos.agents.save(agent)
        return agent

    def fetch_or_create_contact_information(
        self, actor_id: UUID, **fields: str | None
    ) -> ContactInformation:
        agents = self._repos.agents
        info = agents.contact_information(actor_id)
        if info is not None:
            return info
        unknown = set(fields) - ContactInformation.FIELDS
        if unknown:
            raise ValidationError(
                f"Contact information has no field(s): {', '.join(sorted(unknown))}"
            )
        info = ContactInformation(actor_id=actor_id, **fields)
        agents.add_contact_information(info)
        return info

    # Physical objects ----------------------------------------------------

    def fetch_or_create_physical_object(
        self, name: str, location: str | None, type_id: UUID | None
    ) -> PhysicalObject:
        store = self._repos.physical_objects
        location = location or None
        found = store.find(name, location, type_id)
        if found is not None:
            return found
        physical_object = PhysicalObject(
            name=name, location=location, type_id=type_id, culture=self.run.culture
        )
        store.save(physical_object)
        return physical_object

    # Terms ---------------------------------------------------------------

    def fetch_or_create_terms(
        self, taxonomy: Taxonomy, names: Iterable[str], *, culture: Culture | None = None
    ) -> list[Term]:
        """Return one term per name, creating missing ones once per run.

        The taxonomy is loaded a single time per call; terms created earlier
        in the run are served from ``run.terms``.
        """

        culture = culture or self.run.culture
        terms = self._repos.terms
        known = {term.name: term for term in terms.load(taxonomy, culture)}

        resolved: list[Term] = []
        for name in names:
            term = known.get(name) or self.run.terms.get((taxonomy, culture, name))
            if term is None:
                term = terms.create(taxonomy, name, culture)
                self.run.terms[(taxonomy, culture, name)] = term
                known[name] = term
            resolved.append(term)
        return resolved

    def fetch_or_create_term(
        self, taxonomy: Taxonomy, name: str, *, culture: Culture | None = None
    ) -> Term:
        return self.fetch_or_create_terms(taxonomy, [name], culture=culture)[0]

    def relate_terms(
        self, taxonomy: Taxonomy, names: Iterable[str], *, culture: Culture | None = None
    ) -> list[Term]:
        entity = self.run.require_entity()
        cleaned = [name.strip() for name in names if name.strip()]
        terms = self.fetch_or_create_terms(taxonomy, cleaned, culture=culture)
        for term in terms:
            self.relate_term(entity.id, term.id)
        return terms

    def relate_term(self, object_id: UUID, term_id: UUID) -> ObjectTermRelation | None:
        terms = self._repos.terms
        if terms.relation_exists(object_id, term_id):
            return None
        return terms.relate(object_id, term_id)

    # Relations and rights ------------------------------------------------

    def create_relation(
        self, subject_id: UUID, object_id: UUID, type_id: TypeId
    ) -> Relation | None:
        """Relate the pair unless any relation between them already exists.

        The existing relation's type is not compared.
        """

        relations = self._repos.relations
        if relations.exists(subject_id, object_id):
            return None
        relation = Relation(subject_id=subject_id, object_id=object_id, type_id=type_id)
        relations.save(relation, index=False)
        return relation

    def create_rights(
        self,
        *,
        rights_holder: str | None = None,
        basis: str | None = None,
        act: str | None = None,
        copyright_status: str | None = None,
        restriction: bool | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        rights_note: str | None = None,
    ) -> Relation | None:
        """Store a rights statement and relate it to the row's entity.

        Returns ``None`` when the entity already carries an identical statement.
        """

        entity = self.run.require_entity()
        rights = Rights(
            rights_holder_id=(
                self.fetch_or_create_rights_holder(rights_holder).id if rights_holder else None
            ),
            basis_id=self._term_id(Taxonomy.RIGHT_BASIS, basis),
            act_id=self._term_id(Taxonomy.RIGHT_ACT, act),
            copyright_status_id=self._term_id(Taxonomy.COPYRIGHT_STATUS, copyright_status),
            restriction=restriction,
            start_date=start_date,
            end_date=end_date,
            rights_note=rights_note,
            culture=self.run.culture,
        )
        if self.has_duplicate_rights(rights):
            log.debug("Skipping duplicate rights statement for %s", entity.id)
            return None
        self._repos.rights.save(rights)
        return self.create_relation(entity.id, rights.id, RelationType.RIGHT)

    def has_duplicate_rights(self, rights: Rights) -> bool:
        entity = self.run.require_entity()
        stored = self._repos.rights
        for relation in self._repos.relations.find(
            subject_id=entity.id, type_id=RelationType.RIGHT
        ):
            existing = stored.get(relation.object_id)
            if existing is not None and rights_match(existing, rights):
                return True
        return False

    def _term_id(self, taxonomy: Taxonomy, name: str | None) -> UUID | None:
        if not name:
            return None
        return self.fetch_or_create_term(taxonomy, name).id

    # Properties ----------------------------------------------------------

    def set_property(self, name: str, value: str, *, scope: str | None = None) -> Property:
        """Create or overwrite the entity's property ``name``."""

        entity = self.run.require_entity()
        properties = self._repos.properties
        prop = properties.find(entity.id, name)
        if prop is None:
            prop = Property(object_id=entity.id, name=name, culture=entity.source_culture)
        prop.value = value
        prop.scope = scope
        properties.save(prop, index=False)
        return prop

    def store_languages(self, property_name: str, values: Iterable[str]) -> Property:
        return self.store_vocabulary_property(property_name, values, _LANGUAGES)

    def store_scripts(self, property_name: str, values: Iterable[str]) -> Property:
        return self.store_vocabulary_property(property_name, values, _SCRIPTS)

    def store_vocabulary_property(
        self, property_name: str, values: Iterable[str], vocabulary: dict[str, str]
    ) -> Property:
        """Validate, normalise and de-duplicate ``values``; store them as a JSON list.

        Raises ``ValidationError`` on the first value outside ``vocabulary``.
        """

        normalized: list[str] = []
        for raw in values:
            token = raw.strip()
            if not token:
                continue
            canonical = vocabulary.get(token.lower())
            if canonical is None:
                raise ValidationError(f"Invalid {property_name}: {token}")
            if canonical not in normalized:
                normalized.append(canonical)
        return self.set_property(property_name, json.dumps(normalized))

    # Keymap --------------------------------------------------------------

    def create_keymap_entry(
        self, source_id: str, entity: CulturedEntity | None = None
    ) -> KeymapEntry:
        target = entity or self.run.require_entity()
        entry = KeymapEntry(
            source_name=self.run.source_name,
            source_id=source_id,
            target_name=target.entity_type,
            target_id=target.id,
        )
        self._repos.keymap.add(entry)
        return entry
