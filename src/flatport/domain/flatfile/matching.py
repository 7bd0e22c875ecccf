"""Per-row decision between create, update, replace and skip."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

from flatport.domain.model import Actor, Description, EntityType

if TYPE_CHECKING:
    from flatport.domain.flatfile.row import Row
    from flatport.domain.flatfile.run import ImportRun
    from flatport.domain.model import CulturedEntity

log = logging.getLogger(__name__)

AUTHORIZED_NAME_COLUMN = "authorizedFormOfName"


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of resolving a row's entity.

    ``is_translation`` marks rows that add another culture to an existing
    entity; ``is_new`` marks entities that did not exist before this row.
    """

    entity: CulturedEntity | None
    skip: bool = False
    is_new: bool = False
    is_translation: bool = False

    @classmethod
    def skipped(cls) -> Resolution:
        return cls(entity=None, skip=True)


class ObjectResolver:
    """Resolve the row's entity for one entity kind."""

    def __init__(self, entity_kind: type[CulturedEntity]) -> None:
        self.entity_kind = entity_kind

    def resolve(self, run: ImportRun, row: Row) -> Resolution:
        if issubclass(self.entity_kind, Description):
            return self._resolve_description(run, row)
        if issubclass(self.entity_kind, Actor):
            return self._resolve_agent(run, row, self.entity_kind)
        return Resolution(self.entity_kind(source_culture=row.culture), is_new=True)

    # Descriptions --------------------------------------------------------

    def _resolve_description(self, run: ImportRun, row: Row) -> Resolution:
        options = run.options
        descriptions = run.repositories.descriptions
        legacy_id = row.legacy_id

        if not options.is_updating and not options.skip_matched:
            if run.last_legacy_id and legacy_id == run.last_legacy_id and run.last_id:
                previous = descriptions.get(run.last_id)
                if previous is not None:
                    return Resolution(previous, is_translation=True)
            return Resolution(Description(source_culture=row.culture), is_new=True)

        if options.roundtrip:
            match = self._description_by_id(run, legacy_id)
        else:
            match = self._description_by_keymap(run, legacy_id)
            if match is None:
                match = self._description_by_fields(run, row)

        match = self._within_limit(run, match)

        if match is None:
            if options.skip_unmatched or options.roundtrip:
                run.log_error(
                    f"Unable to match row. Skipping record: {row.get('title')} "
                    f"(id: {row.get('identifier')})",
                    level=logging.WARNING,
                )
                return Resolution.skipped()
            return Resolution(Description(source_culture=row.culture), is_new=True)

        if match.source_culture != row.culture:
            return Resolution(match, is_translation=True)

        run.log_error(
            f"Matching description found, {options.action_description()}; row "
            f"(id: {match.id}, culture: {match.source_culture}, legacyId: {legacy_id or ''})..."
        )
        if not options.is_updating:
            run.status.duplicates += 1
            return Resolution.skipped()

        run.status.updated += 1
        is_new = False
        if options.delete_and_replace:
            match = self._replace_description(run, match, row)
            is_new = True
        run.entity = match
        if run.hooks.before_update is not None:
            run.hooks.before_update(run, row)
        return Resolution(match, is_new=is_new)

    @staticmethod
    def _description_by_id(run: ImportRun, legacy_id: str | None) -> Description | None:
        if not legacy_id:
            return None
        try:
            description_id = uuid.UUID(legacy_id)
        except ValueError:
            log.debug("Roundtrip id %r is not a valid id", legacy_id)
            return None
        return run.repositories.descriptions.get(description_id)

    @staticmethod
    def _description_by_keymap(run: ImportRun, legacy_id: str | None) -> Description | None:
        if not legacy_id:
            return None
        keymap = run.repositories.keymap
        entry = keymap.latest(legacy_id, run.source_name, EntityType.DESCRIPTION)
        if entry is None:
            return None
        description = run.repositories.descriptions.get(entry.target_id)
        if description is None:
            log.debug("Removing stale keymap entry %s for %r", entry.id, legacy_id)
            keymap.remove(entry)
        return description

    @staticmethod
    def _description_by_fields(run: ImportRun, row: Row) -> Description | None:
        if not (row.has("identifier") and row.has("title") and row.has("repository")):
            return None
        return run.repositories.descriptions.find_by_fields(
            identifier=row.value("identifier"),
            title=row.value("title"),
            repository_name=row.value("repository"),
        )

    @staticmethod
    def _within_limit(run: ImportRun, match: Description | None) -> Description | None:
        """Drop a match that is neither held by nor filed under the limit entity."""

        if match is None or run.limit_id is None:
            return match
        descriptions = run.repositories.descriptions
        if descriptions.inherited_repository_id(match) == run.limit_id:
            return match
        if descriptions.collection_root_id(match) == run.limit_id:
            return match
        log.debug("Discarding match %s outside limit %s", match.id, run.limit_id)
        return None

    @staticmethod
    def _replace_description(run: ImportRun, match: Description, row: Row) -> Description:
        descriptions = run.repositories.descriptions
        old_slug = match.slug
        # children are re-parented by the rows that follow
        descriptions.detach_children(match)
        descriptions.delete(match)
        return Description(source_culture=row.culture, slug=old_slug)

    # Actors and repositories ---------------------------------------------

    def _resolve_agent(self, run: ImportRun, row: Row, kind: type[Actor]) -> Resolution:
        options = run.options
        if not options.is_updating and not options.skip_matched:
            return Resolution(kind(source_culture=row.culture), is_new=True)

        agents = run.repositories.agents
        name = row.get(AUTHORIZED_NAME_COLUMN)
        match = agents.find_by_name(name, kind=kind) if name else None

        if not options.is_updating:
            if match is not None:
                run.log_error(f'Matching record found for "{name}", skipping.')
                run.status.duplicates += 1
                return Resolution.skipped()
            return Resolution(kind(source_culture=row.culture), is_new=True)

        if match is None:
            if options.skip_unmatched:
                run.log_error(
                    f'No match found for record "{name}", skipping.', level=logging.WARNING
                )
                return Resolution.skipped()
            return Resolution(kind(source_culture=row.culture), is_new=True)

        if (
            kind is Actor
            and run.limit_id is not None
            and not run.repositories.relations.exists(run.limit_id, match.id)
        ):
            run.log_error(
                f'Match found outside the repository limit for record "{name}", skipping.',
                level=logging.WARNING,
            )
            return Resolution.skipped()

        run.log_error(f'Matching record found for "{name}", {options.action_description()}.')
        run.status.updated += 1
        run.entity = match
        if run.hooks.before_update is not None:
            run.hooks.before_update(run, row)

        if options.match_and_update:
            return Resolution(match)

        agents.delete(match)
        return Resolution(kind(source_culture=row.culture), is_new=True)
