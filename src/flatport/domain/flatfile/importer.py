"""Row-by-row import orchestration."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from flatport.config.errors import ConfigurationError
from flatport.domain.flatfile.errors import ValidationError
from flatport.domain.flatfile.hooks import ImportHooks
from flatport.domain.flatfile.matching import ObjectResolver
from flatport.domain.flatfile.reader import CsvStreamReader, whitespace_warnings
from flatport.domain.flatfile.row import CULTURE_COLUMN, Row
from flatport.domain.flatfile.run import ImportRun, RunStatus
from flatport.domain.model import Actor, Description

if TYPE_CHECKING:
    from pathlib import Path
    from typing import BinaryIO
    from uuid import UUID

    from flatport.domain.flatfile.columns import ColumnRegistry
    from flatport.domain.flatfile.settings import ImportSettings
    from flatport.domain.model import CulturedEntity
    from flatport.domain.ports import ImportRepositories, ImportUnitOfWork

log = logging.getLogger(__name__)

UnitOfWorkFactory = Callable[[], "ImportUnitOfWork"]


class FlatfileImporter:
    """Import CSV streams into the entity store, one row at a time.

    The unit of work commits after each row's primary save and again after
    its children, so a failure while reconciling children leaves the primary
    record persisted.
    """

    def __init__(
        self,
        settings: ImportSettings,
        registry: ColumnRegistry,
        *,
        hooks: ImportHooks | None = None,
        unit_of_work_factory: UnitOfWorkFactory,
    ) -> None:
        self.settings = settings
        self.registry = registry
        self.hooks = hooks or ImportHooks()
        self.unit_of_work_factory = unit_of_work_factory
        self._resolver = (
            ObjectResolver(settings.entity_kind) if settings.entity_kind is not None else None
        )

    def import_path(self, path: Path) -> RunStatus:
        log.info("Importing %s", path)
        with path.open("rb") as stream:
            return self.import_stream(stream)

    def import_stream(self, stream: BinaryIO) -> RunStatus:
        self._check_configuration()

        reader = CsvStreamReader(stream, renames=self.settings.renames)
        try:
            header = reader.open()
            with self.unit_of_work_factory() as uow:
                run = ImportRun(
                    settings=self.settings,
                    columns=self._columns(header),
                    registry=self.registry,
                    hooks=self.hooks,
                    repositories=uow.repositories,
                )
                for warning in [*reader.warnings, *whitespace_warnings(header)]:
                    run.log_error(warning, include_row=False, level=logging.WARNING)
                run.limit_id = self._resolve_limit(uow.repositories)

                indexer = uow.repositories.indexer
                was_enabled = indexer.enabled
                if self.settings.index:
                    indexer.enable()
                else:
                    indexer.disable()
                try:
                    for cells in reader:
                        self._process(uow, run, cells)
                    self._complete(run)
                    uow.commit()
                finally:
                    if was_enabled:
                        indexer.enable()
                    else:
                        indexer.disable()
        finally:
            reader.close()

        status = run.status
        log.info(
            "Import finished: rows=%d, created=%d, updated=%d, duplicates=%d, errors=%d",
            status.rows,
            status.created,
            status.updated,
            status.duplicates,
            status.errors,
        )
        return status

    # Setup ---------------------------------------------------------------

    def _check_configuration(self) -> None:
        self.settings.validate()
        self.registry.bind(self.settings.entity_kind)
        if self.settings.entity_kind is None and self.hooks.row_init is None:
            raise ConfigurationError("A row_init hook is required when no entity kind is set")

    def _columns(self, header: tuple[str, ...]) -> tuple[str, ...]:
        """Header plus the virtual columns rows are padded to."""

        columns = list(header)
        if CULTURE_COLUMN not in columns:
            columns.append(CULTURE_COLUMN)
        columns.extend(column for column in self.settings.extra_columns if column not in columns)
        return tuple(columns)

    def _resolve_limit(self, repositories: ImportRepositories) -> UUID | None:
        slug = self.settings.limit
        if not slug:
            return None
        description = repositories.descriptions.get_by_slug(slug)
        if description is not None:
            return description.id
        agent = repositories.agents.get_by_slug(slug)
        if agent is not None:
            return agent.id
        raise ConfigurationError(f'Could not find object matching slug "{slug}"')

    # Rows ----------------------------------------------------------------

    def _process(self, uow: ImportUnitOfWork, run: ImportRun, cells: list[str]) -> None:
        status = run.status
        if status.rows < self.settings.skip_rows:
            status.rows += 1
            status.skipped_rows += 1
            return
        if not any(cell.strip() for cell in cells):
            status.rows += 1
            return

        run.start_timer()
        row = Row.from_cells(run.columns, cells)
        run.begin_row(row)
        try:
            self._import_row(uow, run, row)
        finally:
            status.rows += 1
            run.end_row()
        run.report_progress()

    def _import_row(self, uow: ImportUnitOfWork, run: ImportRun, row: Row) -> None:
        self.registry.apply_pre_creation(run, row)

        is_new = False
        if self._resolver is not None:
            resolution = self._resolver.resolve(run, row)
            if resolution.skip or resolution.entity is None:
                return
            entity = resolution.entity
            is_new = resolution.is_new
            run.is_translation = resolution.is_translation
        else:
            row_init = self.hooks.row_init
            if row_init is None:
                raise ConfigurationError("A row_init hook is required when no entity kind is set")
            initialised = row_init(run, row)
            if initialised is None:
                return
            entity = initialised
        run.entity = entity

        self.registry.apply_pre_save(run, row)
        if self.hooks.pre_save is not None:
            self.hooks.pre_save(run, row)

        self._save(run, row, entity)
        legacy_id = row.legacy_id
        if is_new and legacy_id:
            run.children.create_keymap_entry(legacy_id)
        run.last_legacy_id = legacy_id
        run.last_id = entity.id
        for name, value in run.pending_properties:
            run.children.set_property(name, value)
        if is_new:
            run.status.created += 1
        uow.commit()

        try:
            if self.hooks.post_save is not None:
                self.hooks.post_save(run, row)
            self.registry.apply_post_save(run, row)
        except ValidationError as exc:
            run.status.errors += 1
            run.log_error(str(exc), level=logging.WARNING)
        uow.commit()

    def _save(self, run: ImportRun, row: Row, entity: CulturedEntity) -> None:
        if self.hooks.save is not None:
            self.hooks.save(run, row)
        elif isinstance(entity, Description):
            run.repositories.descriptions.save(entity)
        elif isinstance(entity, Actor):
            run.repositories.agents.save(entity)
        else:
            raise ConfigurationError(
                f"No save hook configured for {type(entity).__name__} entities"
            )

    def _complete(self, run: ImportRun) -> None:
        status = run.status
        if status.duplicates:
            run.log_error(f"Duplicates found: {status.duplicates}", include_row=False)
        if status.updated:
            run.log_error(f"Updated: {status.updated}", include_row=False)
        if self.hooks.on_complete is not None:
            self.hooks.on_complete(run)
