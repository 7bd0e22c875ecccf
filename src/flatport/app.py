"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from flatport.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    is_started,
    startup,
)
from flatport.config import ConfigurationError, get_import_config
from flatport.domain.flatfile import PRESETS, FlatfileImporter, ImportSettings
from flatport.domain.ports.unit_of_work import ImportUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path

    from flatport.domain.flatfile import RunStatus, UpdateOptions

UnitOfWorkFactory = Callable[[], ImportUnitOfWork]


log = getLogger(__name__)


def import_csv(
    path: Path,
    *,
    entity: str = "description",
    options: UpdateOptions | None = None,
    limit: str | None = None,
    source_name: str | None = None,
    renames: Mapping[str, str] | None = None,
    extra_columns: Sequence[str] = (),
    skip_rows: int = 0,
    error_log: Path | None = None,
    index: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> RunStatus:
    """Import one CSV file with a built-in preset using the configured adapters."""

    try:
        preset = PRESETS[entity]
    except KeyError:
        raise ConfigurationError(
            f"Unknown entity {entity!r}; expected one of: {', '.join(sorted(PRESETS))}"
        ) from None

    if unit_of_work_factory is None and not is_started():
        startup()
    effective_uow = unit_of_work_factory or SqlAlchemyImportUnitOfWork

    overrides: dict[str, object] = {
        "entity_kind": preset.entity_kind,
        "limit": limit,
        "renames": dict(renames or {}),
        "extra_columns": tuple(extra_columns),
        "skip_rows": skip_rows,
        "index": index,
    }
    if options is not None:
        overrides["options"] = options
    if source_name is not None:
        overrides["source_name"] = source_name
    if error_log is not None:
        overrides["error_log"] = error_log
    settings = ImportSettings.from_config(get_import_config(), **overrides)

    log.info(
        "Starting %s import: file=%s, mode=%s, limit=%s, source=%s",
        entity,
        path,
        settings.options.mode,
        limit,
        settings.source_name,
    )
    importer = FlatfileImporter(
        settings,
        preset.build_registry(),
        hooks=preset.build_hooks(),
        unit_of_work_factory=effective_uow,
    )
    return importer.import_path(path)
