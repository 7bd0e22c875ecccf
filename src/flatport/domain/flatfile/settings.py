"""Per-run import settings."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from flatport.config import ConfigurationError
from flatport.config.importing import DEFAULT_PROGRESS_INTERVAL, DEFAULT_SOURCE_NAME
from flatport.domain.flatfile.options import UpdateOptions

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from flatport.config import ImportConfig
    from flatport.domain.flatfile.hooks import ContentFilter
    from flatport.domain.model import CulturedEntity


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportSettings:
    """Everything a run needs besides column rules and hooks.

    ``entity_kind`` selects built-in create/match/save handling; leave it
    ``None`` to drive entity creation from a ``row_init`` hook instead.
    ``index`` keeps search indexing on during the run.
    """

    entity_kind: type[CulturedEntity] | None = None
    options: UpdateOptions = field(default_factory=UpdateOptions)
    limit: str | None = None
    source_name: str = DEFAULT_SOURCE_NAME
    renames: Mapping[str, str] = field(default_factory=dict[str, str])
    extra_columns: tuple[str, ...] = ()
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL
    error_log: Path | None = None
    skip_rows: int = 0
    index: bool = False
    content_filter: ContentFilter | None = None

    @classmethod
    def from_config(cls, config: ImportConfig, **overrides: Any) -> ImportSettings:
        settings = cls(
            progress_interval=config.progress_interval,
            error_log=config.error_log,
            source_name=config.source_name,
        )
        return replace(settings, **overrides)

    def validate(self) -> None:
        self.options.validate(limit=self.limit)
        if self.skip_rows < 0:
            raise ConfigurationError(f"skip_rows must be >= 0, got {self.skip_rows}")
        if self.progress_interval < 0:
            raise ConfigurationError(
                f"progress_interval must be >= 0, got {self.progress_interval}"
            )
        if not self.source_name:
            raise ConfigurationError("source_name must not be blank")
