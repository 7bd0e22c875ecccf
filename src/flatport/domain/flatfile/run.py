"""Per-invocation run context and bookkeeping."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from flatport.domain.flatfile.children import ChildReconciler
from flatport.domain.flatfile.errors import FlatfileError
from flatport.domain.model import DEFAULT_CULTURE

if TYPE_CHECKING:
    from uuid import UUID

    from flatport.domain.flatfile.columns import ColumnRegistry
    from flatport.domain.flatfile.hooks import ImportHooks
    from flatport.domain.flatfile.options import UpdateOptions
    from flatport.domain.flatfile.row import Row
    from flatport.domain.flatfile.settings import ImportSettings
    from flatport.domain.model import Culture, CulturedEntity, Taxonomy, Term
    from flatport.domain.ports import ImportRepositories

log = logging.getLogger(__name__)


@dataclass(slots=True)
class RunStatus:
    """Counters reported after a run.

    ``rows`` counts every data row read, including skipped leading rows and
    blank rows; ``skipped_rows`` only counts the leading rows skipped on request.
    """

    rows: int = 0
    skipped_rows: int = 0
    duplicates: int = 0
    updated: int = 0
    created: int = 0
    errors: int = 0

    @property
    def processed(self) -> int:
        return self.rows - self.skipped_rows


@dataclass(slots=True, kw_only=True)
class ImportRun:
    """State shared by every stage while one stream is imported."""

    settings: ImportSettings
    columns: tuple[str, ...]
    registry: ColumnRegistry
    hooks: ImportHooks
    repositories: ImportRepositories
    status: RunStatus = field(default_factory=RunStatus)
    limit_id: UUID | None = None

    last_legacy_id: str | None = None
    last_id: UUID | None = None

    # current row
    row: Row | None = None
    entity: CulturedEntity | None = None
    is_translation: bool = False
    pending_properties: list[tuple[str, str]] = field(default_factory=list[tuple[str, str]])

    # terms created during this run, keyed by (taxonomy, culture, name)
    terms: dict[tuple[Taxonomy, Culture, str], Term] = field(
        default_factory=dict[tuple["Taxonomy", "Culture", str], "Term"]
    )

    _started_at: float | None = None
    _children: ChildReconciler | None = None

    @property
    def options(self) -> UpdateOptions:
        return self.settings.options

    @property
    def source_name(self) -> str:
        return self.settings.source_name

    @property
    def culture(self) -> Culture:
        return self.row.culture if self.row is not None else DEFAULT_CULTURE

    @property
    def children(self) -> ChildReconciler:
        if self._children is None:
            self._children = ChildReconciler(self)
        return self._children

    def require_entity(self) -> CulturedEntity:
        if self.entity is None:
            raise FlatfileError("No entity has been resolved for the current row")
        return self.entity

    def begin_row(self, row: Row) -> None:
        self.row = row
        self.entity = None
        self.is_translation = False
        self.pending_properties = []

    def end_row(self) -> None:
        if self.row is not None:
            self.row.vars.clear()
        self.row = None
        self.entity = None
        self.is_translation = False
        self.pending_properties = []

    def content(self, text: str) -> str:
        """Apply the configured content filter, then trim."""

        content_filter = self.settings.content_filter
        if content_filter is not None:
            text = content_filter(text)
        return text.strip()

    def set_attribute(self, name: str, value: str | None) -> None:
        """Write a field on the row's entity in the row's culture.

        Translation rows only carry per-culture values; plain fields are left
        untouched.
        """

        entity = self.require_entity()
        if self.is_translation and not entity.is_i18n_field(name):
            return
        entity.set_field(name, value, culture=self.culture)

    def log_error(
        self, message: str, *, include_row: bool = True, level: int = logging.INFO
    ) -> str:
        """Log ``message``, prefixed with the 1-based data row number.

        The message is also appended to the error log file when one is set.
        """

        if include_row:
            message = f"Row {self.status.rows + 1}: {message}"
        log.log(level, message)
        error_log = self.settings.error_log
        if error_log is not None:
            with error_log.open("a", encoding="utf-8") as handle:
                handle.write(message + "\n")
        return message

    def start_timer(self) -> None:
        if self._started_at is None:
            self._started_at = time.perf_counter()

    def elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        return time.perf_counter() - self._started_at

    def report_progress(self) -> None:
        interval = self.settings.progress_interval
        processed = self.status.processed
        if not interval or processed <= 0 or processed % interval:
            return
        elapsed = self.elapsed()
        log.info(
            "%d rows processed in %.2f minutes (%.2f second/row average).",
            processed,
            elapsed / 60,
            elapsed / processed,
        )
