"""Typed callbacks a run can be configured with."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from flatport.domain.flatfile.row import Row
    from flatport.domain.flatfile.run import ImportRun
    from flatport.domain.model import CulturedEntity


class RowHook(Protocol):
    """Called with the run and current row; ``run.entity`` is the row's entity."""

    def __call__(self, run: ImportRun, row: Row) -> None: ...


class RowInitHook(Protocol):
    """Create or load the row's entity when the run has no entity kind.

    Returning ``None`` skips the rest of the row.
    """

    def __call__(self, run: ImportRun, row: Row) -> CulturedEntity | None: ...


class CompleteHook(Protocol):
    def __call__(self, run: ImportRun) -> None: ...


class ColumnHandler(Protocol):
    """Custom handler for one column's (trimmed, unfiltered) value."""

    def __call__(self, run: ImportRun, row: Row, value: str) -> None: ...


class ValueTransform(Protocol):
    def __call__(self, run: ImportRun, value: str) -> str: ...


class ContentFilter(Protocol):
    def __call__(self, text: str) -> str: ...


@dataclass(slots=True, kw_only=True)
class ImportHooks:
    """Lifecycle hooks, all optional.

    ``save`` replaces the primary save for runs without an entity kind;
    ``before_update`` runs once a match is going to be updated or replaced.
    """

    before_update: RowHook | None = None
    row_init: RowInitHook | None = None
    pre_save: RowHook | None = None
    save: RowHook | None = None
    post_save: RowHook | None = None
    on_complete: CompleteHook | None = None

    def merged(self, other: ImportHooks) -> ImportHooks:
        """Return hooks where every hook set on ``other`` wins."""

        return ImportHooks(
            before_update=other.before_update or self.before_update,
            row_init=other.row_init or self.row_init,
            pre_save=other.pre_save or self.pre_save,
            save=other.save or self.save,
            post_save=other.post_save or self.post_save,
            on_complete=other.on_complete or self.on_complete,
        )
