"""One CSV record addressed by column name."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

from flatport.domain.flatfile.errors import MissingColumnError
from flatport.domain.model import DEFAULT_CULTURE

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from flatport.domain.model import Culture

CULTURE_COLUMN: Final[str] = "culture"
LEGACY_ID_COLUMN: Final[str] = "legacyId"


@dataclass(slots=True)
class Row:
    """Cells of one record, padded to the run's column list.

    ``vars`` is per-row scratch space filled by variable and array columns;
    it never outlives the row.
    """

    columns: tuple[str, ...]
    cells: list[str]
    vars: dict[str, Any] = field(default_factory=dict[str, Any])
    _index: dict[str, int] = field(default_factory=dict[str, int], repr=False)

    def __post_init__(self) -> None:
        if len(self.cells) < len(self.columns):
            self.cells.extend([""] * (len(self.columns) - len(self.cells)))
        # first occurrence wins for duplicated header names
        for position, column in enumerate(self.columns):
            self._index.setdefault(column, position)

    @classmethod
    def from_cells(cls, columns: Sequence[str], cells: Sequence[str]) -> Row:
        row = cls(tuple(columns), list(cells))
        if row.has(CULTURE_COLUMN) and not row.value(CULTURE_COLUMN):
            row.set(CULTURE_COLUMN, DEFAULT_CULTURE)
        return row

    def has(self, column: str) -> bool:
        return column in self._index

    def value(self, column: str) -> str:
        """Trimmed cell value; a column outside the header is an error."""

        try:
            position = self._index[column]
        except KeyError:
            raise MissingColumnError(column) from None
        return self.cells[position].strip()

    def get(self, column: str, default: str = "") -> str:
        if not self.has(column):
            return default
        return self.value(column)

    def set(self, column: str, value: str) -> None:
        try:
            position = self._index[column]
        except KeyError:
            raise MissingColumnError(column) from None
        self.cells[position] = value

    def copy(self, source: str, destination: str) -> None:
        self.set(destination, self.value(source))

    def amalgamate(
        self,
        columns: Sequence[str] | Mapping[str, str],
        destination: str | None = None,
    ) -> str:
        """Join non-empty column values with line breaks.

        A mapping is read as ``{prefix: column}``; each value is prepended with
        its prefix.
        """

        pairs = columns.items() if isinstance(columns, Mapping) else (("", c) for c in columns)
        output = ""
        for prefix, column in pairs:
            value = self.value(column)
            if not value:
                continue
            output = f"{output}\n{prefix}{value}" if output else f"{prefix}{value}"
        if destination is not None:
            self.set(destination, output)
        return output

    def contains_data(self) -> bool:
        return any(cell.strip() for cell in self.cells)

    @property
    def culture(self) -> Culture:
        return self.get(CULTURE_COLUMN) or DEFAULT_CULTURE

    @property
    def legacy_id(self) -> str | None:
        return self.get(LEGACY_ID_COLUMN) or None

    def items(self) -> Iterator[tuple[str, str]]:
        """``(column, trimmed value)`` pairs in header order."""

        for column, cell in zip(self.columns, self.cells, strict=False):
            yield column, cell.strip()
