"""CSV stream reader: BOM handling, header normalisation and raw row iteration."""

from __future__ import annotations

import codecs
import csv
import io
import logging
from typing import TYPE_CHECKING, BinaryIO, Final

from flatport.domain.flatfile.errors import MalformedInputError

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

log = logging.getLogger(__name__)

UNTITLED_LABEL: Final[str] = "Untitled"


class CsvStreamReader:
    """Read a UTF-8 CSV stream with a mandatory header row.

    ``open`` must be called before iterating. Header warnings (blank column
    names, stray whitespace) are collected in ``warnings`` so the caller can
    route them to its error log.
    """

    def __init__(self, stream: BinaryIO, *, renames: Mapping[str, str] | None = None) -> None:
        self._stream = stream
        self._renames = dict(renames or {})
        self._text: io.TextIOWrapper | None = None
        self._records: Iterator[list[str]] | None = None
        self.columns: tuple[str, ...] = ()
        self.warnings: list[str] = []

    def open(self) -> tuple[str, ...]:
        self._skip_byte_order_mark()
        self._text = io.TextIOWrapper(self._stream, encoding="utf-8", newline="")
        self._records = csv.reader(self._text)

        header = next(self._records, None)
        if header is None:
            raise MalformedInputError("Could not read header row; the file could be empty")

        names = self._label_blank_columns(header)
        names = [self._renames.get(name, name) for name in names]
        self.columns = tuple(names)
        return self.columns

    def __iter__(self) -> Iterator[list[str]]:
        if self._records is None:
            raise MalformedInputError("Reader has not been opened")
        return self._fitted(self._records)

    def _fitted(self, records: Iterator[list[str]]) -> Iterator[list[str]]:
        """Drop blank trailing cells; data beyond the header is malformed."""

        width = len(self.columns)
        for number, cells in enumerate(records, start=1):
            if len(cells) > width:
                if any(cell.strip() for cell in cells[width:]):
                    raise MalformedInputError(
                        f"Row {number} has {len(cells)} cells but the header has {width} columns"
                    )
                del cells[width:]
            yield cells

    def close(self) -> None:
        """Release the text wrapper without closing the caller's stream."""

        if self._text is not None:
            self._text.detach()
            self._text = None
            self._records = None

    def _skip_byte_order_mark(self) -> None:
        head = self._stream.read(len(codecs.BOM_UTF8))
        if head == codecs.BOM_UTF8:
            return
        try:
            self._stream.seek(0)
        except (OSError, io.UnsupportedOperation) as exc:
            raise MalformedInputError("Rewinding the stream after the BOM check failed") from exc

    def _label_blank_columns(self, header: list[str]) -> list[str]:
        names = list(header)
        number = 1
        for position, name in enumerate(names):
            if name:
                continue
            while f"{UNTITLED_LABEL}{number}" in names:
                number += 1
            label = f"{UNTITLED_LABEL}{number}"
            self._warn("Named blank column %d in header row '%s'.", position + 1, label)
            names[position] = label
        return names

    def _warn(self, message: str, *args: object) -> None:
        log.warning(message, *args)
        self.warnings.append(message % args)


def whitespace_warnings(columns: tuple[str, ...]) -> list[str]:
    return [
        f"WARNING: Column '{column}' has whitespace before or after its name."
        for column in columns
        if column != column.strip()
    ]
