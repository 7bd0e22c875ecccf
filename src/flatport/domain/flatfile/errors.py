"""Errors raised while reading and importing flat files."""

from __future__ import annotations

from flatport.config.errors import ConfigurationError


class FlatfileError(Exception):
    """Base class for flat-file import failures."""


class MalformedInputError(FlatfileError):
    """The stream has no readable header row."""


class MissingColumnError(FlatfileError, ConfigurationError):
    """A rule or handler referenced a column the header does not have."""

    def __init__(self, column: str) -> None:
        super().__init__(f"Column {column!r} is not present in the header")
        self.column = column


class ValidationError(FlatfileError):
    """A cell value failed validation; only the current row's child work is abandoned."""
