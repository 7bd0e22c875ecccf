"""Flat-file import engine: reading, column rules, matching and reconciliation."""

from __future__ import annotations

from .children import ChildReconciler, dates_equal, events_match, rights_match
from .columns import (
    ArrayColumn,
    AttributeColumn,
    ColumnRegistry,
    CustomColumn,
    LanguageColumn,
    NoteColumn,
    Phase,
    PropertyColumn,
    ScriptColumn,
    StandardColumn,
    TermRelationColumn,
    VariableColumn,
)
from .errors import FlatfileError, MalformedInputError, MissingColumnError, ValidationError
from .hooks import ImportHooks
from .importer import FlatfileImporter
from .matching import ObjectResolver, Resolution
from .options import ReconciliationMode, UpdateOptions
from .presets import PRESETS, Preset
from .reader import CsvStreamReader
from .row import Row
from .run import ImportRun, RunStatus
from .settings import ImportSettings

__all__ = [
    "PRESETS",
    "ArrayColumn",
    "AttributeColumn",
    "ChildReconciler",
    "ColumnRegistry",
    "CsvStreamReader",
    "CustomColumn",
    "FlatfileError",
    "FlatfileImporter",
    "ImportHooks",
    "ImportRun",
    "ImportSettings",
    "LanguageColumn",
    "MalformedInputError",
    "MissingColumnError",
    "NoteColumn",
    "ObjectResolver",
    "Phase",
    "Preset",
    "PropertyColumn",
    "ReconciliationMode",
    "Resolution",
    "Row",
    "RunStatus",
    "ScriptColumn",
    "StandardColumn",
    "TermRelationColumn",
    "UpdateOptions",
    "ValidationError",
    "VariableColumn",
    "dates_equal",
    "events_match",
    "rights_match",
]
