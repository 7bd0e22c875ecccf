"""Domain primitives: scalar aliases and small helpers.

Scalar aliases may be promoted to proper value objects later without changing imports.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Final

type Culture = str
type TypeId = str
type Slug = str

DEFAULT_CULTURE: Final[Culture] = "en"

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> Slug:
    """Lowercase ASCII slug with runs of other characters collapsed to ``-``."""

    text = unicodedata.normalize("NFKD", value)
    text = text.encode("ascii", "ignore").decode("ascii").lower()
    return _SLUG_STRIP.sub("-", text).strip("-")
