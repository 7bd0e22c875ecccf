"""Cross-reference from an external (legacy) id to an internal entity id."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from flatport.domain.model.enums import EntityType


@dataclass(eq=False, kw_only=True)
class KeymapEntry:
    """Append-only mapping row; the highest ``id`` wins for a given source key.

    ``id`` is assigned by the store on flush, so it stays ``None`` until then.
    """

    source_name: str
    source_id: str
    target_name: EntityType
    target_id: UUID
    id: int | None = None
