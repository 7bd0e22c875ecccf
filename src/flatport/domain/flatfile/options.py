"""Reconciliation mode and the flags that modify it."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from flatport.config.errors import InvalidOptionError


class ReconciliationMode(StrEnum):
    CREATE_ONLY = "create-only"
    MATCH_AND_UPDATE = "match-and-update"
    DELETE_AND_REPLACE = "delete-and-replace"


@dataclass(frozen=True, slots=True, kw_only=True)
class UpdateOptions:
    mode: ReconciliationMode = ReconciliationMode.CREATE_ONLY
    skip_matched: bool = False
    skip_unmatched: bool = False
    roundtrip: bool = False
    keep_existing_children: bool = False

    @classmethod
    def from_flags(
        cls,
        *,
        update: str | None = None,
        skip_matched: bool = False,
        skip_unmatched: bool = False,
        roundtrip: bool = False,
        keep_existing_children: bool = False,
    ) -> UpdateOptions:
        """Build options from CLI-style flags; ``update`` is the ``--update`` value."""

        mode = ReconciliationMode.CREATE_ONLY
        if update:
            if update not in (
                ReconciliationMode.MATCH_AND_UPDATE,
                ReconciliationMode.DELETE_AND_REPLACE,
            ):
                raise InvalidOptionError(
                    f'Update parameter "{update}" not handled: Correct --update parameter.'
                )
            mode = ReconciliationMode(update)
        return cls(
            mode=mode,
            skip_matched=skip_matched,
            skip_unmatched=skip_unmatched,
            roundtrip=roundtrip,
            keep_existing_children=keep_existing_children,
        )

    @property
    def is_updating(self) -> bool:
        return self.mode is not ReconciliationMode.CREATE_ONLY

    @property
    def match_and_update(self) -> bool:
        return self.mode is ReconciliationMode.MATCH_AND_UPDATE

    @property
    def delete_and_replace(self) -> bool:
        return self.mode is ReconciliationMode.DELETE_AND_REPLACE

    def validate(self, *, limit: str | None = None) -> None:
        """Reject flag combinations that cannot be honoured."""

        if self.skip_matched and self.is_updating:
            raise InvalidOptionError("--skip-matched cannot be combined with --update")
        if self.skip_unmatched and not self.is_updating:
            raise InvalidOptionError("--skip-unmatched requires --update")
        if self.roundtrip and not self.is_updating:
            raise InvalidOptionError("--roundtrip requires --update")
        if self.keep_existing_children and not self.match_and_update:
            raise InvalidOptionError(
                "--keep-existing-children requires --update=match-and-update"
            )
        if limit and not (self.is_updating or self.skip_matched):
            raise InvalidOptionError("--limit requires --update or --skip-matched")

    def action_description(self) -> str:
        if self.delete_and_replace:
            return "updating using delete and replace"
        if self.match_and_update:
            return "updating in place"
        return "skipping"
