"""Run defaults for flat-file imports, overridable from the environment."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from .env import env_int, env_path

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_PROGRESS_INTERVAL: Final[int] = 1000
DEFAULT_SOURCE_NAME: Final[str] = "flatport"


@dataclass(frozen=True, slots=True)
class ImportConfig:
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL
    error_log: Path | None = None
    source_name: str = DEFAULT_SOURCE_NAME


def get_import_config() -> ImportConfig:
    """Read ``FLATPORT_PROGRESS_INTERVAL`` and ``FLATPORT_ERROR_LOG``.

    A progress interval of ``0`` turns periodic progress messages off.
    """

    return ImportConfig(
        progress_interval=env_int("FLATPORT_PROGRESS_INTERVAL", DEFAULT_PROGRESS_INTERVAL),
        error_log=env_path("FLATPORT_ERROR_LOG"),
    )
