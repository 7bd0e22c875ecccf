"""Where the import store lives."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_path

APP_DIR_NAME: Final[str] = "flatport"
DATABASE_FILENAME: Final[str] = "flatport.db"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """``uri`` is ``DATABASE_URI`` when set.

    Otherwise it points at an SQLite file inside ``data_dir``.
    """

    uri: str
    data_dir: Path | None = None


def data_dir() -> Path:
    """``FLATPORT_DATA_DIR``, falling back to the platform's per-user data directory."""

    configured = env_path("FLATPORT_DATA_DIR")
    if configured is not None:
        return configured.resolve()
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_database_config() -> DatabaseConfig:
    uri = os.getenv("DATABASE_URI")
    if uri:
        return DatabaseConfig(uri=uri)
    directory = data_dir()
    directory.mkdir(parents=True, exist_ok=True)
    return DatabaseConfig(
        uri=f"sqlite+pysqlite:///{directory / DATABASE_FILENAME}", data_dir=directory
    )
