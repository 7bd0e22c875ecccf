from __future__ import annotations

from .logging import configure_logging, level_for_verbosity

__all__ = [
    "configure_logging",
    "level_for_verbosity",
]
