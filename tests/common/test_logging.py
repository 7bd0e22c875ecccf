from __future__ import annotations

import logging

import pytest

from flatport.common.logging import configure_logging, level_for_verbosity


@pytest.mark.parametrize(
    ("verbose", "quiet", "expected"),
    [
        (0, False, logging.INFO),
        (1, False, logging.DEBUG),
        (3, False, logging.DEBUG),
        (0, True, logging.WARNING),
        (2, True, logging.WARNING),
    ],
)
def test_level_for_verbosity(verbose: int, quiet: bool, expected: int) -> None:
    assert level_for_verbosity(verbose, quiet=quiet) == expected


def test_configure_logging_keeps_sqlalchemy_quiet() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(level=logging.DEBUG, force=True)

        assert root.level == logging.DEBUG
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
