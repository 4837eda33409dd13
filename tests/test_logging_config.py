"""Tests for singleton logging configuration."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from unittest.mock import patch

import pytest

from doccheck.logging_config import _SUPPRESSED_LOGGERS, setup_logging


@pytest.fixture(autouse=True)
def _reset_flag() -> Iterator[None]:
    """Reset the singleton flag and root level around each test."""
    import doccheck.logging_config as mod

    root = logging.getLogger()
    level = root.level
    mod._configured = False
    yield
    root.setLevel(level)


def test_basic_config_runs_once() -> None:
    """Handlers are configured once even when called twice."""
    with patch("doccheck.logging_config.logging.basicConfig") as mock_bc:
        setup_logging()
        setup_logging("DEBUG")
        mock_bc.assert_called_once()


def test_level_applied_every_call() -> None:
    """A later call still changes the root level."""
    setup_logging("INFO")
    assert logging.getLogger().level == logging.INFO
    setup_logging("DEBUG")
    assert logging.getLogger().level == logging.DEBUG


def test_suppressed_loggers_at_warning() -> None:
    setup_logging("DEBUG")
    for name in _SUPPRESSED_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING
