"""Tests for singleton logging configuration."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from promptlint.logging_config import (
    _SUPPRESSED_LOGGERS,
    LOG_DATEFMT,
    LOG_FORMAT,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _reset_flag() -> None:
    """Reset singleton flag before each test."""
    import promptlint.logging_config as mod

    mod._configured = False


def test_setup_logging_is_idempotent() -> None:
    with patch("promptlint.logging_config.logging.basicConfig") as mock_bc:
        setup_logging()
        setup_logging()  # second call is no-op
        mock_bc.assert_called_once()


def test_level_and_format_are_passed() -> None:
    with patch("promptlint.logging_config.logging.basicConfig") as mock_bc:
        setup_logging("debug")
    mock_bc.assert_called_once_with(
        level=logging.DEBUG, format=LOG_FORMAT, datefmt=LOG_DATEFMT
    )


def test_unknown_level_falls_back_to_warning() -> None:
    with patch("promptlint.logging_config.logging.basicConfig") as mock_bc:
        setup_logging("LOUD")
    assert mock_bc.call_args.kwargs["level"] == logging.WARNING


def test_suppressed_loggers_at_warning() -> None:
    setup_logging()
    for name in _SUPPRESSED_LOGGERS:
        lg = logging.getLogger(name)
        assert lg.level == logging.WARNING, (
            f"Logger {name!r} level is {lg.level}, expected WARNING"
        )


def test_format_includes_logger_name() -> None:
    assert "%(name)s" in LOG_FORMAT
    assert "%(levelname)s" in LOG_FORMAT
