"""Tests for the unified logging setup."""

import json
import logging

import pytest
import structlog

from movie_match.logging_config import NOISY_LOGGERS, configure_logging


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    noisy_levels = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, noisy_level in noisy_levels.items():
        logging.getLogger(name).setLevel(noisy_level)
    structlog.reset_defaults()


def test_stdlib_records_render_as_json(capsys):
    configure_logging(json_output=True, log_level="INFO")

    logging.getLogger("movie_match.tests").warning("catalog_imported")

    line = capsys.readouterr().out.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["event"] == "catalog_imported"
    assert payload["level"] == "warning"
    assert payload["logger"] == "movie_match.tests"
    assert "timestamp" in payload


def test_noisy_loggers_quieted_unless_debug():
    configure_logging(log_level="INFO")
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    configure_logging(log_level="debug")
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("sqlalchemy.engine").level == logging.DEBUG


def test_unknown_level_falls_back_to_info():
    configure_logging(log_level="chatty")
    assert logging.getLogger().level == logging.INFO


def test_repeated_configuration_keeps_one_handler():
    configure_logging()
    configure_logging(json_output=False)
    assert len(logging.getLogger().handlers) == 1
