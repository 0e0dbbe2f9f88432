"""Unit tests for the logging setup."""

import logging

import pytest

from vault.config import Settings
from vault.infrastructure.logging.log_config import _CATEGORY_MAP, _parse_level, setup_logging


@pytest.fixture
def restore_levels():
    names = [""] + [name for group in _CATEGORY_MAP.values() for name in group]
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def test_category_levels_applied(restore_levels):
    settings = Settings(
        _env_file=None,
        log_level="DEBUG",
        log_level_sql="ERROR",
        log_level_backup="warning",
    )

    setup_logging(settings)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("sqlalchemy.engine").level == logging.ERROR
    assert (
        logging.getLogger("vault.application.services.backup_subscriber").level
        == logging.WARNING
    )


@pytest.mark.parametrize("raw, expected", [("info", logging.INFO), ("ERROR", logging.ERROR), ("nonsense", logging.INFO)])
def test_parse_level(raw, expected):
    assert _parse_level(raw) == expected
