"""
Tests for root logging setup.
"""

import logging

import pytest

from gatehouse.core import logging as log_config


@pytest.fixture
def bare_root_logger(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(log_config, "LOG_LEVEL", "debug")
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    root.handlers = []
    yield root
    root.handlers = saved_handlers
    root.setLevel(saved_level)


def test_installs_a_single_handler(bare_root_logger: logging.Logger) -> None:
    log_config.setup_logging()
    log_config.setup_logging()

    assert len(bare_root_logger.handlers) == 1
    assert bare_root_logger.level == logging.DEBUG


def test_existing_handlers_only_get_the_level(bare_root_logger: logging.Logger) -> None:
    existing = logging.NullHandler()
    bare_root_logger.addHandler(existing)

    log_config.setup_logging()

    assert bare_root_logger.handlers == [existing]
    assert bare_root_logger.level == logging.DEBUG
