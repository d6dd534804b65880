"""Logging setup tests."""

import logging

import pytest

from filesift.logs import DATE_FORMAT, LOG_FORMAT, QUIET_LOGGERS, configure_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name in QUIET_LOGGERS:
        third_party = logging.getLogger(name)
        third_party.handlers.clear()
        third_party.setLevel(logging.NOTSET)
        third_party.propagate = True


def test_configures_root_logger():
    configure_logging("debug")

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert root.handlers[0].formatter._fmt == LOG_FORMAT
    assert root.handlers[0].formatter.datefmt == DATE_FORMAT


def test_quiets_third_party_loggers():
    configure_logging(logging.INFO)

    for name in QUIET_LOGGERS:
        third_party = logging.getLogger(name)
        assert third_party.level == logging.WARNING
        assert third_party.propagate is False
        assert len(third_party.handlers) == 1


def test_third_party_follows_stricter_root_level():
    configure_logging(logging.ERROR)

    assert logging.getLogger("LiteLLM").level == logging.ERROR


def test_unknown_level():
    with pytest.raises(ValueError, match="Unknown log level"):
        configure_logging("chatty")
