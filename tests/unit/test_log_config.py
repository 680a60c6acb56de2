import logging
from unittest.mock import Mock

from nexus.infrastructure.log_config import DEFAULT_LOG_FORMAT, configure_logging


def _configure_fresh_root(monkeypatch):
    basic_config = Mock()
    root, nexus = logging.getLogger(), logging.getLogger("nexus")
    # restore levels afterwards; configure_logging changes them
    monkeypatch.setattr(root, "level", root.level)
    monkeypatch.setattr(nexus, "level", nexus.level)
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(logging, "basicConfig", basic_config)
    configure_logging("warning")
    return basic_config


def test_log_format_from_env(monkeypatch):
    monkeypatch.setenv("LOG_FORMAT", "%(levelname)s %(message)s")
    basic_config = _configure_fresh_root(monkeypatch)
    basic_config.assert_called_once_with(level="WARNING", format="%(levelname)s %(message)s")


def test_default_log_format(monkeypatch):
    monkeypatch.delenv("LOG_FORMAT", raising=False)
    basic_config = _configure_fresh_root(monkeypatch)
    basic_config.assert_called_once_with(level="WARNING", format=DEFAULT_LOG_FORMAT)
