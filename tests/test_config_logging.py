# tests/test_config_logging.py

from __future__ import annotations

import logging

import pytest

from resource_toolkit.config import CONFIG_ENV_VAR, load_config
from resource_toolkit.logging import get_logger, list_active_loggers, set_debug


def test_default_config_values():
    cfg = load_config()
    assert cfg.batch_size("attachments", 0) == 3
    assert cfg.batch_size("taxonomy", 0) == 10
    assert cfg.batch_size("unknown", 7) == 7
    assert cfg.matching["similarity_threshold"] == 85
    assert cfg.jobs["ttl_seconds"] == 3600


def test_config_path_override(tmp_path, monkeypatch):
    custom = tmp_path / "custom.yml"
    custom.write_text("batch:\n  attachments: 1\ndebug: true\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(custom))

    cfg = load_config()
    assert cfg.batch_size("attachments", 3) == 1
    assert cfg.debug is True
    assert cfg.downloads == {}


def test_missing_config_file(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "nope.yml"))
    with pytest.raises(FileNotFoundError):
        load_config()


def test_short_logger_names_hang_under_base():
    log = get_logger("csv_source")
    assert log.name == "resource_toolkit.csv_source"
    assert log.propagate is True
    assert "resource_toolkit.csv_source" in list_active_loggers()


def test_set_debug_switches_cached_loggers_and_file_handlers():
    log = get_logger("taxonomy_assigner")
    try:
        set_debug(True)
        assert log.level == logging.DEBUG
        assert log.isEnabledFor(logging.DEBUG)
        module_handlers = [h for h in log.handlers if getattr(h, "is_module_handler", False)]
        assert module_handlers and all(h.level == logging.DEBUG for h in module_handlers)
    finally:
        set_debug(False)
    assert log.level == logging.INFO
    assert not log.isEnabledFor(logging.DEBUG)
