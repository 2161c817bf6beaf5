"""Tests for GroupingConfig validation and logging setup."""

from __future__ import annotations

import logging
import re

import pytest

from prefgroups.config import GroupingConfig
from prefgroups.errors import ConfigError
from prefgroups.logging_config import ISO8601Formatter, configure_logging


class TestGroupingConfig:
    def test_defaults(self):
        config = GroupingConfig().validate()
        assert config.max_group_size == 4
        assert config.max_local_attempts == 20
        assert config.max_fill_draws == 100
        assert config.trials == 1000
        assert config.strategy == "preferences"

    @pytest.mark.parametrize("field,value", [
        ("max_group_size", 0),
        ("max_local_attempts", -1),
        ("trials", 0),
        ("workers", 0),
        ("seed", -5),
        ("strategy", "exact"),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ConfigError):
            GroupingConfig(**{field: value}).validate()

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            GroupingConfig(trials=0).validate()


class TestLogging:
    def test_format(self):
        record = logging.LogRecord(name="t", level=logging.INFO, pathname="", lineno=0,
                                   msg="Best trial %d", args=(3,), exc_info=None)
        output = ISO8601Formatter().format(record)
        assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z \[prefgroups\] INFO Best trial 3$", output)

    def test_level_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        assert configure_logging().level == logging.WARNING

    def test_verbose_and_explicit_level(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert configure_logging(verbose=True).level == logging.DEBUG
        assert configure_logging(level=logging.ERROR, verbose=True).level == logging.ERROR
        assert configure_logging().level == logging.INFO

    def test_single_handler(self):
        configure_logging()
        configure_logging()
        assert len(logging.getLogger().handlers) == 1
