"""
Tests for settings loading and the logging helpers.
"""

import json
import logging

import pytest
from pydantic import ValidationError

from seqpipe.config import (
    ConfigLoader, SequenceSettings, get_settings, load_config, reset_settings,
)
from seqpipe.logging_config import (
    FlushingStreamHandler,
    configure_logger_for_trace,
    get_trace_logger,
    is_stderr_suppressed,
    reset_trace_logger,
    restore_stderr_logging,
    suppress_stderr_logging,
)


class TestSequenceSettings:

    def test_defaults(self):
        settings = SequenceSettings()
        assert settings.default_capacity == 8
        assert settings.growth_factor == 2.0
        assert settings.max_capacity is None
        assert settings.trace is False

    def test_growth_factor_must_exceed_one(self):
        with pytest.raises(ValidationError):
            SequenceSettings(growth_factor=1.0)

    def test_initial_capacity_clamped_to_max(self):
        assert SequenceSettings().initial_capacity == 8
        assert SequenceSettings(max_capacity=4).initial_capacity == 4
        assert SequenceSettings(default_capacity=2, max_capacity=4).initial_capacity == 2

    def test_frozen(self):
        settings = SequenceSettings()
        with pytest.raises(ValidationError):
            settings.default_capacity = 1


class TestConfigLoader:

    def test_no_file(self, tmp_path):
        loader = ConfigLoader()
        assert loader.load(tmp_path) is False
        assert loader.config_path is None
        assert loader.build_settings() == SequenceSettings()

    def test_file_values(self, tmp_path):
        (tmp_path / "seqpipe.json").write_text(json.dumps({
            "default_capacity": 2, "max_capacity": 100, "trace": True,
        }))
        loader = ConfigLoader()
        assert loader.load(tmp_path) is True
        assert loader.get("max_capacity") == 100
        settings = loader.build_settings()
        assert settings.default_capacity == 2
        assert settings.max_capacity == 100
        assert settings.trace is True

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / "seqpipe.json").write_text('{"default_capacity": 2}')
        monkeypatch.setenv("SEQPIPE_DEFAULT_CAPACITY", "5")
        loader = ConfigLoader()
        loader.load(tmp_path)
        assert loader.build_settings().default_capacity == 5

    def test_env_clears_max_capacity(self, tmp_path, monkeypatch):
        (tmp_path / "seqpipe.json").write_text('{"max_capacity": 10}')
        monkeypatch.setenv("SEQPIPE_MAX_CAPACITY", "none")
        loader = ConfigLoader()
        loader.load(tmp_path)
        assert loader.build_settings().max_capacity is None

    def test_invalid_value_falls_back(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SEQPIPE_GROWTH_FACTOR", "0.5")
        monkeypatch.setenv("SEQPIPE_DEFAULT_CAPACITY", "4")
        loader = ConfigLoader()
        loader.load(tmp_path)
        settings = loader.build_settings()
        assert settings.growth_factor == 2.0
        assert settings.default_capacity == 4

    def test_invalid_json_ignored(self, tmp_path):
        (tmp_path / "seqpipe.json").write_text("{not json")
        loader = ConfigLoader()
        assert loader.load(tmp_path) is False
        assert loader.config == {}

    def test_non_object_ignored(self, tmp_path):
        (tmp_path / "seqpipe.json").write_text("[1, 2]")
        loader = ConfigLoader()
        assert loader.load(tmp_path) is False

    def test_load_once(self, tmp_path):
        loader = ConfigLoader()
        loader.load(tmp_path)
        (tmp_path / "seqpipe.json").write_text('{"trace": true}')
        assert loader.load(tmp_path) is False


class TestGlobalSettings:

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_reset(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("SEQPIPE_TRACE", "yes")
        assert get_settings().trace is False
        reset_settings()
        assert get_settings() is not first
        assert get_settings().trace is True

    def test_project_root_env(self, tmp_path):
        (tmp_path / "seqpipe.json").write_text('{"default_capacity": 1}')
        assert load_config() is True
        assert get_settings().default_capacity == 1


class TestLogging:

    def test_trace_logger_configured_once(self):
        logger = get_trace_logger()
        handlers = list(logger.handlers)
        assert get_trace_logger().handlers == handlers
        assert logger.propagate is False
        assert any(isinstance(h, FlushingStreamHandler) for h in handlers)

    def test_configure_module_logger(self):
        logger = configure_logger_for_trace("seqpipe.tests.example")
        for handler in get_trace_logger().handlers:
            assert handler in logger.handlers

    def test_configured_logger_level(self):
        logger = configure_logger_for_trace("seqpipe.tests.level")
        assert logger.level == logging.DEBUG

    def test_reset_detaches_dependent_loggers(self):
        logger = configure_logger_for_trace("seqpipe.tests.reset")
        old = list(get_trace_logger().handlers)
        reset_trace_logger()
        assert not any(h in logger.handlers for h in old)
        new = get_trace_logger().handlers
        assert new
        assert all(h in logger.handlers for h in new)

    def test_suppress_and_restore(self):
        try:
            suppress_stderr_logging()
            assert is_stderr_suppressed()
            stream = [h for h in get_trace_logger().handlers
                      if isinstance(h, FlushingStreamHandler)]
            assert all(h.level > logging.CRITICAL for h in stream)
        finally:
            restore_stderr_logging()
        assert not is_stderr_suppressed()
        assert all(h.level == logging.DEBUG for h in stream)
