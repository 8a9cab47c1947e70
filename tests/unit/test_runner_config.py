"""Tests for RunnerConfig and the process-wide config manager."""

from __future__ import annotations

import logging

import pytest

from rundap.config import DEFAULT_CONFIG
from rundap.config import SIGNAL_EXIT_CODE
from rundap.config import ConfigContext
from rundap.config import RunnerConfig
from rundap.config import get_config
from rundap.config import reset_config
from rundap.config import set_config
from rundap.config import update_config
from rundap.errors import ConfigurationError


class TestRunnerConfig:
    def test_defaults(self) -> None:
        config = RunnerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 0
        assert config.runtime_home_env == "JAVA_HOME"
        assert config.runtime_binary == "java"
        assert config.read_chunk_size == 4096
        assert config.signal_exit_code == SIGNAL_EXIT_CODE == -1
        assert config.log_level == "INFO"
        config.validate()

    @pytest.mark.parametrize(
        ("changes", "key"),
        [
            ({"port": -1}, "port"),
            ({"port": 70000}, "port"),
            ({"runtime_home_env": ""}, "runtime_home_env"),
            ({"runtime_binary": ""}, "runtime_binary"),
            ({"read_chunk_size": 0}, "read_chunk_size"),
            ({"shutdown_timeout": -1.0}, "shutdown_timeout"),
            ({"log_level": "LOUD"}, "log_level"),
        ],
    )
    def test_validate_rejects(self, changes, key) -> None:
        config = RunnerConfig(**changes)
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate()
        assert exc_info.value.config_key == key


class TestConfigManager:
    def test_get_config_starts_from_defaults(self) -> None:
        assert get_config() == DEFAULT_CONFIG
        # The manager works on a copy; the shared default is never mutated.
        assert get_config() is not DEFAULT_CONFIG

    def test_update_config(self) -> None:
        new_config = update_config(port=4711, log_level="DEBUG")

        assert new_config.port == 4711
        assert get_config().log_level == "DEBUG"
        assert DEFAULT_CONFIG.port == 0

    def test_update_config_ignores_unknown_keys(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="rundap.config.config_manager"):
            update_config(bogus=1, port=1234)

        assert get_config().port == 1234
        assert "bogus" in caplog.text

    def test_update_config_validates(self) -> None:
        with pytest.raises(ConfigurationError):
            update_config(read_chunk_size=-5)
        assert get_config().read_chunk_size == 4096

    def test_set_and_reset(self) -> None:
        set_config(RunnerConfig(host="0.0.0.0"))
        assert get_config().host == "0.0.0.0"

        reset_config()
        assert get_config().host == "127.0.0.1"

    def test_set_config_validates(self) -> None:
        with pytest.raises(ConfigurationError):
            set_config(RunnerConfig(runtime_binary=""))

    def test_config_context_restores(self) -> None:
        with ConfigContext(runtime_home_env="JDK_HOME", shutdown_timeout=1.0) as config:
            assert config.runtime_home_env == "JDK_HOME"
            assert get_config().shutdown_timeout == 1.0

        assert get_config().runtime_home_env == "JAVA_HOME"

    def test_config_context_restores_on_error(self) -> None:
        with pytest.raises(RuntimeError), ConfigContext(port=9):
            raise RuntimeError("boom")
        assert get_config().port == 0
