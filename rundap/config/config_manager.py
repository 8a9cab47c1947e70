"""Global configuration management for the launch bridge.

Sessions read :func:`get_config` when they are created, so changes made here
only affect sessions started afterwards.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:
    import types

from rundap.config.runner_config import DEFAULT_CONFIG
from rundap.config.runner_config import RunnerConfig

logger = logging.getLogger(__name__)

_FIELD_NAMES = frozenset(f.name for f in dataclasses.fields(RunnerConfig))


class ConfigManager:
    """Thread-safe holder for the process-wide :class:`RunnerConfig`."""

    def __init__(self, default_config: RunnerConfig) -> None:
        self._lock = threading.RLock()
        self._default_config = default_config
        self._current_config = dataclasses.replace(default_config)

    def get_config(self) -> RunnerConfig:
        with self._lock:
            return self._current_config

    def set_config(self, config: RunnerConfig) -> None:
        with self._lock:
            config.validate()
            self._current_config = config

    def update_config(self, **kwargs: Any) -> RunnerConfig:
        """Replace selected fields; unknown keys are ignored with a warning."""
        with self._lock:
            unknown_keys = sorted(set(kwargs) - _FIELD_NAMES)
            if unknown_keys:
                logger.warning("Ignoring unknown config key(s): %s", ", ".join(unknown_keys))

            changes = {key: value for key, value in kwargs.items() if key in _FIELD_NAMES}
            new_config = dataclasses.replace(self._current_config, **changes)
            new_config.validate()
            self._current_config = new_config
            return new_config

    def reset_config(self) -> None:
        with self._lock:
            self._current_config = dataclasses.replace(self._default_config)

    def swap_config(self, **kwargs: Any) -> tuple[RunnerConfig, RunnerConfig]:
        """Apply changes and return ``(original, new)`` atomically."""
        with self._lock:
            original = self._current_config
            new_config = self.update_config(**kwargs)
            return original, new_config

    def restore_config(self, config: RunnerConfig) -> None:
        with self._lock:
            self._current_config = config


_config_manager = ConfigManager(DEFAULT_CONFIG)


def get_config() -> RunnerConfig:
    """Get the current configuration."""
    return _config_manager.get_config()


def set_config(config: RunnerConfig) -> None:
    """Validate and install ``config`` as the current configuration."""
    _config_manager.set_config(config)


def update_config(**kwargs: Any) -> RunnerConfig:
    """Update the current configuration with new values.

    Args:
        **kwargs: RunnerConfig field values to change

    Returns:
        The new current configuration
    """
    return _config_manager.update_config(**kwargs)


def reset_config() -> None:
    """Reset configuration to defaults."""
    _config_manager.reset_config()


class ConfigContext:
    """Context manager for temporary configuration changes.

    The previous configuration is restored when the context exits, even if
    the body raised.
    """

    def __init__(self, **kwargs: Any):
        self._manager = _config_manager
        self._changes = kwargs
        self._original_config: RunnerConfig | None = None

    def __enter__(self) -> RunnerConfig:
        self._original_config, new_config = self._manager.swap_config(**self._changes)
        return new_config

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        if self._original_config is not None:
            self._manager.restore_config(self._original_config)
