"""Configuration for the rundap launch bridge."""

from rundap.config.config_manager import ConfigContext
from rundap.config.config_manager import get_config
from rundap.config.config_manager import reset_config
from rundap.config.config_manager import set_config
from rundap.config.config_manager import update_config
from rundap.config.launch_config import LaunchConfiguration
from rundap.config.runner_config import DEFAULT_CONFIG
from rundap.config.runner_config import SIGNAL_EXIT_CODE
from rundap.config.runner_config import RunnerConfig

__all__ = [
    "DEFAULT_CONFIG",
    "SIGNAL_EXIT_CODE",
    "ConfigContext",
    "LaunchConfiguration",
    "RunnerConfig",
    "get_config",
    "reset_config",
    "set_config",
    "update_config",
]
