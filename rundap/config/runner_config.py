"""Process-wide settings for the launch bridge."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from rundap.errors import ConfigurationError

# Exit code reported when the runtime was ended by a signal and the OS
# supplied no exit status of its own.
SIGNAL_EXIT_CODE = -1


@dataclass
class RunnerConfig:
    """Settings shared by every run session.

    Launch-specific values (main class, paths, arguments) live in
    :class:`~rundap.config.launch_config.LaunchConfiguration`; this class only
    holds what the operator of the bridge controls.
    """

    # Transport
    host: str = "127.0.0.1"
    port: int = 0

    # Runtime resolution
    runtime_home_env: str = "JAVA_HOME"
    runtime_binary: str = "java"

    # Relay
    read_chunk_size: int = 4096
    signal_exit_code: int = SIGNAL_EXIT_CODE
    # Seconds between warnings while a signalled process keeps running.
    shutdown_timeout: float = 5.0

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    def validate(self) -> None:
        """Validate settings and raise errors for unusable values."""
        if not 0 <= self.port <= 65535:  # noqa: PLR2004
            raise ConfigurationError(
                f"Port out of range: {self.port}",
                config_key="port",
            )

        if not self.runtime_home_env:
            raise ConfigurationError(
                "Runtime home environment variable name must not be empty",
                config_key="runtime_home_env",
            )

        if not self.runtime_binary:
            raise ConfigurationError(
                "Runtime binary name must not be empty",
                config_key="runtime_binary",
            )

        if self.read_chunk_size <= 0:
            raise ConfigurationError(
                "read_chunk_size must be positive",
                config_key="read_chunk_size",
                details={"read_chunk_size": self.read_chunk_size},
            )

        if self.shutdown_timeout < 0:
            raise ConfigurationError(
                "shutdown_timeout must not be negative",
                config_key="shutdown_timeout",
                details={"shutdown_timeout": self.shutdown_timeout},
            )

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ConfigurationError(
                f"Unknown log level: {self.log_level}",
                config_key="log_level",
            )


# Default configuration instance
DEFAULT_CONFIG = RunnerConfig()
