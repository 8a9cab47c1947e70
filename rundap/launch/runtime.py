"""Locating the runtime binary from the installation root."""

from __future__ import annotations

from collections.abc import Mapping
import logging
import os

from rundap.errors import ConfigurationError

logger = logging.getLogger(__name__)


def resolve_runtime_binary(
    home_env: str = "JAVA_HOME",
    binary_name: str = "java",
    environ: Mapping[str, str] | None = None,
) -> str:
    """Return ``<root>/bin/<binary_name>`` for the root named by ``home_env``.

    Only the environment variable is checked; whether the binary exists is
    left to the spawn, which reports a missing file as an ``OSError``.

    Raises:
        ConfigurationError: If ``home_env`` is unset or empty.
    """
    env = os.environ if environ is None else environ
    root = env.get(home_env)
    if not root:
        raise ConfigurationError(
            f"{home_env} is not set; cannot locate the {binary_name} binary",
            config_key=home_env,
        )

    binary = os.path.join(root, "bin", binary_name)
    logger.debug("Resolved runtime binary %s from %s", binary, home_env)
    return binary


def build_command(binary: str, arguments: list[str]) -> list[str]:
    """Full argv for the spawn: binary first, then the launch arguments."""
    return [binary, *arguments]
