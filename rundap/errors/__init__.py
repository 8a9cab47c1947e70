"""Error handling for the rundap launch bridge."""

from rundap.errors.runner_errors import ConfigurationError
from rundap.errors.runner_errors import LaunchError
from rundap.errors.runner_errors import ProtocolError
from rundap.errors.runner_errors import RunnerError
from rundap.errors.runner_errors import TransportError
from rundap.errors.runner_errors import create_dap_response

__all__ = [
    "ConfigurationError",
    "LaunchError",
    "ProtocolError",
    "RunnerError",
    "TransportError",
    "create_dap_response",
]
