"""Turning a launch configuration into a runtime command line."""

from rundap.launch.arguments import build_launch_arguments
from rundap.launch.runtime import build_command
from rundap.launch.runtime import resolve_runtime_binary

__all__ = ["build_command", "build_launch_arguments", "resolve_runtime_binary"]
