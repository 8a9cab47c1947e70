"""rundap - run a Java program without debugging over the Debug Adapter Protocol."""

from rundap.adapter import main as _adapter_main
from rundap.config import LaunchConfiguration
from rundap.launch import build_launch_arguments
from rundap.session import RunSession
from rundap.session import start_run_session

__all__ = [
    "LaunchConfiguration",
    "RunSession",
    "__version__",
    "build_launch_arguments",
    "main",
    "start_run_session",
]
__version__ = "0.1.0"


def main() -> None:
    """Entry point that mirrors :func:`rundap.adapter.main`."""

    _adapter_main()
