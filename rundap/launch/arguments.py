"""Command-line construction for the Java runtime.

The order of the produced tokens follows the ``java`` launcher grammar:
runtime options first, then module and class path, then the main class
(prefixed with ``-m`` when it names a module), then program arguments.
"""

from __future__ import annotations

from collections.abc import Mapping
import os
from typing import Any

from rundap.config.launch_config import LaunchConfiguration

MODULE_PATH_FLAG = "--module-path"
CLASS_PATH_FLAG = "-cp"
MODULE_FLAG = "-m"


def build_launch_arguments(
    config: LaunchConfiguration | Mapping[str, Any],
    *,
    path_separator: str = os.pathsep,
) -> list[str]:
    """Turn a launch configuration into the runtime's argument vector.

    ``vmArgs`` and ``args`` are passed through as single tokens; path lists
    are joined with ``path_separator``. The main class is not validated here:
    a name with several ``/`` is passed on unchanged.

    Args:
        config: A :class:`LaunchConfiguration` or the raw launch arguments.
        path_separator: Separator for path lists, the host's by default.

    Returns:
        The ordered argument list, without the runtime binary itself.
    """
    if not isinstance(config, LaunchConfiguration):
        config = LaunchConfiguration.from_arguments(config)

    launch_params: list[str] = []

    if config.vm_args:
        launch_params.append(config.vm_args)

    if config.module_paths:
        launch_params.append(MODULE_PATH_FLAG)
        launch_params.append(path_separator.join(config.module_paths))

    if config.class_paths:
        launch_params.append(CLASS_PATH_FLAG)
        launch_params.append(path_separator.join(config.class_paths))

    # Java 9+ modular projects run as "-m module/Main".
    if config.module_paths or config.is_modular:
        launch_params.append(MODULE_FLAG)
    launch_params.append(config.main_class)

    if config.args:
        launch_params.append(config.args)

    return launch_params
