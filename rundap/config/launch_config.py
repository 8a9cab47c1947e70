"""Launch configuration received from the front end.

The front end sends the configuration as the ``arguments`` of a DAP
``launch`` request, using camelCase keys (``mainClass``, ``vmArgs``,
``modulePaths``, ``classPaths``, ``args``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Any

from rundap.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rundap.protocol.messages import LaunchRequest

MODULE_SEPARATOR = "/"


def _as_paths(value: str | Iterable[str] | None) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value)


@dataclass(frozen=True)
class LaunchConfiguration:
    """What to run and how: main class, runtime options, paths and arguments."""

    main_class: str
    vm_args: str | None = None
    module_paths: tuple[str, ...] = ()
    class_paths: tuple[str, ...] = ()
    args: str | None = None

    @classmethod
    def from_arguments(cls, arguments: Mapping[str, Any] | None) -> LaunchConfiguration:
        """Create a configuration from launch request arguments."""
        arguments = arguments or {}
        return cls(
            main_class=arguments.get("mainClass") or "",
            vm_args=arguments.get("vmArgs") or None,
            module_paths=_as_paths(arguments.get("modulePaths")),
            class_paths=_as_paths(arguments.get("classPaths")),
            args=arguments.get("args") or None,
        )

    @classmethod
    def from_launch_request(cls, request: LaunchRequest) -> LaunchConfiguration:
        """Create a configuration from a full ``launch`` request."""
        return cls.from_arguments(request.get("arguments"))

    @property
    def is_modular(self) -> bool:
        """True when the main class is named as ``module/Class``."""
        return len(self.main_class.split(MODULE_SEPARATOR)) == 2  # noqa: PLR2004

    def validate(self) -> None:
        """Reject configurations the runtime cannot make sense of."""
        if not self.main_class:
            raise ConfigurationError(
                "mainClass is required for launch",
                config_key="mainClass",
            )

        if self.main_class.count(MODULE_SEPARATOR) > 1:
            raise ConfigurationError(
                f"mainClass may contain at most one '{MODULE_SEPARATOR}': {self.main_class}",
                config_key="mainClass",
                details={"mainClass": self.main_class},
            )

    def to_arguments(self) -> dict[str, Any]:
        """Convert back to the camelCase launch request shape."""
        arguments: dict[str, Any] = {"mainClass": self.main_class}
        if self.vm_args:
            arguments["vmArgs"] = self.vm_args
        if self.module_paths:
            arguments["modulePaths"] = list(self.module_paths)
        if self.class_paths:
            arguments["classPaths"] = list(self.class_paths)
        if self.args:
            arguments["args"] = self.args
        return arguments
