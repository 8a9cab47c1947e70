"""Tests for LaunchConfiguration parsing and validation."""

from __future__ import annotations

import dataclasses

import pytest

from rundap.config import LaunchConfiguration
from rundap.errors import ConfigurationError


class TestLaunchConfiguration:
    def test_from_launch_request(self) -> None:
        request = {
            "seq": 3,
            "type": "request",
            "command": "launch",
            "arguments": {
                "mainClass": "mod/Main",
                "vmArgs": "-ea",
                "modulePaths": ["/m"],
                "classPaths": ["/a", "/b"],
                "args": "x y",
                "noDebug": True,
            },
        }
        config = LaunchConfiguration.from_launch_request(request)

        assert config.main_class == "mod/Main"
        assert config.vm_args == "-ea"
        assert config.module_paths == ("/m",)
        assert config.class_paths == ("/a", "/b")
        assert config.args == "x y"

    def test_missing_optionals_default_to_empty(self) -> None:
        config = LaunchConfiguration.from_arguments({"mainClass": "Main"})

        assert config.vm_args is None
        assert config.module_paths == ()
        assert config.class_paths == ()
        assert config.args is None

    def test_single_string_path_is_one_entry(self) -> None:
        config = LaunchConfiguration.from_arguments({"mainClass": "Main", "classPaths": "/only"})
        assert config.class_paths == ("/only",)

    def test_none_arguments(self) -> None:
        config = LaunchConfiguration.from_arguments(None)
        assert config.main_class == ""

    def test_is_frozen(self) -> None:
        config = LaunchConfiguration(main_class="Main")
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.main_class = "Other"  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("main_class", "expected"),
        [("Main", False), ("mod/Main", True), ("a/b/C", False)],
    )
    def test_is_modular(self, main_class: str, expected: bool) -> None:
        assert LaunchConfiguration(main_class=main_class).is_modular is expected

    def test_validate_accepts_plain_and_modular(self) -> None:
        LaunchConfiguration(main_class="com.foo.Main").validate()
        LaunchConfiguration(main_class="mod/com.foo.Main").validate()

    def test_validate_rejects_missing_main_class(self) -> None:
        with pytest.raises(ConfigurationError, match="mainClass is required") as exc_info:
            LaunchConfiguration(main_class="").validate()
        assert exc_info.value.config_key == "mainClass"

    def test_validate_rejects_several_separators(self) -> None:
        with pytest.raises(ConfigurationError, match="at most one") as exc_info:
            LaunchConfiguration(main_class="a/b/C").validate()
        assert exc_info.value.details["mainClass"] == "a/b/C"

    def test_to_arguments_round_trips_wire_keys(self) -> None:
        arguments = {"mainClass": "Main", "classPaths": ["/a"], "args": "z"}
        assert LaunchConfiguration.from_arguments(arguments).to_arguments() == arguments
