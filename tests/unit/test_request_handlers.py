"""Tests for request routing with a stubbed session."""

from __future__ import annotations

from typing import Any

import pytest

from rundap.config import LaunchConfiguration
from rundap.protocol import ProtocolHandler
from rundap.session.lifecycle import SessionState
from rundap.session.request_handlers import RequestHandler


class StubChannel:
    def __init__(self) -> None:
        self.sent: list[tuple[str, Any, Any]] = []

    def send_response(self, request, body=None) -> None:
        self.sent.append(("response", request["command"], body))

    def send_event(self, event) -> None:
        self.sent.append(("event", event["event"], event.get("body")))


class StubSession:
    def __init__(self, state: SessionState = SessionState.CONNECTED) -> None:
        self.state = state
        self.protocol_handler = ProtocolHandler()
        self.channel = StubChannel()
        self.launched: list[LaunchConfiguration] = []
        self.terminations = 0

    async def launch(self, config: LaunchConfiguration) -> bool:
        self.launched.append(config)
        return True

    def request_termination(self) -> bool:
        self.terminations += 1
        return self.terminations == 1


def _request(command: str, arguments: dict[str, Any] | None = None, seq: int = 1) -> dict[str, Any]:
    request: dict[str, Any] = {"seq": seq, "type": "request", "command": command}
    if arguments is not None:
        request["arguments"] = arguments
    return request


@pytest.mark.asyncio
async def test_initialize_sends_response_then_initialized():
    session = StubSession()
    result = await RequestHandler(session).handle_request(_request("initialize"))

    assert result is None
    assert session.channel.sent == [
        ("response", "initialize", {}),
        ("event", "initialized", None),
    ]


@pytest.mark.asyncio
async def test_launch_responds_before_spawning():
    session = StubSession()
    arguments = {"mainClass": "com.foo.Main", "classPaths": ["/a"], "noDebug": True}

    result = await RequestHandler(session).handle_request(_request("launch", arguments))

    assert result is None
    assert session.channel.sent == [("response", "launch", None)]
    assert session.launched == [LaunchConfiguration(main_class="com.foo.Main", class_paths=("/a",))]


@pytest.mark.parametrize("state", [SessionState.LAUNCHED, SessionState.TERMINATED])
@pytest.mark.asyncio
async def test_launch_in_wrong_state_is_an_error_response(state):
    session = StubSession(state)
    result = await RequestHandler(session).handle_request(
        _request("launch", {"mainClass": "Main"}, seq=4)
    )

    assert result is not None
    assert result["success"] is False
    assert result["request_seq"] == 4
    assert result["message"] == f"Cannot launch in state {state.value}"
    assert session.launched == []
    assert session.channel.sent == []


@pytest.mark.parametrize("command", ["disconnect", "terminate"])
@pytest.mark.asyncio
async def test_disconnect_and_terminate_request_termination(command):
    session = StubSession(SessionState.LAUNCHED)
    handler = RequestHandler(session)

    await handler.handle_request(_request(command, {"terminateDebuggee": True}))

    assert session.channel.sent == [("response", command, None)]
    assert session.terminations == 1


@pytest.mark.asyncio
async def test_unknown_command():
    session = StubSession()
    result = await RequestHandler(session).handle_request(_request("setBreakpoints", seq=12))

    assert result == {
        "seq": 0,
        "type": "response",
        "request_seq": 12,
        "success": False,
        "command": "setBreakpoints",
        "message": "Unsupported command: setBreakpoints",
    }
