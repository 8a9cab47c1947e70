"""DAP message shapes used by the launch bridge.

Only the subset of the Debug Adapter Protocol the bridge speaks is modelled:
the generic request/response/event envelopes, the three requests it consumes
and the bodies of the events it emits.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any
from typing import Literal
from typing import TypedDict

if TYPE_CHECKING:
    from typing_extensions import NotRequired

OutputCategory = Literal["stdout", "stderr"]


class GenericRequest(TypedDict):
    seq: int
    type: Literal["request"]
    command: str
    arguments: NotRequired[Any]


class GenericResponse(TypedDict):
    seq: int
    type: Literal["response"]
    request_seq: int
    success: bool
    command: str
    message: NotRequired[str]
    body: NotRequired[Any]


class GenericEvent(TypedDict):
    seq: int
    type: Literal["event"]
    event: str
    body: NotRequired[Any]


class ErrorResponse(TypedDict):
    """On error (whenever success is false), the body carries the details."""

    seq: int
    type: Literal["response"]
    request_seq: int
    success: bool
    command: str
    message: NotRequired[str]
    body: dict[str, Any]


# Requests consumed by the bridge


class InitializeRequestArguments(TypedDict, total=False):
    clientID: str
    clientName: str
    adapterID: str
    linesStartAt1: bool
    columnsStartAt1: bool


class InitializeRequest(TypedDict):
    seq: int
    type: Literal["request"]
    command: Literal["initialize"]
    arguments: InitializeRequestArguments


class LaunchRequestArguments(TypedDict, total=False):
    mainClass: str
    vmArgs: str
    modulePaths: list[str]
    classPaths: list[str]
    args: str
    noDebug: bool


class LaunchRequest(TypedDict):
    seq: int
    type: Literal["request"]
    command: Literal["launch"]
    arguments: LaunchRequestArguments


class DisconnectArguments(TypedDict, total=False):
    restart: bool
    terminateDebuggee: bool


class DisconnectRequest(TypedDict):
    seq: int
    type: Literal["request"]
    command: Literal["disconnect", "terminate"]
    arguments: NotRequired[DisconnectArguments]


# Event bodies emitted by the bridge


class OutputEventBody(TypedDict):
    category: OutputCategory
    output: str


class ExitedEventBody(TypedDict):
    exitCode: int
