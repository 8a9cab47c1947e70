"""
Debug Adapter Protocol message parsing and construction.

Framing (Content-Length headers) is handled by the connection; this module
deals with the JSON objects inside the frames.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import cast

from rundap.errors import ProtocolError

if TYPE_CHECKING:
    from rundap.protocol.messages import ErrorResponse
    from rundap.protocol.messages import ExitedEventBody
    from rundap.protocol.messages import GenericEvent
    from rundap.protocol.messages import GenericRequest
    from rundap.protocol.messages import GenericResponse
    from rundap.protocol.messages import OutputCategory
    from rundap.protocol.messages import OutputEventBody

logger = logging.getLogger(__name__)


class ProtocolFactory:
    """
    Builds Debug Adapter Protocol messages.

    The factory owns the sequence counter, so every message built by one
    factory carries a unique, increasing ``seq``.
    """

    def __init__(self, *, seq_start: int = 1) -> None:
        self.seq_counter = seq_start

    def next_seq(self) -> int:
        seq = self.seq_counter
        self.seq_counter += 1
        return seq

    # ---- Core constructors -------------------------------------------------

    def create_request(
        self, command: str, arguments: dict[str, Any] | None = None
    ) -> GenericRequest:
        request_dict: dict[str, Any] = {"seq": self.next_seq(), "type": "request"}
        request_dict["command"] = command
        if arguments is not None:
            request_dict["arguments"] = arguments

        return cast("GenericRequest", request_dict)

    def create_response(
        self,
        request: GenericRequest,
        success: bool,
        body: dict[str, Any] | None = None,
        error_message: str | None = None,
    ) -> GenericResponse:
        req = cast("dict[str, Any]", request)

        response_dict: dict[str, Any] = {
            "seq": self.next_seq(),
            "type": "response",
            "request_seq": req["seq"],
            "success": success,
            "command": req.get("command"),
        }

        if body is not None:
            response_dict["body"] = body

        if not success and error_message is not None:
            response_dict["message"] = error_message

        return cast("GenericResponse", response_dict)

    def create_error_response(self, request: GenericRequest, error_message: str) -> ErrorResponse:
        error_body = {
            "error": "ProtocolError",
            "details": {
                "command": request.get("command"),
            },
        }
        response = self.create_response(request, False, error_body, error_message)
        return cast("ErrorResponse", response)

    def create_event(self, event_type: str, body: dict[str, Any] | None = None) -> GenericEvent:
        event_dict: dict[str, Any] = {
            "seq": self.next_seq(),
            "type": "event",
            "event": event_type,
        }

        if body is not None:
            event_dict["body"] = body

        return cast("GenericEvent", event_dict)

    # ---- Events the bridge emits -------------------------------------------

    def create_initialized_event(self) -> GenericEvent:
        return self.create_event("initialized")

    def create_output_event(self, output: str, category: OutputCategory) -> GenericEvent:
        body: OutputEventBody = {"category": category, "output": output}
        return self.create_event("output", cast("dict[str, Any]", body))

    def create_exited_event(self, exit_code: int) -> GenericEvent:
        body: ExitedEventBody = {"exitCode": exit_code}
        return self.create_event("exited", cast("dict[str, Any]", body))

    def create_terminated_event(self) -> GenericEvent:
        return self.create_event("terminated")


class ProtocolHandler:
    """
    Parses incoming DAP messages and builds outgoing ones.
    """

    def __init__(self, factory: ProtocolFactory | None = None):
        self.factory = factory or ProtocolFactory(seq_start=1)

    def parse_message(self, message_json: str | bytes):
        """
        Parse a JSON message into a protocol message.

        Raises:
            ProtocolError: If the message is invalid or cannot be parsed
        """
        try:
            message = json.loads(message_json)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            msg = f"Failed to parse message as JSON: {e}"
            raise ProtocolError(msg, cause=e) from e

        return self.validate_message(message)

    def validate_message(self, message: Any):
        """Check the envelope of an already-decoded message."""
        if not isinstance(message, dict):
            raise ProtocolError("Message is not a JSON object")

        if "seq" not in message:
            raise ProtocolError("Message missing 'seq' field")

        if "type" not in message:
            raise ProtocolError("Message missing 'type' field", sequence=message["seq"])

        msg_type = message["type"]

        if msg_type == "request":
            if "command" not in message:
                raise ProtocolError(
                    "Request message missing 'command' field", sequence=message["seq"]
                )
            return cast("GenericRequest", message)

        if msg_type == "response":
            for key in ("request_seq", "success", "command"):
                if key not in message:
                    raise ProtocolError(
                        f"Response message missing '{key}' field", sequence=message["seq"]
                    )
            return cast("GenericResponse", message)

        if msg_type == "event":
            if "event" not in message:
                raise ProtocolError("Event message missing 'event' field", sequence=message["seq"])
            return cast("GenericEvent", message)

        raise ProtocolError(f"Invalid message type: {msg_type}", sequence=message["seq"])

    def create_response(
        self,
        request: GenericRequest,
        success: bool,
        body: dict[str, Any] | None = None,
        error_message: str | None = None,
    ) -> GenericResponse:
        return self.factory.create_response(request, success, body, error_message)

    def create_error_response(self, request: GenericRequest, error_message: str) -> ErrorResponse:
        return self.factory.create_error_response(request, error_message)
