"""DAP request handlers for a run session.

This module contains the RequestHandler class that routes incoming requests
to handler methods. Handlers either queue their own response on the session
channel (when events must follow it) and return None, or return a response
for the caller to send.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING
from typing import Any
from typing import cast

from rundap.config import LaunchConfiguration
from rundap.errors import ProtocolError
from rundap.errors import create_dap_response
from rundap.session.lifecycle import SessionState

if TYPE_CHECKING:
    from rundap.protocol.messages import DisconnectRequest
    from rundap.protocol.messages import GenericRequest
    from rundap.protocol.messages import GenericResponse
    from rundap.protocol.messages import InitializeRequest
    from rundap.protocol.messages import LaunchRequest
    from rundap.session.controller import RunSession

__all__ = ["RequestHandler"]

logger = logging.getLogger(__name__)


class RequestHandler:
    """
    Handles incoming requests from the DAP client and routes them to the
    appropriate handler methods.
    """

    def __init__(self, session: RunSession):
        self.session = session

    async def handle_request(self, request: GenericRequest) -> dict[str, Any] | None:
        command = request["command"]
        handler_method = getattr(self, f"_handle_{command}", None)
        if handler_method is None:
            snake = re.sub(r"(?<!^)([A-Z])", r"_\1", command).lower()
            handler_method = getattr(self, f"_handle_{snake}", self._handle_unknown)
        return await handler_method(request)

    async def _handle_unknown(self, request: GenericRequest) -> GenericResponse:
        """Handle an unknown request command."""
        return cast(
            "GenericResponse",
            {
                "seq": 0,
                "type": "response",
                "request_seq": request["seq"],
                "success": False,
                "command": request["command"],
                "message": f"Unsupported command: {request['command']}",
            },
        )

    async def _handle_initialize(self, request: InitializeRequest) -> None:
        """Answer with an empty capability set, then signal initialized."""
        channel = self.session.channel
        channel.send_response(cast("GenericRequest", request), {})
        channel.send_event(self.session.protocol_handler.factory.create_initialized_event())

    async def _handle_launch(self, request: LaunchRequest) -> dict[str, Any] | None:
        """Spawn the runtime for the requested configuration.

        Failures to start (bad configuration, missing binary) are reported as
        a ``terminated`` event after the response, not as a failed response.
        """
        if self.session.state is not SessionState.CONNECTED:
            error = ProtocolError(
                f"Cannot launch in state {self.session.state.value}",
                command="launch",
                sequence=request["seq"],
            )
            return create_dap_response(error, request["seq"], "launch")

        config = LaunchConfiguration.from_launch_request(request)
        self.session.channel.send_response(cast("GenericRequest", request))
        await self.session.launch(config)
        return None

    async def _handle_disconnect(self, request: DisconnectRequest) -> None:
        self.session.channel.send_response(cast("GenericRequest", request))
        self.session.request_termination()

    async def _handle_terminate(self, request: DisconnectRequest) -> None:
        await self._handle_disconnect(request)
