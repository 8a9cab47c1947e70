"""Run session: one transport, one runtime process, one event relay.

A :class:`RunSession` binds a TCP listener on an ephemeral port, serves the
single front end that connects to it, spawns the runtime on ``launch`` and
relays the process's output and exit status back as DAP events.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from typing import TYPE_CHECKING
from typing import Any
from typing import cast

from rundap.config import get_config
from rundap.connections.tcp import TCPServerConnection
from rundap.errors import ConfigurationError
from rundap.errors import LaunchError
from rundap.errors import ProtocolError
from rundap.errors import create_dap_response
from rundap.launch import build_command
from rundap.launch import build_launch_arguments
from rundap.launch import resolve_runtime_binary
from rundap.protocol import ProtocolHandler
from rundap.session.channel import EventChannel
from rundap.session.lifecycle import SessionLifecycle
from rundap.session.lifecycle import SessionState
from rundap.session.process import ChildProcess
from rundap.session.request_handlers import RequestHandler

if TYPE_CHECKING:
    from collections.abc import Mapping

    from rundap.config import LaunchConfiguration
    from rundap.config import RunnerConfig
    from rundap.protocol.messages import GenericRequest
    from rundap.protocol.messages import OutputCategory

logger = logging.getLogger(__name__)


class RunSession:
    """Launch-and-relay session for one front end and one runtime process.

    Reconnecting or launching a second time on the same session is not
    supported; create a new session instead.
    """

    def __init__(
        self,
        config: RunnerConfig | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """
        Args:
            config: Bridge settings; the process-wide config by default.
            env: Environment for locating the runtime and for the child
                process. The bridge's own environment is inherited when None.
        """
        self.config = config or get_config()
        self.env = dict(env) if env is not None else None
        self.connection = TCPServerConnection(host=self.config.host, port=self.config.port)
        self.protocol_handler = ProtocolHandler()
        self.channel = EventChannel(self.connection, self.protocol_handler)
        self.lifecycle = SessionLifecycle(f"run-session@{id(self):x}")
        self.request_handler = RequestHandler(self)
        self.process: ChildProcess | None = None
        self.running = False
        self._resources = contextlib.AsyncExitStack()
        self._serve_task: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def port(self) -> int:
        """The bound listener port; raises RuntimeError before binding."""
        return self.connection.bound_port

    @property
    def state(self) -> SessionState:
        return self.lifecycle.state

    # ---- Transport -------------------------------------------------------

    async def start_listening(self) -> int:
        """Bind the listener and return its port."""
        if not self.connection.is_listening:
            await self.connection.start_listening()
        return self.port

    def start(self) -> asyncio.Task[None]:
        """Run :meth:`serve` in the background."""
        if self._serve_task is None:
            self._serve_task = asyncio.create_task(self.serve(), name="rundap-session")
        return self._serve_task

    async def wait_closed(self) -> None:
        if self._serve_task is not None:
            await self._serve_task

    async def serve(self) -> None:
        """Accept the client and process its requests until it goes away."""
        try:
            try:
                await self.connection.accept()
            except asyncio.CancelledError:
                if self._closed:
                    logger.info("Session closed before a client connected")
                    return
                raise

            self.lifecycle.mark_connected()
            self.channel.start()
            self.running = True
            await self._message_loop()

            if self.request_termination():
                logger.info("Transport closed, asked the runtime to stop")
            await self._wait_for_process()
        finally:
            await self.close()

    async def _wait_for_process(self) -> None:
        """Wait for the relay to drain the process and report its exit.

        Termination is never forced, so a process that ignores the signal
        keeps the session open until it exits on its own.
        """
        if self.process is None:
            return
        interval = self.config.shutdown_timeout or None
        while not await self.process.wait(timeout=interval):
            logger.warning(
                "Process pid=%s still running %ss after termination was requested",
                self.process.pid,
                interval,
            )

    async def close(self) -> None:
        """Release the process relay, the outbound channel and the transport."""
        if self._closed:
            return
        self._closed = True
        self.running = False

        self.lifecycle.mark_terminated()
        await self._resources.aclose()
        await self.channel.close()
        await self.connection.close()

    # ---- Requests --------------------------------------------------------

    async def _message_loop(self) -> None:
        logger.info("Starting message processing loop")
        while self.running and self.connection.is_connected:
            message: dict[str, Any] | None = None
            try:
                message = await self.connection.read_message()
                if message is None:
                    logger.info("Client disconnected")
                    break

                await self._process_message(message)
            except asyncio.CancelledError:
                logger.info("Message loop cancelled")
                raise
            except (ProtocolError, ValueError) as e:
                logger.warning("Discarding malformed message: %s", e)
            except Exception as e:
                logger.exception("Error processing message")
                if message is not None and message.get("type") == "request":
                    self.channel.send_error_response(cast("GenericRequest", message), str(e))

        logger.info("Message loop ended")

    async def _process_message(self, message: dict[str, Any]) -> None:
        validated = self.protocol_handler.validate_message(message)
        message_type = validated["type"]

        if message_type == "request":
            await self._handle_request(cast("GenericRequest", validated))
        else:
            logger.warning("Received unexpected %s: %s", message_type, message)

    async def _handle_request(self, request: GenericRequest) -> None:
        command = request["command"]
        logger.info("Handling request: %s (seq: %s)", command, request.get("seq", "?"))

        try:
            response = await self.request_handler.handle_request(request)
        except Exception as e:
            logger.exception("Error handling request %s", command)
            response = create_dap_response(e, request["seq"], command)

        if response:
            self.channel.send(response)

    # ---- Process lifecycle -----------------------------------------------

    async def launch(self, launch_config: LaunchConfiguration) -> bool:
        """Spawn the runtime and start relaying it.

        Returns False when the launch failed; the failure has then been
        reported to the client as a ``terminated`` event.
        """
        if self.lifecycle.state is not SessionState.CONNECTED:
            raise ProtocolError(
                f"Cannot launch in state {self.lifecycle.state.value}", command="launch"
            )

        try:
            launch_config.validate()
            binary = resolve_runtime_binary(
                self.config.runtime_home_env,
                self.config.runtime_binary,
                self.env if self.env is not None else os.environ,
            )
            command = build_command(binary, build_launch_arguments(launch_config))
            child = ChildProcess(
                command,
                env=self.env,
                chunk_size=self.config.read_chunk_size,
                signal_exit_code=self.config.signal_exit_code,
            )
            await self._resources.enter_async_context(child)
        except (ConfigurationError, LaunchError) as e:
            logger.error("Launch failed: %s", e)
            self.lifecycle.mark_terminated()
            self.channel.send_event(self.protocol_handler.factory.create_terminated_event())
            return False

        self.process = child
        self.lifecycle.mark_launched()
        child.start_relay(self._on_output, self._on_exit)
        return True

    def _on_output(self, category: OutputCategory, text: str) -> None:
        self.channel.send_event(self.protocol_handler.factory.create_output_event(text, category))

    def _on_exit(self, exit_code: int) -> None:
        self.channel.send_event(self.protocol_handler.factory.create_exited_event(exit_code))
        self.lifecycle.mark_terminated()

    def request_termination(self) -> bool:
        """Gracefully stop the runtime, if one is running.

        Safe to call repeatedly; returns True only when a signal was sent.
        """
        sent = self.process.terminate() if self.process is not None else False
        self.lifecycle.mark_terminated()
        return sent


async def start_run_session(
    config: RunnerConfig | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> RunSession:
    """Create a session, bind its listener and serve it in the background.

    The caller passes ``session.port`` to the front end, which then connects
    and sends ``initialize`` and ``launch``.
    """
    session = RunSession(config, env=env)
    await session.start_listening()
    session.start()
    logger.info("Run session listening on port %s", session.port)
    return session
