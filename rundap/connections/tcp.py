"""TCP server transport for one run session."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import socket
from typing import Any

from rundap.connections import ConnectionBase
from rundap.errors import ProtocolError
from rundap.errors import TransportError

logger = logging.getLogger(__name__)

CONTENT_LENGTH = "Content-Length"


class TCPServerConnection(ConnectionBase):
    """TCP listener that serves exactly one DAP client.

    The listener is bound first (:meth:`start_listening`) so the caller can
    hand the ephemeral port to the front end before anyone connects. The
    first client to connect becomes the session transport; later clients are
    refused by closing their socket immediately.
    """

    def __init__(self, host: str | None = None, port: int | None = None) -> None:
        """Initialize the TCP server connection.

        Args:
            host: The host address to bind to. Defaults to loopback.
            port: The port to bind to. ``0`` (the default) asks the OS for an
                ephemeral port.
        """
        super().__init__()
        self.host = host or "127.0.0.1"
        self.port = 0 if port is None else port
        self.server: asyncio.Server | None = None
        self._client_connected: asyncio.Future[bool] | None = None

    @property
    def bound_port(self) -> int:
        """The port the listener is bound to.

        Raises:
            RuntimeError: If the listener has not been started yet.
        """
        if self.server is None:
            raise RuntimeError("Listener is not bound; call start_listening() first")
        return self.port

    @property
    def is_listening(self) -> bool:
        return self.server is not None

    async def accept(self) -> None:
        """Start listening if needed and wait for the first client."""
        if self.server is None:
            await self.start_listening()

        await self.wait_for_client()

    async def start_listening(self) -> None:
        """Bind the listener without waiting for a client."""
        if self.server is not None:
            logger.warning("Server already listening on %s:%s", self.host, self.port)
            return

        logger.info("Starting TCP server on %s:%s", self.host, self.port)
        self.server = await asyncio.start_server(self._handle_client, self.host, self.port)
        self._client_connected = asyncio.get_running_loop().create_future()
        self._update_bound_port()

    def _update_bound_port(self) -> None:
        """Record the OS-assigned port when an ephemeral port was requested."""
        if self.server is None or not self.server.sockets:
            return

        try:
            sock = self.server.sockets[0]
            if sock.family in (socket.AF_INET, socket.AF_INET6):
                _, port = sock.getsockname()[:2]
                if port != self.port:
                    logger.debug(
                        "Server bound to ephemeral port %d (requested: %d)", port, self.port
                    )
                    self.port = port
        except (IndexError, OSError) as e:
            logger.debug("Could not determine bound port: %s", e)

    async def wait_for_client(self, timeout: float | None = None) -> None:
        """Wait until a client connects (after start_listening).

        Raises:
            RuntimeError: If called before start_listening
            asyncio.TimeoutError: If timeout is reached before a client connects
        """
        if self._client_connected is None:
            raise RuntimeError("wait_for_client called before start_listening")

        try:
            await asyncio.wait_for(asyncio.shield(self._client_connected), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Timed out waiting for client connection on %s:%s", self.host, self.port
            )
            raise
        logger.info("Client connected to TCP server on %s:%s", self.host, self.port)

    async def _handle_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        if self.writer is not None:
            logger.warning("Rejecting additional client; session already has a transport")
            writer.close()
            with contextlib.suppress(ConnectionError):
                await writer.wait_closed()
            return

        logger.debug("TCP client connected")
        self.reader = reader
        self.writer = writer
        self._is_connected = True

        if self._client_connected is not None and not self._client_connected.done():
            self._client_connected.set_result(True)

    async def close(self) -> None:
        if self.writer is not None:
            self.writer.close()
            with contextlib.suppress(ConnectionError):
                await self.writer.wait_closed()

        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()

        if self._client_connected is not None and not self._client_connected.done():
            self._client_connected.cancel()

        self._is_connected = False
        logger.info("TCP connection closed")

    async def read_message(self) -> dict[str, Any] | None:
        """Read one Content-Length framed DAP message.

        Returns None when the client closed the connection.
        """
        if self.reader is None:
            raise TransportError("No active connection", endpoint=f"{self.host}:{self.port}")

        headers: dict[str, str] = {}

        try:
            while True:
                line = await self.reader.readline()
                if not line:
                    self._is_connected = False
                    return None

                text = line.decode("utf-8").strip()
                if not text:
                    break

                key, sep, value = text.partition(":")
                if not sep:
                    raise ProtocolError(f"Malformed header line: {text!r}")
                headers[key.strip()] = value.strip()

            if CONTENT_LENGTH not in headers:
                raise ProtocolError("Content-Length header missing")

            content_length = int(headers[CONTENT_LENGTH])
            content = await self.reader.readexactly(content_length)
        except (asyncio.IncompleteReadError, ConnectionError):
            logger.debug("Connection closed while reading a message")
            self._is_connected = False
            return None

        message = json.loads(content.decode("utf-8"))
        logger.debug("Received message: %s", message)
        return message

    async def write_message(self, message: dict[str, Any]) -> None:
        """Write one DAP message with its Content-Length header."""
        if self.writer is None or self.writer.is_closing():
            raise TransportError("No active connection", endpoint=f"{self.host}:{self.port}")

        content = json.dumps(message).encode("utf-8")
        header = f"{CONTENT_LENGTH}: {len(content)}\r\n\r\n".encode()

        self.writer.write(header + content)
        await self.writer.drain()
        logger.debug("Sent message: %s", message)
