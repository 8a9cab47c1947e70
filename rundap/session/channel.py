"""Single outbound message channel for a run session.

Every response and event of a session is queued here and written by one
writer task, so messages from one source reach the client in the order they
were queued.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import cast

from rundap.errors import TransportError

if TYPE_CHECKING:
    from rundap.connections import ConnectionBase
    from rundap.protocol.messages import GenericEvent
    from rundap.protocol.messages import GenericRequest
    from rundap.protocol.protocol import ProtocolHandler

logger = logging.getLogger(__name__)

_CLOSE = object()


class EventChannel:
    """FIFO of outbound DAP messages drained by a writer task.

    Messages that cannot be written because the transport is gone are
    dropped; relayed output may legitimately outlive the client.
    """

    def __init__(self, connection: ConnectionBase, protocol_handler: ProtocolHandler) -> None:
        self.connection = connection
        self.protocol_handler = protocol_handler
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._writer_task: asyncio.Task[None] | None = None
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        if self._writer_task is None:
            self._writer_task = asyncio.create_task(self._run(), name="rundap-event-channel")

    def send(self, message: dict[str, Any]) -> None:
        """Queue ``message``, stamping a sequence number if it has none."""
        if self._closed:
            self.dropped += 1
            logger.debug("Channel closed, dropping %s", message.get("event") or message.get("command"))
            return

        if not message.get("seq"):
            message["seq"] = self.protocol_handler.factory.next_seq()
        self._queue.put_nowait(message)

    def send_event(self, event: GenericEvent) -> None:
        self.send(cast("dict[str, Any]", event))

    def send_response(
        self, request: GenericRequest, body: dict[str, Any] | None = None
    ) -> None:
        response = self.protocol_handler.create_response(request, True, body)
        self.send(cast("dict[str, Any]", response))

    def send_error_response(self, request: GenericRequest, error_message: str) -> None:
        response = self.protocol_handler.create_error_response(request, error_message)
        self.send(cast("dict[str, Any]", response))

    async def _run(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                if message is _CLOSE:
                    return
                await self._write(message)
            finally:
                self._queue.task_done()

    async def _write(self, message: dict[str, Any]) -> None:
        try:
            await self.connection.write_message(message)
        except (TransportError, ConnectionError) as e:
            self.dropped += 1
            logger.debug("Transport not writable, dropped message seq=%s: %s", message.get("seq"), e)
        except Exception:
            logger.exception("Error sending message")

    async def flush(self) -> None:
        """Wait until everything queued so far has been written or dropped."""
        if self._writer_task is not None and not self._writer_task.done():
            await self._queue.join()

    async def close(self) -> None:
        """Drain pending messages, then stop the writer task."""
        if self._closed:
            return
        self._closed = True

        task = self._writer_task
        if task is None:
            return
        if not task.done():
            self._queue.put_nowait(_CLOSE)
        with contextlib.suppress(asyncio.CancelledError):
            await task
