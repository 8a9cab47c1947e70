"""Owned handle for the runtime child process.

The handle spawns the process, pumps its stdout/stderr into a callback chunk
by chunk, and reports the exit status once both streams are drained. Use it
as an async context manager so the relay is always released, including when
the spawn itself fails.
"""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import logging
from typing import TYPE_CHECKING
from typing import Callable

from rundap.config.runner_config import SIGNAL_EXIT_CODE
from rundap.errors import LaunchError

if TYPE_CHECKING:
    from collections.abc import Mapping
    import types

    from rundap.protocol.messages import OutputCategory

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 4096

OutputCallback = Callable[["OutputCategory", str], None]
ExitCallback = Callable[[int], None]


class ChildProcess:
    """One spawned runtime process and the tasks relaying its output.

    Example:
        async with ChildProcess(["java", "-cp", "out", "Main"]) as child:
            child.start_relay(on_output, on_exit)
            await child.wait()
    """

    def __init__(
        self,
        command: list[str],
        *,
        env: Mapping[str, str] | None = None,
        cwd: str | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        signal_exit_code: int = SIGNAL_EXIT_CODE,
    ) -> None:
        self.command = list(command)
        self.env = dict(env) if env is not None else None
        self.cwd = cwd
        self.chunk_size = chunk_size
        self.signal_exit_code = signal_exit_code
        self._process: asyncio.subprocess.Process | None = None
        self._relay_task: asyncio.Task[None] | None = None
        self._termination_sent = False

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    @property
    def returncode(self) -> int | None:
        return self._process.returncode if self._process is not None else None

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    @property
    def termination_sent(self) -> bool:
        return self._termination_sent

    async def spawn(self) -> None:
        """Create the OS process without blocking the event loop.

        Raises:
            LaunchError: If the OS refuses to start the binary, or the
                command cannot be passed to it (e.g. an embedded NUL).
        """
        if self._process is not None:
            raise RuntimeError("Process already spawned")

        try:
            self._process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.cwd,
                env=self.env,
            )
        except (OSError, ValueError, TypeError) as e:
            binary = self.command[0] if self.command else None
            raise LaunchError(f"Failed to start {binary}", binary=binary, cause=e) from e

        logger.info("Started process pid=%s argv=%s", self._process.pid, self.command)

    def start_relay(self, on_output: OutputCallback, on_exit: ExitCallback) -> None:
        """Start forwarding output and the exit status to the callbacks."""
        if self._process is None:
            raise RuntimeError("start_relay called before spawn")
        if self._relay_task is not None:
            return
        self._relay_task = asyncio.create_task(
            self._relay(on_output, on_exit), name=f"rundap-relay-{self._process.pid}"
        )

    async def _relay(self, on_output: OutputCallback, on_exit: ExitCallback) -> None:
        process = self._process
        assert process is not None

        await asyncio.gather(
            self._pump(process.stdout, "stdout", on_output),
            self._pump(process.stderr, "stderr", on_output),
        )
        returncode = await process.wait()
        exit_code = self.map_exit_code(returncode)
        logger.info("Process pid=%s exited with %s (reported as %s)", process.pid, returncode, exit_code)
        on_exit(exit_code)

    async def _pump(
        self,
        stream: asyncio.StreamReader | None,
        category: OutputCategory,
        on_output: OutputCallback,
    ) -> None:
        if stream is None:
            return

        # Chunks can split a multi-byte character; the incremental decoder
        # carries the partial bytes over to the next chunk.
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await stream.read(self.chunk_size)
            if not chunk:
                break
            text = decoder.decode(chunk)
            if text:
                logger.debug("[%s] %s", category, text.rstrip("\n"))
                on_output(category, text)

        tail = decoder.decode(b"", final=True)
        if tail:
            on_output(category, tail)

    def map_exit_code(self, returncode: int | None) -> int:
        """Exit code to report; signal deaths map to ``signal_exit_code``."""
        if returncode is None or returncode < 0:
            return self.signal_exit_code
        return returncode

    def terminate(self) -> bool:
        """Ask the process to stop with a graceful signal (SIGTERM on POSIX).

        The signal is sent at most once; returns True only for the call that
        actually sent it.
        """
        if not self.is_running or self._termination_sent:
            return False

        assert self._process is not None
        try:
            self._process.terminate()
        except ProcessLookupError:
            logger.debug("Process pid=%s already gone", self._process.pid)
            return False

        self._termination_sent = True
        logger.info("Sent termination signal to pid=%s", self._process.pid)
        return True

    async def wait(self, timeout: float | None = None) -> bool:
        """Wait for the relay to finish; returns False on timeout."""
        if self._relay_task is None:
            if self._process is None:
                return True
            try:
                await asyncio.wait_for(self._process.wait(), timeout=timeout)
            except asyncio.TimeoutError:
                return False
            return True

        try:
            await asyncio.wait_for(asyncio.shield(self._relay_task), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def aclose(self) -> None:
        """Release the relay; a still-running process is left to exit on its own."""
        task = self._relay_task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        elif task is not None and not task.cancelled() and task.exception() is not None:
            logger.error("Relay for pid=%s failed", self.pid, exc_info=task.exception())

        if self.is_running:
            logger.warning("Process pid=%s still running at release", self.pid)

    async def __aenter__(self) -> ChildProcess:
        await self.spawn()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        await self.aclose()
