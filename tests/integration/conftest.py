"""Fixtures for end-to-end run session tests.

``fake_java_home`` builds a throwaway installation root whose ``bin/java`` is
a shell script, so the whole launch path runs without a real JDK.
``dap_connect`` opens a minimal DAP client against a session's port.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
import stat
import sys
from typing import Any
from typing import Callable

import pytest

from rundap.protocol import ProtocolFactory

if sys.platform.startswith("win"):
    collect_ignore_glob = ["test_*.py"]


class DapClient:
    """Just enough of a DAP front end to drive a run session."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.reader = reader
        self.writer = writer
        self.factory = ProtocolFactory()
        self.received: list[dict[str, Any]] = []

    @classmethod
    async def connect(cls, port: int, host: str = "127.0.0.1") -> DapClient:
        reader, writer = await asyncio.open_connection(host, port)
        return cls(reader, writer)

    async def send(self, command: str, arguments: dict[str, Any] | None = None) -> int:
        request = self.factory.create_request(command, arguments)
        content = json.dumps(request).encode("utf-8")
        self.writer.write(f"Content-Length: {len(content)}\r\n\r\n".encode() + content)
        await self.writer.drain()
        return request["seq"]

    async def _read_one(self) -> dict[str, Any] | None:
        headers: dict[str, str] = {}
        while True:
            line = await self.reader.readline()
            if not line:
                return None
            text = line.decode("utf-8").strip()
            if not text:
                break
            key, _, value = text.partition(":")
            headers[key.strip()] = value.strip()

        content = await self.reader.readexactly(int(headers["Content-Length"]))
        message = json.loads(content.decode("utf-8"))
        self.received.append(message)
        return message

    async def wait_for(
        self, predicate: Callable[[dict[str, Any]], bool], timeout: float = 10.0
    ) -> dict[str, Any]:
        """Return the first received message matching ``predicate``."""
        for message in self.received:
            if predicate(message):
                return message

        async def _read_until_match() -> dict[str, Any]:
            while True:
                message = await self._read_one()
                if message is None:
                    raise ConnectionError("Session closed the connection")
                if predicate(message):
                    return message

        return await asyncio.wait_for(_read_until_match(), timeout=timeout)

    async def wait_for_response(self, request_seq: int, timeout: float = 10.0) -> dict[str, Any]:
        return await self.wait_for(
            lambda m: m.get("type") == "response" and m.get("request_seq") == request_seq,
            timeout,
        )

    async def wait_for_event(self, name: str, timeout: float = 10.0) -> dict[str, Any]:
        return await self.wait_for(
            lambda m: m.get("type") == "event" and m.get("event") == name, timeout
        )

    async def drain(self, quiet: float = 0.3) -> None:
        """Read until nothing arrives for ``quiet`` seconds or the peer closes."""
        while True:
            try:
                message = await asyncio.wait_for(self._read_one(), timeout=quiet)
            except asyncio.TimeoutError:
                return
            if message is None:
                return

    def events(self, name: str) -> list[dict[str, Any]]:
        return [m for m in self.received if m.get("type") == "event" and m.get("event") == name]

    def output(self, category: str) -> str:
        return "".join(
            e["body"]["output"] for e in self.events("output") if e["body"]["category"] == category
        )

    async def close(self) -> None:
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except ConnectionError:
            pass


@pytest.fixture
def dap_connect():
    """Async factory: ``client = await dap_connect(port)``."""
    return DapClient.connect


@pytest.fixture
def fake_java_home(tmp_path: Path) -> Callable[[str], dict[str, str]]:
    """Factory: ``env = fake_java_home(script_body)``.

    Returns an environment with JAVA_HOME pointing at a root whose
    ``bin/java`` runs ``script_body`` under ``/bin/sh``.
    """

    def _make(script_body: str) -> dict[str, str]:
        bin_dir = tmp_path / "jdk" / "bin"
        bin_dir.mkdir(parents=True, exist_ok=True)
        java = bin_dir / "java"
        java.write_text(f"#!/bin/sh\n{script_body}\n")
        java.chmod(java.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

        env = dict(os.environ)
        env["JAVA_HOME"] = str(tmp_path / "jdk")
        return env

    return _make
