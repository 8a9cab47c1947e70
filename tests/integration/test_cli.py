from __future__ import annotations

import asyncio
import sys

import pytest

from rundap.adapter import PORT_ANNOUNCEMENT


@pytest.mark.asyncio
async def test_cli_announces_port_and_exits_after_client_leaves(dap_connect):
    proc = await asyncio.create_subprocess_exec(
        sys.executable,
        "-m",
        "rundap",
        "--log-level",
        "DEBUG",
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.DEVNULL,
    )
    try:
        line = await asyncio.wait_for(proc.stdout.readline(), timeout=15)
        name, _, value = line.decode().strip().partition("=")
        assert name == PORT_ANNOUNCEMENT
        port = int(value)

        client = await dap_connect(port)
        response = await client.wait_for_response(await client.send("initialize", {}))
        assert response["success"] is True
        await client.wait_for_event("initialized")
        await client.close()

        assert await asyncio.wait_for(proc.wait(), timeout=15) == 0
    finally:
        if proc.returncode is None:
            proc.kill()
            await proc.wait()
