"""Stdio transport: newline-delimited JSON-RPC with a child process."""

import asyncio
import itertools
import json
import logging
import os
import shlex
from typing import Any, Optional

from .base import ProviderClient, unwrap_response
from .registry import register_transport

_log = logging.getLogger(__name__)

# Tool catalogs can be far larger than asyncio's 64 KiB default line limit
STREAM_LIMIT = 16 * 1024 * 1024


def _split_args(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return shlex.split(raw)
    return [str(a) for a in raw]


@register_transport("stdio")
class StdioClient(ProviderClient):
    """Provider launched as a subprocess (``command``, ``args``, ``env``, ``cwd``)."""

    def __init__(self, config, settings):
        super().__init__(config, settings)
        conn = config.connection
        self.command = str(conn.get("command", ""))
        self.args = _split_args(conn.get("args", conn.get("arguments")))
        self.env = {str(k): str(v) for k, v in (conn.get("env") or {}).items()}
        self.cwd = conn.get("cwd")
        self.process: Optional[asyncio.subprocess.Process] = None
        self._ids = itertools.count(1)
        self._pending: dict[int, asyncio.Future] = {}
        self._reader: Optional[asyncio.Task] = None

    async def _open(self) -> None:
        if not self.command:
            raise ValueError("stdio transport requires a 'command'")
        self.process = await asyncio.create_subprocess_exec(
            self.command,
            *self.args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
            env={**os.environ, **self.env},
            cwd=self.cwd,
            limit=STREAM_LIMIT,
        )
        self._reader = asyncio.ensure_future(self._read_loop())

    async def _read_loop(self) -> None:
        assert self.process is not None and self.process.stdout is not None
        try:
            while True:
                line = await self.process.stdout.readline()
                if not line:
                    break
                try:
                    message = json.loads(line)
                except json.JSONDecodeError:
                    _log.debug("Ignoring non-JSON output from %s: %r", self.provider_id, line[:200])
                    continue
                if not isinstance(message, dict):
                    continue
                future = self._pending.pop(message.get("id"), None) if "id" in message else None
                if future is not None and not future.done():
                    future.set_result(message)
        finally:
            # Process exited or reader cancelled: fail anything still waiting
            for future in self._pending.values():
                if not future.done():
                    future.set_exception(ConnectionError(f"Provider '{self.provider_id}' closed its stdout"))
            self._pending.clear()

    async def _write(self, payload: dict[str, Any]) -> None:
        if self.process is None or self.process.stdin is None:
            raise RuntimeError(f"Provider '{self.provider_id}' is not connected")
        self.process.stdin.write(json.dumps(payload).encode("utf-8") + b"\n")
        await self.process.stdin.drain()

    async def _request(self, method, params=None, timeout=None):
        request_id = next(self._ids)
        payload: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
        if params is not None:
            payload["params"] = params

        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            await self._write(payload)
            message = await asyncio.wait_for(future, timeout or self.settings.request_timeout)
        finally:
            self._pending.pop(request_id, None)
        return unwrap_response(message)

    async def _notify(self, method, params=None):
        payload: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if params is not None:
            payload["params"] = params
        await self._write(payload)

    async def _close(self) -> None:
        if self._reader is not None:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None
        if self.process is not None:
            if self.process.stdin is not None:
                self.process.stdin.close()
            if self.process.returncode is None:
                try:
                    self.process.terminate()
                except ProcessLookupError:
                    pass
                try:
                    await asyncio.wait_for(self.process.wait(), 5)
                except asyncio.TimeoutError:
                    self.process.kill()
                    await self.process.wait()
            self.process = None
