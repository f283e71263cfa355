"""HTTP transport: JSON-RPC 2.0 over POST with optional SSE responses."""

import itertools
import json
from typing import Any, Optional

import httpx

from .base import ProviderClient, unwrap_response
from .registry import register_transport

SESSION_HEADER = "Mcp-Session-Id"


def _parse_event_stream(body: str, request_id: Any) -> Optional[dict[str, Any]]:
    """Find the JSON-RPC response for ``request_id`` in an SSE body."""
    data_lines: list[str] = []
    for line in body.splitlines() + [""]:
        if line.startswith("data:"):
            data_lines.append(line[5:].lstrip())
            continue
        if line or not data_lines:
            continue
        # Blank line terminates an event
        try:
            message = json.loads("\n".join(data_lines))
        except json.JSONDecodeError:
            message = None
        data_lines = []
        if isinstance(message, dict) and message.get("id") == request_id:
            return message
    return None


@register_transport("http")
class HttpClient(ProviderClient):
    """Provider reachable at an HTTP endpoint (``url``, optional ``headers``)."""

    def __init__(self, config, settings):
        super().__init__(config, settings)
        self.url = str(config.connection.get("url", ""))
        self.headers = {str(k): str(v) for k, v in (config.connection.get("headers") or {}).items()}
        self.client: Optional[httpx.AsyncClient] = None
        self._ids = itertools.count(1)
        self._session_id: Optional[str] = None

    async def _open(self) -> None:
        if not self.url.startswith(("http://", "https://")):
            raise ValueError(f"Invalid endpoint '{self.url}'. Must be http or https.")
        self.client = httpx.AsyncClient(timeout=self.settings.request_timeout)

    def _build_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json, text/event-stream",
            **self.headers,
        }
        if self._session_id:
            headers[SESSION_HEADER] = self._session_id
        return headers

    async def _post(self, payload: dict[str, Any], timeout: Optional[float]) -> httpx.Response:
        if self.client is None:
            raise RuntimeError(f"Provider '{self.provider_id}' is not connected")
        kwargs: dict[str, Any] = {"json": payload, "headers": self._build_headers()}
        if timeout is not None:
            kwargs["timeout"] = timeout
        response = await self.client.post(self.url, **kwargs)
        response.raise_for_status()
        session_id = response.headers.get(SESSION_HEADER)
        if session_id:
            self._session_id = session_id
        return response

    async def _request(self, method, params=None, timeout=None):
        request_id = next(self._ids)
        payload: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
        if params is not None:
            payload["params"] = params

        response = await self._post(payload, timeout)
        content_type = response.headers.get("content-type", "")
        if content_type.startswith("text/event-stream"):
            message = _parse_event_stream(response.text, request_id)
            if message is None:
                raise RuntimeError(f"No response to '{method}' in event stream")
        else:
            message = response.json()
        return unwrap_response(message)

    async def _notify(self, method, params=None):
        payload: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if params is not None:
            payload["params"] = params
        await self._post(payload, None)

    async def _close(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None
