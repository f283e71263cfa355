"""Base provider connection interface and protocol data types."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, TYPE_CHECKING

from ..errors import JsonRpcError

if TYPE_CHECKING:
    from ..config import BridgeSettings

_log = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"


@dataclass(frozen=True)
class ProviderConfig:
    """One catalog entry: identity plus opaque connection parameters."""

    id: str
    display_name: str
    connection: Mapping[str, Any] = field(default_factory=dict)

    @property
    def transport(self) -> str:
        """Transport name, inferred from the connection parameters if unset."""
        explicit = self.connection.get("transport")
        if explicit:
            return str(explicit).lower()
        return "http" if self.connection.get("url") else "stdio"


@dataclass(frozen=True)
class ToolDescriptor:
    """A tool as advertised by a provider. Never mutated locally."""

    name: str
    description: str = ""
    input_schema: Optional[Mapping[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ToolDescriptor":
        """Build from a ``tools/list`` entry.

        Raises:
            ValueError: The entry is not an object or has no ``name``.
        """
        if not isinstance(data, Mapping):
            raise ValueError("tool entry is not an object")
        if not data.get("name"):
            raise ValueError("tool entry has no 'name'")
        return cls(
            name=str(data["name"]),
            description=str(data.get("description") or ""),
            input_schema=data.get("inputSchema"),
        )


@dataclass(frozen=True)
class ContentSegment:
    """A typed piece of a tool call result (text, image, resource...)."""

    kind: str
    text: Optional[str] = None
    data: Optional[str] = None
    mime_type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ContentSegment":
        return cls(
            kind=str(data.get("type", "")),
            text=data.get("text"),
            data=data.get("data"),
            mime_type=data.get("mimeType"),
        )


@dataclass(frozen=True)
class CallToolResult:
    """Result of ``tools/call``: content segments and the error flag."""

    content: tuple[ContentSegment, ...] = ()
    is_error: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CallToolResult":
        return cls(
            content=tuple(ContentSegment.from_dict(c) for c in data.get("content") or ()),
            is_error=bool(data.get("isError", False)),
        )


class ProviderClient(ABC):
    """A connection to one tool provider.

    Subclasses supply the transport (``_open``, ``_request``, ``_notify``,
    ``_close``); this class implements the protocol on top of it.
    """

    def __init__(self, config: ProviderConfig, settings: "BridgeSettings"):
        self.config = config
        self.settings = settings
        self.server_info: dict[str, Any] = {}
        self._connected = False

    @property
    def provider_id(self) -> str:
        return self.config.id

    @property
    def connected(self) -> bool:
        return self._connected

    @abstractmethod
    async def _open(self) -> None:
        """Establish the underlying transport."""

    @abstractmethod
    async def _request(
        self,
        method: str,
        params: Optional[dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> dict[str, Any]:
        """Send a JSON-RPC request and return its ``result`` member."""

    @abstractmethod
    async def _notify(self, method: str, params: Optional[dict[str, Any]] = None) -> None:
        """Send a JSON-RPC notification."""

    @abstractmethod
    async def _close(self) -> None:
        """Tear down the underlying transport."""

    async def connect(self) -> None:
        """Open the transport and run the initialize handshake."""
        await self._open()
        result = await self._request("initialize", {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {},
            "clientInfo": {
                "name": self.settings.client_name,
                "version": self.settings.client_version,
            },
        })
        self.server_info = dict(result.get("serverInfo") or {})
        await self._notify("notifications/initialized")
        self._connected = True
        _log.debug("Initialized provider %s (%s)", self.provider_id, self.server_info)

    async def list_tool_entries(self) -> list[Any]:
        """Return the raw ``tools/list`` entries across all pages, unvalidated."""
        entries: list[Any] = []
        cursor: Optional[str] = None
        while True:
            params = {"cursor": cursor} if cursor else None
            result = await self._request("tools/list", params)
            entries.extend(result.get("tools") or ())
            cursor = result.get("nextCursor")
            if not cursor:
                return entries

    async def list_tools(self) -> list[ToolDescriptor]:
        """Return the provider's full tool catalog, following pagination.

        Raises:
            ValueError: An entry is malformed.
        """
        return [ToolDescriptor.from_dict(t) for t in await self.list_tool_entries()]

    async def call_tool(
        self,
        name: str,
        arguments: Mapping[str, Any],
        timeout: Optional[float] = None,
    ) -> CallToolResult:
        """Invoke a tool by name and return its typed content."""
        result = await self._request(
            "tools/call",
            {"name": name, "arguments": dict(arguments)},
            timeout=timeout,
        )
        return CallToolResult.from_dict(result)

    async def aclose(self) -> None:
        self._connected = False
        await self._close()


def unwrap_response(message: Mapping[str, Any]) -> dict[str, Any]:
    """Return the ``result`` of a JSON-RPC response or raise its error."""
    if "error" in message and message["error"] is not None:
        error = message["error"]
        if isinstance(error, Mapping):
            raise JsonRpcError(error.get("code"), str(error.get("message", "Unknown error")), error.get("data"))
        raise JsonRpcError(None, str(error))
    return dict(message.get("result") or {})
