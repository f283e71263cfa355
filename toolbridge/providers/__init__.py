"""Provider connections: protocol types, transports, and the transport registry."""

from .base import (
    CallToolResult,
    ContentSegment,
    ProviderClient,
    ProviderConfig,
    ToolDescriptor,
)
from .registry import create_client, discover_transports, register_transport

__all__ = [
    "CallToolResult",
    "ContentSegment",
    "ProviderClient",
    "ProviderConfig",
    "ToolDescriptor",
    "create_client",
    "discover_transports",
    "register_transport",
]
