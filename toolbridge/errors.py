"""Error taxonomy for the tool bridge.

Configuration errors are fatal and stop startup. Provider errors are
scoped to one provider, schema errors to one tool. Coercion and
invocation errors surface to whoever invoked the function.
"""

from typing import Any, Optional


class BridgeError(Exception):
    """Base class for every error raised by toolbridge."""


class ConfigNotFoundError(BridgeError):
    """The provider catalog file does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Provider catalog not found: {path}")
        self.path = path


class ConfigParseError(BridgeError):
    """The provider catalog exists but cannot be read or is invalid."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot parse provider catalog {path}: {reason}")
        self.path = path
        self.reason = reason


class ProviderNotConfiguredError(BridgeError):
    """No provider with the requested id is present in the catalog."""

    def __init__(self, provider_id: str):
        super().__init__(f"No provider configured with id '{provider_id}'")
        self.provider_id = provider_id


class ProviderConnectError(BridgeError):
    """Connecting to a single provider failed."""

    def __init__(self, provider_id: str, reason: str):
        super().__init__(f"Cannot connect to provider '{provider_id}': {reason}")
        self.provider_id = provider_id
        self.reason = reason


class ToolListError(BridgeError):
    """A connected provider failed to enumerate its tools."""

    def __init__(self, provider_id: str, reason: str):
        super().__init__(f"Cannot list tools of provider '{provider_id}': {reason}")
        self.provider_id = provider_id
        self.reason = reason


class SchemaConversionError(BridgeError):
    """A single tool's input schema is unusable."""

    def __init__(self, tool_name: str, reason: str):
        super().__init__(f"Unusable input schema for tool '{tool_name}': {reason}")
        self.tool_name = tool_name
        self.reason = reason


class CoercionError(BridgeError):
    """An argument cannot be converted to its declared type."""

    def __init__(self, parameter: str, semantic_type: str, value: Any):
        super().__init__(
            f"Cannot convert argument '{parameter}' value {value!r} to {semantic_type}"
        )
        self.parameter = parameter
        self.semantic_type = semantic_type
        self.value = value


class JsonRpcError(BridgeError):
    """A provider answered a request with a JSON-RPC error object."""

    def __init__(self, code: Optional[int], message: str, data: Any = None):
        super().__init__(f"{message} (code: {code if code is not None else 'unknown'})")
        self.code = code
        self.message = message
        self.data = data


class ToolInvocationError(BridgeError):
    """A remote tool call failed or reported an error.

    The underlying exception, when there is one, is chained as ``__cause__``.
    """

    def __init__(self, tool_name: str, reason: str):
        super().__init__(f"Tool '{tool_name}' failed: {reason}")
        self.tool_name = tool_name
        self.reason = reason
