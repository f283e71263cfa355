"""Wrap remote tools as locally invokable functions."""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional

from ..errors import ToolInvocationError
from ..providers.base import ContentSegment, ProviderClient, ToolDescriptor
from .coercion import coerce_argument
from .schema import ParameterMetadata, schema_to_parameters

_log = logging.getLogger(__name__)

Invoker = Callable[[Mapping[str, Any], Optional[float]], Awaitable[str]]


@dataclass(frozen=True)
class CallableFunction:
    """A remote tool exposed as a local async function returning text."""

    name: str
    description: str
    parameters: Optional[tuple[ParameterMetadata, ...]]
    provider_id: str
    invoker: Invoker

    def parameter(self, name: str) -> Optional[ParameterMetadata]:
        for param in self.parameters or ():
            if param.name == name:
                return param
        return None

    async def invoke(
        self,
        arguments: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Call the remote tool.

        Args:
            arguments: Caller arguments by name. None values are dropped.
            timeout: Seconds to wait for the remote call before failing.

        Returns:
            The text segments of the result joined with newlines.

        Raises:
            CoercionError: An argument does not fit its declared type.
            ToolInvocationError: The remote call failed or reported an error.
        """
        return await self.invoker(arguments or {}, timeout)


def extract_text(segments: Iterable[ContentSegment]) -> str:
    """Join the text of every ``text`` segment, dropping other media."""
    return "\n".join(s.text or "" for s in segments if s.kind == "text")


def build_arguments(
    parameters: Optional[tuple[ParameterMetadata, ...]],
    arguments: Mapping[str, Any],
) -> dict[str, Any]:
    """Coerce known arguments, pass unknown ones through, drop None values."""
    by_name = {p.name: p for p in parameters or ()}
    final: dict[str, Any] = {}
    for name, value in arguments.items():
        if value is None:
            continue
        param = by_name.get(name)
        final[name] = coerce_argument(param, value) if param is not None else value
    return final


def tool_to_function(client: ProviderClient, tool: ToolDescriptor) -> CallableFunction:
    """Build a CallableFunction for one tool of a connected provider.

    Raises:
        SchemaConversionError: The tool's input schema is unusable.
    """
    parameters = schema_to_parameters(tool.name, tool.input_schema)

    async def invoke_tool(arguments: Mapping[str, Any], timeout: Optional[float]) -> str:
        call_args = build_arguments(parameters, arguments)
        try:
            result = await client.call_tool(tool.name, call_args, timeout=timeout)
        except Exception as e:
            _log.error("Error calling tool '%s' on %s: %s", tool.name, client.provider_id, e)
            raise ToolInvocationError(tool.name, str(e) or type(e).__name__) from e

        text = extract_text(result.content)
        if result.is_error:
            _log.error("Tool '%s' on %s reported an error: %s", tool.name, client.provider_id, text)
            raise ToolInvocationError(tool.name, text or "provider reported an error")
        return text

    return CallableFunction(
        name=tool.name,
        description=tool.description,
        parameters=parameters,
        provider_id=client.provider_id,
        invoker=invoke_tool,
    )
