"""Multi-provider discovery.

Connects to every configured provider, lists its tools, and turns each tool
into a CallableFunction. Every provider is processed independently: a
provider that cannot be reached or cannot list its tools is recorded as
failed in the discovery report and the others carry on.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .config import BridgeSettings, get_provider_config, load_provider_catalog
from .errors import BridgeError, ProviderConnectError, SchemaConversionError, ToolListError
from .providers.base import ProviderClient, ProviderConfig, ToolDescriptor
from .providers.registry import create_client
from .tools.adapter import CallableFunction, tool_to_function
from .tools.registry import FunctionRegistry

_log = logging.getLogger(__name__)

ClientFactory = Callable[[ProviderConfig, BridgeSettings], ProviderClient]


@dataclass(frozen=True)
class ProviderOutcome:
    """What discovery produced for one provider."""

    provider_id: str
    display_name: str
    tools: tuple[str, ...] = ()
    skipped: tuple[tuple[str, str], ...] = ()
    error: Optional[BridgeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DiscoveryReport:
    """Per-provider outcomes, in the order providers finished."""

    outcomes: dict[str, ProviderOutcome] = field(default_factory=dict)

    @property
    def succeeded(self) -> list[ProviderOutcome]:
        return [o for o in self.outcomes.values() if o.ok]

    @property
    def failed(self) -> list[ProviderOutcome]:
        return [o for o in self.outcomes.values() if not o.ok]


@dataclass
class DiscoveryResult:
    """Functions grouped by provider id, plus the discovery report.

    Each provider key is written once. Results recorded before a
    cancellation stay intact.
    """

    functions: dict[str, tuple[CallableFunction, ...]] = field(default_factory=dict)
    report: DiscoveryReport = field(default_factory=DiscoveryReport)

    def record(self, outcome: ProviderOutcome, functions: tuple[CallableFunction, ...] = ()) -> None:
        if outcome.provider_id in self.report.outcomes:
            raise ValueError(f"Provider '{outcome.provider_id}' already recorded")
        if outcome.ok:
            self.functions[outcome.provider_id] = functions
        self.report.outcomes[outcome.provider_id] = outcome


class Orchestrator:
    """Discover tools across all providers and keep their connections open.

    Use as an async context manager; leaving it closes every connection,
    after which the discovered functions can no longer be invoked.
    """

    def __init__(
        self,
        catalog: list[ProviderConfig],
        settings: Optional[BridgeSettings] = None,
        client_factory: ClientFactory = create_client,
    ):
        self.catalog = list(catalog)
        ids = [c.id for c in self.catalog]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Provider ids must be unique: {ids}")
        self.settings = settings or BridgeSettings.resolve()
        self._client_factory = client_factory
        self._clients: dict[str, ProviderClient] = {}

    @classmethod
    def from_settings(cls, settings: Optional[BridgeSettings] = None) -> "Orchestrator":
        """Load the catalog named by ``settings``. Config errors propagate."""
        settings = settings or BridgeSettings.resolve()
        return cls(load_provider_catalog(settings.config_path), settings)

    @property
    def clients(self) -> dict[str, ProviderClient]:
        return dict(self._clients)

    async def __aenter__(self) -> "Orchestrator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        for provider_id in list(self._clients):
            await self._discard(provider_id)

    async def _discard(self, provider_id: str) -> None:
        client = self._clients.pop(provider_id, None)
        if client is None:
            return
        try:
            await client.aclose()
        except Exception as e:
            _log.warning("Error closing provider %s: %s", provider_id, e)

    async def _connect(self, config: ProviderConfig) -> ProviderClient:
        existing = self._clients.get(config.id)
        if existing is not None:
            if existing.connected:
                return existing
            # Left half-open by an interrupted handshake
            await self._discard(config.id)

        try:
            client = self._client_factory(config, self.settings)
        except ProviderConnectError:
            raise
        except Exception as e:
            raise ProviderConnectError(config.id, str(e) or type(e).__name__) from e

        self._clients[config.id] = client
        try:
            await client.connect()
        except asyncio.CancelledError:
            await self._discard(config.id)
            raise
        except Exception as e:
            await self._discard(config.id)
            raise ProviderConnectError(config.id, str(e) or type(e).__name__) from e
        return client

    async def connect_one(self, provider_id: str) -> ProviderClient:
        """Connect a single provider by id.

        Raises:
            ProviderNotConfiguredError: The id is not in the catalog.
            ProviderConnectError: The connection failed.
        """
        return await self._connect(get_provider_config(self.catalog, provider_id))

    async def _process_provider(self, config: ProviderConfig, result: DiscoveryResult) -> None:
        try:
            client = await self._connect(config)
        except ProviderConnectError as e:
            _log.error("Cannot create client for provider '%s': %s", config.id, e.reason)
            result.record(ProviderOutcome(config.id, config.display_name, error=e))
            return
        _log.info("Connected to provider: %s", config.id)

        try:
            entries = await client.list_tool_entries()
        except Exception as e:
            error = ToolListError(config.id, str(e) or type(e).__name__)
            _log.error("Error processing provider %s: %s", config.id, error.reason)
            await self._discard(config.id)
            result.record(ProviderOutcome(config.id, config.display_name, error=error))
            return

        _log.info("Provider %s exposes %d tools", config.id, len(entries))
        functions: list[CallableFunction] = []
        skipped: list[tuple[str, str]] = []
        seen: set[str] = set()
        for index, entry in enumerate(entries):
            try:
                tool = ToolDescriptor.from_dict(entry)
            except ValueError as e:
                label = f"<entry {index}>"
                _log.warning("Skipping tool %s of %s: %s", label, config.id, e)
                skipped.append((label, str(e)))
                continue
            if tool.name in seen:
                _log.warning("Skipping duplicate tool '%s' of %s", tool.name, config.id)
                skipped.append((tool.name, "duplicate tool name"))
                continue
            try:
                functions.append(tool_to_function(client, tool))
            except SchemaConversionError as e:
                _log.warning("Skipping tool '%s' of %s: %s", tool.name, config.id, e.reason)
                skipped.append((tool.name, e.reason))
                continue
            seen.add(tool.name)
            _log.debug("  - %s: %s", tool.name, tool.description)

        result.record(
            ProviderOutcome(
                config.id,
                config.display_name,
                tools=tuple(fn.name for fn in functions),
                skipped=tuple(skipped),
            ),
            tuple(functions),
        )

    async def discover(
        self,
        registry: Optional[FunctionRegistry] = None,
        result: Optional[DiscoveryResult] = None,
    ) -> DiscoveryResult:
        """Connect to every provider and build its functions.

        Args:
            registry: If given, each provider's functions are registered
                under its id once discovery completes.
            result: Result to fill in. Pass one to keep the outcomes of
                already finished providers if discovery is cancelled.

        Returns:
            The discovery result. Provider failures are reported in it,
            never raised.
        """
        result = result if result is not None else DiscoveryResult()
        if self.settings.concurrent:
            await asyncio.gather(*(self._process_provider(c, result) for c in self.catalog))
        else:
            for config in self.catalog:
                await self._process_provider(config, result)

        if registry is not None:
            self.register(result, registry)
        return result

    @staticmethod
    def register(result: DiscoveryResult, registry: FunctionRegistry) -> FunctionRegistry:
        """Hand each provider's functions to ``registry``, namespaced by provider id.

        A provider whose names clash with ones already registered is left
        out and logged; the others are still registered.
        """
        for provider_id, functions in result.functions.items():
            try:
                registry.add_functions(provider_id, functions)
            except ValueError as e:
                _log.error("Cannot register functions of provider %s: %s", provider_id, e)
                continue
            _log.info("Added %d functions from provider %s", len(functions), provider_id)
        return registry
