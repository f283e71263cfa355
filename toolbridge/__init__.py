"""toolbridge - expose MCP provider tools as locally callable functions."""

__version__ = "0.1.0"

from .config import BridgeSettings, load_provider_catalog
from .orchestrator import DiscoveryReport, DiscoveryResult, Orchestrator, ProviderOutcome
from .tools import CallableFunction, FunctionRegistry

__all__ = [
    "BridgeSettings",
    "CallableFunction",
    "DiscoveryReport",
    "DiscoveryResult",
    "FunctionRegistry",
    "Orchestrator",
    "ProviderOutcome",
    "load_provider_catalog",
]
