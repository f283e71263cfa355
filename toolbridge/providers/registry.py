"""Self-registering transport registry.

Transports register themselves via the @register_transport decorator.
Call discover_transports() once at startup to import all transport modules,
which triggers the decorators and populates the registry.
"""

import importlib
import pkgutil
import sys
from typing import Dict, Type, TYPE_CHECKING

from ..errors import ProviderConnectError
from .base import ProviderClient, ProviderConfig

if TYPE_CHECKING:
    from ..config import BridgeSettings

_REGISTRY: Dict[str, Type[ProviderClient]] = {}


def register_transport(name: str):
    """Decorator that registers a client class under a transport name.

    Usage:
        @register_transport("stdio")
        class StdioClient(ProviderClient):
            ...
    """
    def decorator(cls: Type[ProviderClient]):
        if not issubclass(cls, ProviderClient):
            raise TypeError(f"{cls.__name__} must be a subclass of ProviderClient")
        _REGISTRY[name] = cls
        return cls
    return decorator


def discover_transports() -> None:
    """Import all modules in the providers package to trigger @register_transport decorators.

    If a module is already imported (cached in sys.modules), it is reloaded
    so that the decorators re-execute. This keeps the registry consistent
    even after clear_registry().
    """
    package = importlib.import_module("toolbridge.providers")
    for _importer, module_name, _is_pkg in pkgutil.iter_modules(package.__path__):
        if module_name in ("base", "registry", "__init__"):
            continue
        fqn = f"toolbridge.providers.{module_name}"
        if fqn in sys.modules:
            importlib.reload(sys.modules[fqn])
        else:
            importlib.import_module(fqn)


def get_registry() -> Dict[str, Type[ProviderClient]]:
    """Return the current transport registry (name -> class)."""
    return dict(_REGISTRY)


def clear_registry() -> None:
    """Clear the registry. Primarily for testing."""
    _REGISTRY.clear()


def create_client(config: ProviderConfig, settings: "BridgeSettings") -> ProviderClient:
    """Build an unconnected client for a provider using its transport."""
    if not _REGISTRY:
        discover_transports()
    client_cls = _REGISTRY.get(config.transport)
    if client_cls is None:
        raise ProviderConnectError(
            config.id,
            f"unknown transport '{config.transport}'. Available: {sorted(_REGISTRY)}",
        )
    return client_cls(config, settings)
