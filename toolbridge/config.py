"""Settings and provider catalog loading."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigNotFoundError, ConfigParseError, ProviderNotConfiguredError
from .providers.base import ProviderConfig

DEFAULT_CONFIG_PATH = "mcpservices.json"
CONFIG_PATH_ENV_VAR = "MCP_CONFIG_PATH"
TIMEOUT_ENV_VAR = "MCP_REQUEST_TIMEOUT"
CLIENT_NAME_ENV_VAR = "MCP_CLIENT_NAME"
CONCURRENT_ENV_VAR = "MCP_CONCURRENT_DISCOVERY"

CATALOG_FIELDS = ("providers", "McpServices")

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class BridgeSettings:
    """Runtime settings, resolved explicit argument -> environment -> default."""

    config_path: str = DEFAULT_CONFIG_PATH
    request_timeout: float = 30.0
    client_name: str = "toolbridge"
    client_version: str = "0.1.0"
    concurrent: bool = True

    @classmethod
    def resolve(
        cls,
        config_path: Optional[str] = None,
        request_timeout: Optional[float] = None,
        client_name: Optional[str] = None,
        concurrent: Optional[bool] = None,
    ) -> "BridgeSettings":
        if request_timeout is None:
            raw_timeout = os.getenv(TIMEOUT_ENV_VAR)
            request_timeout = float(raw_timeout) if raw_timeout else cls.request_timeout
        if concurrent is None:
            raw_concurrent = os.getenv(CONCURRENT_ENV_VAR)
            concurrent = (
                raw_concurrent.strip().lower() not in _FALSE_VALUES
                if raw_concurrent else cls.concurrent
            )
        return cls(
            config_path=config_path or os.getenv(CONFIG_PATH_ENV_VAR) or DEFAULT_CONFIG_PATH,
            request_timeout=request_timeout,
            client_name=client_name or os.getenv(CLIENT_NAME_ENV_VAR) or cls.client_name,
            concurrent=concurrent,
        )


def _resolve_env_var(value: str) -> str:
    """Resolve environment variable references like ${VAR_NAME}."""
    if not value.startswith("${") or not value.endswith("}"):
        return value

    var_name = value[2:-1]
    return os.getenv(var_name, "")


def _resolve_values(value: Any) -> Any:
    if isinstance(value, str):
        return _resolve_env_var(value)
    if isinstance(value, dict):
        return {k: _resolve_values(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_values(v) for v in value]
    return value


def _read_document(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigParseError(str(path), str(e)) from e

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(str(path), str(e)) from e


def parse_catalog(data: Any, source: str = "<catalog>") -> list[ProviderConfig]:
    """Turn a parsed catalog document into ProviderConfig entries."""
    if not isinstance(data, dict):
        raise ConfigParseError(source, "top level must be an object")

    entries = None
    for field_name in CATALOG_FIELDS:
        if field_name in data:
            entries = data[field_name]
            break
    if entries is None:
        raise ConfigParseError(source, f"missing '{CATALOG_FIELDS[0]}' array")
    if not isinstance(entries, list):
        raise ConfigParseError(source, f"'{field_name}' must be an array")

    configs: list[ProviderConfig] = []
    seen: set[str] = set()
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ConfigParseError(source, f"entry {index} is not an object")
        entry = dict(entry)
        id_lower, id_upper = entry.pop("id", None), entry.pop("Id", None)
        provider_id = id_lower or id_upper
        if not provider_id:
            raise ConfigParseError(source, f"entry {index} has no 'id'")
        provider_id = str(provider_id)
        if provider_id in seen:
            raise ConfigParseError(source, f"duplicate provider id '{provider_id}'")
        seen.add(provider_id)

        name, alt_name = entry.pop("name", None), entry.pop("display_name", None)
        display_name = name or alt_name or provider_id
        configs.append(ProviderConfig(
            id=provider_id,
            display_name=str(display_name),
            connection=_resolve_values(entry),
        ))
    return configs


def load_provider_catalog(config_path: Optional[str] = None) -> list[ProviderConfig]:
    """Load the provider catalog from disk.

    The path is the explicit argument, else ``$MCP_CONFIG_PATH``, else
    ``mcpservices.json`` in the working directory.

    Raises:
        ConfigNotFoundError: The file does not exist.
        ConfigParseError: The file cannot be read or is not a valid catalog.
    """
    path = Path(config_path or os.getenv(CONFIG_PATH_ENV_VAR) or DEFAULT_CONFIG_PATH).expanduser()
    if not path.is_file():
        raise ConfigNotFoundError(str(path))
    return parse_catalog(_read_document(path), str(path))


def get_provider_config(catalog: list[ProviderConfig], provider_id: str) -> ProviderConfig:
    """Return the catalog entry for ``provider_id``."""
    for config in catalog:
        if config.id == provider_id:
            return config
    raise ProviderNotConfiguredError(provider_id)
