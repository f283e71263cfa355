"""Shared fixtures for toolbridge tests."""

import json

import pytest

from toolbridge.config import BridgeSettings
from toolbridge.providers.base import ProviderConfig

from fakes import FakeClient


@pytest.fixture
def settings(tmp_path):
    return BridgeSettings(config_path=str(tmp_path / "mcpservices.json"), request_timeout=5.0)


@pytest.fixture
def provider_config():
    return ProviderConfig(id="github", display_name="GitHub", connection={"command": "github-mcp"})


@pytest.fixture
def fake_client(provider_config, settings):
    return FakeClient(provider_config, settings)


@pytest.fixture
def write_catalog(tmp_path):
    """Write a catalog document and return its path."""
    def _write(data, name="mcpservices.json"):
        path = tmp_path / name
        if isinstance(data, str):
            path.write_text(data)
        else:
            path.write_text(json.dumps(data))
        return str(path)
    return _write
