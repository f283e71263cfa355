"""toolbridge CLI - discover and invoke tools across MCP providers."""

import asyncio
import json
import sys
from typing import Any, Optional

import click

from .config import BridgeSettings, load_provider_catalog
from .errors import BridgeError, ConfigNotFoundError, ConfigParseError
from .orchestrator import Orchestrator
from .tools.registry import FunctionRegistry
from .ui import configure_logging, console, render_catalog, render_error, render_report


def parse_argument(raw: str) -> tuple[str, Any]:
    """Split ``key=value``; the value is JSON-decoded when possible."""
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise click.BadParameter(f"expected key=value, got '{raw}'")
    try:
        return key, json.loads(value)
    except json.JSONDecodeError:
        return key, value


def _load(settings: BridgeSettings) -> Orchestrator:
    try:
        return Orchestrator.from_settings(settings)
    except (ConfigNotFoundError, ConfigParseError) as e:
        render_error(str(e))
        sys.exit(1)


async def _discover(orchestrator: Orchestrator) -> None:
    async with orchestrator:
        result = await orchestrator.discover()
    render_report(result.report)


async def _call(orchestrator: Orchestrator, name: str, arguments: dict, timeout: Optional[float]) -> str:
    async with orchestrator:
        registry = FunctionRegistry()
        result = await orchestrator.discover(registry)
        if not registry.has_function(name):
            for outcome in result.report.failed:
                render_error(str(outcome.error))
            raise click.ClickException(
                f"Function '{name}' not found. Available: {registry.function_names}"
            )
        return await registry.invoke(name, arguments, timeout=timeout)


async def _schema(orchestrator: Orchestrator) -> list[dict]:
    async with orchestrator:
        registry = FunctionRegistry()
        await orchestrator.discover(registry)
        return registry.tool_definitions()


@click.group()
@click.option("--config", "-c", "config_path", help="Provider catalog (default: $MCP_CONFIG_PATH or mcpservices.json)")
@click.option("--verbose", "-v", is_flag=True, help="Show discovery progress")
@click.pass_context
def cli(ctx, config_path, verbose):
    """TOOLBRIDGE - expose MCP provider tools as callable functions."""
    configure_logging(verbose)
    ctx.obj = {"config_path": config_path}


def _settings(ctx, **overrides) -> BridgeSettings:
    return BridgeSettings.resolve(config_path=ctx.obj["config_path"], **overrides)


@cli.command()
@click.pass_context
def providers(ctx):
    """List configured providers."""
    settings = _settings(ctx)
    try:
        catalog = load_provider_catalog(settings.config_path)
    except (ConfigNotFoundError, ConfigParseError) as e:
        render_error(str(e))
        sys.exit(1)
    render_catalog(catalog)


@cli.command()
@click.option("--sequential", is_flag=True, help="Connect to providers one at a time")
@click.pass_context
def discover(ctx, sequential):
    """Connect to every provider and report its tools."""
    settings = _settings(ctx, concurrent=False if sequential else None)
    asyncio.run(_discover(_load(settings)))


@cli.command()
@click.argument("name")
@click.option("--arg", "-a", "raw_args", multiple=True, help="Argument as key=value (repeatable)")
@click.option("--timeout", "-t", type=float, help="Seconds to wait for the tool")
@click.pass_context
def call(ctx, name, raw_args, timeout):
    """Invoke NAME (provider-tool) and print its text result."""
    arguments = dict(parse_argument(raw) for raw in raw_args)
    orchestrator = _load(_settings(ctx))
    try:
        output = asyncio.run(_call(orchestrator, name, arguments, timeout))
    except BridgeError as e:
        render_error(str(e))
        sys.exit(1)
    console.print(output, markup=False, highlight=False)


@cli.command()
@click.pass_context
def schema(ctx):
    """Print function-calling definitions for all discovered tools."""
    definitions = asyncio.run(_schema(_load(_settings(ctx))))
    click.echo(json.dumps(definitions, indent=2))


if __name__ == "__main__":
    cli()
