"""Terminal rendering for the toolbridge CLI."""

import logging
from dataclasses import dataclass

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from .orchestrator import DiscoveryReport
from .providers.base import ProviderConfig


@dataclass(frozen=True)
class ColorPalette:
    """Core UI color palette."""

    text_bright: str = "#e8e8f0"
    text: str = "#b8b8cc"
    text_dim: str = "#4a4a60"
    text_muted: str = "#363648"
    accent: str = "#00d4e5"
    ok: str = "#34d399"
    warn: str = "#e5c747"
    error: str = "#e55a6e"


PALETTE = ColorPalette()

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool = False) -> None:
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def render_error(text: str) -> None:
    """Render an error message."""
    err = Text()
    err.append("err ", style=f"bold {PALETTE.error}")
    err.append("| ", style=f"dim {PALETTE.text_muted}")
    err.append(text, style=PALETTE.error)
    err_console.print(err)


def render_catalog(catalog: list[ProviderConfig]) -> None:
    """Render a borderless, whitespace-aligned provider table."""
    col_id = 18
    col_name = 28

    header = Text()
    header.append("  ")
    header.append("ID".ljust(col_id), style=f"dim {PALETTE.text_muted}")
    header.append("NAME".ljust(col_name), style=f"dim {PALETTE.text_muted}")
    header.append("TRANSPORT", style=f"dim {PALETTE.text_muted}")
    console.print(header)

    if not catalog:
        line = Text()
        line.append("  ")
        line.append("(none)".ljust(col_id), style=f"dim {PALETTE.text_muted}")
        line.append("no providers configured", style=f"dim {PALETTE.error}")
        console.print(line)
        return

    for config in catalog:
        line = Text()
        line.append("  ")
        line.append(config.id.ljust(col_id), style=f"bold {PALETTE.accent}")
        line.append(config.display_name.ljust(col_name), style=PALETTE.text_bright)
        line.append(config.transport, style=PALETTE.text)
        console.print(line)


def render_report(report: DiscoveryReport) -> None:
    """Render one block per provider: its tools, or why it failed."""
    for outcome in report.outcomes.values():
        line = Text()
        if outcome.ok:
            line.append("ok  ", style=f"bold {PALETTE.ok}")
            line.append(outcome.provider_id, style=f"bold {PALETTE.text_bright}")
            line.append(f"  {len(outcome.tools)} tools", style=f"dim {PALETTE.text}")
        else:
            line.append("err ", style=f"bold {PALETTE.error}")
            line.append(outcome.provider_id, style=f"bold {PALETTE.text_bright}")
            line.append(f"  {outcome.error}", style=PALETTE.error)
        console.print(line)

        for tool_name in outcome.tools:
            console.print(Text(f"    - {tool_name}", style=PALETTE.text))
        for tool_name, reason in outcome.skipped:
            skipped = Text(f"    ! {tool_name}", style=PALETTE.warn)
            skipped.append(f"  skipped: {reason}", style=f"dim {PALETTE.warn}")
            console.print(skipped)

    summary = Text(
        f"{len(report.succeeded)} providers ready, {len(report.failed)} failed",
        style=f"dim {PALETTE.text_dim}",
    )
    console.print(summary)
