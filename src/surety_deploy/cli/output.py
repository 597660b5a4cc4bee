"""Rich console output utilities for surety-deploy.

Colored success/error/warning messages that respect the NO_COLOR
environment variable and the --no-color flag.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from surety_deploy.pipeline import PipelineResult

# Rich automatically respects NO_COLOR, but we also support --no-color flag
_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False) -> Console:
    """Create a Rich Console instance with appropriate color settings.

    Args:
        no_color: If True, disable colored output. Also respects NO_COLOR env var.

    Returns:
        Configured Console instance.
    """
    force_terminal = None
    if no_color or _force_no_color:
        force_terminal = False
    return Console(force_terminal=force_terminal, no_color=no_color or _force_no_color)


# Default console instance
console = create_console()


def success(message: str, **kwargs: Any) -> None:
    """Print a success message with green checkmark.

    Example:
        >>> success("Published to 2 targets")
        ✓ Published to 2 targets
    """
    console.print(f"[green]✓[/green] {escape(message)}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error message with red X.

    Example:
        >>> error("Deployment of FlightSuretyApp (app) failed: out of gas")
        ✗ Deployment of FlightSuretyApp (app) failed: out of gas
    """
    console.print(f"[red]✗[/red] {escape(message)}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning message with yellow triangle."""
    console.print(f"[yellow]⚠[/yellow] {escape(message)}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print an informational message."""
    console.print(escape(message), **kwargs)


def print_summary(result: PipelineResult) -> None:
    """Print the deployed addresses and the targets that received them.

    Args:
        result: Successful pipeline result.
    """
    table = Table(title=f"Deployed to {result.config.network_name}", show_header=True)
    table.add_column("Contract")
    table.add_column("Address")
    table.add_column("Block", justify="right")
    for deployment in (result.data, result.app):
        block = deployment.receipt.block_number
        table.add_row(deployment.name, deployment.address, "" if block is None else str(block))
    console.print(table)

    for target in result.publish.targets:
        files = ", ".join(result.publish.files[target])
        info(f"  {target}: {files}")


def set_no_color(no_color: bool) -> None:
    """Update the global console to enable/disable colors.

    Args:
        no_color: If True, disable colored output.
    """
    global console
    console = create_console(no_color=no_color)
