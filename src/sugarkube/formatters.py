"""CLI output formatting helpers."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from .errors import ExternalToolError, SugarkubeError
from .kapp import Kapp


def kapps_table(kapps: list[Kapp]) -> Table:
    """Build a table of kapps and their sources.

    Args:
        kapps: Parsed kapps in manifest order

    Returns:
        Rich table with one row per source
    """
    table = Table(title="Kapps")
    table.add_column("Kapp", style="bold", no_wrap=True)
    table.add_column("State", no_wrap=True)
    table.add_column("Source")
    table.add_column("Branch")
    table.add_column("Path")

    for kapp in kapps:
        state = "[green]present[/green]" if kapp.should_be_present else "[red]absent[/red]"
        for i, source in enumerate(kapp.sources):
            table.add_row(
                kapp.id if i == 0 else "",
                state if i == 0 else "",
                source.uri,
                source.branch,
                source.path,
            )
    return table


def print_kapps(kapps: list[Kapp], console: Console | None = None) -> None:
    """Print kapps as a table."""
    console = console or Console()
    if not kapps:
        console.print("No kapps found")
        return
    console.print(kapps_table(kapps))


def print_error(error: SugarkubeError) -> None:
    """Print an error with its hint and any captured tool output to stderr."""
    click.echo(f"Error: {error.message}", err=True)
    if error.hint:
        click.echo(f"Hint: {error.hint}", err=True)
    if isinstance(error, ExternalToolError):
        details = error.details()
        if details:
            click.echo(details, err=True)
