"""CLI main entry point."""

from __future__ import annotations

import click

from . import __version__
from .commands.cluster import cluster
from .commands.kapps import kapps
from .shared.logging import DEFAULT_LOG_LEVEL, LOG_LEVELS, configure_logging


@click.group()
@click.option(
    "--log-level",
    envvar="SUGARKUBE_LOG_LEVEL",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=DEFAULT_LOG_LEVEL,
    help=f"Log level (default: {DEFAULT_LOG_LEVEL})",
)
@click.option(
    "--log-file",
    envvar="SUGARKUBE_LOG_FILE",
    type=click.Path(dir_okay=False),
    help="Write logs to this file instead of stderr",
)
@click.option("--log-json", is_flag=True, help="Output logs as JSON")
@click.pass_context
def cli(ctx: click.Context, log_level: str, log_file: str | None, log_json: bool) -> None:
    """Sugarkube: create clusters and install kapps into them."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["log_json"] = log_json
    configure_logging(level=log_level, log_file=log_file, json_output=log_json)


@cli.command()
def version() -> None:
    """Show version."""
    click.echo(f"sugarkube {__version__}")


cli.add_command(cluster)
cli.add_command(kapps)


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
