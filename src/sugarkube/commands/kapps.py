"""Kapp commands.

This module provides `sugarkube kapps install|destroy|list`, which parse
the stack's manifests, fetch kapp sources into the cache and run each
kapp's installer in manifest order.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click

from .. import stack
from ..config import StackConfig
from ..formatters import print_kapps
from .options import dry_run_option, handle_errors, stack_options


def _kapp_options(func: Callable[..., Any]) -> Callable[..., Any]:
    func = click.option(
        "--approved",
        is_flag=True,
        envvar="SUGARKUBE_APPROVED",
        help="Actually apply changes. Without it, kapps should only plan them",
    )(func)
    func = click.option(
        "--cache-dir",
        envvar="SUGARKUBE_CACHE_DIR",
        type=click.Path(file_okay=False),
        help="Directory to fetch kapp sources into (default: ~/.sugarkube/cache)",
    )(func)
    return func


@click.group()
def kapps():
    """Install, destroy and list kapps."""


@kapps.command()
@stack_options
@_kapp_options
@dry_run_option
def install(stack_config: StackConfig, approved: bool, dry_run: bool):
    """Install every present kapp in the stack's manifests."""
    with handle_errors():
        installed = stack.install_kapps(stack_config, approved=approved, dry_run=dry_run)

    click.echo(f"Installed {len(installed)} kapp(s)")
    for kapp in installed:
        click.echo(f"  ✓ {kapp.id}")


@kapps.command()
@stack_options
@_kapp_options
@dry_run_option
@click.option("--all", "include_all", is_flag=True, help="Destroy every kapp, not just absent ones")
def destroy(stack_config: StackConfig, approved: bool, dry_run: bool, include_all: bool):
    """Destroy absent kapps in the stack's manifests."""
    with handle_errors():
        destroyed = stack.destroy_kapps(
            stack_config, approved=approved, dry_run=dry_run, include_all=include_all
        )

    click.echo(f"Destroyed {len(destroyed)} kapp(s)")
    for kapp in destroyed:
        click.echo(f"  ✗ {kapp.id}")


@kapps.command("list")
@stack_options
def list_kapps(stack_config: StackConfig):
    """List the kapps declared in the stack's manifests."""
    with handle_errors():
        parsed = stack.load_kapps(stack_config)
    print_kapps(parsed)
