"""Cluster commands.

This module provides `sugarkube cluster create`, which brings a cluster
online if it isn't already and waits for it to become ready.
"""

from __future__ import annotations

import click

from .. import stack
from ..config import StackConfig
from .options import dry_run_option, handle_errors, stack_options


@click.group()
def cluster():
    """Manage clusters."""


@cluster.command()
@stack_options
@dry_run_option
def create(stack_config: StackConfig, dry_run: bool):
    """Create a cluster if it isn't already online.

    Examples:

        # Create the cluster defined by a stack
        sugarkube cluster create -s stacks.yaml -n local-standard

        # Show what would be run
        sugarkube cluster create -s stacks.yaml -n dev1 --dry-run
    """
    with handle_errors():
        stack.create_cluster(stack_config, dry_run=dry_run)

    if dry_run:
        click.echo("Dry run complete")
    elif stack_config.status.started_this_run:
        click.echo(f"Cluster '{stack_config.cluster}' created and ready")
    else:
        click.echo(f"Cluster '{stack_config.cluster}' is already online")
