"""Options shared by every command that operates on a stack."""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import wraps
from typing import Any

import click

from ..config import StackConfig, resolve_stack_config
from ..errors import SugarkubeError
from ..formatters import print_error

# (flags, destination, help) for each stack override
_STACK_OPTIONS: list[tuple[tuple[str, ...], str, str]] = [
    (("-p", "--provider"), "provider", "Name of the provider, e.g. local, aws"),
    (("-v", "--provisioner"), "provisioner", "Name of the provisioner, e.g. kops, minikube"),
    (("-l", "--profile"), "profile", "Launch profile, e.g. dev, test, prod"),
    (("-c", "--cluster"), "cluster", "Name of the cluster, e.g. dev1"),
    (("-a", "--account"), "account", "Name or ID of the account to use"),
    (("-r", "--region"), "region", "Region to use"),
]


def _envvar(name: str) -> str:
    return f"SUGARKUBE_{name.upper()}"


def stack_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the stack selection and override options to a command.

    The decorated command receives a resolved ``stack_config`` instead of
    the individual option values.
    """
    decorators = [
        click.option(
            "-n",
            "--stack-name",
            envvar=_envvar("stack_name"),
            help="Name of a stack to use",
        ),
        click.option(
            "-s",
            "--stack-config",
            envvar=_envvar("stack_config"),
            type=click.Path(exists=True, dir_okay=False),
            help="Path to the file defining stacks by name",
        ),
    ]
    for flags, dest, help_text in _STACK_OPTIONS:
        decorators.append(click.option(*flags, dest, envvar=_envvar(dest), help=help_text))
    decorators.extend(
        [
            click.option(
                "-f",
                "--vars-file-or-dir",
                "values",
                multiple=True,
                envvar=_envvar("values"),
                help="YAML vars file or directory to load (can specify multiple)",
            ),
            click.option(
                "-m",
                "--manifest",
                "manifests",
                multiple=True,
                envvar=_envvar("manifests"),
                help="YAML manifest file to load (can specify multiple)",
            ),
            click.option(
                "--online-timeout",
                type=int,
                default=None,
                envvar=_envvar("online_timeout"),
                help="Max seconds to wait for the cluster to come online (default: 600)",
            ),
            click.option(
                "--ready-timeout",
                type=int,
                default=None,
                envvar=_envvar("ready_timeout"),
                help="Max seconds to wait for the cluster to become ready (default: 600)",
            ),
        ]
    )

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        stack_name = kwargs.pop("stack_name")
        stack_file = kwargs.pop("stack_config")
        overrides = StackConfig(
            provider=kwargs.pop("provider") or "",
            provisioner=kwargs.pop("provisioner") or "",
            profile=kwargs.pop("profile") or "",
            cluster=kwargs.pop("cluster") or "",
            account=kwargs.pop("account") or "",
            region=kwargs.pop("region") or "",
            values=list(kwargs.pop("values")),
            manifests=list(kwargs.pop("manifests")),
            online_timeout=kwargs.pop("online_timeout"),
            ready_timeout=kwargs.pop("ready_timeout"),
            cache_dir=kwargs.pop("cache_dir", None) or "",
        )
        with handle_errors():
            kwargs["stack_config"] = resolve_stack_config(stack_name, stack_file, overrides)
        return func(*args, **kwargs)

    for decorator in reversed(decorators):
        wrapper = decorator(wrapper)
    return wrapper


def dry_run_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--dry-run",
        is_flag=True,
        envvar=_envvar("dry_run"),
        help="Log the commands that would change state instead of running them",
    )(func)


@contextmanager
def handle_errors() -> Iterator[None]:
    """Render SugarkubeError and exit 1. Other exceptions propagate."""
    try:
        yield
    except SugarkubeError as e:
        print_error(e)
        sys.exit(1)
