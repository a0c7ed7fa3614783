"""Running external tools.

All external processes (kops, kubectl, minikube, git, make) are run through
run_command so stdout/stderr capture, deadlines and error wrapping behave
the same everywhere.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

from ..errors import ExternalToolError, TimeoutError
from .logging import get_logger

logger = get_logger(__name__)


def format_command(args: list[str]) -> str:
    """Render a command line for logs and dry runs."""
    return " ".join(args)


def run_command(
    args: list[str],
    *,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
    cwd: str | Path | None = None,
    check: bool = True,
    error_message: str | None = None,
) -> subprocess.CompletedProcess:
    """Run an external command, capturing stdout and stderr separately.

    Args:
        args: Command and arguments.
        timeout: Deadline in seconds. None means no deadline.
        env: Extra environment variables, added to the current environment.
        cwd: Working directory.
        check: Raise ExternalToolError on a non-zero exit.
        error_message: Message used when wrapping a failure.

    Returns:
        The completed process.

    Raises:
        TimeoutError: The deadline expired before the command returned.
        ExternalToolError: The command could not be started, or exited
            non-zero while check is set.
    """
    full_env = None
    if env is not None:
        full_env = os.environ.copy()
        full_env.update(env)

    logger.debug("Executing command", command=format_command(args), cwd=str(cwd or "."))

    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=full_env,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired:
        raise TimeoutError(
            message=f"Timed out after {timeout}s running: {format_command(args)}",
            command=list(args),
            timeout=timeout or 0.0,
        )
    except FileNotFoundError:
        raise ExternalToolError(
            message=f"{args[0]} not found. Is {args[0]} installed?",
            command=list(args),
        )

    if check and result.returncode != 0:
        raise ExternalToolError(
            message=error_message or f"Command failed: {format_command(args)}",
            command=list(args),
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )

    return result
