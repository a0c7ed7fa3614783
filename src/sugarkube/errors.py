"""Error taxonomy for sugarkube.

Every error raised by the core derives from SugarkubeError so the command
layer can render it uniformly. None of them are retried automatically.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SugarkubeError(Exception):
    """Base error class for sugarkube errors."""

    message: str
    hint: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


@dataclass
class ConfigError(SugarkubeError):
    """Malformed or incomplete user configuration."""


@dataclass
class ManifestError(SugarkubeError):
    """Malformed manifest document."""


@dataclass
class MissingDirectoryError(SugarkubeError):
    """An expected value directory does not exist."""

    path: str = ""


@dataclass
class TimeoutError(SugarkubeError):
    """An external check exceeded its deadline."""

    command: list[str] = field(default_factory=list)
    timeout: float = 0.0
    hint: str | None = "Check your credentials and network connectivity."


@dataclass
class ReadinessTimeoutError(TimeoutError):
    """The cluster did not become online or ready within its timeout."""

    hint: str | None = "Increase --online-timeout/--ready-timeout or inspect the cluster."


@dataclass
class ExternalToolError(SugarkubeError):
    """An external command exited non-zero or could not be started."""

    command: list[str] = field(default_factory=list)
    returncode: int | None = None
    stdout: str = ""
    stderr: str = ""

    def details(self) -> str:
        """Render the command and captured output for diagnostics."""
        lines = [f"Command: {' '.join(self.command)}"]
        if self.returncode is not None:
            lines.append(f"Exit code: {self.returncode}")
        if self.stdout.strip():
            lines.append(f"-- stdout --\n{self.stdout.rstrip()}")
        if self.stderr.strip():
            lines.append(f"-- stderr --\n{self.stderr.rstrip()}")
        return "\n".join(lines)


@dataclass
class PartialConvergenceError(ExternalToolError):
    """One or more instance group patches failed.

    Patches that succeeded are not rolled back.
    """

    failures: dict[str, SugarkubeError] = field(default_factory=dict)

    def details(self) -> str:
        lines = []
        for name, error in self.failures.items():
            lines.append(f"[{name}] {error.message}")
            if isinstance(error, ExternalToolError):
                lines.append(error.details())
        return "\n".join(lines)


@dataclass
class NotFoundError(SugarkubeError):
    """A required file was not found."""


@dataclass
class AmbiguousBuildFileError(ConfigError):
    """More than one build file matched and none was selected."""

    candidates: list[str] = field(default_factory=list)
