"""Acquirer abstraction and registry.

An acquirer fetches one kapp source (a URI at a revision, narrowed to a
subpath) into a local directory.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ..errors import ConfigError, ManifestError

# Fields allowed in a manifest source entry
SOURCE_FIELDS = {"type", "uri", "branch", "path", "name"}

DEFAULT_ACQUIRER = "git"


class Acquirer(ABC):
    """Fetches a kapp source into a local directory."""

    type_name: str = ""

    def __init__(self, name: str, uri: str, branch: str = "", path: str = ""):
        self.name = name or default_source_name(uri, path)
        self.has_explicit_name = bool(name)
        self.uri = uri
        self.branch = branch
        self.path = path
        # Manifest fields this source was parsed from, in document order
        self.supplied_fields: list[str] = []

    @abstractmethod
    def fetch(self, target_dir: Path) -> Path:
        """Fetch the source into target_dir.

        Repeated fetches with the same identity into the same directory
        must not fetch again.

        Returns:
            Path to the source root (target_dir joined with the subpath).
        """

    def id(self) -> str:
        """Stable identity of this source."""
        return f"{self.uri}#{self.branch}:{self.path}"

    def checkout_dir_name(self) -> str:
        """Directory name for this source's checkout, distinct for each id."""
        digest = hashlib.sha1(self.id().encode()).hexdigest()[:8]
        return f"{self.name}-{digest}" if self.name else digest

    def to_dict(self) -> dict[str, str]:
        """Source fields as they appear in a manifest.

        A source parsed from a manifest re-emits exactly the fields it was
        parsed from.
        """
        if self.supplied_fields:
            values = {
                "type": self.type_name,
                "uri": self.uri,
                "branch": self.branch,
                "path": self.path,
                "name": self.name,
            }
            return {key: values[key] for key in self.supplied_fields}

        data = {"uri": self.uri}
        if self.branch:
            data["branch"] = self.branch
        if self.path:
            data["path"] = self.path
        if self.has_explicit_name:
            data["name"] = self.name
        if self.type_name != DEFAULT_ACQUIRER:
            data["type"] = self.type_name
        return data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Acquirer):
            return NotImplemented
        return type(self) is type(other) and (self.name, self.id()) == (other.name, other.id())

    def __hash__(self) -> int:
        return hash((type(self), self.id(), self.name))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, id={self.id()!r})"


def default_source_name(uri: str, path: str) -> str:
    """Default display name: the last segment of the subpath, else of the URI."""
    for candidate in (path, uri):
        segment = candidate.rstrip("/").rsplit("/", 1)[-1]
        if segment.endswith(".git"):
            segment = segment[: -len(".git")]
        if segment:
            return segment
    return ""


_REGISTRY: dict[str, Callable[..., Acquirer]] = {}


def register_acquirer(name: str, factory: Callable[..., Acquirer]) -> None:
    """Register an acquirer implementation under a type name."""
    _REGISTRY[name] = factory


def available_acquirers() -> list[str]:
    """Names of the registered acquirers."""
    return sorted(_REGISTRY)


def new_acquirer(source: dict[str, Any]) -> Acquirer:
    """Create an acquirer from a manifest source entry.

    Args:
        source: Mapping with type, uri, branch, path and an optional name.

    Returns:
        The acquirer for the source's type

    Raises:
        ManifestError: If the entry has unknown fields or no URI.
        ConfigError: If the type isn't a registered acquirer.
    """
    unknown = sorted(str(k) for k in source if k not in SOURCE_FIELDS)
    if unknown:
        raise ManifestError(
            message=f"Unknown field(s) in source entry: {', '.join(unknown)}",
            hint=f"Valid fields are: {', '.join(sorted(SOURCE_FIELDS))}",
            data={"source": dict(source)},
        )

    type_name = str(source.get("type") or DEFAULT_ACQUIRER)
    factory = _REGISTRY.get(type_name)
    if factory is None:
        raise ConfigError(
            message=f"Acquirer '{type_name}' doesn't exist",
            hint=f"Available acquirers: {', '.join(available_acquirers())}",
        )

    uri = source.get("uri")
    if not uri:
        raise ManifestError(message="Source entry has no 'uri'", data={"source": dict(source)})

    acquirer = factory(
        name=str(source.get("name") or ""),
        uri=str(uri),
        branch=str(source.get("branch") or ""),
        path=str(source.get("path") or ""),
    )
    acquirer.supplied_fields = [str(k) for k in source]
    return acquirer
