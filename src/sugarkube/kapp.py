"""Kapps and manifest parsing.

A manifest declares which kapps should be present in a cluster and which
should be absent:

    present:
      wordpress:
        sources:
        - uri: git@github.com:example/kapps.git
          branch: master
          path: incubator/wordpress
    absent:
      old-thing:
        sources:
        - ...
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .acquirer import Acquirer, new_acquirer
from .errors import ConfigError, ManifestError, SugarkubeError
from .shared.logging import get_logger
from .utils import load_yaml_file

logger = get_logger(__name__)

PRESENT_KEY = "present"
ABSENT_KEY = "absent"
SOURCES_KEY = "sources"
MAKEFILE_KEY = "makefile"

KAPP_KEYS = {SOURCES_KEY, MAKEFILE_KEY}


@dataclass
class Kapp:
    """A unit of deployable workload configuration."""

    id: str
    should_be_present: bool = True
    sources: list[Acquirer] = field(default_factory=list)
    makefile: str | None = None
    root_dir: Path | None = None

    def sources_dicts(self) -> list[dict[str, str]]:
        """Sources as plain manifest entries."""
        return [source.to_dict() for source in self.sources]


def _parse_kapp(kapp_id: Any, value: Any, present: bool, manifest: str) -> Kapp:
    if not isinstance(value, dict):
        raise ManifestError(message=f"Kapp '{kapp_id}' in {manifest} must be a mapping")

    unknown = sorted(str(k) for k in value if k not in KAPP_KEYS)
    if unknown:
        raise ManifestError(
            message=f"Unknown key(s) for kapp '{kapp_id}' in {manifest}: {', '.join(unknown)}",
            hint=f"Valid keys are: {', '.join(sorted(KAPP_KEYS))}",
        )

    sources = value.get(SOURCES_KEY)
    if not isinstance(sources, list) or not sources:
        raise ManifestError(message=f"Kapp '{kapp_id}' in {manifest} has no sources")

    acquirers = []
    for entry in sources:
        if not isinstance(entry, dict):
            raise ManifestError(
                message=f"Each source of kapp '{kapp_id}' in {manifest} must be a mapping"
            )
        try:
            acquirers.append(new_acquirer(entry))
        except ManifestError as e:
            raise ManifestError(
                message=f"Invalid source for kapp '{kapp_id}' in {manifest}: {e.message}",
                hint=e.hint,
                data=e.data,
            )
        except ConfigError as e:
            raise ConfigError(
                message=f"Invalid source for kapp '{kapp_id}' in {manifest}: {e.message}",
                hint=e.hint,
            )

    makefile = value.get(MAKEFILE_KEY)

    return Kapp(
        id=str(kapp_id),
        should_be_present=present,
        sources=acquirers,
        makefile=str(makefile) if makefile else None,
    )


def parse_manifest_yaml(data: dict[str, Any], manifest: str = "<manifest>") -> list[Kapp]:
    """Parse a loaded manifest document into kapps.

    Present kapps come first, then absent ones, each in document order.
    """
    unknown = sorted(str(k) for k in data if k not in (PRESENT_KEY, ABSENT_KEY))
    if unknown:
        raise ManifestError(message=f"Unknown top-level key(s) in {manifest}: {', '.join(unknown)}")

    kapps: list[Kapp] = []
    for key, present in ((PRESENT_KEY, True), (ABSENT_KEY, False)):
        section = data.get(key) or {}
        if not isinstance(section, dict):
            raise ManifestError(message=f"'{key}' in {manifest} must be a mapping of kapps")
        for kapp_id, value in section.items():
            kapps.append(_parse_kapp(kapp_id, value, present, manifest))

    _check_duplicates(kapps)
    logger.debug("Parsed manifest", manifest=manifest, kapps=[k.id for k in kapps])
    return kapps


def parse_manifest(manifest_path: str | Path) -> list[Kapp]:
    """Parse a manifest file into kapps."""
    logger.debug("Parsing manifest", manifest=str(manifest_path))
    try:
        data = load_yaml_file(manifest_path)
    except SugarkubeError as e:
        raise ManifestError(message=e.message)
    return parse_manifest_yaml(data, str(manifest_path))


def parse_manifests(manifest_paths: list[str | Path]) -> list[Kapp]:
    """Parse manifest files, concatenating kapps in file order.

    Raises:
        ManifestError: If any manifest is malformed, or a kapp id appears
            more than once across all of them.
    """
    logger.debug("Parsing manifests", count=len(manifest_paths))

    kapps: list[Kapp] = []
    for manifest in manifest_paths:
        kapps.extend(parse_manifest(manifest))

    _check_duplicates(kapps)
    return kapps


def _check_duplicates(kapps: list[Kapp]) -> None:
    seen: set[str] = set()
    duplicates: list[str] = []
    for kapp in kapps:
        if kapp.id in seen and kapp.id not in duplicates:
            duplicates.append(kapp.id)
        seen.add(kapp.id)
    if duplicates:
        raise ManifestError(
            message=f"Duplicate kapp id(s): {', '.join(duplicates)}",
            hint="Each kapp may only be declared once across all manifests.",
        )


def dump_sources(kapp: Kapp) -> str:
    """Render a kapp's sources as manifest YAML."""
    return yaml.safe_dump(kapp.sources_dicts(), default_flow_style=False, sort_keys=False)


def acquire_kapps(kapps: list[Kapp], cache_dir: Path) -> None:
    """Fetch every source of every kapp into the cache.

    Each source lands in its own directory under {cache_dir}/{kapp id},
    named after the source and keyed by its id, and the kapp's root_dir
    is set to {cache_dir}/{kapp id}.
    """
    for kapp in kapps:
        kapp_dir = cache_dir / kapp.id
        for source in kapp.sources:
            source.fetch(kapp_dir / source.checkout_dir_name())
        kapp.root_dir = kapp_dir
