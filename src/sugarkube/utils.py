"""YAML loading and structure helpers."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError


def load_yaml_file(path: str | Path) -> dict[str, Any]:
    """Load a YAML file that must contain a mapping.

    Args:
        path: Path to the YAML file

    Returns:
        The parsed mapping (empty for an empty file)

    Raises:
        ConfigError: If the file can't be read or doesn't hold a mapping.
    """
    file_path = Path(path)
    try:
        with file_path.open() as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(message=f"Error reading {file_path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(message=f"Error parsing YAML in {file_path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            message=f"Expected a mapping at the top of {file_path}, got {type(data).__name__}"
        )
    return data


def deep_merge(base: Any, override: Any) -> Any:
    """Merge override onto base, returning a new structure.

    Mappings merge key by key. Keys only in base are preserved, keys in
    override replace or extend. Lists and scalars in override replace the
    base value wholesale. A None override leaves base untouched.
    """
    if override is None:
        return copy.deepcopy(base)
    if isinstance(base, dict) and isinstance(override, dict):
        result = copy.deepcopy(base)
        for key, value in override.items():
            if key in result:
                result[key] = deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)
        return result
    return copy.deepcopy(override)


def to_cli_flags(params: dict[str, Any] | None) -> list[str]:
    """Translate a parameter mapping into command line flags.

    snake_case keys become --kebab-case flags. Booleans render as
    --flag=true/false, lists are comma-joined. Keys are sorted so the same
    input always yields the same command line.
    """
    flags: list[str] = []
    for key in sorted(params or {}):
        value = params[key]
        flag = "--" + str(key).replace("_", "-")
        if value is None:
            continue
        if isinstance(value, bool):
            flags.append(f"{flag}={str(value).lower()}")
        elif isinstance(value, (list, tuple)):
            flags.extend([flag, ",".join(str(v) for v in value)])
        elif isinstance(value, dict):
            raise ConfigError(message=f"Parameter '{key}' must be a scalar or list, got a mapping")
        else:
            flags.extend([flag, str(value)])
    return flags
