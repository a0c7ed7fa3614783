"""Path management for sugarkube.

Manages the ~/.sugarkube/ directory used for cached kapp sources.
"""

from pathlib import Path

# Base directory for all sugarkube data
SUGARKUBE_DIR = Path.home() / ".sugarkube"

# Default location for acquired kapp sources
CACHE_DIR = SUGARKUBE_DIR / "cache"


def ensure_cache_dir(cache_dir: Path | None = None) -> Path:
    """Create the kapp cache directory if missing.

    Args:
        cache_dir: Cache directory to create (default: ~/.sugarkube/cache)

    Returns:
        The cache directory
    """
    path = cache_dir or CACHE_DIR
    path.mkdir(parents=True, exist_ok=True)
    return path
