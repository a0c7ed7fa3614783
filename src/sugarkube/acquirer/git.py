"""Git-backed acquirer."""

from __future__ import annotations

import shutil
from pathlib import Path

from ..errors import ManifestError
from ..shared.logging import get_logger
from ..shared.process import run_command
from .base import Acquirer

logger = get_logger(__name__)

# Written into each checkout, holding the acquirer id
MARKER_FILE = ".sugarkube-source"


class GitAcquirer(Acquirer):
    """Clone a repository and check out a branch, narrowed to a subpath."""

    type_name = "git"

    def __init__(self, name: str, uri: str, branch: str = "", path: str = ""):
        super().__init__(name, uri, branch, path)
        if not self.branch:
            raise ManifestError(message=f"Git source '{uri}' requires a branch")

    def is_fetched(self, target_dir: Path) -> bool:
        """Whether target_dir already holds a checkout of this source."""
        marker = target_dir / MARKER_FILE
        return marker.is_file() and marker.read_text().strip() == self.id()

    def fetch(self, target_dir: Path) -> Path:
        target_dir = Path(target_dir)
        source_root = target_dir / self.path if self.path else target_dir

        if self.is_fetched(target_dir):
            logger.debug("Source already fetched", source=self.id(), dir=str(target_dir))
            return source_root

        if target_dir.exists():
            logger.info("Removing stale checkout", source=self.id(), dir=str(target_dir))
            shutil.rmtree(target_dir)

        target_dir.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Fetching source", source=self.id(), dir=str(target_dir))

        run_command(
            ["git", "clone", "--quiet", "--no-checkout", self.uri, str(target_dir)],
            error_message=f"Failed to clone {self.uri}",
        )
        if self.path:
            run_command(
                ["git", "-C", str(target_dir), "sparse-checkout", "set", self.path],
                error_message=f"Failed to set sparse checkout path '{self.path}' for {self.uri}",
            )
        run_command(
            ["git", "-C", str(target_dir), "checkout", "--quiet", self.branch],
            error_message=f"Failed to check out '{self.branch}' of {self.uri}",
        )

        (target_dir / MARKER_FILE).write_text(self.id() + "\n")
        return source_root
