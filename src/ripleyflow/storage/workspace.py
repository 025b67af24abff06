"""Temporary workspace lifecycle management."""

import logging
import re
import shutil
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ripleyflow.config import get_settings
from ripleyflow.models.errors import WorkspaceCreationFailed

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class WorkspaceManager:
    """Creates per-run workspaces and guarantees they are removed."""

    def __init__(
        self,
        base_dir: Path | None = None,
        prefix: str | None = None,
        unique: bool | None = None,
    ):
        settings = get_settings()
        self.base_dir = base_dir or settings.temp_dir
        self.prefix = prefix or settings.job_prefix
        self.unique = settings.unique_workspaces if unique is None else unique

    def workspace_path(self, base_name: str) -> Path:
        """Deterministic workspace path, with a random suffix when unique."""
        safe = _UNSAFE.sub("_", base_name).strip("_") or "video"
        name = f"{self.prefix}_{safe}"
        if self.unique:
            name = f"{name}_{uuid.uuid4().hex[:8]}"
        return self.base_dir / name

    def create(self, base_name: str) -> Path:
        """Create a fresh workspace, replacing any stale one with the same name."""
        path = self.workspace_path(base_name)
        try:
            if path.exists():
                logger.warning("Removing stale workspace %s", path)
                shutil.rmtree(path)
            path.mkdir(parents=True)
        except OSError as e:
            raise WorkspaceCreationFailed(
                f"Failed to create temp directory: {e}",
                details={"workspace": str(path)},
            ) from e
        logger.debug("Created workspace %s", path)
        return path

    def cleanup(self, path: Path) -> bool:
        """Remove a workspace. Failures are logged, never raised."""
        if not path.exists():
            return False
        try:
            shutil.rmtree(path)
        except OSError as e:
            logger.warning("Failed to clean up workspace %s: %s", path, e)
            return False
        logger.info("Cleaned up workspace %s", path)
        return True

    @contextmanager
    def scope(self, base_name: str) -> Iterator[Path]:
        """Workspace that is removed exactly once when the block exits."""
        path = self.create(base_name)
        try:
            yield path
        finally:
            self.cleanup(path)

    def purge_stale(self, ttl_seconds: int | None = None) -> int:
        """Remove leftover workspaces older than the TTL (e.g. after a crash)."""
        ttl = get_settings().stale_workspace_ttl_seconds if ttl_seconds is None else ttl_seconds
        if not self.base_dir.is_dir():
            return 0
        now = time.time()
        purged = 0
        for entry in self.base_dir.glob(f"{self.prefix}_*"):
            if not entry.is_dir():
                continue
            try:
                age = now - entry.stat().st_mtime
            except OSError:
                continue
            if age > ttl and self.cleanup(entry):
                purged += 1
        return purged
