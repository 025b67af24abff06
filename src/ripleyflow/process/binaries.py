"""Locating bundled or system-installed external tools."""

import logging
import os
import shutil
import sys
from pathlib import Path

from ripleyflow.models.errors import BinaryNotFound
from ripleyflow.models.pipeline import ToolRole

logger = logging.getLogger(__name__)


def executable_name(role: ToolRole | str, platform: str | None = None) -> str:
    """Return the expected binary file name for the current OS."""
    platform = platform or sys.platform
    name = str(role)
    if platform.startswith("win"):
        return f"{name}.exe"
    return name


def bundled_path(role: ToolRole | str, resource_dir: Path, platform: str | None = None) -> Path:
    """Where a bundled copy of the tool is expected to live."""
    return resource_dir / "binaries" / str(role) / executable_name(role, platform)


def resolve_binary(role: ToolRole | str, resource_dir: Path | None = None) -> Path:
    """Resolve a tool from the bundled resources, falling back to PATH."""
    name = executable_name(role)
    expected = None

    if resource_dir is not None:
        expected = bundled_path(role, resource_dir)
        if expected.is_file() and (sys.platform.startswith("win") or os.access(expected, os.X_OK)):
            logger.debug("Using bundled %s at %s", role, expected)
            return expected

    system_binary = shutil.which(name)
    if system_binary:
        logger.debug("Using %s from PATH: %s", role, system_binary)
        return Path(system_binary)

    hint = f" Please place the {name} binary at: {expected}" if expected else ""
    raise BinaryNotFound(
        f"{role} not found.{hint}",
        details={"role": str(role), "expected": str(expected) if expected else None},
    )
