"""Input, output path and artifact validation."""

from pathlib import Path

from ripleyflow.config import get_settings
from ripleyflow.models.errors import (
    InputMissing,
    InvalidOutputPath,
    OutputMissing,
    OutputTooSmall,
)
from ripleyflow.models.media import VideoInfo


def validate_input(file_path: Path) -> None:
    """Validate that the input file exists."""
    if not file_path.is_file():
        raise InputMissing("Input file does not exist", details={"path": str(file_path)})


def prepare_output_path(file_path: Path) -> Path:
    """Validate an output path and create its parent directory."""
    if not file_path.name or file_path.is_dir():
        raise InvalidOutputPath("Invalid output path", details={"path": str(file_path)})
    output_dir = file_path.parent
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InvalidOutputPath(
            f"Failed to create output directory: {e}",
            details={"path": str(file_path), "directory": str(output_dir)},
        ) from e
    return file_path


def validate_artifact(file_path: Path, min_bytes: int | None = None, label: str = "Output") -> int:
    """Check that a produced file exists and is not suspiciously small.

    Returns the file size in bytes.
    """
    threshold = get_settings().min_artifact_bytes if min_bytes is None else min_bytes
    if not file_path.is_file():
        raise OutputMissing(f"{label} file was not created", details={"path": str(file_path)})
    size = file_path.stat().st_size
    if size < threshold:
        raise OutputTooSmall(
            f"{label} file appears to be corrupted (size < {threshold} bytes)",
            size=size,
            threshold=threshold,
            details={"path": str(file_path)},
        )
    return size


def probe_video(file_path: Path) -> VideoInfo:
    """Basic metadata for a video the user picked."""
    validate_input(file_path)
    return VideoInfo(
        path=str(file_path),
        name=file_path.name or "Unknown",
        size=file_path.stat().st_size,
    )
