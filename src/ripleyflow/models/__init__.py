"""Data models for RipleyFlow."""

from ripleyflow.models.errors import (
    BinaryNotFound,
    Cancelled,
    ErrorResponse,
    InputMissing,
    InvalidOutputPath,
    JobInProgress,
    NonZeroExit,
    OutputMissing,
    OutputTooSmall,
    ProcessError,
    ProcessWaitFailed,
    ResourceError,
    RipleyError,
    SpawnFailed,
    ValidationError,
    WorkspaceCreationFailed,
)
from ripleyflow.models.media import (
    ConvertOptions,
    DenoiseOptions,
    PreviewOptions,
    PreviewType,
    VideoInfo,
)
from ripleyflow.models.pipeline import (
    JobKind,
    JobState,
    JobStatus,
    PipelineRun,
    StageSpec,
    ToolRole,
)

__all__ = [
    "BinaryNotFound",
    "Cancelled",
    "ConvertOptions",
    "DenoiseOptions",
    "ErrorResponse",
    "InputMissing",
    "InvalidOutputPath",
    "JobInProgress",
    "JobKind",
    "JobState",
    "JobStatus",
    "NonZeroExit",
    "OutputMissing",
    "OutputTooSmall",
    "PipelineRun",
    "PreviewOptions",
    "PreviewType",
    "ProcessError",
    "ProcessWaitFailed",
    "ResourceError",
    "RipleyError",
    "SpawnFailed",
    "StageSpec",
    "ToolRole",
    "ValidationError",
    "VideoInfo",
    "WorkspaceCreationFailed",
]
