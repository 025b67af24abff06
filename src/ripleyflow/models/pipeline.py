"""Pipeline, stage and job state models."""

from datetime import datetime
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field, model_validator


class ToolRole(StrEnum):
    """External binaries a stage can run."""

    FFMPEG = "ffmpeg"
    DEEP_FILTER = "deep-filter"


class StageSpec(BaseModel):
    """One external-process invocation and the progress range it owns."""

    model_config = {"frozen": True}

    name: str = Field(..., min_length=1)
    role: ToolRole
    executable: Path
    args: tuple[str, ...] = ()
    cwd: Path | None = None
    progress_low: float = Field(default=0.0, ge=0, le=100)
    progress_high: float = Field(default=100.0, ge=0, le=100)
    reports_progress: bool = True
    produces: Path | None = None

    @model_validator(mode="after")
    def check_range(self):
        if self.progress_low > self.progress_high:
            raise ValueError(
                f"progress_low ({self.progress_low}) exceeds progress_high ({self.progress_high})"
            )
        return self

    @property
    def command(self) -> list[str]:
        return [str(self.executable), *self.args]

    def remap(self, local: float) -> float:
        """Map a 0-100 stage-local value into this stage's global range."""
        local = max(0.0, min(100.0, local))
        return self.progress_low + (local / 100.0) * (self.progress_high - self.progress_low)


class PipelineRun(BaseModel):
    """An ordered set of stages sharing one temporary workspace."""

    job_id: str = Field(..., min_length=1)
    stages: list[StageSpec] = Field(..., min_length=1)
    workspace: Path
    input_path: Path
    output_path: Path

    @model_validator(mode="after")
    def check_stage_ranges(self):
        """Stage ranges must be ordered and must not overlap."""
        for prev, cur in zip(self.stages, self.stages[1:]):
            if cur.progress_low < prev.progress_high:
                raise ValueError(
                    f"Stage '{cur.name}' range starts at {cur.progress_low}, "
                    f"before '{prev.name}' ends at {prev.progress_high}"
                )
        return self


class JobKind(StrEnum):
    CONVERT = "convert"
    DENOISE = "denoise"
    PREVIEW = "preview"


class JobStatus(StrEnum):
    """Lifecycle of a host-submitted job."""

    QUEUED = "queued"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"
    CANCELLED = "cancelled"


class JobState(BaseModel):
    """Current state of a media job."""

    job_id: str = Field(..., min_length=1)
    kind: JobKind
    status: JobStatus = Field(default=JobStatus.QUEUED)
    progress: float = Field(default=0.0, ge=0, le=100)
    message: str = Field(default="")
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None
    error_type: str | None = None
    output_path: str | None = None
