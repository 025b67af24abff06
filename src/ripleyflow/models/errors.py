"""Error hierarchy and error response models."""

from pydantic import BaseModel, Field


class RipleyError(Exception):
    """Base error for all RipleyFlow errors."""

    def __init__(self, message: str, component: str = "", details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.component = component
        self.details = details or {}
        self.stage: str | None = None

    def tag_stage(self, stage: str, index: int) -> "RipleyError":
        """Attach the failing pipeline stage to the error."""
        self.stage = stage
        self.details["stage"] = stage
        self.details["stage_index"] = index
        return self

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


# --- validation ---


class ValidationError(RipleyError):
    """Input, output path and artifact validation errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="validation", details=details)


class InputMissing(ValidationError):
    """Input file does not exist."""


class OutputMissing(ValidationError):
    """An expected artifact was not produced."""


class OutputTooSmall(ValidationError):
    """An artifact exists but is below the corruption threshold."""

    def __init__(self, message: str, size: int, threshold: int, details: dict | None = None):
        super().__init__(message, details={**(details or {}), "size": size, "threshold": threshold})
        self.size = size
        self.threshold = threshold


class InvalidOutputPath(ValidationError):
    """Output path cannot be written to."""


# --- processes ---


class ProcessError(RipleyError):
    """Errors raised while spawning or waiting on an external process."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="process", details=details)


class SpawnFailed(ProcessError):
    """The OS refused to start the process."""


class ProcessWaitFailed(ProcessError):
    """Polling the process for its exit status failed."""


class NonZeroExit(ProcessError):
    """The process exited with a non-zero status."""

    def __init__(self, message: str, code: int, details: dict | None = None):
        super().__init__(message, details={**(details or {}), "code": code})
        self.code = code


class Cancelled(RipleyError):
    """The running process was cancelled by the user."""

    def __init__(self, message: str = "Operation cancelled by user", details: dict | None = None):
        super().__init__(message, component="process", details=details)


# --- resources ---


class ResourceError(RipleyError):
    """Resource-related errors (binaries, disk, concurrency)."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="resource", details=details)


class BinaryNotFound(ResourceError):
    """External tool could not be located."""


class WorkspaceCreationFailed(ResourceError):
    """Temporary workspace could not be created."""


class JobInProgress(ResourceError):
    """Another pipeline run already owns the orchestrator."""


class ErrorResponse(BaseModel):
    """Standardized error response for API."""

    error_type: str = Field(..., description="Error category")
    component: str = Field(default="", description="Component that raised the error")
    message: str = Field(..., description="Human-readable error message")
    stage: str | None = Field(default=None, description="Pipeline stage that failed")
    details: dict = Field(default_factory=dict)
    actionable_guidance: str = Field(default="", description="Suggested user action")
    retry_possible: bool = Field(default=False)

    @classmethod
    def from_exception(
        cls, exc: RipleyError, guidance: str = "", retry: bool = False
    ) -> "ErrorResponse":
        return cls(
            error_type=type(exc).__name__,
            component=exc.component,
            message=str(exc),
            stage=exc.stage,
            details=exc.details,
            actionable_guidance=guidance,
            retry_possible=retry,
        )
