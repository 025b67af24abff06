"""Error handling middleware."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from ripleyflow.models.errors import (
    Cancelled,
    ErrorResponse,
    JobInProgress,
    ResourceError,
    RipleyError,
    ValidationError,
)

logger = logging.getLogger(__name__)


async def ripley_error_handler(request: Request, exc: RipleyError) -> JSONResponse:
    """Handle RipleyError exceptions."""
    response = ErrorResponse.from_exception(
        exc, guidance=_get_guidance(exc), retry=_is_retryable(exc)
    )
    status_code = _get_status_code(exc)
    if status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc)
    return JSONResponse(status_code=status_code, content=response.model_dump())


def _get_status_code(exc: RipleyError) -> int:
    """Map error type to HTTP status code."""
    if isinstance(exc, ValidationError):
        return 400
    elif isinstance(exc, (Cancelled, JobInProgress)):
        return 409
    elif isinstance(exc, ResourceError):
        return 503
    return 500


def _get_guidance(exc: RipleyError) -> str:
    """Generate actionable guidance based on error type."""
    if isinstance(exc, ValidationError):
        return "Check the input file and output location."
    if isinstance(exc, JobInProgress):
        return "Wait for the current job to finish or cancel it."
    if isinstance(exc, ResourceError):
        return "Make sure ffmpeg and deep-filter are installed or bundled."
    return "Please try again or contact support."


def _is_retryable(exc: RipleyError) -> bool:
    """Determine if the error is retryable."""
    return isinstance(exc, (JobInProgress, Cancelled))
