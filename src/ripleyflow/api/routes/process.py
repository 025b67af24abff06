"""Job submission and cancellation endpoints."""

import logging
from collections.abc import Callable
from pathlib import Path

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel

from ripleyflow.api.dependencies import get_orchestrator
from ripleyflow.extractors.validators import validate_input
from ripleyflow.models.errors import Cancelled, JobInProgress, RipleyError, ValidationError
from ripleyflow.models.media import ConvertOptions, DenoiseOptions, PreviewOptions, PreviewType
from ripleyflow.models.pipeline import JobKind
from ripleyflow.pipeline.manager import MediaOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["process"])


def _run_job(job: Callable[[str, BaseModel], Path], job_id: str, options: BaseModel) -> None:
    """Background wrapper; the outcome is recorded on the job state."""
    try:
        job(job_id, options)
    except Cancelled:
        logger.info("Job %s cancelled by user", job_id)
    except RipleyError as e:
        logger.warning("Job %s failed: %s", job_id, e)


def _submit(
    orchestrator: MediaOrchestrator,
    kind: JobKind,
    job: Callable[[str, BaseModel], Path],
    options: ConvertOptions | DenoiseOptions | PreviewOptions,
    background_tasks: BackgroundTasks,
) -> dict:
    if orchestrator.is_busy:
        raise JobInProgress("Another job is already running")
    validate_input(Path(options.input_path))

    state = orchestrator.create_job(kind)
    background_tasks.add_task(_run_job, job, state.job_id, options)
    return {
        "job_id": state.job_id,
        "kind": kind.value,
        "status": "processing",
        "message": "Processing started",
    }


@router.post("/convert")
async def start_convert(
    options: ConvertOptions,
    background_tasks: BackgroundTasks,
    orchestrator: MediaOrchestrator = Depends(get_orchestrator),
):
    """Convert a video to another container format."""
    return _submit(orchestrator, JobKind.CONVERT, orchestrator.convert, options, background_tasks)


@router.post("/denoise")
async def start_denoise(
    options: DenoiseOptions,
    background_tasks: BackgroundTasks,
    orchestrator: MediaOrchestrator = Depends(get_orchestrator),
):
    """Denoise a video's audio track."""
    return _submit(orchestrator, JobKind.DENOISE, orchestrator.denoise, options, background_tasks)


@router.post("/preview")
async def start_preview(
    options: PreviewOptions,
    background_tasks: BackgroundTasks,
    orchestrator: MediaOrchestrator = Depends(get_orchestrator),
):
    """Generate a thumbnail or a short preview clip."""
    if options.preview_type.lower() not in {t.value for t in PreviewType}:
        raise ValidationError(
            "Invalid preview type. Use 'thumbnail' or 'clip'",
            details={"preview_type": options.preview_type},
        )
    return _submit(orchestrator, JobKind.PREVIEW, orchestrator.preview, options, background_tasks)


@router.post("/cancel")
async def cancel_processing(
    orchestrator: MediaOrchestrator = Depends(get_orchestrator),
):
    """Cancel the running job, if any."""
    return {"cancelled": orchestrator.cancel()}
