"""Output download and file info endpoints."""

import mimetypes
from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from ripleyflow.api.dependencies import get_orchestrator
from ripleyflow.extractors.validators import probe_video
from ripleyflow.models.errors import ValidationError
from ripleyflow.models.media import VideoInfo
from ripleyflow.models.pipeline import JobStatus
from ripleyflow.pipeline.manager import MediaOrchestrator

router = APIRouter(prefix="/api/v1", tags=["download"])


@router.get("/download/{job_id}")
async def download_output(
    job_id: str,
    orchestrator: MediaOrchestrator = Depends(get_orchestrator),
):
    """Download a finished job's output file."""
    state = orchestrator.get_job_state(job_id)
    if not state:
        raise ValidationError(f"Job {job_id} not found")

    if state.status != JobStatus.COMPLETE:
        raise ValidationError(f"Job is not complete (current status: {state.status.value})")

    if not state.output_path or not Path(state.output_path).exists():
        raise ValidationError("Output file not found")

    output = Path(state.output_path)
    media_type = mimetypes.guess_type(output.name)[0] or "application/octet-stream"
    return FileResponse(path=output, media_type=media_type, filename=output.name)


@router.get("/videos/info", response_model=VideoInfo)
async def video_info(path: str):
    """Name and size of a video on disk."""
    return probe_video(Path(path))
