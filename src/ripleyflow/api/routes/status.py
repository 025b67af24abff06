"""Status endpoint."""

from fastapi import APIRouter, Depends

from ripleyflow.api.dependencies import get_orchestrator
from ripleyflow.models.errors import ValidationError
from ripleyflow.pipeline.manager import MediaOrchestrator

router = APIRouter(prefix="/api/v1", tags=["status"])


@router.get("/status/{job_id}")
async def get_status(
    job_id: str,
    orchestrator: MediaOrchestrator = Depends(get_orchestrator),
):
    """Get the processing status of a job."""
    state = orchestrator.get_job_state(job_id)
    if not state:
        raise ValidationError(f"Job {job_id} not found")

    return {
        "job_id": state.job_id,
        "kind": state.kind.value,
        "status": state.status.value,
        "progress": state.progress,
        "message": state.message,
        "created_at": state.created_at.isoformat() if state.created_at else None,
        "updated_at": state.updated_at.isoformat() if state.updated_at else None,
        "completed_at": state.completed_at.isoformat() if state.completed_at else None,
        "error": state.error,
        "error_type": state.error_type,
        "output_path": state.output_path,
    }
