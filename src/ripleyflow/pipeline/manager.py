"""Media orchestrator: owns the process slot and runs convert/denoise/preview jobs."""

import logging
import threading
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

from ripleyflow.config import Settings, get_settings
from ripleyflow.media.commands import FFmpegCommandBuilder
from ripleyflow.models.errors import Cancelled, JobInProgress, ValidationError
from ripleyflow.models.media import ConvertOptions, DenoiseOptions, PreviewOptions
from ripleyflow.models.pipeline import JobKind, JobState, JobStatus, StageSpec, ToolRole
from ripleyflow.pipeline.events import EventSink, JobStateSink, MultiSink
from ripleyflow.pipeline.executor import PipelineExecutor
from ripleyflow.process.binaries import resolve_binary
from ripleyflow.process.supervisor import ProcessSupervisor
from ripleyflow.process.terminate import select_terminator
from ripleyflow.storage.workspace import WorkspaceManager

logger = logging.getLogger(__name__)

Resolver = Callable[[ToolRole], Path]


class MediaOrchestrator:
    """Runs media jobs one at a time against a single process slot."""

    def __init__(
        self,
        settings: Settings | None = None,
        supervisor: ProcessSupervisor | None = None,
        workspaces: WorkspaceManager | None = None,
        resolver: Resolver | None = None,
        sink: EventSink | None = None,
    ):
        self.settings = settings or get_settings()
        self.supervisor = supervisor or ProcessSupervisor(
            terminator=select_terminator(self.settings.terminate_grace_seconds),
            poll_interval=self.settings.poll_interval_seconds,
        )
        self.workspaces = workspaces or WorkspaceManager(
            base_dir=self.settings.temp_dir,
            prefix=self.settings.job_prefix,
            unique=self.settings.unique_workspaces,
        )
        self.resolver = resolver or self._resolve
        self.sink = sink
        self.builder = FFmpegCommandBuilder(self.settings)
        self._jobs: dict[str, JobState] = {}
        self._run_lock = threading.Lock()

        # leftovers from runs killed with the host
        purged = self.workspaces.purge_stale(self.settings.stale_workspace_ttl_seconds)
        if purged:
            logger.info("Removed %d stale workspaces", purged)

    def _resolve(self, role: ToolRole) -> Path:
        return resolve_binary(role, self.settings.resource_dir)

    # --- job registry ---

    def create_job(self, kind: JobKind) -> JobState:
        """Register a new queued job."""
        now = datetime.now(UTC)
        state = JobState(job_id=str(uuid.uuid4()), kind=kind, created_at=now, updated_at=now)
        self._jobs[state.job_id] = state
        return state

    def get_job_state(self, job_id: str) -> JobState | None:
        return self._jobs.get(job_id)

    @property
    def is_busy(self) -> bool:
        return self._run_lock.locked()

    def cancel(self) -> bool:
        """Cancel whatever process is currently running."""
        return self.supervisor.cancel()

    # --- jobs ---

    def convert(self, job_id: str, options: ConvertOptions) -> Path:
        """Re-encode a video into the requested container."""
        input_path, output_path = Path(options.input_path), Path(options.output_path)
        with self._running(job_id, output_path) as executor:
            ffmpeg = self.resolver(ToolRole.FFMPEG)
            args = self.builder.build_convert_args(input_path, output_path, options.format)

            def plan(workspace: Path) -> list[StageSpec]:
                return [
                    StageSpec(
                        name="convert",
                        role=ToolRole.FFMPEG,
                        executable=ffmpeg,
                        args=tuple(args),
                        progress_low=0.0,
                        progress_high=100.0,
                    )
                ]

            return executor.run(job_id, _base_name(input_path), input_path, output_path, plan)

    def denoise(self, job_id: str, options: DenoiseOptions) -> Path:
        """Extract audio, denoise it, and mux it back over the original video."""
        input_path, output_path = Path(options.input_path), Path(options.output_path)
        base = _base_name(input_path)
        with self._running(job_id, output_path) as executor:
            ffmpeg = self.resolver(ToolRole.FFMPEG)
            deep_filter = self.resolver(ToolRole.DEEP_FILTER)

            def plan(workspace: Path) -> list[StageSpec]:
                wav_file = workspace / f"{base}.wav"
                denoised_dir = workspace / "denoised"
                denoised_dir.mkdir(exist_ok=True)
                denoised_wav = denoised_dir / f"{base}.wav"
                return [
                    StageSpec(
                        name="extract-audio",
                        role=ToolRole.FFMPEG,
                        executable=ffmpeg,
                        args=tuple(self.builder.build_extract_audio_args(input_path, wav_file)),
                        progress_low=0.0,
                        progress_high=33.0,
                        produces=wav_file,
                    ),
                    StageSpec(
                        name="denoise-audio",
                        role=ToolRole.DEEP_FILTER,
                        executable=deep_filter,
                        args=tuple(self.builder.build_deep_filter_args(wav_file, denoised_dir)),
                        progress_low=33.0,
                        progress_high=66.0,
                        reports_progress=False,
                        produces=denoised_wav,
                    ),
                    StageSpec(
                        name="combine",
                        role=ToolRole.FFMPEG,
                        executable=ffmpeg,
                        args=tuple(
                            self.builder.build_combine_args(input_path, denoised_wav, output_path)
                        ),
                        progress_low=66.0,
                        progress_high=100.0,
                    ),
                ]

            return executor.run(job_id, base, input_path, output_path, plan)

    def preview(self, job_id: str, options: PreviewOptions) -> Path:
        """Generate a thumbnail image or a short preview clip."""
        input_path, output_path = Path(options.input_path), Path(options.output_path)
        with self._running(job_id, output_path) as executor:
            ffmpeg = self.resolver(ToolRole.FFMPEG)
            args = self.builder.build_preview_args(
                input_path, output_path, options.preview_type, options.timestamp
            )

            def plan(workspace: Path) -> list[StageSpec]:
                return [
                    StageSpec(
                        name=f"preview-{options.preview_type.lower()}",
                        role=ToolRole.FFMPEG,
                        executable=ffmpeg,
                        args=tuple(args),
                    )
                ]

            # single frames are legitimately small
            return executor.run(
                job_id, _base_name(input_path), input_path, output_path, plan, min_output_bytes=1
            )

    # --- internals ---

    @contextmanager
    def _running(self, job_id: str, output_path: Path) -> Iterator[PipelineExecutor]:
        """Hold the run lock for one job and record how it ends."""
        state = self._jobs.get(job_id)
        if state is None:
            raise ValidationError(f"Job {job_id} not found")
        if not self._run_lock.acquire(blocking=False):
            exc = JobInProgress("Another job is already running")
            self._finish(state, JobStatus.FAILED, exc)
            raise exc
        try:
            self._update(state, JobStatus.RUNNING, 0.0, "Starting...")
            sink = MultiSink(JobStateSink(state), self.sink)
            yield PipelineExecutor(self.supervisor, sink, self.settings, self.workspaces)
            state.output_path = str(output_path)
            self._finish(state, JobStatus.COMPLETE)
        except Cancelled as e:
            self._finish(state, JobStatus.CANCELLED, e)
            raise
        except Exception as e:
            self._finish(state, JobStatus.FAILED, e)
            raise
        finally:
            self._run_lock.release()

    def _update(self, state: JobState, status: JobStatus, progress: float | None, message: str):
        state.status = status
        if progress is not None:
            state.progress = progress
        state.message = message
        state.updated_at = datetime.now(UTC)

    def _finish(self, state: JobState, status: JobStatus, exc: Exception | None = None) -> None:
        now = datetime.now(UTC)
        state.status = status
        state.updated_at = now
        state.completed_at = now
        if status == JobStatus.COMPLETE:
            state.progress = 100.0
            state.message = "Processing complete!"
        elif status == JobStatus.CANCELLED:
            state.message = "Job cancelled"
            state.error_type = type(exc).__name__
        else:
            state.message = "Processing failed"
            state.error = str(exc)
            state.error_type = type(exc).__name__
        logger.info("Job %s %s", state.job_id, status.value)


def _base_name(path: Path) -> str:
    return path.stem or "video"
