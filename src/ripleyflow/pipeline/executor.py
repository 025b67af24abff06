"""Multi-stage pipeline execution with all-or-nothing workspace cleanup."""

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from ripleyflow.config import Settings, get_settings
from ripleyflow.extractors.validators import prepare_output_path, validate_artifact, validate_input
from ripleyflow.models.errors import Cancelled, RipleyError
from ripleyflow.models.pipeline import PipelineRun, StageSpec
from ripleyflow.pipeline.events import EventSink, safe_emit
from ripleyflow.pipeline.stage import StageRunner
from ripleyflow.process.supervisor import ProcessSupervisor
from ripleyflow.storage.workspace import WorkspaceManager

logger = logging.getLogger(__name__)

StagePlan = Callable[[Path], Sequence[StageSpec]]


class PipelineExecutor:
    """Runs an ordered list of stages inside one temporary workspace.

    Strict ordering: each stage must succeed (and its artifact validate)
    before the next one starts. Whatever happens, the workspace is gone and
    the process slot is empty when ``run`` returns or raises.
    """

    def __init__(
        self,
        supervisor: ProcessSupervisor,
        sink: EventSink,
        settings: Settings | None = None,
        workspaces: WorkspaceManager | None = None,
        runner: StageRunner | None = None,
    ):
        self.settings = settings or get_settings()
        self.supervisor = supervisor
        self.sink = sink
        self.workspaces = workspaces or WorkspaceManager(
            base_dir=self.settings.temp_dir,
            prefix=self.settings.job_prefix,
            unique=self.settings.unique_workspaces,
        )
        self.runner = runner or StageRunner(supervisor, sink, self.settings)

    def run(
        self,
        job_id: str,
        base_name: str,
        input_path: Path,
        output_path: Path,
        plan: StagePlan,
        min_output_bytes: int | None = None,
    ) -> Path:
        """Execute the stages returned by ``plan(workspace)``; returns the output path."""
        self.supervisor.begin_run()
        try:
            validate_input(input_path)
            prepare_output_path(output_path)

            with self.workspaces.scope(base_name) as workspace:
                try:
                    run = PipelineRun(
                        job_id=job_id,
                        stages=list(plan(workspace)),
                        workspace=workspace,
                        input_path=input_path,
                        output_path=output_path,
                    )
                    self._run_stages(run)
                    validate_artifact(output_path, self._threshold(min_output_bytes), "Output")
                    self._check_cancelled()
                finally:
                    self.supervisor.clear()
        finally:
            self.supervisor.end_run()

        self._emit(100.0)
        logger.info("Job %s complete: %s", job_id, output_path)
        return output_path

    def _run_stages(self, run: PipelineRun) -> None:
        last = len(run.stages) - 1
        for index, stage in enumerate(run.stages):
            logger.info(
                "Job %s stage %d/%d '%s' [%.0f-%.0f%%]",
                run.job_id,
                index + 1,
                len(run.stages),
                stage.name,
                stage.progress_low,
                stage.progress_high,
            )
            try:
                self._check_cancelled()
                self.supervisor.clear()
                self.runner.run(stage)
                if stage.produces is not None:
                    validate_artifact(
                        stage.produces,
                        self.settings.min_artifact_bytes,
                        f"{stage.name} artifact",
                    )
            except Cancelled as e:
                logger.info("Job %s cancelled during stage '%s'", run.job_id, stage.name)
                raise e.tag_stage(stage.name, index)
            except RipleyError as e:
                logger.error("Job %s failed at stage '%s': %s", run.job_id, stage.name, e.message)
                raise e.tag_stage(stage.name, index)

            if index < last:
                self._emit(stage.progress_high)

    def _check_cancelled(self) -> None:
        if self.supervisor.cancel_requested:
            raise Cancelled()

    def _threshold(self, min_output_bytes: int | None) -> int:
        if min_output_bytes is None:
            return self.settings.min_artifact_bytes
        return min_output_bytes

    def _emit(self, value: float) -> None:
        safe_emit(self.sink, self.settings.progress_event, value)
