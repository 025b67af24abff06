"""Drives a single external process and reports its progress."""

import logging
from collections import deque

from ripleyflow.config import Settings, get_settings
from ripleyflow.models.errors import NonZeroExit
from ripleyflow.models.pipeline import StageSpec
from ripleyflow.pipeline.events import EventSink, safe_emit
from ripleyflow.process.supervisor import ProcessSupervisor
from ripleyflow.progress.parser import ProgressParser
from ripleyflow.progress.throttle import ProgressThrottle

logger = logging.getLogger(__name__)

# Stage-local heartbeats, emitted regardless of throttling.
HEARTBEAT_SPAWN = 1.0
HEARTBEAT_DURATION = 2.0

STDERR_TAIL_LINES = 30


class StageRunner:
    """Runs one StageSpec to completion through the supervisor."""

    def __init__(
        self,
        supervisor: ProcessSupervisor,
        sink: EventSink,
        settings: Settings | None = None,
        event_name: str | None = None,
        throttle_factory=None,
    ):
        self.supervisor = supervisor
        self.sink = sink
        self.settings = settings or get_settings()
        self.event_name = event_name or self.settings.progress_event
        self.throttle_factory = throttle_factory or self._default_throttle
        self.parser = ProgressParser()

    def _default_throttle(self) -> ProgressThrottle:
        return ProgressThrottle(
            min_delta=self.settings.progress_min_delta,
            min_interval=self.settings.progress_min_interval_seconds,
        )

    def run(self, stage: StageSpec) -> int:
        """Run the stage; returns 0 or raises a RipleyError."""
        self.supervisor.clear()
        handle = self.supervisor.spawn(stage.command, cwd=stage.cwd)
        logger.info("Stage '%s' started (pid %d)", stage.name, handle.pid)

        throttle = self.throttle_factory()
        tail: deque[str] = deque(maxlen=STDERR_TAIL_LINES)
        self._emit(throttle.force(stage.remap(HEARTBEAT_SPAWN)))

        try:
            for line in self.supervisor.iter_lines(handle):
                if self.supervisor.is_idle:
                    # cancelled; descendants may still hold the pipe open
                    break
                tail.append(line)
                if stage.reports_progress:
                    self._track(stage, throttle, line)
            self.supervisor.wait_for_completion(self.settings.poll_interval_seconds)
        except NonZeroExit as e:
            e.details["stderr"] = "\n".join(tail)
            logger.error("Stage '%s' failed with code %d", stage.name, e.code)
            raise
        finally:
            if handle.stdout is not None:
                handle.stdout.close()

        logger.info("Stage '%s' finished", stage.name)
        return 0

    def _track(self, stage: StageSpec, throttle: ProgressThrottle, line: str) -> None:
        state = throttle.state
        parsed = self.parser.parse_line(line, state.total_duration)
        # only the first Duration marker counts
        if state.total_duration is None and parsed.duration is not None:
            state.total_duration = parsed.duration
            logger.debug("Stage '%s' input duration: %.2fs", stage.name, parsed.duration)
            self._emit(throttle.force(stage.remap(HEARTBEAT_DURATION)))
            return

        if parsed.progress is None:
            return
        value = throttle.offer(stage.remap(parsed.progress))
        if value is not None:
            self._emit(value)

    def _emit(self, value: float) -> None:
        safe_emit(self.sink, self.event_name, value)
