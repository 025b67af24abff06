"""Progress notification sinks."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol

from ripleyflow.models.pipeline import JobState

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    """Receives named progress notifications; implemented by the host."""

    def emit(self, event: str, value: float) -> None: ...


class LoggingSink:
    """Writes every notification to the log."""

    def __init__(self, level: int = logging.DEBUG):
        self.level = level

    def emit(self, event: str, value: float) -> None:
        logger.log(self.level, "%s: %.1f%%", event, value)


class CallbackSink:
    def __init__(self, callback: Callable[[str, float], None]):
        self.callback = callback

    def emit(self, event: str, value: float) -> None:
        self.callback(event, value)


class JobStateSink:
    """Mirrors the latest progress value onto a JobState."""

    def __init__(self, state: JobState):
        self.state = state

    def emit(self, event: str, value: float) -> None:
        self.state.progress = max(0.0, min(100.0, value))
        self.state.message = f"{value:.0f}%"
        self.state.updated_at = datetime.now(UTC)


class MultiSink:
    """Fans a notification out to several sinks."""

    def __init__(self, *sinks: EventSink):
        self.sinks = [s for s in sinks if s is not None]

    def emit(self, event: str, value: float) -> None:
        for sink in self.sinks:
            safe_emit(sink, event, value)


def safe_emit(sink: EventSink, event: str, value: float) -> None:
    """Deliver a notification, ignoring sink failures."""
    try:
        sink.emit(event, value)
    except Exception as e:
        logger.debug("Dropped %s notification (%.1f): %s", event, value, e)
