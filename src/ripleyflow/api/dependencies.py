"""Dependency injection providers for FastAPI."""

from functools import lru_cache

from ripleyflow.pipeline.events import LoggingSink
from ripleyflow.pipeline.manager import MediaOrchestrator


@lru_cache
def get_orchestrator() -> MediaOrchestrator:
    return MediaOrchestrator(sink=LoggingSink())
