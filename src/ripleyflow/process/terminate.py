"""Platform-specific process termination."""

import logging
import subprocess
import sys

logger = logging.getLogger(__name__)


class SignalTerminator:
    """SIGTERM, then SIGKILL if the process outlives the grace period."""

    def __init__(self, grace_seconds: float = 2.0):
        self.grace_seconds = grace_seconds

    def terminate(self, handle: subprocess.Popen) -> None:
        try:
            handle.terminate()
        except ProcessLookupError:
            return
        try:
            handle.wait(timeout=self.grace_seconds)
        except subprocess.TimeoutExpired:
            logger.warning("Process %d ignored SIGTERM, killing", handle.pid)
            handle.kill()
            handle.wait()


class TreeTerminator:
    """Kill a process and all of its descendants with taskkill.

    On Windows killing the parent leaves ffmpeg helpers alive, so the whole
    tree is taken down. Falls back to ``kill()`` when taskkill fails.
    """

    def __init__(self, grace_seconds: float = 2.0):
        self.grace_seconds = grace_seconds

    def terminate(self, handle: subprocess.Popen) -> None:
        try:
            result = subprocess.run(
                ["taskkill", "/F", "/T", "/PID", str(handle.pid)],
                capture_output=True,
                text=True,
            )
            killed = result.returncode == 0
        except OSError as e:
            logger.warning("taskkill unavailable: %s", e)
            killed = False
        if not killed and handle.poll() is None:
            handle.kill()
        try:
            handle.wait(timeout=self.grace_seconds)
        except subprocess.TimeoutExpired:
            logger.warning("Process %d still alive after termination", handle.pid)


def select_terminator(grace_seconds: float = 2.0, platform: str | None = None):
    """Pick the termination strategy for the running platform."""
    platform = platform or sys.platform
    if platform.startswith("win"):
        return TreeTerminator(grace_seconds)
    return SignalTerminator(grace_seconds)
