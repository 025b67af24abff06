"""Spawn, wait and cancel for one external process at a time."""

import logging
import subprocess
import sys
import time
from collections.abc import Iterator, Sequence
from pathlib import Path

from ripleyflow.models.errors import Cancelled, NonZeroExit, ProcessWaitFailed, SpawnFailed
from ripleyflow.process.slot import EMPTY, ProcessSlot, Terminator
from ripleyflow.process.terminate import select_terminator

logger = logging.getLogger(__name__)

# Hide the console window ffmpeg would otherwise open on Windows.
CREATE_NO_WINDOW = 0x08000000


class ProcessSupervisor:
    """Owns the process slot and the lifecycle of whatever occupies it."""

    def __init__(
        self,
        slot: ProcessSlot | None = None,
        terminator: Terminator | None = None,
        poll_interval: float = 0.1,
    ):
        self.slot = slot or ProcessSlot()
        self.terminator = terminator or select_terminator()
        self.poll_interval = poll_interval

    @property
    def is_idle(self) -> bool:
        return self.slot.is_empty

    @property
    def cancel_requested(self) -> bool:
        return self.slot.cancel_requested

    def begin_run(self) -> None:
        """Make cancel() stick for the whole run, including between stages."""
        self.slot.arm()

    def end_run(self) -> None:
        self.slot.disarm()

    def spawn(self, command: Sequence[str], cwd: Path | None = None) -> subprocess.Popen:
        """Start ``command`` with stdout and stderr merged into one text stream."""
        command = [str(part) for part in command]
        if self.slot.cancel_requested:
            raise Cancelled()
        if not self.slot.is_empty:
            raise SpawnFailed(
                "Cannot spawn while another process is running",
                details={"command": command[0]},
            )

        kwargs = {}
        if sys.platform.startswith("win"):
            kwargs["creationflags"] = CREATE_NO_WINDOW

        logger.info("Spawning: %s", " ".join(command))
        try:
            handle = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
                cwd=cwd,
                **kwargs,
            )
        except OSError as e:
            raise SpawnFailed(
                f"Failed to spawn {Path(command[0]).name}: {e}",
                details={"command": command[0], "error": str(e)},
            ) from e

        try:
            self.slot.store(handle)
        except Cancelled:
            self.terminator.terminate(handle)
            if handle.stdout is not None:
                handle.stdout.close()
            raise
        except RuntimeError as e:
            handle.kill()
            handle.wait()
            raise SpawnFailed(str(e), details={"command": command[0]}) from e
        return handle

    def iter_lines(self, handle: subprocess.Popen) -> Iterator[str]:
        """Lazily yield diagnostic lines until the process closes its output."""
        if handle.stdout is None:
            return
        for line in handle.stdout:
            yield line.rstrip("\r\n")

    def wait_for_completion(self, poll_interval: float | None = None) -> int:
        """Poll until the process exits or the slot is emptied by cancel()."""
        interval = self.poll_interval if poll_interval is None else poll_interval
        while True:
            try:
                status = self.slot.reap()
            except OSError as e:
                raise ProcessWaitFailed(
                    f"Failed to wait for process: {e}", details={"error": str(e)}
                ) from e
            if status is EMPTY:
                raise Cancelled()
            if status is not None:
                break
            time.sleep(interval)

        if status != 0:
            raise NonZeroExit(f"Process exited with code: {status}", code=status)
        return status

    def cancel(self) -> bool:
        """Terminate the running process, if any. Never raises for an idle slot."""
        cancelled = self.slot.request_cancel(self.terminator)
        if cancelled:
            logger.info("Cancellation requested")
        else:
            logger.debug("Cancellation requested but no process was running")
        return cancelled

    def clear(self) -> None:
        """Make sure the slot is empty before a new stage starts."""
        if self.slot.kill(self.terminator):
            logger.warning("Killed a stale process left in the slot")
