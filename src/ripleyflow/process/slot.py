"""Single shared cell holding the live process handle."""

import logging
import subprocess
import threading
from typing import Protocol

from ripleyflow.models.errors import Cancelled

logger = logging.getLogger(__name__)

# Returned by ProcessSlot.reap() when the slot was emptied by someone else.
EMPTY = object()


class Terminator(Protocol):
    def terminate(self, handle: subprocess.Popen) -> None: ...


class ProcessSlot:
    """Holds at most one process handle behind a lock.

    Waiters and cancellers share the slot; an empty slot while a stage is
    waiting means the process was cancelled.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._handle: subprocess.Popen | None = None
        self._armed = False
        self._cancel_requested = False

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return self._handle is None

    @property
    def cancel_requested(self) -> bool:
        with self._lock:
            return self._cancel_requested

    def arm(self) -> None:
        """Start a run: cancel requests now stick until disarm()."""
        with self._lock:
            self._armed = True
            self._cancel_requested = False

    def disarm(self) -> None:
        with self._lock:
            self._armed = False
            self._cancel_requested = False

    def store(self, handle: subprocess.Popen) -> None:
        """Occupy the slot.

        Raises RuntimeError if it is already occupied and Cancelled if the
        current run was cancelled while nothing was running.
        """
        with self._lock:
            if self._cancel_requested:
                raise Cancelled()
            if self._handle is not None:
                raise RuntimeError(
                    f"Process slot already holds pid {self._handle.pid}; clear it first"
                )
            self._handle = handle

    def take(self) -> subprocess.Popen | None:
        """Empty the slot and hand back whatever it held."""
        with self._lock:
            handle, self._handle = self._handle, None
            return handle

    def kill(self, terminator: Terminator) -> bool:
        """Take the handle and terminate it. False if nothing was running."""
        handle = self.take()
        if handle is None:
            return False
        logger.info("Terminating process %d", handle.pid)
        terminator.terminate(handle)
        return True

    def request_cancel(self, terminator: Terminator) -> bool:
        """Kill the held process and, during a run, remember the request.

        True if a process was terminated or an armed run will now stop before
        its next stage.
        """
        with self._lock:
            handle, self._handle = self._handle, None
            if self._armed:
                self._cancel_requested = True
            requested = self._armed
        if handle is not None:
            logger.info("Terminating process %d", handle.pid)
            terminator.terminate(handle)
        return handle is not None or requested

    def reap(self):
        """Poll the held process once.

        Returns EMPTY if the slot was emptied, None while the process is still
        running, or its exit code after taking it out of the slot.
        """
        with self._lock:
            if self._handle is None:
                return EMPTY
            try:
                code = self._handle.poll()
            except OSError:
                self._handle = None
                raise
            if code is None:
                return None
            self._handle = None
            return code
