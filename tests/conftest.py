"""Shared test fixtures and fake external tools."""

import stat
import sys
import tempfile
import threading
import time
from pathlib import Path

import pytest

from ripleyflow.config import Settings
from ripleyflow.models.pipeline import StageSpec, ToolRole
from ripleyflow.process.supervisor import ProcessSupervisor
from ripleyflow.process.terminate import select_terminator
from ripleyflow.storage.workspace import WorkspaceManager

# Behaves like ffmpeg: Duration once, then time= updates separated by \r, then
# writes the last positional argument.
FAKE_ENCODER = r'''
import argparse, sys, time

def fmt(seconds):
    whole = int(seconds)
    return "%02d:%02d:%05.2f" % (whole // 3600, (whole % 3600) // 60, seconds % 60)

p = argparse.ArgumentParser()
p.add_argument("output")
p.add_argument("--duration", type=float, default=10.0)
p.add_argument("--steps", type=int, default=5)
p.add_argument("--size", type=int, default=4096)
p.add_argument("--exit-code", type=int, default=0)
p.add_argument("--sleep", type=float, default=0.0)
p.add_argument("--no-duration", action="store_true")
a = p.parse_args()

err = sys.stderr
err.write("ffmpeg version 6.0 Copyright (c) 2000-2023 the FFmpeg developers\n")
if not a.no_duration:
    err.write("  Duration: %s, start: 0.000000, bitrate: 1205 kb/s\n" % fmt(a.duration))
for i in range(1, a.steps + 1):
    t = a.duration * i / a.steps
    err.write("frame=%5d fps=30 q=28.0 size=  256kB time=%s bitrate= 419.4kbits/s speed=1x\r"
              % (i * 30, fmt(t)))
    err.flush()
    if a.sleep:
        time.sleep(a.sleep)
err.write("\n")
if a.exit_code:
    err.write("Conversion failed!\n")
if a.size >= 0:
    with open(a.output, "wb") as f:
        f.write(b"\0" * a.size)
sys.exit(a.exit_code)
'''

# Prints a line, then sleeps until killed.
FAKE_SLEEPER = r'''
import sys, time
print("started", flush=True)
time.sleep(60)
'''

# Stand-in for the real ffmpeg binary: output is the last argument.
FAKE_FFMPEG_BIN = r'''
import sys, time
args = sys.argv[1:]
sys.stderr.write("  Duration: 00:00:04.00, start: 0.000000, bitrate: 800 kb/s\n")
for t in ("00:00:01.00", "00:00:02.00", "00:00:03.00", "00:00:04.00"):
    sys.stderr.write("frame=  30 fps=30 q=28.0 size=  128kB time=%s bitrate=1.0kbits/s\r" % t)
    sys.stderr.flush()
sys.stderr.write("\n")
with open(args[-1], "wb") as f:
    f.write(b"\0" * 4096)
'''

# Stand-in for deep-filter: <wav> -D -o <outdir> writes <outdir>/<wav name>.
FAKE_DEEP_FILTER_BIN = r'''
import os, sys
args = sys.argv[1:]
wav, outdir = args[0], args[args.index("-o") + 1]
print("Processing %s" % wav)
with open(os.path.join(outdir, os.path.basename(wav)), "wb") as f:
    f.write(b"\0" * 4096)
'''


class RecordingSink:
    """Collects every notification it receives."""

    def __init__(self):
        self.events: list[tuple[str, float]] = []

    def emit(self, event: str, value: float) -> None:
        self.events.append((event, value))

    @property
    def values(self) -> list[float]:
        return [v for _, v in self.events]


class CancellingSink(RecordingSink):
    """Cancels the supervisor the first time a given value arrives."""

    def __init__(self, supervisor: ProcessSupervisor, trigger: float):
        super().__init__()
        self.supervisor = supervisor
        self.trigger = trigger
        self.results: list[bool] = []

    def emit(self, event: str, value: float) -> None:
        super().emit(event, value)
        if value == self.trigger and not self.results:
            self.results.append(self.supervisor.cancel())


class FailingSink:
    def emit(self, event: str, value: float) -> None:
        raise RuntimeError("UI went away")


def write_script(path: Path, source: str) -> Path:
    path.write_text(source)
    return path


def write_executable(path: Path, source: str) -> Path:
    """Write a script that can be spawned directly (POSIX only)."""
    path.write_text(f"#!{sys.executable}\n{source}")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def python_stage(
    name: str,
    script: Path,
    *args: str,
    low: float = 0.0,
    high: float = 100.0,
    reports_progress: bool = True,
    produces: Path | None = None,
) -> StageSpec:
    """A stage that runs ``script`` with the current interpreter."""
    return StageSpec(
        name=name,
        role=ToolRole.FFMPEG,
        executable=Path(sys.executable),
        args=(str(script), *args),
        progress_low=low,
        progress_high=high,
        reports_progress=reports_progress,
        produces=produces,
    )


def cancel_when_running(supervisor: ProcessSupervisor, delay: float = 0.2) -> threading.Thread:
    """Cancel from another thread once a process occupies the slot.

    After joining, ``thread.cancelled_at`` holds the monotonic time at which
    cancel() returned.
    """

    def _cancel():
        deadline = time.monotonic() + 10
        while supervisor.is_idle and time.monotonic() < deadline:
            time.sleep(0.01)
        time.sleep(delay)
        supervisor.cancel()
        thread.cancelled_at = time.monotonic()

    thread = threading.Thread(target=_cancel, daemon=True)
    thread.cancelled_at = None
    thread.start()
    return thread


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        temp_dir=tmp_path / "tmp",
        poll_interval_seconds=0.02,
        terminate_grace_seconds=2.0,
        unique_workspaces=True,
    )


@pytest.fixture
def supervisor(settings):
    return ProcessSupervisor(
        terminator=select_terminator(settings.terminate_grace_seconds),
        poll_interval=settings.poll_interval_seconds,
    )


@pytest.fixture
def workspaces(settings):
    settings.temp_dir.mkdir(parents=True, exist_ok=True)
    return WorkspaceManager(base_dir=settings.temp_dir, prefix="testjob", unique=True)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def encoder(tmp_path):
    return write_script(tmp_path / "fake_encoder.py", FAKE_ENCODER)


@pytest.fixture
def sleeper(tmp_path):
    return write_script(tmp_path / "fake_sleeper.py", FAKE_SLEEPER)


@pytest.fixture
def input_video(tmp_path):
    path = tmp_path / "holiday clip.mp4"
    path.write_bytes(b"\0" * 2048)
    return path
