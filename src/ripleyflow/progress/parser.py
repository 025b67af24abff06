"""FFmpeg diagnostic-stream parsing.

Everything here is pure: each line is evaluated on its own and no state is
kept between calls. Callers that need "first Duration only" semantics track
that themselves (see ``first_duration`` and the stage runner).
"""

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass

DURATION_RE = re.compile(r"Duration: ([^,]*),")
TIME_RE = re.compile(r"time=(\S+)")

# Liveness value reported once a position is seen but the total is unknown.
ACTIVITY_PROGRESS = 3.0


def parse_time_string(value: str) -> float | None:
    """Parse ``H:MM:SS(.frac)`` into seconds, or None if malformed."""
    value = value.strip()
    sign = 1.0
    if value.startswith("-"):
        sign, value = -1.0, value[1:]
    parts = value.split(":")
    if len(parts) != 3:
        return None
    try:
        hours, minutes, seconds = (float(p) for p in parts)
    except ValueError:
        return None
    total = hours * 3600 + minutes * 60 + seconds
    if not math.isfinite(total):
        return None
    return sign * total


def parse_duration(line: str) -> float | None:
    """Extract the ``Duration: H:MM:SS.xx,`` marker from a line."""
    match = DURATION_RE.search(line)
    if not match:
        return None
    return parse_time_string(match.group(1))


def parse_time(line: str) -> float | None:
    """Extract the ``time=H:MM:SS.xx`` position marker from a line."""
    match = TIME_RE.search(line)
    if not match:
        return None
    return parse_time_string(match.group(1))


def compute_progress(current: float | None, total: float | None) -> float | None:
    """Percentage of ``total`` reached by ``current``, clamped to [0, 100].

    With no usable total but a known position, returns ACTIVITY_PROGRESS so
    the caller can still signal that work is happening.
    """
    if current is None:
        return None
    if total is None or total <= 0:
        return ACTIVITY_PROGRESS
    return max(0.0, min(100.0, current / total * 100.0))


def first_duration(lines: Iterable[str]) -> float | None:
    """Duration from the first line that carries one; later ones are ignored."""
    for line in lines:
        duration = parse_duration(line)
        if duration is not None:
            return duration
    return None


@dataclass(frozen=True)
class ParsedLine:
    duration: float | None
    position: float | None
    progress: float | None


class ProgressParser:
    """Stateless facade over the parsing functions."""

    def parse_line(self, line: str, total: float | None = None) -> ParsedLine:
        """Parse a single line given the total duration known so far."""
        duration = parse_duration(line)
        position = parse_time(line)
        effective_total = total if total is not None else duration
        return ParsedLine(
            duration=duration,
            position=position,
            progress=compute_progress(position, effective_total),
        )
