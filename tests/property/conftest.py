"""Hypothesis strategies for property-based testing."""

from pathlib import Path

from hypothesis import strategies as st

from ripleyflow.models.pipeline import StageSpec, ToolRole


def format_clock(seconds: float) -> str:
    whole = int(seconds)
    return f"{whole // 3600:02d}:{(whole % 3600) // 60:02d}:{seconds % 60:05.2f}"


@st.composite
def generate_clock_parts(draw):
    """Hours, minutes and centisecond-precision seconds."""
    hours = draw(st.integers(min_value=0, max_value=99))
    minutes = draw(st.integers(min_value=0, max_value=59))
    centis = draw(st.integers(min_value=0, max_value=5999))
    return hours, minutes, centis / 100


@st.composite
def generate_progress_stream(draw):
    """A duration plus a sequence of time= positions as ffmpeg would print them."""
    duration = draw(st.integers(min_value=1, max_value=36000)) / 10
    positions = draw(
        st.lists(
            st.floats(min_value=0.0, max_value=duration * 1.2, allow_nan=False),
            min_size=1,
            max_size=40,
        )
    )
    lines = [f"  Duration: {format_clock(duration)}, start: 0.000000, bitrate: 800 kb/s"]
    lines += [f"frame=  10 fps=25 size=  64kB time={format_clock(p)} speed=1x" for p in positions]
    return lines


@st.composite
def generate_stage_ranges(draw):
    """Ordered, non-overlapping stage ranges covering part of [0, 100]."""
    n = draw(st.integers(min_value=1, max_value=5))
    cuts = sorted(
        draw(
            st.lists(
                st.integers(min_value=0, max_value=100), min_size=n + 1, max_size=n + 1
            )
        )
    )
    return [
        StageSpec(
            name=f"stage-{i}",
            role=ToolRole.FFMPEG,
            executable=Path("ffmpeg"),
            progress_low=float(cuts[i]),
            progress_high=float(cuts[i + 1]),
        )
        for i in range(n)
    ]
