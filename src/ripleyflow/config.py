"""Application configuration using Pydantic BaseSettings."""

import tempfile
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """RipleyFlow configuration loaded from environment variables."""

    model_config = {"env_prefix": "RIPLEYFLOW_", "env_file": ".env", "extra": "ignore"}

    # Process supervision
    poll_interval_seconds: float = 0.1
    terminate_grace_seconds: float = 2.0
    resource_dir: Path | None = None

    # Progress telemetry
    progress_event: str = "conversion-progress"
    progress_min_delta: float = 0.5
    progress_min_interval_seconds: float = 0.2

    # Workspaces
    temp_dir: Path = Path(tempfile.gettempdir())
    job_prefix: str = "ripleyflow"
    unique_workspaces: bool = True
    stale_workspace_ttl_seconds: int = 86400

    # Artifact validation
    min_artifact_bytes: int = 1000

    # Encoding
    output_crf: int = 23
    output_preset: str = "medium"
    audio_bitrate: str = "192k"
    denoise_sample_rate: int = 48000
    preview_clip_seconds: float = 5.0


def get_settings() -> Settings:
    """Return settings instance."""
    return Settings()
