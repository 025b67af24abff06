"""Request models for media jobs."""

from enum import StrEnum

from pydantic import BaseModel, Field


class PreviewType(StrEnum):
    THUMBNAIL = "thumbnail"
    CLIP = "clip"


class ConvertOptions(BaseModel):
    """Re-encode a video into another container."""

    input_path: str = Field(..., min_length=1)
    output_path: str = Field(..., min_length=1)
    format: str = Field(default="mp4", description="Target container, e.g. mp4, webm")


class DenoiseOptions(BaseModel):
    """Replace a video's audio track with a denoised version."""

    input_path: str = Field(..., min_length=1)
    output_path: str = Field(..., min_length=1)


class PreviewOptions(BaseModel):
    """Extract a thumbnail frame or a short clip."""

    input_path: str = Field(..., min_length=1)
    output_path: str = Field(..., min_length=1)
    preview_type: str = Field(default=PreviewType.THUMBNAIL.value)
    timestamp: float | None = Field(default=None, ge=0, description="Seconds into the video")


class VideoInfo(BaseModel):
    """Basic facts about a selected video file."""

    path: str
    name: str
    size: int = Field(..., ge=0)
