"""FFmpeg and deep-filter argument construction."""

from pathlib import Path

from ripleyflow.config import Settings, get_settings
from ripleyflow.models.errors import ValidationError
from ripleyflow.models.media import PreviewType

# Per-container codec arguments for plain conversion.
FORMAT_ARGS: dict[str, list[str]] = {
    "mp4": [
        "-c:v", "libx264",
        "-c:a", "aac",
        "-preset", "{preset}",
        "-crf", "{crf}",
        "-movflags", "+faststart",
        "-pix_fmt", "yuv420p",
        "-profile:v", "high",
        "-level", "4.0",
    ],
    "avi": ["-c:v", "libx264", "-c:a", "libmp3lame"],
    "mov": ["-c:v", "libx264", "-c:a", "aac"],
    "mkv": ["-c:v", "libx264", "-c:a", "aac"],
    "webm": [
        "-c:v", "libvpx-vp9",
        "-crf", "30",
        "-b:v", "0",
        "-c:a", "libopus",
        "-b:a", "128k",
        "-pix_fmt", "yuv420p",
    ],
}  # fmt: skip
DEFAULT_FORMAT_ARGS = ["-c:v", "libx264", "-c:a", "aac"]


def format_timestamp(seconds: float) -> str:
    """Seconds to an ffmpeg ``HH:MM:SS.ss`` position."""
    centis = round(seconds * 100)
    minutes, centis = divmod(centis, 6000)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}:{centis / 100:05.2f}"


class FFmpegCommandBuilder:
    """Builds argument vectors for the external media tools."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def build_convert_args(self, input_path: Path, output_path: Path, fmt: str) -> list[str]:
        """Re-encode into the container named by ``fmt``."""
        template = FORMAT_ARGS.get(fmt.lower().lstrip("."), DEFAULT_FORMAT_ARGS)
        codec_args = [
            arg.format(preset=self.settings.output_preset, crf=self.settings.output_crf)
            for arg in template
        ]
        return ["-i", str(input_path), *codec_args, "-y", str(output_path)]

    def build_extract_audio_args(self, input_path: Path, wav_path: Path) -> list[str]:
        """Drop the video stream and resample audio for the denoiser."""
        return [
            "-y",
            "-i", str(input_path),
            "-vn",
            "-ar", str(self.settings.denoise_sample_rate),
            str(wav_path),
        ]  # fmt: skip

    def build_deep_filter_args(self, wav_path: Path, output_dir: Path) -> list[str]:
        return [str(wav_path), "-D", "-o", str(output_dir)]

    def build_combine_args(
        self, video_path: Path, audio_path: Path, output_path: Path
    ) -> list[str]:
        """Mux the original video with a replacement audio track."""
        return [
            "-y",
            "-i", str(video_path),
            "-i", str(audio_path),
            "-map", "0:v",
            "-map", "1:a",
            "-c:v", "libx264",
            "-c:a", "aac",
            "-preset", self.settings.output_preset,
            "-crf", str(self.settings.output_crf),
            "-movflags", "+faststart",
            "-pix_fmt", "yuv420p",
            "-profile:v", "high",
            "-level", "4.0",
            "-b:a", self.settings.audio_bitrate,
            "-strict", "-2",
            "-shortest",
            "-vf", "scale=iw:ih",
            "-max_muxing_queue_size", "1024",
            str(output_path),
        ]  # fmt: skip

    def build_preview_args(
        self,
        input_path: Path,
        output_path: Path,
        preview_type: str,
        timestamp: float | None = None,
    ) -> list[str]:
        """Single frame (thumbnail) or a short clip starting at ``timestamp``."""
        position = format_timestamp(1.0 if timestamp is None else timestamp)
        args = ["-i", str(input_path)]
        kind = preview_type.lower()
        if kind == PreviewType.THUMBNAIL:
            args.extend(["-ss", position, "-vframes", "1", "-q:v", "2"])
        elif kind == PreviewType.CLIP:
            args.extend(
                [
                    "-ss", position,
                    "-t", f"{self.settings.preview_clip_seconds:g}",
                    "-c:v", "libx264",
                    "-c:a", "aac",
                ]
            )  # fmt: skip
        else:
            raise ValidationError(
                "Invalid preview type. Use 'thumbnail' or 'clip'",
                details={"preview_type": preview_type},
            )
        args.extend(["-y", str(output_path)])
        return args
