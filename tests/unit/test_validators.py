"""Tests for input, output and artifact validation."""

import pytest

from ripleyflow.extractors.validators import (
    prepare_output_path,
    probe_video,
    validate_artifact,
    validate_input,
)
from ripleyflow.models.errors import (
    InputMissing,
    InvalidOutputPath,
    OutputMissing,
    OutputTooSmall,
    ValidationError,
)


class TestValidateInput:
    def test_existing_file(self, input_video):
        validate_input(input_video)

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputMissing) as exc_info:
            validate_input(tmp_path / "missing.mp4")
        assert exc_info.value.component == "validation"
        assert isinstance(exc_info.value, ValidationError)

    def test_directory_rejected(self, tmp_path):
        with pytest.raises(InputMissing):
            validate_input(tmp_path)


class TestPrepareOutputPath:
    def test_creates_parent(self, tmp_path):
        target = tmp_path / "a" / "b" / "out.mp4"
        assert prepare_output_path(target) == target
        assert target.parent.is_dir()

    def test_directory_rejected(self, tmp_path):
        with pytest.raises(InvalidOutputPath):
            prepare_output_path(tmp_path)

    def test_parent_is_file(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        with pytest.raises(InvalidOutputPath, match="Failed to create output directory"):
            prepare_output_path(blocker / "out.mp4")


class TestValidateArtifact:
    def test_returns_size(self, tmp_path):
        path = tmp_path / "out.mp4"
        path.write_bytes(b"\0" * 1000)
        assert validate_artifact(path, min_bytes=1000) == 1000

    def test_missing(self, tmp_path):
        with pytest.raises(OutputMissing, match="Output file was not created"):
            validate_artifact(tmp_path / "out.mp4", min_bytes=1000)

    def test_too_small(self, tmp_path):
        path = tmp_path / "out.mp4"
        path.write_bytes(b"\0" * 999)
        with pytest.raises(OutputTooSmall, match=r"size < 1000 bytes") as exc_info:
            validate_artifact(path, min_bytes=1000)
        assert exc_info.value.details["size"] == 999

    def test_label_in_message(self, tmp_path):
        with pytest.raises(OutputMissing, match="Denoised audio file"):
            validate_artifact(tmp_path / "a.wav", min_bytes=1, label="Denoised audio")

    def test_default_threshold_from_settings(self, tmp_path, monkeypatch):
        monkeypatch.setenv("RIPLEYFLOW_MIN_ARTIFACT_BYTES", "10")
        path = tmp_path / "out.mp4"
        path.write_bytes(b"\0" * 20)
        assert validate_artifact(path) == 20


class TestProbeVideo:
    def test_info(self, input_video):
        info = probe_video(input_video)
        assert info.name == "holiday clip.mp4"
        assert info.size == 2048
        assert info.path == str(input_video)

    def test_missing(self, tmp_path):
        with pytest.raises(InputMissing):
            probe_video(tmp_path / "nope.mp4")
