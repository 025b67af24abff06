"""Tests for external tool resolution."""

import sys
from pathlib import Path

import pytest

from ripleyflow.models.errors import BinaryNotFound
from ripleyflow.models.pipeline import ToolRole
from ripleyflow.process.binaries import bundled_path, executable_name, resolve_binary
from tests.conftest import write_executable

posix_only = pytest.mark.skipif(sys.platform.startswith("win"), reason="uses executable bit")


class TestExecutableName:
    def test_windows_suffix(self):
        assert executable_name(ToolRole.FFMPEG, platform="win32") == "ffmpeg.exe"
        assert executable_name(ToolRole.DEEP_FILTER, platform="win32") == "deep-filter.exe"

    def test_posix(self):
        assert executable_name(ToolRole.FFMPEG, platform="linux") == "ffmpeg"
        assert executable_name(ToolRole.DEEP_FILTER, platform="darwin") == "deep-filter"

    def test_bundled_layout(self, tmp_path):
        path = bundled_path(ToolRole.DEEP_FILTER, tmp_path, platform="linux")
        assert path == tmp_path / "binaries" / "deep-filter" / "deep-filter"


class TestResolveBinary:
    @posix_only
    def test_bundled_preferred(self, tmp_path, monkeypatch):
        monkeypatch.setattr("ripleyflow.process.binaries.shutil.which", lambda name: "/usr/bin/x")
        target = bundled_path(ToolRole.FFMPEG, tmp_path)
        target.parent.mkdir(parents=True)
        write_executable(target, "pass")
        assert resolve_binary(ToolRole.FFMPEG, tmp_path) == target

    @posix_only
    def test_non_executable_bundle_skipped(self, tmp_path, monkeypatch):
        monkeypatch.setattr(
            "ripleyflow.process.binaries.shutil.which", lambda name: "/usr/local/bin/ffmpeg"
        )
        target = bundled_path(ToolRole.FFMPEG, tmp_path)
        target.parent.mkdir(parents=True)
        target.write_text("not runnable")
        target.chmod(0o644)
        assert resolve_binary(ToolRole.FFMPEG, tmp_path) == Path("/usr/local/bin/ffmpeg")

    def test_falls_back_to_path(self, tmp_path, monkeypatch):
        monkeypatch.setattr(
            "ripleyflow.process.binaries.shutil.which", lambda name: f"/opt/bin/{name}"
        )
        resolved = resolve_binary(ToolRole.DEEP_FILTER, tmp_path)
        assert resolved.name.startswith("deep-filter")

    def test_not_found(self, tmp_path, monkeypatch):
        monkeypatch.setattr("ripleyflow.process.binaries.shutil.which", lambda name: None)
        with pytest.raises(BinaryNotFound, match="Please place the") as exc_info:
            resolve_binary(ToolRole.FFMPEG, tmp_path)
        assert exc_info.value.details["role"] == "ffmpeg"
        assert exc_info.value.component == "resource"

    def test_not_found_without_resource_dir(self, monkeypatch):
        monkeypatch.setattr("ripleyflow.process.binaries.shutil.which", lambda name: None)
        with pytest.raises(BinaryNotFound) as exc_info:
            resolve_binary(ToolRole.FFMPEG)
        assert exc_info.value.details["expected"] is None
