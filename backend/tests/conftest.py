"""Shared fixtures: temporary storage areas and an in-memory transcoder."""
from pathlib import Path

import pytest

from matchreel.config import Settings
from matchreel.utils.ffmpeg import FFmpegError, VideoInfo


def read_manifest(manifest_path: Path) -> list[Path]:
    paths = []
    for line in Path(manifest_path).read_text(encoding="utf-8").splitlines():
        if line.startswith("file '") and line.endswith("'"):
            paths.append(Path(line[len("file '"):-1]))
    return paths


class FakeTranscoder:
    """Stands in for ffmpeg: writes small marker files instead of video."""

    def __init__(self, duration=300.0, fail_cut_at=None, fail_concat=False, fail_probe=False):
        self.duration = duration
        self.fail_cut_at = fail_cut_at  # 1-based cut number that fails
        self.fail_concat = fail_concat
        self.fail_probe = fail_probe
        self.cuts = []
        self.concats = []
        self.probes = []

    async def probe(self, video_path):
        self.probes.append(Path(video_path))
        if self.fail_probe:
            raise FFmpegError("ffprobe failed: Invalid data found when processing input")
        return VideoInfo(
            duration=self.duration,
            width=1920,
            height=1080,
            fps=25.0,
            video_codec="h264",
            audio_codec="aac",
            format_name="mov,mp4,m4a,3gp,3g2,mj2",
            bit_rate=None,
        )

    async def cut(self, source_path, output_path, start_time, end_time):
        self.cuts.append((Path(source_path), Path(output_path), start_time, end_time))
        if self.fail_cut_at == len(self.cuts):
            raise FFmpegError("Clip cut failed: Invalid argument")
        Path(output_path).write_bytes(f"clip {start_time}-{end_time}\n".encode())
        return Path(output_path)

    async def concat(self, manifest_path, output_path):
        clip_paths = read_manifest(manifest_path)
        self.concats.append((clip_paths, Path(output_path)))
        if self.fail_concat:
            raise FFmpegError("Concatenation failed: Non-monotonous DTS")
        Path(output_path).write_bytes(b"".join(p.read_bytes() for p in clip_paths))
        return Path(output_path)


@pytest.fixture
def settings(tmp_path):
    settings = Settings(
        upload_dir=tmp_path / "uploads",
        output_dir=tmp_path / "outputs",
    )
    settings.ensure_directories()
    return settings


@pytest.fixture
def transcoder():
    return FakeTranscoder()


@pytest.fixture
def source_video(settings):
    """A staged upload the export pipeline can read."""
    path = settings.upload_dir / "0b7c1f3e_match.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42 fake video")
    return path


@pytest.fixture
def make_transcoder():
    """Factory for transcoders configured to fail at a given step."""
    return FakeTranscoder
