"""FFmpeg and ffprobe utilities."""
import asyncio
import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


@dataclass
class VideoInfo:
    """Video metadata container."""
    duration: float
    width: int
    height: int
    fps: float
    video_codec: str
    audio_codec: Optional[str]
    format_name: str
    bit_rate: Optional[int]


class FFmpegError(Exception):
    """FFmpeg related error."""
    pass


def check_ffmpeg_available(ffmpeg_path: str = "ffmpeg") -> bool:
    """Check if ffmpeg is available."""
    return shutil.which(ffmpeg_path) is not None


def check_ffprobe_available(ffprobe_path: str = "ffprobe") -> bool:
    """Check if ffprobe is available."""
    return shutil.which(ffprobe_path) is not None


def format_seconds(seconds: float) -> str:
    # ffmpeg time options reject exponent notation such as "5e-05"
    return f"{seconds:.6f}"


def _escape_concat_path(path: Path) -> str:
    # The concat demuxer reads single-quoted paths; a quote closes, escapes and reopens.
    return str(path).replace("'", "'\\''")


def write_concat_manifest(clip_paths: Iterable[Path], manifest_path: str | Path) -> Path:
    """
    Write a concat demuxer manifest listing clips in playback order.

    Args:
        clip_paths: Clip files, in the order they should be joined
        manifest_path: Where to write the manifest

    Returns:
        Path to the manifest
    """
    manifest_path = Path(manifest_path)
    lines = [f"file '{_escape_concat_path(Path(p).resolve())}'" for p in clip_paths]
    manifest_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return manifest_path


class FFmpegTranscoder:
    """
    Thin async wrapper around the ffmpeg/ffprobe binaries.

    Cutting and concatenation use stream copy, so outputs keep the source
    codec parameters and cut points land on the source's keyframes.
    """

    def __init__(self, ffmpeg_path: str = "ffmpeg", ffprobe_path: str = "ffprobe"):
        self.ffmpeg_path = ffmpeg_path
        self.ffprobe_path = ffprobe_path

    async def _run(self, cmd: list[str], action: str) -> bytes:
        """Run a command to completion, raising FFmpegError on failure."""
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except FileNotFoundError as e:
            raise FFmpegError(f"{action} failed: {cmd[0]} not found") from e

        stdout, stderr = await proc.communicate()

        if proc.returncode != 0:
            detail = stderr.decode("utf-8", errors="ignore").strip()
            raise FFmpegError(f"{action} failed: {detail or f'exit code {proc.returncode}'}")

        return stdout

    async def probe(self, video_path: str | Path) -> VideoInfo:
        """
        Get video metadata using ffprobe.

        Args:
            video_path: Path to video file

        Returns:
            VideoInfo with video metadata

        Raises:
            FFmpegError: If ffprobe fails
        """
        video_path = Path(video_path)
        if not video_path.exists():
            raise FFmpegError(f"Video file not found: {video_path}")

        cmd = [
            self.ffprobe_path,
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            "-show_streams",
            str(video_path)
        ]

        stdout = await self._run(cmd, "ffprobe")

        try:
            data = json.loads(stdout.decode())
        except json.JSONDecodeError as e:
            raise FFmpegError(f"Failed to parse ffprobe output: {e}")

        video_stream = None
        audio_stream = None
        for stream in data.get("streams", []):
            if stream.get("codec_type") == "video" and video_stream is None:
                video_stream = stream
            elif stream.get("codec_type") == "audio" and audio_stream is None:
                audio_stream = stream

        if not video_stream:
            raise FFmpegError("No video stream found")

        fps_str = video_stream.get("r_frame_rate", "30/1")
        if "/" in fps_str:
            num, den = fps_str.split("/")
            fps = float(num) / float(den) if float(den) > 0 else 30.0
        else:
            fps = float(fps_str)

        # Container duration first, stream duration as fallback
        format_info = data.get("format", {})
        duration = float(format_info.get("duration", 0) or 0)
        if duration == 0:
            duration = float(video_stream.get("duration", 0) or 0)

        return VideoInfo(
            duration=duration,
            width=int(video_stream.get("width", 0)),
            height=int(video_stream.get("height", 0)),
            fps=fps,
            video_codec=video_stream.get("codec_name", "unknown"),
            audio_codec=audio_stream.get("codec_name") if audio_stream else None,
            format_name=format_info.get("format_name", "unknown"),
            bit_rate=int(format_info.get("bit_rate", 0) or 0) or None
        )

    async def cut(
        self,
        source_path: str | Path,
        output_path: str | Path,
        start_time: float,
        end_time: float,
    ) -> Path:
        """
        Copy the [start_time, end_time) range of a video into its own file.

        Args:
            source_path: Path to source video
            output_path: Path for output file
            start_time: Start time in seconds
            end_time: End time in seconds

        Returns:
            Path to the cut clip
        """
        source_path = Path(source_path)
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        duration = end_time - start_time

        cmd = [
            self.ffmpeg_path,
            "-y",
            "-ss", format_seconds(start_time),
            "-i", str(source_path),
            "-t", format_seconds(duration),
            "-c", "copy",
            "-avoid_negative_ts", "make_zero",
            str(output_path)
        ]

        await self._run(cmd, "Clip cut")
        return output_path

    async def concat(self, manifest_path: str | Path, output_path: str | Path) -> Path:
        """
        Join the files listed in a concat manifest without re-encoding.

        Args:
            manifest_path: Manifest written by write_concat_manifest
            output_path: Path for the joined file

        Returns:
            Path to the joined file
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        cmd = [
            self.ffmpeg_path,
            "-y",
            "-f", "concat",
            "-safe", "0",
            "-i", str(manifest_path),
            "-c", "copy",
            str(output_path)
        ]

        await self._run(cmd, "Concatenation")
        return output_path
