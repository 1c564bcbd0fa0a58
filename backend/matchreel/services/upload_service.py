"""Upload staging for source videos."""
import logging
import math
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from matchreel.config import Settings
from matchreel.errors import InvalidInput, ProbeFailed
from matchreel.models.video import VideoReference
from matchreel.utils.ffmpeg import FFmpegError, FFmpegTranscoder
from matchreel.utils.naming import upload_filename

logger = logging.getLogger(__name__)

UPLOADS_URL_PREFIX = "/uploads"
CHUNK_SIZE = 1024 * 1024


class UploadService:
    """Stores uploaded videos and reads their duration."""

    def __init__(self, settings: Settings, transcoder: Optional[FFmpegTranscoder] = None):
        self.settings = settings
        self.transcoder = transcoder or FFmpegTranscoder(
            ffmpeg_path=settings.ffmpeg_path,
            ffprobe_path=settings.ffprobe_path,
        )

    def _check_upload(self, upload: Optional[UploadFile]) -> None:
        if upload is None or not upload.filename:
            raise InvalidInput("No video file provided")

        content_type = (upload.content_type or "").split(";")[0].strip().lower()
        if content_type not in self.settings.allowed_video_types:
            logger.info(f"Rejected upload {upload.filename!r} with type {content_type!r}")
            raise InvalidInput("Only MP4, MOV, and AVI files are allowed")

    async def _write(self, upload: UploadFile, dest: Path) -> int:
        """Stream the upload to disk, enforcing the size ceiling."""
        limit = self.settings.max_upload_bytes
        size = 0
        with open(dest, "wb") as f:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > limit:
                    raise InvalidInput(
                        f"File too large (max {limit // (1024 * 1024)} MB)"
                    )
                f.write(chunk)
        return size

    async def stage(self, upload: Optional[UploadFile]) -> VideoReference:
        """
        Store an uploaded video under a unique name and probe its duration.

        Nothing is left on disk when the upload is rejected, interrupted or
        cannot be probed.

        Raises:
            InvalidInput: Missing file, disallowed type, empty or oversized body
            ProbeFailed: ffprobe could not read the stored file
        """
        self._check_upload(upload)

        self.settings.upload_dir.mkdir(parents=True, exist_ok=True)
        filename = upload_filename(upload.filename)
        dest = self.settings.upload_dir / filename

        try:
            size = await self._write(upload, dest)
            if size == 0:
                raise InvalidInput("Uploaded file is empty")
        except Exception:
            dest.unlink(missing_ok=True)
            raise

        try:
            info = await self.transcoder.probe(dest)
        except FFmpegError as e:
            logger.error(f"FFprobe error for {filename}: {e}")
            dest.unlink(missing_ok=True)
            raise ProbeFailed("Failed to read video metadata. Is FFmpeg installed?") from e

        video = VideoReference(
            id=str(uuid.uuid4()),
            filename=filename,
            original_name=upload.filename,
            path=f"{UPLOADS_URL_PREFIX}/{filename}",
            duration=math.floor(info.duration + 0.5),
            size=size,
            sport=self.settings.default_sport,
        )
        logger.info(f"Staged upload {filename} ({size} bytes, {video.duration}s)")
        return video
