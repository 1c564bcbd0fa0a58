"""Highlight export pipeline: cut each highlight, then merge into a reel."""
import logging
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence

from matchreel.config import Settings
from matchreel.errors import ExportFailed, InvalidInput, NotFound
from matchreel.models.export import ClipArtifact, ExportResult, ExportSegment, ReelArtifact
from matchreel.models.highlight import validate_interval
from matchreel.utils.ffmpeg import FFmpegError, FFmpegTranscoder, write_concat_manifest
from matchreel.utils.naming import clip_filename, manifest_filename, reel_filename, resolve_within

logger = logging.getLogger(__name__)

OUTPUTS_URL_PREFIX = "/outputs"
DOWNLOAD_URL_PREFIX = "/api/export/download"

ProgressCallback = Callable[[float, str], Awaitable[None]]


def public_url(filename: str) -> str:
    return f"{OUTPUTS_URL_PREFIX}/{filename}"


def download_url(filename: str) -> str:
    return f"{DOWNLOAD_URL_PREFIX}/{filename}"


class ExportService:
    """
    Turns a reviewed list of highlights into downloadable files.

    Each export writes one clip per segment plus one merged reel into the
    shared output directory. Requests share nothing but that directory;
    random name suffixes keep concurrent exports from colliding.
    """

    def __init__(self, settings: Settings, transcoder: Optional[FFmpegTranscoder] = None):
        self.settings = settings
        self.transcoder = transcoder or FFmpegTranscoder(
            ffmpeg_path=settings.ffmpeg_path,
            ffprobe_path=settings.ffprobe_path,
        )

    @property
    def output_dir(self) -> Path:
        return self.settings.output_dir

    def _resolve_source(self, video_filename: str) -> Path:
        source_path = resolve_within(self.settings.upload_dir, video_filename)
        if source_path is None or not source_path.is_file():
            raise NotFound("Video file not found")
        return source_path

    def _validate(self, video_filename: Optional[str], segments: Optional[Sequence[ExportSegment]]) -> Path:
        if not video_filename or not segments:
            raise InvalidInput("Video filename and highlights are required")

        for position, segment in enumerate(segments, start=1):
            try:
                validate_interval(segment.start, segment.end)
            except InvalidInput as e:
                raise InvalidInput(f"Highlight {position} ({segment.id}): {e.message}") from e

        return self._resolve_source(video_filename)

    async def export(
        self,
        video_filename: Optional[str],
        segments: Optional[Sequence[ExportSegment]],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ExportResult:
        """
        Cut every segment into its own clip, then join the clips into a reel.

        Segments are exported in the order given, without filtering or
        reordering; overlapping segments are fine. Cuts run one at a time
        and the merge only starts once every cut succeeded.

        Args:
            video_filename: Staged upload name inside the upload directory
            segments: Highlights to export, already filtered to enabled ones
            progress_callback: Optional async callback(progress, message)

        Returns:
            ExportResult with one clip per segment and the merged reel

        Raises:
            InvalidInput: Missing filename, empty list, or an invalid range
            NotFound: The source video does not exist
            ExportFailed: A cut or the merge failed
        """
        source_path = self._validate(video_filename, segments)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        total_steps = len(segments) + 1
        logger.info(f"Exporting {len(segments)} highlights from {source_path.name}")

        clips = await self._cut_all(source_path, segments, total_steps, progress_callback)
        reel = await self._merge(clips, total_steps, progress_callback)

        logger.info(f"Highlight reel created: {reel.filename} ({len(clips)} clips)")
        return ExportResult(clips=clips, reel=reel)

    async def _cut_all(
        self,
        source_path: Path,
        segments: Sequence[ExportSegment],
        total_steps: int,
        progress_callback: Optional[ProgressCallback],
    ) -> List[ClipArtifact]:
        clips: List[ClipArtifact] = []

        for position, segment in enumerate(segments, start=1):
            filename = clip_filename(position, segment.label.value)
            clip_path = self.output_dir / filename

            if progress_callback:
                await progress_callback(
                    (position - 1) / total_steps * 100,
                    f"Cutting clip {position}/{len(segments)} ({segment.label.value})",
                )

            logger.info(
                f"  Clip {position}: {segment.label.value} "
                f"({segment.start}s - {segment.end}s) -> {filename}"
            )
            try:
                await self.transcoder.cut(source_path, clip_path, segment.start, segment.end)
            except FFmpegError as e:
                logger.error(f"Cut {position} failed, aborting export: {e}")
                if self.settings.export_cleanup_on_failure:
                    self._remove_files([self.output_dir / c.filename for c in clips] + [clip_path])
                raise ExportFailed(f"Failed to cut clip {position} ({segment.label.value}): {e}") from e

            clips.append(ClipArtifact(
                id=segment.id,
                filename=filename,
                label=segment.label,
                start=segment.start,
                end=segment.end,
                url=public_url(filename),
                download_url=download_url(filename),
            ))

        return clips

    async def _merge(
        self,
        clips: List[ClipArtifact],
        total_steps: int,
        progress_callback: Optional[ProgressCallback],
    ) -> ReelArtifact:
        filename = reel_filename()
        reel_path = self.output_dir / filename
        manifest_path = self.output_dir / manifest_filename()

        if progress_callback:
            await progress_callback(
                (total_steps - 1) / total_steps * 100,
                f"Merging {len(clips)} clips into highlight reel",
            )

        logger.info(f"Merging {len(clips)} clips into {filename}")
        try:
            write_concat_manifest([self.output_dir / c.filename for c in clips], manifest_path)
            await self.transcoder.concat(manifest_path, reel_path)
        except (FFmpegError, OSError) as e:
            # Clips stay available individually
            logger.error(f"Merge failed for {filename}: {e}")
            raise ExportFailed(f"Failed to merge highlight reel: {e}") from e
        finally:
            manifest_path.unlink(missing_ok=True)

        if progress_callback:
            await progress_callback(100, "Export complete")

        return ReelArtifact(
            filename=filename,
            url=public_url(filename),
            download_url=download_url(filename),
            clip_count=len(clips),
            duration=sum(c.duration for c in clips),
        )

    def _remove_files(self, paths: List[Path]) -> None:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove partial export file {path}: {e}")

    def resolve_download(self, filename: str) -> Path:
        """
        Locate a previously exported artifact.

        Raises:
            NotFound: If no such file exists in the output directory
        """
        path = resolve_within(self.output_dir, filename)
        if path is None or not path.is_file():
            raise NotFound("File not found")
        return path
