"""API routes."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse

from matchreel.api.schemas import (
    DetectRequest,
    DetectResponse,
    ExportRequest,
    ExportResponse,
    HealthResponse,
    UploadResponse,
    VideoResponse,
)
from matchreel.config import Settings
from matchreel.errors import MatchReelError
from matchreel.services.detection_service import DetectionService
from matchreel.services.export_service import ExportService
from matchreel.services.upload_service import UploadService
from matchreel.utils.ffmpeg import check_ffmpeg_available, check_ffprobe_available

router = APIRouter()
logger = logging.getLogger(__name__)


# =============================================================================
# Dependencies
# =============================================================================

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_upload_service(request: Request) -> UploadService:
    return request.app.state.upload_service


def get_detection_service(request: Request) -> DetectionService:
    return request.app.state.detection_service


def get_export_service(request: Request) -> ExportService:
    return request.app.state.export_service


def _to_http(error: MatchReelError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.message)


# =============================================================================
# Health & System
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)):
    """Check API health and transcoder availability."""
    ffmpeg_ok = check_ffmpeg_available(settings.ffmpeg_path)
    ffprobe_ok = check_ffprobe_available(settings.ffprobe_path)

    message = None
    if not (ffmpeg_ok and ffprobe_ok):
        missing = [name for name, ok in (("ffmpeg", ffmpeg_ok), ("ffprobe", ffprobe_ok)) if not ok]
        message = f"Missing dependencies: {', '.join(missing)}. Uploads and exports will fail."

    return HealthResponse(
        status="healthy" if ffmpeg_ok and ffprobe_ok else "degraded",
        ffmpeg_available=ffmpeg_ok,
        ffprobe_available=ffprobe_ok,
        message=message
    )


# =============================================================================
# Upload
# =============================================================================

@router.post("/upload", response_model=UploadResponse)
@router.post("/upload/video", response_model=UploadResponse, include_in_schema=False)
async def upload_video(
    video: Optional[UploadFile] = File(None),
    service: UploadService = Depends(get_upload_service)
):
    """Upload a video file and return its metadata."""
    try:
        staged = await service.stage(video)
    except MatchReelError as e:
        raise _to_http(e)
    finally:
        if video is not None:
            await video.close()

    return UploadResponse(video=VideoResponse.model_validate(staged.to_dict()))


# =============================================================================
# Detection
# =============================================================================

@router.post("/highlights/detect", response_model=DetectResponse)
async def detect_highlights(
    data: DetectRequest,
    service: DetectionService = Depends(get_detection_service)
):
    """Detect highlights in a video (currently mocked)."""
    try:
        result = await service.detect(data.video_path, data.duration)
    except MatchReelError as e:
        raise _to_http(e)

    return DetectResponse.model_validate(result.to_dict())


# =============================================================================
# Export
# =============================================================================

@router.post("/export/clips", response_model=ExportResponse)
async def export_clips(
    data: ExportRequest,
    service: ExportService = Depends(get_export_service)
):
    """Cut highlights into clips and merge them into a reel."""
    segments = [item.to_segment() for item in data.highlights or []]
    try:
        result = await service.export(data.video_filename, segments)
    except MatchReelError as e:
        logger.error(f"Export error: {e.message}")
        raise _to_http(e)

    return ExportResponse.model_validate(result.to_dict())


@router.get("/export/download/{filename}")
async def download_export(
    filename: str,
    service: ExportService = Depends(get_export_service)
):
    """Download an exported clip or reel as an attachment."""
    try:
        path = service.resolve_download(filename)
    except MatchReelError as e:
        raise _to_http(e)

    return FileResponse(
        path,
        media_type="video/mp4",
        filename=path.name
    )
