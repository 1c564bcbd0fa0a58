"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from matchreel import __version__
from matchreel.api.routes import router
from matchreel.api.schemas import ErrorResponse
from matchreel.config import Settings, get_settings
from matchreel.errors import MatchReelError
from matchreel.services.detection_service import DetectionService, HighlightDetector
from matchreel.services.export_service import ExportService
from matchreel.services.upload_service import UploadService
from matchreel.utils.ffmpeg import FFmpegTranscoder, check_ffmpeg_available

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def _error_body(message: str) -> dict:
    return ErrorResponse(error=message).model_dump()


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if location:
        return f"Invalid request: {location}: {first.get('msg', 'invalid value')}"
    return f"Invalid request: {first.get('msg', 'invalid value')}"


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as {"success": false, "error": <message>}."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=_error_body(_validation_message(exc)))

    @app.exception_handler(MatchReelError)
    async def domain_exception_handler(request: Request, exc: MatchReelError):
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message))

    @app.middleware("http")
    async def unhandled_error_middleware(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception(f"Unhandled error on {request.method} {request.url.path}")
            return JSONResponse(status_code=500, content=_error_body(str(exc) or "Internal server error"))


def create_app(
    settings: Optional[Settings] = None,
    transcoder: Optional[FFmpegTranscoder] = None,
    detector: Optional[HighlightDetector] = None,
) -> FastAPI:
    """
    Build the application around an explicit configuration.

    Args:
        settings: Configuration (environment defaults if not provided)
        transcoder: ffmpeg wrapper shared by upload and export
        detector: Highlight detector (mock detector if not provided)
    """
    settings = settings or get_settings()
    configure_logging(settings)
    settings.ensure_directories()

    transcoder = transcoder or FFmpegTranscoder(
        ffmpeg_path=settings.ffmpeg_path,
        ffprobe_path=settings.ffprobe_path,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        logger.info(f"Starting {settings.app_name}...")
        logger.info(f"Uploads: {settings.upload_dir.resolve()}")
        logger.info(f"Outputs: {settings.output_dir.resolve()}")
        if not check_ffmpeg_available(settings.ffmpeg_path):
            logger.warning("ffmpeg not found on PATH; exports will fail")

        yield

        logger.info(f"Shutting down {settings.app_name}...")

    app = FastAPI(
        title=settings.app_name,
        description="Football highlight review and export service",
        version=__version__,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.upload_service = UploadService(settings, transcoder)
    app.state.detection_service = DetectionService(settings, detector)
    app.state.export_service = ExportService(settings, transcoder)

    # Must run before CORS is added so error responses get CORS headers
    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    @app.get("/health", response_class=PlainTextResponse)
    async def liveness():
        """Liveness marker for the hosting platform."""
        return "OK"

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "app": settings.app_name,
            "version": __version__,
            "api": "/api",
            "docs": "/docs"
        }

    # Read-only views of the storage areas
    app.mount("/uploads", StaticFiles(directory=str(settings.upload_dir)), name="uploads")
    app.mount("/outputs", StaticFiles(directory=str(settings.output_dir)), name="outputs")

    return app


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "matchreel.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
