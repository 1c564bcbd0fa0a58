"""Application configuration."""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App settings
    app_name: str = "MatchReel"
    debug: bool = False
    log_level: str = "INFO"

    # Server settings
    host: str = "0.0.0.0"
    port: int = 10000

    # Storage areas (UPLOAD_FOLDER / OUTPUT_FOLDER kept for older deployments)
    upload_dir: Path = Field(
        default=Path("./uploads"),
        validation_alias=AliasChoices("upload_dir", "upload_folder"),
    )
    output_dir: Path = Field(
        default=Path("./outputs"),
        validation_alias=AliasChoices("output_dir", "output_folder"),
    )

    # FFmpeg settings
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"

    # Upload settings
    max_upload_bytes: int = 500 * 1024 * 1024
    allowed_video_types: List[str] = [
        "video/mp4",
        "video/quicktime",
        "video/x-msvideo",
    ]
    default_sport: str = "football"

    # Detection settings
    detection_model: str = "mock-v1.0"
    detection_delay_seconds: float = 0.0  # Simulated inference latency
    detection_seed: Optional[int] = None

    # Export settings
    export_cleanup_on_failure: bool = False

    # Frontend
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8080",
        "http://localhost:3000",
    ]

    def ensure_directories(self) -> None:
        """Create the upload and output areas if they are missing."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings loaded from the environment."""
    return Settings()
