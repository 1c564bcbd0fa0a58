"""Pydantic schemas for API requests and responses."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from matchreel.models.export import ExportSegment
from matchreel.models.highlight import HighlightLabel


class CamelModel(BaseModel):
    """Base model using camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Body of every failed request."""
    success: bool = False
    error: str


# =============================================================================
# Upload Schemas
# =============================================================================

class VideoResponse(CamelModel):
    """A staged video."""
    id: str
    filename: str
    original_name: str
    path: str
    duration: int
    size: int
    sport: str


class UploadResponse(BaseModel):
    """Response for a successful upload."""
    success: bool = True
    video: VideoResponse


# =============================================================================
# Detection Schemas
# =============================================================================

class DetectRequest(CamelModel):
    """Request to detect highlights in a staged video."""
    video_path: Optional[str] = Field(None, description="Public path of the uploaded video")
    duration: Optional[float] = Field(None, description="Video duration in seconds")


class HighlightResponse(BaseModel):
    """A detected highlight."""
    id: str
    start: float
    end: float
    label: HighlightLabel
    confidence: Optional[float] = None
    enabled: bool = True


class DetectionMetadata(CamelModel):
    """Context echoed back with detection results."""
    video_path: Optional[str]
    duration: float
    processed_at: datetime
    model: str


class DetectResponse(BaseModel):
    """Response for highlight detection."""
    success: bool = True
    highlights: List[HighlightResponse]
    metadata: DetectionMetadata


# =============================================================================
# Export Schemas
# =============================================================================

class ExportHighlightItem(BaseModel):
    """A highlight to export, as edited by the client."""
    id: str
    start: float
    end: float
    label: HighlightLabel

    def to_segment(self) -> ExportSegment:
        return ExportSegment(id=self.id, start=self.start, end=self.end, label=self.label)


class ExportRequest(CamelModel):
    """Request to cut highlights and merge them into a reel."""
    video_filename: Optional[str] = Field(None, description="Staged upload filename")
    highlights: Optional[List[ExportHighlightItem]] = Field(
        None, description="Enabled highlights, in reel order"
    )


class ClipResponse(CamelModel):
    """An exported clip."""
    id: str
    filename: str
    label: HighlightLabel
    start: float
    end: float
    url: str
    download_url: str


class ReelResponse(CamelModel):
    """The merged highlight reel."""
    filename: str
    url: str
    download_url: str
    clip_count: int
    duration: float


class ExportResponse(BaseModel):
    """Response for a completed export."""
    success: bool = True
    clips: List[ClipResponse]
    reel: ReelResponse


# =============================================================================
# Health
# =============================================================================

class HealthResponse(CamelModel):
    """Health check response."""
    status: str
    ffmpeg_available: bool
    ffprobe_available: bool
    message: Optional[str] = None
