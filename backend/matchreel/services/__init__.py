# Services module
from matchreel.services.detection_service import (
    DetectionService,
    HighlightDetector,
    MockHighlightDetector,
)
from matchreel.services.export_service import ExportService
from matchreel.services.upload_service import UploadService

__all__ = [
    "DetectionService",
    "HighlightDetector",
    "MockHighlightDetector",
    "ExportService",
    "UploadService",
]
