# Models module
from matchreel.models.highlight import Highlight, HighlightLabel, LABEL_WEIGHTS
from matchreel.models.video import VideoReference
from matchreel.models.export import ExportSegment, ClipArtifact, ReelArtifact, ExportResult

__all__ = [
    "Highlight",
    "HighlightLabel",
    "LABEL_WEIGHTS",
    "VideoReference",
    "ExportSegment",
    "ClipArtifact",
    "ReelArtifact",
    "ExportResult",
]
