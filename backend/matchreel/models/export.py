"""Export request and artifact models."""
from dataclasses import dataclass
from typing import List

from matchreel.models.highlight import HighlightLabel


@dataclass(frozen=True)
class ExportSegment:
    """One interval of the source video to export."""
    id: str
    start: float
    end: float
    label: HighlightLabel

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class ClipArtifact:
    """A standalone clip cut for one highlight."""
    id: str
    filename: str
    label: HighlightLabel
    start: float
    end: float
    url: str
    download_url: str

    @property
    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "filename": self.filename,
            "label": self.label.value,
            "start": self.start,
            "end": self.end,
            "url": self.url,
            "downloadUrl": self.download_url,
        }


@dataclass(frozen=True)
class ReelArtifact:
    """All clips of one export, joined in request order."""
    filename: str
    url: str
    download_url: str
    clip_count: int
    duration: float  # Sum of clip durations

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "url": self.url,
            "downloadUrl": self.download_url,
            "clipCount": self.clip_count,
            "duration": self.duration,
        }


@dataclass
class ExportResult:
    """Result of an export request."""
    clips: List[ClipArtifact]
    reel: ReelArtifact

    def to_dict(self) -> dict:
        return {
            "clips": [clip.to_dict() for clip in self.clips],
            "reel": self.reel.to_dict(),
        }
