"""Uploaded video reference."""
from dataclasses import dataclass


@dataclass(frozen=True)
class VideoReference:
    """A staged upload. Created once and read-only afterwards."""
    id: str
    filename: str
    original_name: str
    path: str  # Public URL of the staged file
    duration: int  # Seconds, rounded
    size: int
    sport: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "filename": self.filename,
            "originalName": self.original_name,
            "path": self.path,
            "duration": self.duration,
            "size": self.size,
            "sport": self.sport,
        }
