"""Highlight interval model."""
import enum
import math
import uuid
from dataclasses import dataclass, field
from typing import Optional

from matchreel.errors import InvalidInput


class HighlightLabel(str, enum.Enum):
    """Highlight label enumeration."""
    GOAL = "goal"
    FOUL = "foul"
    PENALTY = "penalty"
    CROWD = "crowd"


# Relative frequency of each label in detector output
LABEL_WEIGHTS: dict[HighlightLabel, int] = {
    HighlightLabel.GOAL: 15,
    HighlightLabel.FOUL: 30,
    HighlightLabel.PENALTY: 10,
    HighlightLabel.CROWD: 25,
}


def new_highlight_id() -> str:
    return str(uuid.uuid4())


def validate_interval(start: float, end: float, duration: Optional[float] = None) -> None:
    """
    Check that [start, end) is a usable time range.

    Raises:
        InvalidInput: If the range is not finite, starts before zero,
            is empty or reversed, or runs past `duration`
    """
    if not (math.isfinite(start) and math.isfinite(end)):
        raise InvalidInput("Highlight times must be finite numbers")
    if start < 0:
        raise InvalidInput(f"Highlight start cannot be negative (got {start})")
    if start >= end:
        raise InvalidInput(f"Highlight end must be after start (got {start}-{end})")
    if duration is not None and end > duration:
        raise InvalidInput(f"Highlight end {end} exceeds video duration {duration}")


@dataclass
class Highlight:
    """A labeled time interval within a source video."""
    start: float
    end: float
    label: HighlightLabel
    confidence: Optional[float] = None  # Only set by detection
    enabled: bool = True
    id: str = field(default_factory=new_highlight_id)

    @property
    def duration(self) -> float:
        return self.end - self.start

    def overlaps(self, other: "Highlight") -> bool:
        """True if the two ranges share any time; touching ends do not count."""
        return not (self.end <= other.start or other.end <= self.start)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "start": self.start,
            "end": self.end,
            "label": self.label.value,
            "enabled": self.enabled,
        }
        if self.confidence is not None:
            data["confidence"] = self.confidence
        return data

    def __repr__(self):
        return f"Highlight({self.label.value} {self.start:.1f}-{self.end:.1f})"
