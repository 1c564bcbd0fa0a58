"""Highlight detection.

The only detector today is a mock that synthesizes plausible output. It
sits behind the HighlightDetector protocol so a real inference backend can
replace it without touching the export pipeline or the routes.
"""
import asyncio
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Protocol

import numpy as np

from matchreel.config import Settings
from matchreel.errors import InvalidInput
from matchreel.models.highlight import Highlight, HighlightLabel, LABEL_WEIGHTS

logger = logging.getLogger(__name__)

GUARD_BAND_RATIO = 0.05
MIN_HIGHLIGHT_SECONDS = 5.0
MAX_HIGHLIGHT_SECONDS = 15.0
MIN_CONFIDENCE = 0.70
MAX_CONFIDENCE = 0.99
ATTEMPTS_PER_HIGHLIGHT = 10


class HighlightDetector(Protocol):
    """Anything that can turn a video duration into highlight intervals."""

    def detect(self, duration: float) -> List[Highlight]:
        ...


def _require_duration(duration) -> float:
    try:
        duration = float(duration)
    except (TypeError, ValueError):
        raise InvalidInput("Valid video duration is required")
    if not math.isfinite(duration) or duration <= 0:
        raise InvalidInput("Valid video duration is required")
    return duration


def target_count_bounds(duration: float) -> tuple[int, int]:
    """Roughly one highlight per 30-60 seconds of footage."""
    lower = max(3, math.floor(duration / 60))
    upper = min(15, math.floor(duration / 30))
    return lower, upper


class MockHighlightDetector:
    """
    Random stand-in for real event detection.

    Places 5-15 second intervals inside a 5% guard band at either end of
    the video, never overlapping. Placement is best effort: after
    10 tries per wanted highlight it stops and returns what fit.

    Reproducible for a given seed or generator.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self._labels = list(LABEL_WEIGHTS.keys())
        weights = np.array([LABEL_WEIGHTS[label] for label in self._labels], dtype=float)
        self._label_p = weights / weights.sum()

    def _pick_label(self) -> HighlightLabel:
        index = self.rng.choice(len(self._labels), p=self._label_p)
        return self._labels[int(index)]

    def _pick_target(self, duration: float) -> tuple[int, int]:
        """Return (target count, attempt budget)."""
        lower, upper = target_count_bounds(duration)
        if lower <= upper:
            target = int(self.rng.integers(lower, upper + 1))
            return target, target * ATTEMPTS_PER_HIGHLIGHT
        # Short video: try as hard as for the lower bound, but never exceed
        # the per-30-seconds ceiling.
        return max(upper, 0), lower * ATTEMPTS_PER_HIGHLIGHT

    def detect(self, duration: float) -> List[Highlight]:
        duration = _require_duration(duration)
        target, max_attempts = self._pick_target(duration)

        guard = duration * GUARD_BAND_RATIO
        window_end = duration - guard

        # Work on a 0.1s grid so rounded times still respect the bounds
        first_start = math.ceil(guard * 10)
        last_end = math.floor(window_end * 10)
        min_len = int(MIN_HIGHLIGHT_SECONDS * 10)
        max_len = int(MAX_HIGHLIGHT_SECONDS * 10)

        placed: List[Highlight] = []
        attempts = 0
        while len(placed) < target and attempts < max_attempts:
            attempts += 1

            length = int(self.rng.integers(min_len, max_len + 1))
            last_start = last_end - length
            if last_start < first_start:
                continue
            start_tenths = int(self.rng.integers(first_start, last_start + 1))

            start = start_tenths / 10
            end = (start_tenths + length) / 10
            if start < guard or end > window_end:
                continue

            candidate = Highlight(
                start=start,
                end=end,
                label=self._pick_label(),
                confidence=float(self.rng.uniform(MIN_CONFIDENCE, MAX_CONFIDENCE)),
            )
            if any(candidate.overlaps(existing) for existing in placed):
                continue
            placed.append(candidate)

        placed.sort(key=lambda h: h.start)
        logger.info(
            f"Mock detection: placed {len(placed)}/{target} highlights "
            f"in {duration:.1f}s video after {attempts} attempts"
        )
        return placed


@dataclass
class DetectionResult:
    """Highlights plus the metadata echoed back to the client."""
    highlights: List[Highlight]
    video_path: Optional[str]
    duration: float
    processed_at: datetime
    model: str

    def to_dict(self) -> dict:
        return {
            "highlights": [h.to_dict() for h in self.highlights],
            "metadata": {
                "videoPath": self.video_path,
                "duration": self.duration,
                "processedAt": self.processed_at.isoformat(),
                "model": self.model,
            },
        }


class DetectionService:
    """Service for running highlight detection on behalf of the API."""

    def __init__(self, settings: Settings, detector: Optional[HighlightDetector] = None):
        self.settings = settings
        self.detector = detector or MockHighlightDetector(seed=settings.detection_seed)

    async def detect(self, video_path: Optional[str], duration) -> DetectionResult:
        """
        Detect highlights for a staged video.

        Args:
            video_path: Public path of the video, echoed back as metadata
            duration: Video duration in seconds

        Raises:
            InvalidInput: If duration is missing, non-numeric or not positive
        """
        duration = _require_duration(duration)

        if self.settings.detection_delay_seconds > 0:
            await asyncio.sleep(self.settings.detection_delay_seconds)

        highlights = self.detector.detect(duration)

        return DetectionResult(
            highlights=highlights,
            video_path=video_path,
            duration=duration,
            processed_at=datetime.now(timezone.utc),
            model=self.settings.detection_model,
        )
