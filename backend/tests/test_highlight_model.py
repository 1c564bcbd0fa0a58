"""Tests for the highlight interval model."""
import math

import pytest

from matchreel.errors import InvalidInput
from matchreel.models.export import ClipArtifact, ExportResult, ReelArtifact
from matchreel.models.highlight import (
    Highlight,
    HighlightLabel,
    LABEL_WEIGHTS,
    validate_interval,
)


class TestHighlight:
    """Tests for Highlight dataclass."""

    def test_duration(self):
        h = Highlight(start=10.0, end=22.5, label=HighlightLabel.GOAL)
        assert h.duration == 12.5

    def test_ids_are_unique(self):
        a = Highlight(start=0, end=5, label=HighlightLabel.FOUL)
        b = Highlight(start=0, end=5, label=HighlightLabel.FOUL)
        assert a.id != b.id

    def test_enabled_by_default(self):
        assert Highlight(start=0, end=5, label=HighlightLabel.CROWD).enabled is True

    def test_overlapping_ranges(self):
        a = Highlight(start=10, end=20, label=HighlightLabel.GOAL)
        b = Highlight(start=15, end=25, label=HighlightLabel.FOUL)
        assert a.overlaps(b)
        assert b.overlaps(a)

    def test_contained_range_overlaps(self):
        outer = Highlight(start=10, end=30, label=HighlightLabel.GOAL)
        inner = Highlight(start=12, end=14, label=HighlightLabel.FOUL)
        assert outer.overlaps(inner)
        assert inner.overlaps(outer)

    def test_touching_ranges_do_not_overlap(self):
        a = Highlight(start=10, end=20, label=HighlightLabel.GOAL)
        b = Highlight(start=20, end=30, label=HighlightLabel.PENALTY)
        assert not a.overlaps(b)
        assert not b.overlaps(a)

    def test_to_dict_uses_label_value(self):
        h = Highlight(start=1.0, end=6.0, label=HighlightLabel.PENALTY, confidence=0.9, id="h1")
        assert h.to_dict() == {
            "id": "h1",
            "start": 1.0,
            "end": 6.0,
            "label": "penalty",
            "enabled": True,
            "confidence": 0.9,
        }

    def test_to_dict_omits_missing_confidence(self):
        h = Highlight(start=1.0, end=6.0, label=HighlightLabel.GOAL)
        assert "confidence" not in h.to_dict()


class TestLabels:
    def test_closed_label_set(self):
        assert {label.value for label in HighlightLabel} == {"goal", "foul", "penalty", "crowd"}

    def test_weights(self):
        assert LABEL_WEIGHTS[HighlightLabel.GOAL] == 15
        assert LABEL_WEIGHTS[HighlightLabel.FOUL] == 30
        assert LABEL_WEIGHTS[HighlightLabel.PENALTY] == 10
        assert LABEL_WEIGHTS[HighlightLabel.CROWD] == 25

    def test_unknown_label_rejected(self):
        with pytest.raises(ValueError):
            HighlightLabel("offside")


class TestValidateInterval:
    def test_valid_range(self):
        validate_interval(0, 5)
        validate_interval(10.5, 20.0, duration=20.0)

    def test_reversed_range(self):
        with pytest.raises(InvalidInput, match="after start"):
            validate_interval(20, 10)

    def test_empty_range(self):
        with pytest.raises(InvalidInput):
            validate_interval(10, 10)

    def test_negative_start(self):
        with pytest.raises(InvalidInput, match="negative"):
            validate_interval(-1, 10)

    def test_past_duration(self):
        with pytest.raises(InvalidInput, match="exceeds"):
            validate_interval(10, 31, duration=30)

    def test_non_finite(self):
        with pytest.raises(InvalidInput):
            validate_interval(0, math.inf)
        with pytest.raises(InvalidInput):
            validate_interval(math.nan, 5)


def test_export_result_wire_shape():
    clip = ClipArtifact(
        id="h1",
        filename="clip_1_goal_abcd1234.mp4",
        label=HighlightLabel.GOAL,
        start=12.0,
        end=22.0,
        url="/outputs/clip_1_goal_abcd1234.mp4",
        download_url="/api/export/download/clip_1_goal_abcd1234.mp4",
    )
    reel = ReelArtifact(
        filename="highlight_reel_1_ffff0000.mp4",
        url="/outputs/highlight_reel_1_ffff0000.mp4",
        download_url="/api/export/download/highlight_reel_1_ffff0000.mp4",
        clip_count=1,
        duration=10.0,
    )

    data = ExportResult(clips=[clip], reel=reel).to_dict()

    assert data["clips"][0]["label"] == "goal"
    assert data["clips"][0]["downloadUrl"] == "/api/export/download/clip_1_goal_abcd1234.mp4"
    assert data["reel"]["clipCount"] == 1
    assert data["reel"]["duration"] == 10.0
