#!/usr/bin/env python3
"""
CLI tool to run mock detection on a video file and export every highlight.

Usage:
    python scripts/export_highlights_cli.py <video_path> [--output-dir <dir>] [--seed N]

Example:
    python scripts/export_highlights_cli.py ~/Videos/match.mp4 --output-dir ./reel --seed 7
"""
import argparse
import asyncio
import json
import logging
import shutil
import sys
from pathlib import Path
from typing import Optional

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from matchreel.config import Settings
from matchreel.errors import MatchReelError
from matchreel.models.export import ExportSegment
from matchreel.services.detection_service import MockHighlightDetector
from matchreel.services.export_service import ExportService
from matchreel.utils.ffmpeg import FFmpegError, FFmpegTranscoder


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)


async def export_video(
    video_path: Path,
    output_dir: Path,
    seed: Optional[int] = None,
    max_highlights: Optional[int] = None,
) -> Path:
    """
    Detect highlights in a video and export them as clips plus a reel.

    Args:
        video_path: Path to video file
        output_dir: Directory for clips, reel and summary
        seed: Seed for the mock detector
        max_highlights: Only export the first N highlights

    Returns:
        Path to the written summary JSON
    """
    if not video_path.is_file():
        raise FileNotFoundError(f"Video not found: {video_path}")

    output_dir.mkdir(parents=True, exist_ok=True)

    # The export service reads sources from its upload area
    settings = Settings(upload_dir=video_path.parent, output_dir=output_dir)
    transcoder = FFmpegTranscoder(settings.ffmpeg_path, settings.ffprobe_path)

    logger.info(f"Probing: {video_path}")
    info = await transcoder.probe(video_path)
    logger.info(f"Duration: {info.duration:.1f}s, Resolution: {info.width}x{info.height}")

    highlights = MockHighlightDetector(seed=seed).detect(info.duration)
    if max_highlights is not None:
        highlights = highlights[:max_highlights]
    if not highlights:
        raise ValueError("No highlights detected; video is too short")

    for h in highlights:
        logger.info(f"  {h.label.value:<8} {h.start:7.1f}s - {h.end:7.1f}s (confidence {h.confidence:.2f})")

    async def progress_callback(pct, msg):
        logger.info(f"[{pct:.0f}%] {msg}")

    segments = [ExportSegment(id=h.id, start=h.start, end=h.end, label=h.label) for h in highlights]
    result = await ExportService(settings, transcoder).export(
        video_path.name, segments, progress_callback=progress_callback
    )

    summary_file = output_dir / "export_summary.json"
    with open(summary_file, 'w') as f:
        json.dump({
            "video_path": str(video_path),
            "duration": info.duration,
            "highlights": [h.to_dict() for h in highlights],
            **result.to_dict(),
        }, f, indent=2)

    logger.info(f"Reel: {output_dir / result.reel.filename} ({result.reel.duration:.1f}s)")
    logger.info(f"Summary written to: {summary_file}")
    return summary_file


def main():
    parser = argparse.ArgumentParser(
        description="Detect and export football highlights from a video file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Export with a random detector run
    python scripts/export_highlights_cli.py match.mp4

    # Reproducible run, first three highlights only
    python scripts/export_highlights_cli.py match.mp4 --seed 42 --max-highlights 3
        """
    )

    parser.add_argument(
        "video_path",
        type=Path,
        help="Path to video file to export highlights from"
    )

    parser.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=Path("./matchreel_output"),
        help="Output directory for clips and reel (default: ./matchreel_output)"
    )

    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Seed for the mock detector"
    )

    parser.add_argument(
        "--max-highlights", "-n",
        type=int,
        default=None,
        help="Export only the first N detected highlights"
    )

    args = parser.parse_args()

    if shutil.which("ffmpeg") is None:
        logger.error("ffmpeg not found on PATH")
        sys.exit(1)

    try:
        asyncio.run(export_video(
            video_path=args.video_path,
            output_dir=args.output_dir,
            seed=args.seed,
            max_highlights=args.max_highlights,
        ))
    except (FileNotFoundError, ValueError, FFmpegError, MatchReelError) as e:
        logger.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)
    except Exception as e:
        logger.exception(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
