"""File naming helpers for staged uploads and export artifacts."""
import uuid
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Optional

SHORT_ID_LENGTH = 8


def short_id() -> str:
    """Short random disambiguator for generated file names."""
    return uuid.uuid4().hex[:SHORT_ID_LENGTH]


def clip_filename(position: int, label: str) -> str:
    """Name for the clip at 1-based `position` in an export request."""
    return f"clip_{position}_{label}_{short_id()}.mp4"


def reel_filename(now: Optional[datetime] = None) -> str:
    """Name for a merged highlight reel."""
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    return f"highlight_reel_{millis}_{short_id()}.mp4"


def manifest_filename() -> str:
    return f"concat_{short_id()}.txt"


def safe_basename(name: str) -> str:
    """Strip any directory components a client sent along with a file name."""
    # Browsers on Windows may send backslash separated paths
    name = PureWindowsPath(PurePosixPath(name).name).name
    return name.strip().lstrip(".") or "video"


def upload_filename(original_name: str) -> str:
    """Unique staging name: <uuid>_<original name>."""
    return f"{uuid.uuid4()}_{safe_basename(original_name)}"


def resolve_within(directory: Path, name: str) -> Optional[Path]:
    """
    Locate `name` directly inside `directory`.

    Returns None when the name is empty, carries path separators, or
    otherwise points outside the directory.
    """
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        return None

    base = directory.resolve()
    candidate = (base / name).resolve()
    if candidate.parent != base:
        return None
    return candidate
