"""Tests for upload staging."""
import io

import pytest
from starlette.datastructures import Headers, UploadFile

from matchreel.errors import InvalidInput, ProbeFailed
from matchreel.services.upload_service import UploadService


def make_upload(data=b"fake mp4 bytes", filename="Final Match.mp4", content_type="video/mp4"):
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def staged_files(settings):
    return list(settings.upload_dir.iterdir())


@pytest.mark.asyncio
async def test_stage_stores_file_and_probes_duration(settings, make_transcoder):
    transcoder = make_transcoder(duration=299.6)
    service = UploadService(settings, transcoder)

    video = await service.stage(make_upload())

    assert video.filename.endswith("_Final Match.mp4")
    assert video.original_name == "Final Match.mp4"
    assert video.path == f"/uploads/{video.filename}"
    assert video.duration == 300
    assert video.size == len(b"fake mp4 bytes")
    assert video.sport == "football"
    stored = settings.upload_dir / video.filename
    assert stored.read_bytes() == b"fake mp4 bytes"
    assert transcoder.probes == [stored]


@pytest.mark.asyncio
async def test_duration_rounds_half_up(settings, make_transcoder):
    video = await UploadService(settings, make_transcoder(duration=120.5)).stage(make_upload())
    assert video.duration == 121


@pytest.mark.asyncio
@pytest.mark.parametrize("content_type", ["video/quicktime", "video/x-msvideo", "video/mp4; codecs=avc1"])
async def test_allowed_types(settings, make_transcoder, content_type):
    video = await UploadService(settings, make_transcoder()).stage(make_upload(content_type=content_type))
    assert (settings.upload_dir / video.filename).exists()


@pytest.mark.asyncio
@pytest.mark.parametrize("content_type", ["video/webm", "image/png", "application/octet-stream", ""])
async def test_rejects_other_types(settings, make_transcoder, content_type):
    service = UploadService(settings, make_transcoder())

    with pytest.raises(InvalidInput, match="Only MP4, MOV, and AVI files are allowed"):
        await service.stage(make_upload(content_type=content_type))

    assert staged_files(settings) == []


@pytest.mark.asyncio
async def test_rejects_missing_file(settings, make_transcoder):
    with pytest.raises(InvalidInput, match="No video file provided"):
        await UploadService(settings, make_transcoder()).stage(None)


@pytest.mark.asyncio
async def test_rejects_empty_file(settings, make_transcoder):
    transcoder = make_transcoder()

    with pytest.raises(InvalidInput, match="empty"):
        await UploadService(settings, transcoder).stage(make_upload(data=b""))

    assert staged_files(settings) == []
    assert transcoder.probes == []


@pytest.mark.asyncio
async def test_rejects_oversized_file(settings, make_transcoder):
    settings.max_upload_bytes = 10

    with pytest.raises(InvalidInput, match="too large"):
        await UploadService(settings, make_transcoder()).stage(make_upload(data=b"x" * 11))

    assert staged_files(settings) == []


@pytest.mark.asyncio
async def test_probe_failure_removes_staged_file(settings, make_transcoder):
    with pytest.raises(ProbeFailed, match="Failed to read video metadata"):
        await UploadService(settings, make_transcoder(fail_probe=True)).stage(make_upload())

    assert staged_files(settings) == []


class _DroppedConnection(io.BytesIO):
    """Body that delivers one chunk and then fails mid-stream."""

    def __init__(self, data):
        super().__init__(data)
        self.reads = 0

    def read(self, size=-1):
        self.reads += 1
        if self.reads > 1:
            raise OSError("connection reset")
        return super().read(size)


@pytest.mark.asyncio
async def test_read_error_removes_partial_file(settings, make_transcoder):
    upload = UploadFile(
        file=_DroppedConnection(b"partial bytes"),
        filename="match.mp4",
        headers=Headers({"content-type": "video/mp4"}),
    )
    transcoder = make_transcoder()

    with pytest.raises(OSError, match="connection reset"):
        await UploadService(settings, transcoder).stage(upload)

    assert staged_files(settings) == []
    assert transcoder.probes == []


@pytest.mark.asyncio
async def test_client_directories_are_stripped(settings, make_transcoder):
    video = await UploadService(settings, make_transcoder()).stage(make_upload(filename="../../evil.mp4"))

    assert video.filename.endswith("_evil.mp4")
    assert (settings.upload_dir / video.filename).exists()
