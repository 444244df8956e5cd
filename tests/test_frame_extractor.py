"""
Tests for frame capture.
"""

import base64
from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from matchvision.core.errors import CaptureError
from matchvision.services.frame_extractor import (
    encode_jpeg_base64,
    extract_frame,
    strip_data_uri,
    temp_video,
)


def _decode(payload: str) -> Image.Image:
    return Image.open(BytesIO(base64.b64decode(payload)))


def test_extract_frame_returns_bare_base64_jpeg(sample_video):
    payload = extract_frame(sample_video)

    assert payload
    assert not payload.startswith("data:")
    assert payload.startswith("/9j/")  # JPEG SOI marker in base64

    image = _decode(payload)
    assert image.format == "JPEG"
    assert image.size == (160, 120)  # native video resolution


def test_extract_frame_short_video_still_captures(short_video):
    payload = extract_frame(short_video, offset_s=1.0)

    assert _decode(payload).size == (160, 120)


def test_extract_frame_missing_file(tmp_path):
    with pytest.raises(CaptureError) as exc:
        extract_frame(tmp_path / "nope.mp4")

    assert "Error loading video" in exc.value.message


def test_extract_frame_garbage_file(garbage_video):
    with pytest.raises(CaptureError):
        extract_frame(garbage_video)


def test_temp_video_spools_and_cleans_up(sample_video):
    with temp_video(".avi") as path:
        assert path.suffix == ".avi"
        path.write_bytes(sample_video.read_bytes())
        payload = extract_frame(path)

    assert _decode(payload).format == "JPEG"
    assert not path.exists()


def test_temp_video_removed_on_error(garbage_video):
    with pytest.raises(CaptureError):
        with temp_video() as path:
            path.write_bytes(garbage_video.read_bytes())
            extract_frame(path)

    assert not path.exists()


def test_encode_quality_changes_size():
    rng = np.random.default_rng(0)
    frame = rng.integers(0, 255, size=(90, 120, 3), dtype=np.uint8)

    low = base64.b64decode(encode_jpeg_base64(frame, quality=0.2))
    high = base64.b64decode(encode_jpeg_base64(frame, quality=0.95))

    assert len(low) < len(high)


def test_encode_empty_frame():
    with pytest.raises(CaptureError):
        encode_jpeg_base64(np.zeros((0, 0, 3), dtype=np.uint8))


@pytest.mark.parametrize("payload, expected", [
    ("data:image/jpeg;base64,QUJD", "QUJD"),
    ("QUJD", "QUJD"),
    ("", ""),
])
def test_strip_data_uri(payload, expected):
    assert strip_data_uri(payload) == expected
