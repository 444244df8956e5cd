# matchvision/services/frame_extractor.py
from __future__ import annotations
from io import BytesIO
from pathlib import Path
from contextlib import contextmanager
from typing import Iterator, Optional
import base64, logging, os, tempfile

import cv2
import numpy as np
from PIL import Image

from matchvision.core.errors import CaptureError

logger = logging.getLogger("matchvision.frames")

DEFAULT_OFFSET_S = 1.0
DEFAULT_QUALITY = 0.8


def strip_data_uri(payload: str) -> str:
    """'data:image/jpeg;base64,AAAA' -> 'AAAA'; bare base64 passes through."""
    if payload.startswith("data:") and "," in payload:
        return payload.split(",", 1)[1]
    return payload


def _usable(ok: bool, frame: Optional[np.ndarray]) -> Optional[np.ndarray]:
    if ok and frame is not None and frame.size > 0:
        return frame
    return None


def _read_at_msec(cap: cv2.VideoCapture, offset_s: float) -> Optional[np.ndarray]:
    cap.set(cv2.CAP_PROP_POS_MSEC, max(0.0, offset_s * 1000.0))
    ok, frame = cap.read()
    return _usable(ok, frame)


def _read_at_index(cap: cv2.VideoCapture, index: int) -> Optional[np.ndarray]:
    cap.set(cv2.CAP_PROP_POS_FRAMES, max(0, index))
    ok, frame = cap.read()
    return _usable(ok, frame)


def _grab(cap: cv2.VideoCapture, offset_s: float) -> Optional[np.ndarray]:
    frame = _read_at_msec(cap, offset_s)
    if frame is not None:
        return frame

    # Offset past the end: take the last frame the container reports, then the first.
    count = int(cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0)
    if count > 0:
        logger.info("offset %.3fs beyond stream (%d frames); using last frame", offset_s, count)
        frame = _read_at_index(cap, count - 1)
        if frame is not None:
            return frame
    return _read_at_index(cap, 0)


def encode_jpeg_base64(frame_bgr: np.ndarray, quality: float = DEFAULT_QUALITY) -> str:
    """Encode a BGR frame as JPEG and return bare base64 (no data-URI prefix)."""
    h, w = frame_bgr.shape[:2]
    if h == 0 or w == 0:
        raise CaptureError("Could not get frame surface")

    rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
    buf = BytesIO()
    try:
        Image.fromarray(rgb).save(buf, format="JPEG", quality=int(round(quality * 100)))
    except (OSError, ValueError) as e:
        raise CaptureError(f"Could not encode frame: {e}") from e
    return base64.b64encode(buf.getvalue()).decode("ascii")


def extract_frame(
    video_path: str | os.PathLike[str],
    offset_s: float = DEFAULT_OFFSET_S,
    quality: float = DEFAULT_QUALITY,
) -> str:
    """
    Capture one still from a video at `offset_s` seconds, at the video's
    native resolution, and return it as base64 JPEG.

    Raises CaptureError when the video cannot be opened or decoded.
    """
    src = Path(video_path)
    try:
        cap = cv2.VideoCapture(str(src))
    except cv2.error as e:
        raise CaptureError(f"Error loading video: {e}") from e

    try:
        if not cap.isOpened():
            raise CaptureError("Error loading video")
        frame = _grab(cap, offset_s)
    except cv2.error as e:
        raise CaptureError(f"Error loading video: {e}") from e
    finally:
        cap.release()

    if frame is None:
        raise CaptureError("Error loading video")

    h, w = frame.shape[:2]
    logger.info("captured frame path=%s offset=%.3fs size=%dx%d", src.name, offset_s, w, h)
    return encode_jpeg_base64(frame, quality)


@contextmanager
def temp_video(suffix: str = ".mp4") -> Iterator[Path]:
    """Path of an empty temp file to spool video bytes into; removed on exit."""
    fd, name = tempfile.mkstemp(suffix=suffix)
    os.close(fd)
    path = Path(name)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)
