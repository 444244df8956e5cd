# matchvision/routers/analyze.py
from fastapi import APIRouter, Depends, File, Request, UploadFile
from starlette.concurrency import run_in_threadpool
from pydantic import BaseModel
from pathlib import Path
from typing import Any, Dict, List, Literal
import json, logging, mimetypes, time, uuid

from matchvision.config import get_settings
from matchvision.core.errors import InputError, MatchVisionError, PayloadTooLarge
from matchvision.services.analysis_formatter import parse, render_markdown
from matchvision.services.frame_extractor import extract_frame, strip_data_uri, temp_video
from matchvision.services.runlog import append_run_log
from matchvision.services.vision_providers import VisionClient, first_text, get_vision

logger = logging.getLogger("matchvision.analyze")

router = APIRouter(prefix="/analyze")


class AnalyzeOut(BaseModel):
    analysis: List[Dict[str, Any]]

class VideoAnalyzeOut(BaseModel):
    id: str
    text: str
    analysis: List[Dict[str, Any]]
    presentation: Dict[str, Any]

class FormatIn(BaseModel):
    text: str = ""


def vision_dep() -> VisionClient:
    return get_vision()


def _new_run_id() -> str:
    return f"run_{uuid.uuid4().hex[:10]}"


def _log_run(run_id: str, route: str, vision: VisionClient, t0: float, text: str | None, error: str | None):
    append_run_log({
        "id": run_id,
        "route": route,
        "provider": type(vision).__name__,
        "text_chars": len(text) if text is not None else None,
        "error": error,
        "elapsed_s": round(time.time() - t0, 3),
    })


def _safe_ext(name: str, default: str = ".mp4") -> str:
    s = (name or "").lower()
    for ext in (".mp4", ".mov", ".mkv", ".webm", ".avi", ".mpg", ".mpeg", ".m4v"):
        if s.endswith(ext):
            return ext
    return default


def _is_video(filename: str) -> bool:
    mime, _ = mimetypes.guess_type(filename)
    return mime is None or mime.startswith("video/")


async def _write_upload(dest_path: Path, up: UploadFile, max_mb: int) -> int:
    chunk_size = 1024 * 1024  # 1MB
    max_bytes = max_mb * 1024 * 1024
    written = 0
    with dest_path.open("wb") as buf:
        while True:
            chunk = await up.read(chunk_size)
            if not chunk:
                break
            written += len(chunk)
            if written > max_bytes:
                raise PayloadTooLarge(f"File too large (> {max_mb} MB)")
            buf.write(chunk)
    return written


async def _read_frame(request: Request) -> str:
    # body is {"frame": "<base64 JPEG>"}; anything else is the caller's fault
    raw = await request.body()
    if not raw.strip():
        raise InputError("No frame provided")
    try:
        payload = json.loads(raw)
    except ValueError:
        raise InputError("Request body must be JSON")

    frame = payload.get("frame") if isinstance(payload, dict) else None
    if frame is None:
        raise InputError("No frame provided")
    if not isinstance(frame, str):
        raise InputError("Frame must be a base64-encoded string")
    frame = strip_data_uri(frame.strip())
    if not frame:
        raise InputError("No frame provided")
    return frame


@router.post("", response_model=AnalyzeOut)
async def analyze_frame(request: Request, vision: VisionClient = Depends(vision_dep)):
    frame = await _read_frame(request)

    t0 = time.time()
    run_id = _new_run_id()
    try:
        blocks = await run_in_threadpool(vision.analyze, frame)
    except MatchVisionError as e:
        _log_run(run_id, "/analyze", vision, t0, None, e.message)
        raise

    _log_run(run_id, "/analyze", vision, t0, blocks[0].get("text") if blocks else None, None)
    return AnalyzeOut(analysis=blocks)


@router.post("/video", response_model=VideoAnalyzeOut)
async def analyze_video(
    file: UploadFile | None = File(default=None),
    vision: VisionClient = Depends(vision_dep),
):
    if file is None or not file.filename:
        raise InputError("Please upload a video first")
    if not _is_video(file.filename):
        raise InputError("Unsupported file type. Please upload a video.")

    settings = get_settings()
    t0 = time.time()
    run_id = _new_run_id()

    with temp_video(_safe_ext(file.filename)) as tmp_path:
        try:
            size = await _write_upload(tmp_path, file, settings.MAX_UPLOAD_MB)
            if size == 0:
                raise InputError("Please upload a video first")
            logger.info("run=%s upload=%s bytes=%d", run_id, file.filename, size)
            frame = await run_in_threadpool(
                extract_frame, tmp_path, settings.FRAME_OFFSET_S, settings.FRAME_JPEG_QUALITY
            )
            blocks = await run_in_threadpool(vision.analyze, frame)
            text = first_text(blocks)
        except MatchVisionError as e:
            _log_run(run_id, "/analyze/video", vision, t0, None, e.message)
            raise

    _log_run(run_id, "/analyze/video", vision, t0, text, None)
    return VideoAnalyzeOut(
        id=run_id,
        text=text,
        analysis=blocks,
        presentation=parse(text).to_api(),
    )


@router.post("/format")
def format_analysis(req: FormatIn, format: Literal["json", "markdown"] = "json"):
    presentation = parse(req.text)
    if format == "markdown":
        return {"markdown": render_markdown(presentation)}
    return {"presentation": presentation.to_api()}
