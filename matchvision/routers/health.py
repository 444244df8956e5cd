# matchvision/routers/health.py
from fastapi import APIRouter
from pathlib import Path

from matchvision.config import get_settings

router = APIRouter()

@router.get("/health/env")
def env_preview():
    s = get_settings()
    return {
        "status": "ok",
        # server
        "PORT": s.PORT,
        "DATA_DIR": str(Path(s.DATA_DIR).resolve()),
        "MAX_BODY_MB": s.MAX_BODY_MB,
        "MAX_UPLOAD_MB": s.MAX_UPLOAD_MB,
        "ALLOWED_ORIGINS": s.ALLOWED_ORIGINS,
        "RUN_LOG": s.RUN_LOG,
        # vision (no secrets)
        "VISION": {
            "provider": s.VISION_PROVIDER,
            "anthropic_model": s.ANTHROPIC_MODEL,
            "anthropic_key_set": bool(s.ANTHROPIC_API_KEY),
            "openai_model": s.OPENAI_MODEL,
            "openai_key_set": bool(s.OPENAI_API_KEY),
            "max_tokens": s.VISION_MAX_TOKENS,
        },
        "FRAMES": {
            "offset_s": s.FRAME_OFFSET_S,
            "jpeg_quality": s.FRAME_JPEG_QUALITY,
        },
    }
