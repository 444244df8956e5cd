# matchvision/config.py
from functools import lru_cache
from pathlib import Path
from typing import Optional
import os
from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]

# Load in ascending precedence; later overrides earlier
load_dotenv(ROOT / ".env")
load_dotenv(ROOT / ".env.local", override=True)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    def __init__(self):
        # Server
        self.PORT: int = int(os.getenv("PORT", "8000"))
        self.DATA_DIR: str = os.getenv("DATA_DIR", str(ROOT / "data"))
        self.MAX_BODY_MB: int = int(os.getenv("MAX_BODY_MB", "15"))
        self.MAX_UPLOAD_MB: int = int(os.getenv("MAX_UPLOAD_MB", "200"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
        self.RUN_LOG: bool = _flag("RUN_LOG", "true")

        # CORS
        self.ALLOWED_ORIGINS: list[str] = [
            s.strip() for s in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",") if s.strip()
        ]

        # Vision
        self.VISION_PROVIDER: str = os.getenv("VISION_PROVIDER", "anthropic").lower()
        self.ANTHROPIC_API_KEY: Optional[str] = os.getenv("ANTHROPIC_API_KEY")
        self.ANTHROPIC_MODEL: str = os.getenv("ANTHROPIC_MODEL", "claude-3-7-sonnet-20250219")
        self.OPENAI_API_KEY: Optional[str] = os.getenv("OPENAI_API_KEY")
        self.OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
        self.VISION_MAX_TOKENS: int = int(os.getenv("VISION_MAX_TOKENS", "1024"))

        # Frames
        self.FRAME_OFFSET_S: float = float(os.getenv("FRAME_OFFSET_S", "1.0"))
        self.FRAME_JPEG_QUALITY: float = float(os.getenv("FRAME_JPEG_QUALITY", "0.8"))

    @property
    def runs_dir(self) -> Path:
        return Path(self.DATA_DIR) / "runs"

@lru_cache
def get_settings() -> Settings:
    return Settings()
