# matchvision/services/vision_providers.py
from __future__ import annotations
from typing import Protocol, Dict, Any, List, Optional
import logging

from matchvision.config import Settings, get_settings
from matchvision.core.errors import UpstreamError
from matchvision.services.prompts import ANALYSIS_PROMPT, FRAME_MEDIA_TYPE

logger = logging.getLogger("matchvision.vision")

ContentBlock = Dict[str, Any]

# ---------- Interface ----------
class VisionClient(Protocol):
    def analyze(self, frame_b64: str) -> List[ContentBlock]: ...


def _block_to_dict(block: Any) -> ContentBlock:
    if isinstance(block, dict):
        return block
    d: ContentBlock = {"type": getattr(block, "type", "text")}
    text = getattr(block, "text", None)
    if text is not None:
        d["text"] = text
    return d


def first_text(blocks: List[ContentBlock]) -> str:
    """The analysis text is the first content block's text."""
    if not blocks:
        raise UpstreamError("No analysis returned from the API")
    text = blocks[0].get("text")
    if not isinstance(text, str):
        raise UpstreamError("No analysis returned from the API")
    return text


# ---------- Stub (offline/demo) ----------
STUB_ANALYSIS = """The scoreboard shows Red Lions 2 - 1 Blue Harbour in the second half.

1. Teams: Red Lions vs Blue Harbour.
The home side wears red, the visitors blue.

2. Who is winning: Red Lions, protecting a one-goal lead.

3. Player positions:
- Red Lions hold a compact back four near the halfway line
- Blue Harbour push both full-backs high
- The ball is on the right touchline

4. Tactics:
- Red Lions press in a 4-4-2 block
- Blue Harbour build through the centre

OTHER INSIGHTS:
The home side looks comfortable protecting the lead."""


class StubVision:
    def analyze(self, frame_b64: str) -> List[ContentBlock]:
        return [{"type": "text", "text": STUB_ANALYSIS}]


# ---------- Anthropic ----------
class AnthropicVision:
    def __init__(self, settings: Optional[Settings] = None):
        s = settings or get_settings()
        self.api_key = s.ANTHROPIC_API_KEY
        self.model = s.ANTHROPIC_MODEL
        self.max_tokens = s.VISION_MAX_TOKENS
        self._client = None

    def client(self):
        if self._client is None:
            import anthropic
            if not self.api_key:
                raise UpstreamError("ANTHROPIC_API_KEY not set")
            # single attempt, no SDK-level retries
            self._client = anthropic.Anthropic(api_key=self.api_key, max_retries=0)
        return self._client

    def analyze(self, frame_b64: str) -> List[ContentBlock]:
        client = self.client()
        logger.info("Sending frame to Anthropic API model=%s", self.model)
        try:
            msg = client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{
                    "role": "user",
                    "content": [
                        {"type": "text", "text": ANALYSIS_PROMPT},
                        {
                            "type": "image",
                            "source": {"type": "base64", "media_type": FRAME_MEDIA_TYPE, "data": frame_b64},
                        },
                    ],
                }],
            )
        except Exception as e:
            logger.error("Anthropic request failed: %s", e)
            raise UpstreamError(str(e) or None) from e

        blocks = [_block_to_dict(b) for b in getattr(msg, "content", None) or []]
        if not blocks:
            raise UpstreamError("No analysis returned from the API")
        return blocks


# ---------- OpenAI ----------
class OpenAIVision:
    def __init__(self, settings: Optional[Settings] = None):
        s = settings or get_settings()
        self.api_key = s.OPENAI_API_KEY
        self.model = s.OPENAI_MODEL
        self.max_tokens = s.VISION_MAX_TOKENS
        self._client = None

    def client(self):
        if self._client is None:
            from openai import OpenAI
            if not self.api_key:
                raise UpstreamError("OPENAI_API_KEY not set")
            self._client = OpenAI(api_key=self.api_key, max_retries=0)
        return self._client

    def analyze(self, frame_b64: str) -> List[ContentBlock]:
        client = self.client()
        logger.info("Sending frame to OpenAI API model=%s", self.model)
        try:
            resp = client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{
                    "role": "user",
                    "content": [
                        {"type": "text", "text": ANALYSIS_PROMPT},
                        {"type": "image_url", "image_url": {"url": f"data:{FRAME_MEDIA_TYPE};base64,{frame_b64}"}},
                    ],
                }],
            )
        except Exception as e:
            logger.error("OpenAI request failed: %s", e)
            raise UpstreamError(str(e) or None) from e

        text = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        if not text:
            raise UpstreamError("No analysis returned from the API")
        return [{"type": "text", "text": text}]


# ---------- Factory ----------
def get_vision(settings: Optional[Settings] = None) -> VisionClient:
    s = settings or get_settings()
    provider = s.VISION_PROVIDER
    if provider == "anthropic":
        return AnthropicVision(s)
    if provider == "openai":
        return OpenAIVision(s)
    if provider != "stub":
        logger.warning("Unknown VISION_PROVIDER=%r; using stub", provider)
    return StubVision()
