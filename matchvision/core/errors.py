# matchvision/core/errors.py
from __future__ import annotations


class MatchVisionError(Exception):
    """Base for every failure that surfaces to the caller as one message."""
    status_code: int = 500
    default_message: str = "Failed to analyze video"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InputError(MatchVisionError):
    """Nothing to analyze: no frame or video was supplied."""
    status_code = 400
    default_message = "No frame provided"


class CaptureError(MatchVisionError):
    """Frame extraction failed (decode, seek or encode)."""
    status_code = 400
    default_message = "Error loading video"


class UpstreamError(MatchVisionError):
    """The vision service call failed or returned nothing usable."""
    status_code = 500
    default_message = "Failed to analyze video"


class PayloadTooLarge(MatchVisionError):
    status_code = 413
    default_message = "Payload too large"
