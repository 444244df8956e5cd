import logging
import time
from typing import Callable
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("matchvision.request")


def configure_logging(level: str = "INFO") -> None:
    # Configure root logger once (simple, readable format)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        client = request.client.host if request.client else "-"
        method = request.method
        path = request.url.path

        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000.0
            logger.info(
                "client=%s method=%s path=%s status=%s duration_ms=%.2f",
                client, method, path, response.status_code, duration_ms
            )
            return response
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000.0
            logger.exception(
                "client=%s method=%s path=%s status=%s duration_ms=%.2f UNHANDLED",
                client, method, path, 500, duration_ms
            )
            raise


class BodySizeLimitMiddleware:
    """Reject request bodies above max_bytes, whether declared or streamed."""

    def __init__(self, app: ASGIApp, max_bytes: int, exempt: tuple[str, ...] = ()):
        self.app = app
        self.max_bytes = max_bytes
        self.exempt = exempt

    @property
    def too_large(self) -> str:
        return f"Request body too large (> {self.max_bytes // (1024 * 1024)} MB)"

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http" or (self.exempt and scope["path"].startswith(self.exempt)):
            await self.app(scope, receive, send)
            return

        path = scope["path"]
        declared = Headers(scope=scope).get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_bytes:
            logger.warning(
                "path=%s content_length=%s exceeds limit=%s",
                path, declared, self.max_bytes
            )
            response = JSONResponse({"error": self.too_large}, status_code=413)
            await response(scope, receive, send)
            return

        # chunked bodies carry no Content-Length; count what actually arrives
        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    logger.warning(
                        "path=%s streamed body exceeds limit=%s",
                        path, self.max_bytes
                    )
                    raise HTTPException(status_code=413, detail=self.too_large)
            return message

        await self.app(scope, limited_receive, send)


def register_request_logging(app):
    app.add_middleware(RequestLogMiddleware)


def register_body_limit(app, max_mb: int, exempt: tuple[str, ...] = ()):
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=max_mb * 1024 * 1024, exempt=exempt)
