from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .middleware_logging import configure_logging, register_request_logging, register_body_limit
from .error_handlers import register_error_handlers
from .routers.analyze import router as analyze_router
from .routers.health import router as health_router

__version__ = "0.1.0"


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="MatchVision API", version=__version__)
    register_request_logging(app)
    # uploads are capped separately by MAX_UPLOAD_MB while streaming
    register_body_limit(app, settings.MAX_BODY_MB, exempt=("/analyze/video",))
    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def no_store(request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith("/analyze"):
            response.headers["Cache-Control"] = "no-store, max-age=0"
        return response

    @app.get("/")
    def root():
        return {"message": "MatchVision: upload a match video, get a structured analysis."}

    app.include_router(analyze_router)
    app.include_router(health_router)
    return app


app = create_app()
