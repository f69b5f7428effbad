import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from compat_report.api import chat, report
from compat_report.core.config import Settings
from compat_report.core.exceptions import CompatReportError, UpstreamError, ValidationError
from compat_report.core.logging import configure_logging

logger = logging.getLogger(__name__)


def _error_response(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": True, "detail": detail})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        logger.info("🚀 Starting Compatibility Report API...")
        logger.info(f"✅ Model={settings.GEMINI_MODEL} base={settings.GEMINI_BASE} timeout={settings.REQUEST_TIMEOUT_SECONDS}s")
        if not settings.GEMINI_API_KEY:
            logger.warning("⚠️ Gemini API key missing - /api/compat and /v1/chat will return 500")
        yield
        logger.info("🛑 Shutting down Compatibility Report API...")

    app = FastAPI(title="Compatibility Report API", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CompatReportError)
    async def compat_error_handler(request: Request, exc: CompatReportError):
        if isinstance(exc, UpstreamError):
            logger.error(f"❌ {request.url.path}: {exc}")
            logger.debug(f"Upstream body: {exc.body[:2000]}")
        elif isinstance(exc, ValidationError):
            logger.info(f"{request.url.path}: {exc.detail}")
        else:
            logger.error(f"❌ {request.url.path}: {type(exc).__name__}: {exc.detail}")
        return _error_response(exc.status_code, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info(f"{request.url.path}: malformed body ({len(exc.errors())} errors)")
        return _error_response(400, "요청 형식이 올바르지 않습니다.")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"💥 Unexpected error on {request.url.path}")
        return _error_response(500, "서버 오류")

    app.include_router(report.router, prefix="/api/compat", tags=["Compatibility Report"])
    app.include_router(chat.router, prefix="/v1/chat", tags=["Chat Relay"])

    @app.get("/")
    async def root():
        return {"message": "Compatibility Report API"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "model": settings.GEMINI_MODEL}

    return app


app = create_app()
