import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

from compat_report.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "models/gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_TIMEOUT_SECONDS = 20.0
DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",  # Vite dev server
    "http://localhost:3000",  # Next/React dev server
]


@dataclass(frozen=True)
class Settings:
    """Process configuration, built once at startup and passed to the clients."""

    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = DEFAULT_MODEL
    GEMINI_BASE: str = DEFAULT_BASE_URL
    REQUEST_TIMEOUT_SECONDS: float = DEFAULT_TIMEOUT_SECONDS
    CORS_ORIGINS: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    LOG_LEVEL: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from the environment (and a .env file if present)"""
        load_dotenv()

        api_key = os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY") or None
        if not api_key:
            logger.warning("⚠️ GOOGLE_API_KEY / GEMINI_API_KEY missing - report requests will fail with 500")

        origins = os.getenv("CORS_ORIGINS")
        cors_origins = (
            [o.strip() for o in origins.split(",") if o.strip()]
            if origins else list(DEFAULT_CORS_ORIGINS)
        )

        return cls(
            GEMINI_API_KEY=api_key,
            GEMINI_MODEL=os.getenv("GEMINI_MODEL") or DEFAULT_MODEL,
            GEMINI_BASE=(os.getenv("GEMINI_BASE") or DEFAULT_BASE_URL).rstrip("/"),
            REQUEST_TIMEOUT_SECONDS=_parse_timeout(os.getenv("REQUEST_TIMEOUT_SECONDS")),
            CORS_ORIGINS=cors_origins,
            LOG_LEVEL=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )

    def require_api_key(self) -> str:
        if not self.GEMINI_API_KEY:
            raise ConfigError("API 키가 설정되지 않았습니다.")
        return self.GEMINI_API_KEY


def _parse_timeout(raw: Optional[str]) -> float:
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"⚠️ Invalid REQUEST_TIMEOUT_SECONDS={raw!r}, using {DEFAULT_TIMEOUT_SECONDS}")
        return DEFAULT_TIMEOUT_SECONDS
    return value if value > 0 else DEFAULT_TIMEOUT_SECONDS
