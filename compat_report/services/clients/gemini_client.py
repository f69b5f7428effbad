import logging
from typing import Any, Optional
from urllib.parse import quote

import requests

from compat_report.core.config import Settings
from compat_report.core.exceptions import UpstreamError
from compat_report.services.base.llm_base import LLMClientBase
from compat_report.services.builders.prompt_builder import CompatPromptBuilder

logger = logging.getLogger(__name__)

GENERATION_CONFIG = {
    "temperature": 0.6,
    "topK": 40,
    "topP": 0.9,
    "maxOutputTokens": 800,
    "responseMimeType": "application/json",
}


class GeminiClient(LLMClientBase):
    """Single-shot generateContent call over the Gemini REST API"""

    def __init__(self, settings: Settings, system_instruction: Optional[str] = None, session=None):
        self.settings = settings
        self.system_instruction = system_instruction or CompatPromptBuilder().build_system()
        self.session = session or requests

    @property
    def url(self) -> str:
        # GEMINI_MODEL may be given as "gemini-2.5-flash" or "models/gemini-2.5-flash"
        model = self.settings.GEMINI_MODEL.removeprefix("models/")
        return f"{self.settings.GEMINI_BASE}/v1beta/models/{quote(model, safe='')}:generateContent"

    def build_body(self, prompt: str) -> dict:
        return {
            "contents": [
                {"role": "user", "parts": [{"text": self.system_instruction}]},
                {"role": "user", "parts": [{"text": prompt}]},
            ],
            "generationConfig": dict(GENERATION_CONFIG),
        }

    def generate(self, prompt: str, timeout: Optional[float] = None) -> str:
        timeout = timeout or self.settings.REQUEST_TIMEOUT_SECONDS
        api_key = self.settings.require_api_key()
        try:
            response = self.session.post(
                self.url,
                params={"key": api_key},
                headers={"content-type": "application/json"},
                json=self.build_body(prompt),
                timeout=timeout,
            )
        except requests.exceptions.Timeout as e:
            raise UpstreamError(f"timed out after {timeout}s") from e
        except requests.exceptions.RequestException as e:
            # requests puts the full URL, query-string key included, in the message
            raise UpstreamError(f"{type(e).__name__}: {str(e).replace(api_key, '***')}") from e

        if not response.ok:
            body = response.text or ""
            raise UpstreamError(body[:500], upstream_status=response.status_code, body=body)

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError("response body is not JSON", upstream_status=response.status_code) from e

        return extract_text(payload)


def extract_text(payload: Any) -> str:
    """Pull candidates[0].content.parts[0].text (or inline_data.data) out of a v1beta envelope."""
    try:
        part = payload["candidates"][0]["content"]["parts"][0]
    except (KeyError, IndexError, TypeError):
        logger.warning("⚠️ Gemini response had no candidate parts")
        return ""
    if not isinstance(part, dict):
        return ""

    text = part.get("text")
    if text is None:
        inline = part.get("inline_data") or part.get("inlineData") or {}
        text = inline.get("data") if isinstance(inline, dict) else None
    return str(text) if text else ""
