import logging
from typing import Dict, List, Optional

import httpx
from google import genai
from google.genai import errors, types

from compat_report.core.config import Settings
from compat_report.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class GeminiChatClient:
    """Multi-turn chat over the google-genai SDK, used by the chat relay"""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _client(self) -> genai.Client:
        return genai.Client(
            api_key=self.settings.require_api_key(),
            http_options=types.HttpOptions(
                base_url=self.settings.GEMINI_BASE,
                timeout=int(self.settings.REQUEST_TIMEOUT_SECONDS * 1000),  # milliseconds
            ),
        )

    def send(
        self,
        history: List[Dict[str, str]],
        message: str,
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Replay `history` ({role, text} turns) and send `message` as the active turn."""
        client = self._client()
        chat = client.chats.create(
            model=self.settings.GEMINI_MODEL,
            history=[
                types.Content(role=turn["role"], parts=[types.Part(text=turn["text"])])
                for turn in history
            ],
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                temperature=temperature,
            ),
        )
        try:
            response = chat.send_message(message)
        except errors.APIError as e:
            raise UpstreamError(e.message or str(e), upstream_status=e.code) from e
        except httpx.HTTPError as e:
            raise UpstreamError(str(e)) from e

        return (response.text or "").strip()
