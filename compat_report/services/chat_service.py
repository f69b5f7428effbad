import logging
import time
import uuid
from typing import Dict, List, Optional, Tuple

from compat_report.core.config import Settings
from compat_report.core.exceptions import ValidationError
from compat_report.models.chat import (
    ChatChoice,
    ChatChoiceMessage,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
)

logger = logging.getLogger(__name__)

ROLE_MAP = {"user": "user", "assistant": "model", "model": "model"}


def map_messages(messages: List[ChatMessage]) -> Tuple[Optional[str], List[Dict[str, str]]]:
    """
    Split OpenAI-style messages into a Gemini system instruction and
    conversational turns. System messages are joined; unknown roles are sent as user.
    """
    system_parts = []
    turns = []
    for msg in messages:
        if msg.role == "system":
            system_parts.append(msg.content)
            continue
        turns.append({"role": ROLE_MAP.get(msg.role, "user"), "text": msg.content})
    system_instruction = "\n\n".join(p for p in system_parts if p) or None
    return system_instruction, turns


class ChatRelayService:
    def __init__(self, settings: Settings, chat_client):
        self.settings = settings
        self.chat_client = chat_client

    def complete(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        self.settings.require_api_key()
        if not request.messages:
            raise ValidationError("messages가 비어 있습니다.")

        system_instruction, turns = map_messages(request.messages)
        if not turns:
            raise ValidationError("messages가 비어 있습니다.")

        *history, last = turns
        content = self.chat_client.send(
            history=history,
            message=last["text"],
            system_instruction=system_instruction,
            temperature=request.temperature,
        )
        logger.info(f"Chat relay answered ({len(history)} history turns, {len(content)} chars)")

        return ChatCompletionResponse(
            id=f"chatcmpl-{uuid.uuid4().hex}",
            created=int(time.time()),
            model=self.settings.GEMINI_MODEL,
            choices=[ChatChoice(message=ChatChoiceMessage(content=content))],
        )
