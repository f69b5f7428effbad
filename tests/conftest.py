import json

import pytest
from fastapi.testclient import TestClient

from compat_report.core.config import Settings
from compat_report.core.dependencies import get_chat_service, get_report_service
from compat_report.main import create_app
from compat_report.services.base.llm_base import LLMClientBase
from compat_report.services.chat_service import ChatRelayService
from compat_report.services.report_service import ReportService

VALID_REPORT = {
    "score": 84,
    "facets": {"정서": 78, "소통": 85, "현실": 72, "성장": 88, "지속": 80},
    "summary": "서로의 속도를 맞추면 안정적인 관계입니다.",
    "insights": ["감정은 바로 말하기", "주 1회 계획 공유", "갈등 후 24시간 안에 복구"],
    "oneliner": "다름을 존중할수록 단단해지는 커플",
    "explanation": {"정서": "a", "소통": "b", "현실": "c", "성장": "d", "지속": "e"},
}


class StubLLMClient(LLMClientBase):
    """Returns queued responses in order; queued exceptions are raised."""

    def __init__(self, responses):
        self._responses = list(responses)
        self.prompts = []

    def generate(self, prompt, timeout=None):
        self.prompts.append(prompt)
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class StubChatClient:
    def __init__(self, reply="안녕하세요"):
        self.reply = reply
        self.calls = []

    def send(self, history, message, system_instruction=None, temperature=None):
        self.calls.append(
            {"history": history, "message": message, "system_instruction": system_instruction, "temperature": temperature}
        )
        return self.reply


@pytest.fixture
def settings():
    return Settings(GEMINI_API_KEY="test-key", GEMINI_MODEL="models/gemini-2.5-flash")


@pytest.fixture
def valid_json_text():
    return json.dumps(VALID_REPORT, ensure_ascii=False)


@pytest.fixture
def make_client():
    """Build a TestClient whose services use the given stubs."""

    def _make(settings, llm_client=None, chat_client=None):
        app = create_app(settings)
        if llm_client is not None:
            app.dependency_overrides[get_report_service] = lambda: ReportService(settings, llm_client)
        if chat_client is not None:
            app.dependency_overrides[get_chat_service] = lambda: ChatRelayService(settings, chat_client)
        return TestClient(app)

    return _make
