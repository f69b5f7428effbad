import logging

import pytest
import requests

from compat_report.core.config import Settings
from compat_report.core.exceptions import UpstreamError
from compat_report.services.clients.gemini_client import GENERATION_CONFIG, GeminiClient, extract_text
from compat_report.services.utils.retry import call_with_retry


class _FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class _FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.response


def _envelope(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def settings():
    return Settings(GEMINI_API_KEY="secret", GEMINI_MODEL="models/gemini-2.5-flash", GEMINI_BASE="https://example.test")


def test_request_shape(settings):
    session = _FakeSession(_FakeResponse(payload=_envelope('{"score": 80}')))
    client = GeminiClient(settings, system_instruction="SYSTEM", session=session)

    assert client.generate("PAYLOAD") == '{"score": 80}'

    url, kwargs = session.calls[0]
    assert url == "https://example.test/v1beta/models/gemini-2.5-flash:generateContent"
    assert kwargs["params"] == {"key": "secret"}
    assert kwargs["timeout"] == 20.0
    body = kwargs["json"]
    assert [c["parts"][0]["text"] for c in body["contents"]] == ["SYSTEM", "PAYLOAD"]
    assert all(c["role"] == "user" for c in body["contents"])
    assert body["generationConfig"] == GENERATION_CONFIG
    assert body["generationConfig"]["responseMimeType"] == "application/json"


def test_explicit_timeout_is_used(settings):
    session = _FakeSession(_FakeResponse(payload=_envelope("x")))
    GeminiClient(settings, system_instruction="S", session=session).generate("p", timeout=5)
    assert session.calls[0][1]["timeout"] == 5


def test_non_success_status_raises_upstream_error(settings):
    session = _FakeSession(_FakeResponse(status_code=429, text="quota exceeded"))
    with pytest.raises(UpstreamError) as info:
        GeminiClient(settings, system_instruction="S", session=session).generate("p")
    assert info.value.upstream_status == 429
    assert info.value.body == "quota exceeded"
    assert "quota" not in info.value.detail


def test_timeout_raises_upstream_error(settings):
    session = _FakeSession(exc=requests.exceptions.Timeout("slow"))
    with pytest.raises(UpstreamError) as info:
        GeminiClient(settings, system_instruction="S", session=session).generate("p")
    assert info.value.upstream_status is None


def test_connection_error_raises_upstream_error(settings):
    session = _FakeSession(exc=requests.exceptions.ConnectionError("refused"))
    with pytest.raises(UpstreamError):
        GeminiClient(settings, system_instruction="S", session=session).generate("p")


def test_missing_text_returns_empty_string(settings):
    session = _FakeSession(_FakeResponse(payload={"candidates": []}))
    assert GeminiClient(settings, system_instruction="S", session=session).generate("p") == ""


def test_extract_text_inline_data_fallback():
    payload = {"candidates": [{"content": {"parts": [{"inline_data": {"data": "{}"}}]}}]}
    assert extract_text(payload) == "{}"


@pytest.mark.parametrize("payload", [{}, None, {"candidates": [{}]}, {"candidates": [{"content": {"parts": ["x"]}}]}])
def test_extract_text_tolerates_odd_envelopes(payload):
    assert extract_text(payload) == ""


def test_default_system_instruction_is_rendered(settings):
    client = GeminiClient(settings, session=_FakeSession())
    assert "사주" in client.system_instruction


def test_connection_error_does_not_leak_api_key(caplog):
    key = "AIzaSECRETKEY123456789"
    settings = Settings(GEMINI_API_KEY=key, GEMINI_BASE="http://127.0.0.1:1")
    exc = requests.exceptions.ConnectionError(
        "HTTPConnectionPool(host='127.0.0.1', port=1): Max retries exceeded with url: "
        f"/v1beta/models/gemini-2.5-flash:generateContent?key={key}"
    )
    client = GeminiClient(settings, system_instruction="S", session=_FakeSession(exc=exc))

    with caplog.at_level(logging.WARNING):
        with pytest.raises(UpstreamError) as info:
            call_with_retry(lambda: client.generate("p"))

    assert key not in str(info.value)
    assert key not in info.value.message
    assert key not in caplog.text
    assert "ConnectionError" in str(info.value)
