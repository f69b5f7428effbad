from fastapi import Depends, Request

from compat_report.core.config import Settings
from compat_report.services.chat_service import ChatRelayService
from compat_report.services.clients.chat_client import GeminiChatClient
from compat_report.services.clients.gemini_client import GeminiClient
from compat_report.services.report_service import ReportService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_report_service(settings: Settings = Depends(get_settings)) -> ReportService:
    return ReportService(settings=settings, llm_client=GeminiClient(settings))


def get_chat_service(settings: Settings = Depends(get_settings)) -> ChatRelayService:
    return ChatRelayService(settings=settings, chat_client=GeminiChatClient(settings))
