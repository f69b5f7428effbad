from fastapi import APIRouter, Depends

from compat_report.core.dependencies import get_chat_service
from compat_report.models.chat import ChatCompletionRequest, ChatCompletionResponse
from compat_report.models.report import ErrorResponse
from compat_report.services.chat_service import ChatRelayService

router = APIRouter()


@router.post(
    "/completions",
    response_model=ChatCompletionResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def chat_completions(data: ChatCompletionRequest, service: ChatRelayService = Depends(get_chat_service)):
    """OpenAI-compatible chat completion relayed to Gemini"""
    return service.complete(data)
