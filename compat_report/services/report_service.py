import logging
import time

from compat_report.core.config import Settings
from compat_report.core.exceptions import ValidationError
from compat_report.models.report import NormalizedReport, ReportRequest
from compat_report.services.base.llm_base import LLMClientBase
from compat_report.services.builders.prompt_builder import CompatPromptBuilder
from compat_report.services.utils.clean_report import parse_report_json, sanitize_json
from compat_report.services.utils.normalize_report import normalize_report
from compat_report.services.utils.retry import call_with_retry

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(self, settings: Settings, llm_client: LLMClientBase, prompt_builder=None):
        self.settings = settings
        self.llm_client = llm_client
        self.prompt_builder = prompt_builder or CompatPromptBuilder()

    def validate(self, request: ReportRequest) -> None:
        missing = request.missing_required()
        if missing:
            logger.info(f"Rejected report request, missing fields: {', '.join(missing)}")
            raise ValidationError()

    def generate_report(self, request: ReportRequest) -> NormalizedReport:
        """Prompt -> Gemini (one retry) -> sanitize -> parse -> normalize"""
        self.settings.require_api_key()
        self.validate(request)

        prompt = self.prompt_builder.build(request)
        timeout = self.settings.REQUEST_TIMEOUT_SECONDS

        started = time.monotonic()
        text = call_with_retry(
            lambda: self.llm_client.generate(prompt, timeout=timeout),
            label=f"Gemini report call (topic={request.resolved_topic})",
        )
        logger.info(f"Gemini answered in {time.monotonic() - started:.2f}s ({len(text)} chars) for topic={request.resolved_topic}")

        parsed = parse_report_json(sanitize_json(text))
        return normalize_report(parsed)
