from typing import Optional


class CompatReportError(Exception):
    """Base error. `detail` is the only text that reaches the client."""

    status_code: int = 500
    default_detail: str = "서버 오류"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ConfigError(CompatReportError):
    status_code = 500
    default_detail = "서버 설정 오류"


class ValidationError(CompatReportError):
    status_code = 400
    default_detail = "필수 입력(생년월일/MBTI)이 누락되었습니다."


class UpstreamError(CompatReportError):
    """Non-2xx status, timeout or network failure from the model provider"""

    status_code = 500
    default_detail = "AI 분석 서버 응답 오류"

    def __init__(self, message: str, upstream_status: Optional[int] = None, body: str = ""):
        super().__init__(self.default_detail)
        self.message = message
        self.upstream_status = upstream_status
        self.body = body

    def __str__(self) -> str:
        if self.upstream_status is not None:
            return f"Gemini {self.upstream_status}: {self.message}"
        return f"Gemini request failed: {self.message}"


class ParseError(CompatReportError):
    status_code = 500
    default_detail = "JSON 파싱 실패"
