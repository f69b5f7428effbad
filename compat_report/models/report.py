from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

TOPIC_DEFAULT = "compatibility_basic"

# topic key -> display title
TOPIC_TITLES: Dict[str, str] = {
    "compatibility_basic": "기본 궁합 리포트",
    "red_line": "레드 라인 궁합 분석",
    "lucky_color": "행운 컬러 & 무드",
}
TOPIC_FALLBACK_TITLE = "궁합 분석"

# emotion, communication, realism, growth, sustainability
FACET_NAMES = ("정서", "소통", "현실", "성장", "지속")

BLOOD_TYPES = ("A", "B", "O", "AB")


class ReportRequest(BaseModel):
    # Every field is optional at the schema level so a missing birth date or
    # MBTI is reported as a 400 by ReportService instead of a 422.
    topic: Optional[str] = None
    man_birth: Optional[str] = Field(None, examples=["1992-03-14"])
    woman_birth: Optional[str] = Field(None, examples=["1994-11-02"])
    man_mbti: Optional[str] = Field(None, examples=["ENTP"])
    woman_mbti: Optional[str] = Field(None, examples=["ISFJ"])
    man_blood: Optional[str] = Field(None, examples=["A"])
    woman_blood: Optional[str] = Field(None, examples=["O"])
    man_time: Optional[str] = Field(None, examples=["07:30"])
    woman_time: Optional[str] = Field(None, examples=["23:05"])

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("man_mbti", "woman_mbti")
    @classmethod
    def _upper(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v

    @field_validator("man_blood", "woman_blood")
    @classmethod
    def _blood_type(cls, v: Optional[str]) -> Optional[str]:
        # anything outside A/B/O/AB is treated as unknown
        if not v:
            return None
        v = v.upper()
        return v if v in BLOOD_TYPES else None

    def missing_required(self) -> List[str]:
        required = ("man_birth", "woman_birth", "man_mbti", "woman_mbti")
        return [name for name in required if not getattr(self, name)]

    @property
    def resolved_topic(self) -> str:
        return self.topic if self.topic in TOPIC_TITLES else TOPIC_DEFAULT


class ParsedReport(BaseModel):
    """Untrusted model output. Each field is either absent (None) or any JSON value."""

    score: Optional[Any] = None
    facets: Optional[Any] = None
    summary: Optional[Any] = None
    insights: Optional[Any] = None
    oneliner: Optional[Any] = None
    explanation: Optional[Any] = None

    @classmethod
    def from_json(cls, data: Any) -> "ParsedReport":
        if not isinstance(data, dict):
            return cls()
        return cls(**{name: data.get(name) for name in cls.model_fields})


class NormalizedReport(BaseModel):
    score: int = Field(..., ge=30, le=98)
    facets: Dict[str, int]
    summary: str = Field("", max_length=400)
    insights: List[str] = Field(default_factory=list, max_length=3)
    oneliner: str = Field("", max_length=80)
    explanation: Dict[str, str]


class ErrorResponse(BaseModel):
    error: bool = True
    detail: str
