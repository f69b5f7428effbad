import json
import math
from typing import Any, Dict, List, Optional

from compat_report.models.report import FACET_NAMES, NormalizedReport, ParsedReport

SCORE_DEFAULT = 80
SCORE_MIN, SCORE_MAX = 30, 98
FACET_MIN, FACET_MAX = 0, 100
FACET_DEFAULTS: Dict[str, int] = {"정서": 80, "소통": 80, "현실": 70, "성장": 90, "지속": 80}
SUMMARY_MAX_LEN = 400
ONELINER_MAX_LEN = 80
MAX_INSIGHTS = 3


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        try:
            n = float(value)
        except OverflowError:
            n = math.inf if value > 0 else -math.inf
    elif isinstance(value, float):
        n = value
    elif isinstance(value, str):
        try:
            n = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(n) else n


def _bounded_int(value: Any, default: int, low: int, high: int) -> int:
    n = _to_number(value)
    if n is None:
        return default
    if math.isinf(n):
        return high if n > 0 else low
    # half-up like Math.round
    return max(low, min(high, math.floor(n + 0.5)))


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _optional_text(value: Any, max_len: Optional[int] = None) -> str:
    # falsy values (None, "", 0, False, [], {}) collapse to ""
    text = _to_text(value) if value else ""
    return text[:max_len] if max_len is not None else text


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def normalize_report(parsed: Any) -> NormalizedReport:
    """Coerce an untrusted model answer into the fixed report shape. Never raises."""
    if isinstance(parsed, NormalizedReport):
        parsed = parsed.model_dump()
    if not isinstance(parsed, ParsedReport):
        parsed = ParsedReport.from_json(parsed)

    facets = _as_dict(parsed.facets)
    explanation = _as_dict(parsed.explanation)

    insights: List[str] = []
    if isinstance(parsed.insights, list):
        insights = [_to_text(item) for item in parsed.insights[:MAX_INSIGHTS]]

    return NormalizedReport(
        score=_bounded_int(parsed.score, SCORE_DEFAULT, SCORE_MIN, SCORE_MAX),
        facets={
            name: _bounded_int(facets.get(name), FACET_DEFAULTS[name], FACET_MIN, FACET_MAX)
            for name in FACET_NAMES
        },
        summary=_optional_text(parsed.summary, SUMMARY_MAX_LEN),
        insights=insights,
        oneliner=_optional_text(parsed.oneliner, ONELINER_MAX_LEN),
        explanation={name: _optional_text(explanation.get(name)) for name in FACET_NAMES},
    )
