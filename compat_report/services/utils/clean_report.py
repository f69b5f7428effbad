import json
import logging
import re
from typing import Any

from compat_report.core.exceptions import ParseError

logger = logging.getLogger(__name__)

_OPENING_FENCE = re.compile(r"^```[a-z]*\n?", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"```$")
_BRACE_BLOCK = re.compile(r"\{[\s\S]*\}\Z")


def sanitize_json(text: str) -> str:
    """
    Strip code fences around model output and drop anything after the last '}'.
    Does not guarantee valid JSON.
    """
    t = (text or "").strip()
    if t.startswith("```"):
        t = _OPENING_FENCE.sub("", t, count=1)
    if t.endswith("```"):
        t = _CLOSING_FENCE.sub("", t, count=1)
    last_obj = t.rfind("}")
    if last_obj != -1:
        t = t[: last_obj + 1]
    return t


def parse_report_json(text: str) -> Any:
    """Strict parse first, then retry on the brace-delimited block ending the text."""
    try:
        return json.loads(text)
    except ValueError:
        pass

    # Greedy from the first '{' to the final '}'; several JSON-like blocks come back as one
    match = _BRACE_BLOCK.search(text)
    if not match:
        logger.warning(f"⚠️ No JSON object found in model output: {text[:200]!r}")
        raise ParseError()
    try:
        return json.loads(match.group(0))
    except ValueError as e:
        logger.warning(f"⚠️ Fallback JSON parse failed: {e}")
        raise ParseError() from e
