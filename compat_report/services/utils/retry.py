import logging
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_with_retry(fn: Callable[[], T], label: str = "Gemini call") -> T:
    """Run `fn`; if it raises, run it exactly once more, back-to-back.

    Each call gets its own timeout window because `fn` builds a fresh request.
    The second failure propagates to the caller.
    """
    try:
        return fn()
    except Exception as e:
        logger.warning(f"⚠️ {label} failed ({e}), retrying once")
    return fn()
