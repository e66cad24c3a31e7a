"""
Exponential backoff for rate-limited Gemini calls
"""
import asyncio
import logging
import re
from typing import Awaitable, Callable, TypeVar

from core.exceptions import HomeyError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMIT_STATUSES = (429, "429", "RESOURCE_EXHAUSTED")
RATE_LIMIT_MESSAGE = re.compile(r"\b429\b|RESOURCE_EXHAUSTED|\bquota\b", re.IGNORECASE)


def is_rate_limit_error(error: BaseException) -> bool:
    """True when the error signals an exceeded request quota (HTTP 429 / RESOURCE_EXHAUSTED)"""
    # Our own errors quote model output, which may contain any number
    if isinstance(error, HomeyError):
        return False

    # google.genai.errors.APIError carries the HTTP code in .code and the gRPC status in .status
    for attr in ("status", "code", "status_code"):
        if getattr(error, attr, None) in RATE_LIMIT_STATUSES:
            return True

    return bool(RATE_LIMIT_MESSAGE.search(str(error)))


async def retry_operation(
    operation: Callable[[], Awaitable[T]],
    retries: int = 3,
    base_delay: float = 2.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await operation(), retrying only on rate-limit errors.

    Waits base_delay before the first retry and doubles the wait after each one,
    so the n-th retry is preceded by base_delay * 2 ** (n - 1) seconds. Any other
    error, or a rate-limit error once retries are used up, propagates unchanged.
    """
    retries_left = retries
    delay = base_delay

    while True:
        try:
            return await operation()
        except Exception as e:
            if retries_left <= 0 or not is_rate_limit_error(e):
                raise

            logger.warning(f"Rate limit hit (429). Retrying in {delay:.1f}s... ({retries_left} retries left)")
            await sleep(delay)
            retries_left -= 1
            delay *= 2
