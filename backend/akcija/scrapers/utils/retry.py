"""Retry policy for page fetches.

Every fetch gets three attempts with exponential backoff. Retries are
logged with the store and URL of the fetcher method being retried.
"""

from typing import Tuple, Type

import httpx
import structlog
from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger(__name__)

FETCH_ATTEMPTS = 3

HTTP_RETRY_ERRORS: Tuple[Type[BaseException], ...] = (
    httpx.HTTPStatusError,
    httpx.ConnectError,
    httpx.TimeoutException,
    httpx.RemoteProtocolError,
)
BROWSER_RETRY_ERRORS: Tuple[Type[BaseException], ...] = (PlaywrightError, PlaywrightTimeoutError)


def _log_retry(retry_state: RetryCallState) -> None:
    # Decorated fetcher methods are called as (self, ..., url)
    fetcher = retry_state.args[0] if retry_state.args else None
    url = next((a for a in reversed(retry_state.args) if isinstance(a, str)), None)
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "fetch_retry",
        store=getattr(fetcher, "store", None),
        url=url,
        attempt=retry_state.attempt_number,
        sleep_seconds=round(retry_state.next_action.sleep, 1) if retry_state.next_action else None,
        error=str(error) if error else None,
    )


def fetch_retry(*errors: Type[BaseException]):
    """Retry decorator for a coroutine that fetches one URL.

    The last error is re-raised once attempts run out so callers can wrap
    it in a ScraperError.
    """
    return retry(
        stop=stop_after_attempt(FETCH_ATTEMPTS),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception_type(errors),
        before_sleep=_log_retry,
        reraise=True,
    )


http_retry = fetch_retry(*HTTP_RETRY_ERRORS)
playwright_retry = fetch_retry(*BROWSER_RETRY_ERRORS)
