"""HTTP session with retries and connection pooling.

Pattern: requests.Session with a urllib3 retry adapter plus a tenacity
exponential-backoff wrapper for connection-level failures.

Only reads are retried. Writes (booking updates, cancellations, day-off
justifications) are attempted exactly once: cleanup work is best-effort and
must not be replayed behind the caller's back.
"""
import logging

import requests
from requests.adapters import HTTPAdapter
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential
)
from urllib3.util.retry import Retry

from booking_rules import config

logger = logging.getLogger(__name__)

RETRY_STATUS_CODES = (429, 500, 502, 503, 504)


def is_retryable_error(exc: BaseException) -> bool:
    """Connection errors, timeouts and 429/5xx responses are worth retrying."""
    if isinstance(exc, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return True
    if isinstance(exc, requests.exceptions.HTTPError):
        response = getattr(exc, "response", None)
        if response is None:
            return True
        return response.status_code in RETRY_STATUS_CODES
    return False


def create_http_session(
    max_retries: int = config.HTTP_MAX_RETRIES,
    backoff_factor: float = config.HTTP_BACKOFF_FACTOR,
    timeout: float = config.HTTP_TIMEOUT_SECONDS
) -> requests.Session:
    """
    Create HTTP session with retry and connection pooling.

    Args:
        max_retries: Maximum number of read retries (default: 3)
        backoff_factor: Backoff multiplier; delays are 1x, 2x, 4x this value
                        capped at 8s (0 disables waiting)
        timeout: Request timeout in seconds applied to every call

    Returns:
        Configured requests.Session; get() retries, put()/post()/delete()
        do not. Every method raises for HTTP error statuses.
    """
    session = requests.Session()

    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=list(RETRY_STATUS_CODES),
        allowed_methods=["GET"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(
        max_retries=retry_strategy,
        pool_connections=10,
        pool_maxsize=10,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    original_get = session.get

    def single_attempt(method):
        def call(*args, **kwargs):
            kwargs.setdefault('timeout', timeout)
            response = method(*args, **kwargs)
            response.raise_for_status()
            return response
        return call

    @retry(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=backoff_factor, max=8),
        retry=retry_if_exception(is_retryable_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )
    def get_with_retry(*args, **kwargs):
        return single_attempt(original_get)(*args, **kwargs)

    session.get = get_with_retry
    session.post = single_attempt(session.post)
    session.put = single_attempt(session.put)
    session.delete = single_attempt(session.delete)

    return session
