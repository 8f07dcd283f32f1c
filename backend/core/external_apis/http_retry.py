"""
HTTP POST with retries and exponential backoff for external services.
"""
import logging
import time
from typing import Any, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 2
DEFAULT_INITIAL_BACKOFF = 1.0


def post_with_retries(
    url: str,
    json_body: Optional[Any] = None,
    timeout: int = 30,
    max_retries: int = DEFAULT_MAX_RETRIES,
    initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
) -> Tuple[Optional[requests.Response], Optional[str]]:
    """
    POST with retries and exponential backoff on timeout/connection errors and 5xx responses.
    Returns (response, None) on success, (None, error_message) on failure.
    4xx responses are returned as-is without retrying.
    """
    last_error: Optional[str] = None
    attempts = max(1, max_retries)
    for attempt in range(attempts):
        try:
            resp = requests.post(url, json=json_body, timeout=timeout)
            if resp.status_code < 500:
                return (resp, None)
            last_error = f"HTTP {resp.status_code}"
        except requests.Timeout as e:
            last_error = f"Read timed out: {e}"
        except requests.RequestException as e:
            last_error = f"{type(e).__name__}: {e}"
        logger.warning(
            "EXTERNAL_API retry attempt=%s/%s url=%s error=%s",
            attempt + 1, attempts, url[:60], last_error,
        )
        if attempt < attempts - 1:
            delay = initial_backoff * (2 ** attempt)
            logger.info("EXTERNAL_API backoff %.1fs before retry", delay)
            time.sleep(delay)
    return (None, last_error)
