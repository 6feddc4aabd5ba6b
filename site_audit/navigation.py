import logging

from .errors import NavigationExhaustedError

logger = logging.getLogger(__name__)


def navigate_with_retries(page, url: str, max_retries: int = 3, timeout_ms: int = 60000) -> None:
    """Load ``url`` in ``page``, trying up to ``max_retries`` times.

    Raises NavigationExhaustedError (chained to the last failure) once every
    attempt failed.
    """
    if max_retries < 1:
        raise ValueError(f"max_retries must be >= 1, got {max_retries}")

    last_error = None
    for attempt in range(1, max_retries + 1):
        try:
            page.goto(url, wait_until="networkidle", timeout=timeout_ms)
            return
        except Exception as e:
            last_error = e
            logger.error("Failed to navigate to %s (attempt %d/%d): %s", url, attempt, max_retries, e)
    raise NavigationExhaustedError(url, max_retries) from last_error
