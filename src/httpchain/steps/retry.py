"""Retry error step.

The retry step re-runs the whole pipeline, request steps included, on a copy
of the request whose private store records how many retries have happened.
The nested run's result is returned with the request halted so the outer run
finishes with it as-is instead of sending it through its own response or
error steps a second time.
"""

import logging

from httpchain.config import RetryConfig
from httpchain.constants import PrivateKey
from httpchain.exceptions import HTTPStatusError
from httpchain.models import ErrorStep, Request, Response
from httpchain.pipeline import run
from httpchain.request import get_header, get_private, halt, put_private

logger = logging.getLogger(__name__)


def is_retryable(exception: Exception) -> bool:
    return bool(getattr(exception, "retryable", False))


def _retry_after(exception: Exception) -> float | None:
    if not isinstance(exception, HTTPStatusError):
        return None
    values = get_header(exception.response, "retry-after")
    if not values:
        return None
    try:
        return max(float(values[0]), 0.0)
    except ValueError:
        # HTTP-date form is not supported, fall back to backoff
        return None


def retry_delay(config: RetryConfig, attempt: int, exception: Exception) -> float:
    """Seconds to wait before retry number ``attempt + 1``, capped at max_delay."""
    delay = _retry_after(exception)
    if delay is None:
        delay = config.backoff(attempt)
    return min(max(delay, 0.0), config.max_delay)


def retry_step(config: RetryConfig | None = None) -> ErrorStep:
    """Build a retry error step.

    Args:
        config: Retry policy, defaults to ``RetryConfig()``

    Returns:
        Error step that either returns the exception unchanged (not retryable,
        method excluded, or attempts used up) or returns the halted request
        with whatever the retried run produced. The halted flag stays set on
        the request ``run`` returns to the caller.
    """
    config = config or RetryConfig()
    predicate = config.retryable or is_retryable

    def retry(request: Request, exception: Exception) -> tuple[Request, Response | Exception]:
        if config.methods is not None and request.method not in config.methods:
            return request, exception
        if not predicate(exception):
            return request, exception

        attempt: int = get_private(request, PrivateKey.RETRY_COUNT, 0)
        if attempt + 1 >= config.max_attempts:
            logger.info(f"Giving up on {request.method} {request.url} after {attempt + 1} attempt(s): {exception}")
            return request, exception

        delay = retry_delay(config, attempt, exception)
        remaining = config.max_attempts - attempt - 1
        logger.info(f"Retrying {request.method} {request.url} in {delay}s, {remaining} attempt(s) left: {exception}")
        config.sleep(delay)

        retried_request, result = run(put_private(request, PrivateKey.RETRY_COUNT, attempt + 1))
        return halt(retried_request, result)

    return retry
