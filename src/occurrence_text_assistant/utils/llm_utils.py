"""Utility functions for LLM interactions, including retry logic."""

import asyncio
from collections.abc import Awaitable, Callable

import aiohttp
from loguru import logger
from tenacity import (AsyncRetrying, RetryError, retry_if_exception_type,
                      stop_after_attempt, wait_exponential)

from occurrence_text_assistant.config import Settings

# Transient network/API issues worth another attempt when retries are enabled.
# aiohttp.ClientResponseError is raised by response.raise_for_status().
RETRY_EXCEPTIONS: tuple[type[BaseException], ...] = (
    asyncio.TimeoutError,
    aiohttp.ClientError,
)

# The request function is expected to:
# 1. Raise one of RETRY_EXCEPTIONS if a retryable error occurs.
# 2. Return (None, error_message) for a non-retryable error it handled.
# 3. Return (content, None) on success.
ApiRequestCallable = Callable[[], Awaitable[tuple[str | None, str | None]]]


def describe_api_error(exc: BaseException) -> str:
    """Format a transport exception as the error string returned to callers."""
    if isinstance(exc, asyncio.TimeoutError):
        return "API call timed out"
    if isinstance(exc, aiohttp.ClientResponseError):
        return f"API error: {exc.status} - {exc.message}"
    if isinstance(exc, aiohttp.ClientError):
        return f"API client error: {exc}"
    return f"Unexpected API error: {exc!s}"


async def call_llm_api_with_retry(
    api_request_func: ApiRequestCallable,
    settings: Settings,
    provider_name: str,
) -> tuple[str | None, str | None]:
    """Execute an LLM API request function with the configured retry policy.

    Never raises; every failure comes back as ``(None, error_message)``.
    """
    if not settings.llm_retry_enabled:
        logger.debug(f"{provider_name}: Retries disabled. Making single API call attempt.")
        try:
            return await api_request_func()
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(f"{provider_name} API call failed (no retry): {e!r}")
            return None, describe_api_error(e)

    retryer = AsyncRetrying(
        stop=stop_after_attempt(settings.llm_retry_attempts),
        wait=wait_exponential(
            min=settings.llm_retry_wait_min_seconds,
            max=settings.llm_retry_wait_max_seconds,
        ),
        retry=retry_if_exception_type(RETRY_EXCEPTIONS),
        reraise=False,
        before_sleep=lambda rs: logger.warning(
            f"{provider_name}: Retrying API call (attempt {rs.attempt_number + 1}) "
            f"after error: {rs.outcome.exception() if rs.outcome else 'Unknown error'}",
        ),
    )

    try:
        async for attempt in retryer:
            with attempt:
                return await api_request_func()

    except RetryError as e:
        last_exception = e.last_attempt.exception()
        logger.warning(
            f"{provider_name} API call failed after {settings.llm_retry_attempts} "
            f"attempts: {last_exception!r}",
        )
        if last_exception is None:
            return None, f"API call failed after {settings.llm_retry_attempts} retries"
        return None, f"{describe_api_error(last_exception)} (after retries)"

    except Exception as e:  # pylint: disable=broad-except
        # Non-retryable exception raised by the request function itself
        logger.exception(
            f"{provider_name}: Unexpected error propagated from API call processing: {e}"
        )
        return None, describe_api_error(e)

    return None, "Unreachable code path"  # pragma: no cover
