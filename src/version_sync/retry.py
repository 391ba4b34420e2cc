"""Bounded retry around the request helpers."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from .client import afetch_body, fetch_body
from .exceptions import VersionSyncValidationError
from .request_options import RequestOptions

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3

Fetch = Callable[[str, RequestOptions | None], Any]
AsyncFetch = Callable[[str, RequestOptions | None], Awaitable[Any]]


def _check_attempts(attempts: int) -> int:
    if attempts < 1:
        raise VersionSyncValidationError("attempts must be at least 1")
    return int(attempts)


def request_with_retry(
    url: str,
    *,
    options: RequestOptions | None = None,
    attempts: int = MAX_ATTEMPTS,
    fetch: Fetch = fetch_body,
) -> Any:
    """Fetch ``url`` up to ``attempts`` times, re-raising the last failure.

    There is no delay between attempts and every failure is treated the same
    way, except invalid URLs or options, which are raised immediately.
    """
    attempts = _check_attempts(attempts)
    attempt = 0
    while True:
        try:
            return fetch(url, options)
        except VersionSyncValidationError:
            raise
        except Exception as exc:
            attempt += 1
            if attempt >= attempts:
                raise
            logger.warning("Attempt %d/%d for %s failed: %s", attempt, attempts, url, exc)


async def arequest_with_retry(
    url: str,
    *,
    options: RequestOptions | None = None,
    attempts: int = MAX_ATTEMPTS,
    fetch: AsyncFetch = afetch_body,
) -> Any:
    attempts = _check_attempts(attempts)
    attempt = 0
    while True:
        try:
            return await fetch(url, options)
        except VersionSyncValidationError:
            raise
        except Exception as exc:
            attempt += 1
            if attempt >= attempts:
                raise
            logger.warning("Attempt %d/%d for %s failed: %s", attempt, attempts, url, exc)
