"""Capped retries for build-system calls."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_with_retries(
    func: Callable[[], T],
    *,
    attempts: int,
    delay: float,
    retry_on: tuple[type[BaseException], ...],
    description: str,
) -> T:
    """Call ``func`` until it succeeds or ``attempts`` calls have failed.

    Only exceptions listed in ``retry_on`` are retried; the last one is
    re-raised once attempts are exhausted.
    """
    for attempt in range(1, attempts + 1):
        try:
            return func()
        except retry_on as e:
            if attempt >= attempts:
                logger.error(
                    "%s failed after %d attempt(s): %s", description, attempt, e
                )
                raise
            logger.warning(
                "%s failed (attempt %d/%d): %s; retrying in %.1fs",
                description,
                attempt,
                attempts,
                e,
                delay,
            )
            if delay:
                time.sleep(delay)
    raise ValueError("attempts must be at least 1")


__all__ = ["call_with_retries"]
