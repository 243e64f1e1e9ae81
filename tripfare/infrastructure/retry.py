"""Retry with exponential backoff for outbound HTTP calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from tripfare.domain.exceptions import TransientRoutingError

T = TypeVar("T")
logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    max_attempts: int = 4
    base_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 30.0
    retryable_exceptions: tuple[type[Exception], ...] = field(
        default_factory=lambda: (TransientRoutingError,)
    )


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    operation_name: str = "operation",
) -> T:
    """Run *operation*, retrying retryable failures with exponential backoff."""
    if config is None:
        config = RetryConfig()

    for attempt in range(config.max_attempts):
        try:
            return await operation()
        except config.retryable_exceptions as e:
            if attempt == config.max_attempts - 1:
                logger.error(
                    "%s failed after %d attempts: %s",
                    operation_name, config.max_attempts, e,
                )
                raise

            delay = min(
                config.base_delay * (config.multiplier**attempt),
                config.max_delay,
            )
            logger.warning(
                "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                operation_name, attempt + 1, config.max_attempts, delay, e,
            )
            await asyncio.sleep(delay)

    raise RuntimeError(f"{operation_name}: max_attempts must be >= 1")
