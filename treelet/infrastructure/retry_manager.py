"""
Retry manager with exponential backoff for transient GitLab API failures.
"""

import asyncio
import random
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Tuple, Type

import httpx

from .error_handler import RETRYABLE_ERRORS
from .logger import logger


@dataclass
class RetryConfig:
    """Retry policy settings."""

    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    backoff_factor: float = 2.0
    retryable_errors: Tuple[Type[Exception], ...] = field(
        default_factory=lambda: RETRYABLE_ERRORS
    )
    retryable_statuses: Tuple[int, ...] = (429, 500, 502, 503, 504)


class RetryManager:
    """
    Runs coroutines again when they fail with transient errors.

    A ``max_retries`` of zero disables retrying: the first failure
    propagates unchanged.
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2.0,
        jitter: bool = True,
        config: Optional[RetryConfig] = None,
    ):
        if config is not None:
            max_retries = config.max_retries
            base_delay = config.initial_delay
            max_delay = config.max_delay
            exponential_base = config.backoff_factor

        if max_retries < 0:
            raise ValueError("max_retries cannot be negative")

        self.config = config or RetryConfig(
            max_retries=max_retries,
            initial_delay=base_delay,
            max_delay=max_delay,
            backoff_factor=exponential_base,
        )
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter

    def calculate_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (1-based)."""

        delay = self.base_delay * (self.exponential_base ** (attempt - 1))
        delay = min(delay, self.max_delay)
        if self.jitter:
            delay = delay * (0.5 + random.random() / 2)
        return delay

    def is_retryable(
        self,
        error: Exception,
        exceptions: Optional[Tuple[Type[Exception], ...]] = None
    ) -> bool:
        """Whether ``error`` is worth another attempt."""

        if isinstance(error, httpx.HTTPStatusError):
            return error.response.status_code in self.config.retryable_statuses
        return isinstance(error, exceptions or self.config.retryable_errors)

    async def execute(
        self,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
        exceptions: Optional[Tuple[Type[Exception], ...]] = None,
        **kwargs: Any
    ) -> Any:
        """
        Await ``func(*args, **kwargs)``, retrying on retryable errors.

        Args:
            func: Coroutine function to call
            exceptions: Exception types to retry on, overriding the config

        Returns:
            Whatever ``func`` returns

        Raises:
            The last error once retries are exhausted, or any
            non-retryable error immediately
        """

        attempt = 0
        while True:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                if attempt >= self.max_retries or not self.is_retryable(e, exceptions):
                    raise
                attempt += 1
                delay = self.calculate_delay(attempt)
                logger.debug(
                    f"Attempt {attempt}/{self.max_retries} failed: {e}; "
                    f"retrying in {delay:.2f}s"
                )
                await asyncio.sleep(delay)


__all__ = ["RetryConfig", "RetryManager"]
