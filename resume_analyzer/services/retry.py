import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple, Type

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
)

from resume_analyzer.exceptions import LLMError, LLMNotConfigured, RateLimitError

logger = logging.getLogger(__name__)


@dataclass
class RetryPolicy:
    """
    Exponential backoff for the language-model calls.

    A rate-limited attempt waits for the provider's Retry-After value (or
    rate_limit_wait) instead of the backoff delay; it still counts as one of
    max_attempts.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    multiplier: float = 2.0
    rate_limit_wait: float = 60.0
    retry_on: Tuple[Type[BaseException], ...] = (LLMError,)
    never_retry: Tuple[Type[BaseException], ...] = (LLMNotConfigured,)
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep

    @classmethod
    def from_settings(cls, settings, **overrides) -> "RetryPolicy":
        options = dict(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay,
            multiplier=settings.retry_multiplier,
            rate_limit_wait=settings.rate_limit_wait,
        )
        options.update(overrides)
        return cls(**options)

    def delay_for(self, attempt_number: int, error: Optional[BaseException]) -> float:
        if isinstance(error, RateLimitError):
            if error.retry_after is not None:
                return error.retry_after
            return self.rate_limit_wait
        return self.base_delay * (self.multiplier ** (attempt_number - 1))

    def _wait(self, retry_state: RetryCallState) -> float:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        return self.delay_for(retry_state.attempt_number, error)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            "Attempt %s/%s failed (%s). Retrying in %.1f seconds...",
            retry_state.attempt_number,
            self.max_attempts,
            error,
            delay,
        )

    async def run(self, fn: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self._wait,
            retry=(
                retry_if_exception_type(self.retry_on)
                & retry_if_not_exception_type(self.never_retry)
            ),
            sleep=self.sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )
        return await retrying(fn, *args, **kwargs)
