"""Attempt budget and backoff schedule, wired into tenacity.

Private module - import from _retry package.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import tenacity

from rest_client._retry.strategies import DelayStrategy, linear
from rest_client.exceptions import ConfigurationError

if TYPE_CHECKING:
    from rest_client.protocols import Emitter

__all__ = [
    'MIN_RETRY_DELAY_SECONDS',
    'RetryPolicy',
]

logger = logging.getLogger(__name__)

MIN_RETRY_DELAY_SECONDS = 1.0


@dataclass(frozen=True)
class RetryPolicy:
    """How many attempts a call gets and how long to wait between them.

    ``retry_count`` counts retries, so a call makes at most
    ``retry_count + 1`` attempts. The first wait is ``initial_delay``; each
    later wait is ``strategy(current=<previous wait>, initial=initial_delay)``.

    Raises:
        ConfigurationError: Negative retry_count, or retries requested with
            an initial delay under one second.
    """

    retry_count: int = 0
    initial_delay: float = 1.0
    strategy: DelayStrategy = linear

    def __post_init__(self) -> None:
        if self.retry_count < 0:
            raise ConfigurationError(f'retry_count must not be negative, got {self.retry_count}')
        if self.retry_count > 0 and self.initial_delay < MIN_RETRY_DELAY_SECONDS:
            raise ConfigurationError(
                f'retry_delay must be at least {MIN_RETRY_DELAY_SECONDS}s when retrying, got {self.initial_delay}s'
            )

    @property
    def max_attempts(self) -> int:
        return self.retry_count + 1

    def should_continue(self, attempts: int) -> bool:
        """Whether another attempt is allowed after ``attempts`` completed ones."""
        return attempts == 0 or attempts <= self.retry_count

    def next_delay(self, current: float) -> float:
        return self.strategy(current=current, initial=self.initial_delay)

    def delay_after(self, attempt_number: int) -> float:
        """Wait that follows the given (1-based) failed attempt."""
        delay = self.initial_delay
        for _ in range(attempt_number - 1):
            delay = self.next_delay(delay)
        return delay

    # -- tenacity wiring --

    def stop(self, emitter: Emitter | None = None) -> tenacity.stop.stop_base:
        """Stop when the attempt budget is spent or the emitter is closed."""
        return _StopWhenExhausted(self) | _StopWhenClosed(emitter)

    def wait(self) -> tenacity.wait.wait_base:
        return _StrategyWait(self)

    def log_retry(self, retry_state: tenacity.RetryCallState) -> None:
        """Log a failed attempt before sleeping (tenacity before_sleep hook)."""
        outcome = retry_state.outcome.result() if retry_state.outcome else None
        error = getattr(outcome, 'error', None)
        wait_ms = int((retry_state.upcoming_sleep or 0) * 1000)
        logger.error(
            f'[RETRY] Attempt failed: ({retry_state.attempt_number} of {self.retry_count}) '
            f'waiting {wait_ms}ms: {type(error).__name__}: {error}'
        )


class _StopWhenExhausted(tenacity.stop.stop_base):
    def __init__(self, policy: RetryPolicy) -> None:
        self._policy = policy

    def __call__(self, retry_state: tenacity.RetryCallState) -> bool:
        return not self._policy.should_continue(retry_state.attempt_number)


class _StopWhenClosed(tenacity.stop.stop_base):
    """Cancellation check before the retry wait."""

    def __init__(self, emitter: Emitter | None) -> None:
        self._emitter = emitter

    def __call__(self, retry_state: tenacity.RetryCallState) -> bool:
        if self._emitter is not None and self._emitter.is_closed:
            logger.info('Emitter is closed; cancelling')
            return True
        return False


class _StrategyWait(tenacity.wait.wait_base):
    def __init__(self, policy: RetryPolicy) -> None:
        self._policy = policy

    def __call__(self, retry_state: tenacity.RetryCallState) -> float:
        return self._policy.delay_after(retry_state.attempt_number)
