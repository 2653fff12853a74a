"""Backoff delay strategies.

Private module - import from _retry package.

A strategy maps the delay just waited (``current``) and the configured first
delay (``initial``) to the next delay, in seconds. Strategies must be pure:
RetryPolicy recomputes the delay for attempt N by folding the strategy from
the initial delay.
"""

from __future__ import annotations

from typing import Protocol

__all__ = [
    'DelayStrategies',
    'DelayStrategy',
    'constant',
    'exponential',
    'linear',
]


class DelayStrategy(Protocol):
    def __call__(self, *, current: float, initial: float) -> float: ...


def linear(*, current: float, initial: float) -> float:
    """1s, 2s, 3s, ... for a 1s initial delay."""
    return current + initial


def exponential(*, current: float, initial: float) -> float:
    """1s, 2s, 4s, ... for a 1s initial delay."""
    return current * 2


def constant(*, current: float, initial: float) -> float:
    return initial


class DelayStrategies:
    """Named built-in strategies."""

    linear = staticmethod(linear)
    exponential = staticmethod(exponential)
    constant = staticmethod(constant)
