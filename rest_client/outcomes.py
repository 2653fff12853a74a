"""Tagged result of a single attempt.

Each attempt resolves to exactly one of these instead of raising. The retry
loop retries only Retryable; Success and Fatal end the call.
"""

from __future__ import annotations

from dataclasses import dataclass

from rest_client.schemas.models import Response

__all__ = [
    'AttemptOutcome',
    'Fatal',
    'Retryable',
    'Success',
    'is_retryable',
]


@dataclass(frozen=True, slots=True)
class Success:
    response: Response


@dataclass(frozen=True, slots=True)
class Retryable:
    """Failure worth another attempt if budget and cancellation allow."""

    error: Exception


@dataclass(frozen=True, slots=True)
class Fatal:
    """Failure that ends the call: fatal status, or retries cancelled."""

    error: Exception


type AttemptOutcome = Success | Retryable | Fatal


def is_retryable(outcome: object) -> bool:
    return isinstance(outcome, Retryable)
