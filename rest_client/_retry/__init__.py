"""Retry helpers for the execution loop.

Private subpackage - the public names are re-exported by rest_client.

Retry Policy
------------
- **FATAL** = status in FATAL_STATUS_CODES, or no status at all. Never retried.
- **RETRY** = any other failing status, and every transport failure
  (timeouts, connection errors, invalid HTTP from the server). Retried until
  ``retry_count`` is spent or the caller's emitter is closed.

Backoff
-------
Delays come from a DelayStrategy folded over the initial delay. ``linear`` is
the default.
"""

from __future__ import annotations

from rest_client._retry.fatal import FATAL_STATUS_CODES, is_fatal_status
from rest_client._retry.policy import MIN_RETRY_DELAY_SECONDS, RetryPolicy
from rest_client._retry.strategies import DelayStrategies, DelayStrategy, constant, exponential, linear

__all__ = [
    'FATAL_STATUS_CODES',
    'MIN_RETRY_DELAY_SECONDS',
    'DelayStrategies',
    'DelayStrategy',
    'RetryPolicy',
    'constant',
    'exponential',
    'is_fatal_status',
    'linear',
]
