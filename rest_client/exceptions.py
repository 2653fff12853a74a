"""Exception hierarchy for the REST execution engine.

    RestClientError (base)
    ├── ConfigurationError      ← caller bug (timeout/retry minimums), never retried
    ├── RestException           ← failing status or wrapped transport error
    └── UnknownExecutionError   ← retry loop exited without a terminal outcome

Transport failures during a send are translated into RestException with the
original error chained as ``__cause__``. Failures outside the send itself
(authorizer, request construction) propagate untranslated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rest_client.schemas.models import Response

__all__ = [
    'ConfigurationError',
    'RestClientError',
    'RestException',
    'UnknownExecutionError',
]


class RestClientError(Exception):
    """Base class for all errors raised by rest_client."""


class ConfigurationError(RestClientError, ValueError):
    """Invalid call or client configuration. Detected before any I/O."""


class RestException(RestClientError):
    """Error value carrying a message and the Response that triggered it.

    When no response was received (transport failure), ``response`` is a
    synthetic Response with status -1 and no body.

    Args:
        message: Human-readable description.
        response: Response that triggered the error.
        from_status: True when raised for a failing status code rather than
            a transport failure.
    """

    def __init__(self, message: str, response: Response, *, from_status: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.response = response
        self.from_status = from_status

    def __str__(self) -> str:
        return f'{self.message} (status: {self.response.status_code})'


class UnknownExecutionError(RestClientError):
    """The retry loop finished without producing a response or an error."""
