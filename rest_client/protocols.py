"""Protocol definitions for collaborators supplied by the host.

Any object with compatible methods satisfies these; no subclassing required.
Interceptor and Reporter are base classes instead (see interceptors.py and
reporting.py) because every hook has a sensible no-op default.
"""

from __future__ import annotations

from typing import Protocol

import httpx

from rest_client.schemas.models import ProxyConfig

__all__ = [
    'Authorizer',
    'CallClock',
    'Emitter',
    'TransportFactory',
]


class Authorizer(Protocol):
    """Adds credentials to an outgoing transport-level request."""

    async def secure(self, request: httpx.Request) -> None:
        """Mutate ``request`` in place (e.g. set the Authorization header).

        Called once per attempt, right before the send. Errors propagate as a
        send-stage failure of that attempt.
        """
        ...


class Emitter(Protocol):
    """Caller-owned channel. Closing it cancels any remaining retries."""

    @property
    def is_closed(self) -> bool: ...


class TransportFactory(Protocol):
    """Creates the HTTP client used by a single attempt.

    The orchestrator owns the returned client for the attempt and closes it
    on every exit path.
    """

    def create(self, proxy: ProxyConfig | None, with_credentials: bool) -> httpx.AsyncClient: ...


class CallClock(Protocol):
    """Source of call identifiers and wall-clock timestamps for telemetry."""

    def new_request_id(self) -> str: ...

    def now_ms(self) -> int: ...
