"""Concrete Authorizer implementations."""

from __future__ import annotations

import base64
from collections.abc import Awaitable, Callable

import httpx

__all__ = [
    'BasicAuthorizer',
    'BearerAuthorizer',
]


class BasicAuthorizer:
    """HTTP Basic authentication."""

    def __init__(self, username: str, password: str) -> None:
        token = base64.b64encode(f'{username}:{password}'.encode()).decode('ascii')
        self._header = f'Basic {token}'

    async def secure(self, request: httpx.Request) -> None:
        request.headers['authorization'] = self._header


class BearerAuthorizer:
    """Bearer token authentication.

    Accepts a fixed token or an async provider, which is awaited on every
    attempt so a refreshed token is picked up by retries.
    """

    def __init__(self, token: str | Callable[[], Awaitable[str]]) -> None:
        self._token = token

    async def secure(self, request: httpx.Request) -> None:
        token = self._token if isinstance(self._token, str) else await self._token()
        request.headers['authorization'] = f'Bearer {token}'
