"""Request/response interceptors.

An Interceptor hooks three points of a call:

1. modify_request   - once, before the first attempt. The result is the
                      request for every attempt.
2. intercept_request - once per attempt, before sending. Returning a
                      Response skips the network for that attempt.
3. modify_response  - once per attempt, after the response is assembled.
                      The result is what gets classified and returned.

Subclass Interceptor and override only the hooks you need. A hook that
returns None leaves the value unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_client.schemas.models import Request, Response

if TYPE_CHECKING:
    from rest_client.client import Client

__all__ = [
    'Interceptor',
    'InterceptorChain',
]


class Interceptor:
    """Base interceptor. Every hook defaults to the identity."""

    async def modify_request(self, client: Client, request: Request) -> Request:
        return request

    async def intercept_request(self, client: Client, request: Request) -> Response | None:
        return None

    async def modify_response(self, client: Client, request: Request, response: Response) -> Response:
        return response


class InterceptorChain:
    """The interceptor in effect for one call, or none."""

    def __init__(self, interceptor: Interceptor | None) -> None:
        self._interceptor = interceptor

    @classmethod
    def resolve(cls, *candidates: Interceptor | None) -> InterceptorChain:
        """Use the first non-None candidate (per-call, instance, process default)."""
        return cls(next((c for c in candidates if c is not None), None))

    @property
    def interceptor(self) -> Interceptor | None:
        return self._interceptor

    async def modify_request(self, client: Client, request: Request) -> Request:
        if self._interceptor is None:
            return request
        modified = await self._interceptor.modify_request(client, request)
        return request if modified is None else modified

    async def intercept_request(self, client: Client, request: Request) -> Response | None:
        if self._interceptor is None:
            return None
        return await self._interceptor.intercept_request(client, request)

    async def modify_response(self, client: Client, request: Request, response: Response) -> Response:
        if self._interceptor is None:
            return response
        modified = await self._interceptor.modify_response(client, request, response)
        return response if modified is None else modified
