"""HTTP transport construction.

One httpx.AsyncClient per attempt. The orchestrator enters it with
``async with`` so it is closed on every exit path; no connection state is
shared between attempts or calls.

HTTPX Exception Hierarchy
=========================

What a send can raise, all of which the orchestrator treats as a transport
failure of the attempt (wrapped into RestException, status -1, retried)::

    httpx.HTTPError (base)
    ├── httpx.RequestError
    │   ├── httpx.TransportError
    │   │   ├── httpx.TimeoutException    (Connect/Read/Write/PoolTimeout)
    │   │   ├── httpx.NetworkError        (Connect/Read/Write/CloseError)
    │   │   ├── httpx.ProtocolError       (Local/RemoteProtocolError)
    │   │   ├── ProxyError
    │   │   └── UnsupportedProtocol
    │   ├── DecodingError
    │   └── TooManyRedirects
    └── httpx.InvalidURL

The per-attempt deadline is enforced with asyncio.timeout around the send
and body read, so it surfaces as the builtin TimeoutError.
"""

from __future__ import annotations

import logging

import httpx

from rest_client.schemas.models import ProxyConfig

__all__ = [
    'HttpxTransportFactory',
]

logger = logging.getLogger(__name__)


class HttpxTransportFactory:
    """Default TransportFactory.

    - ``proxy`` routes all traffic through the proxy; ``ignore_bad_certificate``
      turns off TLS verification.
    - ``with_credentials`` enables ambient credentials (``trust_env``): .netrc
      auth and proxy settings from the environment.

    Args:
        transport: Optional httpx transport for every client (tests pass
            httpx.MockTransport here).
        follow_redirects: Passed through to httpx.
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        follow_redirects: bool = True,
    ) -> None:
        self._transport = transport
        self._follow_redirects = follow_redirects

    def create(self, proxy: ProxyConfig | None, with_credentials: bool) -> httpx.AsyncClient:
        verify = True
        httpx_proxy: httpx.Proxy | None = None
        if proxy is not None:
            httpx_proxy = httpx.Proxy(proxy.url, auth=proxy.auth)
            verify = not proxy.ignore_bad_certificate
            logger.debug(f'Using proxy {proxy.host}:{proxy.port}')

        if self._transport is not None:
            # An explicit transport replaces proxy routing
            return httpx.AsyncClient(
                transport=self._transport,
                trust_env=with_credentials,
                follow_redirects=self._follow_redirects,
            )

        return httpx.AsyncClient(
            proxy=httpx_proxy,
            verify=verify,
            trust_env=with_credentials,
            follow_redirects=self._follow_redirects,
        )
