"""Process-wide fallback configuration.

Built once by the host (typically at startup) and passed to every Client.
Immutable, so concurrent calls can share it without locking. Per-call
arguments override Client instance values, which override these.
"""

from __future__ import annotations

from dataclasses import dataclass

from rest_client.interceptors import Interceptor
from rest_client.reporting import Reporter
from rest_client.schemas.models import ProxyConfig
from rest_client.schemas.settings import ClientSettings

__all__ = [
    'ClientDefaults',
]


@dataclass(frozen=True, slots=True)
class ClientDefaults:
    interceptor: Interceptor | None = None
    proxy: ProxyConfig | None = None
    reporter: Reporter | None = None
    with_credentials: bool = False

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        *,
        interceptor: Interceptor | None = None,
        reporter: Reporter | None = None,
    ) -> ClientDefaults:
        """Defaults from a settings file; code-only collaborators passed in."""
        return cls(
            interceptor=interceptor,
            proxy=settings.proxy,
            reporter=reporter,
            with_credentials=settings.with_credentials,
        )
