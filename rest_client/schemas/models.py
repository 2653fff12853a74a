"""Request, response and proxy value types.

All models are frozen; a Request or Response handed across an interceptor,
reporter or caller boundary is never mutated afterwards. Interceptors that
need a variant build one with ``model_copy(update=...)``.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Any

import pydantic

__all__ = [
    'ProxyConfig',
    'Request',
    'RequestMethod',
    'Response',
    'StrictModel',
]

DEFAULT_ACCEPT = 'application/json'
DEFAULT_CONTENT_TYPE = 'application/json; charset=utf-8'


class StrictModel(pydantic.BaseModel):
    """Base model: unknown fields rejected, no coercion, immutable."""

    model_config = pydantic.ConfigDict(
        extra='forbid',
        strict=True,
        frozen=True,
    )


class RequestMethod(enum.StrEnum):
    GET = 'GET'
    POST = 'POST'
    PUT = 'PUT'
    PATCH = 'PATCH'
    DELETE = 'DELETE'
    HEAD = 'HEAD'
    OPTIONS = 'OPTIONS'


class Request(StrictModel):
    """Outgoing REST request description."""

    url: str
    method: RequestMethod = RequestMethod.GET
    headers: dict[str, str] = pydantic.Field(default_factory=dict)
    body: str | None = None

    def prepare_headers(self) -> dict[str, str]:
        """Merge default headers under the caller's headers.

        Defaults: ``accept: application/json`` always, and a JSON
        ``content-type`` when the request has a body. Caller headers win,
        compared case-insensitively.
        """
        defaults = {'accept': DEFAULT_ACCEPT}
        if self.body:
            defaults['content-type'] = DEFAULT_CONTENT_TYPE

        supplied = {key.lower() for key in self.headers}
        merged = {key: value for key, value in defaults.items() if key not in supplied}
        merged.update(self.headers)
        return merged


class Response(StrictModel):
    """Decoded response.

    ``body`` is text, a JSON value, or raw bytes depending on how it was
    decoded. ``headers`` keys are lower-case. ``status_code`` is -1 for the
    synthetic response of a transport failure.
    """

    body: Any = None
    headers: dict[str, str] = pydantic.Field(default_factory=dict)
    status_code: int | None

    @property
    def content_type(self) -> str | None:
        return self.headers.get('content-type')

    @property
    def ok(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 400

    @classmethod
    def from_headers(cls, headers: Mapping[str, str], *, body: Any, status_code: int | None) -> Response:
        """Build a Response, lower-casing header keys."""
        return cls(
            body=body,
            headers={key.lower(): value for key, value in headers.items()},
            status_code=status_code,
        )


class ProxyConfig(StrictModel):
    """HTTP proxy used by the transport."""

    host: str
    port: int
    username: str | None = None
    password: str | None = None
    ignore_bad_certificate: bool = False

    @property
    def url(self) -> str:
        return f'http://{self.host}:{self.port}'

    @property
    def auth(self) -> tuple[str, str] | None:
        if self.username is None:
            return None
        return self.username, self.password or ''
