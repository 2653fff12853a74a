"""Response body decoding.

decode_body() is the single decoding rule; the decoder classes only decide
where it runs. Both produce identical values for identical input, so
switching between them is purely a latency choice.

Decoding rules, first match wins:

    json_response + JSON/absent content type + non-empty body  → parsed JSON
        (parse failure → warning, falls back to text, or bytes if not UTF-8)
    content type text/*                                        → UTF-8 text
    json_response                                              → UTF-8 text, or bytes if not UTF-8
    otherwise                                                  → raw bytes

BackgroundDecoder offloads to an executor (default: the loop's thread pool).
Pass a ProcessPoolExecutor to bypass the GIL for very large JSON payloads;
decode_body is a module-level function so it pickles cleanly.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from concurrent.futures import Executor
from typing import Any, Protocol

__all__ = [
    'BackgroundDecoder',
    'InlineDecoder',
    'ResponseDecoder',
    'decode_body',
    'is_json_content_type',
    'supports_background_decode',
]

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPES = ('application/json', 'text/json')

# Hosts without worker threads (Pyodide, WASI builds)
_SINGLE_THREADED_PLATFORMS = frozenset({'emscripten', 'wasi'})


class ResponseDecoder(Protocol):
    async def decode(self, raw: bytes, content_type: str | None, json_response: bool) -> Any: ...


def is_json_content_type(content_type: str | None) -> bool:
    """Absent content type counts as JSON."""
    return content_type is None or any(kind in content_type for kind in JSON_CONTENT_TYPES)


def decode_body(raw: bytes, content_type: str | None, json_response: bool) -> Any:
    """Decode a raw response payload. Never raises on malformed content."""
    if json_response and is_json_content_type(content_type) and raw:
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning('Expected a JSON body, but did not encounter one')
            return _text_or_bytes(raw)

    if content_type is not None and content_type.startswith('text/'):
        return raw.decode('utf-8', errors='replace')

    if json_response:
        return _text_or_bytes(raw)

    return raw


def _text_or_bytes(raw: bytes) -> str | bytes:
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError:
        return raw


def supports_background_decode() -> bool:
    return sys.platform not in _SINGLE_THREADED_PLATFORMS


class InlineDecoder:
    """Decode on the event loop thread."""

    async def decode(self, raw: bytes, content_type: str | None, json_response: bool) -> Any:
        return decode_body(raw, content_type, json_response)


class BackgroundDecoder:
    """Decode in an executor so large payloads don't stall the event loop.

    Args:
        executor: Executor to run decode_body in. None uses the loop's
            default thread pool.
        min_size: Payloads smaller than this (bytes) decode inline; the
            handoff costs more than it saves.
    """

    def __init__(self, executor: Executor | None = None, *, min_size: int = 0) -> None:
        self._executor = executor
        self._min_size = min_size
        self._enabled = supports_background_decode()
        if not self._enabled:
            logger.debug(f'Background decode unavailable on {sys.platform}; decoding inline')

    async def decode(self, raw: bytes, content_type: str | None, json_response: bool) -> Any:
        if not self._enabled or len(raw) < self._min_size:
            return decode_body(raw, content_type, json_response)

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, decode_body, raw, content_type, json_response)
