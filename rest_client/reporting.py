"""Best-effort call telemetry.

A Reporter is notified at fixed points of every attempt:

    request   before a network send
    response  after the raw response arrived
    failure   after the send raised (timeout, connection error, ...)
    success   after classification, when the send itself did not fail

Reporters are observers. ReporterSink runs each notification inside an
error boundary: an Exception from a reporter is logged and dropped, and can
never change the outcome of the call. System exceptions (CancelledError,
KeyboardInterrupt) pass through.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any, Self

__all__ = [
    'LoggingReporter',
    'Reporter',
    'ReporterSink',
]

logger = logging.getLogger(__name__)


class Reporter:
    """Base reporter. Every notification defaults to a no-op."""

    async def request(
        self,
        *,
        body: str | None,
        headers: Mapping[str, str],
        method: str,
        request_id: str,
        url: str,
    ) -> None:
        return None

    async def response(
        self,
        *,
        body: Any,
        headers: Mapping[str, str],
        request_id: str,
        status_code: int | None,
    ) -> None:
        return None

    async def failure(
        self,
        *,
        end_time: int,
        exception: str,
        method: str,
        request_id: str,
        stack: str,
        start_time: int,
        url: str,
    ) -> None:
        return None

    async def success(
        self,
        *,
        bytes_received: int,
        bytes_sent: int,
        end_time: int,
        method: str,
        request_id: str,
        start_time: int,
        status_code: int | None,
        url: str,
    ) -> None:
        return None


class LoggingReporter(Reporter):
    """Writes telemetry to a stdlib logger."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._level = level

    async def request(
        self,
        *,
        body: str | None,
        headers: Mapping[str, str],
        method: str,
        request_id: str,
        url: str,
    ) -> None:
        self._logger.log(self._level, f'[{request_id}] --> {method} {url}')

    async def response(
        self,
        *,
        body: Any,
        headers: Mapping[str, str],
        request_id: str,
        status_code: int | None,
    ) -> None:
        self._logger.log(self._level, f'[{request_id}] <-- {status_code}')

    async def failure(
        self,
        *,
        end_time: int,
        exception: str,
        method: str,
        request_id: str,
        stack: str,
        start_time: int,
        url: str,
    ) -> None:
        self._logger.warning(f'[{request_id}] {method} {url} failed after {end_time - start_time}ms: {exception}')

    async def success(
        self,
        *,
        bytes_received: int,
        bytes_sent: int,
        end_time: int,
        method: str,
        request_id: str,
        start_time: int,
        status_code: int | None,
        url: str,
    ) -> None:
        self._logger.log(
            self._level,
            f'[{request_id}] {method} {url} -> {status_code} in {end_time - start_time}ms '
            f'(sent={bytes_sent}B, received={bytes_received}B)',
        )


class _ReporterBoundary:
    """Async scope boundary: log and suppress reporter Exceptions."""

    def __init__(self, event: str) -> None:
        self._event = event

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        if not isinstance(exc_value, Exception):
            return False  # No exception, or system exception: pass through

        logger.warning(f'Reporter {self._event} hook failed: {type(exc_value).__name__}: {exc_value}')
        return True


class ReporterSink:
    """The reporter in effect for one call, wrapped so it cannot break it."""

    def __init__(self, reporter: Reporter | None) -> None:
        self._reporter = reporter

    @classmethod
    def resolve(cls, *candidates: Reporter | None) -> ReporterSink:
        """Use the first non-None candidate (per-call, instance, process default)."""
        return cls(next((c for c in candidates if c is not None), None))

    @property
    def reporter(self) -> Reporter | None:
        return self._reporter

    async def request(self, **fields: Any) -> None:
        if self._reporter is None:
            return
        async with _ReporterBoundary('request'):
            await self._reporter.request(**fields)

    async def response(self, **fields: Any) -> None:
        if self._reporter is None:
            return
        async with _ReporterBoundary('response'):
            await self._reporter.response(**fields)

    async def failure(self, **fields: Any) -> None:
        if self._reporter is None:
            return
        async with _ReporterBoundary('failure'):
            await self._reporter.failure(**fields)

    async def success(self, **fields: Any) -> None:
        if self._reporter is None:
            return
        async with _ReporterBoundary('success'):
            await self._reporter.success(**fields)
