"""Tests for interceptor resolution and best-effort reporting."""

from __future__ import annotations

import asyncio
import logging

import pytest

from rest_client import Client, Interceptor, LoggingReporter, Request, Response
from rest_client.interceptors import InterceptorChain
from rest_client.reporting import ReporterSink

from tests.rest_client import fakes


class _Tagging(Interceptor):
    def __init__(self, tag: str) -> None:
        self.tag = tag

    async def modify_request(self, client: Client, request: Request) -> Request:
        return request.model_copy(update={'headers': {**request.headers, 'x-tag': self.tag}})


class _ReturnsNone(Interceptor):
    async def modify_request(self, client: Client, request: Request) -> Request:
        return None  # type: ignore[return-value]

    async def modify_response(self, client: Client, request: Request, response: Response) -> Response:
        return None  # type: ignore[return-value]


class TestInterceptorChain:
    def test_per_call_wins(self) -> None:
        per_call, instance, default = _Tagging('call'), _Tagging('instance'), _Tagging('default')
        assert InterceptorChain.resolve(per_call, instance, default).interceptor is per_call

    def test_falls_back_in_order(self) -> None:
        instance, default = _Tagging('instance'), _Tagging('default')
        assert InterceptorChain.resolve(None, instance, default).interceptor is instance
        assert InterceptorChain.resolve(None, None, default).interceptor is default
        assert InterceptorChain.resolve(None, None, None).interceptor is None

    @pytest.mark.asyncio
    async def test_absent_interceptor_is_identity(self) -> None:
        chain = InterceptorChain(None)
        client = Client()
        request = Request(url='https://x')
        response = Response(status_code=200)
        assert await chain.modify_request(client, request) is request
        assert await chain.intercept_request(client, request) is None
        assert await chain.modify_response(client, request, response) is response

    @pytest.mark.asyncio
    async def test_base_interceptor_is_identity(self) -> None:
        chain = InterceptorChain(Interceptor())
        client = Client()
        request = Request(url='https://x')
        response = Response(status_code=200)
        assert await chain.modify_request(client, request) is request
        assert await chain.intercept_request(client, request) is None
        assert await chain.modify_response(client, request, response) is response

    @pytest.mark.asyncio
    async def test_none_result_keeps_value(self) -> None:
        chain = InterceptorChain(_ReturnsNone())
        client = Client()
        request = Request(url='https://x')
        response = Response(status_code=200)
        assert await chain.modify_request(client, request) is request
        assert await chain.modify_response(client, request, response) is response


class TestReporterSink:
    def test_resolution_order(self) -> None:
        per_call, instance, default = fakes.RecordingReporter(), fakes.RecordingReporter(), fakes.RecordingReporter()
        assert ReporterSink.resolve(per_call, instance, default).reporter is per_call
        assert ReporterSink.resolve(None, instance, default).reporter is instance
        assert ReporterSink.resolve(None, None, default).reporter is default
        assert ReporterSink.resolve(None, None, None).reporter is None

    @pytest.mark.asyncio
    async def test_forwards_fields(self) -> None:
        reporter = fakes.RecordingReporter()
        await ReporterSink(reporter).response(body=b'', headers={}, request_id='r', status_code=200)
        assert reporter.events == [('response', {'body': b'', 'headers': {}, 'request_id': 'r', 'status_code': 200})]

    @pytest.mark.asyncio
    async def test_reporter_errors_are_swallowed(self, caplog: pytest.LogCaptureFixture) -> None:
        sink = ReporterSink(fakes.ExplodingReporter())
        with caplog.at_level(logging.WARNING, logger='rest_client.reporting'):
            await sink.request(body=None, headers={}, method='GET', request_id='r', url='https://x')
            await sink.success(
                bytes_received=0,
                bytes_sent=0,
                end_time=2,
                method='GET',
                request_id='r',
                start_time=1,
                status_code=200,
                url='https://x',
            )
        assert 'Reporter request hook failed: RuntimeError: request hook broke' in caplog.text
        assert 'Reporter success hook failed' in caplog.text

    @pytest.mark.asyncio
    async def test_cancellation_passes_through(self) -> None:
        class _Cancelling(fakes.RecordingReporter):
            async def request(self, **fields: object) -> None:
                raise asyncio.CancelledError

        with pytest.raises(asyncio.CancelledError):
            await ReporterSink(_Cancelling()).request(body=None, headers={}, method='GET', request_id='r', url='u')

    @pytest.mark.asyncio
    async def test_no_reporter_is_noop(self) -> None:
        await ReporterSink(None).failure(
            end_time=2, exception='x', method='GET', request_id='r', stack='', start_time=1, url='u'
        )


class TestLoggingReporter:
    @pytest.mark.asyncio
    async def test_logs_lifecycle(self, caplog: pytest.LogCaptureFixture) -> None:
        reporter = LoggingReporter(logging.getLogger('test.telemetry'))
        with caplog.at_level(logging.INFO, logger='test.telemetry'):
            await reporter.request(body=None, headers={}, method='GET', request_id='r1', url='https://x')
            await reporter.response(body=b'{}', headers={}, request_id='r1', status_code=200)
            await reporter.success(
                bytes_received=2,
                bytes_sent=0,
                end_time=150,
                method='GET',
                request_id='r1',
                start_time=100,
                status_code=200,
                url='https://x',
            )
            await reporter.failure(
                end_time=300, exception='boom', method='GET', request_id='r1', stack='', start_time=100, url='https://x'
            )
        assert '[r1] --> GET https://x' in caplog.text
        assert '[r1] <-- 200' in caplog.text
        assert '[r1] GET https://x -> 200 in 50ms (sent=0B, received=2B)' in caplog.text
        assert '[r1] GET https://x failed after 200ms: boom' in caplog.text
