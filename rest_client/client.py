"""REST call execution.

Client.execute() runs one logical call as a sequence of attempts:

    Init → PreModify → AttemptStart → Send → Decode → PostModify → Classify
                                                                    ├── Success → return
                                                                    ├── Fatal → raise
                                                                    └── Retryable → wait → AttemptStart

Each attempt resolves to a tagged outcome (Success / Retryable / Fatal)
instead of raising; tenacity drives the loop with ``retry_if_result`` and
hands the last outcome back when the budget is spent or the caller's emitter
is closed. The outcome is turned into a return value or exception only once,
at the very end.

Each attempt owns a fresh httpx.AsyncClient, closed on every exit path.
Cancellation is checked only between attempts, before and after the wait.
"""

from __future__ import annotations

import asyncio
import logging
import time
import traceback
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import tenacity

from rest_client._retry import DelayStrategies, DelayStrategy, RetryPolicy, is_fatal_status
from rest_client.clock import SystemClock
from rest_client.decoding import BackgroundDecoder, InlineDecoder, ResponseDecoder
from rest_client.defaults import ClientDefaults
from rest_client.exceptions import ConfigurationError, RestException, UnknownExecutionError
from rest_client.interceptors import Interceptor, InterceptorChain
from rest_client.outcomes import AttemptOutcome, Fatal, Retryable, Success, is_retryable
from rest_client.protocols import Authorizer, CallClock, Emitter, TransportFactory
from rest_client.reporting import Reporter, ReporterSink
from rest_client.schemas.models import ProxyConfig, Request, Response
from rest_client.schemas.settings import ClientSettings
from rest_client.transport import HttpxTransportFactory

__all__ = [
    'DEFAULT_TIMEOUT_SECONDS',
    'MIN_TIMEOUT_SECONDS',
    'Client',
]

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0
MIN_TIMEOUT_SECONDS = 1.0

type Sleep = Callable[[float], Awaitable[None]]


class Client:
    """Executes REST requests with retries, interceptors and reporting.

    Immutable after construction: share one instance application-wide or
    create them ad hoc, both work.

    Args:
        defaults: Process-wide fallbacks (interceptor, proxy, reporter,
            with_credentials). Instance and per-call values override them.
        interceptor: Instance-level interceptor.
        reporter: Instance-level reporter.
        proxy: Instance-level proxy.
        timeout: Per-attempt timeout in seconds, at least 1.
        decoder: Body decoding strategy. Defaults to InlineDecoder.
        with_credentials: Instance-level override of defaults.with_credentials.
        transport_factory: Builds the per-attempt httpx client.
        clock: Request id and timestamp source for telemetry.
        sleep: Awaitable used for the retry wait.

    Raises:
        ConfigurationError: If timeout is under one second.
    """

    def __init__(
        self,
        defaults: ClientDefaults | None = None,
        *,
        interceptor: Interceptor | None = None,
        reporter: Reporter | None = None,
        proxy: ProxyConfig | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        decoder: ResponseDecoder | None = None,
        with_credentials: bool | None = None,
        transport_factory: TransportFactory | None = None,
        clock: CallClock | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        _check_timeout(timeout)
        self._defaults = defaults or ClientDefaults()
        self._interceptor = interceptor
        self._reporter = reporter
        self._proxy = proxy
        self._timeout = timeout
        self._decoder = decoder or InlineDecoder()
        self._with_credentials = with_credentials
        self._transport_factory = transport_factory or HttpxTransportFactory()
        self._clock = clock or SystemClock()
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        *,
        defaults: ClientDefaults | None = None,
        **kwargs: Any,
    ) -> Client:
        """Create a client from a settings file.

        ``timeout_seconds`` and ``background_decode`` configure the client;
        proxy and credentials become the defaults unless ``defaults`` is given.
        """
        kwargs.setdefault('timeout', settings.timeout_seconds)
        if settings.background_decode:
            kwargs.setdefault('decoder', BackgroundDecoder())
        return cls(defaults or ClientDefaults.from_settings(settings), **kwargs)

    @property
    def defaults(self) -> ClientDefaults:
        return self._defaults

    @property
    def timeout(self) -> float:
        return self._timeout

    async def execute(
        self,
        request: Request,
        *,
        authorizer: Authorizer | None = None,
        emitter: Emitter | None = None,
        json_response: bool = True,
        reporter: Reporter | None = None,
        interceptor: Interceptor | None = None,
        retry_count: int = 0,
        retry_delay: float = 1.0,
        retry_delay_strategy: DelayStrategy | None = None,
        timeout: float | None = None,
        throw_rest_exceptions: bool = True,
        with_credentials: bool | None = None,
        proxy: ProxyConfig | None = None,
    ) -> Response:
        """Execute ``request`` and return its Response.

        Args:
            request: The request to send.
            authorizer: Adds credentials to each attempt's transport request.
            emitter: Closing it cancels any remaining retries.
            json_response: Decode JSON bodies; False keeps raw bytes for
                non-text content types.
            reporter: Overrides the instance and default reporters.
            interceptor: Overrides the instance and default interceptors.
            retry_count: Retries after the first attempt.
            retry_delay: First wait between attempts, in seconds. Must be at
                least 1 when retry_count > 0.
            retry_delay_strategy: Backoff strategy. Defaults to linear.
            timeout: Per-attempt timeout override, in seconds.
            throw_rest_exceptions: Raise RestException for statuses outside
                [200, 400). When False the last Response is returned instead;
                retries still happen for non-fatal statuses.
            with_credentials: Overrides the instance and default setting.
            proxy: Overrides the instance and default proxy.

        Returns:
            The final Response.

        Raises:
            ConfigurationError: Invalid timeout or retry settings.
            RestException: Failing status or transport failure, after retries.
            Exception: Anything raised outside the network send (transport
                factory, authorizer, interceptors), after retries.
        """
        if timeout is not None:
            _check_timeout(timeout)
        policy = RetryPolicy(
            retry_count=retry_count,
            initial_delay=retry_delay,
            strategy=retry_delay_strategy or DelayStrategies.linear,
        )

        interceptors = InterceptorChain.resolve(interceptor, self._interceptor, self._defaults.interceptor)
        request = await interceptors.modify_request(self, request)

        call = _CallExecution(
            client=self,
            clock=self._clock,
            decoder=self._decoder,
            transport_factory=self._transport_factory,
            request=request,
            interceptors=interceptors,
            sink=ReporterSink.resolve(reporter, self._reporter, self._defaults.reporter),
            authorizer=authorizer,
            emitter=emitter,
            json_response=json_response,
            throw_rest_exceptions=throw_rest_exceptions,
            timeout=timeout or self._timeout,
            proxy=proxy or self._proxy or self._defaults.proxy,
            with_credentials=_first_set(with_credentials, self._with_credentials, self._defaults.with_credentials),
        )

        retrying = tenacity.AsyncRetrying(
            stop=policy.stop(emitter),
            wait=policy.wait(),
            retry=tenacity.retry_if_result(is_retryable),
            before_sleep=policy.log_retry,
            retry_error_callback=_last_outcome,
            sleep=self._sleep,
        )

        started = time.perf_counter()
        try:
            outcome = await retrying(call.run_attempt)
        finally:
            logger.debug(
                f'[{call.request_id}] {request.method} {request.url}: '
                f'{call.attempts} attempt(s) in {int((time.perf_counter() - started) * 1000)}ms'
            )
        return call.resolve(outcome)


class _CallExecution:
    """Mutable state of one logical call, shared by its attempts."""

    def __init__(
        self,
        *,
        client: Client,
        clock: CallClock,
        decoder: ResponseDecoder,
        transport_factory: TransportFactory,
        request: Request,
        interceptors: InterceptorChain,
        sink: ReporterSink,
        authorizer: Authorizer | None,
        emitter: Emitter | None,
        json_response: bool,
        throw_rest_exceptions: bool,
        timeout: float,
        proxy: ProxyConfig | None,
        with_credentials: bool,
    ) -> None:
        self._client = client
        self._clock = clock
        self._decoder = decoder
        self._transport_factory = transport_factory
        self._request = request
        self._interceptors = interceptors
        self._sink = sink
        self._authorizer = authorizer
        self._emitter = emitter
        self._json_response = json_response
        self._throw_rest_exceptions = throw_rest_exceptions
        self._timeout = timeout
        self._proxy = proxy
        self._with_credentials = with_credentials

        self.request_id: str | None = None
        self.attempts = 0
        self._last_outcome: AttemptOutcome | None = None

    @property
    def _method(self) -> str:
        return str(self._request.method)

    async def run_attempt(self) -> AttemptOutcome:
        """One attempt; the callable tenacity retries."""
        if self._last_outcome is not None and self._cancelled():
            # Emitter closed during the wait: the previous failure is final
            logger.info('Emitter is closed; cancelling')
            return Fatal(_error_of(self._last_outcome))

        self.attempts += 1
        if self.request_id is None:
            self.request_id = self._clock.new_request_id()

        outcome = await self._attempt()
        if not isinstance(outcome, Success):
            logger.error(f'Error: {self._request.url}')
        self._last_outcome = outcome
        return outcome

    def resolve(self, outcome: object) -> Response:
        """Turn the terminal outcome into the call's result."""
        match outcome:
            case Success(response=response):
                return response
            case Retryable(error=error) | Fatal(error=error):
                if isinstance(error, RestException) and error.from_status and not self._throw_rest_exceptions:
                    return error.response
                raise error
            case _:
                raise UnknownExecutionError('UNKNOWN ERROR')

    def _cancelled(self) -> bool:
        return self._emitter is not None and self._emitter.is_closed

    async def _attempt(self) -> AttemptOutcome:
        start_time = self._clock.now_ms()
        try:
            async with self._transport_factory.create(self._proxy, self._with_credentials) as transport:
                return await self._send_and_classify(transport, start_time)
        except Exception as e:  # noqa: BLE001 - factory/authorizer/interceptor failures retry like transport ones
            return Retryable(e)

    async def _send_and_classify(self, transport: httpx.AsyncClient, start_time: int) -> AttemptOutcome:
        request = self._request
        method = self._method
        raw = b''
        transport_error: Exception | None = None

        response = await self._interceptors.intercept_request(self._client, request)
        if response is None:
            response, raw, transport_error = await self._send(transport, start_time)
        elif isinstance(response.body, bytes):
            # Short-circuit with a raw payload: decode it like a network body
            raw = response.body
            response = response.model_copy(update={'body': await self._decode(raw, response.content_type)})

        response = await self._interceptors.modify_response(self._client, request, response)
        fatal = is_fatal_status(response.status_code)

        if transport_error is not None:
            error = RestException(f'Error from server: {transport_error}', response)
            error.__cause__ = transport_error
            return Fatal(error) if fatal else Retryable(error)

        if not response.ok:
            error = RestException(
                f'Error code received from server: {response.status_code}',
                response,
                from_status=True,
            )
            return Fatal(error) if fatal else Retryable(error)

        await self._sink.success(
            bytes_received=len(raw),
            bytes_sent=len(request.body.encode()) if request.body else 0,
            end_time=self._clock.now_ms(),
            method=method,
            request_id=self.request_id,
            start_time=start_time,
            status_code=response.status_code,
            url=request.url,
        )
        return Success(response)

    async def _send(
        self,
        transport: httpx.AsyncClient,
        start_time: int,
    ) -> tuple[Response, bytes, Exception | None]:
        """Send over the network. Transport failures are captured, not raised."""
        request = self._request
        method = self._method
        headers = request.prepare_headers()

        http_request = transport.build_request(method, request.url, headers=headers, content=request.body)
        if self._authorizer is not None:
            await self._authorizer.secure(http_request)

        await self._sink.request(
            body=request.body,
            headers=dict(http_request.headers),
            method=method,
            request_id=self.request_id,
            url=request.url,
        )

        try:
            async with asyncio.timeout(self._timeout):
                http_response = await transport.send(http_request)
        except Exception as e:  # noqa: BLE001 - any send failure is a transport failure of this attempt
            await self._sink.failure(
                end_time=self._clock.now_ms(),
                exception=str(e) or type(e).__name__,
                method=method,
                request_id=self.request_id,
                stack=traceback.format_exc(),
                start_time=start_time,
                url=request.url,
            )
            return Response(body=None, headers={}, status_code=-1), b'', e

        raw = http_response.content
        await self._sink.response(
            body=raw,
            headers=dict(http_response.headers),
            request_id=self.request_id,
            status_code=http_response.status_code,
        )

        body = await self._decode(raw, http_response.headers.get('content-type'))
        response = Response.from_headers(http_response.headers, body=body, status_code=http_response.status_code)
        return response, raw, None

    async def _decode(self, raw: bytes, content_type: str | None) -> Any:
        try:
            return await self._decoder.decode(raw, content_type, self._json_response)
        except Exception as e:  # noqa: BLE001 - decoding never fails a call
            logger.warning(f'Response decode failed, keeping raw body: {type(e).__name__}: {e}')
            return raw


def _check_timeout(timeout: float) -> None:
    if timeout < MIN_TIMEOUT_SECONDS:
        raise ConfigurationError(f'timeout must be at least {MIN_TIMEOUT_SECONDS}s, got {timeout}s')


def _first_set(*values: bool | None) -> bool:
    return next((v for v in values if v is not None), False)


def _error_of(outcome: AttemptOutcome) -> Exception:
    match outcome:
        case Retryable(error=error) | Fatal(error=error):
            return error
        case _:
            raise UnknownExecutionError(f'No failure to rethrow in {type(outcome).__name__}')


def _last_outcome(retry_state: tenacity.RetryCallState) -> object:
    """tenacity retry_error_callback: hand back the last outcome, not RetryError."""
    if retry_state.outcome is None:
        raise UnknownExecutionError('Retry loop stopped without an attempt outcome')
    return retry_state.outcome.result()
