"""REST call execution engine: retries, interceptors, reporters, body decoding."""

from __future__ import annotations

from rest_client._retry import FATAL_STATUS_CODES, DelayStrategies, DelayStrategy, RetryPolicy, is_fatal_status
from rest_client.authorizers import BasicAuthorizer, BearerAuthorizer
from rest_client.client import Client
from rest_client.decoding import BackgroundDecoder, InlineDecoder, ResponseDecoder, decode_body
from rest_client.defaults import ClientDefaults
from rest_client.emitter import Emitter
from rest_client.exceptions import ConfigurationError, RestClientError, RestException, UnknownExecutionError
from rest_client.interceptors import Interceptor
from rest_client.protocols import Authorizer, CallClock, TransportFactory
from rest_client.reporting import LoggingReporter, Reporter
from rest_client.schemas import ClientSettings, ProxyConfig, Request, RequestMethod, Response, load_settings
from rest_client.transport import HttpxTransportFactory

__all__ = [
    'FATAL_STATUS_CODES',
    'Authorizer',
    'BackgroundDecoder',
    'BasicAuthorizer',
    'BearerAuthorizer',
    'CallClock',
    'Client',
    'ClientDefaults',
    'ClientSettings',
    'ConfigurationError',
    'DelayStrategies',
    'DelayStrategy',
    'Emitter',
    'HttpxTransportFactory',
    'InlineDecoder',
    'Interceptor',
    'LoggingReporter',
    'ProxyConfig',
    'Reporter',
    'Request',
    'RequestMethod',
    'Response',
    'ResponseDecoder',
    'RestClientError',
    'RestException',
    'RetryPolicy',
    'TransportFactory',
    'UnknownExecutionError',
    'decode_body',
    'is_fatal_status',
    'load_settings',
]
