"""Tests for value types, settings loading and process-wide defaults."""

from __future__ import annotations

from pathlib import Path

import pydantic
import pytest

from rest_client import (
    BackgroundDecoder,
    Client,
    ClientDefaults,
    ClientSettings,
    ConfigurationError,
    LoggingReporter,
    ProxyConfig,
    Request,
    RequestMethod,
    Response,
    load_settings,
)
from rest_client.schemas import save_settings
from rest_client.schemas.settings import SETTINGS_ENV_VAR, settings_path


class TestRequest:
    def test_defaults(self) -> None:
        request = Request(url='https://api.example.com/items')
        assert request.method is RequestMethod.GET
        assert request.headers == {}
        assert request.body is None

    def test_prepare_headers_without_body(self) -> None:
        assert Request(url='https://x').prepare_headers() == {'accept': 'application/json'}

    def test_prepare_headers_with_body(self) -> None:
        headers = Request(url='https://x', method=RequestMethod.POST, body='{}').prepare_headers()
        assert headers == {'accept': 'application/json', 'content-type': 'application/json; charset=utf-8'}

    def test_caller_headers_win_case_insensitively(self) -> None:
        request = Request(
            url='https://x',
            method=RequestMethod.PUT,
            body='a=b',
            headers={'Content-Type': 'application/x-www-form-urlencoded', 'X-Trace': '1'},
        )
        assert request.prepare_headers() == {
            'accept': 'application/json',
            'Content-Type': 'application/x-www-form-urlencoded',
            'X-Trace': '1',
        }

    def test_frozen(self) -> None:
        request = Request(url='https://x')
        with pytest.raises(pydantic.ValidationError):
            request.url = 'https://y'  # type: ignore[misc]

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            Request(url='https://x', verb='GET')  # type: ignore[call-arg]


class TestResponse:
    def test_from_headers_lowercases_keys(self) -> None:
        response = Response.from_headers({'Content-Type': 'text/plain', 'X-Id': '7'}, body='hi', status_code=200)
        assert response.headers == {'content-type': 'text/plain', 'x-id': '7'}
        assert response.content_type == 'text/plain'

    @pytest.mark.parametrize(
        'status, ok',
        [(200, True), (204, True), (302, True), (399, True), (400, False), (500, False), (199, False), (-1, False)],
    )
    def test_ok(self, status: int, ok: bool) -> None:
        assert Response(status_code=status).ok is ok

    def test_missing_status_is_not_ok(self) -> None:
        assert not Response(status_code=None).ok


class TestProxyConfig:
    def test_url_and_auth(self) -> None:
        proxy = ProxyConfig(host='proxy.internal', port=3128, username='u', password='p')
        assert proxy.url == 'http://proxy.internal:3128'
        assert proxy.auth == ('u', 'p')

    def test_no_auth(self) -> None:
        assert ProxyConfig(host='h', port=1).auth is None


class TestSettings:
    def test_missing_file_returns_none(self, tmp_path: Path) -> None:
        assert load_settings(tmp_path / 'absent.json') is None

    def test_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / 'nested' / 'settings.json'
        settings = ClientSettings(
            timeout_seconds=15.0,
            proxy=ProxyConfig(host='proxy', port=8080),
            with_credentials=True,
            background_decode=True,
        )
        save_settings(settings, path)
        assert load_settings(path) == settings

    def test_integer_timeout_accepted(self, tmp_path: Path) -> None:
        path = tmp_path / 'settings.json'
        path.write_text('{"timeout_seconds": 30}')
        settings = load_settings(path)
        assert settings is not None
        assert settings.timeout_seconds == 30.0

    @pytest.mark.parametrize(
        'content',
        [
            'not json',
            '{"timeout_seconds": 0.5}',
            '{"unknown": true}',
            '{"proxy": {"host": "h"}}',
        ],
    )
    def test_invalid_file_raises_value_error(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / 'settings.json'
        path.write_text(content)
        with pytest.raises(ValueError, match='Invalid settings file'):
            load_settings(path)

    def test_env_var_overrides_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / 'custom.json'
        path.write_text('{"with_credentials": true}')
        monkeypatch.setenv(SETTINGS_ENV_VAR, str(path))
        assert settings_path() == path
        settings = load_settings()
        assert settings is not None
        assert settings.with_credentials is True


class TestDefaults:
    def test_from_settings(self) -> None:
        proxy = ProxyConfig(host='proxy', port=8080)
        reporter = LoggingReporter()
        defaults = ClientDefaults.from_settings(
            ClientSettings(proxy=proxy, with_credentials=True),
            reporter=reporter,
        )
        assert defaults.proxy == proxy
        assert defaults.with_credentials is True
        assert defaults.reporter is reporter
        assert defaults.interceptor is None

    def test_immutable(self) -> None:
        defaults = ClientDefaults()
        with pytest.raises(AttributeError):
            defaults.with_credentials = True  # type: ignore[misc]

    def test_client_from_settings(self) -> None:
        client = Client.from_settings(ClientSettings(timeout_seconds=5.0, background_decode=True, with_credentials=True))
        assert client.timeout == 5.0
        assert client.defaults.with_credentials is True
        assert isinstance(client._decoder, BackgroundDecoder)

    def test_client_rejects_short_timeout(self) -> None:
        with pytest.raises(ConfigurationError, match='timeout'):
            Client(timeout=0.5)
