"""Persistent client settings.

Process-wide defaults for every Client: transport timeout, proxy, credential
handling and background decoding. Read once at startup by the host and turned
into an immutable ClientDefaults (see rest_client.defaults).

File format (JSON)::

    {
      "timeout_seconds": 30,
      "proxy": {"host": "proxy.internal", "port": 3128},
      "with_credentials": false,
      "background_decode": true
    }
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pydantic

from rest_client.schemas.models import ProxyConfig, StrictModel

__all__ = [
    'SETTINGS_ENV_VAR',
    'SETTINGS_PATH',
    'ClientSettings',
    'load_settings',
    'save_settings',
    'settings_path',
]

logger = logging.getLogger(__name__)

SETTINGS_PATH = Path.home() / '.config' / 'rest_client' / 'settings.json'
SETTINGS_ENV_VAR = 'REST_CLIENT_SETTINGS'

MIN_TIMEOUT_SECONDS = 1.0


class ClientSettings(StrictModel):
    """Settings file schema."""

    timeout_seconds: float = 60.0
    proxy: ProxyConfig | None = None
    with_credentials: bool = False
    background_decode: bool = False

    @pydantic.field_validator('timeout_seconds')
    @classmethod
    def _check_timeout(cls, value: float) -> float:
        if value < MIN_TIMEOUT_SECONDS:
            raise ValueError(f'timeout_seconds must be at least {MIN_TIMEOUT_SECONDS}, got {value}')
        return value


def settings_path() -> Path:
    """Settings file location, honoring the REST_CLIENT_SETTINGS override."""
    override = os.environ.get(SETTINGS_ENV_VAR)
    return Path(override) if override else SETTINGS_PATH


def load_settings(path: Path | None = None) -> ClientSettings | None:
    """Load settings from file if it exists.

    Returns:
        ClientSettings if the file exists and is valid, None otherwise.

    Raises:
        ValueError: If the file exists but is invalid.
    """
    path = path or settings_path()
    if not path.exists():
        return None

    try:
        settings = ClientSettings.model_validate_json(path.read_text())
    except pydantic.ValidationError as e:
        raise ValueError(f'Invalid settings file at {path}: {e}') from e

    logger.debug(f'Loaded client settings from {path}')
    return settings


def save_settings(settings: ClientSettings, path: Path | None = None) -> None:
    """Save settings to file, creating parent directories if needed."""
    path = path or settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(settings.model_dump_json(indent=2) + '\n')
    logger.info(f'Saved client settings to {path}')
