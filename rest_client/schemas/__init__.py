"""Pydantic schemas for rest_client."""

from __future__ import annotations

from rest_client.schemas.models import ProxyConfig, Request, RequestMethod, Response, StrictModel
from rest_client.schemas.settings import ClientSettings, load_settings, save_settings

__all__ = [
    'ClientSettings',
    'ProxyConfig',
    'Request',
    'RequestMethod',
    'Response',
    'StrictModel',
    'load_settings',
    'save_settings',
]
