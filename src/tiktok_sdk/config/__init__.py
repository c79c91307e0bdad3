"""
Configuration management for TikTok Python SDK

This module provides the client configuration dataclasses and the static
device parameters merged beneath every request.
"""

from .client_config import (
    ClientConfig,
    TransportConfig,
    DEFAULT_BASE_URL,
    DEFAULT_HOST,
    DEFAULT_REQUEST_PARAMS,
    REQUIRED_USER_PARAMS,
    get_request_params,
    load_request_params_from_file,
    build_user_agent,
)

__all__ = [
    'ClientConfig',
    'TransportConfig',
    'DEFAULT_BASE_URL',
    'DEFAULT_HOST',
    'DEFAULT_REQUEST_PARAMS',
    'REQUIRED_USER_PARAMS',
    'get_request_params',
    'load_request_params_from_file',
    'build_user_agent',
]
