"""
Client configuration for the TikTok Python SDK

Configuration is layered with a fixed precedence: values passed for a single
call win over the client configuration, which wins over the built-in
defaults defined here.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlparse

from ..exceptions import ConfigurationError
from ..signing.params import ParamsSerializer, create_params_serializer
from ..signing.types import SignURL

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'https://api2.musical.ly/'
DEFAULT_HOST = 'api2.musical.ly'

REQUIRED_USER_PARAMS = ('device_id', 'iid', 'openudid')

DEFAULT_REQUEST_PARAMS: Dict[str, Any] = {
    'os_api': '23',
    'device_type': 'Pixel',
    'ssmix': 'a',
    'manifest_version_code': '2018080704',
    'dpi': 420,
    'app_name': 'normal',
    'version_name': '8.1.0',
    'timezone_offset': 37800,
    'is_my_cn': 0,
    'ac': 'wifi',
    'update_version_code': '2018080704',
    'channel': 'googleplay',
    'device_platform': 'android',
    'build_number': '8.1.0',
    'version_code': 810,
    'timezone_name': 'Australia/Lord_Howe',
    'resolution': '1080*1920',
    'os_version': '7.1.2',
    'device_brand': 'Google',
    'mcc_mnc': '',
    'app_language': 'en',
    'language': 'en',
    'region': 'US',
    'sys_region': 'US',
    'carrier_region': 'AU',
    'aid': '1233',
}


def get_request_params(request_params: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge user-defined device parameters over the static app defaults.

    Args:
        request_params: Parameters identifying the device; must contain
            ``device_id``, ``iid`` and ``openudid``

    Returns:
        dict: Complete static request parameters

    Raises:
        ConfigurationError: If a required device parameter is missing
    """
    missing = [key for key in REQUIRED_USER_PARAMS if not request_params.get(key)]
    if missing:
        raise ConfigurationError(
            f"Missing required request parameters: {', '.join(missing)}",
            error_code="MISSING_REQUEST_PARAMS",
            details={'missing': missing}
        )

    params = dict(DEFAULT_REQUEST_PARAMS)
    params.update(request_params)
    return params


def load_request_params_from_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load device parameters from a JSON file and merge them over the defaults.

    Args:
        path: Path to a JSON object of request parameters

    Returns:
        dict: Complete static request parameters
    """
    file_path = Path(path)
    try:
        data = json.loads(file_path.read_text(encoding='utf-8'))
    except FileNotFoundError:
        raise ConfigurationError(f"Request parameters file not found: {file_path}", error_code="FILE_NOT_FOUND")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {file_path}: {e}", error_code="INVALID_JSON")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Request parameters in {file_path} must be a JSON object")

    logger.debug(f"Loaded {len(data)} request parameters from {file_path}")
    return get_request_params(data)


def build_user_agent(request_params: Mapping[str, Any]) -> str:
    """Build the app user agent matching the static device parameters."""
    return (
        f"com.zhiliaoapp.musically/{request_params.get('manifest_version_code', '')}"
        f" (Linux; U; Android {request_params.get('os_version', '')};"
        f" {request_params.get('language', '')}_{request_params.get('region', '')};"
        f" {request_params.get('device_type', '')}; Build/NHG47Q; Cronet/58.0.2991.0)"
    )


@dataclass
class TransportConfig:
    """Transport-level settings merged over the computed defaults"""
    timeout: float = 30.0
    verify_ssl: bool = True
    headers: Dict[str, str] = field(default_factory=dict)
    proxies: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Validate transport configuration"""
        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive")


@dataclass
class ClientConfig:
    """
    API client configuration

    Attributes:
        sign_url: External signer ``(url, ts, device_id) -> signed_url``
        base_url: Request origin override
        host: Host header value
        user_agent: User-Agent header value (computed from the device
            parameters when not given)
        params_serializer: Ordered query string serializer
        transport: Transport-level overrides
    """
    sign_url: Optional[SignURL] = None
    base_url: str = DEFAULT_BASE_URL
    host: str = DEFAULT_HOST
    user_agent: Optional[str] = None
    params_serializer: Optional[ParamsSerializer] = field(default_factory=create_params_serializer)
    transport: TransportConfig = field(default_factory=TransportConfig)

    def __post_init__(self):
        """Validate configuration"""
        if not callable(self.sign_url):
            raise ConfigurationError("You must supply a sign_url function to the client config")

        if not callable(self.params_serializer):
            raise ConfigurationError("Missing required params_serializer function")

        if not self.base_url:
            raise ConfigurationError("Base URL cannot be empty")

        if not self.base_url.endswith('/'):
            self.base_url += '/'

        parsed = urlparse(self.base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ConfigurationError(f"Invalid base URL format: {self.base_url}")

        if isinstance(self.transport, Mapping):
            self.transport = TransportConfig(**self.transport)

    def default_headers(self, request_params: Mapping[str, Any]) -> Dict[str, str]:
        """
        Compute the headers sent with every request

        Built-in headers first, then the configured host and user agent, then
        transport header overrides.
        """
        headers = {
            'host': self.host,
            'connection': 'keep-alive',
            'accept-encoding': 'gzip',
            'user-agent': self.user_agent or build_user_agent(request_params),
        }
        headers.update({k.lower(): v for k, v in self.transport.headers.items()})
        return headers
