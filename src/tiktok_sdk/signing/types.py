"""
Type definitions for the signed-request pipeline

This module provides the data classes passed between the parameter
serializer, the signing interceptor and the HTTP client.
"""

import time
from typing import Dict, Optional, Union, Callable, Any, Awaitable
from dataclasses import dataclass, field
from enum import Enum


class HttpMethod(str, Enum):
    """HTTP methods used by the API"""
    GET = "GET"
    POST = "POST"


@dataclass(frozen=True)
class SigningContext:
    """
    Inputs handed to the external signer for one request

    Attributes:
        url: Canonical URL (origin + path + ordered query string)
        timestamp: Unix timestamp in seconds injected as ``ts``
        device_id: Device identifier of the client
    """
    url: str
    timestamp: int
    device_id: str

    def __post_init__(self):
        """Validate signing context"""
        if not self.url:
            raise ValueError("Canonical URL cannot be empty")

        if self.timestamp <= 0:
            raise ValueError("Timestamp must be positive")


@dataclass
class OutgoingRequest:
    """
    Request travelling through the interceptor chain

    Attributes:
        method: HTTP method
        path: Endpoint path relative to the client base URL
        url: Absolute URL; set to the signed URL once signing completes
        params: Query parameters; empty once signing completes
        headers: Request headers
        body: Optional form-encoded body
    """
    method: HttpMethod
    path: str
    url: str
    params: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    signed: bool = False

    def __post_init__(self):
        """Validate request after initialization"""
        if not self.url:
            raise ValueError("Request URL cannot be empty")

        if not isinstance(self.params, dict):
            raise ValueError("Params must be a dictionary")

        # Normalize headers to lowercase for consistent processing
        self.headers = {k.lower(): v for k, v in self.headers.items()}


@dataclass
class RequestContext:
    """Context information for request processing"""
    endpoint: str = ""
    start_time: float = field(default_factory=time.time)
    timestamp: Optional[int] = None
    signing_time_ms: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SigningMetrics:
    """Counters for signing performance and reliability"""
    total_requests: int = 0
    signed_requests: int = 0
    signing_failures: int = 0
    total_signing_time_ms: float = 0.0
    max_signing_time_ms: float = 0.0

    @property
    def average_signing_time_ms(self) -> float:
        """Calculate average signing time"""
        if self.signed_requests == 0:
            return 0.0
        return self.total_signing_time_ms / self.signed_requests

    @property
    def signing_success_rate(self) -> float:
        """Calculate signing success rate"""
        attempts = self.signed_requests + self.signing_failures
        if attempts == 0:
            return 1.0
        return self.signed_requests / attempts


# The signer may be a plain function or a coroutine function.
SignURL = Callable[[str, int, str], Union[str, Awaitable[str]]]
