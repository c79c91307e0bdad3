"""
Utility functions for request signing

This module provides freshness value generation and canonical URL
construction for the signing interceptor.
"""

import time
import threading
from typing import Any, Callable, Mapping, Optional

from ..exceptions import ConfigurationError


def generate_timestamp() -> int:
    """
    Generate current Unix timestamp.

    Returns:
        int: Current Unix timestamp (seconds since epoch)
    """
    return int(time.time())


def generate_rticket() -> int:
    """
    Generate the millisecond request ticket sent as ``_rticket``.

    Returns:
        int: Current time in milliseconds since epoch
    """
    return int(time.time() * 1000)


class FreshnessClock:
    """
    Per-client source of ``ts`` values that never goes backwards

    A wall-clock step backwards (NTP adjustment, manual change) would
    otherwise let a later request carry an earlier timestamp.
    """

    def __init__(self, time_source: Optional[Callable[[], int]] = None):
        self._time_source = time_source or generate_timestamp
        self._last = 0
        self._lock = threading.Lock()

    def now(self) -> int:
        """Return the current timestamp, clamped to the last one issued"""
        with self._lock:
            self._last = max(self._last, self._time_source())
            return self._last


def build_canonical_url(
    url: str,
    params: Mapping[str, Any],
    params_serializer: Optional[Callable[[Mapping[str, Any]], str]]
) -> str:
    """
    Build the canonical URL passed to the external signer.

    Args:
        url: Request URL (base URL + endpoint path)
        params: Full parameter set including freshness fields
        params_serializer: Ordered query string serializer

    Returns:
        str: ``url + "?" + serialized params``

    Raises:
        ConfigurationError: If no serializer is configured
    """
    if not callable(params_serializer):
        raise ConfigurationError(
            "Missing required params_serializer function",
            details={'url': url}
        )

    return f"{url}?{params_serializer(params)}"
