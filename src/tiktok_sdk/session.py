"""
Session store for backend cookies

One store belongs to one client instance. Cookies set by responses are
ingested after every exchange and replayed on later requests that match
their domain and path. A single lock serializes reads and writes so that
concurrent responses never lose each other's cookies.
"""

import logging
import threading
from typing import Iterator, Optional

import requests
from requests.cookies import RequestsCookieJar, extract_cookies_to_jar, get_cookie_header

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Thread-safe cookie jar owned by a single client

    Domain, path, expiry and secure matching follow ``http.cookiejar``
    semantics through ``requests.cookies.RequestsCookieJar``.
    """

    def __init__(self, jar: Optional[RequestsCookieJar] = None):
        self._jar = jar if jar is not None else RequestsCookieJar()
        self._lock = threading.RLock()

    def attach(self, url: str) -> Optional[str]:
        """
        Build the Cookie header value for a request URL

        Args:
            url: Absolute request URL

        Returns:
            Cookie header value, or None when no stored cookie matches
        """
        probe = requests.Request('GET', url).prepare()
        with self._lock:
            return get_cookie_header(self._jar, probe)

    def ingest(self, response: requests.Response) -> None:
        """
        Apply the Set-Cookie headers of a response to the store

        The headers go through the jar's cookie policy, so foreign domains are
        rejected and a cookie sent with ``Max-Age=0`` or a past ``Expires``
        is removed.

        Args:
            response: Response returned by the transport
        """
        if response.request is None or response.raw is None:
            return

        with self._lock:
            before = len(self._jar)
            extract_cookies_to_jar(self._jar, response.request, response.raw)
            after = len(self._jar)

        if 'set-cookie' in response.headers:
            logger.debug(f"Processed cookies from {response.url} ({before} -> {after} stored)")

    def get(self, name: str, domain: Optional[str] = None, path: Optional[str] = None) -> Optional[str]:
        """Get a stored cookie value"""
        with self._lock:
            return self._jar.get(name, domain=domain, path=path)

    def set(self, name: str, value: str, domain: str = '', path: str = '/') -> None:
        """Store a cookie directly, e.g. to restore a saved login"""
        with self._lock:
            self._jar.set(name, value, domain=domain, path=path)

    def clear(self) -> None:
        """Forget all cookies"""
        with self._lock:
            self._jar.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._jar)

    def __iter__(self) -> Iterator:
        with self._lock:
            return iter(list(self._jar))
