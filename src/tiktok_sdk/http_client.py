"""
HTTP client with the signed-request pipeline

This module provides the HTTP client used by the API endpoints. Every request
runs through optional caller interceptors, then the signing interceptor, then
the cookie session, the transport and the big-integer safe response decoder.
"""

import time
import asyncio
import logging
import concurrent.futures
from functools import partial
from http.cookiejar import DefaultCookiePolicy
from urllib.parse import urljoin, urlsplit
from typing import (
    Any, Awaitable, Dict, List, Mapping, Optional, Protocol, Tuple, Union, runtime_checkable
)

import requests
from requests.status_codes import codes
from requests.utils import requote_uri

from .config import ClientConfig
from .decoding import decode_response
from .exceptions import ConfigurationError, DecodeError, TransportError, ValidationError
from .session import SessionStore
from .signing import (
    FreshnessClock,
    HttpMethod,
    OutgoingRequest,
    RequestContext,
    SigningInterceptor,
    SigningMetrics,
)

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'


# Protocol definitions for interceptors
@runtime_checkable
class RequestInterceptor(Protocol):
    """Protocol for request interceptors"""

    def __call__(
        self,
        request: OutgoingRequest,
        context: RequestContext
    ) -> Union[OutgoingRequest, Awaitable[OutgoingRequest]]:
        """Process request before signing"""
        ...


@runtime_checkable
class ResponseInterceptor(Protocol):
    """Protocol for response interceptors"""

    def __call__(
        self,
        response: requests.Response,
        context: RequestContext
    ) -> Union[requests.Response, Awaitable[requests.Response]]:
        """Process response before decoding"""
        ...


class TikTokHttpClient:
    """
    HTTP client for the mobile API

    Features:
    - Deterministic parameter ordering and external URL signing
    - Per-client cookie session shared by concurrent requests
    - Request/response interceptors
    - Big-integer safe JSON decoding
    - Signing metrics
    """

    def __init__(
        self,
        request_params: Mapping[str, Any],
        config: ClientConfig,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the HTTP client

        Args:
            request_params: Static device parameters sent with every request
                (see ``get_request_params``)
            config: Client configuration including the URL signer
            session: Optional requests session used as the transport

        Raises:
            ConfigurationError: If the configuration has no signer or the
                device parameters have no device_id
        """
        if not isinstance(config, ClientConfig):
            raise ConfigurationError("config must be a ClientConfig instance")

        self.config = config
        self.request_params = dict(request_params)

        device_id = self.request_params.get('device_id')
        if not device_id:
            raise ConfigurationError("Request parameters must include a device_id")

        self.metrics = SigningMetrics()
        self.signer = SigningInterceptor(
            sign_url=config.sign_url,
            device_id=str(device_id),
            params_serializer=config.params_serializer,
            default_params=self.request_params,
            clock=FreshnessClock(),
            metrics=self.metrics
        )
        self.session_store = SessionStore()
        self.session = session or requests.Session()
        # The store is the only cookie jar; the transport's own jar refuses everything
        self.session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
        self.default_headers = config.default_headers(self.request_params)

        # Interceptors
        self.request_interceptors: List[RequestInterceptor] = []
        self.response_interceptors: List[ResponseInterceptor] = []

        logger.info(f"TikTok HTTP client initialized for: {config.base_url}")

    def add_request_interceptor(self, interceptor: RequestInterceptor) -> None:
        """Add request interceptor; it runs before signing"""
        self.request_interceptors.append(interceptor)
        logger.debug(f"Added request interceptor: {interceptor}")

    def add_response_interceptor(self, interceptor: ResponseInterceptor) -> None:
        """Add response interceptor; it runs before decoding"""
        self.response_interceptors.append(interceptor)
        logger.debug(f"Added response interceptor: {interceptor}")

    def remove_request_interceptor(self, interceptor: RequestInterceptor) -> bool:
        """Remove request interceptor"""
        try:
            self.request_interceptors.remove(interceptor)
            return True
        except ValueError:
            return False

    def remove_response_interceptor(self, interceptor: ResponseInterceptor) -> bool:
        """Remove response interceptor"""
        try:
            self.response_interceptors.remove(interceptor)
            return True
        except ValueError:
            return False

    def get_signing_metrics(self) -> SigningMetrics:
        """Get current signing metrics"""
        return self.metrics

    async def _apply_request_interceptors(
        self,
        request: OutgoingRequest,
        context: RequestContext
    ) -> OutgoingRequest:
        current_request = request
        for interceptor in self.request_interceptors:
            result = interceptor(current_request, context)
            if asyncio.iscoroutine(result):
                result = await result
            current_request = result
        return current_request

    async def _apply_response_interceptors(
        self,
        response: requests.Response,
        context: RequestContext
    ) -> requests.Response:
        current_response = response
        for interceptor in self.response_interceptors:
            result = interceptor(current_response, context)
            if asyncio.iscoroutine(result):
                result = await result
            current_response = result
        return current_response

    def build_request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Union[Mapping[str, Any], str]] = None,
        headers: Optional[Mapping[str, str]] = None
    ) -> OutgoingRequest:
        """
        Build an unsigned request

        Per-call headers win over the client defaults. Mapping bodies are
        form-encoded with the same serializer as query strings.
        """
        try:
            http_method = HttpMethod(method.upper())
        except ValueError:
            raise ValidationError(f"Unsupported HTTP method: {method}")

        request_headers = dict(self.default_headers)
        request_headers.update({k.lower(): v for k, v in (headers or {}).items()})

        body = None
        if data is not None:
            body = self.config.params_serializer(data) if isinstance(data, Mapping) else data
            request_headers.setdefault('content-type', FORM_CONTENT_TYPE)

        return OutgoingRequest(
            method=http_method,
            path=path,
            url=f"{self.config.base_url}{path}",
            params=dict(params or {}),
            headers=request_headers,
            body=body
        )

    def _send(self, request: OutgoingRequest, timeout: Optional[float] = None) -> requests.Response:
        """
        Perform the exchange, following redirects hop by hop

        Every hop gets the store's cookies attached and its Set-Cookie headers
        ingested before the next hop is built.
        """
        prepared = requests.Request(
            request.method.value,
            request.url,
            headers=request.headers,
            data=request.body
        ).prepare()
        timeout = timeout or self.config.transport.timeout

        history: List[requests.Response] = []
        response = self._exchange(prepared, timeout)
        while response.is_redirect:
            if len(history) >= self.session.max_redirects:
                raise TransportError(
                    f"Exceeded {self.session.max_redirects} redirects",
                    error_code="TOO_MANY_REDIRECTS",
                    http_status=response.status_code
                )
            history.append(response)
            prepared = self._build_redirect(prepared, response)
            logger.debug(f"Following redirect {response.status_code} to {prepared.url}")
            response = self._exchange(prepared, timeout)

        response.history = history
        return response

    def _exchange(self, prepared: requests.PreparedRequest, timeout: float) -> requests.Response:
        """Attach cookies, send one request and ingest the response cookies"""
        prepared.headers.pop('Cookie', None)
        cookie_header = self.session_store.attach(prepared.url)
        if cookie_header:
            prepared.headers['Cookie'] = cookie_header

        transport = self.config.transport
        settings = self.session.merge_environment_settings(
            prepared.url, dict(transport.proxies), None, transport.verify_ssl, None
        )

        logger.debug(f"Making {prepared.method} request to {urlsplit(prepared.url).path}")
        try:
            response = self.session.send(prepared, timeout=timeout, allow_redirects=False, **settings)
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Request timeout after {timeout} seconds", error_code="TIMEOUT") from e
        except requests.exceptions.ConnectionError as e:
            raise TransportError(f"Connection error: {e}", error_code="CONNECTION_ERROR") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request failed: {e}") from e

        self.session_store.ingest(response)
        return response

    def _build_redirect(
        self,
        prepared: requests.PreparedRequest,
        response: requests.Response
    ) -> requests.PreparedRequest:
        """Build the next hop of a redirect the way requests does"""
        location = self.session.get_redirect_target(response)
        next_request = prepared.copy()
        next_request.url = requote_uri(urljoin(response.url or prepared.url, location))

        # 301/302/303 turn POST into GET and drop the body
        self.session.rebuild_method(next_request, response)
        if response.status_code not in (codes.temporary_redirect, codes.permanent_redirect):
            for header in ('Content-Length', 'Content-Type', 'Transfer-Encoding'):
                next_request.headers.pop(header, None)
            next_request.body = None

        if urlsplit(next_request.url).netloc != urlsplit(prepared.url).netloc:
            next_request.headers.pop('Host', None)

        # Read the body so the connection can be reused
        response.content
        response.close()
        return next_request

    def _handle_response(self, response: requests.Response) -> Any:
        if not response.ok:
            try:
                body = decode_response(response.content)
            except DecodeError:
                body = response.text
            raise TransportError(
                f"Server request failed: HTTP {response.status_code}: {response.reason}",
                error_code="HTTP_ERROR",
                http_status=response.status_code,
                details={'status_code': response.status_code, 'body': body}
            )

        return decode_response(response.content)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Union[Mapping[str, Any], str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None
    ) -> Any:
        """
        Sign and send a request

        Args:
            method: HTTP method
            path: Endpoint path relative to the base URL
            params: Query parameters (merged over the static device parameters)
            data: Optional form body
            headers: Per-call headers
            timeout: Per-call transport timeout in seconds

        Returns:
            Decoded response body

        Raises:
            ConfigurationError: If no serializer is configured
            SigningError: If the external signer fails
            TransportError: On network errors or non-success statuses
            DecodeError: If the response body is not valid JSON
        """
        context = RequestContext(endpoint=path)
        outgoing = self.build_request(method, path, params=params, data=data, headers=headers)
        outgoing = await self._apply_request_interceptors(outgoing, context)
        outgoing = await self.signer(outgoing, context)

        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(None, partial(self._send, outgoing, timeout))
        response = await self._apply_response_interceptors(response, context)

        elapsed_ms = (time.time() - context.start_time) * 1000
        logger.debug(f"{outgoing.method.value} {path} -> {response.status_code} in {elapsed_ms:.2f}ms")

        return self._handle_response(response)

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None, **kwargs) -> Any:
        """Send a signed GET request"""
        return await self.request('GET', path, params=params, **kwargs)

    async def post(
        self,
        path: str,
        data: Optional[Union[Mapping[str, Any], str]] = None,
        params: Optional[Mapping[str, Any]] = None,
        **kwargs
    ) -> Any:
        """Send a signed POST request"""
        return await self.request('POST', path, params=params, data=data, **kwargs)

    def make_request(self, method: str, path: str, **kwargs) -> Any:
        """
        Sign and send a request from synchronous code

        Runs the async pipeline with ``asyncio.run``; when called from inside a
        running event loop the pipeline runs on a worker thread instead.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(self.request(method, path, **kwargs))

        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            future = executor.submit(lambda: asyncio.run(self.request(method, path, **kwargs)))
            return future.result()

    def close(self) -> None:
        """Close HTTP session"""
        self.session.close()
        logger.debug("TikTok HTTP client closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_logging_interceptor(
    log_level: str = 'debug',
    include_headers: bool = False
) -> Tuple[RequestInterceptor, ResponseInterceptor]:
    """
    Create request/response logging interceptors

    Args:
        log_level: Logging level ('debug', 'info', 'warning', 'error')
        include_headers: Whether to log headers

    Returns:
        Tuple of (request_interceptor, response_interceptor)
    """
    log_func = getattr(logger, log_level, logger.debug)

    def request_interceptor(request: OutgoingRequest, context: RequestContext) -> OutgoingRequest:
        log_data: Dict[str, Any] = {
            'method': request.method.value,
            'path': request.path,
            'params': sorted(request.params),
        }
        if include_headers:
            log_data['headers'] = dict(request.headers)

        log_func(f"HTTP Request: {log_data}")
        return request

    def response_interceptor(response: requests.Response, context: RequestContext) -> requests.Response:
        elapsed_ms = (time.time() - context.start_time) * 1000
        log_data: Dict[str, Any] = {
            'path': context.endpoint,
            'status_code': response.status_code,
            'elapsed_ms': f"{elapsed_ms:.2f}",
            'ts': context.timestamp,
        }
        if include_headers:
            log_data['headers'] = dict(response.headers)

        log_func(f"HTTP Response: {log_data}")
        return response

    return request_interceptor, response_interceptor
