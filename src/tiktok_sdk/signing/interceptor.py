"""
Signing interceptor for outgoing API requests

Every request passes through the interceptor once. It merges the client
default parameters beneath the request's own, injects the ``ts`` and
``_rticket`` freshness fields, builds the canonical URL, awaits the external
signer and rewrites the request to target the signed URL with no query
parameters left over.
"""

import time
import inspect
import logging
import threading
from dataclasses import replace
from typing import Any, Dict, Mapping, Optional

from .types import OutgoingRequest, RequestContext, SigningContext, SigningMetrics, SignURL
from .params import ParamsSerializer
from .utils import FreshnessClock, build_canonical_url, generate_rticket
from ..exceptions import ConfigurationError, SigningError

logger = logging.getLogger(__name__)


class SigningInterceptor:
    """
    Request interceptor that delegates URL signing to an external function
    """

    def __init__(
        self,
        sign_url: SignURL,
        device_id: str,
        params_serializer: Optional[ParamsSerializer],
        default_params: Optional[Mapping[str, Any]] = None,
        clock: Optional[FreshnessClock] = None,
        metrics: Optional[SigningMetrics] = None
    ):
        """
        Initialize signing interceptor

        Args:
            sign_url: External signer ``(url, ts, device_id) -> signed_url``
            device_id: Device identifier passed to the signer
            params_serializer: Ordered query string serializer
            default_params: Lowest-precedence parameters merged into every request
            clock: Timestamp source (one per client)
            metrics: Optional metrics collector
        """
        if not callable(sign_url):
            raise ConfigurationError("You must supply a sign_url function to the client config")

        self.sign_url = sign_url
        self.device_id = device_id
        self.params_serializer = params_serializer
        self.default_params = dict(default_params or {})
        self.clock = clock or FreshnessClock()
        self.metrics = metrics
        self._metrics_lock = threading.Lock()

    def merge_params(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """Merge request parameters over the client defaults"""
        merged = dict(self.default_params)
        merged.update(params)
        return merged

    def inject_freshness(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Add ``ts`` and ``_rticket`` to a parameter set"""
        fresh = dict(params)
        fresh['ts'] = self.clock.now()
        fresh['_rticket'] = generate_rticket()
        return fresh

    async def __call__(self, request: OutgoingRequest, context: RequestContext) -> OutgoingRequest:
        """
        Sign an outgoing request

        Args:
            request: Unsigned request
            context: Request context, receives the injected timestamp

        Returns:
            OutgoingRequest: Copy of the request targeting the signed URL

        Raises:
            ConfigurationError: If no serializer is configured
            SigningError: If the external signer fails
        """
        if not callable(self.params_serializer):
            raise ConfigurationError("Missing required params_serializer function")

        params = self.inject_freshness(self.merge_params(request.params))
        timestamp = params['ts']
        signing_context = SigningContext(
            url=build_canonical_url(request.url, params, self.params_serializer),
            timestamp=timestamp,
            device_id=self.device_id
        )
        context.timestamp = timestamp

        logger.debug(f"Canonical URL for {request.method.value} {request.path}: {signing_context.url}")

        start_time = time.time()
        try:
            signed_url = self.sign_url(signing_context.url, signing_context.timestamp, signing_context.device_id)
            if inspect.isawaitable(signed_url):
                signed_url = await signed_url
        except Exception as e:
            self._record(time.time() - start_time, failed=True)
            logger.error(f"Request signing failed for {request.path}: {e}")
            raise SigningError(
                f"Request signing failed: {e}",
                details={'path': request.path, 'ts': timestamp}
            ) from e

        if not isinstance(signed_url, str) or not signed_url:
            self._record(time.time() - start_time, failed=True)
            raise SigningError(
                "Signer returned an empty or non-string URL",
                error_code="INVALID_SIGNED_URL",
                details={'path': request.path, 'returned': repr(signed_url)}
            )

        context.signing_time_ms = self._record(time.time() - start_time)
        logger.debug(f"Signed {request.method.value} {request.path} in {context.signing_time_ms:.2f}ms")

        return replace(request, url=signed_url, params={}, signed=True)

    def _record(self, elapsed: float, failed: bool = False) -> float:
        elapsed_ms = elapsed * 1000
        if not self.metrics:
            return elapsed_ms

        with self._metrics_lock:
            self.metrics.total_requests += 1
            if failed:
                self.metrics.signing_failures += 1
            else:
                self.metrics.signed_requests += 1
                self.metrics.total_signing_time_ms += elapsed_ms
                self.metrics.max_signing_time_ms = max(self.metrics.max_signing_time_ms, elapsed_ms)
        return elapsed_ms
