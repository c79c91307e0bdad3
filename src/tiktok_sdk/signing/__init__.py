"""
TikTok Python SDK - Request Signing Module

Deterministic parameter ordering and serialization, freshness injection and
delegation to an externally supplied URL signer.
"""

from .types import (
    HttpMethod,
    SigningContext,
    OutgoingRequest,
    RequestContext,
    SigningMetrics,
    SignURL,
)

from .params import (
    PARAMS_ORDER,
    PARAMS_ORDER_VERSION,
    ParamsSerializer,
    order_params,
    serialize_params,
    encode_component,
    create_params_serializer,
    with_default_list_params,
)

from .utils import (
    generate_timestamp,
    generate_rticket,
    FreshnessClock,
    build_canonical_url,
)

from .interceptor import SigningInterceptor

# Public API exports
__all__ = [
    # Types
    'HttpMethod',
    'SigningContext',
    'OutgoingRequest',
    'RequestContext',
    'SigningMetrics',
    'SignURL',
    # Ordering and serialization
    'PARAMS_ORDER',
    'PARAMS_ORDER_VERSION',
    'ParamsSerializer',
    'order_params',
    'serialize_params',
    'encode_component',
    'create_params_serializer',
    'with_default_list_params',
    # Utilities
    'generate_timestamp',
    'generate_rticket',
    'FreshnessClock',
    'build_canonical_url',
    # Interceptor
    'SigningInterceptor',
]
