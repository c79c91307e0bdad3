"""
TikTok Python SDK
Signed-request client for the TikTok mobile API
"""

from .version import __version__
from .exceptions import (
    TikTokSDKError,
    ConfigurationError,
    ValidationError,
    SigningError,
    TransportError,
    DecodeError,
)
from .config import (
    ClientConfig,
    TransportConfig,
    DEFAULT_BASE_URL,
    DEFAULT_HOST,
    DEFAULT_REQUEST_PARAMS,
    get_request_params,
    load_request_params_from_file,
    build_user_agent,
)
from .signing import (
    # Ordering and serialization
    PARAMS_ORDER,
    PARAMS_ORDER_VERSION,
    order_params,
    serialize_params,
    create_params_serializer,
    with_default_list_params,
    # Signing
    SigningInterceptor,
    SigningContext,
    SigningMetrics,
    OutgoingRequest,
    RequestContext,
    HttpMethod,
    FreshnessClock,
    build_canonical_url,
)
from .session import SessionStore
from .decoding import decode_response, MAX_SAFE_INTEGER
from .crypto import encrypt_with_xor, decrypt_with_xor
from .http_client import (
    TikTokHttpClient,
    RequestInterceptor,
    ResponseInterceptor,
    create_logging_interceptor,
)
from .types import (
    FeedType,
    PullType,
    TagType,
    Tag,
    LoginRequest,
    UserSearchRequest,
    ListPostsRequest,
    ListFollowsRequest,
    ListReceivedFollowRequestsRequest,
    ListCommentsRequest,
    ListCategoriesRequest,
    ListPostsInHashtagRequest,
    ListFeedRequest,
    to_params,
)
from .api import TikTokAPI

__all__ = [
    '__version__',
    # API
    'TikTokAPI',
    'TikTokHttpClient',
    'RequestInterceptor',
    'ResponseInterceptor',
    'create_logging_interceptor',
    # Exceptions
    'TikTokSDKError',
    'ConfigurationError',
    'ValidationError',
    'SigningError',
    'TransportError',
    'DecodeError',
    # Configuration
    'ClientConfig',
    'TransportConfig',
    'DEFAULT_BASE_URL',
    'DEFAULT_HOST',
    'DEFAULT_REQUEST_PARAMS',
    'get_request_params',
    'load_request_params_from_file',
    'build_user_agent',
    # Request Signing
    'PARAMS_ORDER',
    'PARAMS_ORDER_VERSION',
    'order_params',
    'serialize_params',
    'create_params_serializer',
    'with_default_list_params',
    'SigningInterceptor',
    'SigningContext',
    'SigningMetrics',
    'OutgoingRequest',
    'RequestContext',
    'HttpMethod',
    'FreshnessClock',
    'build_canonical_url',
    # Session and decoding
    'SessionStore',
    'decode_response',
    'MAX_SAFE_INTEGER',
    # Credentials
    'encrypt_with_xor',
    'decrypt_with_xor',
    # Request types
    'FeedType',
    'PullType',
    'TagType',
    'Tag',
    'LoginRequest',
    'UserSearchRequest',
    'ListPostsRequest',
    'ListFollowsRequest',
    'ListReceivedFollowRequestsRequest',
    'ListCommentsRequest',
    'ListCategoriesRequest',
    'ListPostsInHashtagRequest',
    'ListFeedRequest',
    'to_params',
]
