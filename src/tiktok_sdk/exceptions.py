"""
Exception classes for TikTok Python SDK
"""

from typing import Optional, Dict, Any


class TikTokSDKError(Exception):
    """Base exception for all TikTok SDK errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(TikTokSDKError):
    """Exception raised when the client is missing a signer, serializer or valid settings"""

    def __init__(self, message: str, error_code: str = "INVALID_CONFIG", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class ValidationError(TikTokSDKError):
    """Exception raised for invalid caller input"""
    pass


class SigningError(TikTokSDKError):
    """Exception raised when the external URL signer fails"""

    def __init__(self, message: str, error_code: str = "SIGNING_FAILED", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class TransportError(TikTokSDKError):
    """Exception raised for network failures and non-success HTTP statuses"""

    def __init__(self, message: str, error_code: str = "TRANSPORT_ERROR",
                 http_status: int = 0, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status


class DecodeError(TikTokSDKError):
    """Exception raised when a response body is not valid JSON"""

    def __init__(self, message: str, error_code: str = "DECODE_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
