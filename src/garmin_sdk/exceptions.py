"""
Exception classes for the Garmin Health API Python SDK
"""

from typing import Optional, Dict, Any


class ErrorCodes:
    """Standard error codes carried by SDK exceptions"""

    # Configuration errors
    INVALID_VARIANT = "INVALID_VARIANT"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_BACKFILL_TYPE = "INVALID_BACKFILL_TYPE"
    INVALID_URL = "INVALID_URL"
    INVALID_SIGNATURE_METHOD = "INVALID_SIGNATURE_METHOD"
    INVALID_NONCE = "INVALID_NONCE"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"

    # Handshake errors
    TEMPORARY_IDENTIFIER_MISMATCH = "TEMPORARY_IDENTIFIER_MISMATCH"
    TEMPORARY_CREDENTIALS_FAILED = "TEMPORARY_CREDENTIALS_FAILED"
    TOKEN_CREDENTIALS_FAILED = "TOKEN_CREDENTIALS_FAILED"

    # Data endpoint errors
    REQUEST_FAILED = "REQUEST_FAILED"
    INVALID_RESPONSE = "INVALID_RESPONSE"

    # Transport errors
    TIMEOUT = "TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"


class GarminSDKError(Exception):
    """Base exception for all Garmin SDK errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class InvalidConfigurationError(GarminSDKError):
    """Exception raised for bad variants, credentials or settings, before any network call"""

    def __init__(self, message: str, error_code: str = ErrorCodes.INVALID_CONFIG,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class SecurityViolationError(GarminSDKError):
    """Exception raised when a callback's temporary identifier does not match the issued one"""

    def __init__(self, message: str, error_code: str = ErrorCodes.TEMPORARY_IDENTIFIER_MISMATCH,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class AuthenticationError(GarminSDKError):
    """Exception raised when the server answers a signed request with a failure"""

    def __init__(self, message: str, error_code: str = ErrorCodes.REQUEST_FAILED,
                 http_status: int = 0, response_body: str = "",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status
        self.response_body = response_body


class TransportError(GarminSDKError):
    """Exception raised for network failures (DNS, TLS, timeouts, refused connections)"""

    def __init__(self, message: str, error_code: str = ErrorCodes.TRANSPORT_ERROR,
                 original_error: Optional[BaseException] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.original_error = original_error
