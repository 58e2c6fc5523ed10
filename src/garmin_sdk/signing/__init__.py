"""
Garmin SDK - OAuth1 Request Signing Module

OAuth1 (RFC 5849) parameter normalization, HMAC-SHA1 signatures and
Authorization header construction for the Garmin Connect and Health APIs.
"""

from .types import (
    HttpMethod,
    SignatureMethodName,
    ClientCredentials,
    TemporaryCredentials,
    TokenCredentials,
    OAuth1SigningConfig,
    OAuth1SignatureResult,
    OAUTH_VERSION,
)

from .utils import (
    percent_encode,
    generate_nonce,
    generate_timestamp,
    validate_nonce,
    validate_timestamp,
    parse_url,
    build_query_string,
    append_query,
    parse_credentials_response,
)

from .normalizer import (
    normalize_parameters,
    to_base_string_parameters,
    to_header_string,
)

from .signature import (
    SignatureMethod,
    HmacSha1Signature,
    PlaintextSignature,
    create_signature_method,
    build_signing_key,
    build_signature_base_string,
    check_platform_compatibility,
)

from .oauth1_signer import (
    OAuth1Signer,
    create_signer,
    sign_request,
)

from .integration import OAuth1Auth

# Public API exports
__all__ = [
    # Types
    'HttpMethod',
    'SignatureMethodName',
    'ClientCredentials',
    'TemporaryCredentials',
    'TokenCredentials',
    'OAuth1SigningConfig',
    'OAuth1SignatureResult',
    'OAUTH_VERSION',
    # Utilities
    'percent_encode',
    'generate_nonce',
    'generate_timestamp',
    'validate_nonce',
    'validate_timestamp',
    'parse_url',
    'build_query_string',
    'append_query',
    'parse_credentials_response',
    # Normalization
    'normalize_parameters',
    'to_base_string_parameters',
    'to_header_string',
    # Signature methods
    'SignatureMethod',
    'HmacSha1Signature',
    'PlaintextSignature',
    'create_signature_method',
    'build_signing_key',
    'build_signature_base_string',
    'check_platform_compatibility',
    # Signer
    'OAuth1Signer',
    'create_signer',
    'sign_request',
    # HTTP Integration
    'OAuth1Auth',
]
