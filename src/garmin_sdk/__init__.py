"""
Garmin Health API Python SDK
OAuth1 signing, three-legged handshake and wellness REST endpoints
"""

from .version import __version__
from .exceptions import (
    GarminSDKError,
    InvalidConfigurationError,
    SecurityViolationError,
    AuthenticationError,
    TransportError,
    ErrorCodes,
)
from .config import (
    ApiVariant,
    EnvironmentProfile,
    ENVIRONMENT_PROFILES,
    ClientConfig,
)
from .signing import (
    # Types
    HttpMethod,
    SignatureMethodName,
    ClientCredentials,
    TemporaryCredentials,
    TokenCredentials,
    OAuth1SigningConfig,
    OAuth1SignatureResult,
    # Signing
    OAuth1Signer,
    OAuth1Auth,
    create_signer,
    sign_request,
    # Utilities
    percent_encode,
    normalize_parameters,
    to_base_string_parameters,
    to_header_string,
    build_signature_base_string,
    build_signing_key,
    generate_nonce,
    generate_timestamp,
    check_platform_compatibility,
)
from .http_client import GarminHttpClient, HttpConfig
from .handshake import HandshakeEngine
from .client import (
    GarminApiClient,
    GarminUser,
    BackfillType,
    create_client,
)


def initialize_sdk():
    """
    Check that the platform can sign Garmin requests.

    Returns:
        dict: Compatibility information with 'compatible' (bool) and 'warnings' (list)
    """
    warnings = []
    compat_info = check_platform_compatibility()

    if not compat_info['hmac_sha1_supported']:
        warnings.append(f"HMAC-SHA1 is not available: {compat_info['error']}")

    return {
        'compatible': compat_info['hmac_sha1_supported'],
        'warnings': warnings
    }


def is_compatible():
    """
    Quick synchronous compatibility check.

    Returns:
        bool: True if requests can be signed with HMAC-SHA1
    """
    return initialize_sdk()['compatible']


# Public API exports
__all__ = [
    '__version__',
    'initialize_sdk',
    'is_compatible',
    # Exceptions
    'GarminSDKError',
    'InvalidConfigurationError',
    'SecurityViolationError',
    'AuthenticationError',
    'TransportError',
    'ErrorCodes',
    # Configuration
    'ApiVariant',
    'EnvironmentProfile',
    'ENVIRONMENT_PROFILES',
    'ClientConfig',
    # Signing - Types
    'HttpMethod',
    'SignatureMethodName',
    'ClientCredentials',
    'TemporaryCredentials',
    'TokenCredentials',
    'OAuth1SigningConfig',
    'OAuth1SignatureResult',
    # Signing - Core
    'OAuth1Signer',
    'OAuth1Auth',
    'create_signer',
    'sign_request',
    # Signing - Utilities
    'percent_encode',
    'normalize_parameters',
    'to_base_string_parameters',
    'to_header_string',
    'build_signature_base_string',
    'build_signing_key',
    'generate_nonce',
    'generate_timestamp',
    'check_platform_compatibility',
    # HTTP Client
    'GarminHttpClient',
    'HttpConfig',
    # Handshake and API client
    'HandshakeEngine',
    'GarminApiClient',
    'GarminUser',
    'BackfillType',
    'create_client',
]
